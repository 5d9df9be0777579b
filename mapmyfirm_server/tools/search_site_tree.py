"""
MCP Tool - search_site_tree

Search pages and list the ancestors to expand.
"""

from fastmcp import FastMCP
from typing import List, Optional

from mapmyfirm_server.services import get_planner_service

router = FastMCP("search_site_tree")


@router.tool()
async def search_site_tree(
    pages: List[dict],
    term: str = "",
    types: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
) -> dict:
    """
    Find pages by title, slug or URL, optionally filtered by type and tag.

    Args:
        pages: Flat page list
        term: Case-insensitive search text
        types: Only pages of these content types
        tags: Only pages carrying at least one of these manual tags

    Returns:
        matched_node_ids and expanded_ids (ancestors that reveal the matches)
    """
    service = get_planner_service()

    return service.search_tree(pages, term, types, tags)
