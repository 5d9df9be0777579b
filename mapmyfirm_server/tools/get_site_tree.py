"""
MCP Tool - get_site_tree

Build the page hierarchy from a flat page list.
"""

from fastmcp import FastMCP
from typing import List

from mapmyfirm_server.services import get_planner_service

router = FastMCP("get_site_tree")


@router.tool()
async def get_site_tree(pages: List[dict]) -> dict:
    """
    Nest pages under their parents.

    Pages whose parent is missing from the list become roots.

    Args:
        pages: Flat page list as returned by scan_site

    Returns:
        Root nodes, each with nested children
    """
    service = get_planner_service()

    tree = service.get_tree(pages)

    return {
        "tree": [node.model_dump() for node in tree],
        "root_count": len(tree),
    }
