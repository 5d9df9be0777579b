"""
MCP Tool - scan_site

Scan a WordPress site into a flat page list.
"""

from fastmcp import FastMCP
from typing import List, Optional

from mapmyfirm_server.services import get_planner_service

router = FastMCP("scan_site")


@router.tool()
async def scan_site(
    site_url: str,
    content_types: Optional[List[str]] = None,
) -> dict:
    """
    Fetch every page of the selected content types from a WordPress site.

    Content types are fetched one at a time, page by page.

    Args:
        site_url: Site root URL (scheme optional)
        content_types: REST bases such as "pages" or "locations"
            (default: from configuration)

    Returns:
        Flat list of pages with id, title, slug, url, parent_id, type, status
    """
    service = get_planner_service()

    nodes = await service.scan_site(site_url, content_types)

    return {
        "pages": [node.model_dump() for node in nodes],
        "count": len(nodes),
        "site_url": site_url,
    }
