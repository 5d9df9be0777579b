"""
MCP Tool - list_content_types

List the content types a WordPress site exposes over REST.
"""

from fastmcp import FastMCP

from mapmyfirm_server.services import get_planner_service

router = FastMCP("list_content_types")


@router.tool()
async def list_content_types(site_url: str) -> dict:
    """
    List public, REST-enabled content types (attachments excluded).

    Args:
        site_url: Site root URL

    Returns:
        Content types with slug, name, rest_base and hierarchical flag
    """
    service = get_planner_service()

    types = await service.list_content_types(site_url)

    return {"content_types": types, "count": len(types)}
