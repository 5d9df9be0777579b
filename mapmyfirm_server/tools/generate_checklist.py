"""
MCP Tool - generate_checklist

Build the practice area checklist for matched locations.
"""

from fastmcp import FastMCP
from typing import List

from mapmyfirm_server.services import get_planner_service

router = FastMCP("generate_checklist")


@router.tool()
async def generate_checklist(
    locations: List[dict],
    pages: List[dict],
) -> dict:
    """
    Check which practice area pages exist under each location's hub.

    Regenerating replaces any earlier checklist; manual edits are not kept.

    Args:
        locations: Output of match_locations
        pages: Flat page list

    Returns:
        Checklist items and completion statistics
    """
    service = get_planner_service()

    items = service.generate_checklist(locations, pages)
    stats = service.checklist_stats(items)

    return {
        "items": [item.model_dump() for item in items],
        "stats": stats.model_dump(),
    }
