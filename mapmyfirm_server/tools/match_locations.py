"""
MCP Tool - match_locations

Fuzzy-match business locations to location hub pages.
"""

from fastmcp import FastMCP
from typing import List, Optional

from mapmyfirm_server.services import get_planner_service

router = FastMCP("match_locations")


@router.tool()
async def match_locations(
    locations: str,
    pages: List[dict],
    hub_type_name: Optional[str] = None,
) -> dict:
    """
    Match each location to its most similar hub page.

    Hubs are pages tagged "Location Hub", pages of the hub post type, and
    pages of type location/office/branch.

    Args:
        locations: One location per line, e.g. "San Francisco, CA"
        pages: Flat page list
        hub_type_name: Post type that represents hubs on this site

    Returns:
        Locations with matched_hub_id and confidence_score (0-100)
    """
    service = get_planner_service()

    matched = service.match_locations(locations, pages, hub_type_name)

    return {
        "locations": [loc.model_dump() for loc in matched],
        "matched": sum(1 for loc in matched if loc.matched_hub_id),
        "count": len(matched),
    }
