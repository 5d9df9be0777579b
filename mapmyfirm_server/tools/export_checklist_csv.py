"""
MCP Tool - export_checklist_csv

Render a checklist as CSV.
"""

from fastmcp import FastMCP
from typing import List

from mapmyfirm_server.services import get_planner_service

router = FastMCP("export_checklist_csv")


@router.tool()
async def export_checklist_csv(items: List[dict]) -> dict:
    """
    One row per location with hub, practice area, completed and notes columns.

    Args:
        items: Checklist items from generate_checklist

    Returns:
        CSV text and row count
    """
    service = get_planner_service()

    return {
        "csv": service.checklist_csv(items),
        "rows": len(items),
    }
