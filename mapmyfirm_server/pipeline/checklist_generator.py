"""
Pipeline - Checklist Generator

Turns matched locations into the per-location practice area checklist,
computes completion statistics, and applies manual cell edits.
"""

import logging
from typing import Dict, List, Optional

from mapmyfirm_server.pipeline.practice_areas import (
    PRACTICE_AREAS,
    PracticeAreaMatcher,
    empty_practice_areas,
    validate_practice_area,
)
from mapmyfirm_server.schemas.checklist import (
    ChecklistItem,
    ChecklistStats,
    PracticeAreaPage,
)
from mapmyfirm_server.schemas.location import GBPLocation
from mapmyfirm_server.schemas.page import SiteNode
from mapmyfirm_server.utils import new_id, percentage, utc_now_iso, validated_update


logger = logging.getLogger(__name__)


class ChecklistGenerator:
    """Builds and summarizes location checklists."""

    def __init__(self, matcher: Optional[PracticeAreaMatcher] = None):
        self.matcher = matcher or PracticeAreaMatcher()

    def generate(
        self,
        locations: List[GBPLocation],
        nodes: List[SiteNode],
    ) -> List[ChecklistItem]:
        """
        Generate one checklist item per location.

        The result replaces any previous checklist wholesale: notes,
        completion flags and manual cell overrides from an earlier run
        are not carried over. Callers that care must warn before
        regenerating.

        Args:
            locations: Locations with their matched hub IDs
            nodes: Full page collection

        Returns:
            Checklist items in location order
        """
        items = []
        for location in locations:
            if location.matched_hub_id is not None:
                practice_areas = self.matcher.find_pages(location.matched_hub_id, nodes)
            else:
                practice_areas = empty_practice_areas()

            items.append(ChecklistItem(
                id=new_id(),
                location=location.location_string,
                hub_id=location.matched_hub_id,
                hub_exists=location.matched_hub_id is not None,
                practice_areas=practice_areas,
                notes="",
                completed=False,
                last_updated=utc_now_iso(),
            ))

        logger.info(f"Generated checklist with {len(items)} locations")
        return items

    def calculate_stats(self, items: List[ChecklistItem]) -> ChecklistStats:
        """
        Completion statistics.

        Every location needs a hub plus one page per practice area, so
        total_required = items * (1 + number of practice areas).
        """
        total = len(items)
        completed = sum(1 for item in items if item.completed)
        hubs_exist = sum(1 for item in items if item.hub_exists)

        counts: Dict[str, int] = {area: 0 for area in PRACTICE_AREAS}
        for item in items:
            for area, page in item.practice_areas.items():
                if area in counts and page.exists:
                    counts[area] += 1

        total_required = total * (1 + len(PRACTICE_AREAS))
        total_exists = hubs_exist + sum(counts.values())

        return ChecklistStats(
            total=total,
            completed=completed,
            completion_percentage=percentage(completed, total),
            hubs_exist=hubs_exist,
            hubs_percentage=percentage(hubs_exist, total),
            practice_area_counts=counts,
            total_required=total_required,
            total_exists=total_exists,
            overall_percentage=percentage(total_exists, total_required),
        )


def new_checklist_item(location: str) -> ChecklistItem:
    """Manually added location row with no hub and no pages."""
    return ChecklistItem(
        id=new_id(),
        location=location.strip(),
        hub_id=None,
        hub_exists=False,
        practice_areas=empty_practice_areas(),
        notes="",
        completed=False,
        last_updated=utc_now_iso(),
    )


def update_checklist_item(item: ChecklistItem, **updates) -> ChecklistItem:
    """
    Copy of ``item`` with ``updates`` applied and last_updated refreshed.

    Raises:
        ValueError: Unknown field names
        pydantic.ValidationError: A value of the wrong type
    """
    unknown = set(updates) - set(ChecklistItem.model_fields)
    if unknown:
        raise ValueError(f"Unknown checklist fields: {', '.join(sorted(unknown))}")

    return validated_update(item, {**updates, "last_updated": utc_now_iso()})


def update_practice_area(
    item: ChecklistItem,
    area: str,
    page_id: Optional[str] = None,
    manual_url: Optional[str] = None,
    comment: Optional[str] = None,
    optimized: Optional[bool] = None,
) -> ChecklistItem:
    """
    Manually set one practice area cell.

    The cell record is replaced in full. A scanned page and a manual URL
    are alternatives; passing both is rejected. Passing neither marks the
    area as missing.

    Args:
        item: Checklist row
        area: Practice area key
        page_id: Chosen scanned page
        manual_url: URL entered by hand
        comment: Free-text cell comment
        optimized: Whether the page content has been optimized

    Returns:
        Updated copy of the row
    """
    validate_practice_area(area)
    if page_id and manual_url:
        raise ValueError("Set either page_id or manual_url, not both")

    practice_areas = dict(item.practice_areas)
    practice_areas[area] = PracticeAreaPage(
        exists=bool(page_id or manual_url),
        page_id=page_id or None,
        manual_url=manual_url or None,
        manual_override=True,
        comment=comment,
        optimized=bool(optimized),
    )

    return item.model_copy(update={
        "practice_areas": practice_areas,
        "last_updated": utc_now_iso(),
    })


def toggle_optimized(item: ChecklistItem, area: str) -> ChecklistItem:
    """Flip the optimized flag of one cell, leaving existence alone."""
    validate_practice_area(area)

    practice_areas = dict(item.practice_areas)
    current = practice_areas.get(area, PracticeAreaPage())
    practice_areas[area] = current.model_copy(update={"optimized": not current.optimized})

    return item.model_copy(update={
        "practice_areas": practice_areas,
        "last_updated": utc_now_iso(),
    })
