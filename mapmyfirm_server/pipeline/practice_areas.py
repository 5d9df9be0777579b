"""
Pipeline - Practice Area Matcher

Detects which practice area pages live under a location hub, using
keyword phrases found in page titles and slugs.
"""

from typing import Dict, List, Optional

from mapmyfirm_server.pipeline.tree_builder import find_node_in_list, get_descendants
from mapmyfirm_server.schemas.checklist import PracticeAreaPage
from mapmyfirm_server.schemas.page import SiteNode


# Phrases that identify each practice area (lower-cased, insertion ordered)
PRACTICE_AREA_KEYWORDS: Dict[str, List[str]] = {
    "personal_injury": [
        "personal injury",
        "injury law",
        "injury attorney",
        "injury lawyer",
        "bodily injury",
    ],
    "car_accident": [
        "car accident",
        "auto accident",
        "vehicle accident",
        "motor vehicle",
        "automobile accident",
        "traffic accident",
    ],
    "motorcycle_accident": [
        "motorcycle accident",
        "motorcycle crash",
        "motorcycle injury",
        "motorcycle collision",
        "bike accident",
        "biker accident",
    ],
    "pedestrian_accident": [
        "pedestrian accident",
        "pedestrian injury",
        "pedestrian crash",
        "pedestrian collision",
        "hit by car",
        "struck pedestrian",
    ],
    "slip_and_fall": [
        "slip and fall",
        "slip & fall",
        "trip and fall",
        "premises liability",
        "slip fall",
        "fall accident",
        "fall injury",
    ],
    "truck_accident": [
        "truck accident",
        "truck crash",
        "truck collision",
        "semi truck",
        "commercial truck",
        "big rig",
        "18 wheeler",
        "tractor trailer",
    ],
    "rideshare_accident": [
        "rideshare accident",
        "uber accident",
        "lyft accident",
        "rideshare crash",
        "ride share",
        "ridesharing accident",
    ],
    "wrongful_death": [
        "wrongful death",
        "fatal accident",
        "death claim",
        "wrongful death claim",
        "wrongful death lawsuit",
    ],
}

PRACTICE_AREAS: List[str] = list(PRACTICE_AREA_KEYWORDS)

PRACTICE_AREA_NAMES: Dict[str, str] = {
    "personal_injury": "Personal Injury",
    "car_accident": "Car Accident",
    "motorcycle_accident": "Motorcycle Accident",
    "pedestrian_accident": "Pedestrian Accident",
    "slip_and_fall": "Slip and Fall",
    "truck_accident": "Truck Accident",
    "rideshare_accident": "Rideshare Accident",
    "wrongful_death": "Wrongful Death",
}


def empty_practice_areas() -> Dict[str, PracticeAreaPage]:
    """One non-existent record per practice area."""
    return {area: PracticeAreaPage(exists=False) for area in PRACTICE_AREAS}


def validate_practice_area(area: str) -> str:
    """Return ``area`` or raise ValueError for an unknown key."""
    if area not in PRACTICE_AREA_KEYWORDS:
        raise ValueError(
            f"Unknown practice area: {area}. Use one of {', '.join(PRACTICE_AREAS)}."
        )
    return area


def contains_keywords(text: str, keywords: List[str]) -> bool:
    """Case-insensitive substring test against any keyword."""
    lower_text = text.lower()
    return any(keyword in lower_text for keyword in keywords)


class PracticeAreaMatcher:
    """Finds practice area pages in a hub's subtree."""

    def __init__(self, keywords: Optional[Dict[str, List[str]]] = None):
        self.keywords = keywords or PRACTICE_AREA_KEYWORDS

    def find_pages(
        self,
        hub_id: str,
        nodes: List[SiteNode],
    ) -> Dict[str, PracticeAreaPage]:
        """
        Match every practice area against a hub and its descendants.

        The hub comes first, then its descendants in pre-order. For each
        area the first page whose title or slug contains one of the area's
        keywords wins. An unknown hub yields an all-false record.

        Args:
            hub_id: Matched hub page ID
            nodes: Full page collection

        Returns:
            Practice area key -> PracticeAreaPage
        """
        related = self._hub_subtree(hub_id, nodes)
        if related is None:
            return empty_practice_areas()

        result: Dict[str, PracticeAreaPage] = {}
        for area, keywords in self.keywords.items():
            page = self._first_match(related, keywords)
            result[area] = PracticeAreaPage(
                exists=page is not None,
                page_id=page.id if page else None,
            )

        return result

    def check_page_exists(
        self,
        hub_id: Optional[str],
        nodes: List[SiteNode],
        area: str,
    ) -> PracticeAreaPage:
        """Single-area variant of find_pages."""
        keywords = self.keywords[validate_practice_area(area)]
        if not hub_id:
            return PracticeAreaPage(exists=False)

        related = self._hub_subtree(hub_id, nodes)
        if related is None:
            return PracticeAreaPage(exists=False)

        page = self._first_match(related, keywords)
        return PracticeAreaPage(
            exists=page is not None,
            page_id=page.id if page else None,
        )

    def _hub_subtree(
        self, hub_id: str, nodes: List[SiteNode]
    ) -> Optional[List[SiteNode]]:
        hub = find_node_in_list(nodes, hub_id)
        if not hub:
            return None
        return [hub] + get_descendants(nodes, hub_id)

    def _first_match(
        self, related: List[SiteNode], keywords: List[str]
    ) -> Optional[SiteNode]:
        for node in related:
            if contains_keywords(node.title, keywords) or contains_keywords(
                node.slug, keywords
            ):
                return node
        return None
