"""
Pipeline - Location Matcher

Normalizes free-text business locations and matches them to location
hub pages.
"""

import logging
import re
from typing import List, Optional
from dataclasses import dataclass

from mapmyfirm_server.config import get_settings
from mapmyfirm_server.pipeline.fuzzy_search import SearchKey, WeightedFuzzySearch
from mapmyfirm_server.schemas.location import GBPLocation, MatchResult
from mapmyfirm_server.schemas.page import SiteNode
from mapmyfirm_server.utils import new_id, round_half_up


logger = logging.getLogger(__name__)

LOCATION_HUB_TAG = "Location Hub"

# Content types treated as hubs without any tagging
LOCATION_TYPES = {"location", "office", "branch"}


@dataclass
class ParsedLocation:
    """City / state split of a location string."""
    city: str
    state: str


def normalize_location_string(location: str) -> str:
    """Trim, collapse whitespace, and normalize comma spacing to ", "."""
    location = re.sub(r"\s+", " ", location.strip())
    location = re.sub(r"\s*,\s*", ", ", location)
    return location.strip()


def parse_location(location: str) -> Optional[ParsedLocation]:
    """Split "City, ST" style strings; None without a comma."""
    parts = [part.strip() for part in normalize_location_string(location).split(",")]
    if len(parts) >= 2:
        return ParsedLocation(city=parts[0], state=parts[1])
    return None


def parse_location_lines(text: str) -> List[str]:
    """One location per non-empty line."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def get_hub_nodes(
    nodes: List[SiteNode],
    hub_type_name: Optional[str] = None,
    hub_tag: str = LOCATION_HUB_TAG,
) -> List[SiteNode]:
    """
    Candidate location hubs.

    A node qualifies when it is tagged as a hub, its type is the
    configured hub post type, or its type is a common location type.
    """
    hubs = []
    for node in nodes:
        if hub_tag in node.manual_tags:
            hubs.append(node)
        elif hub_type_name and node.type == hub_type_name:
            hubs.append(node)
        elif node.type in LOCATION_TYPES:
            hubs.append(node)
    return hubs


def levenshtein_distance(str1: str, str2: str) -> int:
    """Classic edit distance, unit cost for insert, delete and substitute."""
    previous = list(range(len(str1) + 1))

    for i in range(1, len(str2) + 1):
        current = [i] + [0] * len(str1)
        for j in range(1, len(str1) + 1):
            if str2[i - 1] == str1[j - 1]:
                current[j] = previous[j - 1]
            else:
                current[j] = min(
                    previous[j - 1] + 1,  # substitution
                    current[j - 1] + 1,   # insertion
                    previous[j] + 1,      # deletion
                )
        previous = current

    return previous[len(str1)]


def calculate_similarity(str1: str, str2: str) -> float:
    """
    Similarity of two strings on a 0-100 scale.

    Exact (case-insensitive) match scores 100, containment either way
    scores 80, anything else is the Levenshtein-derived percentage.
    """
    s1 = str1.lower()
    s2 = str2.lower()

    if s1 == s2:
        return 100.0
    if s1 in s2 or s2 in s1:
        return 80.0

    distance = levenshtein_distance(s1, s2)
    max_length = max(len(s1), len(s2))
    similarity = (max_length - distance) / max_length * 100

    return max(0.0, similarity)


class LocationMatcher:
    """Matches business locations to hub pages."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self.keys = [
            SearchKey("title", self.settings.matching.title_weight),
            SearchKey("slug", self.settings.matching.slug_weight),
            SearchKey("url", self.settings.matching.url_weight),
        ]

    def hub_nodes(
        self, nodes: List[SiteNode], hub_type_name: Optional[str] = None
    ) -> List[SiteNode]:
        """Hub candidates using the configured tag and hub type."""
        return get_hub_nodes(
            nodes,
            hub_type_name or self.settings.matching.hub_type_name,
            self.settings.matching.hub_tag,
        )

    def match_locations(
        self,
        location_strings: List[str],
        nodes: List[SiteNode],
        hub_type_name: Optional[str] = None,
    ) -> List[GBPLocation]:
        """
        Fuzzy-match each location to its best hub.

        Each location is matched on its own; two locations may share a hub.
        When the location parses as "City, State" only the city is searched.

        Args:
            location_strings: Raw location strings
            nodes: Full page collection
            hub_type_name: Post type that represents hubs on this site

        Returns:
            One GBPLocation per input string, in input order
        """
        hubs = self.hub_nodes(nodes, hub_type_name)

        if not hubs:
            logger.info(f"No hub candidates; {len(location_strings)} locations unmatched")
            return [
                GBPLocation(
                    id=new_id(),
                    location_string=normalize_location_string(raw),
                    matched_hub_id=None,
                    confidence_score=0,
                )
                for raw in location_strings
            ]

        search = WeightedFuzzySearch(
            hubs,
            self.keys,
            threshold=self.settings.matching.threshold,
        )

        locations = []
        for raw in location_strings:
            normalized = normalize_location_string(raw)
            parsed = parse_location(normalized)
            query = parsed.city if parsed else normalized

            results = search.search(query, limit=1)
            if results:
                best = results[0]
                confidence = round_half_up((1 - best.score) * 100)
                locations.append(GBPLocation(
                    id=new_id(),
                    location_string=normalized,
                    matched_hub_id=best.item.id,
                    confidence_score=min(100, max(0, confidence)),
                ))
            else:
                locations.append(GBPLocation(
                    id=new_id(),
                    location_string=normalized,
                    matched_hub_id=None,
                    confidence_score=0,
                ))

        matched = sum(1 for loc in locations if loc.matched_hub_id)
        logger.info(
            f"Matched {matched} of {len(locations)} locations against {len(hubs)} hubs"
        )
        return locations

    def find_best_match(
        self,
        location_string: str,
        nodes: List[SiteNode],
        hub_type_name: Optional[str] = None,
    ) -> MatchResult:
        """
        Best hub for one location by pairwise similarity.

        Used for manual re-matching; scores title and slug with
        calculate_similarity and keeps the first highest score.
        """
        hubs = self.hub_nodes(nodes, hub_type_name)
        if not hubs:
            return MatchResult(hub_id=None, confidence=0)

        parsed = parse_location(location_string)
        search_term = parsed.city if parsed else normalize_location_string(location_string)

        best_hub: Optional[SiteNode] = None
        best_score = 0.0
        for hub in hubs:
            score = max(
                calculate_similarity(search_term, hub.title),
                calculate_similarity(search_term, hub.slug),
            )
            if score > best_score:
                best_score = score
                best_hub = hub

        return MatchResult(
            hub_id=best_hub.id if best_hub else None,
            confidence=round_half_up(best_score),
        )
