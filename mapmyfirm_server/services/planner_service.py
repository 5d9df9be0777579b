"""
Services - Planner Service

Wires the scanner, tree builder, location matcher and checklist
generator together for the tool layer.
"""

from typing import Any, Dict, List, Optional, Union

from mapmyfirm_server.config import get_settings
from mapmyfirm_server.pipeline.checklist_generator import ChecklistGenerator
from mapmyfirm_server.pipeline.location_matcher import (
    LocationMatcher,
    parse_location_lines,
)
from mapmyfirm_server.pipeline.tree_builder import build_tree, filter_tree
from mapmyfirm_server.pipeline.wordpress_scanner import (
    ScanProgress,
    WordPressScanner,
    normalize_site_url,
)
from mapmyfirm_server.schemas.checklist import ChecklistItem, ChecklistStats
from mapmyfirm_server.schemas.location import GBPLocation
from mapmyfirm_server.schemas.page import SiteNode, SiteTreeNode
from mapmyfirm_server.services.cache_service import CacheService
from mapmyfirm_server.services.export_service import export_checklist_csv


def to_nodes(pages: List[Union[SiteNode, Dict[str, Any]]]) -> List[SiteNode]:
    """Accept SiteNode objects or plain dicts from a page source."""
    return [
        page if isinstance(page, SiteNode) else SiteNode.model_validate(page)
        for page in pages
    ]


class PlannerService:
    """Scan, match and checklist operations with caching."""

    def __init__(self, settings=None, transport=None):
        self.settings = settings or get_settings()
        self.scanner = WordPressScanner(self.settings, transport=transport)
        self.matcher = LocationMatcher(self.settings)
        self.generator = ChecklistGenerator()
        self.cache = CacheService(self.settings)

    async def list_content_types(self, site_url: str) -> List[Dict[str, Any]]:
        """
        Content types available for scanning, cached per site.

        Args:
            site_url: Site root URL

        Returns:
            List of {"slug", "name", "rest_base", "hierarchical"} dicts
        """
        cache_key = f"types:{normalize_site_url(site_url)}"

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        types = await self.scanner.get_content_types(site_url)
        result = [
            {
                "slug": t.slug,
                "name": t.name,
                "rest_base": t.rest_base,
                "hierarchical": t.hierarchical,
            }
            for t in types
        ]

        self.cache.set(cache_key, result)
        return result

    async def scan_site(
        self,
        site_url: Optional[str] = None,
        content_types: Optional[List[str]] = None,
        on_progress: Optional[ScanProgress] = None,
    ) -> List[SiteNode]:
        """Scan a site (default: the configured site)."""
        return await self.scanner.scan_site(
            site_url or self.settings.wordpress.site_url,
            content_types,
            on_progress,
        )

    def get_tree(self, pages: List[Union[SiteNode, Dict[str, Any]]]) -> List[SiteTreeNode]:
        """Forest for display."""
        return build_tree(to_nodes(pages))

    def search_tree(
        self,
        pages: List[Union[SiteNode, Dict[str, Any]]],
        term: str,
        types: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
    ) -> Dict[str, List[str]]:
        """Matched ids plus the ancestors to expand."""
        result = filter_tree(to_nodes(pages), term, types, tags)
        return {
            "matched_node_ids": result.matched_node_ids,
            "expanded_ids": result.expanded_ids,
        }

    def match_locations(
        self,
        locations: Union[str, List[str]],
        pages: List[Union[SiteNode, Dict[str, Any]]],
        hub_type_name: Optional[str] = None,
    ) -> List[GBPLocation]:
        """
        Match locations to hubs.

        Args:
            locations: Newline-separated text or a list of strings
            pages: Page collection
            hub_type_name: Post type representing hubs

        Returns:
            One GBPLocation per non-empty location
        """
        if isinstance(locations, str):
            locations = parse_location_lines(locations)
        else:
            locations = [loc.strip() for loc in locations if loc and loc.strip()]
        return self.matcher.match_locations(locations, to_nodes(pages), hub_type_name)

    def generate_checklist(
        self,
        locations: List[Union[GBPLocation, Dict[str, Any]]],
        pages: List[Union[SiteNode, Dict[str, Any]]],
    ) -> List[ChecklistItem]:
        """Checklist for already-matched locations."""
        matched = [
            loc if isinstance(loc, GBPLocation) else GBPLocation.model_validate(loc)
            for loc in locations
        ]
        return self.generator.generate(matched, to_nodes(pages))

    def checklist_stats(
        self, items: List[Union[ChecklistItem, Dict[str, Any]]]
    ) -> ChecklistStats:
        """Completion statistics for a checklist."""
        return self.generator.calculate_stats(self._to_items(items))

    def checklist_csv(self, items: List[Union[ChecklistItem, Dict[str, Any]]]) -> str:
        """Checklist as CSV text."""
        return export_checklist_csv(self._to_items(items))

    def _to_items(
        self, items: List[Union[ChecklistItem, Dict[str, Any]]]
    ) -> List[ChecklistItem]:
        return [
            item if isinstance(item, ChecklistItem) else ChecklistItem.model_validate(item)
            for item in items
        ]


_planner_service: Optional[PlannerService] = None


def get_planner_service() -> PlannerService:
    """Process-wide planner so tool calls share the content type cache."""
    global _planner_service
    if _planner_service is None:
        _planner_service = PlannerService()
    return _planner_service
