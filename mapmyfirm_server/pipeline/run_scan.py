"""
Pipeline - Run Scan

CLI entry point: scan a site, match locations, generate the checklist,
and write the project export and checklist CSV.
"""

import asyncio
import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging

from mapmyfirm_server.config import get_settings, setup_logging
from mapmyfirm_server.pipeline.checklist_generator import ChecklistGenerator
from mapmyfirm_server.pipeline.location_matcher import LocationMatcher, parse_location_lines
from mapmyfirm_server.pipeline.wordpress_scanner import WordPressScanner
from mapmyfirm_server.schemas.project import LocationStructure, ProjectConfig, ProjectState
from mapmyfirm_server.services.export_service import (
    default_export_filename,
    export_checklist_csv,
    export_project,
)
from mapmyfirm_server.utils import utc_now_iso


logger = logging.getLogger(__name__)


class ScanRunner:
    """Orchestrates scan → match → checklist for one site."""

    def __init__(self, settings=None, transport=None):
        self.settings = settings or get_settings()
        self.scanner = WordPressScanner(self.settings, transport=transport)
        self.matcher = LocationMatcher(self.settings)
        self.generator = ChecklistGenerator()

    async def run(
        self,
        site_url: str,
        locations: List[str],
        content_types: Optional[List[str]] = None,
        hub_type_name: Optional[str] = None,
        project_name: str = "",
    ) -> ProjectState:
        """
        Build a complete project for a site.

        Args:
            site_url: WordPress site URL
            locations: Location strings, one per business location
            content_types: REST bases to scan (default: from settings)
            hub_type_name: Post type representing location hubs
            project_name: Name stored in the project config

        Returns:
            ProjectState with pages, matches and checklist
        """
        selected = content_types or self.settings.wordpress.content_types
        logger.info(f"Starting scan of {site_url}...")

        def on_progress(current: int, total: int, content_type: str) -> None:
            logger.info(f"Fetched {current}/{total} {content_type}")

        nodes = await self.scanner.scan_site(site_url, selected, on_progress)

        gbp_locations = self.matcher.match_locations(locations, nodes, hub_type_name)
        checklist = self.generator.generate(gbp_locations, nodes)
        stats = self.generator.calculate_stats(checklist)

        logger.info(
            f"Scan complete: {len(nodes)} pages, {stats.hubs_exist}/{stats.total} hubs, "
            f"{stats.overall_percentage}% overall"
        )

        structure = None
        if hub_type_name:
            structure = LocationStructure(hub_type="cpt", hub_cpt_name=hub_type_name)

        return ProjectState(
            config=ProjectConfig(
                project_name=project_name,
                wordpress_site_url=site_url,
                selected_content_types=selected,
                location_structure=structure,
                scan_date=utc_now_iso(),
            ),
            nodes=nodes,
            gbp_locations=gbp_locations,
            checklist_items=checklist,
        )


def write_outputs(state: ProjectState, output_dir: Path) -> dict:
    """Write <name>.json and <name>.csv into output_dir."""
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / default_export_filename(state.config, datetime.now())
    csv_path = json_path.with_suffix(".csv")

    json_path.write_text(export_project(state), encoding="utf-8")
    csv_path.write_text(export_checklist_csv(state.checklist_items), encoding="utf-8")

    return {"project": str(json_path), "checklist": str(csv_path)}


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="MapMyFirm site scan and checklist")
    parser.add_argument(
        "--site",
        type=str,
        default=None,
        help="WordPress site URL (default: WORDPRESS_SITE_URL)",
    )
    parser.add_argument(
        "--locations",
        type=str,
        required=True,
        help="Text file with one business location per line",
    )
    parser.add_argument(
        "--types",
        type=str,
        default=None,
        help="Comma-separated REST bases to scan (default: WORDPRESS_CONTENT_TYPES)",
    )
    parser.add_argument(
        "--hub-type",
        type=str,
        default=None,
        help="Post type that represents location hubs",
    )
    parser.add_argument(
        "--name",
        type=str,
        default="",
        help="Project name",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=".",
        help="Directory for the export files",
    )

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings)

    site_url = args.site or settings.wordpress.site_url
    if not site_url:
        parser.error("--site or WORDPRESS_SITE_URL is required")

    locations = parse_location_lines(Path(args.locations).read_text(encoding="utf-8"))
    types = [t.strip() for t in args.types.split(",") if t.strip()] if args.types else None

    runner = ScanRunner(settings)
    state = asyncio.run(runner.run(
        site_url,
        locations,
        content_types=types,
        hub_type_name=args.hub_type or settings.matching.hub_type_name,
        project_name=args.name,
    ))

    print(write_outputs(state, Path(args.output)))


if __name__ == "__main__":
    main()
