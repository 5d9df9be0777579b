"""
Services - Export Service

Project JSON export/import and checklist CSV export.
"""

import csv
import io
import json
import logging
from datetime import datetime
from typing import Any, List, Optional

from pydantic import ValidationError

from mapmyfirm_server.exceptions import ProjectImportError
from mapmyfirm_server.pipeline.practice_areas import PRACTICE_AREA_NAMES, PRACTICE_AREAS
from mapmyfirm_server.schemas.checklist import ChecklistItem
from mapmyfirm_server.schemas.project import (
    EXPORT_VERSION,
    ProjectConfig,
    ProjectExport,
    ProjectState,
    ProjectSummary,
)
from mapmyfirm_server.utils import slugify, utc_now_iso


logger = logging.getLogger(__name__)

CSV_HEADERS = (
    ["Location", "Hub Exists"]
    + [PRACTICE_AREA_NAMES[area] for area in PRACTICE_AREAS]
    + ["Completed", "Notes"]
)


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def export_project(state: ProjectState) -> str:
    """Serialize a project to the JSON export document."""
    document = ProjectExport(
        version=EXPORT_VERSION,
        exported_at=utc_now_iso(),
        project=state,
    )
    return document.model_dump_json(indent=2)


def validate_project(data: Any) -> List[str]:
    """
    Check the top-level shape of an export document.

    Args:
        data: Parsed JSON

    Returns:
        Problems found; empty when the document is importable
    """
    errors: List[str] = []

    if not data:
        return ["Data is empty or null"]
    if not isinstance(data, dict):
        return ["Document must be a JSON object"]

    if not data.get("version"):
        errors.append("Missing version field")

    project = data.get("project")
    if not project:
        errors.append("Missing project field")
        return errors
    if not isinstance(project, dict):
        errors.append("project must be an object")
        return errors

    if not project.get("config"):
        errors.append("Missing project.config")
    if not isinstance(project.get("nodes"), list):
        errors.append("project.nodes must be an array")
    if not isinstance(project.get("gbp_locations"), list):
        errors.append("project.gbp_locations must be an array")
    if not isinstance(project.get("checklist_items"), list):
        errors.append("project.checklist_items must be an array")

    return errors


def import_project(json_string: str) -> ProjectState:
    """
    Parse and validate an export document.

    A version other than the current one is imported anyway with a
    warning; the document shape has not changed between versions.

    Raises:
        ProjectImportError: Invalid JSON or missing fields; nothing is
            imported
    """
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ProjectImportError([f"Invalid JSON format: {e.msg}"]) from e

    errors = validate_project(data)
    if errors:
        raise ProjectImportError(errors)

    if data["version"] != EXPORT_VERSION:
        logger.warning(
            f"Version mismatch: expected {EXPORT_VERSION}, got {data['version']}. "
            "Attempting to import anyway."
        )

    try:
        return ProjectState.model_validate(data["project"])
    except ValidationError as e:
        raise ProjectImportError([
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]) from e


def get_project_summary(json_string: str) -> Optional[ProjectSummary]:
    """Headline facts of an export document, None if unreadable."""
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError:
        return None

    if not isinstance(data, dict) or not isinstance(data.get("project"), dict):
        return None

    project = data["project"]
    config = project.get("config") or {}
    return ProjectSummary(
        project_name=config.get("project_name") or "Untitled Project",
        site_url=config.get("wordpress_site_url") or "Unknown",
        scan_date=config.get("scan_date") or "Unknown",
        export_date=data.get("exported_at") or "Unknown",
        node_count=len(project.get("nodes") or []),
        location_count=len(project.get("gbp_locations") or []),
    )


def default_export_filename(config: ProjectConfig, now: Optional[datetime] = None) -> str:
    """Readable export filename: <project>_<YYYY-MM-DD>_<HH-MM-SS>.json"""
    now = now or datetime.now()

    name = ""
    if config.project_name:
        name = slugify(config.project_name)
    elif config.wordpress_site_url:
        site = config.wordpress_site_url.split("://", 1)[-1]
        name = slugify(site)

    return f"{name or 'mapmyfirm'}_{now:%Y-%m-%d}_{now:%H-%M-%S}.json"


def export_checklist_csv(items: List[ChecklistItem]) -> str:
    """
    Render the checklist as CSV.

    Plain header row, then one row per location with every cell quoted
    and booleans as Yes/No.
    """
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(CSV_HEADERS)
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    for item in items:
        row = [item.location, _yes_no(item.hub_exists)]
        for area in PRACTICE_AREAS:
            page = item.practice_areas.get(area)
            row.append(_yes_no(bool(page and page.exists)))
        row.append(_yes_no(item.completed))
        row.append(item.notes or "")
        writer.writerow(row)

    return buffer.getvalue()
