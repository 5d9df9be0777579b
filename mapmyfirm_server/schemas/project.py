"""
Schemas - Project Models

Whole-project snapshot as persisted and exported.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Literal

from mapmyfirm_server.schemas.checklist import ChecklistItem
from mapmyfirm_server.schemas.location import GBPLocation
from mapmyfirm_server.schemas.page import SiteNode


EXPORT_VERSION = "1.0.0"


class LocationStructure(BaseModel):
    """What represents a location hub on the site."""
    hub_type: Literal["page", "cpt"] = "page"
    hub_cpt_name: Optional[str] = None
    parent_page_id: Optional[str] = None


class ProjectConfig(BaseModel):
    """Project-level settings captured at scan time."""
    project_name: str = ""
    wordpress_site_url: str = ""
    selected_content_types: List[str] = []
    location_structure: Optional[LocationStructure] = None
    scan_date: str = ""
    version: str = EXPORT_VERSION


class ProjectState(BaseModel):
    """In-memory project model."""
    config: ProjectConfig = Field(default_factory=ProjectConfig)
    nodes: List[SiteNode] = []
    gbp_locations: List[GBPLocation] = []
    checklist_items: List[ChecklistItem] = []
    tree_expanded_ids: List[str] = []
    selected_node_id: Optional[str] = None

    def is_empty(self) -> bool:
        """True for a project with neither a name nor scanned pages."""
        return not self.config.project_name and not self.nodes


class ProjectExport(BaseModel):
    """JSON export document."""
    version: str = EXPORT_VERSION
    exported_at: str
    project: ProjectState


class ProjectSummary(BaseModel):
    """Headline facts about an export document or saved project."""
    project_name: str
    site_url: str
    scan_date: str
    export_date: str
    node_count: int
    location_count: int
    # Set for projects listed from a sink
    project_id: Optional[str] = None
    last_modified: Optional[str] = None
