"""
Schemas Module - Pydantic Models

Data models for pages, locations, checklists, and projects.
"""

from mapmyfirm_server.schemas.page import SiteNode, SiteTreeNode
from mapmyfirm_server.schemas.location import GBPLocation, MatchResult
from mapmyfirm_server.schemas.checklist import (
    PracticeAreaPage,
    ChecklistItem,
    ChecklistStats,
)
from mapmyfirm_server.schemas.project import (
    EXPORT_VERSION,
    LocationStructure,
    ProjectConfig,
    ProjectState,
    ProjectExport,
    ProjectSummary,
)

__all__ = [
    "SiteNode",
    "SiteTreeNode",
    "GBPLocation",
    "MatchResult",
    "PracticeAreaPage",
    "ChecklistItem",
    "ChecklistStats",
    "EXPORT_VERSION",
    "LocationStructure",
    "ProjectConfig",
    "ProjectState",
    "ProjectExport",
    "ProjectSummary",
]
