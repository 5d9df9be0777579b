"""
Services Module - Business Logic Layer

Provides caching, export/import, the project state machine, sessions
with autosave, and the planner facade used by the MCP tools.
"""

from mapmyfirm_server.services.cache_service import CacheService
from mapmyfirm_server.services.planner_service import PlannerService, get_planner_service
from mapmyfirm_server.services.project_session import (
    AutoSaver,
    InMemoryProjectSink,
    ProjectSession,
    ProjectSink,
)

__all__ = [
    "CacheService",
    "PlannerService",
    "get_planner_service",
    "AutoSaver",
    "InMemoryProjectSink",
    "ProjectSession",
    "ProjectSink",
]
