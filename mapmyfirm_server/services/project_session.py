"""
Services - Project Session

Explicit per-project context: current state, persistence sink, and
debounced autosave. Replaces any process-wide "current project" cache.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from mapmyfirm_server.config import get_settings
from mapmyfirm_server.exceptions import PersistenceError
from mapmyfirm_server.schemas.project import ProjectState, ProjectSummary
from mapmyfirm_server.services.project_state import (
    ProjectAction,
    initial_state,
    reduce_project,
)
from mapmyfirm_server.utils import new_id, utc_now_iso


logger = logging.getLogger(__name__)


class ProjectSink(ABC):
    """Whole-project snapshot storage keyed by project id."""

    @abstractmethod
    async def save(self, project_id: str, state: ProjectState) -> None:
        """
        Store a snapshot, replacing any earlier one.

        Raises:
            PersistenceError: The snapshot could not be written
        """
        pass

    @abstractmethod
    async def load(self, project_id: str) -> Optional[ProjectState]:
        """Return the stored snapshot or None."""
        pass

    @abstractmethod
    async def list_projects(self) -> List[ProjectSummary]:
        """Summaries of all stored projects, most recently saved first."""
        pass

    @abstractmethod
    async def delete(self, project_id: str) -> None:
        """Remove a stored snapshot; unknown ids are ignored."""
        pass

    @abstractmethod
    async def exists(self, project_id: str) -> bool:
        """True when a snapshot is stored under ``project_id``."""
        pass


class InMemoryProjectSink(ProjectSink):
    """Sink holding snapshots in a dict (tests, single-process servers)."""

    def __init__(self):
        self._projects: Dict[str, Dict] = {}

    async def save(self, project_id: str, state: ProjectState) -> None:
        self._projects[project_id] = {
            "saved_at": utc_now_iso(),
            "state": state.model_copy(deep=True),
        }

    async def load(self, project_id: str) -> Optional[ProjectState]:
        record = self._projects.get(project_id)
        return record["state"].model_copy(deep=True) if record else None

    async def list_projects(self) -> List[ProjectSummary]:
        summaries = [
            ProjectSummary(
                project_id=project_id,
                project_name=record["state"].config.project_name or "Untitled Project",
                site_url=record["state"].config.wordpress_site_url or "Unknown",
                scan_date=record["state"].config.scan_date or "Unknown",
                export_date=record["saved_at"],
                last_modified=record["saved_at"],
                node_count=len(record["state"].nodes),
                location_count=len(record["state"].gbp_locations),
            )
            for project_id, record in self._projects.items()
        ]
        summaries.sort(key=lambda s: s.last_modified, reverse=True)
        return summaries

    async def delete(self, project_id: str) -> None:
        self._projects.pop(project_id, None)

    async def exists(self, project_id: str) -> bool:
        return project_id in self._projects


class AutoSaver:
    """
    Debounced saves for one project.

    Each schedule() restarts the quiet-period timer so a burst of changes
    produces one write. save_now() writes immediately. A debounced and an
    immediate save may race; both target the same record and the last
    write wins.
    """

    def __init__(self, sink: ProjectSink, project_id: str, settings=None):
        self.settings = settings or get_settings()
        self.sink = sink
        self.project_id = project_id
        self.debounce_seconds = self.settings.autosave.debounce_seconds
        self.last_saved: Optional[str] = None
        self._pending: Optional[asyncio.Task] = None

    def schedule(self, state: ProjectState) -> None:
        """
        Save ``state`` after the quiet period unless superseded.

        Any pending save is dropped first, also when ``state`` is empty and
        nothing new is scheduled.
        """
        self.cancel()
        if state.is_empty():
            return

        self._pending = asyncio.get_running_loop().create_task(
            self._save_later(state)
        )

    def cancel(self) -> None:
        """Drop a pending debounced save."""
        if self._pending and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def flush(self) -> None:
        """Wait for a pending debounced save to finish."""
        if self._pending:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass

    async def save_now(self, state: ProjectState) -> bool:
        """
        Immediate save.

        Returns:
            True when written, False for an empty project or a failed write
        """
        if state.is_empty():
            return False

        try:
            await self.sink.save(self.project_id, state)
        except PersistenceError as e:
            logger.error(f"Failed to save project {self.project_id}: {e}")
            return False

        self.last_saved = utc_now_iso()
        return True

    async def _save_later(self, state: ProjectState) -> None:
        await asyncio.sleep(self.debounce_seconds)
        try:
            await self.sink.save(self.project_id, state)
            self.last_saved = utc_now_iso()
        except PersistenceError as e:
            logger.error(f"Failed to auto-save project {self.project_id}: {e}")


class ProjectSession:
    """Holds one project's state and persists it as it changes."""

    def __init__(
        self,
        sink: ProjectSink,
        project_id: Optional[str] = None,
        state: Optional[ProjectState] = None,
        settings=None,
    ):
        self.settings = settings or get_settings()
        self.sink = sink
        self.project_id = project_id or new_id()
        self.state = state or initial_state()
        self.autosaver = AutoSaver(sink, self.project_id, self.settings)

    @classmethod
    async def open(cls, sink: ProjectSink, project_id: str, settings=None) -> "ProjectSession":
        """Load a stored project into a new session."""
        state = await sink.load(project_id)
        if state is None:
            raise PersistenceError(f"Project {project_id} not found")
        return cls(sink, project_id=project_id, state=state, settings=settings)

    def dispatch(self, action: ProjectAction) -> ProjectState:
        """
        Apply an action and schedule an autosave.

        Must be called from a running event loop when autosave is enabled.
        """
        self.state = reduce_project(self.state, action)
        if self.settings.autosave.enabled:
            self.autosaver.schedule(self.state)
        return self.state

    async def save_now(self) -> bool:
        """Immediate save of the current state."""
        return await self.autosaver.save_now(self.state)

    async def close(self) -> None:
        """Let a pending autosave complete."""
        await self.autosaver.flush()
