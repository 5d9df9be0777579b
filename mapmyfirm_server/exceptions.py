"""
MapMyFirm Server - Exceptions
"""

from typing import List


class MapMyFirmError(Exception):
    """Base exception for the planner."""


class ScanError(MapMyFirmError):
    """Raised when fetching content from a WordPress site fails."""


class PersistenceError(MapMyFirmError):
    """Raised when a project sink cannot save or load a project."""


class ProjectImportError(MapMyFirmError):
    """Raised when an import document is malformed. Nothing is imported."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid project file:\n" + "\n".join(self.errors))
