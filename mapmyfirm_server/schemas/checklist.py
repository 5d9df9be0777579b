"""
Schemas - Checklist Models

Pydantic models for the per-location practice area checklist.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional


class PracticeAreaPage(BaseModel):
    """Completeness record for one (location, practice area) cell."""
    exists: bool = False
    page_id: Optional[str] = None
    manual_url: Optional[str] = None  # entered when no scanned page corresponds
    manual_override: bool = False
    comment: Optional[str] = None
    optimized: bool = False


class ChecklistItem(BaseModel):
    """Hub existence and practice area completeness for one location."""
    id: str
    location: str
    hub_id: Optional[str] = None
    hub_exists: bool = False
    practice_areas: Dict[str, PracticeAreaPage]
    notes: str = ""
    completed: bool = False
    last_updated: str


class ChecklistStats(BaseModel):
    """Aggregate completion statistics over a checklist."""
    total: int
    completed: int
    completion_percentage: int = Field(ge=0, le=100)
    hubs_exist: int
    hubs_percentage: int = Field(ge=0, le=100)
    practice_area_counts: Dict[str, int]
    total_required: int
    total_exists: int
    overall_percentage: int = Field(ge=0, le=100)
