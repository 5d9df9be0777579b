"""
Schemas - Location Models

Pydantic models for business locations and their hub matches.
"""

from pydantic import BaseModel, Field
from typing import Optional


class GBPLocation(BaseModel):
    """A free-text business location and the hub page it matched."""
    id: str
    location_string: str
    matched_hub_id: Optional[str] = None
    confidence_score: int = Field(default=0, ge=0, le=100)
    manual_override: bool = False


class MatchResult(BaseModel):
    """Best hub for a single location string."""
    hub_id: Optional[str] = None
    confidence: int = Field(default=0, ge=0, le=100)
