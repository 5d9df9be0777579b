"""Small helpers shared across the pipeline and services."""

import math
import re
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Fresh random identifier for locations and checklist rows."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601."""
    return datetime.now(timezone.utc).isoformat()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def slugify(text: str) -> str:
    """Lowercase dash-separated slug, empty if nothing survives."""
    text = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return text.strip("-")


def validated_update(model, updates: dict):
    """Copy of a pydantic model with ``updates`` applied and re-validated."""
    return type(model).model_validate({**model.model_dump(), **updates})
