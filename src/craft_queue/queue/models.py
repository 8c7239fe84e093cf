"""Domain models for the craft work queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

MIN_QUANTITY = 1
MAX_QUANTITY = 9_999


class WorkItemStatus(str, Enum):
    """Work item lifecycle states."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class MaterialOverride:
    """Per-material grade split forwarded to the agent with a work item."""

    material_id: int
    name: str
    low_grade_count: int = 0
    high_grade_count: int = 0


@dataclass(frozen=True, slots=True)
class WorkItem:
    """Immutable snapshot of one queued craft.

    The queue replaces the snapshot on every edit, so callers holding an
    older instance never observe a half-applied change.
    """

    id: str
    recipe_id: int
    display_name: str
    quantity: int
    materials: tuple[MaterialOverride, ...] = ()
    status: WorkItemStatus = WorkItemStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


def clamp_quantity(value: int) -> int:
    """Clamp a requested craft quantity to the supported range."""

    return max(MIN_QUANTITY, min(MAX_QUANTITY, int(value)))
