"""Ordered work list and its use-case services."""

from craft_queue.queue.models import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    MaterialOverride,
    WorkItem,
    WorkItemStatus,
    clamp_quantity,
)
from craft_queue.queue.work_queue import WorkQueue

__all__ = [
    "MAX_QUANTITY",
    "MIN_QUANTITY",
    "MaterialOverride",
    "WorkItem",
    "WorkItemStatus",
    "WorkQueue",
    "clamp_quantity",
]
