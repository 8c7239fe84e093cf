"""In-memory ordered work queue with identity-based mutation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from uuid import uuid4

from craft_queue.queue.models import MaterialOverride, WorkItem, WorkItemStatus, clamp_quantity

logger = logging.getLogger(__name__)

QueueListener = Callable[[], None]


class WorkQueue:
    """Ordered container of work items.

    The queue does not enforce cross-item rules such as "one active item";
    the orchestrator owns those. Every successful mutation notifies
    subscribers after the change is fully applied. Rejected operations leave
    the list untouched and do not notify.
    """

    def __init__(self) -> None:
        self._items: list[WorkItem] = []
        self._issued_ids: set[str] = set()
        self._listeners: list[QueueListener] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def items(self) -> tuple[WorkItem, ...]:
        """Snapshot of the queue in execution order."""

        with self._lock:
            return tuple(self._items)

    def subscribe(self, listener: QueueListener) -> Callable[[], None]:
        """Register a change listener and return a callable that removes it."""

        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def add(
        self,
        recipe_id: int,
        name: str,
        quantity: int,
        materials: Iterable[MaterialOverride] | None = None,
    ) -> str:
        """Append a new pending item at the tail and return its id."""

        item_id = uuid4().hex
        with self._lock:
            if item_id in self._issued_ids:
                raise RuntimeError(f"Duplicate work item id issued: {item_id}")
            self._issued_ids.add(item_id)
            self._items.append(
                WorkItem(
                    id=item_id,
                    recipe_id=recipe_id,
                    display_name=name,
                    quantity=clamp_quantity(quantity),
                    materials=tuple(materials or ()),
                ),
            )
        self._notify()
        return item_id

    def remove(self, item_id: str) -> bool:
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                return False
            del self._items[index]
        self._notify()
        return True

    def move(self, item_id: str, new_index: int) -> bool:
        """Move an item to ``new_index``, keeping the relative order of the rest."""

        with self._lock:
            old_index = self._index_of(item_id)
            if old_index is None or new_index < 0 or new_index >= len(self._items):
                return False
            item = self._items.pop(old_index)
            self._items.insert(new_index, item)
        self._notify()
        return True

    def set_quantity(self, item_id: str, quantity: int) -> bool:
        return self._update(item_id, quantity=clamp_quantity(quantity))

    def set_status(self, item_id: str, status: WorkItemStatus) -> bool:
        return self._update(item_id, status=status)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
        self._notify()

    def clear_completed(self) -> None:
        """Drop every item whose status is completed."""

        with self._lock:
            self._items = [
                item for item in self._items if item.status != WorkItemStatus.COMPLETED
            ]
        self._notify()

    def first_pending(self) -> WorkItem | None:
        """First pending item in current queue order."""

        with self._lock:
            for item in self._items:
                if item.status == WorkItemStatus.PENDING:
                    return item
            return None

    def by_id(self, item_id: str) -> WorkItem | None:
        with self._lock:
            index = self._index_of(item_id)
            return None if index is None else self._items[index]

    def count_by_status(self, status: WorkItemStatus) -> int:
        with self._lock:
            return sum(1 for item in self._items if item.status == status)

    def _update(self, item_id: str, **changes: object) -> bool:
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                return False
            self._items[index] = replace(self._items[index], **changes)
        self._notify()
        return True

    def _index_of(self, item_id: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Work queue listener failed")
