from __future__ import annotations

import allure
import pytest

from craft_queue.queue import MaterialOverride, WorkItemStatus, WorkQueue, clamp_quantity

pytestmark = [
    allure.epic("Craft Queue"),
    allure.feature("Work Queue"),
]


def _names(queue: WorkQueue) -> list[str]:
    return [item.display_name for item in queue.items()]


def _seed(queue: WorkQueue, *names: str) -> list[str]:
    return [queue.add(index + 1, name, 1) for index, name in enumerate(names)]


def test_add_appends_pending_item_with_unique_id(work_queue: WorkQueue) -> None:
    first = work_queue.add(10, "Bronze Ingot", 3)
    second = work_queue.add(10, "Bronze Ingot", 3)

    assert first != second
    assert len(work_queue) == 2
    item = work_queue.by_id(first)
    assert item is not None
    assert item.recipe_id == 10
    assert item.quantity == 3
    assert item.status == WorkItemStatus.PENDING
    assert item.materials == ()
    assert item.created_at.tzinfo is not None


def test_add_keeps_material_overrides_in_order(work_queue: WorkQueue) -> None:
    materials = [
        MaterialOverride(material_id=5, name="Copper Ore", low_grade_count=2, high_grade_count=1),
        MaterialOverride(material_id=2, name="Fire Shard", low_grade_count=1),
    ]
    item_id = work_queue.add(10, "Bronze Ingot", 1, materials)

    item = work_queue.by_id(item_id)
    assert item is not None
    assert [material.material_id for material in item.materials] == [5, 2]


@pytest.mark.parametrize(
    ("requested", "stored"),
    [(0, 1), (-5, 1), (1, 1), (9999, 9999), (999_999, 9999)],
)
def test_quantity_is_clamped_on_add_and_set(
    work_queue: WorkQueue,
    requested: int,
    stored: int,
) -> None:
    item_id = work_queue.add(1, "Item", requested)
    assert work_queue.by_id(item_id).quantity == stored  # type: ignore[union-attr]

    other_id = work_queue.add(1, "Item", 5)
    assert work_queue.set_quantity(other_id, requested) is True
    assert work_queue.by_id(other_id).quantity == stored  # type: ignore[union-attr]
    assert clamp_quantity(requested) == stored


def test_remove_unknown_id_returns_false_without_notifying(work_queue: WorkQueue) -> None:
    notifications: list[int] = []
    _seed(work_queue, "A")
    work_queue.subscribe(lambda: notifications.append(len(work_queue)))

    assert work_queue.remove("missing") is False
    assert notifications == []


def test_every_successful_mutation_notifies_after_apply(work_queue: WorkQueue) -> None:
    seen: list[list[str]] = []
    work_queue.subscribe(lambda: seen.append(_names(work_queue)))

    a_id = work_queue.add(1, "A", 1)
    b_id = work_queue.add(2, "B", 1)
    work_queue.move(b_id, 0)
    work_queue.set_quantity(a_id, 4)
    work_queue.set_status(a_id, WorkItemStatus.COMPLETED)
    work_queue.clear_completed()
    work_queue.remove(b_id)
    work_queue.clear()

    assert seen == [["A"], ["A", "B"], ["B", "A"], ["B", "A"], ["B", "A"], ["B"], [], []]


def test_unsubscribe_stops_notifications(work_queue: WorkQueue) -> None:
    calls: list[str] = []
    unsubscribe = work_queue.subscribe(lambda: calls.append("x"))
    work_queue.add(1, "A", 1)
    unsubscribe()
    work_queue.add(2, "B", 1)

    assert calls == ["x"]


def test_failing_listener_does_not_break_mutation(work_queue: WorkQueue) -> None:
    def _boom() -> None:
        raise RuntimeError("listener failure")

    work_queue.subscribe(_boom)
    item_id = work_queue.add(1, "A", 1)

    assert work_queue.by_id(item_id) is not None


@pytest.mark.parametrize("new_index", [0, 1, 2, 3])
def test_move_preserves_items_and_relative_order_of_others(
    work_queue: WorkQueue,
    new_index: int,
) -> None:
    ids = _seed(work_queue, "A", "B", "C", "D")
    moved = ids[1]

    assert work_queue.move(moved, new_index) is True

    order = [item.id for item in work_queue.items()]
    assert sorted(order) == sorted(ids)
    assert order[new_index] == moved
    assert [item_id for item_id in order if item_id != moved] == [
        item_id for item_id in ids if item_id != moved
    ]


@pytest.mark.parametrize("new_index", [-1, 3, 10])
def test_move_rejects_out_of_range_index(work_queue: WorkQueue, new_index: int) -> None:
    _seed(work_queue, "A", "B", "C")
    target = work_queue.items()[0].id

    assert work_queue.move(target, new_index) is False
    assert _names(work_queue) == ["A", "B", "C"]


def test_move_rejects_unknown_id(work_queue: WorkQueue) -> None:
    _seed(work_queue, "A", "B")

    assert work_queue.move("missing", 0) is False
    assert _names(work_queue) == ["A", "B"]


def test_set_status_and_quantity_reject_unknown_id(work_queue: WorkQueue) -> None:
    assert work_queue.set_status("missing", WorkItemStatus.ACTIVE) is False
    assert work_queue.set_quantity("missing", 3) is False


def test_clear_completed_removes_only_completed(work_queue: WorkQueue) -> None:
    a_id, b_id, c_id, d_id = _seed(work_queue, "A", "B", "C", "D")
    work_queue.set_status(a_id, WorkItemStatus.COMPLETED)
    work_queue.set_status(b_id, WorkItemStatus.FAILED)
    work_queue.set_status(c_id, WorkItemStatus.ACTIVE)

    work_queue.clear_completed()

    assert [item.id for item in work_queue.items()] == [b_id, c_id, d_id]


def test_first_pending_follows_current_queue_order(work_queue: WorkQueue) -> None:
    a_id, b_id, c_id = _seed(work_queue, "A", "B", "C")

    assert work_queue.first_pending().id == a_id  # type: ignore[union-attr]

    work_queue.set_status(a_id, WorkItemStatus.COMPLETED)
    assert work_queue.first_pending().id == b_id  # type: ignore[union-attr]

    work_queue.move(b_id, 2)
    assert work_queue.first_pending().id == c_id  # type: ignore[union-attr]


def test_first_pending_is_none_when_nothing_pending(work_queue: WorkQueue) -> None:
    assert work_queue.first_pending() is None
    (a_id,) = _seed(work_queue, "A")
    work_queue.set_status(a_id, WorkItemStatus.FAILED)

    assert work_queue.first_pending() is None


def test_snapshots_are_not_affected_by_later_edits(work_queue: WorkQueue) -> None:
    item_id = work_queue.add(1, "A", 2)
    snapshot = work_queue.by_id(item_id)

    work_queue.set_quantity(item_id, 7)

    assert snapshot is not None
    assert snapshot.quantity == 2
    assert work_queue.by_id(item_id).quantity == 7  # type: ignore[union-attr]


def test_count_by_status(work_queue: WorkQueue) -> None:
    a_id, _, _ = _seed(work_queue, "A", "B", "C")
    work_queue.set_status(a_id, WorkItemStatus.ACTIVE)

    assert work_queue.count_by_status(WorkItemStatus.ACTIVE) == 1
    assert work_queue.count_by_status(WorkItemStatus.PENDING) == 2
