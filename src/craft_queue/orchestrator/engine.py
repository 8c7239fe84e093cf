"""Tick-driven state machine that feeds the work queue to the agent."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from craft_queue.agent.base import AgentStatus
from craft_queue.agent.bridge import AgentBridge
from craft_queue.orchestrator.models import (
    DispatchMode,
    SessionState,
    StartOutcome,
    StartResult,
    TickSummary,
)
from craft_queue.queue.models import WorkItem, WorkItemStatus
from craft_queue.queue.work_queue import WorkQueue

logger = logging.getLogger(__name__)


class Orchestrator:
    """Drives the queue through the agent, one active item at a time.

    The agent has no completion callback. Completion is inferred when a tick
    observes both ``busy`` and ``list_running`` false while an item is
    active. User commands and ticks share one lock, so transitions never
    interleave.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        queue: WorkQueue,
        bridge: AgentBridge,
        auto_craft_entire_list: bool = True,
        auto_remove_completed: bool = True,
        stall_timeout_ticks: int = 0,
        on_event: Callable[[str], None] | None = None,
    ) -> None:
        if stall_timeout_ticks < 0:
            raise ValueError("stall_timeout_ticks must be >= 0.")
        self.queue = queue
        self.bridge = bridge
        self.auto_craft_entire_list = auto_craft_entire_list
        self.auto_remove_completed = auto_remove_completed
        self.stall_timeout_ticks = stall_timeout_ticks
        self._on_event = on_event or (lambda _msg: None)
        self._state = SessionState()
        self._stalled_ticks = 0
        self._lock = threading.RLock()

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def default_mode(self) -> DispatchMode:
        if self.auto_craft_entire_list:
            return DispatchMode.SEQUENTIAL_ALL
        return DispatchMode.SINGLE

    # -- user commands ---------------------------------------------------------

    def start(self, mode: DispatchMode | None = None) -> StartResult:
        """Dispatch the first pending item; ``mode`` defaults from config."""

        effective_mode = mode or self.default_mode
        with self._lock:
            rejected = self._check_start_guards()
            if rejected is not None:
                return rejected

            dispatched = self._dispatch_first_pending(mode=effective_mode)
            if dispatched is None:
                self._emit("No pending items in queue.")
                return StartResult(
                    outcome=StartOutcome.NOTHING_PENDING,
                    message="No pending items in queue.",
                )
            if effective_mode == DispatchMode.SEQUENTIAL_ALL:
                verb = "Starting queue"
            else:
                verb = "Crafting next"
            message = f"{verb}: {dispatched.quantity}x {dispatched.display_name}"
            self._emit(message)
            return StartResult(outcome=StartOutcome.STARTED, item_id=dispatched.id, message=message)

    def start_single(self, item_id: str) -> StartResult:
        """Dispatch exactly ``item_id`` regardless of queue order, without auto-advance."""

        with self._lock:
            rejected = self._check_start_guards()
            if rejected is not None:
                return rejected

            item = self.queue.by_id(item_id)
            if item is None:
                return StartResult(
                    outcome=StartOutcome.UNKNOWN_ITEM,
                    item_id=item_id,
                    message="Item is no longer in the queue.",
                )
            if item.status != WorkItemStatus.PENDING:
                return StartResult(
                    outcome=StartOutcome.NOT_PENDING,
                    item_id=item_id,
                    message=f"Item is {item.status.value}, only pending items can be crafted.",
                )
            if not self._dispatch(item, mode=DispatchMode.SINGLE):
                return StartResult(
                    outcome=StartOutcome.UNKNOWN_ITEM,
                    item_id=item_id,
                    message="Item is no longer in the queue.",
                )
            message = f"Sending {item.quantity}x {item.display_name} to agent."
            self._emit(message)
            return StartResult(outcome=StartOutcome.STARTED, item_id=item.id, message=message)

    def stop(self) -> bool:
        """Disengage immediately and ask the agent to stop.

        The in-flight item keeps its status since the agent may still finish
        it. It blocks new starts until the user removes it or sets its
        status. Returns whether a session was running.
        """

        with self._lock:
            previous = self._state
            self._reset()
            self.bridge.request_stop(True)
            self._emit("Stop requested.")
            logger.info(
                "Orchestrator stopped (was_running=%s, in_flight=%s)",
                previous.running,
                previous.active_item_id,
            )
            return previous.running

    def pause(self) -> None:
        self.bridge.set_pause(True)
        self._emit("Paused.")

    def resume(self) -> None:
        self.bridge.set_pause(False)
        self._emit("Resumed.")

    # -- periodic evaluation ---------------------------------------------------

    def tick(self, status: AgentStatus | None = None) -> TickSummary:
        """Evaluate one poll observation; probes the bridge itself when none is given."""

        if status is None:
            self.bridge.probe()
            status = self.bridge.refresh_status()

        with self._lock:
            summary = TickSummary()
            if not self._state.running or not status.available:
                return summary

            summary.evaluated = True
            if not status.idle:
                if status.paused:
                    # A user pause is not a stall.
                    self._stalled_ticks = 0
                else:
                    self._check_stall(summary)
                return summary

            self._stalled_ticks = 0
            self._complete_active(summary)

            if self._state.mode == DispatchMode.SEQUENTIAL_ALL:
                dispatched = self._dispatch_first_pending(mode=DispatchMode.SEQUENTIAL_ALL)
                if dispatched is not None:
                    summary.dispatched_item_id = dispatched.id
                    self._emit(f"Next: {dispatched.quantity}x {dispatched.display_name}")
                    return summary
                self._emit("Queue complete!")

            self._reset()
            summary.went_idle = True
            return summary

    # -- internals -------------------------------------------------------------

    def _check_start_guards(self) -> StartResult | None:
        if not self.bridge.available:
            return StartResult(
                outcome=StartOutcome.AGENT_UNAVAILABLE,
                message="Agent is not available.",
            )
        if self.bridge.is_busy():
            self._emit("Agent is busy! Wait for it to finish.")
            return StartResult(
                outcome=StartOutcome.AGENT_BUSY,
                message="Agent is busy! Wait for it to finish.",
            )
        if self._state.running or self.queue.count_by_status(WorkItemStatus.ACTIVE) > 0:
            return StartResult(
                outcome=StartOutcome.ALREADY_ACTIVE,
                item_id=self._state.active_item_id,
                message="Another item is already being crafted.",
            )
        return None

    def _dispatch_first_pending(self, *, mode: DispatchMode) -> WorkItem | None:
        # A concurrent removal can win between the lookup and the status write.
        while (item := self.queue.first_pending()) is not None:
            if self._dispatch(item, mode=mode):
                return item
        return None

    def _dispatch(self, item: WorkItem, *, mode: DispatchMode) -> bool:
        if not self.queue.set_status(item.id, WorkItemStatus.ACTIVE):
            return False
        self._state = SessionState(running=True, active_item_id=item.id, mode=mode)
        self._stalled_ticks = 0
        self.bridge.dispatch(item.recipe_id, item.quantity)
        logger.info(
            "Dispatched %s (recipe %d x%d, mode=%s)",
            item.id,
            item.recipe_id,
            item.quantity,
            mode.value,
        )
        return True

    def _complete_active(self, summary: TickSummary) -> None:
        active_id = self._state.active_item_id
        if active_id is None:
            return
        item = self.queue.by_id(active_id)
        if item is None or item.status != WorkItemStatus.ACTIVE:
            logger.debug("Active item %s vanished or was edited; nothing to complete", active_id)
            return
        self.queue.set_status(active_id, WorkItemStatus.COMPLETED)
        summary.completed_item_id = active_id
        logger.info("Completed %s (%dx %s)", active_id, item.quantity, item.display_name)
        if self.auto_remove_completed:
            self.queue.remove(active_id)

    def _check_stall(self, summary: TickSummary) -> None:
        if self.stall_timeout_ticks <= 0:
            return
        self._stalled_ticks += 1
        if self._stalled_ticks < self.stall_timeout_ticks:
            return

        active_id = self._state.active_item_id
        logger.warning(
            "Active item %s still busy after %d ticks; marking failed",
            active_id,
            self._stalled_ticks,
        )
        if active_id is not None and self.queue.set_status(active_id, WorkItemStatus.FAILED):
            summary.failed_item_id = active_id
        self.bridge.request_stop(True)
        self._reset()
        summary.went_idle = True
        self._emit("Craft stalled; marked as failed and stopped the queue.")

    def _reset(self) -> None:
        self._state = SessionState()
        self._stalled_ticks = 0

    def _emit(self, message: str) -> None:
        try:
            self._on_event(message)
        except Exception:
            logger.exception("Orchestrator event callback failed")
