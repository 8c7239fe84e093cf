"""Deterministic in-process agent for demos and integration tests."""

from __future__ import annotations

import threading

from craft_queue.agent.base import (
    CRAFT_ITEM,
    GET_ENDURANCE_STATUS,
    GET_STOP_REQUEST,
    IS_BUSY,
    IS_LIST_PAUSED,
    IS_LIST_RUNNING,
    SET_ENDURANCE_STATUS,
    SET_LIST_PAUSE,
    SET_STOP_REQUEST,
    AgentCallError,
)


class SimulatedAgent:
    """Pretends to craft: stays busy for ``work_polls`` status polls per order.

    Work advances once per ``IsListRunning`` read, which the bridge issues
    exactly once per status refresh, so ``work_polls`` counts driver ticks.
    ``IsBusy`` only reports and never consumes work, so liveness probes and
    start guards do not shorten an order. Polls do not advance while paused.
    A stop request finishes the current order immediately. ``online = False``
    makes every call fail, like an unloaded agent behind a still-valid binding.
    """

    def __init__(self, *, work_polls: int = 3) -> None:
        self.work_polls = max(1, work_polls)
        self.online = True
        self.dispatched: list[tuple[int, int]] = []
        self._remaining = 0
        self._paused = False
        self._stop_requested = False
        self._endurance = False
        self._lock = threading.Lock()

    def try_call(self, name: str, *args: object) -> object:  # noqa: PLR0911
        with self._lock:
            if not self.online:
                raise AgentCallError(f"Simulated agent offline ({name})")
            if name == IS_BUSY:
                return self._remaining > 0
            if name == IS_LIST_RUNNING:
                return self._poll()
            if name == IS_LIST_PAUSED:
                return self._paused
            if name == GET_STOP_REQUEST:
                return self._stop_requested
            if name == GET_ENDURANCE_STATUS:
                return self._endurance
            if name == CRAFT_ITEM:
                recipe_id, quantity = (int(value) for value in args)  # type: ignore[call-overload]
                self.dispatched.append((recipe_id, quantity))
                self._remaining = self.work_polls
                self._stop_requested = False
                return None
            if name == SET_LIST_PAUSE:
                self._paused = bool(args[0])
                return None
            if name == SET_STOP_REQUEST:
                self._stop_requested = bool(args[0])
                if self._stop_requested:
                    self._remaining = 0
                return None
            if name == SET_ENDURANCE_STATUS:
                self._endurance = bool(args[0])
                return None
            raise AgentCallError(f"Unknown primitive: {name}")

    def _poll(self) -> bool:
        if self._remaining > 0 and not self._paused:
            self._remaining -= 1
            return True
        return self._remaining > 0
