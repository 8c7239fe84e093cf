"""Failure-proof facade over the external agent's primitives."""

from __future__ import annotations

import logging

from craft_queue.agent.base import (
    CRAFT_ITEM,
    GET_ENDURANCE_STATUS,
    GET_STOP_REQUEST,
    IS_BUSY,
    IS_LIST_PAUSED,
    IS_LIST_RUNNING,
    QUERY_PRIMITIVES,
    SET_ENDURANCE_STATUS,
    SET_LIST_PAUSE,
    SET_STOP_REQUEST,
    AgentBinding,
    AgentStatus,
)

logger = logging.getLogger(__name__)


class AgentBridge:
    """Tracks agent availability and hides every binding failure.

    A binding that exists is not proof that the agent answers, so
    availability is only ever derived from a real ``IsBusy`` round trip in
    :meth:`probe`. Queries fall back to ``False`` and commands become no-ops
    while the agent is unavailable or when a call fails.
    """

    def __init__(self, binding: AgentBinding | None, *, probe_on_init: bool = True) -> None:
        self.binding = binding
        self._available = False
        self._last_status = AgentStatus()
        if probe_on_init:
            self.probe()

    @property
    def available(self) -> bool:
        return self._available

    @property
    def last_status(self) -> AgentStatus:
        return self._last_status

    def probe(self) -> bool:
        """Perform one liveness round trip and update availability."""

        if self.binding is None:
            self._set_available(False, reason="no binding")
            return False
        try:
            self.binding.try_call(IS_BUSY)
        except Exception as error:  # noqa: BLE001
            self._set_available(False, reason=str(error))
            return False
        self._set_available(True)
        return True

    def query(self, name: str) -> bool:
        """Return the agent's answer for one boolean query, ``False`` on any failure."""

        if name not in QUERY_PRIMITIVES:
            raise ValueError(f"Unsupported agent query: {name!r}")
        if not self._available or self.binding is None:
            return False
        try:
            return bool(self.binding.try_call(name))
        except Exception as error:  # noqa: BLE001
            logger.debug("Agent query %s failed: %s", name, error)
            return False

    def refresh_status(self) -> AgentStatus:
        """Read busy/running/paused flags into a fresh observation."""

        if not self._available:
            status = AgentStatus()
        else:
            status = AgentStatus(
                available=True,
                busy=self.query(IS_BUSY),
                list_running=self.query(IS_LIST_RUNNING),
                paused=self.query(IS_LIST_PAUSED),
            )
        self._last_status = status
        return status

    def is_busy(self) -> bool:
        return self.query(IS_BUSY)

    def stop_requested(self) -> bool:
        return self.query(GET_STOP_REQUEST)

    def endurance_status(self) -> bool:
        return self.query(GET_ENDURANCE_STATUS)

    def dispatch(self, recipe_id: int, quantity: int) -> None:
        """Send one craft order. No acknowledgement exists, so nothing is returned."""

        if not self._available or self.binding is None:
            logger.error(
                "Cannot dispatch recipe %d: agent not available",
                recipe_id,
            )
            return
        try:
            self.binding.try_call(CRAFT_ITEM, recipe_id, quantity)
        except Exception as error:  # noqa: BLE001
            logger.error("Agent dispatch of recipe %d failed: %s", recipe_id, error)
            return
        logger.info("Sent CraftItem(recipe_id=%d, quantity=%d)", recipe_id, quantity)

    def set_pause(self, paused: bool) -> None:
        self._command(SET_LIST_PAUSE, paused)

    def request_stop(self, stop: bool) -> None:
        self._command(SET_STOP_REQUEST, stop)

    def set_endurance(self, enabled: bool) -> None:
        self._command(SET_ENDURANCE_STATUS, enabled)

    def _command(self, name: str, value: bool) -> None:
        if not self._available or self.binding is None:
            return
        try:
            self.binding.try_call(name, value)
        except Exception as error:  # noqa: BLE001
            logger.error("Agent command %s(%s) failed: %s", name, value, error)

    def _set_available(self, available: bool, *, reason: str | None = None) -> None:
        if available == self._available:
            return
        self._available = available
        if available:
            logger.info("Agent is now available")
        else:
            logger.info("Agent is no longer available (%s)", reason or "unknown")
