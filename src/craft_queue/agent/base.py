"""Binding interface for the external crafting agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

CRAFT_ITEM = "CraftItem"
IS_BUSY = "IsBusy"
IS_LIST_RUNNING = "IsListRunning"
IS_LIST_PAUSED = "IsListPaused"
GET_ENDURANCE_STATUS = "GetEnduranceStatus"
GET_STOP_REQUEST = "GetStopRequest"
SET_ENDURANCE_STATUS = "SetEnduranceStatus"
SET_LIST_PAUSE = "SetListPause"
SET_STOP_REQUEST = "SetStopRequest"

QUERY_PRIMITIVES = frozenset(
    {IS_BUSY, IS_LIST_RUNNING, IS_LIST_PAUSED, GET_ENDURANCE_STATUS, GET_STOP_REQUEST},
)
COMMAND_PRIMITIVES = frozenset(
    {CRAFT_ITEM, SET_ENDURANCE_STATUS, SET_LIST_PAUSE, SET_STOP_REQUEST},
)


class AgentCallError(RuntimeError):
    """Agent primitive call failed or timed out."""


@dataclass(frozen=True, slots=True)
class AgentStatus:
    """One polled observation of the agent's boolean status flags."""

    available: bool = False
    busy: bool = False
    list_running: bool = False
    paused: bool = False

    @property
    def idle(self) -> bool:
        """Neither crafting nor running a list."""

        return not self.busy and not self.list_running


class AgentBinding(Protocol):
    """Low-level primitive binding.

    Implementations must return or raise within a short bounded time and
    may raise any exception on failure.
    """

    def try_call(self, name: str, *args: object) -> object:
        """Invoke one named primitive and return its raw result."""
