"""Session and result models for the queue orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DispatchMode(str, Enum):
    """Whether completion of one item advances to the next."""

    SINGLE = "single"
    SEQUENTIAL_ALL = "sequential_all"


class SessionPhase(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"


class StartOutcome(str, Enum):
    """Result codes for start commands."""

    STARTED = "started"
    AGENT_UNAVAILABLE = "agent_unavailable"
    AGENT_BUSY = "agent_busy"
    ALREADY_ACTIVE = "already_active"
    NOTHING_PENDING = "nothing_pending"
    UNKNOWN_ITEM = "unknown_item"
    NOT_PENDING = "not_pending"


@dataclass(frozen=True, slots=True)
class SessionState:
    """Orchestrator bookkeeping: what is being driven and how."""

    running: bool = False
    active_item_id: str | None = None
    mode: DispatchMode | None = None

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase.DISPATCHING if self.running else SessionPhase.IDLE


@dataclass(frozen=True, slots=True)
class StartResult:
    """Outcome of a start command for the presentation layer."""

    outcome: StartOutcome
    item_id: str | None = None
    message: str = ""

    @property
    def started(self) -> bool:
        return self.outcome == StartOutcome.STARTED


@dataclass(slots=True)
class TickSummary:
    """What one tick observed and changed."""

    evaluated: bool = False
    completed_item_id: str | None = None
    dispatched_item_id: str | None = None
    failed_item_id: str | None = None
    went_idle: bool = False
