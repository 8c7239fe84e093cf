"""Queue orchestration state machine and its polling driver.

There is no completion callback from the agent and no shared transaction
with it. The only synchronization primitive is a periodic poll of a few
booleans, so the orchestrator is a small tick-driven state machine:
dispatch one item, wait until a tick observes the agent idle, mark the item
completed, and either advance to the first pending item or go idle.
"""

from craft_queue.orchestrator.driver import DriverRunSummary, PollingDriver
from craft_queue.orchestrator.engine import Orchestrator
from craft_queue.orchestrator.models import (
    DispatchMode,
    SessionPhase,
    SessionState,
    StartOutcome,
    StartResult,
    TickSummary,
)

__all__ = [
    "DispatchMode",
    "DriverRunSummary",
    "Orchestrator",
    "PollingDriver",
    "SessionPhase",
    "SessionState",
    "StartOutcome",
    "StartResult",
    "TickSummary",
]
