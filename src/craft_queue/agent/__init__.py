"""External crafting agent binding and bridge."""

from craft_queue.agent.base import AgentBinding, AgentCallError, AgentStatus
from craft_queue.agent.bridge import AgentBridge
from craft_queue.agent.cli_binding import CliAgentBinding
from craft_queue.agent.simulated import SimulatedAgent

__all__ = [
    "AgentBinding",
    "AgentBridge",
    "AgentCallError",
    "AgentStatus",
    "CliAgentBinding",
    "SimulatedAgent",
]
