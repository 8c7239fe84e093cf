"""Runtime configuration for queue orchestration and the agent binding."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_POLLING_INTERVAL_MS = 500
MIN_POLLING_INTERVAL_MS = 100
MAX_POLLING_INTERVAL_MS = 5_000


@dataclass(slots=True)
class QueueSettings:
    """Queue behaviour policy flags."""

    auto_craft_entire_list: bool = True
    auto_remove_completed: bool = True


@dataclass(slots=True)
class OrchestratorSettings:
    """Polling and stall policy for the orchestration loop."""

    polling_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
    stall_timeout_ticks: int = 0


@dataclass(slots=True)
class AgentSettings:
    """External agent binding settings."""

    command_template: str = ""
    call_timeout_seconds: float = 2.0


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    queue: QueueSettings = field(default_factory=QueueSettings)
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    agent: AgentSettings = field(default_factory=AgentSettings)
    catalog_path: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults matching the shipped config."""

        catalog_raw = os.getenv("CRAFT_QUEUE_CATALOG_PATH", "").strip()
        return cls(
            queue=QueueSettings(
                auto_craft_entire_list=_env_bool(
                    "CRAFT_QUEUE_AUTO_CRAFT_ENTIRE_LIST",
                    default=True,
                ),
                auto_remove_completed=_env_bool(
                    "CRAFT_QUEUE_AUTO_REMOVE_COMPLETED",
                    default=True,
                ),
            ),
            orchestrator=OrchestratorSettings(
                polling_interval_ms=clamp_polling_interval(
                    _env_int("CRAFT_QUEUE_POLLING_INTERVAL_MS", DEFAULT_POLLING_INTERVAL_MS),
                ),
                stall_timeout_ticks=_env_int("CRAFT_QUEUE_STALL_TIMEOUT_TICKS", 0),
            ),
            agent=AgentSettings(
                command_template=os.getenv("CRAFT_QUEUE_AGENT_COMMAND_TEMPLATE", "").strip(),
                call_timeout_seconds=_env_float("CRAFT_QUEUE_AGENT_CALL_TIMEOUT_SECONDS", 2.0),
            ),
            catalog_path=Path(catalog_raw) if catalog_raw else None,
        )

    def validate(self) -> None:
        """Raise configuration error for values the orchestrator cannot run with."""

        if self.orchestrator.stall_timeout_ticks < 0:
            raise ValueError("CRAFT_QUEUE_STALL_TIMEOUT_TICKS must be >= 0.")
        if self.agent.call_timeout_seconds <= 0:
            raise ValueError("CRAFT_QUEUE_AGENT_CALL_TIMEOUT_SECONDS must be > 0.")


def clamp_polling_interval(value: int) -> int:
    """Clamp polling interval to the supported millisecond range."""

    return max(MIN_POLLING_INTERVAL_MS, min(MAX_POLLING_INTERVAL_MS, value))


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {value!r}") from error
