"""Controllers for craft-queue CLI commands."""

from __future__ import annotations

import json
import queue
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from craft_queue.agent import AgentBinding, AgentBridge, CliAgentBinding, SimulatedAgent
from craft_queue.config import Settings
from craft_queue.orchestrator import DispatchMode, Orchestrator, PollingDriver
from craft_queue.queue import MaterialOverride, WorkItemStatus, WorkQueue
from craft_queue.queue.services import EnqueueRecipe, QueueService
from craft_queue.recipes import JsonRecipeCatalog

_SENTINEL = object()

MODE_CHOICES = {
    "all": DispatchMode.SEQUENTIAL_ALL,
    "single": DispatchMode.SINGLE,
}


class CommandRejectedError(RuntimeError):
    """User-facing command could not be carried out."""


@dataclass(slots=True)
class AgentTargetCommand:
    """Which agent binding a command talks to."""

    agent_command: str | None = None
    simulated: bool = False
    work_polls: int = 3


@dataclass(slots=True)
class RunQueueCommand:
    """CLI input for one orchestrated queue run."""

    plan_path: Path
    target: AgentTargetCommand
    catalog_path: Path | None = None
    mode: str | None = None
    max_ticks: int | None = None


class CraftQueueCliController:
    """Wires settings, bridge, queue, orchestrator and driver for CLI operations."""

    def run_queue(self, command: RunQueueCommand) -> Iterator[str]:
        settings = Settings.from_env()
        settings.validate()
        catalog = JsonRecipeCatalog(command.catalog_path or settings.catalog_path)
        work_queue = WorkQueue()
        service = QueueService(queue=work_queue, catalog=catalog)
        for entry in load_plan(command.plan_path):
            item = service.enqueue_recipe(entry)
            yield f"Queued: {item.quantity}x {item.display_name} (recipe {item.recipe_id})"

        bridge = AgentBridge(_build_binding(settings, command.target))
        progress: queue.Queue[object] = queue.Queue()
        orchestrator = Orchestrator(
            queue=work_queue,
            bridge=bridge,
            auto_craft_entire_list=settings.queue.auto_craft_entire_list,
            auto_remove_completed=settings.queue.auto_remove_completed,
            stall_timeout_ticks=settings.orchestrator.stall_timeout_ticks,
            on_event=progress.put,
        )
        started = orchestrator.start(MODE_CHOICES.get(command.mode or ""))
        if not started.started:
            raise CommandRejectedError(f"Cannot start: {started.message}")

        driver = PollingDriver(
            bridge=bridge,
            orchestrator=orchestrator,
            interval_ms=settings.orchestrator.polling_interval_ms,
        )
        result_holder: list[Any] = []
        error_holder: list[BaseException] = []

        def _run() -> None:
            try:
                result_holder.append(
                    driver.run_loop(max_ticks=command.max_ticks, until_idle=True),
                )
            except Exception as exc:  # noqa: BLE001
                error_holder.append(exc)
            finally:
                progress.put(_SENTINEL)

        worker_thread = threading.Thread(target=_run, daemon=True, name="craft-queue-run")
        worker_thread.start()
        while True:
            message = progress.get()
            if message is _SENTINEL:
                break
            yield str(message)
        worker_thread.join(timeout=10)

        if error_holder:
            raise CommandRejectedError(f"Queue run failed: {error_holder[0]}")

        if orchestrator.state.running:
            orchestrator.stop()
            yield "Tick limit reached; orchestrator disengaged."

        summary = result_holder[0] if result_holder else None
        ticks = summary.ticks if summary is not None else 0
        completed = summary.completed if summary is not None else 0
        yield (
            "Run summary: "
            f"ticks={ticks} completed={completed} "
            f"pending={work_queue.count_by_status(WorkItemStatus.PENDING)} "
            f"active={work_queue.count_by_status(WorkItemStatus.ACTIVE)} "
            f"failed={work_queue.count_by_status(WorkItemStatus.FAILED)} "
            f"remaining={len(work_queue)}"
        )

    def probe(self, command: AgentTargetCommand) -> Iterator[str]:
        settings = Settings.from_env()
        settings.validate()
        bridge = AgentBridge(_build_binding(settings, command))
        if not bridge.available:
            yield "Agent: not available"
            return
        status = bridge.refresh_status()
        yield "Agent: available"
        yield f"busy={status.busy} list_running={status.list_running} paused={status.paused}"

    def pause(self, command: AgentTargetCommand) -> Iterator[str]:
        yield from self._send(command, action="pause")

    def resume(self, command: AgentTargetCommand) -> Iterator[str]:
        yield from self._send(command, action="resume")

    def stop(self, command: AgentTargetCommand) -> Iterator[str]:
        yield from self._send(command, action="stop")

    def _send(self, command: AgentTargetCommand, *, action: str) -> list[str]:
        settings = Settings.from_env()
        settings.validate()
        bridge = AgentBridge(_build_binding(settings, command))
        if not bridge.available:
            raise CommandRejectedError("Agent is not available.")
        if action == "pause":
            bridge.set_pause(True)
            return ["Paused."]
        if action == "resume":
            bridge.set_pause(False)
            return ["Resumed."]
        bridge.request_stop(True)
        return ["Stop requested."]


def load_plan(path: Path) -> list[EnqueueRecipe]:
    """Read a JSON queue plan: ``{"items": [{"recipe_id": 1, "quantity": 2}, ...]}``."""

    try:
        payload = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError) as error:
        raise CommandRejectedError(f"Cannot read plan {path}: {error}") from error

    raw_items = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(raw_items, list):
        raise CommandRejectedError(f"Plan {path} must contain an 'items' list.")

    entries: list[EnqueueRecipe] = []
    for index, raw in enumerate(raw_items):
        try:
            materials = raw.get("materials")
            entries.append(
                EnqueueRecipe(
                    recipe_id=int(raw["recipe_id"]),
                    quantity=int(raw.get("quantity", 1)),
                    name=raw.get("name"),
                    materials=(
                        None
                        if materials is None
                        else [_parse_material(material) for material in materials]
                    ),
                ),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as error:
            raise CommandRejectedError(f"Invalid plan item #{index}: {error}") from error
    return entries


def _parse_material(raw: dict[str, Any]) -> MaterialOverride:
    return MaterialOverride(
        material_id=int(raw["material_id"]),
        name=str(raw.get("name", "")),
        low_grade_count=int(raw.get("low_grade_count", 0)),
        high_grade_count=int(raw.get("high_grade_count", 0)),
    )


def _build_binding(settings: Settings, target: AgentTargetCommand) -> AgentBinding:
    if target.simulated:
        return SimulatedAgent(work_polls=target.work_polls)
    template = (target.agent_command or settings.agent.command_template).strip()
    if not template:
        raise CommandRejectedError(
            "No agent binding configured. "
            "Set CRAFT_QUEUE_AGENT_COMMAND_TEMPLATE, pass --agent-command, or use --simulated.",
        )
    try:
        return CliAgentBinding(template, timeout_seconds=settings.agent.call_timeout_seconds)
    except ValueError as error:
        raise CommandRejectedError(str(error)) from error
