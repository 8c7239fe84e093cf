"""CLI entrypoint for craft-queue."""

import logging
from collections.abc import Iterable
from pathlib import Path

import rich_click as click

from craft_queue import __version__
from craft_queue.controllers import (
    MODE_CHOICES,
    AgentTargetCommand,
    CommandRejectedError,
    CraftQueueCliController,
    RunQueueCommand,
)

click.rich_click.USE_MARKDOWN = True
CONTROLLER = CraftQueueCliController()

_agent_command_option = click.option(
    "--agent-command",
    default=None,
    help="Agent call template with {primitive} and {args}, e.g. `artisan-ipc {primitive} {args}`.",
)
_simulated_option = click.option(
    "--simulated",
    is_flag=True,
    default=False,
    help="Use the built-in simulated agent instead of a real binding.",
)
_work_polls_option = click.option(
    "--work-polls",
    type=click.IntRange(min=1),
    default=3,
    show_default=True,
    help="Simulated agent: busy polls per craft order.",
)


@click.group()
@click.version_option(version=__version__, prog_name="craft-queue")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def craft_queue(log_level: str) -> None:
    """Craft queue CLI."""

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@craft_queue.command("run")
@click.option(
    "--plan",
    "plan_path",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    required=True,
    help="JSON plan with the items to queue.",
)
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="JSON recipe catalog used for names and materials.",
)
@click.option(
    "--mode",
    type=click.Choice(sorted(MODE_CHOICES)),
    default=None,
    help="`all` crafts the whole queue, `single` only the next item. Defaults from config.",
)
@click.option(
    "--max-ticks",
    type=click.IntRange(min=1),
    default=None,
    help="Disengage after this many polling ticks.",
)
@_agent_command_option
@_simulated_option
@_work_polls_option
def run(  # noqa: PLR0913
    plan_path: Path,
    catalog_path: Path | None,
    mode: str | None,
    max_ticks: int | None,
    agent_command: str | None,
    simulated: bool,
    work_polls: int,
) -> None:
    """Queue the plan and drive the agent through it until the queue is done."""

    _emit_lines(
        CONTROLLER.run_queue(
            RunQueueCommand(
                plan_path=plan_path,
                catalog_path=catalog_path,
                mode=mode,
                max_ticks=max_ticks,
                target=AgentTargetCommand(
                    agent_command=agent_command,
                    simulated=simulated,
                    work_polls=work_polls,
                ),
            ),
        ),
    )


@craft_queue.command("probe")
@_agent_command_option
@_simulated_option
def probe(agent_command: str | None, simulated: bool) -> None:
    """Check whether the agent responds and show its status flags."""

    _emit_lines(
        CONTROLLER.probe(AgentTargetCommand(agent_command=agent_command, simulated=simulated)),
    )


@craft_queue.command("pause")
@_agent_command_option
def pause(agent_command: str | None) -> None:
    """Pause the agent's crafting list."""

    _emit_lines(CONTROLLER.pause(AgentTargetCommand(agent_command=agent_command)))


@craft_queue.command("resume")
@_agent_command_option
def resume(agent_command: str | None) -> None:
    """Resume the agent's crafting list."""

    _emit_lines(CONTROLLER.resume(AgentTargetCommand(agent_command=agent_command)))


@craft_queue.command("stop")
@_agent_command_option
def stop(agent_command: str | None) -> None:
    """Ask the agent to stop its current work."""

    _emit_lines(CONTROLLER.stop(AgentTargetCommand(agent_command=agent_command)))


def _emit_lines(lines: Iterable[str]) -> None:
    try:
        for line in lines:
            click.echo(line)
    except (CommandRejectedError, ValueError) as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":  # pragma: no cover
    craft_queue()
