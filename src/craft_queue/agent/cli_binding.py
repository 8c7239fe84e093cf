"""Subprocess-based agent binding driven by a command template."""

from __future__ import annotations

import shlex
import subprocess

from craft_queue.agent.base import COMMAND_PRIMITIVES, AgentCallError

_TRUE_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_TOKENS = frozenset({"0", "false", "no", "off"})


class CliAgentBinding:
    """Invoke agent primitives by running one short-lived command per call.

    The template must contain ``{primitive}`` and may contain ``{args}``,
    for example ``artisan-ipc {primitive} {args}``. Query primitives print
    a boolean token on stdout; commands may print nothing.
    """

    def __init__(self, command_template: str, *, timeout_seconds: float = 2.0) -> None:
        stripped = command_template.strip()
        if not stripped:
            raise ValueError("Agent command template is empty.")
        if "{primitive}" not in stripped:
            raise ValueError("Agent command template must include {primitive}.")
        if timeout_seconds <= 0:
            raise ValueError("Agent call timeout must be > 0.")
        self.command_template = stripped
        self.timeout_seconds = timeout_seconds

    def try_call(self, name: str, *args: object) -> object:
        argv = build_call_args(self.command_template, name, args)
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as error:
            raise AgentCallError(f"Agent command not found: {argv[0]}") from error
        except subprocess.TimeoutExpired as error:
            raise AgentCallError(
                f"Agent call {name} timed out after {self.timeout_seconds}s",
            ) from error
        except OSError as error:
            raise AgentCallError(f"Agent command failed to start: {error}") from error

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            raise AgentCallError(
                f"Agent call {name} exited with code {completed.returncode}: {stderr[:200]}",
            )
        return parse_call_output(name, completed.stdout or "")


def build_call_args(template: str, name: str, args: tuple[object, ...]) -> list[str]:
    """Render the template into argv for one primitive call."""

    rendered_args = " ".join(shlex.quote(_format_arg(arg)) for arg in args)
    try:
        rendered = template.format(primitive=shlex.quote(name), args=rendered_args)
    except (KeyError, IndexError) as error:
        raise AgentCallError(f"Unsupported command template placeholder: {error}") from error
    argv = shlex.split(rendered)
    if not argv:
        raise AgentCallError("Agent command template rendered empty command.")
    return argv


def parse_call_output(name: str, stdout: str) -> object:
    """Interpret stdout of one call; commands accept empty output."""

    token = stdout.strip().splitlines()[-1].strip().lower() if stdout.strip() else ""
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    if name in COMMAND_PRIMITIVES:
        return None
    raise AgentCallError(f"Agent call {name} returned unparsable output: {token[:80]!r}")


def _format_arg(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
