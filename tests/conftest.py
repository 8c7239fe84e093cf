"""Shared test fixtures."""

from __future__ import annotations

import pytest

from craft_queue.agent import AgentBridge, AgentCallError
from craft_queue.agent.base import CRAFT_ITEM, IS_BUSY, IS_LIST_PAUSED, IS_LIST_RUNNING
from craft_queue.queue import WorkQueue


class FakeAgent:
    """Scriptable agent binding that records every call."""

    def __init__(self) -> None:
        self.online = True
        self.busy = False
        self.list_running = False
        self.paused = False
        self.fail_calls: set[str] = set()
        self.calls: list[tuple[str, tuple[object, ...]]] = []

    @property
    def dispatched(self) -> list[tuple[object, ...]]:
        return [args for name, args in self.calls if name == CRAFT_ITEM]

    def commands(self, name: str) -> list[tuple[object, ...]]:
        return [args for call_name, args in self.calls if call_name == name]

    def set_running(self, running: bool) -> None:
        self.busy = running
        self.list_running = running

    def try_call(self, name: str, *args: object) -> object:
        self.calls.append((name, args))
        if not self.online:
            raise AgentCallError(f"fake agent offline ({name})")
        if name in self.fail_calls:
            raise RuntimeError(f"fake failure in {name}")
        if name == IS_BUSY:
            return self.busy
        if name == IS_LIST_RUNNING:
            return self.list_running
        if name == IS_LIST_PAUSED:
            return self.paused
        return None


@pytest.fixture()
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture()
def bridge(fake_agent: FakeAgent) -> AgentBridge:
    return AgentBridge(fake_agent)


@pytest.fixture()
def work_queue() -> WorkQueue:
    return WorkQueue()
