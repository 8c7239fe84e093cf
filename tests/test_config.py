from __future__ import annotations

from pathlib import Path

import allure
import pytest

from craft_queue.config import AgentSettings, OrchestratorSettings, Settings, clamp_polling_interval

pytestmark = [
    allure.epic("Craft Queue"),
    allure.feature("Configuration"),
]

_ENV_KEYS = (
    "CRAFT_QUEUE_AUTO_CRAFT_ENTIRE_LIST",
    "CRAFT_QUEUE_AUTO_REMOVE_COMPLETED",
    "CRAFT_QUEUE_POLLING_INTERVAL_MS",
    "CRAFT_QUEUE_STALL_TIMEOUT_TICKS",
    "CRAFT_QUEUE_AGENT_COMMAND_TEMPLATE",
    "CRAFT_QUEUE_AGENT_CALL_TIMEOUT_SECONDS",
    "CRAFT_QUEUE_CATALOG_PATH",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_from_env_defaults() -> None:
    settings = Settings.from_env()

    assert settings.queue.auto_craft_entire_list is True
    assert settings.queue.auto_remove_completed is True
    assert settings.orchestrator.polling_interval_ms == 500
    assert settings.orchestrator.stall_timeout_ticks == 0
    assert settings.agent.command_template == ""
    assert settings.agent.call_timeout_seconds == 2.0
    assert settings.catalog_path is None


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRAFT_QUEUE_AUTO_CRAFT_ENTIRE_LIST", "no")
    monkeypatch.setenv("CRAFT_QUEUE_AUTO_REMOVE_COMPLETED", "0")
    monkeypatch.setenv("CRAFT_QUEUE_POLLING_INTERVAL_MS", "250")
    monkeypatch.setenv("CRAFT_QUEUE_STALL_TIMEOUT_TICKS", "40")
    monkeypatch.setenv("CRAFT_QUEUE_AGENT_COMMAND_TEMPLATE", " agent {primitive} {args} ")
    monkeypatch.setenv("CRAFT_QUEUE_AGENT_CALL_TIMEOUT_SECONDS", "0.5")
    monkeypatch.setenv("CRAFT_QUEUE_CATALOG_PATH", "recipes.json")

    settings = Settings.from_env()

    assert settings.queue.auto_craft_entire_list is False
    assert settings.queue.auto_remove_completed is False
    assert settings.orchestrator.polling_interval_ms == 250
    assert settings.orchestrator.stall_timeout_ticks == 40
    assert settings.agent.command_template == "agent {primitive} {args}"
    assert settings.agent.call_timeout_seconds == 0.5
    assert settings.catalog_path == Path("recipes.json")


@pytest.mark.parametrize(("raw", "expected"), [("10", 100), ("100", 100), ("99999", 5000)])
def test_polling_interval_is_clamped(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    expected: int,
) -> None:
    monkeypatch.setenv("CRAFT_QUEUE_POLLING_INTERVAL_MS", raw)

    assert Settings.from_env().orchestrator.polling_interval_ms == expected
    assert clamp_polling_interval(int(raw)) == expected


def test_invalid_bool_names_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRAFT_QUEUE_AUTO_REMOVE_COMPLETED", "maybe")

    with pytest.raises(ValueError, match="CRAFT_QUEUE_AUTO_REMOVE_COMPLETED"):
        Settings.from_env()


def test_invalid_int_names_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRAFT_QUEUE_POLLING_INTERVAL_MS", "fast")

    with pytest.raises(ValueError, match="CRAFT_QUEUE_POLLING_INTERVAL_MS"):
        Settings.from_env()


def test_validate_rejects_negative_stall_ticks() -> None:
    settings = Settings(orchestrator=OrchestratorSettings(stall_timeout_ticks=-1))

    with pytest.raises(ValueError, match="STALL_TIMEOUT_TICKS"):
        settings.validate()


def test_validate_rejects_non_positive_call_timeout() -> None:
    settings = Settings(agent=AgentSettings(call_timeout_seconds=0))

    with pytest.raises(ValueError, match="CALL_TIMEOUT_SECONDS"):
        settings.validate()
