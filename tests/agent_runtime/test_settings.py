"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from bu_agent.agent_runtime.settings import (
    AgentSettings,
    ConfigError,
    UniverseSettings,
    example_config,
    get_settings,
    load_settings,
    parse_duration,
)

_ENV_VARS = (
    "BU_LOG_LEVEL",
    "BU_LLM__API_ENDPOINT",
    "BU_LLM__API_KEY",
    "BU_LLM__MODEL",
    "BU_AGENT__DECISION_INTERVAL",
    "BU_AGENT__RECENT_EVENTS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text,seconds",
    [
        ("30s", 30.0),
        ("1m", 60.0),
        ("1m30s", 90.0),
        ("1h", 3600.0),
        ("500ms", 0.5),
        ("1.5s", 1.5),
        (" 10s ", 10.0),
    ],
)
def test_parse_duration(text: str, seconds: float) -> None:
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "30", "thirty seconds", "10x", "s10", "5s garbage"])
def test_parse_duration_invalid(text: str) -> None:
    with pytest.raises(ValueError, match="invalid duration"):
        parse_duration(text)


@pytest.mark.parametrize("value,seconds", [("45s", 45.0), ("12", 12.0), (20, 20.0), (2.5, 2.5)])
def test_decision_interval_accepts_numbers_and_durations(value: object, seconds: float) -> None:
    assert AgentSettings(decision_interval=value).decision_interval == pytest.approx(seconds)


def test_decision_interval_minimum() -> None:
    with pytest.raises(ValueError):
        AgentSettings(decision_interval="500ms")


# ---------------------------------------------------------------------------
# Defaults / environment
# ---------------------------------------------------------------------------


def test_defaults() -> None:
    settings = UniverseSettings()
    assert settings.log_level == "INFO"
    assert settings.agent.decision_interval == 30.0
    assert settings.agent.max_event_chain == 100
    assert settings.agent.recent_events == 5
    assert settings.llm.api_endpoint is None
    assert settings.llm.model == "llama3.2"
    assert settings.llm.max_tokens == 150
    assert settings.llm.temperature == 0.7
    assert settings.llm.timeout_seconds == 30.0


def test_env_nested_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BU_LLM__API_ENDPOINT", "http://llm.test/v1/completions")
    monkeypatch.setenv("BU_LLM__API_KEY", "secret")
    monkeypatch.setenv("BU_AGENT__DECISION_INTERVAL", "1m")
    monkeypatch.setenv("BU_LOG_LEVEL", "DEBUG")

    settings = load_settings()
    assert settings.llm.api_endpoint == "http://llm.test/v1/completions"
    assert settings.llm.api_key.get_secret_value() == "secret"
    assert settings.agent.decision_interval == 60.0
    assert settings.log_level == "DEBUG"


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("BU_LLM__MODEL", "other")
    assert get_settings() is first

    get_settings.cache_clear()
    assert get_settings().llm.model == "other"


# ---------------------------------------------------------------------------
# YAML file
# ---------------------------------------------------------------------------


def test_load_example_config(tmp_path: Path) -> None:
    settings = load_settings(_write(tmp_path, example_config()))

    assert settings.agent.decision_interval == 30.0
    assert settings.agent.max_event_chain == 100
    assert settings.agent.recent_events == 5
    assert settings.llm.api_endpoint == "http://localhost:11434/v1/completions"
    assert settings.llm.api_key.get_secret_value() == ""
    assert settings.llm.model == "llama3.2"
    assert settings.llm.max_tokens == 150


def test_example_config_is_valid_yaml() -> None:
    raw = yaml.safe_load(example_config())
    assert set(raw) == {"agent", "llm"}


def test_file_overrides_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BU_LLM__MODEL", "from-env")
    path = _write(tmp_path, "llm:\n  model: from-file\n")

    assert load_settings(path).llm.model == "from-file"


def test_env_fills_gaps_in_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BU_LLM__API_ENDPOINT", "http://env.test/v1/completions")
    monkeypatch.setenv("BU_AGENT__RECENT_EVENTS", "9")
    path = _write(tmp_path, "llm:\n  model: from-file\nagent:\n  decision_interval: 5s\n")

    settings = load_settings(path)
    assert settings.llm.model == "from-file"
    assert settings.llm.api_endpoint == "http://env.test/v1/completions"
    assert settings.agent.decision_interval == 5.0
    assert settings.agent.recent_events == 9


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    settings = load_settings(_write(tmp_path, ""))
    assert settings.agent.decision_interval == 30.0


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "nope.yaml")


def test_malformed_yaml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed to parse"):
        load_settings(_write(tmp_path, "agent: [unclosed\n"))


def test_non_mapping_yaml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_settings(_write(tmp_path, "- just\n- a list\n"))


@pytest.mark.parametrize(
    "content",
    [
        "agent:\n  decision_interval: soon\n",
        "agent:\n  recent_events: 0\n",
        "llm:\n  temperature: 5\n",
        "llm:\n  max_tokens: 1\n",
    ],
)
def test_invalid_values(tmp_path: Path, content: str) -> None:
    with pytest.raises(ConfigError, match="invalid configuration"):
        load_settings(_write(tmp_path, content))
