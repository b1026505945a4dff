"""Agent configuration loaded from a YAML file and BU_* environment variables."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(ValueError):
    """The configuration file is missing or malformed."""


_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str) -> float:
    """Parse a Go-style duration (``"30s"``, ``"1m30s"``, ``"500ms"``) into seconds."""
    text = value.strip()
    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        msg = f"invalid duration: {value!r}"
        raise ValueError(msg)
    return total


class AgentSettings(BaseModel):
    decision_interval: float = Field(default=30.0, ge=1.0)
    """Seconds between decisions.  Accepts numbers or duration strings like ``"30s"``."""

    max_event_chain: int = Field(default=100, ge=1)
    """Default depth for chain traversals served by the API."""

    recent_events: int = Field(default=5, ge=1)
    """Number of recent events shown to the LLM in each decision prompt."""

    @field_validator("decision_interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return parse_duration(value)
        return value


class LLMSettings(BaseModel):
    api_endpoint: str | None = None
    """Completion endpoint URL.  Required to run the agent."""

    api_key: SecretStr | None = None
    model: str = "llama3.2"
    max_tokens: int = Field(default=150, ge=10)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=30.0, gt=0)


class UniverseSettings(BaseSettings):
    """Blockchain Universe agent settings.

    Environment variables use the ``BU_`` prefix and ``__`` for nested
    sections, e.g. ``BU_LOG_LEVEL=DEBUG`` or ``BU_LLM__API_ENDPOINT=...``.
    """

    model_config = SettingsConfigDict(
        env_prefix="BU_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Agent -----------------------------------------------------------------
    agent: AgentSettings = Field(default_factory=AgentSettings)

    # -- LLM -------------------------------------------------------------------
    llm: LLMSettings = Field(default_factory=LLMSettings)

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000


def load_settings(config_path: str | Path | None = None) -> UniverseSettings:
    """Load settings from an optional YAML file plus the environment.

    Values present in the file take precedence; anything the file leaves out
    falls back to ``BU_*`` environment variables, then to defaults.
    """
    if config_path is None:
        return UniverseSettings()

    path = Path(config_path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        msg = f"config file not found: {path}"
        raise ConfigError(msg) from None
    except yaml.YAMLError as exc:
        msg = f"failed to parse config file {path}: {exc}"
        raise ConfigError(msg) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        msg = f"config file {path} must contain a mapping"
        raise ConfigError(msg)

    # Merge nested sections with their env counterparts instead of replacing them.
    env = UniverseSettings()
    merged = env.model_dump()
    for key, value in raw.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value

    try:
        return UniverseSettings.model_validate(merged)
    except ValidationError as exc:
        msg = f"invalid configuration in {path}: {exc}"
        raise ConfigError(msg) from exc


EXAMPLE_CONFIG = """\
# Blockchain Universe Agent Configuration

agent:
  decision_interval: 30s
  max_event_chain: 100
  recent_events: 5

llm:
  api_endpoint: "http://localhost:11434/v1/completions"
  api_key: ""
  model: "llama3.2"
  max_tokens: 150
  temperature: 0.7
  timeout_seconds: 30
"""


def example_config() -> str:
    """Return an example YAML configuration file."""
    return EXAMPLE_CONFIG


@lru_cache(maxsize=1)
def get_settings() -> UniverseSettings:
    """Return a cached settings instance read from the environment.

    Call ``get_settings.cache_clear()`` in tests after overriding env vars.
    """
    return UniverseSettings()
