"""Ledger data models.

``Event`` is the wire format shared by every agent in the universe::

    {
      "data": {"type": ..., "description": ..., "payload": {...}, "timestamp": ...},
      "parents": [...],
      "signature": "<hex>",
      "author_pubkey": "<hex>"
    }

Only ``data`` contributes to the event's hash identifier.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
"""Fixed-precision RFC 3339 UTC timestamp (microseconds, ``Z`` suffix)."""


def format_timestamp(moment: datetime | None = None) -> str:
    """Format *moment* (default: now) in the ledger timestamp format."""
    moment = moment or datetime.now(tz=UTC)
    return moment.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp.  Returns ``None`` if unparseable."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class EventKind(StrEnum):
    """Event types created by the agent runtime."""

    INITIALIZATION = "initialization"
    STATE_CHANGE = "state_change"


class EventData(BaseModel):
    """The hashed and signed part of an event."""

    type: str
    description: str = ""
    payload: dict[str, str] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=format_timestamp)

    @field_validator("payload", mode="before")
    @classmethod
    def _null_payload(cls, value: object) -> object:
        # Peers that sign a nil map send "payload": null. It is read as {} and
        # hashed as {}, so such events fail verification here.
        return {} if value is None else value


class Event(BaseModel):
    """A signed ledger event."""

    data: EventData
    parents: list[str] = Field(default_factory=list, description="Hash identifiers of causal parents")
    signature: str = ""
    author_pubkey: str = ""


class AgentInfo(BaseModel):
    """Last known activity of an agent, keyed by its public key."""

    pub_key: str
    last_event_hash: str
    last_seen: datetime
