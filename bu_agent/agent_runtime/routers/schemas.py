"""API response schemas.

Separate from the ledger models because responses add derived fields (the
hash identifier) that are never part of the signed wire format.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from bu_agent.ledger.models import Event

if TYPE_CHECKING:
    from bu_agent.ledger.store.base import EventStore


class EventResponse(Event):
    hash: str


class AgentStats(BaseModel):
    public_key: str
    last_event_hash: str | None = None
    total_events: int
    known_agents: int


def to_response(store: EventStore, event: Event) -> EventResponse:
    return EventResponse(hash=store.hash_event(event), **event.model_dump())
