"""Event endpoints (read-only, RPC-style).

Thin HTTP adapter over the event store.  Every returned event carries its
hash identifier alongside the wire-format fields.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from bu_agent.agent_runtime.deps import Settings, Store
from bu_agent.agent_runtime.routers.schemas import EventResponse, to_response

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/recent", response_model=list[EventResponse])
async def list_recent_events(
    store: Store,
    limit: int = Query(10, ge=1, le=1000, description="Maximum number of events."),
) -> list[EventResponse]:
    """List the most recent events, newest first."""
    return [to_response(store, event) for event in store.get_recent_events(limit)]


@router.get("/{event_hash}/get", response_model=EventResponse)
async def get_event(event_hash: str, store: Store) -> EventResponse:
    event = store.get_event(event_hash)
    if event is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Event '{event_hash}' not found.")
    return to_response(store, event)


@router.get("/{event_hash}/chain", response_model=list[EventResponse])
async def get_event_chain(
    event_hash: str,
    store: Store,
    settings: Settings,
    max_depth: int | None = Query(None, ge=1, description="Defaults to agent.max_event_chain."),
) -> list[EventResponse]:
    """Walk an event's ancestors, depth first."""
    depth = max_depth or settings.agent.max_event_chain
    chain = store.get_event_chain(event_hash, depth)
    if not chain:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Event '{event_hash}' not found.")
    return [to_response(store, event) for event in chain]
