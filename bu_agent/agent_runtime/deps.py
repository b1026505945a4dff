"""FastAPI dependency injection for the ledger and the running agent.

Usage in route handlers::

    @router.get("/recent")
    async def recent(store: Store, limit: int = 10) -> list[EventResponse]:
        ...

``get_agent`` raises HTTP 503 when the server was started without an agent
(for example when no LLM endpoint is configured).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from bu_agent.agent_runtime.agent import UniverseAgent
from bu_agent.agent_runtime.settings import UniverseSettings
from bu_agent.ledger.store.base import EventStore


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def get_settings_dep(request: Request) -> UniverseSettings:
    return request.app.state.settings


def get_agent(request: Request) -> UniverseAgent:
    agent: UniverseAgent | None = getattr(request.app.state, "agent", None)
    if agent is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No agent running (BU_LLM__API_ENDPOINT is unset).",
        )
    return agent


# -- Annotated type aliases for concise route signatures ---------------------

Store = Annotated[EventStore, Depends(get_store)]
"""Annotated dependency: the shared event store."""

Settings = Annotated[UniverseSettings, Depends(get_settings_dep)]

Agent = Annotated[UniverseAgent, Depends(get_agent)]
"""Annotated dependency: the agent running in this process."""
