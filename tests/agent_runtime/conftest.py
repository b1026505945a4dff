"""Shared fixtures for agent-runtime API tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bu_agent.agent_runtime.app import create_app
from bu_agent.agent_runtime.settings import AgentSettings, UniverseSettings
from bu_agent.ledger.store.memory import InMemoryEventStore


@pytest.fixture
def settings() -> UniverseSettings:
    return UniverseSettings(agent=AgentSettings(max_event_chain=2))


@pytest.fixture
def app(settings: UniverseSettings, store: InMemoryEventStore) -> FastAPI:
    """App wired to the test store with no running agent.

    The lifespan does NOT run under ``ASGITransport``, so state fields are
    pre-set here.  Tests that need an agent assign ``app.state.agent``.
    """
    application = create_app(settings)
    application.state.settings = settings
    application.state.store = store
    application.state.agent = None
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
