"""Shared test fixtures.

Everything runs in-process: the ledger is in memory and the completion
service is replaced by ``httpx.MockTransport`` or ``AsyncMock``.
"""

from __future__ import annotations

import pytest

from bu_agent.agent_runtime.settings import get_settings
from bu_agent.ledger.crypto import generate_keypair
from bu_agent.ledger.store.memory import InMemoryEventStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def keypair() -> tuple[bytes, bytes]:
    return generate_keypair()


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()
