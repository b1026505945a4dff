"""Agent service wiring -- builds the store, LLM client, agent and loop.

Shared by the headless ``bu-agent run`` command and the API server lifespan
so both start and stop the agent the same way:

1. Create (or accept) the event store
2. Create the LLM client (requires ``llm.api_endpoint``)
3. Create the agent (generates its key pair; failure is fatal)
4. Write the agent's initial event (failure is logged, not fatal)
5. Hand back a ``DecisionLoop`` ready to ``run()``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from bu_agent.agent_runtime.agent import UniverseAgent
from bu_agent.agent_runtime.execution.loop import DecisionLoop
from bu_agent.agent_runtime.llm import LLMClient
from bu_agent.agent_runtime.log import bind_agent
from bu_agent.ledger.crypto import LedgerError
from bu_agent.ledger.store.memory import InMemoryEventStore

if TYPE_CHECKING:
    import httpx

    from bu_agent.agent_runtime.settings import UniverseSettings
    from bu_agent.ledger.store.base import EventStore


@dataclass
class AgentService:
    """Everything one running agent needs, with a single ``aclose``."""

    store: EventStore
    llm: LLMClient
    agent: UniverseAgent
    loop: DecisionLoop
    _closed: bool = field(default=False, repr=False)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.loop.stop()
        await self.llm.aclose()
        logger.info("Agent stopped (public_key={})", self.agent.public_key_hex)


def start_agent(
    settings: UniverseSettings,
    *,
    store: EventStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AgentService:
    """Build and initialise an agent.

    Raises ``ValueError`` if the LLM endpoint is not configured and
    ``KeyGenerationError`` if the agent cannot get a key pair.
    """
    store = store if store is not None else InMemoryEventStore()
    llm = LLMClient(settings.llm, http_client=http_client)
    agent = UniverseAgent(settings.agent, store, llm)
    bind_agent(agent.public_key_hex)
    logger.info("Agent initialized (public_key={})", agent.public_key_hex)

    try:
        agent.create_initial_event()
    except LedgerError as exc:
        logger.error("Failed to create initial event: {}", exc)

    loop = DecisionLoop(agent, settings.agent.decision_interval)
    return AgentService(store=store, llm=llm, agent=agent, loop=loop)
