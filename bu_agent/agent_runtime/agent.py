"""A single Blockchain Universe agent.

The agent owns an in-memory Ed25519 key pair (generated at construction,
never persisted), writes its events to the shared ledger and remembers the
hash of its own last event so every new event is causally linked to it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from bu_agent.agent_runtime.execution.prompt import render_decision_prompt
from bu_agent.ledger.crypto import generate_keypair
from bu_agent.ledger.models import EventKind

if TYPE_CHECKING:
    from bu_agent.agent_runtime.llm import LLMClient
    from bu_agent.agent_runtime.settings import AgentSettings
    from bu_agent.ledger.models import Event
    from bu_agent.ledger.store.base import EventStore

AGENT_VERSION = "1.0.0"
MAX_DESCRIPTION_CHARS = 100


class UniverseAgent:
    """Creates signed events on the ledger, driven by LLM decisions.

    Raises ``KeyGenerationError`` from the constructor if no key pair can be
    generated; that is fatal for the process.
    """

    def __init__(self, settings: AgentSettings, store: EventStore, llm_client: LLMClient) -> None:
        self._settings = settings
        self._store = store
        self._llm = llm_client
        self._public_key, self._private_key = generate_keypair()
        self.last_event_hash: str | None = None

    @property
    def public_key_hex(self) -> str:
        return self._public_key.hex()

    @property
    def agent_id(self) -> str:
        """Short identifier: the first 16 hex characters of the public key."""
        return self.public_key_hex[:16]

    # -- Events ----------------------------------------------------------------

    def _publish(self, event_type: str, description: str, payload: dict[str, str]) -> Event:
        parents = [self.last_event_hash] if self.last_event_hash else []
        event = self._store.create_event(
            event_type,
            description,
            payload,
            parents,
            self._public_key,
            self._private_key,
        )
        self.last_event_hash = self._store.add_event(event)
        return event

    def create_initial_event(self) -> Event:
        """Announce this agent on the ledger."""
        event = self._publish(
            EventKind.INITIALIZATION.value,
            "Agent initialization in Blockchain Universe",
            {"agent_id": self.agent_id, "state": "active", "version": AGENT_VERSION},
        )
        logger.info("Initial event created: {}", self.last_event_hash)
        return event

    def build_prompt(self) -> str:
        return render_decision_prompt(
            self._store.get_recent_events(self._settings.recent_events),
            self._store.get_agents(),
            last_event_hash=self.last_event_hash,
            max_chars=MAX_DESCRIPTION_CHARS,
        )

    async def make_decision(self) -> Event:
        """Ask the LLM for the next event and append it to the ledger.

        Raises ``LLMError`` if no decision could be obtained, and the ledger
        errors (``SigningError`` / ``VerificationError``) if the event could
        not be written.  The agent's state is unchanged on failure.
        """
        prompt = self.build_prompt()
        logger.debug("Requesting LLM decision (prompt_length={})", len(prompt))

        decision = (await self._llm.get_completion(prompt)).strip()
        logger.info("LLM decision received: {}", decision)

        event = self._publish(
            EventKind.STATE_CHANGE.value,
            decision,
            {"agent_id": self.agent_id, "action": "llm_decision"},
        )
        logger.info("Decision event created: {}", self.last_event_hash)
        return event

    # -- Stats -----------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        return {
            "public_key": self.public_key_hex,
            "last_event_hash": self.last_event_hash,
            "total_events": len(self._store),
            "known_agents": len(self._store.get_agents()),
        }
