"""In-process agent registry.

Tracks, per author public key, the hash of the most recently accepted event
and when it was accepted.  Ephemeral -- empty on process restart.

The registry is owned by the event store and is only mutated from
``add_event`` while the store's write lock is held; it has no locking of its
own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from bu_agent.ledger.models import AgentInfo

if TYPE_CHECKING:
    from datetime import datetime


class AgentRegistry:
    """One ``AgentInfo`` per public key ever seen in an accepted event."""

    def __init__(self) -> None:
        self._agents: dict[str, AgentInfo] = {}

    # -- Mutation --------------------------------------------------------------

    def record(self, pub_key: str, event_hash: str, seen: datetime) -> AgentInfo:
        """Overwrite the entry for *pub_key* with its latest accepted event."""
        if pub_key not in self._agents:
            logger.debug("Registry: new agent {}", pub_key[:16])
        info = AgentInfo(pub_key=pub_key, last_event_hash=event_hash, last_seen=seen)
        self._agents[pub_key] = info
        return info

    # -- Query -----------------------------------------------------------------

    def get(self, pub_key: str) -> AgentInfo | None:
        info = self._agents.get(pub_key)
        return info.model_copy() if info is not None else None

    def snapshot(self) -> dict[str, AgentInfo]:
        """Return an independent copy of all entries."""
        return {key: info.model_copy() for key, info in self._agents.items()}

    def __contains__(self, pub_key: object) -> bool:
        return pub_key in self._agents

    def __len__(self) -> int:
        return len(self._agents)
