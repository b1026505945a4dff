"""In-memory event store.

Layout::

    _events    : hash -> Event        (deep copies, never handed out)
    _sequence  : hash -> int          (insertion order, recency tie-break)
    _registry  : AgentRegistry        (pub_key -> AgentInfo)

All three are guarded by a single ``ReadWriteLock``.  ``add_event`` verifies
and inserts under the exclusive lock, so a rejected event leaves every map
unchanged.  Readers share the lock; ``get_event_chain`` holds it for the whole
traversal so it walks one consistent snapshot.

Hash identifiers cover the payload only.  Two events with identical payloads
share an identifier and the later one replaces the earlier.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger

from bu_agent.ledger import crypto
from bu_agent.ledger.lock import ReadWriteLock
from bu_agent.ledger.models import Event, EventData, format_timestamp, parse_timestamp
from bu_agent.ledger.registry import AgentRegistry

if TYPE_CHECKING:
    from bu_agent.ledger.models import AgentInfo

_OLDEST = datetime.min.replace(tzinfo=UTC)


class InMemoryEventStore:
    """Process-lifetime implementation of the EventStore protocol."""

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        self._registry = AgentRegistry()
        self._lock = ReadWriteLock()

    # -- Create ----------------------------------------------------------------

    def create_event(
        self,
        event_type: str,
        description: str,
        payload: dict[str, str],
        parents: list[str],
        public_key: bytes,
        private_key: bytes,
    ) -> Event:
        data = EventData(
            type=event_type,
            description=description,
            payload=dict(payload),
            timestamp=format_timestamp(),
        )
        signature = crypto.sign(crypto.hash_payload(data), private_key)
        return Event(
            data=data,
            parents=list(parents),
            signature=signature.hex(),
            author_pubkey=public_key.hex(),
        )

    # -- Write -----------------------------------------------------------------

    def add_event(self, event: Event) -> str:
        with self._lock.write():
            event_hash = self._verify(event)

            stored = event.model_copy(deep=True)
            replaced = event_hash in self._events
            self._events[event_hash] = stored
            self._sequence[event_hash] = next(self._counter)
            self._registry.record(stored.author_pubkey, event_hash, datetime.now(tz=UTC))

            dangling = [p for p in stored.parents if p not in self._events]

        if replaced:
            logger.debug("Event {} replaced an event with an identical payload", event_hash[:16])
        if dangling:
            logger.debug("Event {} references {} unknown parent(s)", event_hash[:16], len(dangling))
        logger.debug("Event added: hash={} type={}", event_hash[:16], stored.data.type)
        return event_hash

    def _verify(self, event: Event) -> str:
        """Verify *event*'s signature and return its recomputed hash."""
        try:
            public_key = bytes.fromhex(event.author_pubkey)
        except ValueError as exc:
            msg = f"invalid public key: {exc}"
            raise crypto.VerificationError(msg) from exc
        if len(public_key) != crypto.PUBLIC_KEY_SIZE:
            msg = f"invalid public key length {len(public_key)}"
            raise crypto.VerificationError(msg)

        try:
            signature = bytes.fromhex(event.signature)
        except ValueError as exc:
            msg = f"invalid signature: {exc}"
            raise crypto.VerificationError(msg) from exc
        if len(signature) != crypto.SIGNATURE_SIZE:
            msg = f"invalid signature length {len(signature)}"
            raise crypto.VerificationError(msg)

        event_hash = crypto.hash_payload(event.data)
        if not crypto.verify(event_hash, signature, public_key):
            msg = "signature verification failed"
            raise crypto.VerificationError(msg)
        return event_hash

    # -- Read ------------------------------------------------------------------

    def get_event(self, event_hash: str) -> Event | None:
        with self._lock.read():
            event = self._events.get(event_hash)
            return event.model_copy(deep=True) if event is not None else None

    def get_recent_events(self, limit: int) -> list[Event]:
        if limit <= 0:
            return []
        with self._lock.read():
            ordered = sorted(self._events, key=self._recency_key, reverse=True)
            return [self._events[h].model_copy(deep=True) for h in ordered[:limit]]

    def _recency_key(self, event_hash: str) -> tuple[datetime, int]:
        created = parse_timestamp(self._events[event_hash].data.timestamp) or _OLDEST
        return created, self._sequence[event_hash]

    def get_agents(self) -> dict[str, AgentInfo]:
        with self._lock.read():
            return self._registry.snapshot()

    def get_event_chain(self, start_hash: str, max_depth: int) -> list[Event]:
        chain: list[Event] = []
        visited: set[str] = set()
        stack = [(start_hash, 0)]

        with self._lock.read():
            while stack:
                event_hash, depth = stack.pop()
                if depth >= max_depth or event_hash in visited:
                    continue
                event = self._events.get(event_hash)
                if event is None:
                    continue

                visited.add(event_hash)
                chain.append(event.model_copy(deep=True))
                # Reversed so the first parent is explored first.
                stack.extend((parent, depth + 1) for parent in reversed(event.parents))

        return chain

    # -- Utilities -------------------------------------------------------------

    def hash_event(self, event: Event) -> str:
        return crypto.hash_payload(event.data)

    @property
    def event_count(self) -> int:
        with self._lock.read():
            return len(self._events)

    def __len__(self) -> int:
        return self.event_count
