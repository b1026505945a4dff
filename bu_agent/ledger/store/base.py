"""Event store interface.

The store owns the event map (hash identifier -> ``Event``) and the agent
registry.  Callers never hold references into either map: every accessor
returns independent copies.

``add_event`` is the only mutation and is atomic with respect to all readers.
Implementations are synchronous; critical sections are short and never wait
on I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bu_agent.ledger.models import AgentInfo, Event


@runtime_checkable
class EventStore(Protocol):
    """Protocol for signed-event storage with ancestor traversal."""

    def create_event(
        self,
        event_type: str,
        description: str,
        payload: dict[str, str],
        parents: list[str],
        public_key: bytes,
        private_key: bytes,
    ) -> Event:
        """Build and sign a new event.  Does not touch store state."""
        ...

    def add_event(self, event: Event) -> str:
        """Verify and insert an event.  Returns its hash identifier.

        Raises ``VerificationError`` if the event is rejected.
        """
        ...

    def get_event(self, event_hash: str) -> Event | None:
        """Look up an event.  Returns ``None`` if not found."""
        ...

    def get_recent_events(self, limit: int) -> list[Event]:
        """Return up to *limit* events, most recent first."""
        ...

    def get_agents(self) -> dict[str, AgentInfo]:
        """Return a snapshot of the agent registry."""
        ...

    def get_event_chain(self, start_hash: str, max_depth: int) -> list[Event]:
        """Return *start_hash* and its ancestors in depth-first order."""
        ...

    def hash_event(self, event: Event) -> str:
        """Compute the hash identifier of an event."""
        ...

    def __len__(self) -> int:
        """Number of stored events."""
        ...
