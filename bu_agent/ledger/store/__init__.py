"""Event store implementations."""

from bu_agent.ledger.store.base import EventStore
from bu_agent.ledger.store.memory import InMemoryEventStore

__all__ = ["EventStore", "InMemoryEventStore"]
