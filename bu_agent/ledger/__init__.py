"""Content-addressed, signed event ledger."""

from bu_agent.ledger.crypto import (
    KeyGenerationError,
    LedgerError,
    SigningError,
    VerificationError,
    generate_keypair,
    hash_payload,
)
from bu_agent.ledger.models import AgentInfo, Event, EventData, EventKind
from bu_agent.ledger.store import EventStore, InMemoryEventStore

__all__ = [
    "AgentInfo",
    "Event",
    "EventData",
    "EventKind",
    "EventStore",
    "InMemoryEventStore",
    "KeyGenerationError",
    "LedgerError",
    "SigningError",
    "VerificationError",
    "generate_keypair",
    "hash_payload",
]
