"""Tests for AgentRegistry."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from bu_agent.ledger.registry import AgentRegistry

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def test_record_and_get() -> None:
    registry = AgentRegistry()
    info = registry.record("ab" * 32, "h1", NOW)

    assert info.pub_key == "ab" * 32
    assert info.last_event_hash == "h1"
    assert info.last_seen == NOW
    assert registry.get("ab" * 32) == info
    assert "ab" * 32 in registry
    assert len(registry) == 1


def test_get_unknown() -> None:
    assert AgentRegistry().get("missing") is None


def test_record_overwrites() -> None:
    registry = AgentRegistry()
    registry.record("key", "h1", NOW)
    registry.record("key", "h2", NOW + timedelta(seconds=5))

    info = registry.get("key")
    assert info.last_event_hash == "h2"
    assert info.last_seen == NOW + timedelta(seconds=5)
    assert len(registry) == 1


def test_snapshot_is_independent() -> None:
    registry = AgentRegistry()
    registry.record("a", "h1", NOW)
    registry.record("b", "h2", NOW)

    snap = registry.snapshot()
    assert set(snap) == {"a", "b"}

    snap["a"].last_event_hash = "mutated"
    del snap["b"]
    assert registry.get("a").last_event_hash == "h1"
    assert "b" in registry
