"""Unit tests for the store_message service outcome."""
from __future__ import annotations

import pytest

from message_store.app.infrastructure.messaging.inmemory.in_memory_store import InMemoryStore
from message_store.app.services.store_message import store_message
from tests.conftest import FakeConnection, FakeStore


@pytest.mark.asyncio
async def test_stored_outcome_carries_ids():
    store = FakeStore(connection=FakeConnection())

    outcome = await store_message(store, b"body", message_id="m-1")

    assert outcome.stored is True
    assert outcome.message_id == "m-1"
    assert outcome.producer_id == "[S-P-0]"
    assert outcome.error is None


@pytest.mark.asyncio
async def test_not_stored_outcome_when_store_has_no_connection():
    store = FakeStore(connection=None)

    outcome = await store_message(store, b"body")

    assert outcome.stored is False
    assert outcome.message_id
    assert outcome.error == "message_not_stored"
    assert store.close_producer_connection_calls == []


@pytest.mark.asyncio
async def test_invalid_priority_is_reported_not_raised():
    store = InMemoryStore("local", "Q")

    outcome = await store_message(store, b"body", priority=999)

    assert outcome.stored is False
    assert len(store.messages) == 0
    assert store.enqueued_count == 0


@pytest.mark.asyncio
async def test_in_memory_store_keeps_only_newest_messages():
    store = InMemoryStore("local", "Q", max_messages=2)

    for message_id in ("m-1", "m-2", "m-3"):
        outcome = await store_message(store, b"body", message_id=message_id)
        assert outcome.stored is True

    assert store.enqueued_count == 3
    assert len(store.messages) == 2
    assert [routing_key for routing_key, _ in store.messages] == ["Q", "Q"]
    assert b'"m-1"' not in store.messages[0][1]
    assert b'"m-3"' in store.messages[1][1]
