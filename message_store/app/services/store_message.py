"""
Accepts plain Python types and the MessageStore abstraction; returns an outcome.
Router translates outcome to HTTP status codes and content.
"""

from dataclasses import dataclass
from typing import Any

from message_store.app.domain.models import MessageContext
from message_store.app.ports.message_store import MessageStore


@dataclass(frozen=True)
class StoreMessageOutcome:
    """Result of store_message.
    stored=True => message_id and producer_id set.
    stored=False => error set; message_id is set whenever the message was built.
    """
    stored: bool
    message_id: str | None = None
    producer_id: str | None = None
    error: str | None = None


async def store_message(
    store: MessageStore,
    payload: bytes,
    *,
    message_id: str | None = None,
    content_type: str | None = None,
    properties: dict[str, Any] | None = None,
    priority: int | None = None,
) -> StoreMessageOutcome:
    """
    Store one message through a fresh producer of the given store.
    The producer decides (fail fast when the store has no connection); this never
    raises for broker failures. Retrying is left to the caller.
    """
    message = MessageContext.create(
        payload,
        message_id=message_id,
        content_type=content_type,
        properties=properties,
        priority=priority,
    )
    producer = await store.get_producer()
    try:
        stored = await producer.store_message(message)
    finally:
        await producer.cleanup()

    if stored:
        return StoreMessageOutcome(stored=True, message_id=message.message_id, producer_id=producer.id)
    return StoreMessageOutcome(
        stored=False,
        message_id=message.message_id,
        producer_id=producer.id,
        error="message_not_stored",
    )
