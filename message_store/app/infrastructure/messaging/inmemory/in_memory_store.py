"""In-memory store for testing and local mode.
Follows the same store/producer contract as the RabbitMQ backend; stored messages
are kept in memory as (routing_key, body) pairs in the wire format. Only the newest
`max_messages` are retained; older ones are dropped, so this backend is for tests and local
runs, never for durable storage.
"""
from __future__ import annotations

from collections import deque
from typing import Any

from loguru import logger

from message_store.app.domain.message_converter import serialize, to_storable_message
from message_store.app.domain.models import MessageContext

DEFAULT_MAX_MESSAGES = 10_000


class InMemoryProducer:
    def __init__(self, store: "InMemoryStore", routing_key: str, index: int) -> None:
        self._store = store
        self._routing_key = routing_key
        self._id = f"[{store.name}-P-{index}]"

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def initialized(self) -> bool:
        return True

    async def store_message(self, message: MessageContext | None) -> bool:
        if message is None:
            return False
        try:
            body = serialize(to_storable_message(message))
        except Exception as exc:
            logger.warning("{} could not store message id {}: {}", self._id, message.message_id, exc)
            return False
        self._store.messages.append((self._routing_key, body))
        self._store.enqueued()
        return True

    async def cleanup(self) -> bool:
        return await self._store.cleanup(None, False)


class InMemoryStore:
    def __init__(self, name: str, queue_name: str, *, max_messages: int = DEFAULT_MAX_MESSAGES) -> None:
        self._name = name
        self._queue_name = queue_name
        self._producer_index = 0
        self._enqueued = 0
        self.messages: deque[tuple[str, bytes]] = deque(maxlen=max_messages)

    @property
    def name(self) -> str:
        return self._name

    @property
    def ready(self) -> bool:
        return True

    @property
    def enqueued_count(self) -> int:
        return self._enqueued

    async def connect(self) -> None:
        return

    async def get_producer(self) -> InMemoryProducer:
        producer = InMemoryProducer(self, self._queue_name, self._producer_index)
        self._producer_index += 1
        return producer

    async def close_producer_connection(self, connection: Any | None = None) -> None:
        return

    def enqueued(self) -> None:
        self._enqueued += 1

    async def cleanup(self, connection: Any | None = None, error: bool = False) -> bool:
        return True

    async def close(self) -> None:
        return
