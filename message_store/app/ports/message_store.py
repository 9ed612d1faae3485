"""Port: message store owning the shared broker connection. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Any, Protocol

from message_store.app.ports.message_producer import MessageProducer


class MessageStore(Protocol):
    """Owns the broker connection, hands out producers and counts enqueued messages."""

    @property
    def name(self) -> str: ...

    @property
    def ready(self) -> bool: ...

    @property
    def enqueued_count(self) -> int: ...

    async def connect(self) -> None: ...

    async def get_producer(self) -> MessageProducer: ...

    async def close_producer_connection(self, connection: Any | None = None) -> None:
        """Tear down the shared connection so it can be replaced. Idempotent."""
        ...

    def enqueued(self) -> None: ...

    async def cleanup(self, connection: Any | None = None, error: bool = False) -> bool: ...

    async def close(self) -> None: ...
