"""Port: message producer bound to one destination. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Protocol

from message_store.app.domain.models import MessageContext


class MessageProducer(Protocol):
    @property
    def id(self) -> str | None: ...

    @property
    def initialized(self) -> bool: ...

    async def store_message(self, message: MessageContext | None) -> bool:
        """One publish attempt. True when stored; False otherwise, never raises."""
        ...

    async def cleanup(self) -> bool: ...
