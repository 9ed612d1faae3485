"""Domain models."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

DEFAULT_PRIORITY = 0
MAX_PRIORITY = 255
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class MessageContext:
    """In-flight application message handed to a producer."""

    message_id: str
    payload: bytes
    content_type: str = DEFAULT_CONTENT_TYPE
    properties: dict[str, Any] = field(default_factory=dict)
    priority: int | None = None

    @staticmethod
    def create(
        payload: bytes,
        *,
        message_id: str | None = None,
        content_type: str | None = None,
        properties: dict[str, Any] | None = None,
        priority: int | None = None,
    ) -> "MessageContext":
        return MessageContext(
            message_id=message_id or str(uuid.uuid4()),
            payload=payload,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            properties=dict(properties) if properties else {},
            priority=priority,
        )


@dataclass(frozen=True)
class StorableMessage:
    """Serialisable snapshot of a MessageContext (value object)."""

    message_id: str
    payload: bytes
    content_type: str = DEFAULT_CONTENT_TYPE
    properties: dict[str, Any] = field(default_factory=dict)
    priority: int | None = None

    def get_priority(self, default: int = DEFAULT_PRIORITY) -> int:
        if self.priority is None:
            return default
        return self.priority
