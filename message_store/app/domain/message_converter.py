"""Message conversion: MessageContext -> StorableMessage -> wire bytes.

The wire form is a self-describing JSON envelope so a consumer can rebuild the
StorableMessage (id, payload, priority, properties) without an external schema.
The payload travels base64-encoded because it is arbitrary bytes.
"""
from __future__ import annotations

import base64
import json
from typing import Any

from message_store.app.domain.models import (
    DEFAULT_CONTENT_TYPE,
    MAX_PRIORITY,
    MessageContext,
    StorableMessage,
)

STORABLE_FORMAT = "storable-message"
STORABLE_VERSION = 1
STORABLE_CONTENT_TYPE = "application/json"


class MessageSerializationError(Exception):
    """Raised when a StorableMessage cannot be encoded or decoded."""


def to_storable_message(ctx: MessageContext) -> StorableMessage:
    if not isinstance(ctx.payload, (bytes, bytearray)):
        raise TypeError("message payload must be bytes")
    priority = ctx.priority
    if priority is not None:
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise TypeError("message priority must be an int or None")
        if not 0 <= priority <= MAX_PRIORITY:
            raise ValueError(f"message priority must be between 0 and {MAX_PRIORITY}")
    return StorableMessage(
        message_id=str(ctx.message_id),
        payload=bytes(ctx.payload),
        content_type=ctx.content_type or DEFAULT_CONTENT_TYPE,
        properties=dict(ctx.properties),
        priority=priority,
    )


def serialize(message: StorableMessage) -> bytes:
    envelope: dict[str, Any] = {
        "format": STORABLE_FORMAT,
        "version": STORABLE_VERSION,
        "message_id": message.message_id,
        "content_type": message.content_type,
        "properties": message.properties,
        "priority": message.priority,
        "payload": base64.b64encode(message.payload).decode("ascii"),
    }
    try:
        return json.dumps(envelope, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise MessageSerializationError(f"message {message.message_id} is not serialisable: {exc}") from exc


def deserialize(body: bytes) -> StorableMessage:
    try:
        envelope = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MessageSerializationError(f"malformed storable message: {exc}") from exc
    if not isinstance(envelope, dict) or envelope.get("format") != STORABLE_FORMAT:
        raise MessageSerializationError("not a storable message")
    if envelope.get("version") != STORABLE_VERSION:
        raise MessageSerializationError(f"unsupported storable message version: {envelope.get('version')}")
    try:
        payload = base64.b64decode(envelope["payload"], validate=True)
        return StorableMessage(
            message_id=str(envelope["message_id"]),
            payload=payload,
            content_type=str(envelope.get("content_type") or DEFAULT_CONTENT_TYPE),
            properties=dict(envelope.get("properties") or {}),
            priority=envelope.get("priority"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MessageSerializationError(f"incomplete storable message: {exc}") from exc
