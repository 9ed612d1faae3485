from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response
from loguru import logger

from message_store.app.core import SERVICE_NAME
from message_store.app.schemas.message import StoreMessageRequest, StoreMessageResponse
from message_store.app.services.store_message import store_message


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


messages_router = APIRouter(prefix="/messages", tags=["Store"])


@messages_router.post(
    "",
    summary="Store a message",
    description="Converts the message to its storable form and publishes it to the store's queue as a persistent message. Exactly one attempt is made; a 503 means the message was not stored and the caller decides whether to retry.",
    responses={
        202: {"description": "Message stored."},
        422: {"description": "Invalid request body."},
        503: {"description": "Store unavailable or publish failed; message not stored."},
    },
)
async def post_message(request: Request, body: StoreMessageRequest) -> Response:
    store = getattr(request.app.state, "store", None)
    if store is None:
        _log("store_rejected", reason="store_not_initialized")
        return Response(status_code=503, content="Store not available")

    outcome = await store_message(
        store,
        body.payload.encode("utf-8"),
        message_id=body.message_id,
        content_type=body.content_type,
        properties=body.properties,
        priority=body.priority,
    )

    if outcome.stored:
        return Response(
            status_code=202,
            media_type="application/json",
            content=StoreMessageResponse(
                message_id=outcome.message_id or "",
                producer_id=outcome.producer_id,
            ).model_dump_json(),
        )

    _log(
        "store_failed",
        reason=outcome.error,
        message_id=outcome.message_id or "",
        producer_id=outcome.producer_id or "",
    )
    return Response(status_code=503, content=outcome.error or "Store failed")
