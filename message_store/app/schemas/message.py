from typing import Any

from pydantic import BaseModel, Field

from message_store.app.constants import StoreStatus
from message_store.app.domain.models import DEFAULT_CONTENT_TYPE, MAX_PRIORITY


class StoreMessageRequest(BaseModel):
    payload: str
    message_id: str | None = Field(None, min_length=1)
    content_type: str = DEFAULT_CONTENT_TYPE
    properties: dict[str, Any] = Field(default_factory=dict)
    priority: int | None = Field(None, ge=0, le=MAX_PRIORITY)


class StoreMessageResponse(BaseModel):
    status: str = StoreStatus.STORED
    message_id: str
    producer_id: str | None = None
