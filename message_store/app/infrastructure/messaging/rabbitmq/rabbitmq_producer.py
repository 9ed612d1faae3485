"""
RabbitMQ producer: convert one MessageContext and publish it to the store's queue.

Protocol per store_message call:
  guard (message present, connection held) -> convert -> serialise -> open channel ->
  publish once -> close channel -> classify.
  Success: store.enqueued(), True.
  Any failure after the guard: log, store.close_producer_connection(connection),
  drop the local connection reference, False. Later calls fail fast until the store
  hands out a producer with a fresh connection.

Concurrency:
  - The connection is owned by the store and may be shared by many producers; each
    call opens its own channel and always closes it.
  - _lock makes guard + publish + invalidation one critical section per producer, so a
    second call never publishes on a connection this producer already found broken.
"""
from __future__ import annotations

import asyncio
from typing import Any

from aio_pika import DeliveryMode, Message
from aio_pika.abc import AbstractChannel, AbstractConnection
from aio_pika.exceptions import AMQPConnectionError, ChannelInvalidStateError
from loguru import logger

from message_store.app.core import SERVICE_NAME
from message_store.app.domain.message_converter import (
    STORABLE_CONTENT_TYPE,
    serialize,
    to_storable_message,
)
from message_store.app.domain.models import DEFAULT_PRIORITY, MessageContext
from message_store.app.infrastructure.messaging.rabbitmq.constants import FailureKind
from message_store.app.ports.message_store import MessageStore

DEFAULT_PUBLISH_TIMEOUT_SECONDS = 10.0

CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    AMQPConnectionError,
    ChannelInvalidStateError,
)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _classify(exc: BaseException) -> FailureKind:
    if isinstance(exc, CONNECTION_ERRORS):
        return FailureKind.CONNECTION
    return FailureKind.MESSAGE


class RabbitMQProducer:
    """MessageProducer implementation"""

    def __init__(
        self,
        store: MessageStore | None,
        *,
        publish_timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS,
    ) -> None:
        self._store = store
        self._publish_timeout_seconds = publish_timeout_seconds
        self._connection: AbstractConnection | None = None
        self._queue_name: str = ""
        self._exchange_name: str | None = None
        self._id: str | None = None
        self._lock = asyncio.Lock()
        self._initialized = store is not None
        if store is None:
            logger.error("producer cannot initialize: no store")

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def connection(self) -> AbstractConnection | None:
        return self._connection

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def exchange_name(self) -> str | None:
        return self._exchange_name

    def set_queue_name(self, queue_name: str) -> None:
        self._queue_name = queue_name

    def set_exchange_name(self, exchange_name: str | None) -> None:
        self._exchange_name = exchange_name or None

    def set_connection(self, connection: AbstractConnection | None) -> None:
        self._connection = connection

    def set_id(self, index: int) -> None:
        if self._store is None or self._id is not None:
            return
        self._id = f"[{self._store.name}-P-{index}]"

    async def store_message(self, message: MessageContext | None) -> bool:
        if message is None or self._store is None:
            return False

        async with self._lock:
            connection = self._connection
            if connection is None:
                logger.debug("{} cannot proceed, rabbitmq connection is not available", self._id)
                logger.bind(
                    service_name=SERVICE_NAME,
                    event="message_ignored",
                    producer_id=self._id,
                    message_id=message.message_id,
                    reason="connection_unavailable",
                ).warning("")
                return False

            failure: Exception | None = None
            channel: AbstractChannel | None = None
            try:
                storable = to_storable_message(message)
                body = serialize(storable)
                amqp_message = Message(
                    body,
                    message_id=message.message_id,
                    delivery_mode=DeliveryMode.PERSISTENT,
                    priority=storable.get_priority(DEFAULT_PRIORITY),
                    content_type=STORABLE_CONTENT_TYPE,
                )
                channel = await connection.channel()
                if self._exchange_name is None:
                    exchange = channel.default_exchange
                else:
                    exchange = await channel.get_exchange(self._exchange_name, ensure=False)
                await exchange.publish(
                    amqp_message,
                    routing_key=self._queue_name,
                    timeout=self._publish_timeout_seconds,
                )
            except Exception as exc:
                failure = exc
            finally:
                if channel is not None and not channel.is_closed:
                    try:
                        await channel.close()
                    except Exception as exc:
                        logger.bind(
                            service_name=SERVICE_NAME,
                            event="channel_close_failed",
                            producer_id=self._id,
                            message_id=message.message_id,
                        ).error("channel close failed: {}", exc)

            if failure is not None:
                await self._invalidate_connection(connection, message, failure)
                return False

        logger.debug("{} stored message id {}", self._id, message.message_id)
        self._store.enqueued()
        return True

    async def _invalidate_connection(
        self,
        connection: AbstractConnection,
        message: MessageContext,
        failure: Exception,
    ) -> None:
        store = self._store
        logger.opt(exception=failure).bind(
            service_name=SERVICE_NAME,
            event="message_store_failed",
            producer_id=self._id,
            message_id=message.message_id,
            store=store.name,
            failure_kind=_classify(failure).value,
        ).error("could not store message: {}", failure)
        self._connection = None
        try:
            await store.close_producer_connection(connection)
        except Exception as exc:
            logger.warning("close_producer_connection failed for store {}: {}", store.name, exc)
        _log("producer_connection_invalidated", producer_id=self._id, store=store.name)

    async def cleanup(self) -> bool:
        if self._store is None:
            return False
        return await self._store.cleanup(None, False)
