"""
RabbitMQ store: owns the shared broker connection and hands out producers.

Lifecycle:
  DISCONNECTED -> CONNECTING (backoff) -> CONNECTED.
  A producer failure calls close_producer_connection(): CONNECTED -> DISCONNECTED and the
  connection is closed. The next get_producer() makes one reconnect attempt, shared by every
  caller that was waiting on it; if it fails those producers are handed out without a
  connection and fail fast. connect() on a connected store reuses the open connection.
  On shutdown: CLOSING -> close connection -> CLOSED.

Producers never own the connection. Queues and exchanges are expected to exist already;
the store does not declare them.
"""
from __future__ import annotations

import asyncio
from typing import Any

import aio_pika
from aio_pika.abc import AbstractConnection
from loguru import logger

from message_store.app.config.settings import Settings
from message_store.app.core import SERVICE_NAME
from message_store.app.core.backoff import exponential_backoff
from message_store.app.infrastructure.messaging.rabbitmq.constants import ConnectionState
from message_store.app.infrastructure.messaging.rabbitmq.rabbitmq_producer import RabbitMQProducer


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class RabbitMQStore:
    """MessageStore implementation"""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = ConnectionState.DISCONNECTED
        self._connection: AbstractConnection | None = None
        self._lock = asyncio.Lock()
        self._closing = False
        self._producer_index = 0
        self._enqueued = 0
        # Bumped after every reconnect attempt; callers that waited through one skip their own.
        self._reconnect_generation = 0

    @property
    def name(self) -> str:
        return self._settings.store_name

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def connection(self) -> AbstractConnection | None:
        return self._connection

    @property
    def enqueued_count(self) -> int:
        return self._enqueued

    def _set_state(self, state: ConnectionState) -> None:
        self._state = state

    def _build_amqp_url(self) -> str:
        vhost = self._settings.broker_vhost.lstrip("/")
        return (
            f"amqp://{self._settings.broker_user}:{self._settings.broker_password}"
            f"@{self._settings.broker_host}:{self._settings.broker_port}/{vhost}"
        )

    async def connect(self) -> None:
        self._closing = False
        if self._connection is not None:
            _log("rmq_already_connected", store=self.name)
            self._set_state(ConnectionState.CONNECTED)
            return
        self._set_state(ConnectionState.CONNECTING)
        _log("rmq_connecting", store=self.name)
        async for attempt, delay in exponential_backoff(
            self._settings.initial_backoff_seconds,
            self._settings.max_backoff_seconds,
            self._settings.backoff_multiplier,
            self._settings.max_connection_attempts,
        ):
            _log("rmq_connect_attempt", store=self.name, attempt=attempt, delay=delay)
            try:
                self._connection = await aio_pika.connect_robust(
                    self._build_amqp_url(),
                    timeout=self._settings.connect_timeout_seconds,
                )
                break
            except Exception as e:
                logger.warning("rmq connect failed: {}", e)
                if attempt >= self._settings.max_connection_attempts:
                    _log("rmq_connect_failed", store=self.name, attempt=attempt)
                    self._set_state(ConnectionState.DISCONNECTED)
                    raise
        else:
            self._set_state(ConnectionState.DISCONNECTED)
            raise RuntimeError("rmq connect failed")
        self._set_state(ConnectionState.CONNECTED)
        _log("rmq_connected", store=self.name)

    async def _reconnect_once(self) -> None:
        observed_generation = self._reconnect_generation
        async with self._lock:
            if self._closing or self._connection is not None:
                return
            if self._reconnect_generation != observed_generation:
                return
            self._set_state(ConnectionState.CONNECTING)
            _log("rmq_reconnect_attempt", store=self.name)
            try:
                self._connection = await aio_pika.connect_robust(
                    self._build_amqp_url(),
                    timeout=self._settings.connect_timeout_seconds,
                )
            except Exception as e:
                logger.warning("rmq reconnect failed: {}", e)
                self._set_state(ConnectionState.DISCONNECTED)
                return
            finally:
                self._reconnect_generation += 1
            self._set_state(ConnectionState.CONNECTED)
            _log("rmq_reconnected", store=self.name)

    async def get_producer(self) -> RabbitMQProducer:
        if self._connection is None and not self._closing:
            await self._reconnect_once()

        producer = RabbitMQProducer(
            self,
            publish_timeout_seconds=self._settings.publish_timeout_seconds,
        )
        producer.set_queue_name(self._settings.queue_name)
        producer.set_exchange_name(self._settings.exchange_name)
        producer.set_connection(self._connection)
        producer.set_id(self._producer_index)
        self._producer_index += 1
        logger.debug("{} created producer {}", self.name, producer.id)
        return producer

    async def close_producer_connection(self, connection: AbstractConnection | None = None) -> None:
        async with self._lock:
            current = self._connection
            if current is None:
                return
            if connection is not None and connection is not current:
                return
            self._connection = None
            if not self._closing:
                self._set_state(ConnectionState.DISCONNECTED)
            _log("producer_connection_closed", store=self.name)
            await self._close_connection(current)

    def enqueued(self) -> None:
        self._enqueued += 1

    async def cleanup(self, connection: AbstractConnection | None = None, error: bool = False) -> bool:
        if connection is not None and error:
            await self._close_connection(connection)
        return True

    async def _close_connection(self, connection: AbstractConnection) -> None:
        try:
            await connection.close()
        except Exception as e:
            logger.warning("connection close failed: {}", e)

    async def close(self) -> None:
        self._closing = True
        self._set_state(ConnectionState.CLOSING)
        _log("store_shutdown", store=self.name, enqueued=self._enqueued)
        async with self._lock:
            if self._connection is not None:
                await self._close_connection(self._connection)
                self._connection = None
        self._set_state(ConnectionState.CLOSED)
