from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI

from message_store.app.infrastructure.messaging.rabbitmq.rabbitmq_producer import RabbitMQProducer
from message_store.app.routers.health import health_router
from message_store.app.routers.messages import messages_router


class FakeExchange:
    def __init__(self, name: str, publish_raises: Exception | None = None) -> None:
        self.name = name
        self.published: list[tuple[Any, str]] = []
        self._publish_raises = publish_raises

    async def publish(self, message: Any, routing_key: str, **kwargs: Any) -> None:
        if self._publish_raises is not None:
            raise self._publish_raises
        self.published.append((message, routing_key))


class FakeChannel:
    """Stands in for aio_pika.Channel; the producer only uses exchanges and close()."""

    def __init__(
        self,
        *,
        publish_raises: Exception | None = None,
        close_raises: Exception | None = None,
    ) -> None:
        self.default_exchange = FakeExchange("", publish_raises=publish_raises)
        self.exchanges: dict[str, FakeExchange] = {}
        self.get_exchange_calls: list[tuple[str, bool]] = []
        self.is_closed = False
        self.close_calls = 0
        self._publish_raises = publish_raises
        self._close_raises = close_raises

    async def get_exchange(self, name: str, *, ensure: bool = True) -> FakeExchange:
        self.get_exchange_calls.append((name, ensure))
        exchange = self.exchanges.get(name)
        if exchange is None:
            exchange = FakeExchange(name, publish_raises=self._publish_raises)
            self.exchanges[name] = exchange
        return exchange

    async def close(self) -> None:
        self.close_calls += 1
        if self._close_raises is not None:
            raise self._close_raises
        self.is_closed = True

    @property
    def published(self) -> list[tuple[Any, str]]:
        messages = list(self.default_exchange.published)
        for exchange in self.exchanges.values():
            messages.extend(exchange.published)
        return messages


class FakeConnection:
    """Stands in for aio_pika.RobustConnection. Hands out a new channel per call."""

    def __init__(
        self,
        *,
        publish_raises: Exception | None = None,
        channel_raises: Exception | None = None,
        close_raises: Exception | None = None,
        channel_close_raises: Exception | None = None,
    ) -> None:
        self.channels: list[FakeChannel] = []
        self.closed = False
        self.close_calls = 0
        self.publish_raises = publish_raises
        self._channel_raises = channel_raises
        self._close_raises = close_raises
        self._channel_close_raises = channel_close_raises

    async def channel(self) -> FakeChannel:
        if self._channel_raises is not None:
            raise self._channel_raises
        ch = FakeChannel(
            publish_raises=self.publish_raises,
            close_raises=self._channel_close_raises,
        )
        self.channels.append(ch)
        return ch

    async def close(self) -> None:
        self.close_calls += 1
        if self._close_raises is not None:
            raise self._close_raises
        self.closed = True

    @property
    def published(self) -> list[tuple[Any, str]]:
        messages: list[tuple[Any, str]] = []
        for ch in self.channels:
            messages.extend(ch.published)
        return messages


class FakeStore:
    """Implements MessageStore for producer tests; records every call the producer makes."""

    def __init__(self, name: str = "S", connection: FakeConnection | None = None) -> None:
        self._name = name
        self.connection = connection
        self.enqueued_calls = 0
        self.close_producer_connection_calls: list[Any] = []
        self.cleanup_calls: list[tuple[Any, bool]] = []
        self.raise_on_close_producer_connection: Exception | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def ready(self) -> bool:
        return self.connection is not None

    @property
    def enqueued_count(self) -> int:
        return self.enqueued_calls

    async def connect(self) -> None:
        return

    async def get_producer(self) -> RabbitMQProducer:
        producer = RabbitMQProducer(self)
        producer.set_queue_name("Q")
        producer.set_connection(self.connection)
        producer.set_id(0)
        return producer

    async def close_producer_connection(self, connection: Any | None = None) -> None:
        self.close_producer_connection_calls.append(connection)
        if self.raise_on_close_producer_connection is not None:
            raise self.raise_on_close_producer_connection
        self.connection = None

    def enqueued(self) -> None:
        self.enqueued_calls += 1

    async def cleanup(self, connection: Any | None = None, error: bool = False) -> bool:
        self.cleanup_calls.append((connection, error))
        return True

    async def close(self) -> None:
        return


@pytest.fixture()
def test_app() -> FastAPI:
    app = FastAPI()
    app.state.store = FakeStore(connection=FakeConnection())
    app.include_router(health_router)
    app.include_router(messages_router)
    return app
