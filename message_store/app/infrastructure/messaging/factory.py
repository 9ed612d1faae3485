"""Store factory: selects implementation from config."""
from __future__ import annotations

from message_store.app.config.settings import Settings
from message_store.app.ports.message_store import MessageStore
from message_store.app.infrastructure.messaging.rabbitmq.rabbitmq_store import RabbitMQStore
from message_store.app.infrastructure.messaging.inmemory.in_memory_store import InMemoryStore


def create_message_store(settings: Settings) -> MessageStore:
    backend = settings.store_backend.strip().lower()

    if backend == "rabbitmq":
        return RabbitMQStore(settings)

    if backend == "inmemory":
        return InMemoryStore(
            settings.store_name,
            settings.queue_name,
            max_messages=settings.inmemory_max_messages,
        )

    raise ValueError(f"Unsupported store backend: {backend}")
