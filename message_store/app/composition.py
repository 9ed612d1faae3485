"""
Composition root: single place where concrete implementations are wired.

Builds settings and the message store from config; provides connect/close
lifecycle. Used by the lifespan to populate app.state. Store backend selection
(e.g. store_backend=inmemory) is driven by settings.
"""
from __future__ import annotations

from message_store.app.config.settings import Settings
from message_store.app.infrastructure.messaging.factory import create_message_store
from message_store.app.ports.message_store import MessageStore


class StoreDependencies:
    """Holds wired dependencies and their lifecycle. Built only in composition root."""

    def __init__(self, *, settings: Settings, store: MessageStore) -> None:
        self._settings = settings
        self._store = store
        self._store_connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> MessageStore:
        return self._store

    async def connect(self) -> None:
        await self._store.connect()
        self._store_connected = True

    async def close(self) -> None:
        if self._store_connected:
            await self._store.close()
            self._store_connected = False


def create_store_dependencies(settings: Settings | None = None) -> StoreDependencies:
    _settings = settings or Settings()
    return StoreDependencies(settings=_settings, store=create_message_store(_settings))
