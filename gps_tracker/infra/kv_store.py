# gps_tracker/infra/kv_store.py
"""
Абстракция долговременного key-value хранилища.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from gps_tracker.infra.redis_client import RedisClient, get_redis


@runtime_checkable
class KeyValueStore(Protocol):
    """Асинхронное строковое хранилище."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> bool:
        ...


def resolve_store(client: RedisClient | None = None) -> KeyValueStore | None:
    """
    Определяет хранилище один раз (при сборке компонентов).

    Возвращает подключённый RedisClient или None, если хранилище отсутствует.
    Не выполняет сетевых запросов.
    """
    client = client or get_redis()
    if not client.is_connected:
        return None
    return client
