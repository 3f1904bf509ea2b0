"""
Проверка доступности хранилища.
"""

from __future__ import annotations

from gps_tracker.core.cache.errors import StoreUnavailableError
from gps_tracker.infra.kv_store import KeyValueStore, resolve_store
from gps_tracker.infra.redis_client import RedisClient


class AvailabilityGate:
    """
    Хранит ссылку на хранилище, определённую один раз при создании.

    is_available() синхронна и не выполняет I/O, поэтому её можно
    вызывать на каждом обновлении интерфейса.
    """

    def __init__(self, store: KeyValueStore | None) -> None:
        self._store = store

    @classmethod
    def from_redis(cls, client: RedisClient | None = None) -> "AvailabilityGate":
        """Создаёт гейт поверх глобального RedisClient."""
        return cls(resolve_store(client))

    def is_available(self) -> bool:
        return self._store is not None

    def require(self) -> KeyValueStore:
        """
        Возвращает хранилище.

        Raises:
            StoreUnavailableError: если хранилище отсутствует
        """
        if self._store is None:
            raise StoreUnavailableError("Хранилище не подключено")
        return self._store
