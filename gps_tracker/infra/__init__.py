"""
Инфраструктурный слой: подключение к Redis и абстракция хранилища.
"""

from gps_tracker.infra.kv_store import KeyValueStore, resolve_store
from gps_tracker.infra.redis_client import RedisClient, close_redis, get_redis, init_redis

__all__ = [
    "KeyValueStore",
    "RedisClient",
    "close_redis",
    "get_redis",
    "init_redis",
    "resolve_store",
]
