# gps_tracker/infra/redis_client.py
"""
Клиент Redis — долговременное key-value хранилище для кэша GPS-точек.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from gps_tracker.common.logger import log_error, log_info, log_warning
from gps_tracker.common.constants import TypeMsg


class RedisClient:
    """
    Асинхронный клиент Redis.
    Поддерживает:
    - Строковые get/set с namespace
    - Проверку подключения без сетевых запросов (is_connected)
    - Health check
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Инициализация (вызывается только один раз благодаря Singleton)."""
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "gps"

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError("Redis клиент не инициализирован. Вызовите connect() сначала.")
        return self._client

    @property
    def is_connected(self) -> bool:
        """Есть ли установленное подключение (без обращения к серверу)."""
        return self._client is not None

    def _make_key(self, key: str) -> str:
        """Добавляет namespace к ключу."""
        return f"{self._namespace}:{key}"

    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 10,
        namespace: str | None = None,
    ) -> None:
        """
        Подключается к Redis.

        Args:
            url: URL Redis (если None, берётся из конфига)
            max_connections: Максимальное количество соединений
            namespace: Префикс ключей
        """
        if self._client is not None:
            return

        if url is None:
            from gps_tracker.config import settings
            url = settings.redis.url
            max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            namespace = settings.redis.REDIS_NAMESPACE

        if namespace:
            self._namespace = namespace

        await log_info("Подключение к Redis...", type_msg=TypeMsg.INFO)

        client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )

        try:
            await client.ping()
        except Exception:
            await client.aclose()
            raise

        self._client = client
        await log_info("Подключение к Redis установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Соединение с Redis закрыто", type_msg=TypeMsg.INFO)

    # =========================================================================
    # БАЗОВЫЕ ОПЕРАЦИИ
    # =========================================================================

    async def get(self, key: str) -> str | None:
        """Получает значение по ключу."""
        return await self.client.get(self._make_key(key))

    async def set(self, key: str, value: str) -> bool:
        """
        Устанавливает значение без срока жизни.

        Returns:
            True если успешно
        """
        return bool(await self.client.set(self._make_key(key), value))

    # =========================================================================
    # HEALTH CHECK
    # =========================================================================

    async def health_check(self) -> bool:
        """
        Проверяет здоровье подключения к Redis.

        Returns:
            True если подключение работает
        """
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except Exception as e:
            await log_error(f"Health check Redis failed: {e}")
            return False


def get_redis() -> RedisClient:
    """
    Возвращает глобальный экземпляр RedisClient.
    """
    return RedisClient()


async def init_redis() -> bool:
    """
    Инициализирует подключение к Redis по настройкам конфигурации.

    Недоступность Redis не является фатальной: сервис продолжает работу
    без кэша.

    Returns:
        True если подключение установлено
    """
    from gps_tracker.config import settings

    if not settings.redis.REDIS_ENABLED:
        await log_warning("Redis отключён в конфигурации, кэш GPS-точек недоступен")
        return False

    redis_client = get_redis()
    try:
        await redis_client.connect(
            url=settings.redis.url,
            max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
            namespace=settings.redis.REDIS_NAMESPACE,
        )
    except (RedisError, OSError) as e:
        await log_warning(f"Redis недоступен ({e}), кэш GPS-точек отключён")
        return False

    await log_info(
        f"Redis подключён: {settings.redis.REDIS_HOST}:{settings.redis.REDIS_PORT}/{settings.redis.REDIS_DB}",
        type_msg=TypeMsg.INFO,
    )
    return True


async def close_redis() -> None:
    """
    Закрывает подключение к Redis.
    """
    redis_client = get_redis()
    await redis_client.disconnect()
    await log_info("Redis отключён", type_msg=TypeMsg.INFO)
