"""
Сборка GPS-трекера: гейт хранилища, кэш, троттлер, поллер.
"""

from __future__ import annotations

from typing import Any, Callable

from gps_tracker.common.constants import (
    GPS_CACHE_KEY,
    MAX_CACHE_ITEMS,
    POLL_INTERVAL_MS,
    THROTTLE_WINDOW_MS,
    TypeMsg,
)
from gps_tracker.common.logger import log_info
from gps_tracker.core.cache.gate import AvailabilityGate
from gps_tracker.core.cache.service import PointCache
from gps_tracker.core.poller.service import CachePoller
from gps_tracker.core.source.queue_source import SampleSource
from gps_tracker.core.throttle.service import IngestionThrottle, now_ms
from gps_tracker.core.tracker.state import TrackerState
from gps_tracker.infra.kv_store import KeyValueStore
from gps_tracker.shared.models.sample import Sample


class GPSTrackerService:
    """
    Сервис GPS-трекера.

    Ответственности:
    - Приём точек от источника с троттлингом записи в кэш
    - Периодическое чтение окна кэша для отображения
    - Деградация без хранилища (только живые данные)
    """

    def __init__(
        self,
        store: KeyValueStore | None,
        cache_key: str = GPS_CACHE_KEY,
        capacity: int = MAX_CACHE_ITEMS,
        window_ms: int = THROTTLE_WINDOW_MS,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        clock: Callable[[], int] = now_ms,
        state: TrackerState | None = None,
    ) -> None:
        self.state = state or TrackerState()
        self.gate = AvailabilityGate(store)
        self.cache = PointCache(self.gate, key=cache_key, capacity=capacity)
        self.throttle = IngestionThrottle(self.cache, self.state, window_ms=window_ms, clock=clock)
        self.poller = CachePoller(self.cache, self.state, interval_ms=poll_interval_ms)

    @classmethod
    def from_settings(cls, store: KeyValueStore | None, **kwargs: Any) -> "GPSTrackerService":
        """Создаёт сервис с параметрами из конфигурации."""
        from gps_tracker.config import settings

        return cls(
            store,
            cache_key=settings.cache.CACHE_KEY,
            capacity=settings.cache.CACHE_CAPACITY,
            window_ms=settings.cache.THROTTLE_WINDOW_MS,
            poll_interval_ms=settings.cache.POLL_INTERVAL_MS,
            **kwargs,
        )

    async def start(self, source: SampleSource | None = None) -> None:
        """Запускает поллер и (если передан) подписку на источник."""
        self.state.set_storage_available(self.gate.is_available())
        if source is not None:
            await self.throttle.subscribe(source)
        await self.poller.start()
        await log_info(
            f"GPS-трекер запущен (хранилище: {'есть' if self.gate.is_available() else 'нет'})",
            type_msg=TypeMsg.INFO,
        )

    async def stop(self) -> None:
        """Останавливает поллер и подписку. Повторный вызов безопасен."""
        try:
            await self.throttle.unsubscribe()
        finally:
            await self.poller.stop()

    async def ingest(self, sample: Sample) -> bool:
        """Точка от устройства. Возвращает True, если она пропущена в кэш."""
        return await self.throttle.offer(sample)

    def report_error(self, message: str) -> None:
        """Ошибка геолокации на устройстве."""
        self.throttle.report_error(message)

    def get_window(self) -> list[Sample]:
        """Последнее опубликованное окно (новые первыми)."""
        return self.state.get_window()

    async def refresh(self) -> list[Sample]:
        """Перечитывает кэш немедленно, не дожидаясь тика поллера."""
        await self.poller.poll_once()
        return self.state.get_window()

    def get_stats(self) -> dict[str, Any]:
        """Получить статистику."""
        return {
            **self.throttle.get_stats(),
            "poll_reads": self.poller.reads,
            "window_size": len(self.state.window),
            "storage_available": self.gate.is_available(),
        }
