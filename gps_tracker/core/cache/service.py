# gps_tracker/core/cache/service.py
"""
Ограниченный кэш GPS-точек.

Окно хранится одним JSON-массивом под фиксированным ключом, новые точки
в начале. Только этот класс читает и пишет ключ кэша.
"""

from __future__ import annotations

from pydantic import ValidationError

from gps_tracker.common.constants import GPS_CACHE_KEY, MAX_CACHE_ITEMS
from gps_tracker.common.logger import log_debug, log_error, log_warning
from gps_tracker.core.cache.errors import (
    CacheResult,
    CacheWriteError,
    GpsTrackerError,
    MalformedStoredDataError,
    StoreUnavailableError,
)
from gps_tracker.core.cache.gate import AvailabilityGate
from gps_tracker.shared.models.sample import Sample, deserialize_window, serialize_window


class PointCache:
    """
    Кэш последних GPS-точек с вытеснением самых старых.

    Операции:
    - read() — текущее окно (новые первыми), [] при любой проблеме
    - append() — добавить точку в начало, обрезать до ёмкости, сохранить

    Чтение-изменение-запись в append() не атомарно: при двух независимых
    писателях побеждает последняя запись.
    """

    def __init__(
        self,
        gate: AvailabilityGate,
        key: str = GPS_CACHE_KEY,
        capacity: int = MAX_CACHE_ITEMS,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity должен быть положительным")
        self._gate = gate
        self._key = key
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_available(self) -> bool:
        return self._gate.is_available()

    async def read(self) -> list[Sample]:
        """Возвращает сохранённое окно или пустой список."""
        return (await self.load()).samples

    async def append(self, sample: Sample) -> list[Sample]:
        """
        Добавляет точку и возвращает новое окно.

        Если точку сохранить не удалось, возвращается пустой список.
        """
        return (await self.push(sample)).samples

    async def load(self) -> CacheResult:
        """Читает окно, возвращая причину деградации вместо исключения."""
        try:
            return CacheResult(samples=await self._fetch())
        except GpsTrackerError as e:
            return CacheResult.failed(e)

    async def push(self, sample: Sample) -> CacheResult:
        """Добавляет точку, возвращая причину деградации вместо исключения."""
        try:
            store = self._gate.require()
        except StoreUnavailableError as e:
            return CacheResult.failed(e)

        try:
            existing = await self._fetch()
        except MalformedStoredDataError:
            # Повреждённое окно перезаписывается новым
            existing = []
        except GpsTrackerError as e:
            return CacheResult.failed(e)

        window = [sample, *existing][: self._capacity]

        try:
            await self._store_window(store, window)
        except CacheWriteError as e:
            return CacheResult.failed(e)

        return CacheResult(samples=window)

    async def _fetch(self) -> list[Sample]:
        store = self._gate.require()

        try:
            raw = await store.get(self._key)
        except Exception as e:
            await log_warning(f"Не удалось прочитать кэш GPS-точек: {e}")
            raise StoreUnavailableError(str(e)) from e

        if not raw:
            return []

        try:
            return deserialize_window(raw)
        except ValidationError as e:
            await log_debug(
                "Повреждённые данные в кэше GPS-точек, окно считается пустым",
                extra={"key": self._key, "errors": e.error_count()},
            )
            raise MalformedStoredDataError(str(e)) from e

    async def _store_window(self, store, window: list[Sample]) -> None:
        try:
            await store.set(self._key, serialize_window(window))
        except Exception as e:
            await log_error(f"Ошибка записи кэша GPS-точек: {e}", extra={"key": self._key})
            raise CacheWriteError(str(e)) from e
