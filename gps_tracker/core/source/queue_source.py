"""
Источник GPS-точек на основе asyncio.Queue.

Устройство присылает колбэки watch (точку или ошибку), источник отдаёт их
подписчику в порядке поступления.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Protocol, Union

from pydantic import BaseModel

from gps_tracker.shared.models.sample import Sample, SourceError


SampleEvent = Union[Sample, SourceError]


class SampleSource(Protocol):
    """Поток событий геолокации."""

    def events(self) -> AsyncIterator[SampleEvent]:
        ...


class WatchOptions(BaseModel):
    """Параметры подписки на геолокацию устройства."""
    enable_high_accuracy: bool = True
    distance_filter: float = 0
    timeout_ms: int = 15000
    maximum_age_ms: int = 2000

    @classmethod
    def from_settings(cls) -> "WatchOptions":
        from gps_tracker.config import settings
        return cls(
            enable_high_accuracy=settings.watch.ENABLE_HIGH_ACCURACY,
            distance_filter=settings.watch.DISTANCE_FILTER,
            timeout_ms=settings.watch.TIMEOUT_MS,
            maximum_age_ms=settings.watch.MAXIMUM_AGE_MS,
        )


_CLOSED = object()


class QueueSampleSource:
    """Источник, в который события помещаются извне (например, HTTP-эндпоинтом)."""

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, sample: Sample) -> None:
        """Положить точку в поток."""
        await self._put(sample)

    async def emit_error(self, message: str) -> None:
        """Положить ошибку источника в поток."""
        await self._put(SourceError(message=message))

    async def close(self) -> None:
        """Завершить поток. Повторный вызов безопасен."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSED)

    async def _put(self, event: SampleEvent) -> None:
        if self._closed:
            raise RuntimeError("Источник GPS-точек закрыт")
        await self._queue.put(event)

    async def events(self) -> AsyncIterator[SampleEvent]:
        while True:
            event = await self._queue.get()
            if event is _CLOSED:
                return
            yield event
