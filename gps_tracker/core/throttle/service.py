# gps_tracker/core/throttle/service.py
"""
Троттлинг записи GPS-точек в кэш.

Источник присылает точки намного чаще, чем их нужно сохранять. Троттлер
пропускает в кэш не более одной точки за окно THROTTLE_WINDOW_MS, остальные
только публикуются как живые значения.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable

from gps_tracker.common.constants import THROTTLE_WINDOW_MS, TypeMsg
from gps_tracker.common.logger import log_error, log_info
from gps_tracker.core.cache.errors import CacheIssue
from gps_tracker.core.cache.service import PointCache
from gps_tracker.core.source.queue_source import SampleSource
from gps_tracker.core.tracker.state import TrackerState
from gps_tracker.shared.models.sample import Sample, SourceError


def now_ms() -> int:
    """Текущее время в миллисекундах."""
    return int(time.time() * 1000)


class IngestionThrottle:
    """
    Пропускает в кэш не более одной точки за окно.

    Первая точка после создания пропускается всегда. Ошибка записи
    не останавливает троттлер: она превращается в сообщение для пользователя.
    """

    def __init__(
        self,
        cache: PointCache,
        state: TrackerState | None = None,
        window_ms: int = THROTTLE_WINDOW_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._cache = cache
        self._state = state or TrackerState()
        self._window_ms = window_ms
        self._clock = clock

        # None: ни одной точки ещё не пропущено
        self._last_admitted_at_ms: int | None = None

        self._task: asyncio.Task | None = None
        self._subscribed = False

        # Статистика
        self._offered = 0
        self._admitted = 0
        self._failed = 0

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def last_admitted_at_ms(self) -> int | None:
        return self._last_admitted_at_ms

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed

    def should_admit(self, now: int) -> bool:
        """Прошло ли окно с момента последней пропущенной точки."""
        if self._last_admitted_at_ms is None:
            return True
        return now - self._last_admitted_at_ms >= self._window_ms

    async def offer(self, sample: Sample) -> bool:
        """
        Обрабатывает точку от источника.

        Returns:
            True если точка пропущена на запись в кэш
        """
        self._offered += 1
        self._state.publish_sample(sample)

        now = self._clock()
        if not self.should_admit(now):
            return False

        self._last_admitted_at_ms = now
        self._admitted += 1

        try:
            result = await self._cache.push(sample)
        except Exception as e:
            await log_error(f"Ошибка кэширования GPS-точки: {e}", exc_info=True)
            self._failed += 1
            self._state.report_issue(CacheIssue.WRITE_FAILURE)
            return True

        if result.issue is not None:
            self._failed += 1
        self._state.report_issue(result.issue)
        return True

    def report_error(self, message: str) -> None:
        """Ошибка источника: только отображается, в кэш не попадает."""
        self._state.publish_source_error(message)

    async def subscribe(self, source: SampleSource) -> None:
        """Начинает обработку событий источника в фоновой задаче."""
        if self._subscribed:
            return

        self._subscribed = True
        self._state.set_storage_available(self._cache.is_available)
        self._task = asyncio.create_task(self._consume(source))
        await log_info("Троттлер подписан на источник GPS-точек", type_msg=TypeMsg.DEBUG)

    async def unsubscribe(self) -> None:
        """Останавливает обработку. Повторный вызов и вызов до subscribe() безопасны."""
        self._subscribed = False

        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            await log_error(f"Подписка на источник GPS-точек завершилась с ошибкой: {e}")
        await log_info("Троттлер отписан от источника GPS-точек", type_msg=TypeMsg.DEBUG)

    async def drain(self) -> None:
        """Ждёт, пока источник не будет закрыт и все его события обработаны."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)

    async def _consume(self, source: SampleSource) -> None:
        try:
            async for event in source.events():
                if not self._subscribed:
                    break
                if isinstance(event, SourceError):
                    self.report_error(event.message)
                else:
                    await self.offer(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await log_error(f"Источник GPS-точек прервал поток: {e}", exc_info=True)
            self.report_error(f"Источник GPS-точек недоступен: {e}")
        finally:
            self._subscribed = False

    def get_stats(self) -> dict[str, Any]:
        """Получить статистику."""
        return {
            "offered": self._offered,
            "admitted": self._admitted,
            "dropped": self._offered - self._admitted,
            "failed": self._failed,
            "last_admitted_at_ms": self._last_admitted_at_ms,
        }
