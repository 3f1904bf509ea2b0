# gps_tracker/core/poller/service.py
"""
Периодическое чтение кэша GPS-точек.

Кэш может пополняться другим процессом, поэтому окно перечитывается
целиком каждые POLL_INTERVAL_MS.
"""

from __future__ import annotations

import asyncio

from gps_tracker.common.constants import POLL_INTERVAL_MS, TypeMsg
from gps_tracker.common.logger import log_error, log_info
from gps_tracker.core.cache.service import PointCache
from gps_tracker.core.tracker.state import TrackerState


class CachePoller:
    """Публикует окно кэша сразу при запуске и затем на каждом тике."""

    def __init__(
        self,
        cache: PointCache,
        state: TrackerState | None = None,
        interval_ms: int = POLL_INTERVAL_MS,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms должен быть положительным")
        self._cache = cache
        self._state = state or TrackerState()
        self._interval = interval_ms / 1000
        self._task: asyncio.Task | None = None
        self._reads = 0

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def reads(self) -> int:
        return self._reads

    async def start(self) -> None:
        """Первое чтение выполняется сразу, без ожидания интервала."""
        if self._task is not None:
            return

        # Задача создаётся до первого await: повторный start() её увидит
        self._task = asyncio.create_task(self._run())
        self._state.set_storage_available(self._cache.is_available)
        await self.poll_once()
        await log_info(
            f"Поллер кэша запущен (интервал {self._interval:g} с)",
            type_msg=TypeMsg.DEBUG,
        )

    async def stop(self) -> None:
        """Останавливает опрос. Повторный вызов и вызов до start() безопасны."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        await log_info("Поллер кэша остановлен", type_msg=TypeMsg.DEBUG)

    async def poll_once(self) -> None:
        """Читает окно и заменяет опубликованное."""
        self._reads += 1
        result = await self._cache.load()
        self._state.publish_window(result.samples, result.issue)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                await log_error(f"Ошибка опроса кэша GPS-точек: {e}")
