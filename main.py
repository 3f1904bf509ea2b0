#!/usr/bin/env python3
# main.py
"""
Главная точка входа GPS Tracker.

Режимы:
    api                  — HTTP-сервис (FastAPI + uvicorn)
    replay <file.jsonl>  — прогон записанного трека через троттлер в кэш
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from gps_tracker.config import settings
from gps_tracker.common.logger import setup_logging, log_info, log_error, log_warning
from gps_tracker.common.constants import TypeMsg
from gps_tracker.core.source.queue_source import QueueSampleSource
from gps_tracker.core.tracker.state import TrackerState
from gps_tracker.core.throttle.service import now_ms
from gps_tracker.infra.kv_store import resolve_store
from gps_tracker.infra.redis_client import init_redis, close_redis
from gps_tracker.services.gps_tracker.service import GPSTrackerService
from gps_tracker.shared.models.sample import Sample


class SampleClock:
    """Часы по времени последней полученной точки (для прогона записанных треков)."""

    def __init__(self, state: TrackerState) -> None:
        self._state = state

    def __call__(self) -> int:
        if self._state.live_sample is None:
            return now_ms()
        return self._state.live_sample.timestamp


async def run_api() -> None:
    """Запускает HTTP-сервис."""
    import uvicorn

    await log_info(
        f"Запуск GPS Tracker на порту {settings.deployment.GPS_TRACKER_PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "gps_tracker.services.gps_tracker.app:app",
        host=settings.deployment.GPS_TRACKER_HOST,
        port=settings.deployment.GPS_TRACKER_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("GPS Tracker: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_replay(path: Path) -> None:
    """
    Прогоняет трек из JSON Lines файла (одна точка на строку) через троттлер.

    Окно троттлинга отсчитывается по timestamp точек, а не по часам.
    """
    await init_redis()

    state = TrackerState()
    service = GPSTrackerService.from_settings(resolve_store(), state=state, clock=SampleClock(state))
    source = QueueSampleSource()

    await service.start(source)
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    await source.emit(Sample.model_validate(json.loads(line)))
                except ValueError as e:
                    await log_warning(f"Строка {line_no} пропущена: {e}")
                    await source.emit_error(f"Некорректная точка в строке {line_no}")

        await source.close()
        await service.throttle.drain()

        window = await service.refresh()
        stats = service.get_stats()
        await log_info(
            f"Прогон завершён: получено {stats['offered']}, в кэш {stats['admitted']}, "
            f"окно {len(window)}/{service.cache.capacity}",
            type_msg=TypeMsg.INFO,
        )
        if service.state.storage_message:
            await log_warning(service.state.storage_message)
    finally:
        await service.stop()
        await close_redis()


def print_usage() -> None:
    """Выводит справку."""
    print("""
Использование: python main.py [режим]

    api                    — HTTP-сервис GPS Tracker (:8092)
    replay <file.jsonl>    — прогон записанного трека в кэш

Примеры:
    python main.py
    python main.py replay tracks/morning.jsonl
    """)


async def main(argv: list[str]) -> int:
    """Выбирает режим по аргументам командной строки."""
    setup_logging()

    mode = argv[0].lower() if argv else "api"

    if mode in ("--help", "-h"):
        print_usage()
        return 0

    if mode == "api":
        await run_api()
        return 0

    if mode == "replay":
        if len(argv) < 2:
            print_usage()
            return 1
        path = Path(argv[1])
        if not path.exists():
            await log_error(f"Файл трека не найден: {path}")
            return 1
        await run_replay(path)
        return 0

    print(f"Ошибка: неизвестный режим '{mode}'")
    print_usage()
    return 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main(sys.argv[1:])))
    except KeyboardInterrupt:
        pass
