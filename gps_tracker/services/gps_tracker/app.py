"""
FastAPI приложение для GPS Tracker.

Endpoints:
- POST /api/v1/gps/samples - точка от устройства (watch-колбэк)
- POST /api/v1/gps/errors - ошибка геолокации на устройстве
- GET /api/v1/gps/window - окно кэша (новые первыми)
- GET /api/v1/gps/live - последняя живая точка
- GET /api/v1/gps/watch-options - параметры подписки для устройства
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from gps_tracker.common.formatting import format_value
from gps_tracker.core.source.queue_source import WatchOptions
from gps_tracker.infra.kv_store import resolve_store
from gps_tracker.services.gps_tracker.service import GPSTrackerService
from gps_tracker.shared.models.common import HealthStatus
from gps_tracker.shared.models.sample import Position, Sample


SERVICE_NAME = "gps_tracker"
SERVICE_VERSION = "0.1.0"


# === MODELS ===

class IngestResponse(BaseModel):
    """Результат приёма точки."""
    status: str = "ok"
    admitted: bool
    storage_message: str | None = None


class SourceErrorReport(BaseModel):
    """Ошибка геолокации на устройстве."""
    message: str = Field(..., min_length=1)


class WindowResponse(BaseModel):
    """Окно кэша."""
    items: list[Sample]
    count: int
    capacity: int
    storage_available: bool
    storage_message: str | None = None


class LiveResponse(BaseModel):
    """Последняя живая точка в отформатированном виде."""
    sample: Sample | None = None
    latitude: str = "N/A"
    longitude: str = "N/A"
    altitude: str = "N/A"
    accuracy: str = "N/A"
    source_error: str | None = None
    storage_message: str | None = None


class StatsResponse(BaseModel):
    """Статистика сервиса."""
    offered: int
    admitted: int
    dropped: int
    failed: int
    poll_reads: int
    window_size: int
    storage_available: bool


# === SERVICE SINGLETON ===

_service: GPSTrackerService | None = None
_started_at: float = time.monotonic()


def get_service() -> GPSTrackerService:
    """Получить сервис."""
    if _service is None:
        raise RuntimeError("Service not initialized")
    return _service


# === LIFESPAN ===

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения."""
    global _service, _started_at

    from gps_tracker.common.logger import setup_logging
    from gps_tracker.infra.redis_client import close_redis, init_redis

    setup_logging()
    await init_redis()

    _service = GPSTrackerService.from_settings(resolve_store())
    _started_at = time.monotonic()
    await _service.start()

    yield

    await _service.stop()
    await close_redis()


# === APP ===

app = FastAPI(
    title="GPS Tracker",
    description="Приём GPS-точек, троттлинг записи и окно последних точек в Redis.",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# === HEALTH CHECK ===

@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    """Проверка здоровья сервиса. Без Redis сервис работает в деградированном режиме."""
    service = get_service()
    available = service.gate.is_available()
    return HealthStatus(
        service=SERVICE_NAME,
        status="healthy" if available else "degraded",
        version=SERVICE_VERSION,
        uptime_seconds=round(time.monotonic() - _started_at, 3),
        dependencies={"redis": "healthy" if available else "unavailable"},
    )


# === STATS ===

@app.get("/stats", response_model=StatsResponse, tags=["Stats"])
async def get_stats() -> StatsResponse:
    """Получить статистику сервиса."""
    stats = get_service().get_stats()
    return StatsResponse(**{name: stats[name] for name in StatsResponse.model_fields})


# === GPS ENDPOINTS ===

@app.post(
    "/api/v1/gps/samples",
    response_model=IngestResponse,
    tags=["GPS"],
    summary="Принять точку",
)
async def ingest_sample(position: Position) -> IngestResponse:
    """
    Принять точку от устройства.

    Точка всегда становится живым значением; в кэш попадает не чаще
    одного раза за окно троттлинга.
    """
    service = get_service()
    admitted = await service.ingest(position.to_sample())
    return IngestResponse(admitted=admitted, storage_message=service.state.storage_message)


@app.post(
    "/api/v1/gps/errors",
    tags=["GPS"],
    summary="Ошибка геолокации",
)
async def report_source_error(report: SourceErrorReport) -> dict[str, str]:
    """Ошибка геолокации отображается пользователю и не сохраняется в кэш."""
    get_service().report_error(report.message)
    return {"status": "reported"}


@app.get(
    "/api/v1/gps/window",
    response_model=WindowResponse,
    tags=["GPS"],
    summary="Окно кэша",
)
async def get_window(refresh: bool = False) -> WindowResponse:
    """
    Окно последних точек (новые первыми).

    По умолчанию отдаёт окно последнего опроса; refresh=true перечитывает кэш.
    """
    service = get_service()
    items = await service.refresh() if refresh else service.get_window()
    return WindowResponse(
        items=items,
        count=len(items),
        capacity=service.cache.capacity,
        storage_available=service.gate.is_available(),
        storage_message=service.state.storage_message,
    )


@app.get(
    "/api/v1/gps/live",
    response_model=LiveResponse,
    responses={404: {"description": "Точек ещё не было"}},
    tags=["GPS"],
    summary="Живая точка",
)
async def get_live(strict: bool = False) -> LiveResponse:
    """Последняя полученная точка (с форматированием для отображения)."""
    state = get_service().state
    sample = state.live_sample

    if sample is None:
        if strict:
            raise HTTPException(status_code=404, detail="Точек ещё не было")
        return LiveResponse(source_error=state.source_error, storage_message=state.storage_message)

    return LiveResponse(
        sample=sample,
        latitude=format_value(sample.latitude),
        longitude=format_value(sample.longitude),
        altitude=format_value(sample.altitude, " m"),
        accuracy=format_value(sample.accuracy, " m"),
        source_error=state.source_error,
        storage_message=state.storage_message,
    )


@app.get(
    "/api/v1/gps/watch-options",
    response_model=WatchOptions,
    tags=["GPS"],
    summary="Параметры подписки",
)
async def get_watch_options() -> WatchOptions:
    """Параметры watch-подписки, которые устройство должно использовать."""
    return WatchOptions.from_settings()


# === STARTUP ===

if __name__ == "__main__":
    import uvicorn
    from gps_tracker.config import settings

    uvicorn.run(
        app,
        host=settings.deployment.GPS_TRACKER_HOST,
        port=settings.deployment.GPS_TRACKER_PORT,
    )
