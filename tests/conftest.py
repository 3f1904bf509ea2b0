"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("REDIS_PASSWORD", "")

from gps_tracker.core.cache.gate import AvailabilityGate
from gps_tracker.core.cache.service import PointCache
from gps_tracker.core.tracker.state import TrackerState
from gps_tracker.shared.models.sample import Sample


# =============================================================================
# ТЕСТОВЫЕ ДВОЙНИКИ
# =============================================================================

class InMemoryStore:
    """Хранилище в памяти с возможностью имитировать сбои."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.get_calls = 0
        self.set_calls = 0
        self.fail_get = False
        self.fail_set = False

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        if self.fail_get:
            raise ConnectionError("get failed")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.set_calls += 1
        if self.fail_set:
            raise ConnectionError("set failed")
        self.data[key] = value
        return True


class FakeClock:
    """Управляемые часы в миллисекундах."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


# =============================================================================
# ФИКСТУРЫ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def cache(store: InMemoryStore) -> PointCache:
    """Кэш поверх хранилища в памяти."""
    return PointCache(AvailabilityGate(store))


@pytest.fixture
def unavailable_cache() -> PointCache:
    """Кэш без хранилища."""
    return PointCache(AvailabilityGate(None))


@pytest.fixture
def state() -> TrackerState:
    return TrackerState()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=1_700_000_000_000)


@pytest.fixture
def make_sample() -> Callable[..., Sample]:
    """Фабрика точек: номер точки кодируется в timestamp и координатах."""

    def _make(index: int = 0, **overrides) -> Sample:
        data = {
            "latitude": 50.4501 + index * 0.0001,
            "longitude": 30.5234 + index * 0.0001,
            "altitude": 120.0,
            "accuracy": 5.0,
            "timestamp": 1_700_000_000_000 + index * 1000,
        }
        data.update(overrides)
        return Sample(**data)

    return _make
