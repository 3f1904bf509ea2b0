"""
Тесты для троттлинга записи GPS-точек.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from gps_tracker.common.constants import AdvisoryMessage, THROTTLE_WINDOW_MS
from gps_tracker.core.cache.errors import CacheIssue, CacheResult
from gps_tracker.core.cache.service import PointCache
from gps_tracker.core.source.queue_source import QueueSampleSource
from gps_tracker.core.throttle.service import IngestionThrottle


class FailingSource:
    """Источник, который отдаёт точки и затем падает."""

    def __init__(self, samples, error: Exception) -> None:
        self._samples = list(samples)
        self._error = error

    async def events(self):
        for sample in self._samples:
            yield sample
        raise self._error


@pytest.fixture
def throttle(cache: PointCache, state, clock) -> IngestionThrottle:
    return IngestionThrottle(cache, state, clock=clock)


async def _emit_burst(throttle: IngestionThrottle, clock, make_sample, count: int, span_ms: int) -> int:
    """Равномерно подаёт count точек на интервале span_ms, возвращает число пропущенных."""
    start = clock.now
    admitted = 0
    for i in range(count):
        clock.now = start + round(i * span_ms / (count - 1))
        if await throttle.offer(make_sample(i)):
            admitted += 1
    return admitted


class TestThrottleCadence:
    """Тесты окна троттлинга."""

    @pytest.mark.asyncio
    async def test_first_sample_always_admitted(self, cache, state, make_sample) -> None:
        """Первая точка пропускается даже при нулевых часах."""
        throttle = IngestionThrottle(cache, state, clock=lambda: 0)

        assert await throttle.offer(make_sample(0)) is True
        assert throttle.last_admitted_at_ms == 0

    @pytest.mark.asyncio
    async def test_burst_within_window(self, throttle, clock, make_sample, cache) -> None:
        """50 точек за 4900 мс — одна запись."""
        admitted = await _emit_burst(throttle, clock, make_sample, count=50, span_ms=4900)

        assert admitted == 1
        assert await cache.read() == [make_sample(0)]

    @pytest.mark.asyncio
    async def test_burst_across_two_windows(self, throttle, clock, make_sample, cache) -> None:
        """50 точек за 10100 мс — две записи: в начале и после границы 5000 мс."""
        admitted = await _emit_burst(throttle, clock, make_sample, count=50, span_ms=10100)

        assert admitted == 2
        window = await cache.read()
        assert len(window) == 2
        assert window[1] == make_sample(0)

    @pytest.mark.asyncio
    async def test_admits_exactly_at_window_boundary(self, throttle, clock, make_sample) -> None:
        await throttle.offer(make_sample(0))

        clock.advance(THROTTLE_WINDOW_MS - 1)
        assert await throttle.offer(make_sample(1)) is False

        clock.advance(1)
        assert await throttle.offer(make_sample(2)) is True

    @pytest.mark.asyncio
    async def test_window_restarts_from_admission(self, throttle, clock, make_sample) -> None:
        """Отброшенные точки не сдвигают окно."""
        await throttle.offer(make_sample(0))
        for i in range(1, 5):
            clock.advance(1000)
            await throttle.offer(make_sample(i))

        clock.advance(1000)
        assert await throttle.offer(make_sample(5)) is True

    @pytest.mark.asyncio
    async def test_independent_instances(self, cache, state, clock, make_sample) -> None:
        first = IngestionThrottle(cache, state, clock=clock)
        second = IngestionThrottle(cache, state, clock=clock)

        assert await first.offer(make_sample(0)) is True
        assert await second.offer(make_sample(1)) is True
        assert await first.offer(make_sample(2)) is False

    @pytest.mark.asyncio
    async def test_dropped_samples_still_live(self, throttle, clock, make_sample, state) -> None:
        await throttle.offer(make_sample(0))
        clock.advance(100)
        await throttle.offer(make_sample(1))

        assert state.live_sample == make_sample(1)

    @pytest.mark.asyncio
    async def test_stats(self, throttle, clock, make_sample) -> None:
        await _emit_burst(throttle, clock, make_sample, count=10, span_ms=900)

        stats = throttle.get_stats()

        assert stats["offered"] == 10
        assert stats["admitted"] == 1
        assert stats["dropped"] == 9
        assert stats["failed"] == 0


class TestThrottleFailures:
    """Тесты деградации при ошибках записи."""

    @pytest.mark.asyncio
    async def test_write_failure_is_advisory(self, throttle, store, clock, make_sample, state) -> None:
        state.set_storage_available(True)
        store.fail_set = True

        assert await throttle.offer(make_sample(0)) is True

        assert state.storage_message == AdvisoryMessage.CACHE_FAILED.value
        assert state.last_issue is CacheIssue.WRITE_FAILURE
        assert throttle.get_stats()["failed"] == 1

    @pytest.mark.asyncio
    async def test_keeps_cadence_after_failure(self, throttle, store, clock, make_sample, cache) -> None:
        store.fail_set = True
        await throttle.offer(make_sample(0))

        store.fail_set = False
        clock.advance(1000)
        assert await throttle.offer(make_sample(1)) is False

        clock.advance(THROTTLE_WINDOW_MS)
        assert await throttle.offer(make_sample(2)) is True
        assert await cache.read() == [make_sample(2)]

    @pytest.mark.asyncio
    async def test_unexpected_cache_exception(self, state, clock, make_sample) -> None:
        cache = AsyncMock(spec=PointCache)
        cache.push = AsyncMock(side_effect=RuntimeError("boom"))
        throttle = IngestionThrottle(cache, state, clock=clock)

        assert await throttle.offer(make_sample(0)) is True
        assert state.last_issue is CacheIssue.WRITE_FAILURE

    @pytest.mark.asyncio
    async def test_unavailable_store(self, unavailable_cache, state, clock, make_sample) -> None:
        state.set_storage_available(False)
        throttle = IngestionThrottle(unavailable_cache, state, clock=clock)

        assert await throttle.offer(make_sample(0)) is True

        assert state.live_sample == make_sample(0)
        assert state.storage_message == AdvisoryMessage.STORAGE_MISSING.value
        assert state.last_issue is CacheIssue.STORE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_success_clears_failure_message(self, state, clock, make_sample) -> None:
        cache = AsyncMock(spec=PointCache)
        cache.push = AsyncMock(
            side_effect=[
                CacheResult(issue=CacheIssue.WRITE_FAILURE),
                CacheResult(samples=[make_sample(1)]),
            ]
        )
        state.set_storage_available(True)
        throttle = IngestionThrottle(cache, state, clock=clock)

        await throttle.offer(make_sample(0))
        assert state.storage_message == AdvisoryMessage.CACHE_FAILED.value

        clock.advance(THROTTLE_WINDOW_MS)
        await throttle.offer(make_sample(1))
        assert state.storage_message is None

    def test_source_error_not_persisted(self, throttle, store, state) -> None:
        throttle.report_error("Location permission denied")

        assert state.source_error == "Location permission denied"
        assert state.last_issue is CacheIssue.SAMPLE_SOURCE_ERROR
        assert store.set_calls == 0


class TestThrottleSubscription:
    """Тесты подписки на источник."""

    @pytest.mark.asyncio
    async def test_consumes_source(self, throttle, make_sample, cache, state) -> None:
        source = QueueSampleSource()
        await throttle.subscribe(source)

        await source.emit(make_sample(0))
        await source.emit_error("timeout")
        await source.emit(make_sample(1))
        await source.close()
        await throttle.drain()

        assert await cache.read() == [make_sample(0)]
        assert state.live_sample == make_sample(1)
        assert state.source_error is None
        assert throttle.is_subscribed is False

    @pytest.mark.asyncio
    async def test_source_error_surfaced(self, throttle, state) -> None:
        source = QueueSampleSource()
        await throttle.subscribe(source)

        await source.emit_error("GPS signal lost")
        await source.close()
        await throttle.drain()

        assert state.source_error == "GPS signal lost"

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_admissions(self, throttle, make_sample, store) -> None:
        source = QueueSampleSource()
        await throttle.subscribe(source)

        await throttle.unsubscribe()
        await source.emit(make_sample(0))
        await asyncio.sleep(0)

        assert throttle.is_subscribed is False
        assert store.set_calls == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self, throttle) -> None:
        await throttle.unsubscribe()

        await throttle.subscribe(QueueSampleSource())
        await throttle.unsubscribe()
        await throttle.unsubscribe()

        assert throttle.is_subscribed is False

    @pytest.mark.asyncio
    async def test_subscribe_twice_keeps_one_consumer(self, throttle) -> None:
        source = QueueSampleSource()
        await throttle.subscribe(source)
        task = throttle._task

        await throttle.subscribe(source)

        assert throttle._task is task
        await throttle.unsubscribe()

    @pytest.mark.asyncio
    async def test_failing_source_is_reported(self, throttle, make_sample, cache, state) -> None:
        """Сбой итерации источника отображается как ошибка источника."""
        await throttle.subscribe(FailingSource([make_sample(0)], OSError("device watch lost")))
        await throttle.drain()

        assert await cache.read() == [make_sample(0)]
        assert "device watch lost" in state.source_error
        assert state.last_issue is CacheIssue.SAMPLE_SOURCE_ERROR
        assert throttle.is_subscribed is False

    @pytest.mark.asyncio
    async def test_unsubscribe_after_source_failure(self, throttle) -> None:
        await throttle.subscribe(FailingSource([], OSError("device watch lost")))
        await asyncio.sleep(0)

        await throttle.unsubscribe()

        assert throttle.is_subscribed is False
