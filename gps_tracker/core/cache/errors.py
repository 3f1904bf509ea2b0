"""
Ошибки кэша и результат операций.

Ни одна из ошибок не выходит за пределы ядра: операции кэша возвращают
CacheResult с указанием причины деградации.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from gps_tracker.shared.models.sample import Sample


class CacheIssue(str, Enum):
    """Причина деградации операции кэша."""
    STORE_UNAVAILABLE = "store_unavailable"
    MALFORMED_STORED_DATA = "malformed_stored_data"
    WRITE_FAILURE = "write_failure"
    SAMPLE_SOURCE_ERROR = "sample_source_error"


class GpsTrackerError(Exception):
    """Базовая ошибка GPS-трекера."""

    issue: CacheIssue

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.issue.value)


class StoreUnavailableError(GpsTrackerError):
    """Хранилище отсутствует или не отвечает."""
    issue = CacheIssue.STORE_UNAVAILABLE


class MalformedStoredDataError(GpsTrackerError):
    """Сохранённые данные не являются массивом точек."""
    issue = CacheIssue.MALFORMED_STORED_DATA


class CacheWriteError(GpsTrackerError):
    """Хранилище отклонило запись."""
    issue = CacheIssue.WRITE_FAILURE


@dataclass(frozen=True)
class CacheResult:
    """Результат операции кэша: окно точек и причина деградации (если была)."""
    samples: list[Sample] = field(default_factory=list)
    issue: CacheIssue | None = None

    @property
    def ok(self) -> bool:
        return self.issue is None

    @classmethod
    def failed(cls, error: GpsTrackerError) -> "CacheResult":
        """Пустой результат для ошибки."""
        return cls(samples=[], issue=error.issue)
