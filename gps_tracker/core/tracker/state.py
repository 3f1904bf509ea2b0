"""
Состояние GPS-трекера для отображения.

Троттлер публикует сюда живые точки, ошибки источника и сообщения о кэше,
поллер — окно из кэша.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gps_tracker.common.constants import AdvisoryMessage
from gps_tracker.core.cache.errors import CacheIssue
from gps_tracker.shared.models.sample import Sample


_ISSUE_MESSAGES: dict[CacheIssue, AdvisoryMessage] = {
    CacheIssue.STORE_UNAVAILABLE: AdvisoryMessage.STORE_UNAVAILABLE,
    CacheIssue.WRITE_FAILURE: AdvisoryMessage.CACHE_FAILED,
}


@dataclass
class TrackerState:
    """Последнее опубликованное состояние."""
    live_sample: Sample | None = None
    source_error: str | None = None
    storage_message: str | None = None
    storage_available: bool = False
    window: list[Sample] = field(default_factory=list)
    last_issue: CacheIssue | None = None

    def get_window(self) -> list[Sample]:
        """Текущее окно кэша (новые первыми)."""
        return list(self.window)

    def publish_sample(self, sample: Sample) -> None:
        self.live_sample = sample
        self.source_error = None

    def publish_source_error(self, message: str) -> None:
        self.source_error = message
        self.last_issue = CacheIssue.SAMPLE_SOURCE_ERROR

    def publish_window(self, window: list[Sample], issue: CacheIssue | None = None) -> None:
        """Полностью заменяет опубликованное окно."""
        self.window = list(window)
        self.report_issue(issue)

    def set_storage_available(self, available: bool) -> None:
        self.storage_available = available
        if available:
            self.storage_message = None
        else:
            self.storage_message = AdvisoryMessage.STORAGE_MISSING.value

    def report_issue(self, issue: CacheIssue | None) -> None:
        """
        Отражает результат операции кэша в сообщении для пользователя.

        Повреждённые данные не сообщаются: пользователь ничего не может с ними сделать.
        """
        if issue is None:
            if self.storage_available:
                self.storage_message = None
            return

        self.last_issue = issue
        message = _ISSUE_MESSAGES.get(issue)
        if message is not None and not (
            issue is CacheIssue.STORE_UNAVAILABLE and not self.storage_available
        ):
            self.storage_message = message.value
