"""
Троттлинг записи GPS-точек в кэш.
"""

from gps_tracker.core.throttle.service import IngestionThrottle, now_ms

__all__ = ["IngestionThrottle", "now_ms"]
