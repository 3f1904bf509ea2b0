"""
Ограниченный кэш GPS-точек в долговременном хранилище.
"""

from gps_tracker.core.cache.errors import (
    CacheIssue,
    CacheResult,
    CacheWriteError,
    GpsTrackerError,
    MalformedStoredDataError,
    StoreUnavailableError,
)
from gps_tracker.core.cache.gate import AvailabilityGate
from gps_tracker.core.cache.service import PointCache

__all__ = [
    "AvailabilityGate",
    "CacheIssue",
    "CacheResult",
    "CacheWriteError",
    "GpsTrackerError",
    "MalformedStoredDataError",
    "PointCache",
    "StoreUnavailableError",
]
