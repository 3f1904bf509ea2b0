"""
Периодическое чтение кэша GPS-точек.
"""

from gps_tracker.core.poller.service import CachePoller

__all__ = ["CachePoller"]
