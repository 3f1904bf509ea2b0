"""
Источник GPS-точек.
"""

from gps_tracker.core.source.queue_source import QueueSampleSource, SampleEvent, SampleSource, WatchOptions

__all__ = ["QueueSampleSource", "SampleEvent", "SampleSource", "WatchOptions"]
