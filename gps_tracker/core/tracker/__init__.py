"""
Состояние, отображаемое потребителю.
"""

from gps_tracker.core.tracker.state import TrackerState

__all__ = ["TrackerState"]
