from gps_tracker.shared.models.common import HealthStatus
from gps_tracker.shared.models.sample import (
    Position,
    PositionCoords,
    Sample,
    SourceError,
    deserialize_window,
    serialize_window,
)

__all__ = [
    "HealthStatus",
    "Position",
    "PositionCoords",
    "Sample",
    "SourceError",
    "deserialize_window",
    "serialize_window",
]
