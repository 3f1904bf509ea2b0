"""
Модели GPS-точек и сериализация окна кэша.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, TypeAdapter


class Sample(BaseModel):
    """
    Одно наблюдение геолокации.

    Диапазон координат не проверяется, но NaN и бесконечности отклоняются:
    в JSON окна они превратились бы в null. Отсутствующие altitude/accuracy
    (None) отличаются от нулевых значений.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float
    longitude: float
    altitude: float | None = None
    accuracy: float | None = None  # метры
    timestamp: int  # мс с начала эпохи


class SourceError(BaseModel):
    """Ошибка источника геолокации (вместо точки)."""

    model_config = ConfigDict(frozen=True)

    message: str


class PositionCoords(BaseModel):
    """Координаты в формате watch-колбэка устройства."""

    model_config = ConfigDict(allow_inf_nan=False)

    latitude: float
    longitude: float
    altitude: float | None = None
    accuracy: float | None = None


class Position(BaseModel):
    """Позиция в формате watch-колбэка устройства."""
    coords: PositionCoords
    timestamp: int

    def to_sample(self) -> Sample:
        """Преобразует позицию устройства в Sample."""
        return Sample(
            latitude=self.coords.latitude,
            longitude=self.coords.longitude,
            altitude=self.coords.altitude,
            accuracy=self.coords.accuracy,
            timestamp=self.timestamp,
        )


_WINDOW_ADAPTER: TypeAdapter[list[Sample]] = TypeAdapter(list[Sample])


def serialize_window(window: list[Sample]) -> str:
    """Сериализует окно в JSON-массив объектов (None -> null)."""
    return _WINDOW_ADAPTER.dump_json(window).decode("utf-8")


def deserialize_window(raw: str) -> list[Sample]:
    """
    Десериализует окно из JSON.

    Raises:
        pydantic.ValidationError: если данные не являются массивом точек
    """
    return _WINDOW_ADAPTER.validate_json(raw)
