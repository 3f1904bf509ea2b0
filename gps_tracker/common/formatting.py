"""
Форматирование значений для отображения.
"""

from __future__ import annotations

import math


def format_value(value: float | None, suffix: str = "") -> str:
    """
    Форматирует координату или метрику с 6 знаками после запятой.

    Отсутствующее значение (None) и NaN отображаются как "N/A".
    """
    if value is None or math.isnan(value):
        return "N/A"

    return f"{value:.6f}{suffix}"
