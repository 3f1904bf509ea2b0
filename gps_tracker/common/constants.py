"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Ключ хранилища. Версия в имени позволяет менять формат без конфликтов
GPS_CACHE_KEY = "gps_cache_v1"

# Максимальное количество точек в окне кэша
MAX_CACHE_ITEMS = 120

# Минимальный интервал между записями в кэш (мс)
THROTTLE_WINDOW_MS = 5000

# Интервал опроса кэша (мс)
POLL_INTERVAL_MS = 5000


class AdvisoryMessage(str, Enum):
    """Сообщения о состоянии хранилища для отображения пользователю."""
    STORAGE_MISSING = "Хранилище недоступно: Redis не подключён."
    STORE_UNAVAILABLE = "Кэш недоступен, отображаются только живые данные."
    CACHE_FAILED = "Не удалось сохранить GPS-точку в кэш."
