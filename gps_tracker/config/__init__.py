"""
Модуль конфигурации.
Экспортирует настройки приложения.
"""

from gps_tracker.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
