# gps_tracker/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Секретные данные переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gps_tracker.common.constants import (
    GPS_CACHE_KEY,
    MAX_CACHE_ITEMS,
    POLL_INTERVAL_MS,
    THROTTLE_WINDOW_MS,
)


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации (можно переопределить через GPS_TRACKER_CONFIG)."""
    override = os.getenv("GPS_TRACKER_CONFIG")
    if override:
        return Path(override)
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "gps_tracker"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_FORMAT: str = "colored"  # colored | json
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/gps_tracker.log"
    LOG_MAX_BYTES: int = 10485760

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_format(cls, v: str) -> str:
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class RedisSettings(BaseModel):
    """Настройки Redis."""
    REDIS_ENABLED: bool = True
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "gps"
    REDIS_MAX_CONNECTIONS: int = 10

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Пароль всегда берётся из окружения, если задан."""
        return os.getenv("REDIS_PASSWORD", v or "")

    @property
    def url(self) -> str:
        """URL подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class CacheSettings(BaseModel):
    """Параметры кэша GPS-точек."""
    CACHE_KEY: str = GPS_CACHE_KEY
    CACHE_CAPACITY: int = Field(default=MAX_CACHE_ITEMS, ge=1)
    THROTTLE_WINDOW_MS: int = Field(default=THROTTLE_WINDOW_MS, ge=0)
    POLL_INTERVAL_MS: int = Field(default=POLL_INTERVAL_MS, gt=0)


class WatchSettings(BaseModel):
    """Параметры подписки на геолокацию устройства."""
    ENABLE_HIGH_ACCURACY: bool = True
    DISTANCE_FILTER: float = 0
    TIMEOUT_MS: int = 15000
    MAXIMUM_AGE_MS: int = 2000


class DeploymentSettings(BaseModel):
    """Настройки развертывания."""
    GPS_TRACKER_HOST: str = "0.0.0.0"
    GPS_TRACKER_PORT: int = 8092


class Settings(BaseSettings):
    """Корневой объект настроек."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Хост Redis и его пароль переопределяются из переменных окружения.
        """
        config_data = load_config_json()

        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        def pick(model: type[BaseModel]) -> dict[str, Any]:
            return {name: data[name] for name in model.model_fields if name in data}

        redis_data = pick(RedisSettings)
        if os.getenv("REDIS_HOST"):
            redis_data["REDIS_HOST"] = os.environ["REDIS_HOST"]

        return cls(
            system=SystemSettings(**pick(SystemSettings)),
            logging=LoggingSettings(**pick(LoggingSettings)),
            redis=RedisSettings(**redis_data),
            cache=CacheSettings(**pick(CacheSettings)),
            watch=WatchSettings(**pick(WatchSettings)),
            deployment=DeploymentSettings(**pick(DeploymentSettings)),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
