#!/usr/bin/env python3
"""
Entrypoint для GPS Tracker.

Запуск:
    python entrypoint_gps_tracker.py

Порт по умолчанию: 8092
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from gps_tracker.config import settings


def main() -> None:
    """Запустить GPS Tracker."""
    uvicorn.run(
        "gps_tracker.services.gps_tracker.app:app",
        host=settings.deployment.GPS_TRACKER_HOST,
        port=settings.deployment.GPS_TRACKER_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
