"""
GPS Tracker.
Кэширование последних GPS-точек в Redis с троттлингом записи и периодическим чтением.
"""
