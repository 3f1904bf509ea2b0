"""
Общие модели для всех сервисов.
"""
