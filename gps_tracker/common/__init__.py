"""
Общие утилиты: логирование, константы, форматирование.
"""
