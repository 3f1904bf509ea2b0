"""
Ядро: кэш GPS-точек, троттлинг записи, периодическое чтение.
"""
