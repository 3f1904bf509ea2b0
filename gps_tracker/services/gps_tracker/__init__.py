"""
GPS Tracker Service — HTTP-приём точек и чтение окна кэша.
"""
