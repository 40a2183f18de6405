"""
Meshnav - геометрическое ядро и навигация по треугольным сеткам.

Основные модули:
- geombase - интервалы, прямые, плоскости, треугольники
- navmesh - инкрементальная сборка навигационной сетки и поиск пути
"""

# Базовая геометрия
from .geombase import Interval, Line, LineSegment, Plane, Triangle

__version__ = '0.1.0'

__all__ = [
    # Geombase
    'Interval',
    'Line',
    'LineSegment',
    'Plane',
    'Triangle',
]
