"""
Базовые геометрические классы (Geometric Base).

Содержит геометрическое ядро навигации:
- Interval - одномерные интервалы (пустые, точки, отрезки)
- Line, LineSegment - прямые и отрезки в 3D
- Plane - плоскости в 3D
- Triangle - метрики и точечные запросы для треугольника
"""

from .interval import (
    Interval,
    EmptyInterval,
    StrictInterval,
    PointInterval,
    PointsInterval,
)
from .line import Line, LineSegment, LineIntersection
from .plane import Plane, PlaneIntersection
from .triangle import Triangle
from .tolerance import EPSILON, PARALLEL_EPSILON, approx_eq, normalize

__all__ = [
    'Interval',
    'EmptyInterval',
    'StrictInterval',
    'PointInterval',
    'PointsInterval',
    'Line',
    'LineSegment',
    'LineIntersection',
    'Plane',
    'PlaneIntersection',
    'Triangle',
    'EPSILON',
    'PARALLEL_EPSILON',
    'approx_eq',
    'normalize',
]
