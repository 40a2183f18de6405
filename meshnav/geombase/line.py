"""
Прямые и отрезки в 3D.

Направление прямой хранится как есть (не обязательно единичное),
все сравнения направлений выполняются после нормализации.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import numpy as np

from meshnav.geombase.interval import Interval
from meshnav.geombase.tolerance import (
    VectorLike,
    approx_eq,
    approx_zero,
    as_vec3,
    is_zero_length,
    length,
    normalize,
)

_UNIT_RANGE = Interval.from_points(0.0, 1.0)


class Line:
    """Прямая: опорная точка + направляющий вектор."""

    __slots__ = ("point", "vec")

    def __init__(self, point: VectorLike, vec: VectorLike) -> None:
        self.point: np.ndarray = as_vec3(point)
        self.vec: np.ndarray = as_vec3(vec)

    def __repr__(self) -> str:
        return f"Line(point={self.point.tolist()}, vec={self.vec.tolist()})"

    def contains(self, point: VectorLike) -> bool:
        """Лежит ли точка на прямой."""
        diff = as_vec3(point) - self.point
        # Точка в опорной точке: нормализовать разность нельзя
        if is_zero_length(diff):
            return True

        direction = normalize(self.vec)
        if direction is None:
            return False
        return approx_eq(abs(float(np.dot(direction, diff / length(diff)))), 1.0)

    def parallel_to(self, other: "Line") -> bool:
        """Параллельны ли прямые (включая противоположные направления)."""
        a = normalize(self.vec)
        b = normalize(other.vec)
        if a is None or b is None:
            return False
        return approx_eq(abs(float(np.dot(a, b))), 1.0)

    def point_at(self, t: float) -> np.ndarray:
        return self.point + self.vec * t

    def intersection(self, other: "Line") -> Optional["LineIntersection"]:
        """
        Пересечение двух прямых.

        Returns:
            LineIntersection с точкой, LineIntersection с прямой (если прямые
            совпадают), или None для скрещивающихся, параллельных или
            численно вырожденных случаев.
        """
        if self.contains(other.point) or other.contains(self.point):
            if self.parallel_to(other):
                return LineIntersection(line=other)
            shared = self.point if other.contains(self.point) else other.point
            return LineIntersection(point=shared.copy())

        d1 = normalize(self.vec)
        d2 = normalize(other.vec)
        if d1 is None or d2 is None:
            return None

        # Прямые должны лежать в одной плоскости: смешанное произведение = 0
        g = other.point - self.point
        triple = float(np.dot(np.cross(d1, d2), g))
        if not approx_zero(triple, scale=length(g)):
            return None

        h = np.cross(other.vec, g)
        k = np.cross(other.vec, self.vec)
        h_len = length(h)
        k_len = length(k)
        if is_zero_length(h) or approx_zero(k_len, scale=length(self.vec) * length(other.vec)):
            return None

        t = h_len / k_len * np.sign(np.dot(h, k))
        return LineIntersection(point=self.point + self.vec * t)


class LineSegment:
    """Отрезок: начальная точка + вектор до конечной точки."""

    __slots__ = ("point", "vec")

    def __init__(self, point: VectorLike, vec: VectorLike) -> None:
        self.point: np.ndarray = as_vec3(point)
        self.vec: np.ndarray = as_vec3(vec)

    @classmethod
    def from_points(cls, a: VectorLike, b: VectorLike) -> "LineSegment":
        a = as_vec3(a)
        return cls(a, as_vec3(b) - a)

    def __repr__(self) -> str:
        return f"LineSegment(point={self.point.tolist()}, vec={self.vec.tolist()})"

    def length(self) -> float:
        return length(self.vec)

    def end(self) -> np.ndarray:
        return self.point + self.vec

    def midpoint(self) -> np.ndarray:
        return self.point + self.vec * 0.5

    def to_line(self) -> Line:
        return Line(self.point, self.vec)

    def closest_point(self, p: VectorLike) -> np.ndarray:
        """Ближайшая к p точка отрезка."""
        denom = float(np.dot(self.vec, self.vec))
        if denom == 0.0:
            return self.point.copy()
        t = float(np.dot(as_vec3(p) - self.point, self.vec)) / denom
        return self.point + self.vec * _UNIT_RANGE.clamp_point(t)


@dataclass
class LineIntersection:
    """Результат пересечения прямых: точка или целая прямая."""

    point: Optional[np.ndarray] = None
    line: Optional[Line] = None

    def is_point(self) -> bool:
        return self.point is not None

    def is_line(self) -> bool:
        return self.line is not None
