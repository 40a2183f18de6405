"""
Плоскости в 3D.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import numpy as np

from meshnav.geombase.line import Line
from meshnav.geombase.tolerance import (
    PARALLEL_EPSILON,
    VectorLike,
    approx_eq,
    approx_zero,
    as_vec3,
    length,
    normalize,
)


class Plane:
    """Плоскость: опорная точка + нормаль (не обязательно единичная)."""

    __slots__ = ("point", "normal")

    def __init__(self, point: VectorLike, normal: VectorLike) -> None:
        self.point: np.ndarray = as_vec3(point)
        self.normal: np.ndarray = as_vec3(normal)

    @classmethod
    def from_points(cls, a: VectorLike, b: VectorLike, c: VectorLike) -> "Plane":
        """Плоскость через три точки."""
        a = as_vec3(a)
        return cls(a, np.cross(a - as_vec3(b), a - as_vec3(c)))

    def __repr__(self) -> str:
        return f"Plane(point={self.point.tolist()}, normal={self.normal.tolist()})"

    def signed_distance(self, point: VectorLike) -> Optional[float]:
        """Расстояние со знаком до плоскости, None для вырожденной нормали."""
        n = normalize(self.normal)
        if n is None:
            return None
        return float(np.dot(n, as_vec3(point) - self.point))

    def contains(self, point: VectorLike) -> bool:
        diff = as_vec3(point) - self.point
        n = normalize(self.normal)
        if n is None:
            return False
        return approx_zero(float(np.dot(n, diff)), scale=length(diff))

    def contains_line(self, line: Line) -> bool:
        return self.contains(line.point) and self.contains(line.point + line.vec)

    def parallel_to(self, other: "Plane") -> bool:
        a = normalize(self.normal)
        b = normalize(other.normal)
        if a is None or b is None:
            return False
        return approx_eq(abs(float(np.dot(a, b))), 1.0)

    def coplanar_with(self, other: "Plane") -> bool:
        return self.parallel_to(other) and self.contains(other.point)

    def intersection(self, other: "Plane") -> Optional["PlaneIntersection"]:
        """
        Пересечение двух плоскостей.

        Returns:
            PlaneIntersection с плоскостью (совпадающие плоскости),
            с прямой, или None для параллельных несовпадающих плоскостей.
        """
        if self.coplanar_with(other):
            return PlaneIntersection(plane=other)

        n1 = normalize(self.normal)
        n2 = normalize(other.normal)
        if n1 is None or n2 is None:
            return None

        w = float(np.dot(n1, n2))
        divisor = 1.0 - w * w
        if divisor < PARALLEL_EPSILON ** 2:
            return None

        d1 = float(np.dot(n1, self.point))
        d2 = float(np.dot(n2, other.point))
        origin = (n1 * (d1 - d2 * w) + n2 * (d2 - d1 * w)) / divisor

        direction = normalize(np.cross(n1, n2))
        if direction is None:
            return None
        return PlaneIntersection(line=Line(origin, direction))


@dataclass
class PlaneIntersection:
    """Результат пересечения плоскостей: прямая или плоскость."""

    line: Optional[Line] = None
    plane: Optional[Plane] = None

    def is_line(self) -> bool:
        return self.line is not None

    def is_plane(self) -> bool:
        return self.plane is not None
