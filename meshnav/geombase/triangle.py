"""
Треугольник как значение: метрики и точечные запросы.

Треугольник не связан ни с какой сеткой, вершины не дедуплицируются.
"""

from __future__ import annotations

from typing import Optional
import numpy as np

from meshnav.geombase.line import LineSegment
from meshnav.geombase.plane import Plane
from meshnav.geombase.tolerance import VectorLike, as_vec3, length, normalize


class Triangle:
    """Три упорядоченные точки."""

    __slots__ = ("a", "b", "c")

    def __init__(self, a: VectorLike, b: VectorLike, c: VectorLike) -> None:
        self.a: np.ndarray = as_vec3(a)
        self.b: np.ndarray = as_vec3(b)
        self.c: np.ndarray = as_vec3(c)

    @classmethod
    def from_points(cls, a: VectorLike, b: VectorLike, c: VectorLike) -> "Triangle":
        return cls(a, b, c)

    def __repr__(self) -> str:
        return f"Triangle({self.a.tolist()}, {self.b.tolist()}, {self.c.tolist()})"

    def center(self) -> np.ndarray:
        """Центроид (среднее арифметическое вершин)."""
        return (self.a + self.b + self.c) / 3.0

    def area(self) -> float:
        return length(np.cross(self.b - self.a, self.c - self.a)) / 2.0

    def perimeter(self) -> float:
        """Сумма длин рёбер."""
        return (
            length(self.b - self.a)
            + length(self.c - self.b)
            + length(self.a - self.c)
        )

    def normal(self) -> Optional[np.ndarray]:
        """Единичная нормаль (по порядку обхода a->b->c) или None для вырожденного."""
        return normalize(np.cross(self.b - self.a, self.c - self.a))

    def plane(self) -> Plane:
        return Plane(self.a, np.cross(self.b - self.a, self.c - self.a))

    def contains_point(self, point: VectorLike, tolerance: float = 0.5) -> bool:
        """
        Лежит ли точка внутри треугольника.

        Точка проецируется на плоскость треугольника; расстояние до плоскости
        не должно превышать tolerance. Граница считается внутренней.
        """
        n = self.normal()
        if n is None:
            return False

        p = as_vec3(point)
        d = float(np.dot(p - self.a, n))
        if abs(d) > tolerance:
            return False
        p_proj = p - d * n

        # Барицентрические координаты через ориентированные площади
        e0 = np.dot(np.cross(self.b - self.a, p_proj - self.a), n)
        e1 = np.dot(np.cross(self.c - self.b, p_proj - self.b), n)
        e2 = np.dot(np.cross(self.a - self.c, p_proj - self.c), n)

        scale = length(np.cross(self.b - self.a, self.c - self.a))
        eps = 1e-9 * scale
        return e0 >= -eps and e1 >= -eps and e2 >= -eps

    def closest_point(self, point: VectorLike) -> np.ndarray:
        """
        Ближайшая к point точка треугольника (включая внутренность).

        Алгоритм из Real-Time Collision Detection (Ericson), 5.1.5.
        """
        p = as_vec3(point)
        a, b, c = self.a, self.b, self.c

        ab = b - a
        ac = c - a
        ap = p - a
        d1 = float(np.dot(ab, ap))
        d2 = float(np.dot(ac, ap))
        if d1 <= 0.0 and d2 <= 0.0:
            return a.copy()

        bp = p - b
        d3 = float(np.dot(ab, bp))
        d4 = float(np.dot(ac, bp))
        if d3 >= 0.0 and d4 <= d3:
            return b.copy()

        vc = d1 * d4 - d3 * d2
        if vc <= 0.0 and d1 >= 0.0 and d3 <= 0.0:
            v = d1 / (d1 - d3)
            return a + v * ab

        cp = p - c
        d5 = float(np.dot(ab, cp))
        d6 = float(np.dot(ac, cp))
        if d6 >= 0.0 and d5 <= d6:
            return c.copy()

        vb = d5 * d2 - d1 * d6
        if vb <= 0.0 and d2 >= 0.0 and d6 <= 0.0:
            w = d2 / (d2 - d6)
            return a + w * ac

        va = d3 * d6 - d5 * d4
        if va <= 0.0 and (d4 - d3) >= 0.0 and (d5 - d6) >= 0.0:
            w = (d4 - d3) / ((d4 - d3) + (d5 - d6))
            return b + w * (c - b)

        denom = va + vb + vc
        if denom == 0.0:
            # Вырожденный треугольник: ближайшая точка среди рёбер
            candidates = [
                LineSegment.from_points(a, b).closest_point(p),
                LineSegment.from_points(b, c).closest_point(p),
                LineSegment.from_points(c, a).closest_point(p),
            ]
            return min(candidates, key=lambda q: length(q - p))

        denom = 1.0 / denom
        v = vb * denom
        w = vc * denom
        return a + ab * v + ac * w
