"""
Базовые структуры данных для NavMesh.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import numpy as np
from scipy.spatial import cKDTree

from meshnav.geombase import Triangle
from meshnav.geombase.tolerance import VectorLike, as_vec3
from meshnav.navmesh.pathfinding import (
    astar_triangles,
    build_adjacency,
    compute_centroids,
    corridor_normal,
    find_triangle_containing_point,
    funnel_algorithm,
    get_portals_from_path,
    midpoint_path,
    triangle_at,
)


class InvalidNavMeshError(Exception):
    """Снимок NavMesh внутренне несогласован (нарушен инвариант индексов)."""


class NavQuery(Enum):
    """Способ привязки точки к сетке."""

    ACCURACY = "accuracy"
    """Точка должна лежать внутри треугольника (точный режим)."""

    CLOSEST = "closest"
    """Точка притягивается к ближайшей точке сетки (быстрый приближённый режим)."""


class NavPathMode(Enum):
    """Способ построения точек пути по коридору треугольников."""

    MID_POINTS = "mid_points"
    """Через середины порталов."""

    ACCURACY = "accuracy"
    """Funnel Algorithm — кратчайший путь внутри коридора."""


@dataclass
class NavMeshConfig:
    """Конфигурация для построения NavMesh и поиска пути."""

    merge_tolerance: float = 1e-6
    """Покомпонентный допуск слияния вершин."""

    point_tolerance: float = 0.5
    """Максимальное расстояние от точки до плоскости треугольника (NavQuery.ACCURACY)."""

    query: NavQuery = NavQuery.ACCURACY
    """Привязка старта и цели к сетке."""

    path_mode: NavPathMode = NavPathMode.MID_POINTS
    """Построение точек пути."""

    closest_candidates: int = 8
    """Сколько ближайших по центроиду треугольников проверять в NavQuery.CLOSEST."""

    clear_path_on_failure: bool = False
    """Очищать путь агента, если новый путь не найден (иначе остаётся прежний)."""

    compact_orphan_ratio: float = 0.5
    """Доля осиротевших вершин в пуле, после которой пул уплотняется."""


@dataclass(eq=False)
class NavMesh:
    """
    Неизменяемый снимок навигационной сетки для поиска пути.

    Строится целиком из пула вершин и индекса треугольников.
    """

    vertices: np.ndarray
    """Вершины в мировых координатах, shape (N, 3)."""

    triangles: np.ndarray
    """Индексы треугольников, shape (M, 3)."""

    name: str = ""
    """Имя навигационной сетки."""

    neighbors: np.ndarray = field(init=False, repr=False)
    """Соседи по каждому ребру, shape (M, 3), -1 = нет соседа."""

    centroids: np.ndarray = field(init=False, repr=False)
    """Центры треугольников, shape (M, 3)."""

    _tree: Optional[cKDTree] = field(init=False, repr=False, default=None)

    _reach: float = field(init=False, repr=False, default=0.0)
    """Наибольшее расстояние от центроида треугольника до его вершины."""

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=np.float64)
        if vertices.size == 0:
            vertices = vertices.reshape(0, 3)
        triangles = np.array(self.triangles, dtype=np.int64)
        if triangles.size == 0:
            triangles = triangles.reshape(0, 3)

        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise InvalidNavMeshError(f"vertices must have shape (N, 3), got {vertices.shape}")
        if triangles.ndim != 2 or triangles.shape[1] != 3:
            raise InvalidNavMeshError(f"triangles must have shape (M, 3), got {triangles.shape}")
        if len(triangles) and (triangles.min() < 0 or triangles.max() >= len(vertices)):
            raise InvalidNavMeshError(
                f"triangle index out of range [0, {len(vertices)}): "
                f"min={int(triangles.min())}, max={int(triangles.max())}"
            )

        self.vertices = vertices
        self.triangles = triangles.astype(np.int32)
        self.neighbors = build_adjacency(self.triangles)
        self.centroids = compute_centroids(self.vertices, self.triangles)
        if len(self.triangles):
            self._tree = cKDTree(self.centroids)
            corners = self.vertices[self.triangles] - self.centroids[:, None, :]
            self._reach = float(np.linalg.norm(corners, axis=2).max())

        for arr in (self.vertices, self.triangles, self.neighbors, self.centroids):
            arr.setflags(write=False)

    def triangle_count(self) -> int:
        return len(self.triangles)

    def vertex_count(self) -> int:
        return len(self.vertices)

    def triangle(self, tri_idx: int) -> Triangle:
        return triangle_at(self.vertices, self.triangles, tri_idx)

    def find_triangle(self, point: VectorLike, tolerance: float = 0.5) -> int:
        """
        Найти треугольник, содержащий точку. Возвращает -1 если не найден.

        Проверяются только треугольники, чей центроид ближе reach + tolerance:
        проекция точки внутри треугольника не дальше reach от его центроида.
        """
        if self._tree is None:
            return -1

        p = as_vec3(point)
        radius = self._reach * (1.0 + 1e-6) + tolerance
        candidates = sorted(self._tree.query_ball_point(p, radius))
        return find_triangle_containing_point(p, self.vertices, self.triangles, tolerance, candidates)

    def closest_point(
        self,
        point: VectorLike,
        candidates: int = 8,
    ) -> Optional[tuple[int, np.ndarray]]:
        """
        Ближайшая точка сетки среди candidates треугольников с ближайшими центроидами.

        Returns:
            (triangle_idx, point) или None для пустой сетки.
        """
        if self._tree is None:
            return None

        p = as_vec3(point)
        k = max(1, min(candidates, self.triangle_count()))
        _, indices = self._tree.query(p, k=k)

        best: Optional[tuple[int, np.ndarray]] = None
        best_dist = float("inf")
        for tri_idx in np.atleast_1d(indices):
            tri_idx = int(tri_idx)
            q = self.triangle(tri_idx).closest_point(p)
            dist = float(np.linalg.norm(q - p))
            if dist < best_dist:
                best_dist = dist
                best = (tri_idx, q)
        return best

    def find_corridor(self, start_tri: int, end_tri: int) -> Optional[list[int]]:
        """Список треугольников от start_tri до end_tri, или None."""
        if start_tri == end_tri:
            return [start_tri]
        return astar_triangles(start_tri, end_tri, self.neighbors, self.centroids)

    def find_path(
        self,
        start: VectorLike,
        end: VectorLike,
        query: NavQuery = NavQuery.ACCURACY,
        mode: NavPathMode = NavPathMode.MID_POINTS,
        tolerance: float = 0.5,
        candidates: int = 8,
    ) -> Optional[list[np.ndarray]]:
        """
        Найти путь между двумя точками.

        Returns:
            Точки пути; первая — старт (в режиме CLOSEST — притянутый к сетке),
            последняя — цель. None, если точка вне сетки или треугольники
            не связаны.
        """
        start = as_vec3(start)
        end = as_vec3(end)

        if self.triangle_count() == 0:
            return None

        if query is NavQuery.CLOSEST:
            start_hit = self.closest_point(start, candidates)
            end_hit = self.closest_point(end, candidates)
            if start_hit is None or end_hit is None:
                return None
            start_tri, start = start_hit
            end_tri, end = end_hit
        else:
            start_tri = self.find_triangle(start, tolerance)
            end_tri = self.find_triangle(end, tolerance)
            if start_tri < 0 or end_tri < 0:
                return None

        corridor = self.find_corridor(start_tri, end_tri)
        if corridor is None:
            return None
        if len(corridor) == 1:
            return [start.copy(), end.copy()]

        normal = corridor_normal(corridor, self.triangles, self.vertices)
        portals = get_portals_from_path(
            corridor, self.triangles, self.vertices, self.neighbors,
            centroids=self.centroids, normal=normal,
        )

        if mode is NavPathMode.ACCURACY:
            return funnel_algorithm(start, end, portals, normal)
        return midpoint_path(start, end, portals)
