"""
ProtoNavMesh — инкрементальный сборщик навигационной сетки.

Хранит общий пул вершин (с дедупликацией по допуску) и индекс треугольников,
помеченных владельцем (источником геометрии). Треугольники владельца можно
удалить и добавить заново, не трогая остальные.

Пул вершин:
- поиск вершины — пространственный хеш с ячейкой размера tolerance,
  проверяются 27 соседних ячеек;
- у каждой вершины счётчик ссылок из треугольников;
- remove_entity не уменьшает пул, осиротевшие вершины удаляет compact().
"""

from __future__ import annotations

import math
from typing import Dict, Hashable, List, Optional, Sequence, Tuple
import numpy as np

from meshnav import log
from meshnav.geombase import Triangle
from meshnav.geombase.tolerance import VectorLike, as_vec3
from meshnav.navmesh.types import NavMesh

# (a, b, c, owner)
TriangleEntry = Tuple[int, int, int, Hashable]

Cell = Tuple[int, int, int]

DEFAULT_MERGE_TOLERANCE = 1e-6


class ProtoNavMesh:
    """
    Изменяемая сетка: пул вершин + треугольники по владельцам + флаг dirty.

    Флаг dirty выставляется явно вызовом dirty() после пакета изменений
    и сбрасывается clean() один раз за тик. Каждый dirty() увеличивает
    revision.
    """

    def __init__(self, tolerance: float = DEFAULT_MERGE_TOLERANCE) -> None:
        if tolerance <= 0.0:
            raise ValueError(f"merge tolerance must be positive, got {tolerance}")
        self._tolerance = float(tolerance)
        self._points: List[np.ndarray] = []
        self._refcounts: List[int] = []
        self._triangles: List[TriangleEntry] = []
        self._grid: Dict[Cell, List[int]] = {}
        self._dirty = False
        self._revision = 0

    # --- dirty flag ---

    def clean(self) -> None:
        self._dirty = False

    def dirty(self) -> None:
        self._dirty = True
        self._revision += 1

    def is_clean(self) -> bool:
        return not self._dirty

    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def revision(self) -> int:
        """Номер изменения сетки, растёт с каждым dirty()."""
        return self._revision

    @property
    def tolerance(self) -> float:
        return self._tolerance

    # --- vertex pool ---

    def _cell(self, point: np.ndarray) -> Cell:
        t = self._tolerance
        return (
            math.floor(point[0] / t),
            math.floor(point[1] / t),
            math.floor(point[2] / t),
        )

    def _matches(self, a: np.ndarray, b: np.ndarray) -> bool:
        t = self._tolerance
        return (
            abs(a[0] - b[0]) <= t
            and abs(a[1] - b[1]) <= t
            and abs(a[2] - b[2]) <= t
        )

    def find_index(self, point: VectorLike) -> Optional[int]:
        """Индекс вершины пула, совпадающей с point в пределах допуска, или None."""
        p = as_vec3(point)
        cx, cy, cz = self._cell(p)

        best: Optional[int] = None
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    bucket = self._grid.get((cx + dx, cy + dy, cz + dz))
                    if not bucket:
                        continue
                    for index in bucket:
                        if (best is None or index < best) and self._matches(self._points[index], p):
                            best = index
        return best

    def get_index(self, point: VectorLike) -> int:
        """Индекс совпадающей вершины или индекс новой, добавленной в конец пула."""
        p = as_vec3(point)
        index = self.find_index(p)
        if index is not None:
            return index

        index = len(self._points)
        self._points.append(p.copy())
        self._refcounts.append(0)
        self._grid.setdefault(self._cell(p), []).append(index)
        return index

    # --- triangles ---

    def add_triangle(
        self,
        owner: Hashable,
        triangle: Sequence[VectorLike],
    ) -> TriangleEntry:
        """
        Добавить треугольник владельца.

        Флаг dirty не меняется — вызывающий отмечает пакет изменений сам.
        """
        p0, p1, p2 = triangle
        a = self.get_index(p0)
        b = self.get_index(p1)
        c = self.get_index(p2)

        if a == b or b == c or a == c:
            log.debug(f"[ProtoNavMesh] degenerate triangle for owner {owner!r}: ({a}, {b}, {c})")

        entry = (a, b, c, owner)
        self._triangles.append(entry)
        for index in (a, b, c):
            self._refcounts[index] += 1
        return entry

    def remove_entity(self, owner: Hashable) -> int:
        """
        Удалить все треугольники владельца.

        Пул вершин не меняется. Returns: количество удалённых треугольников.
        """
        kept: List[TriangleEntry] = []
        removed = 0
        for entry in self._triangles:
            if entry[3] == owner:
                removed += 1
                for index in entry[:3]:
                    self._refcounts[index] -= 1
            else:
                kept.append(entry)
        self._triangles = kept
        return removed

    def compact(self) -> int:
        """
        Удалить вершины, на которые не ссылается ни один треугольник.

        Индексы треугольников переназначаются, порядок оставшихся вершин
        сохраняется. Returns: количество удалённых вершин.
        """
        remap: Dict[int, int] = {}
        points: List[np.ndarray] = []
        refcounts: List[int] = []
        for old_index, (point, count) in enumerate(zip(self._points, self._refcounts)):
            if count > 0:
                remap[old_index] = len(points)
                points.append(point)
                refcounts.append(count)

        removed = len(self._points) - len(points)
        if removed == 0:
            return 0

        self._points = points
        self._refcounts = refcounts
        self._triangles = [
            (remap[a], remap[b], remap[c], owner)
            for a, b, c, owner in self._triangles
        ]
        self._grid = {}
        for index, point in enumerate(self._points):
            self._grid.setdefault(self._cell(point), []).append(index)

        log.debug(f"[ProtoNavMesh] compacted {removed} orphaned vertices, {len(self._points)} left")
        return removed

    # --- introspection ---

    @property
    def points(self) -> np.ndarray:
        """Копия пула вершин, shape (N, 3)."""
        if not self._points:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array(self._points, dtype=np.float64)

    @property
    def triangles(self) -> List[TriangleEntry]:
        """Копия индекса треугольников (a, b, c, owner)."""
        return list(self._triangles)

    def vertex_count(self) -> int:
        return len(self._points)

    def triangle_count(self) -> int:
        return len(self._triangles)

    def orphan_count(self) -> int:
        """Количество вершин без ссылок из треугольников."""
        return sum(1 for count in self._refcounts if count == 0)

    def owners(self) -> List[Hashable]:
        """Владельцы в порядке первого появления."""
        seen: Dict[Hashable, None] = {}
        for entry in self._triangles:
            seen.setdefault(entry[3], None)
        return list(seen)

    def triangles_of(self, owner: Hashable) -> List[Triangle]:
        """Треугольники владельца в мировых координатах."""
        return [
            Triangle(self._points[a], self._points[b], self._points[c])
            for a, b, c, entry_owner in self._triangles
            if entry_owner == owner
        ]

    def to_navmesh(self, name: str = "") -> NavMesh:
        """
        Снимок для поиска пути.

        Треугольник, совпадающий с уже добавленным (тот же набор вершин,
        любой владелец и порядок обхода), в снимок не попадает.

        Raises:
            InvalidNavMeshError: если индекс треугольника вне пула вершин.
        """
        seen: set = set()
        unique: List[Tuple[int, int, int]] = []
        for a, b, c, _ in self._triangles:
            key = tuple(sorted((a, b, c)))
            if key in seen:
                continue
            seen.add(key)
            unique.append((a, b, c))

        dropped = len(self._triangles) - len(unique)
        if dropped:
            log.debug(f"[ProtoNavMesh] skipped {dropped} duplicate triangles in snapshot")

        triangles = np.array(unique, dtype=np.int64).reshape(-1, 3)
        return NavMesh(vertices=self.points, triangles=triangles, name=name)
