"""
Pathfinding на основе графа треугольников.

Граф: вершины — треугольники, рёбра — общие рёбра треугольников (порталы).
Поиск коридора — A* по центроидам, затем построение точек пути:
- через середины порталов;
- Funnel Algorithm (натягивание верёвки) в средней плоскости коридора.
"""

from __future__ import annotations

import heapq
from typing import Iterable, Optional
import numpy as np

from meshnav.geombase import LineSegment, Triangle
from meshnav.geombase.tolerance import normalize

_FALLBACK_NORMAL = np.array([0.0, 1.0, 0.0], dtype=np.float64)


def build_adjacency(triangles: np.ndarray) -> np.ndarray:
    """
    Построить массив смежности треугольников.

    Args:
        triangles: (M, 3) — индексы вершин треугольников.

    Returns:
        neighbors: (M, 3) — для каждого треугольника, сосед по каждому ребру.
                   neighbors[t, e] = индекс соседнего треугольника по ребру e, или -1.
                   Ребро 0: вершины (0, 1), ребро 1: (1, 2), ребро 2: (2, 0).
    """
    m = len(triangles)
    neighbors = np.full((m, 3), -1, dtype=np.int32)

    # edge -> [(triangle_idx, edge_idx), ...]
    edge_to_tris: dict[tuple[int, int], list[tuple[int, int]]] = {}

    for tri_idx in range(m):
        t = triangles[tri_idx]
        for edge_idx in range(3):
            v0 = int(t[edge_idx])
            v1 = int(t[(edge_idx + 1) % 3])
            if v0 == v1:
                continue
            # Нормализуем ребро (меньший индекс первым)
            edge = (min(v0, v1), max(v0, v1))

            sharing = edge_to_tris.setdefault(edge, [])
            # Ребро с тремя и более треугольниками: связываются только
            # свободные слоты, связь всегда двусторонняя
            for other_tri, other_edge in sharing:
                if other_tri == tri_idx or neighbors[other_tri, other_edge] >= 0:
                    continue
                neighbors[tri_idx, edge_idx] = other_tri
                neighbors[other_tri, other_edge] = tri_idx
                break
            sharing.append((tri_idx, edge_idx))

    return neighbors


def compute_centroids(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Вычислить центроиды треугольников."""
    if len(triangles) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    return (v0 + v1 + v2) / 3.0


def triangle_at(vertices: np.ndarray, triangles: np.ndarray, tri_idx: int) -> Triangle:
    t = triangles[tri_idx]
    return Triangle(vertices[t[0]], vertices[t[1]], vertices[t[2]])


def find_triangle_containing_point(
    point: np.ndarray,
    vertices: np.ndarray,
    triangles: np.ndarray,
    tolerance: float = 0.5,
    candidates: Optional[Iterable[int]] = None,
) -> int:
    """
    Найти треугольник, содержащий точку.

    Проецирует точку на плоскость каждого треугольника и проверяет:
    1. Расстояние до плоскости < tolerance
    2. Проекция внутри треугольника

    При нескольких кандидатах выбирается ближайший по расстоянию до плоскости.

    Args:
        candidates: Индексы треугольников для проверки (по возрастанию).
                    None — проверить все.

    Returns:
        Индекс треугольника или -1.
    """
    best_tri = -1
    best_dist = tolerance

    if candidates is None:
        candidates = range(len(triangles))

    for tri_idx in candidates:
        tri_idx = int(tri_idx)
        tri = triangle_at(vertices, triangles, tri_idx)
        if not tri.contains_point(point, tolerance):
            continue

        dist = abs(tri.plane().signed_distance(point) or 0.0)
        if best_tri < 0 or dist < best_dist:
            best_dist = dist
            best_tri = tri_idx

    return best_tri


def astar_triangles(
    start_tri: int,
    end_tri: int,
    neighbors: np.ndarray,
    centroids: np.ndarray,
) -> Optional[list[int]]:
    """
    A* поиск пути по графу треугольников.

    Args:
        start_tri: индекс стартового треугольника.
        end_tri: индекс целевого треугольника.
        neighbors: (M, 3) — массив соседей.
        centroids: (M, 3) — центры треугольников.

    Returns:
        Список индексов треугольников от старта до финиша, или None.
    """
    goal = centroids[end_tri]

    def heuristic(tri: int) -> float:
        return float(np.linalg.norm(centroids[tri] - goal))

    # (f_score, counter, triangle_idx)
    counter = 0
    open_set: list[tuple[float, int, int]] = [(heuristic(start_tri), counter, start_tri)]
    came_from: dict[int, int] = {}
    g_score: dict[int, float] = {start_tri: 0.0}
    closed: set[int] = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)

        if current == end_tri:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            return path[::-1]

        if current in closed:
            continue
        closed.add(current)

        for edge_idx in range(3):
            neighbor = int(neighbors[current, edge_idx])
            if neighbor < 0:
                continue

            dist = float(np.linalg.norm(centroids[current] - centroids[neighbor]))
            tentative_g = g_score[current] + dist

            if neighbor not in g_score or tentative_g < g_score[neighbor]:
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f = tentative_g + heuristic(neighbor)
                counter += 1
                heapq.heappush(open_set, (f, counter, neighbor))

    return None


def corridor_normal(
    path: list[int],
    triangles: np.ndarray,
    vertices: np.ndarray,
) -> np.ndarray:
    """
    Усреднённая нормаль коридора треугольников.

    Нормали ориентируются по первому невырожденному треугольнику,
    поэтому порядок обхода вершин в исходных треугольниках не важен.
    """
    reference: Optional[np.ndarray] = None
    total = np.zeros(3, dtype=np.float64)

    for tri_idx in path:
        n = triangle_at(vertices, triangles, tri_idx).normal()
        if n is None:
            continue
        if reference is None:
            reference = n
        if np.dot(n, reference) < 0.0:
            n = -n
        total += n

    result = normalize(total)
    if result is None:
        return _FALLBACK_NORMAL.copy()
    return result


def get_portals_from_path(
    path: list[int],
    triangles: np.ndarray,
    vertices: np.ndarray,
    neighbors: np.ndarray,
    centroids: Optional[np.ndarray] = None,
    normal: Optional[np.ndarray] = None,
) -> list[tuple[np.ndarray, np.ndarray]]:
    """
    Извлечь порталы (рёбра между смежными треугольниками) из пути.

    Если переданы centroids и normal, порталы ориентируются как (left, right)
    относительно направления движения из tri_a в tri_b при взгляде вдоль -normal.
    Иначе концы ребра идут в порядке обхода треугольника tri_a.

    Returns:
        Список порталов (left, right) — координаты концов общего ребра.
    """
    portals: list[tuple[np.ndarray, np.ndarray]] = []

    for i in range(len(path) - 1):
        tri_a = path[i]
        tri_b = path[i + 1]

        for edge_idx in range(3):
            if neighbors[tri_a, edge_idx] != tri_b:
                continue

            v0_idx = triangles[tri_a, edge_idx]
            v1_idx = triangles[tri_a, (edge_idx + 1) % 3]
            left = vertices[v0_idx].astype(np.float64)
            right = vertices[v1_idx].astype(np.float64)

            if centroids is not None and normal is not None:
                direction = centroids[tri_b] - centroids[tri_a]
                mid = (left + right) * 0.5
                if np.dot(np.cross(direction, left - mid), normal) < 0.0:
                    left, right = right, left

            portals.append((left, right))
            break

    return portals


def midpoint_path(
    start: np.ndarray,
    end: np.ndarray,
    portals: list[tuple[np.ndarray, np.ndarray]],
) -> list[np.ndarray]:
    """Путь через середины порталов."""
    path: list[np.ndarray] = [start.copy()]
    for left, right in portals:
        path.append(LineSegment.from_points(left, right).midpoint())
    path.append(end.copy())
    return path


def funnel_algorithm(
    start: np.ndarray,
    end: np.ndarray,
    portals: list[tuple[np.ndarray, np.ndarray]],
    normal: Optional[np.ndarray] = None,
) -> list[np.ndarray]:
    """
    Funnel Algorithm (Simple Stupid Funnel Algorithm).

    Оптимизирует путь через порталы, "натягивая верёвку".
    Порталы должны быть ориентированы как (left, right).
    Ориентированные площади считаются в плоскости с нормалью normal.

    Returns:
        Оптимизированный список точек пути, от start до end.
    """
    if len(portals) == 0:
        return [start.copy(), end.copy()]

    if normal is None:
        normal = _FALLBACK_NORMAL

    def triarea2(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
        """Удвоенная площадь треугольника (знаковая, в плоскости с нормалью normal)."""
        return -float(np.dot(np.cross(b - a, c - a), normal))

    # Старт и финиш как вырожденные порталы
    portals = [(start, start)] + portals + [(end, end)]

    path: list[np.ndarray] = [start.copy()]

    apex = start
    left = start
    right = start
    apex_index = 0
    left_index = 0
    right_index = 0

    i = 1
    while i < len(portals):
        portal_left, portal_right = portals[i]

        # Обновляем правую границу
        if triarea2(apex, right, portal_right) <= 0.0:
            if np.allclose(apex, right) or triarea2(apex, left, portal_right) > 0.0:
                # Сужаем воронку справа
                right = portal_right
                right_index = i
            else:
                # Правая граница пересекла левую — добавляем left в путь
                if not np.allclose(path[-1], left):
                    path.append(left.copy())
                apex = left
                apex_index = left_index

                # Перезапускаем воронку
                left = apex
                right = apex
                left_index = apex_index
                right_index = apex_index
                i = apex_index + 1
                continue

        # Обновляем левую границу
        if triarea2(apex, left, portal_left) >= 0.0:
            if np.allclose(apex, left) or triarea2(apex, right, portal_left) < 0.0:
                # Сужаем воронку слева
                left = portal_left
                left_index = i
            else:
                # Левая граница пересекла правую — добавляем right в путь
                if not np.allclose(path[-1], right):
                    path.append(right.copy())
                apex = right
                apex_index = right_index

                left = apex
                right = apex
                left_index = apex_index
                right_index = apex_index
                i = apex_index + 1
                continue

        i += 1

    if not np.allclose(path[-1], end):
        path.append(end.copy())

    return path
