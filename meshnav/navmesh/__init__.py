"""
Навигационная сетка из треугольников, отправленных источниками геометрии.

Алгоритм:
1. Источники отправляют треугольники в мировых координатах (ProtoNavMesh)
2. Вершины сливаются по допуску, треугольники хранятся по владельцам
3. При изменении сетки строится неизменяемый снимок (NavMesh)
4. Пути агентов — A* по графу треугольников + точки через порталы
"""

from meshnav.navmesh.types import (
    InvalidNavMeshError,
    NavMesh,
    NavMeshConfig,
    NavPathMode,
    NavQuery,
)
from meshnav.navmesh.proto_navmesh import ProtoNavMesh
from meshnav.navmesh.agent import Navigation, NavMeshAgent
from meshnav.navmesh.pathfinding_world import MeshChange, PathfindingWorld
from meshnav.navmesh.settings import NavigationSettings

__all__ = [
    "InvalidNavMeshError",
    "NavMesh",
    "NavMeshConfig",
    "NavPathMode",
    "NavQuery",
    "ProtoNavMesh",
    "Navigation",
    "NavMeshAgent",
    "MeshChange",
    "PathfindingWorld",
    "NavigationSettings",
]
