"""
PathfindingWorld — общий мир навигации: сборка сетки и пути агентов.

Один тик выполняется в три фазы, строго по порядку:
1. update_navmesh() — применить отправленную источниками геометрию
   к ProtoNavMesh; возвращает MeshChange;
2. update_navigation(change) — пересчитать пути агентов по снимку сетки;
3. clean_mesh() — сбросить флаг dirty.
tick() выполняет все три фазы.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Hashable, List, Optional
import numpy as np

from meshnav import log
from meshnav.geombase.tolerance import VectorLike, as_vec3
from meshnav.navmesh.agent import NavMeshAgent
from meshnav.navmesh.proto_navmesh import ProtoNavMesh
from meshnav.navmesh.types import NavMesh, NavMeshConfig

if TYPE_CHECKING:
    from meshnav.navmesh.settings import NavigationSettings


@dataclass(frozen=True)
class MeshChange:
    """
    Результат фазы обновления сетки, передаётся в фазу поиска пути.

    revision — номер изменения ProtoNavMesh, dirty — менялась ли сетка
    с последнего clean().
    """

    revision: int
    dirty: bool


class PathfindingWorld:
    """
    Navigation world for a set of geometry sources and agents.

    Geometry sources submit world-space triangles under a stable owner id.
    Re-submission replaces the owner's previous triangles. Agents get their
    paths recomputed only when the mesh changed, or their position or
    destination changed since the previous query.
    """

    def __init__(self, config: Optional[NavMeshConfig] = None, name: str = "navmesh") -> None:
        self.config: NavMeshConfig = config if config is not None else NavMeshConfig()
        self.name = name

        self._mesh = ProtoNavMesh(self.config.merge_tolerance)
        self._agents: Dict[Hashable, NavMeshAgent] = {}

        # owner -> world triangles (K, 3, 3), None = удалить владельца
        self._pending: Dict[Hashable, Optional[np.ndarray]] = {}
        # owner -> последние применённые треугольники
        self._submitted: Dict[Hashable, np.ndarray] = {}

        self._navmesh: Optional[NavMesh] = None
        self._navmesh_revision: int = -1

    @classmethod
    def from_settings(cls, settings: "NavigationSettings") -> "PathfindingWorld":
        return cls(config=settings.navmesh, name=settings.name)

    # --- state ---

    @property
    def proto_navmesh(self) -> ProtoNavMesh:
        return self._mesh

    @property
    def mesh_changed(self) -> bool:
        """Менялась ли сетка с последнего clean_mesh()."""
        return self._mesh.is_dirty()

    @property
    def navmesh(self) -> NavMesh:
        """Снимок текущей сетки (перестраивается при изменении revision)."""
        if self._navmesh is None or self._navmesh_revision != self._mesh.revision:
            self._navmesh = self._mesh.to_navmesh(self.name)
            self._navmesh_revision = self._mesh.revision
            log.debug(
                f"[PathfindingWorld] rebuilt snapshot r{self._navmesh_revision}: "
                f"{self._navmesh.vertex_count()} verts, {self._navmesh.triangle_count()} tris"
            )
        return self._navmesh

    # --- geometry sources ---

    def set_source(
        self,
        owner: Hashable,
        triangles,
        translation: Optional[VectorLike] = None,
    ) -> bool:
        """
        Отправить треугольники источника на следующий тик.

        Args:
            owner: Стабильный идентификатор источника.
            triangles: Треугольники, shape (K, 3, 3).
            translation: Смещение источника в мире, добавляется к каждой вершине.

        Returns:
            False, если набор совпадает с уже отправленным (ничего не меняется).
        """
        tris = np.array(triangles, dtype=np.float64)
        if tris.size == 0:
            tris = tris.reshape(0, 3, 3)
        if tris.ndim != 3 or tris.shape[1:] != (3, 3):
            raise ValueError(f"triangles must have shape (K, 3, 3), got {tris.shape}")
        if translation is not None:
            tris = tris + as_vec3(translation)

        if owner in self._pending:
            previous = self._pending[owner]
        else:
            previous = self._submitted.get(owner)
        if previous is not None and np.array_equal(previous, tris):
            return False

        self._pending[owner] = tris
        return True

    def remove_source(self, owner: Hashable) -> None:
        """Удалить треугольники источника на следующем тике."""
        if owner in self._submitted or owner in self._pending:
            self._pending[owner] = None

    def sources(self) -> List[Hashable]:
        """Источники, чья геометрия применена к сетке."""
        return list(self._submitted)

    # --- agents ---

    def add_agent(
        self,
        agent_id: Hashable,
        position: VectorLike,
        destination: Optional[VectorLike] = None,
    ) -> NavMeshAgent:
        if agent_id in self._agents:
            raise ValueError(f"agent {agent_id!r} already exists")
        agent = NavMeshAgent(agent_id, position, destination)
        self._agents[agent_id] = agent
        return agent

    def remove_agent(self, agent_id: Hashable) -> Optional[NavMeshAgent]:
        return self._agents.pop(agent_id, None)

    def get_agent(self, agent_id: Hashable) -> Optional[NavMeshAgent]:
        return self._agents.get(agent_id)

    @property
    def agents(self) -> List[NavMeshAgent]:
        return list(self._agents.values())

    # --- tick phases ---

    def update_navmesh(self) -> MeshChange:
        """Фаза 1: применить отправленную геометрию к сетке."""
        changed = False
        for owner, tris in self._pending.items():
            removed = self._mesh.remove_entity(owner)
            if removed:
                changed = True

            if tris is None:
                self._submitted.pop(owner, None)
                log.debug(f"[PathfindingWorld] source {owner!r} removed ({removed} tris)")
                continue

            for tri in tris:
                self._mesh.add_triangle(owner, (tri[0], tri[1], tri[2]))
            if len(tris):
                changed = True
            self._submitted[owner] = tris
        self._pending.clear()

        if changed:
            self._mesh.dirty()
            self._maybe_compact()

        return MeshChange(revision=self._mesh.revision, dirty=self._mesh.is_dirty())

    def _maybe_compact(self) -> None:
        total = self._mesh.vertex_count()
        if total == 0:
            return
        orphans = self._mesh.orphan_count()
        if orphans and orphans / total > self.config.compact_orphan_ratio:
            self._mesh.compact()

    def update_navigation(self, change: MeshChange) -> int:
        """
        Фаза 2: пересчитать пути агентов.

        Путь агента пересчитывается, если сетка изменена, либо изменились
        позиция или цель агента. Устаревший change (revision не совпадает
        с текущей) считается изменением сетки.
        Returns: количество пересчитанных агентов.
        """
        dirty = change.dirty
        if change.revision != self._mesh.revision:
            log.warn(
                f"[PathfindingWorld] stale mesh change r{change.revision}, "
                f"current r{self._mesh.revision}"
            )
            dirty = True

        recomputed = 0
        navmesh: Optional[NavMesh] = None
        for agent in self._agents.values():
            if not dirty and not agent.is_changed():
                continue
            if navmesh is None:
                navmesh = self.navmesh
            self._recompute(navmesh, agent)
            agent.acknowledge()
            recomputed += 1
        return recomputed

    def clean_mesh(self) -> None:
        """Фаза 3: сбросить флаг dirty."""
        self._mesh.clean()

    def tick(self) -> MeshChange:
        """Один тик: обновление сетки, пересчёт путей, сброс dirty."""
        change = self.update_navmesh()
        self.update_navigation(change)
        self.clean_mesh()
        return change

    # --- queries ---

    def find_path(self, start: VectorLike, end: VectorLike) -> Optional[List[np.ndarray]]:
        """
        Найти путь между двумя точками по текущему снимку.

        Returns:
            Точки пути, начиная со стартовой, или None если путь не найден.
        """
        return self.navmesh.find_path(
            start,
            end,
            query=self.config.query,
            mode=self.config.path_mode,
            tolerance=self.config.point_tolerance,
            candidates=self.config.closest_candidates,
        )

    def _recompute(self, navmesh: NavMesh, agent: NavMeshAgent) -> bool:
        navigation = agent.navigation
        points = navmesh.find_path(
            agent.position,
            navigation.dest,
            query=self.config.query,
            mode=self.config.path_mode,
            tolerance=self.config.point_tolerance,
            candidates=self.config.closest_candidates,
        )

        if points is None:
            log.debug(f"[PathfindingWorld] no path for agent {agent.agent_id!r} to {navigation.dest.tolist()}")
            if self.config.clear_path_on_failure:
                navigation.path = []
            return False

        # Первая точка — текущая позиция агента
        navigation.path = points[1:]
        return True
