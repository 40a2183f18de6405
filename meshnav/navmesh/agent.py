"""
NavMeshAgent — агент, перемещающийся по NavMesh.

Хранит мировую позицию агента и состояние навигации (цель + текущий путь).
Путь пересчитывается PathfindingWorld; сам агент не двигается.
"""

from __future__ import annotations

from typing import Hashable, List, Optional
import numpy as np

from meshnav.geombase.tolerance import VectorLike, as_vec3


class Navigation:
    """
    Состояние навигации: цель и запланированный путь.

    path — точки пути, ближайшая первой; текущая позиция агента не входит.
    Изменение цели отмечается и учитывается при следующем пересчёте пути.
    Замена пути изменением не считается.
    """

    def __init__(self, dest: Optional[VectorLike] = None) -> None:
        self._dest: np.ndarray = as_vec3(dest) if dest is not None else np.zeros(3, dtype=np.float64)
        self.path: List[np.ndarray] = []
        # Новое состояние требует первого расчёта
        self._changed: bool = True

    @property
    def dest(self) -> np.ndarray:
        """Текущая цель."""
        return self._dest

    @dest.setter
    def dest(self, value: VectorLike) -> None:
        self._dest = as_vec3(value)
        self._changed = True

    def next(self) -> Optional[np.ndarray]:
        """Ближайшая точка пути."""
        if self.path:
            return self.path[0]
        return None

    def is_changed(self) -> bool:
        return self._changed

    def mark_changed(self) -> None:
        self._changed = True

    def acknowledge(self) -> None:
        self._changed = False


class NavMeshAgent:
    """
    Агент для навигации по NavMesh.

    Использование:
    1. world.add_agent(agent_id, position, destination)
    2. Каждый тик обновлять agent.position
    3. Читать agent.navigation.path / agent.current_waypoint
    """

    def __init__(
        self,
        agent_id: Hashable,
        position: VectorLike,
        destination: Optional[VectorLike] = None,
    ) -> None:
        self.agent_id: Hashable = agent_id
        self._position: np.ndarray = as_vec3(position)
        self._position_changed: bool = True
        self.navigation: Navigation = Navigation(destination)

    def __repr__(self) -> str:
        return f"NavMeshAgent({self.agent_id!r}, position={self._position.tolist()})"

    @property
    def position(self) -> np.ndarray:
        """Мировая позиция агента."""
        return self._position

    @position.setter
    def position(self, value: VectorLike) -> None:
        value = as_vec3(value)
        if not np.array_equal(value, self._position):
            self._position = value
            self._position_changed = True

    @property
    def destination(self) -> np.ndarray:
        return self.navigation.dest

    def set_destination(self, target: VectorLike) -> None:
        """Установить цель. Путь пересчитается на следующем тике."""
        self.navigation.dest = target

    @property
    def has_path(self) -> bool:
        """Есть ли активный путь."""
        return len(self.navigation.path) > 0

    @property
    def current_waypoint(self) -> Optional[np.ndarray]:
        """Текущая промежуточная точка пути."""
        return self.navigation.next()

    def get_path_points(self) -> List[np.ndarray]:
        """Все точки текущего пути (для отладочной визуализации)."""
        return list(self.navigation.path)

    def is_changed(self) -> bool:
        """Изменились ли позиция или навигация с последнего пересчёта."""
        return self._position_changed or self.navigation.is_changed()

    def acknowledge(self) -> None:
        """Отметить текущее состояние как учтённое при пересчёте пути."""
        self._position_changed = False
        self.navigation.acknowledge()
