"""
Navigation settings — project-level configuration for navigation system.

Stores NavMesh building and path query parameters as a plain dictionary
(JSON-compatible); where it is stored is up to the caller.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from meshnav.navmesh.types import NavMeshConfig, NavPathMode, NavQuery


def config_to_dict(config: NavMeshConfig) -> dict:
    """Serialize NavMeshConfig to dictionary."""
    data = asdict(config)
    data["query"] = config.query.value
    data["path_mode"] = config.path_mode.value
    return data


def config_from_dict(data: dict) -> NavMeshConfig:
    """Deserialize NavMeshConfig from dictionary. Missing keys keep defaults."""
    defaults = NavMeshConfig()
    return NavMeshConfig(
        merge_tolerance=float(data.get("merge_tolerance", defaults.merge_tolerance)),
        point_tolerance=float(data.get("point_tolerance", defaults.point_tolerance)),
        query=NavQuery(data.get("query", defaults.query.value)),
        path_mode=NavPathMode(data.get("path_mode", defaults.path_mode.value)),
        closest_candidates=int(data.get("closest_candidates", defaults.closest_candidates)),
        clear_path_on_failure=bool(data.get("clear_path_on_failure", defaults.clear_path_on_failure)),
        compact_orphan_ratio=float(data.get("compact_orphan_ratio", defaults.compact_orphan_ratio)),
    )


@dataclass
class NavigationSettings:
    """
    Project-level navigation settings.

    Contains NavMesh configuration and the name of the navigation mesh.
    """

    name: str = "navmesh"
    navmesh: NavMeshConfig = field(default_factory=NavMeshConfig)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "navmesh": config_to_dict(self.navmesh),
        }

    @staticmethod
    def from_dict(data: dict) -> "NavigationSettings":
        """Deserialize from dictionary."""
        return NavigationSettings(
            name=data.get("name", "navmesh"),
            navmesh=config_from_dict(data.get("navmesh", {})),
        )

