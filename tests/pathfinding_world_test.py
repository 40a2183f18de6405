"""Tests for PathfindingWorld: mesh update and path recompute policy."""

import unittest
import numpy as np

from meshnav import log
from meshnav.navmesh import (
    MeshChange,
    NavigationSettings,
    NavMeshConfig,
    NavPathMode,
    PathfindingWorld,
)


def _square_triangles(x, y, size=1.0):
    """Треугольники квадрата в плоскости z=0, shape (2, 3, 3)."""
    p00 = [x, y, 0.0]
    p10 = [x + size, y, 0.0]
    p11 = [x + size, y + size, 0.0]
    p01 = [x, y + size, 0.0]
    return np.array([[p00, p10, p11], [p00, p11, p01]], dtype=np.float64)


def _strip_triangles(count):
    return np.concatenate([_square_triangles(float(i), 0.0) for i in range(count)])


def _run_phases(world):
    """Тик по фазам; возвращает число пересчитанных агентов."""
    change = world.update_navmesh()
    recomputed = world.update_navigation(change)
    world.clean_mesh()
    return recomputed


class PathfindingWorldMeshTest(unittest.TestCase):
    """Тесты фазы обновления сетки."""

    def test_tick_applies_source(self):
        world = PathfindingWorld()
        world.set_source("floor", _strip_triangles(3))

        change = world.update_navmesh()

        self.assertTrue(change.dirty)
        self.assertTrue(world.mesh_changed)
        self.assertEqual(world.proto_navmesh.triangle_count(), 6)
        self.assertEqual(world.proto_navmesh.vertex_count(), 8)
        self.assertEqual(world.sources(), ["floor"])

        world.clean_mesh()
        self.assertFalse(world.mesh_changed)

    def test_resubmission_replaces_triangles(self):
        world = PathfindingWorld()
        world.set_source("floor", _strip_triangles(3))
        world.tick()

        world.set_source("floor", _strip_triangles(1))
        change = world.tick()

        self.assertTrue(change.dirty)
        self.assertEqual(world.proto_navmesh.triangle_count(), 2)

    def test_identical_submission_ignored(self):
        world = PathfindingWorld()
        self.assertTrue(world.set_source("floor", _strip_triangles(2)))
        world.tick()

        self.assertFalse(world.set_source("floor", _strip_triangles(2)))
        change = world.tick()

        self.assertFalse(change.dirty)

    def test_revision_grows_only_on_change(self):
        world = PathfindingWorld()
        world.set_source("floor", _strip_triangles(1))
        first = world.tick()
        second = world.tick()

        self.assertEqual(first.revision, second.revision)
        self.assertFalse(second.dirty)

    def test_translation(self):
        world = PathfindingWorld()
        world.set_source("floor", _square_triangles(0.0, 0.0), translation=[10.0, 0.0, 2.0])
        world.tick()

        points = world.proto_navmesh.points
        self.assertTrue(np.allclose(points.min(axis=0), [10.0, 0.0, 2.0]))
        self.assertTrue(np.allclose(points.max(axis=0), [11.0, 1.0, 2.0]))

    def test_invalid_shape(self):
        world = PathfindingWorld()
        with self.assertRaises(ValueError):
            world.set_source("floor", np.zeros((2, 3)))

    def test_remove_source(self):
        world = PathfindingWorld()
        world.set_source("a", _square_triangles(0.0, 0.0))
        world.set_source("b", _square_triangles(1.0, 0.0))
        world.tick()

        world.remove_source("a")
        change = world.update_navmesh()

        self.assertTrue(change.dirty)
        self.assertEqual(world.sources(), ["b"])
        self.assertEqual(world.proto_navmesh.owners(), ["b"])

    def test_remove_all_compacts_pool(self):
        world = PathfindingWorld()
        world.set_source("a", _square_triangles(0.0, 0.0))
        world.tick()

        world.remove_source("a")
        world.tick()

        self.assertEqual(world.proto_navmesh.triangle_count(), 0)
        self.assertEqual(world.proto_navmesh.vertex_count(), 0)

    def test_empty_source_marks_dirty(self):
        world = PathfindingWorld()
        world.set_source("a", _square_triangles(0.0, 0.0))
        world.tick()

        world.set_source("a", np.zeros((0, 3, 3)))
        change = world.tick()

        self.assertTrue(change.dirty)
        self.assertEqual(world.proto_navmesh.triangle_count(), 0)

    def test_navmesh_snapshot_cached(self):
        world = PathfindingWorld()
        world.set_source("floor", _strip_triangles(2))
        world.tick()

        first = world.navmesh
        self.assertIs(world.navmesh, first)

        world.set_source("floor", _strip_triangles(3))
        world.tick()
        self.assertIsNot(world.navmesh, first)
        self.assertEqual(world.navmesh.triangle_count(), 6)

    def test_from_settings(self):
        settings = NavigationSettings(name="level", navmesh=NavMeshConfig(merge_tolerance=0.01))
        world = PathfindingWorld.from_settings(settings)

        self.assertEqual(world.name, "level")
        self.assertEqual(world.proto_navmesh.tolerance, 0.01)


class PathfindingWorldAgentsTest(unittest.TestCase):
    """Тесты пересчёта путей агентов."""

    def setUp(self):
        self.world = PathfindingWorld(NavMeshConfig(path_mode=NavPathMode.ACCURACY))
        self.world.set_source("floor", _strip_triangles(3))
        self.agent = self.world.add_agent("agent", [0.2, 0.5, 0.0], [2.8, 0.5, 0.0])

    def test_first_tick_computes_path(self):
        recomputed = _run_phases(self.world)

        self.assertEqual(recomputed, 1)
        self.assertTrue(self.agent.has_path)
        # Текущая позиция не входит в путь
        self.assertEqual(len(self.agent.navigation.path), 1)
        self.assertTrue(np.allclose(self.agent.current_waypoint, [2.8, 0.5, 0.0]))

    def test_midpoint_path(self):
        world = PathfindingWorld()
        world.set_source("floor", _strip_triangles(3))
        agent = world.add_agent("agent", [0.2, 0.5, 0.0], [2.8, 0.5, 0.0])
        world.tick()

        path = agent.get_path_points()
        self.assertEqual(len(path), 6)
        self.assertFalse(np.allclose(path[0], agent.position))
        self.assertTrue(np.allclose(path[-1], agent.destination))

    def test_path_reused_when_nothing_changed(self):
        _run_phases(self.world)
        path = self.agent.navigation.path

        recomputed = _run_phases(self.world)

        self.assertEqual(recomputed, 0)
        self.assertIs(self.agent.navigation.path, path)

    def test_destination_change_recomputes(self):
        _run_phases(self.world)

        self.agent.set_destination([1.5, 0.8, 0.0])
        recomputed = _run_phases(self.world)

        self.assertEqual(recomputed, 1)
        self.assertTrue(np.allclose(self.agent.navigation.path[-1], [1.5, 0.8, 0.0]))

    def test_position_change_recomputes(self):
        _run_phases(self.world)

        self.agent.position = [0.2, 0.5, 0.0]
        self.assertEqual(_run_phases(self.world), 0)

        self.agent.position = [0.4, 0.5, 0.0]
        self.assertEqual(_run_phases(self.world), 1)

    def test_mesh_change_recomputes(self):
        other = self.world.add_agent("other", [0.5, 0.2, 0.0], [2.5, 0.2, 0.0])
        _run_phases(self.world)

        self.world.set_source("extra", _square_triangles(0.0, 5.0))
        recomputed = _run_phases(self.world)

        self.assertEqual(recomputed, 2)
        self.assertTrue(other.has_path)

    def test_failed_path_kept_by_default(self):
        _run_phases(self.world)
        path = self.agent.get_path_points()

        self.agent.set_destination([50.0, 50.0, 0.0])
        recomputed = _run_phases(self.world)

        self.assertEqual(recomputed, 1)
        self.assertEqual(len(self.agent.navigation.path), len(path))
        self.assertTrue(np.allclose(self.agent.navigation.path[-1], path[-1]))
        # Состояние учтено, повторного пересчёта нет
        self.assertEqual(_run_phases(self.world), 0)

    def test_failed_path_cleared_with_flag(self):
        world = PathfindingWorld(NavMeshConfig(clear_path_on_failure=True))
        world.set_source("floor", _strip_triangles(3))
        agent = world.add_agent("agent", [0.2, 0.5, 0.0], [2.8, 0.5, 0.0])
        world.tick()
        self.assertTrue(agent.has_path)

        agent.set_destination([50.0, 50.0, 0.0])
        world.tick()

        self.assertFalse(agent.has_path)
        self.assertIsNone(agent.current_waypoint)

    def test_stale_change_warns(self):
        _run_phases(self.world)
        records = []
        log.set_callback(lambda level, message: records.append((level, message)))
        try:
            recomputed = self.world.update_navigation(
                MeshChange(revision=self.world.proto_navmesh.revision + 5, dirty=False)
            )
        finally:
            log.set_callback(None)

        self.assertTrue(any(level == "WARNING" and "stale" in message for level, message in records))
        # Несовпадающая revision считается изменением сетки
        self.assertEqual(recomputed, 1)

    def test_stale_change_recomputes_after_direct_edit(self):
        """Сетку изменили в обход update_navmesh — старый change всё равно пересчитывает."""
        change = self.world.update_navmesh()
        self.world.update_navigation(change)
        self.world.clean_mesh()

        self.world.proto_navmesh.dirty()
        self.world.proto_navmesh.clean()

        self.assertEqual(self.world.update_navigation(change), 1)
        self.assertTrue(self.agent.has_path)

    def test_overlay_copy_keeps_path(self):
        """Источник с копией треугольника пола не рвёт граф."""
        self.world.set_source("overlay", _square_triangles(0.0, 0.0)[:1])
        _run_phases(self.world)

        self.assertEqual(self.world.navmesh.triangle_count(), 6)
        self.assertTrue(self.agent.has_path)
        self.assertIsNotNone(self.world.find_path([0.2, 0.5, 0.0], [2.8, 0.5, 0.0]))
        self.assertIsNotNone(self.world.find_path([2.8, 0.5, 0.0], [0.2, 0.5, 0.0]))

    def test_third_triangle_on_shared_edge(self):
        """Третий треугольник на диагонали: путь есть в обе стороны."""
        world = PathfindingWorld(NavMeshConfig(path_mode=NavPathMode.ACCURACY))
        world.set_source("floor", _square_triangles(0.0, 0.0, size=4.0))
        # Вертикальная "перегородка" на диагонали (0,0)-(4,4)
        world.set_source("fin", [[[0.0, 0.0, 0.0], [4.0, 4.0, 0.0], [2.0, 2.0, -3.0]]])
        world.tick()

        a = [3.5, 0.5, 0.0]
        b = [0.5, 3.5, 0.0]
        forward = world.find_path(a, b)
        backward = world.find_path(b, a)

        self.assertIsNotNone(forward)
        self.assertIsNotNone(backward)
        self.assertTrue(np.allclose(forward[-1], b))
        self.assertTrue(np.allclose(backward[-1], a))

    def test_find_path(self):
        _run_phases(self.world)
        path = self.world.find_path([0.2, 0.5, 0.0], [2.8, 0.5, 0.0])

        self.assertEqual(len(path), 2)

    def test_agents_registry(self):
        self.assertIs(self.world.get_agent("agent"), self.agent)
        with self.assertRaises(ValueError):
            self.world.add_agent("agent", [0.0, 0.0, 0.0])

        self.assertIs(self.world.remove_agent("agent"), self.agent)
        self.assertIsNone(self.world.get_agent("agent"))
        self.assertEqual(self.world.agents, [])


if __name__ == "__main__":
    unittest.main()
