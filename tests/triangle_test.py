import math
import unittest
import numpy as np

from meshnav.geombase import Triangle


class TriangleMetricsTest(unittest.TestCase):

    def test_triangle_center(self):
        triangle = Triangle.from_points([-1.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 1.0])

        self.assertTrue(np.allclose(triangle.center(), [0.0, 2.0 / 3.0, 1.0 / 3.0]))

    def test_triangle_area(self):
        triangle = Triangle.from_points([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0])

        self.assertEqual(triangle.area(), 0.5)

    def test_triangle_perimeter(self):
        triangle = Triangle.from_points([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0])

        self.assertAlmostEqual(triangle.perimeter(), 2.0 + math.sqrt(2.0))

    def test_normal(self):
        triangle = Triangle([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
        self.assertTrue(np.allclose(triangle.normal(), [0.0, 0.0, 1.0]))

        reversed_triangle = Triangle([0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0])
        self.assertTrue(np.allclose(reversed_triangle.normal(), [0.0, 0.0, -1.0]))

    def test_degenerate(self):
        triangle = Triangle([0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [2.0, 2.0, 2.0])

        self.assertIsNone(triangle.normal())
        self.assertEqual(triangle.area(), 0.0)
        self.assertFalse(triangle.contains_point([1.0, 1.0, 1.0]))

    def test_plane(self):
        triangle = Triangle([0.0, 0.0, 3.0], [1.0, 0.0, 3.0], [0.0, 1.0, 3.0])
        self.assertTrue(triangle.plane().contains([10.0, -4.0, 3.0]))


class TriangleQueriesTest(unittest.TestCase):

    def setUp(self):
        # Лежит в плоскости XZ
        self.triangle = Triangle([0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 0.0, 2.0])

    def test_contains_point(self):
        self.assertTrue(self.triangle.contains_point([0.5, 0.0, 0.5]))
        self.assertTrue(self.triangle.contains_point([0.5, 0.3, 0.5]))
        self.assertFalse(self.triangle.contains_point([1.5, 0.0, 1.5]))

    def test_contains_boundary(self):
        self.assertTrue(self.triangle.contains_point([1.0, 0.0, 0.0]))
        self.assertTrue(self.triangle.contains_point([0.0, 0.0, 0.0]))

    def test_contains_tolerance(self):
        self.assertFalse(self.triangle.contains_point([0.5, 1.0, 0.5], tolerance=0.5))
        self.assertTrue(self.triangle.contains_point([0.5, 1.0, 0.5], tolerance=1.5))

    def test_closest_point_inside(self):
        result = self.triangle.closest_point([0.5, 3.0, 0.5])
        self.assertTrue(np.allclose(result, [0.5, 0.0, 0.5]))

    def test_closest_point_vertex(self):
        result = self.triangle.closest_point([-1.0, 0.0, -1.0])
        self.assertTrue(np.allclose(result, [0.0, 0.0, 0.0]))

    def test_closest_point_edge(self):
        # Гипотенуза x + z = 2
        result = self.triangle.closest_point([2.0, 0.0, 2.0])
        self.assertTrue(np.allclose(result, [1.0, 0.0, 1.0]))

        result = self.triangle.closest_point([1.0, 0.0, -3.0])
        self.assertTrue(np.allclose(result, [1.0, 0.0, 0.0]))

    def test_closest_point_degenerate(self):
        triangle = Triangle([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0])
        result = triangle.closest_point([1.5, 1.0, 0.0])
        self.assertTrue(np.allclose(result, [1.5, 0.0, 0.0]))


if __name__ == "__main__":
    unittest.main()
