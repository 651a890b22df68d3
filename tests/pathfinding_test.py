"""Tests for triangle-graph pathfinding."""

import unittest
import numpy as np

from navbench.backends.trigraph.pathfinding import (
    astar_triangles,
    build_adjacency,
    closest_point_on_triangle,
    compute_centroids,
    funnel_algorithm,
    get_portals_from_path,
    shortcut_corridor,
    triangle_areas_xz,
    walk_straight,
)
from navbench.mesh import PlaneMesh


def strip_mesh():
    """Three quads in a row along +X, two triangles each.

    0--1--2--3   z = 2
    | /| /| /|
    |/ |/ |/ |
    4--5--6--7   z = 0
    """
    vertices = np.array([
        [0, 0, 2], [1, 0, 2], [2, 0, 2], [3, 0, 2],
        [0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0],
    ], dtype=np.float64)
    triangles = np.array([
        [0, 4, 1],
        [1, 4, 5],
        [1, 5, 2],
        [2, 5, 6],
        [2, 6, 3],
        [3, 6, 7],
    ], dtype=np.int32)
    return vertices, triangles


class BuildAdjacencyTest(unittest.TestCase):

    def test_single_triangle(self):
        """One triangle has no neighbours."""
        triangles = np.array([[0, 1, 2]], dtype=np.int32)
        neighbors = build_adjacency(triangles)

        self.assertEqual(neighbors.shape, (1, 3))
        self.assertTrue(np.all(neighbors == -1))

    def test_two_adjacent_triangles(self):
        """Shared edge (1, 2)."""
        triangles = np.array([
            [0, 1, 2],
            [1, 3, 2],
        ], dtype=np.int32)
        neighbors = build_adjacency(triangles)

        # Triangle 0: edge 1 (vertices 1-2)
        self.assertEqual(neighbors[0, 1], 1)
        # Triangle 1: edge 2 (vertices 2-1)
        self.assertEqual(neighbors[1, 2], 0)

    def test_three_triangles_fan(self):
        """Fan around vertex 0: each triangle shares an edge with the other two."""
        triangles = np.array([
            [0, 1, 2],
            [0, 2, 3],
            [0, 3, 1],
        ], dtype=np.int32)
        neighbors = build_adjacency(triangles)

        for tri_idx in range(3):
            neighbor_count = np.sum(neighbors[tri_idx] >= 0)
            self.assertEqual(neighbor_count, 2, f"Triangle {tri_idx} should have 2 neighbors")

    def test_edge_with_three_owners(self):
        """Only the first two owners of edge (0, 1) are linked."""
        triangles = np.array([
            [0, 1, 2],
            [1, 0, 3],
            [0, 1, 4],
        ], dtype=np.int32)
        neighbors = build_adjacency(triangles)

        self.assertEqual(neighbors[0, 0], 1)
        self.assertEqual(neighbors[1, 0], 0)
        self.assertEqual(neighbors[2, 0], -1)


class GeometryTest(unittest.TestCase):

    def test_centroids_and_areas(self):
        vertices, triangles = strip_mesh()
        centroids = compute_centroids(vertices, triangles)
        areas = triangle_areas_xz(vertices, triangles)

        np.testing.assert_allclose(centroids[0], [1.0 / 3.0, 0.0, 4.0 / 3.0])
        np.testing.assert_allclose(areas, np.ones(6))

    def test_closest_point_inside(self):
        a = np.array([0.0, 0.0, 0.0])
        b = np.array([2.0, 0.0, 0.0])
        c = np.array([0.0, 0.0, 2.0])
        p = np.array([0.5, 3.0, 0.5])
        np.testing.assert_allclose(closest_point_on_triangle(p, a, b, c), [0.5, 0.0, 0.5])

    def test_closest_point_vertex_and_edge(self):
        a = np.array([0.0, 0.0, 0.0])
        b = np.array([2.0, 0.0, 0.0])
        c = np.array([0.0, 0.0, 2.0])
        np.testing.assert_allclose(closest_point_on_triangle(np.array([-1.0, 0.0, -1.0]), a, b, c), a)
        np.testing.assert_allclose(closest_point_on_triangle(np.array([1.0, 0.0, -1.0]), a, b, c), [1.0, 0.0, 0.0])
        np.testing.assert_allclose(closest_point_on_triangle(np.array([2.0, 0.0, 2.0]), a, b, c), [1.0, 0.0, 1.0])


class AStarTest(unittest.TestCase):

    def test_same_triangle(self):
        neighbors = np.array([[-1, -1, -1]], dtype=np.int32)
        centroids = np.array([[0.5, 0.0, 0.5]], dtype=np.float32)

        self.assertEqual(astar_triangles(0, 0, neighbors, centroids), [0])

    def test_no_path(self):
        neighbors = np.array([
            [-1, -1, -1],
            [-1, -1, -1],
        ], dtype=np.int32)
        centroids = np.array([
            [0.0, 0.0, 0.0],
            [10.0, 0.0, 0.0],
        ], dtype=np.float32)

        self.assertIsNone(astar_triangles(0, 1, neighbors, centroids))

    def test_path_through_strip(self):
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)
        centroids = compute_centroids(vertices, triangles)

        self.assertEqual(astar_triangles(0, 5, neighbors, centroids), [0, 1, 2, 3, 4, 5])


class PortalsTest(unittest.TestCase):

    def test_portal_count(self):
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)

        portals = get_portals_from_path([0, 1, 2, 3, 4, 5], triangles, vertices, neighbors)

        self.assertEqual(len(portals), 5)

    def test_portals_are_shared_edges(self):
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)

        portals = get_portals_from_path([0, 1], triangles, vertices, neighbors)

        edge = {tuple(portals[0][0]), tuple(portals[0][1])}
        self.assertEqual(edge, {tuple(vertices[1]), tuple(vertices[4])})

    def test_left_is_consistent_with_travel(self):
        """Walking along +X, the left endpoint of every portal is the one with smaller z."""
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)

        portals = get_portals_from_path([0, 1, 2, 3, 4, 5], triangles, vertices, neighbors)

        for left, right in portals:
            self.assertLess(left[2], right[2])

    def test_left_is_consistent_for_upward_faces(self):
        """Same orientation when the triangles wind with their normal up."""
        plane = PlaneMesh(2.0, 1.0, 2, 1)
        vertices = plane.vertices.astype(np.float64)
        triangles = plane.indices.reshape(-1, 3).astype(np.int32)
        neighbors = build_adjacency(triangles)

        portals = get_portals_from_path([0, 1, 2, 3], triangles, vertices, neighbors)

        self.assertEqual(len(portals), 3)
        for left, right in portals:
            self.assertLess(left[2], right[2])


class FunnelTest(unittest.TestCase):

    def test_no_portals(self):
        start = np.array([0.0, 0.0, 0.0])
        end = np.array([5.0, 0.0, 5.0])

        path = funnel_algorithm(start, end, [])

        self.assertEqual(len(path), 2)
        np.testing.assert_allclose(path[0], start)
        np.testing.assert_allclose(path[1], end)

    def test_wide_corridor_straight(self):
        """Every portal contains z = 0.5, so the path is a straight line."""
        start = np.array([0.0, 0.0, 0.5])
        end = np.array([10.0, 0.0, 0.5])
        portals = [
            (np.array([x, 0.0, 0.0]), np.array([x, 0.0, 1.0]))
            for x in (2.0, 4.0, 6.0, 8.0)
        ]

        path = funnel_algorithm(start, end, portals)

        self.assertEqual(len(path), 2)
        np.testing.assert_allclose(path[0], start)
        np.testing.assert_allclose(path[-1], end)

    def test_bends_around_portal_corner(self):
        """The only portal lies off the straight line, its near end becomes a corner."""
        start = np.array([0.0, 0.0, 0.0])
        end = np.array([4.0, 0.0, 0.0])
        portals = [(np.array([2.0, 0.0, 1.0]), np.array([2.0, 0.0, 2.0]))]

        path = funnel_algorithm(start, end, portals)

        self.assertEqual(len(path), 3)
        np.testing.assert_allclose(path[1], [2.0, 0.0, 1.0])
        np.testing.assert_allclose(path[2], end)

    def test_start_on_portal_endpoint_is_not_repeated(self):
        start = np.array([0.0, 0.0, 0.0])
        end = np.array([4.0, 0.0, 0.5])
        portals = [
            (start.copy(), np.array([1.0, 0.0, 2.0])),
            (np.array([2.0, 0.0, 0.0]), np.array([2.0, 0.0, 1.0])),
        ]

        path = funnel_algorithm(start, end, portals)

        self.assertEqual(len(path), 2)
        np.testing.assert_allclose(path[0], start)
        np.testing.assert_allclose(path[1], end)

    def test_strip_path_is_straight(self):
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)
        portals = get_portals_from_path([0, 1, 2, 3, 4, 5], triangles, vertices, neighbors)

        start = np.array([0.2, 0.0, 1.0])
        end = np.array([2.8, 0.0, 1.0])
        path = funnel_algorithm(start, end, portals)

        np.testing.assert_allclose(path[0], start)
        np.testing.assert_allclose(path[-1], end)
        length = sum(np.linalg.norm(b - a) for a, b in zip(path, path[1:]))
        self.assertAlmostEqual(length, 2.6)


class CorridorTest(unittest.TestCase):

    def test_shortcut_drops_fans_around_vertex_endpoints(self):
        """Vertex 1 belongs to triangles 0-2, vertex 6 to triangles 3-5."""
        vertices, triangles = strip_mesh()

        corridor = shortcut_corridor([0, 1, 2, 3, 4, 5], triangles, vertices, vertices[1], vertices[6])

        self.assertEqual(corridor, [2, 3])

    def test_shortcut_keeps_interior_endpoints(self):
        vertices, triangles = strip_mesh()
        start = np.array([0.2, 0.0, 1.0])
        end = np.array([2.8, 0.0, 1.0])

        corridor = shortcut_corridor([0, 1, 2, 3, 4, 5], triangles, vertices, start, end)

        self.assertEqual(corridor, [0, 1, 2, 3, 4, 5])

    def test_walk_straight_across_strip(self):
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)
        start = np.array([0.2, 0.0, 1.0])

        self.assertTrue(walk_straight(0, start, np.array([2.8, 0.0, 1.0]), triangles, vertices, neighbors))
        self.assertTrue(walk_straight(0, start, np.array([2.9, 0.0, 0.1]), triangles, vertices, neighbors))

    def test_walk_straight_blocked_by_boundary(self):
        vertices, triangles = strip_mesh()
        neighbors = build_adjacency(triangles)
        start = np.array([0.2, 0.0, 1.0])

        self.assertFalse(walk_straight(0, start, np.array([5.0, 0.0, 1.0]), triangles, vertices, neighbors))


if __name__ == "__main__":
    unittest.main()
