"""Tests for triangle extraction from a scene graph."""

import math
import unittest

import numpy as np

from navbench.extract import TriangleBuffer, gather_triangles
from navbench.geombase import GeneralPose3
from navbench.mesh import MeshData
from navbench.scene import SceneNode

def triangle_mesh(offset=0.0, name="tri"):
    vertices = np.array([
        [0.0 + offset, 0.0, 0.0],
        [1.0 + offset, 0.0, 0.0],
        [0.0 + offset, 0.0, 1.0],
    ])
    return MeshData(vertices, np.array([0, 1, 2]), name=name)

class GatherTrianglesTest(unittest.TestCase):

    def test_two_siblings(self):
        root = SceneNode("root")
        root.add_child(SceneNode("a", mesh=triangle_mesh()))
        root.add_child(SceneNode("b", mesh=triangle_mesh(offset=5.0)))

        buffer = gather_triangles(root)

        self.assertEqual(buffer.vertex_count, 6)
        self.assertEqual(buffer.triangle_count, 2)
        self.assertEqual(buffer.indices.tolist(), [0, 1, 2, 3, 4, 5])
        self.assertEqual(buffer.positions.dtype, np.float32)
        self.assertEqual(buffer.indices.dtype, np.uint32)
        # Siblings appear in stored order
        self.assertAlmostEqual(float(buffer.positions[3, 0]), 5.0)

    def test_parent_translation(self):
        root = SceneNode("root", pose=GeneralPose3.translation(10.0, 0.0, 0.0))
        root.add_child(SceneNode("child", mesh=triangle_mesh()))

        buffer = gather_triangles(root)

        np.testing.assert_allclose(buffer.positions[:, 0], [10.0, 11.0, 10.0])

    def test_rotation_and_scale(self):
        pose = GeneralPose3.rotateY(math.pi / 2) * GeneralPose3.scaling(2.0)
        root = SceneNode("root")
        root.add_child(SceneNode("child", pose=pose, mesh=triangle_mesh()))

        buffer = gather_triangles(root)

        # (1, 0, 0) scaled to (2, 0, 0), then rotated about +Y to (0, 0, -2)
        np.testing.assert_allclose(buffer.positions[1], [0.0, 0.0, -2.0], atol=1e-6)

    def test_preorder_parent_before_children(self):
        root = SceneNode("root", mesh=triangle_mesh(offset=1.0))
        child = root.add_child(SceneNode("child", mesh=triangle_mesh(offset=2.0)))
        child.add_child(SceneNode("grandchild", mesh=triangle_mesh(offset=3.0)))
        root.add_child(SceneNode("sibling", mesh=triangle_mesh(offset=4.0)))

        buffer = gather_triangles(root)

        firsts = buffer.positions[::3, 0].tolist()
        self.assertEqual(firsts, [1.0, 2.0, 3.0, 4.0])

    def test_non_indexed_mesh(self):
        vertices = np.array([
            [0, 0, 0], [1, 0, 0], [0, 0, 1],
            [1, 0, 0], [1, 0, 1], [0, 0, 1],
        ], dtype=float)
        root = SceneNode("root")
        root.add_child(SceneNode("indexed", mesh=triangle_mesh()))
        root.add_child(SceneNode("soup", mesh=MeshData(vertices)))

        buffer = gather_triangles(root)

        self.assertEqual(buffer.indices.tolist(), [0, 1, 2, 3, 4, 5, 6, 7, 8])

    def test_non_uniform_parent_scale_over_rotated_child(self):
        root = SceneNode("root", pose=GeneralPose3.scaling(2.0, 1.0, 1.0))
        vertices = np.array([[1, 0, 0], [0, 0, 1], [0, 0, 0]], dtype=float)
        root.add_child(SceneNode(
            "child",
            pose=GeneralPose3.rotateY(math.pi / 2),
            mesh=MeshData(vertices, np.array([0, 1, 2])),
        ))

        buffer = gather_triangles(root)

        # Rotation first maps (1,0,0) to (0,0,-1) and (0,0,1) to (1,0,0); the parent then doubles x
        np.testing.assert_allclose(buffer.positions[:2], [[0.0, 0.0, -1.0], [2.0, 0.0, 0.0]], atol=1e-6)

    def test_two_non_indexed_siblings(self):
        soup = np.array([
            [0, 0, 0], [1, 0, 0], [0, 0, 1],
            [1, 0, 0], [1, 0, 1], [0, 0, 1],
        ], dtype=float)
        root = SceneNode("root")
        root.add_child(SceneNode("first", mesh=MeshData(soup)))
        root.add_child(SceneNode("second", pose=GeneralPose3.translation(0, 0, 3), mesh=MeshData(soup)))

        buffer = gather_triangles(root)

        self.assertEqual(buffer.triangle_count, 4)
        self.assertEqual(buffer.indices.tolist(), list(range(12)))
        np.testing.assert_allclose(buffer.positions[6:, 2], soup[:, 2] + 3.0)

    def test_nodes_without_mesh_are_skipped(self):
        root = SceneNode("root")
        group = root.add_child(SceneNode("group"))
        group.add_child(SceneNode("leaf", mesh=triangle_mesh()))

        buffer = gather_triangles(root)

        self.assertEqual(buffer.triangle_count, 1)
        self.assertEqual(buffer.indices.tolist(), [0, 1, 2])

    def test_empty_scene(self):
        buffer = gather_triangles(SceneNode("root"))
        self.assertEqual(buffer.vertex_count, 0)
        self.assertEqual(buffer.triangle_count, 0)
        self.assertEqual(buffer.positions.shape, (0, 3))

    def test_indices_within_range(self):
        root = SceneNode("root")
        for i in range(5):
            root.add_child(SceneNode(f"n{i}", mesh=triangle_mesh(offset=float(i))))

        buffer = gather_triangles(root)

        self.assertEqual(len(buffer.indices) % 3, 0)
        self.assertLess(int(buffer.indices.max()), buffer.vertex_count)

    def test_deterministic(self):
        root = SceneNode("root", pose=GeneralPose3.rotateX(0.3))
        root.add_child(SceneNode("a", pose=GeneralPose3.translation(1, 2, 3), mesh=triangle_mesh()))
        root.add_child(SceneNode("b", mesh=triangle_mesh(offset=2.0)))

        self.assertEqual(gather_triangles(root).tobytes(), gather_triangles(root).tobytes())

    def test_buffer_is_read_only(self):
        root = SceneNode("root", mesh=triangle_mesh())
        buffer = gather_triangles(root)

        self.assertIsInstance(buffer, TriangleBuffer)
        with self.assertRaises(ValueError):
            buffer.positions[0, 0] = 1.0
        with self.assertRaises(ValueError):
            buffer.indices[0] = 2

    def test_triangles_view(self):
        root = SceneNode("root", mesh=triangle_mesh())
        buffer = gather_triangles(root)
        self.assertEqual(buffer.triangles.shape, (1, 3))

class SceneNodeTest(unittest.TestCase):

    def test_world_matrix(self):
        root = SceneNode("root", pose=GeneralPose3.translation(1, 0, 0))
        child = root.add_child(SceneNode("child", pose=GeneralPose3.translation(0, 2, 0)))
        np.testing.assert_allclose(child.world_matrix()[:3, 3], [1, 2, 0])
        self.assertIs(child.parent, root)

    def test_find_and_count(self):
        root = SceneNode("root")
        root.add_child(SceneNode("a", mesh=triangle_mesh()))
        b = root.add_child(SceneNode("b"))
        b.add_child(SceneNode("c", mesh=triangle_mesh()))

        self.assertEqual(root.find("c").name, "c")
        self.assertIsNone(root.find("missing"))
        self.assertEqual(root.mesh_count(), 2)

if __name__ == "__main__":
    unittest.main()
