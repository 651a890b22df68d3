"""Tests for scene loaders."""

import json
import math
import os
import struct
import tempfile
import unittest

import numpy as np

from navbench.extract import gather_triangles
from navbench.loaders import load_scene, make_demo_scene
from navbench.loaders.glb_loader import load_glb_scene
from navbench.loaders.obj_loader import load_obj_scene
from navbench.util import transform_points


OBJ_TEXT = """# two groups
v 0 0 0
v 1 0 0
v 1 0 1
v 0 0 1
v 5 1 5
v 6 1 5
v 5 1 6
o floor
f 1 2 3 4
o step
f 5/1/1 7/2/1 6/3/1
f -3 -1 -2
"""


def make_glb(nodes, scenes=None):
    """Single-triangle mesh with uint16 indices and the given node list."""
    positions = np.array([[0, 0, 0], [1, 0, 0], [0, 0, 1]], dtype=np.float32).tobytes()
    indices = np.array([0, 2, 1], dtype=np.uint16).tobytes() + b"\0\0"
    bin_chunk = positions + indices

    gltf = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": len(bin_chunk)}],
        "bufferViews": [
            {"buffer": 0, "byteOffset": 0, "byteLength": len(positions)},
            {"buffer": 0, "byteOffset": len(positions), "byteLength": 6},
        ],
        "accessors": [
            {"bufferView": 0, "componentType": 5126, "count": 3, "type": "VEC3"},
            {"bufferView": 1, "componentType": 5123, "count": 3, "type": "SCALAR"},
        ],
        "meshes": [{"name": "Tri", "primitives": [{"attributes": {"POSITION": 0}, "indices": 1}]}],
        "nodes": nodes,
    }
    if scenes is not None:
        gltf["scenes"] = scenes
        gltf["scene"] = 0

    json_chunk = json.dumps(gltf).encode("utf-8")
    json_chunk += b" " * ((4 - len(json_chunk) % 4) % 4)

    body = struct.pack("<II", len(json_chunk), 0x4E4F534A) + json_chunk
    body += struct.pack("<II", len(bin_chunk), 0x004E4942) + bin_chunk
    return b"glTF" + struct.pack("<II", 2, 12 + len(body)) + body


class ObjLoaderTest(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "level.obj")
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(OBJ_TEXT)

    def tearDown(self):
        self.tmp.cleanup()

    def test_groups_become_nodes(self):
        root = load_obj_scene(self.path)

        self.assertEqual(root.name, "level")
        self.assertEqual([child.name for child in root.children], ["floor", "step"])

    def test_quad_fan_triangulated(self):
        floor = load_obj_scene(self.path).find("floor")

        self.assertEqual(floor.mesh.vertex_count, 4)
        self.assertEqual(floor.mesh.indices.tolist(), [0, 1, 2, 0, 2, 3])

    def test_slashes_and_negative_indices(self):
        step = load_obj_scene(self.path).find("step")

        self.assertEqual(step.mesh.vertex_count, 3)
        self.assertEqual(len(step.mesh.indices), 6)
        # "f -3 -1 -2" is the same triangle as "f 5 7 6"
        self.assertEqual(step.mesh.indices[:3].tolist(), step.mesh.indices[3:].tolist())

    def test_extracted_buffer(self):
        buffer = gather_triangles(load_scene(self.path))

        self.assertEqual(buffer.triangle_count, 4)
        self.assertEqual(buffer.vertex_count, 7)

    def test_faces_without_group(self):
        path = os.path.join(self.tmp.name, "plain.obj")
        with open(path, "w", encoding="utf-8") as f:
            f.write("v 0 0 0\nv 1 0 0\nv 0 0 1\nf 1 3 2\n")

        root = load_obj_scene(path)

        self.assertEqual(len(root.children), 1)
        self.assertEqual(root.children[0].name, "plain")


class GlbLoaderTest(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, data, name="scene.glb"):
        path = os.path.join(self.tmp.name, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def test_hierarchy_and_indices(self):
        nodes = [
            {"name": "Parent", "translation": [1, 0, 0], "children": [1]},
            {"name": "Child", "mesh": 0, "scale": [2, 2, 2]},
        ]
        root = load_glb_scene(self.write(make_glb(nodes, scenes=[{"nodes": [0]}])))

        self.assertEqual(root.name, "scene")
        self.assertEqual(root.children[0].name, "Parent")
        child = root.find("Child")
        self.assertEqual(child.mesh.indices.tolist(), [0, 2, 1])
        self.assertEqual(child.mesh.name, "Tri")

        buffer = gather_triangles(root)
        np.testing.assert_allclose(buffer.positions, [[1, 0, 0], [3, 0, 0], [1, 0, 2]])
        self.assertEqual(buffer.indices.tolist(), [0, 2, 1])

    def test_rotation(self):
        s = math.sqrt(0.5)
        nodes = [{"name": "Rotated", "mesh": 0, "rotation": [0, s, 0, s]}]
        buffer = gather_triangles(load_glb_scene(self.write(make_glb(nodes, scenes=[{"nodes": [0]}]))))

        # 90 degrees about +Y maps +X to -Z
        np.testing.assert_allclose(buffer.positions[1], [0, 0, -1], atol=1e-6)

    def test_matrix(self):
        matrix = [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 5, 0, 0, 1]
        nodes = [{"name": "Moved", "mesh": 0, "matrix": matrix}]
        buffer = gather_triangles(load_glb_scene(self.write(make_glb(nodes, scenes=[{"nodes": [0]}]))))

        np.testing.assert_allclose(buffer.positions[:, 0], [5, 6, 5], atol=1e-6)

    def test_roots_without_scene_list(self):
        nodes = [
            {"name": "A", "children": [1]},
            {"name": "B", "mesh": 0},
            {"name": "C", "mesh": 0},
        ]
        root = load_glb_scene(self.write(make_glb(nodes)))

        self.assertEqual([child.name for child in root.children], ["A", "C"])
        self.assertEqual(gather_triangles(root).triangle_count, 2)

    def test_invalid_magic(self):
        with self.assertRaises(ValueError):
            load_glb_scene(self.write(b"GLTF" + b"\0" * 16))

    def test_dispatch_by_extension(self):
        path = self.write(make_glb([{"name": "A", "mesh": 0}]), name="UPPER.GLB")
        self.assertEqual(load_scene(path).find("A").name, "A")

        with self.assertRaises(ValueError):
            load_scene(os.path.join(self.tmp.name, "model.stl"))


class DemoSceneTest(unittest.TestCase):

    def test_layout(self):
        root = make_demo_scene()
        self.assertEqual([child.name for child in root.children], ["Floor", "Wall", "Platform", "Ramp"])

    def test_ramp_connects_floor_and_platform(self):
        root = make_demo_scene()
        ramp = root.find("Ramp")
        points = transform_points(ramp.world_matrix(), ramp.mesh.vertices)

        self.assertAlmostEqual(points[:, 1].min(), 0.0, places=5)
        self.assertAlmostEqual(points[:, 1].max(), 1.0, places=5)
        self.assertAlmostEqual(points[:, 2].min(), -1.5, places=5)
        self.assertAlmostEqual(points[:, 2].max(), 1.0, places=5)

    def test_floor_cut_under_wall(self):
        buffer = gather_triangles(make_demo_scene())
        floor = make_demo_scene().find("Floor").mesh

        self.assertEqual(len(floor.indices) % 3, 0)
        # 20 x 20 cells minus 2 x 12 under the wall and 6 x 6 under the platform
        self.assertEqual(len(floor.indices) // 6, 400 - 24 - 36)
        self.assertGreater(buffer.triangle_count, len(floor.indices) // 3)


if __name__ == "__main__":
    unittest.main()
