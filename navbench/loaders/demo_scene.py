"""
Built-in test scene.

A 10 x 10 floor with a long wall in the middle, a raised platform and a
ramp leading up to it. The floor is cut out under the wall and the
platform so that a surface-only navmesh cannot walk through them.
"""

import math

import numpy as np

from navbench.geombase import GeneralPose3
from navbench.mesh import BoxMesh, MeshData, PlaneMesh
from navbench.scene import SceneNode

FLOOR_SIZE = 10.0
FLOOR_SEGMENTS = 20

WALL_CENTER = (0.0, 0.75, -1.0)
WALL_SIZE = (1.0, 1.5, 6.0)

PLATFORM_CENTER = (3.0, 0.5, -3.0)
PLATFORM_SIZE = (3.0, 1.0, 3.0)

RAMP_RUN = 2.5
RAMP_RISE = 1.0
RAMP_WIDTH = 2.0


def floor_with_holes(size: float, segments: int, holes) -> MeshData:
    """Square floor grid at y = 0 without the cells whose centre lies in a hole.

    Args:
        holes: (x0, z0, x1, z1) rectangles in the XZ plane.
    """
    step = size / segments
    half = size * 0.5
    vertices = []
    for d in range(segments + 1):
        for w in range(segments + 1):
            vertices.append([w * step - half, 0.0, d * step - half])

    triangles = []
    for d in range(segments):
        for w in range(segments):
            cx = (w + 0.5) * step - half
            cz = (d + 0.5) * step - half
            if any(x0 <= cx <= x1 and z0 <= cz <= z1 for x0, z0, x1, z1 in holes):
                continue
            v0 = d * (segments + 1) + w
            v1 = v0 + 1
            v2 = v0 + (segments + 1)
            v3 = v2 + 1
            triangles.append([v0, v2, v1])
            triangles.append([v1, v2, v3])

    return MeshData(np.array(vertices, dtype=float), np.array(triangles, dtype=int), name="Floor")


def _box_footprint(center, size):
    return (
        center[0] - size[0] * 0.5,
        center[2] - size[2] * 0.5,
        center[0] + size[0] * 0.5,
        center[2] + size[2] * 0.5,
    )


def make_demo_scene() -> SceneNode:
    root = SceneNode(name="Demo")

    root.add_child(SceneNode(
        name="Floor",
        mesh=floor_with_holes(
            FLOOR_SIZE,
            FLOOR_SEGMENTS,
            [_box_footprint(WALL_CENTER, WALL_SIZE), _box_footprint(PLATFORM_CENTER, PLATFORM_SIZE)],
        ),
    ))
    root.add_child(SceneNode(
        name="Wall",
        pose=GeneralPose3.translation(*WALL_CENTER),
        mesh=BoxMesh(*WALL_SIZE),
    ))
    root.add_child(SceneNode(
        name="Platform",
        pose=GeneralPose3.translation(*PLATFORM_CENTER),
        mesh=BoxMesh(*PLATFORM_SIZE),
    ))

    # Ramp from the floor at z = 1 up to the platform edge at z = -1.5.
    angle = math.atan2(RAMP_RISE, RAMP_RUN)
    length = math.hypot(RAMP_RISE, RAMP_RUN)
    platform_edge = PLATFORM_CENTER[2] + PLATFORM_SIZE[2] * 0.5
    pose = GeneralPose3.translation(
        PLATFORM_CENTER[0], RAMP_RISE * 0.5, platform_edge + RAMP_RUN * 0.5
    ) * GeneralPose3.rotateX(angle)
    root.add_child(SceneNode(
        name="Ramp",
        pose=pose,
        mesh=PlaneMesh(RAMP_WIDTH, length, segments_w=4, segments_d=1),
    ))

    return root
