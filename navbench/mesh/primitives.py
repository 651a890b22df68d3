"""Primitive mesh shapes: Box, Plane."""

import numpy as np
from .mesh import MeshData

# Unit cube corners as sign triples.
_BOX_CORNERS = [
    (-1, -1, -1), (1, -1, -1), (1, 1, -1), (-1, 1, -1),
    (-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1),
]

# Faces as quads, counter-clockwise seen from outside.
_BOX_QUADS = [
    (0, 3, 2, 1),  # -Z
    (4, 5, 6, 7),  # +Z
    (0, 1, 5, 4),  # -Y
    (3, 7, 6, 2),  # +Y
    (0, 4, 7, 3),  # -X
    (1, 2, 6, 5),  # +X
]


class BoxMesh(MeshData):
    """Axis-aligned box centred at the origin, two triangles per face."""

    def __init__(self, size: float = 1.0, y: float = None, z: float = None):
        half = np.array([size, size if y is None else y, size if z is None else z], dtype=float) * 0.5
        vertices = np.array(_BOX_CORNERS, dtype=float) * half
        triangles = []
        for a, b, c, d in _BOX_QUADS:
            triangles.append([a, b, c])
            triangles.append([a, c, d])
        super().__init__(vertices=vertices, indices=np.array(triangles, dtype=int), name="Box")


class PlaneMesh(MeshData):
    """Horizontal plane in XZ with its normal pointing to +Y."""

    def __init__(self, width: float = 1.0, depth: float = 1.0, segments_w: int = 1, segments_d: int = 1):
        vertices = []
        triangles = []
        for d in range(segments_d + 1):
            z = (d / segments_d - 0.5) * depth
            for w in range(segments_w + 1):
                x = (w / segments_w - 0.5) * width
                vertices.append([x, 0.0, z])
        for d in range(segments_d):
            for w in range(segments_w):
                v0 = d * (segments_w + 1) + w
                v1 = v0 + 1
                v2 = v0 + (segments_w + 1)
                v3 = v2 + 1
                triangles.append([v0, v2, v1])
                triangles.append([v1, v2, v3])
        super().__init__(vertices=np.array(vertices, dtype=float), indices=np.array(triangles, dtype=int), name="Plane")
