"""
Triangle extraction from a scene graph.

All mesh nodes are flattened into a single world-space triangle soup that
both navmesh backends consume.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from navbench import log
from navbench.scene import SceneNode
from navbench.util import transform_points


@dataclass(frozen=True)
class TriangleBuffer:
    """World-space triangle soup."""

    positions: np.ndarray
    """Vertex positions, shape (N, 3), float32, in traversal order."""

    indices: np.ndarray
    """Flat triangle index list, uint32, length is a multiple of 3."""

    def __post_init__(self):
        self.positions.setflags(write=False)
        self.indices.setflags(write=False)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def triangles(self) -> np.ndarray:
        """Indices viewed as (M, 3)."""
        return self.indices.reshape(-1, 3)

    def tobytes(self) -> bytes:
        return self.positions.tobytes() + self.indices.tobytes()


def gather_triangles(root: SceneNode) -> TriangleBuffer:
    """
    Flatten every mesh under ``root`` into one TriangleBuffer.

    Nodes are visited in pre-order. Vertices are transformed by the node's
    world matrix; indices are offset by the number of vertices already
    appended. Meshes without indices are read as non-indexed triangle lists.
    """
    positions: list[np.ndarray] = []
    indices: list[np.ndarray] = []
    vertex_offset = 0

    for node, world_matrix in root.traverse():
        mesh = node.mesh
        if mesh is None:
            continue

        positions.append(transform_points(world_matrix, mesh.vertices).astype(np.float32))
        indices.append(mesh.triangle_indices().astype(np.int64) + vertex_offset)
        vertex_offset += mesh.vertex_count

    if positions:
        buffer = TriangleBuffer(
            positions=np.concatenate(positions).astype(np.float32),
            indices=np.concatenate(indices).astype(np.uint32),
        )
    else:
        buffer = TriangleBuffer(
            positions=np.zeros((0, 3), dtype=np.float32),
            indices=np.zeros(0, dtype=np.uint32),
        )

    log.debug(f"[Extract] {buffer.triangle_count} triangles, {buffer.vertex_count} vertices")
    return buffer
