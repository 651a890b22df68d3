"""Base mesh class holding local-space triangle geometry."""

from typing import Optional

import numpy as np


class MeshData:
    """Local-space vertex positions with an optional triangle index list.

    When ``indices`` is None the vertices are read as a flat, non-indexed
    triangle list (every three consecutive vertices form one triangle).
    """

    def __init__(self, vertices: np.ndarray, indices: Optional[np.ndarray] = None, name: str = ""):
        self.vertices = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        self.indices = None if indices is None else np.asarray(indices, dtype=np.uint32).reshape(-1)
        self.name = name

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def is_indexed(self) -> bool:
        return self.indices is not None

    def triangle_indices(self) -> np.ndarray:
        """Flat index list, synthesized as 0..N-1 for non-indexed meshes."""
        if self.indices is not None:
            return self.indices
        return np.arange(self.vertex_count, dtype=np.uint32)

    def copy(self) -> "MeshData":
        indices = None if self.indices is None else self.indices.copy()
        return MeshData(self.vertices.copy(), indices, self.name)

    def __repr__(self):
        return f"MeshData(name={self.name!r}, vertices={self.vertex_count}, indexed={self.is_indexed})"
