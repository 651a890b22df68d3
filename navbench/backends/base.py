"""
Navmesh backend service contract.

The harness talks to a backend only through these operations and never
looks inside the navmesh handles or native path objects a backend returns.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from navbench.extract import TriangleBuffer
from navbench.options import GenerationOptions

PathResult = np.ndarray
"""Ordered path points, shape (K, 3), float64. K == 0 means no path."""


def as_path_result(points: Sequence) -> PathResult:
    """Convert a sequence of xyz triples into a PathResult."""
    if len(points) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return np.asarray([[float(p[0]), float(p[1]), float(p[2])] for p in points], dtype=np.float64)


@runtime_checkable
class NavMeshBackend(Protocol):
    """Operations a navmesh backend exposes to the harness."""

    name: str
    label: str
    color: str

    def initialize(self) -> None:
        """One-time setup, run before any benchmark."""

    def adapt_options(self, options: GenerationOptions) -> Any:
        """Native option record for the canonical options."""

    def build(self, buffer: TriangleBuffer, options: Any) -> Optional[Any]:
        """Build a navmesh handle, or None on failure."""

    def find_path(self, navmesh: Any, start, end, half_extents) -> Any:
        """Point-to-point query. Returns the backend's native path."""

    def normalize_path(self, native: Any) -> PathResult:
        """Project a native path onto plain positions."""

    def debug_triangles(self, navmesh: Any) -> tuple[np.ndarray, np.ndarray]:
        """(vertices, triangles) of the navmesh surface for display."""
