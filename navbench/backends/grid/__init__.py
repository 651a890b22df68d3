"""
Grid navmesh backend.

The scene is sampled into a heightfield of floor cells:
1. Rasterization, clearance and climb checks
2. Erosion by agent radius, region filtering
3. Queries: A* over cells, line-of-sight smoothing
"""

from navbench.backends.grid.heightfield import GridNavMesh, build_grid_navmesh
from navbench.backends.grid.backend import GridBackend, Vector3

__all__ = [
    "GridNavMesh",
    "build_grid_navmesh",
    "GridBackend",
    "Vector3",
]
