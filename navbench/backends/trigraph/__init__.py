"""
Trigraph navmesh backend.

The walkable scene triangles themselves form the navmesh:
1. Slope filter and vertex welding
2. Triangle adjacency and region filtering
3. Queries: A* over triangles, funnel string pulling
"""

from navbench.backends.trigraph.navmesh import TriNavMesh, build_trinavmesh
from navbench.backends.trigraph.backend import TriGraphBackend, PathPoint

__all__ = [
    "TriNavMesh",
    "build_trinavmesh",
    "TriGraphBackend",
    "PathPoint",
]
