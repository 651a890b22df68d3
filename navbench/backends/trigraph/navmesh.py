"""
Triangle-graph navmesh built directly from the walkable scene triangles.

Build steps:
1. Keep triangles whose normal is within the walkable slope of +Y
2. Weld vertices on the cell_size / cell_height lattice
3. Build triangle adjacency
4. Drop connected regions smaller than min_region_area (in cells^2)
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy.spatial import cKDTree

from navbench.backends.trigraph.pathfinding import (
    build_adjacency,
    compute_centroids,
    triangle_areas_xz,
)


@dataclass
class TriNavMesh:
    """Walkable triangles with connectivity."""

    vertices: np.ndarray      # (N, 3) float64
    triangles: np.ndarray     # (M, 3) int32
    neighbors: np.ndarray     # (M, 3) int32, -1 = no neighbor
    centroids: np.ndarray     # (M, 3)
    regions: np.ndarray       # (M,) region id per triangle
    max_radius: float = 0.0
    """Largest centroid-to-vertex distance; bounds candidate searches."""
    tree: Optional[cKDTree] = field(default=None, repr=False)

    def triangle_count(self) -> int:
        return len(self.triangles)

    def region_count(self) -> int:
        return int(self.regions.max()) + 1 if len(self.regions) else 0


def walkable_triangle_mask(positions: np.ndarray, triangles: np.ndarray, slope_degrees: float) -> np.ndarray:
    """Triangles whose unit normal has an up (+Y) component of at least cos(slope)."""
    v0 = positions[triangles[:, 0]]
    normals = np.cross(positions[triangles[:, 1]] - v0, positions[triangles[:, 2]] - v0)
    lengths = np.linalg.norm(normals, axis=1)
    valid = lengths > 1e-12
    up = np.zeros(len(triangles))
    up[valid] = normals[valid, 1] / lengths[valid]
    return valid & (up >= math.cos(math.radians(slope_degrees)))


def weld_vertices(
    positions: np.ndarray,
    triangles: np.ndarray,
    cell_size: float,
    cell_height: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Merge vertices falling on the same lattice point.

    Returns:
        (vertices, triangles) with degenerate triangles removed.
    """
    used = np.unique(triangles.reshape(-1))
    scale = np.array([cell_size, cell_height, cell_size])
    keys = np.round(positions[used] / scale).astype(np.int64)
    _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
    inverse = inverse.reshape(-1)

    remap = np.full(len(positions), -1, dtype=np.int64)
    remap[used] = inverse
    vertices = positions[used][first].astype(np.float64)
    welded = remap[triangles]

    keep = (
        (welded[:, 0] != welded[:, 1])
        & (welded[:, 1] != welded[:, 2])
        & (welded[:, 2] != welded[:, 0])
    )
    return vertices, welded[keep].astype(np.int32)


def label_regions(neighbors: np.ndarray) -> np.ndarray:
    """Connected components of the triangle graph (breadth-first)."""
    m = len(neighbors)
    regions = np.full(m, -1, dtype=np.int32)
    region = 0
    for seed in range(m):
        if regions[seed] >= 0:
            continue
        regions[seed] = region
        queue = deque([seed])
        while queue:
            tri = queue.popleft()
            for neighbor in neighbors[tri]:
                if neighbor >= 0 and regions[neighbor] < 0:
                    regions[neighbor] = region
                    queue.append(neighbor)
        region += 1
    return regions


def build_trinavmesh(
    positions: np.ndarray,
    triangles: np.ndarray,
    cell_size: float,
    cell_height: float,
    walkable_slope_degrees: float,
    min_region_area: float,
) -> Optional[TriNavMesh]:
    """
    Build a TriNavMesh. Returns None when no walkable triangle survives.

    Args:
        positions: (N, 3) world-space vertices.
        triangles: (M, 3) vertex indices.
        min_region_area: minimum region area in cells^2.
    """
    positions = np.asarray(positions, dtype=np.float64)
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles) == 0:
        return None

    walkable = triangles[walkable_triangle_mask(positions, triangles, walkable_slope_degrees)]
    if len(walkable) == 0:
        return None

    vertices, tris = weld_vertices(positions, walkable, cell_size, cell_height)
    if len(tris) == 0:
        return None

    neighbors = build_adjacency(tris)
    regions = label_regions(neighbors)

    # Filter small regions
    cell_areas = triangle_areas_xz(vertices, tris) / (cell_size * cell_size)
    region_areas = np.bincount(regions, weights=cell_areas)
    keep = region_areas[regions] >= min_region_area
    if not np.any(keep):
        return None
    if not np.all(keep):
        used, tris = np.unique(tris[keep], return_inverse=True)
        vertices = vertices[used]
        tris = tris.reshape(-1, 3).astype(np.int32)
        neighbors = build_adjacency(tris)
        regions = label_regions(neighbors)

    centroids = compute_centroids(vertices, tris)
    corner_dists = np.linalg.norm(vertices[tris] - centroids[:, None, :], axis=2)

    return TriNavMesh(
        vertices=vertices,
        triangles=tris,
        neighbors=neighbors,
        centroids=centroids,
        regions=regions,
        max_radius=float(corner_dists.max()),
        tree=cKDTree(centroids),
    )
