"""
Heightfield navmesh on a regular XZ lattice.

Build steps:
1. Rasterize every triangle into surface samples at cell centres
2. Keep walkable surfaces with enough vertical clearance as floor nodes
3. Link neighbouring nodes whose height difference is climbable
4. Erode nodes closer than the agent radius to a border
5. Drop regions with fewer than min_region_area^2 nodes
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

SURFACE_WALKABLE = 0
SURFACE_STEEP = 1
SURFACE_DOWN = 2

CARDINAL = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONAL = [(1, 1), (1, -1), (-1, 1), (-1, -1)]

Cell = Tuple[int, int]


@dataclass
class GridNavMesh:
    """Floor nodes of the heightfield with their links."""

    origin: np.ndarray                    # (x, z) of cell (0, 0) corner
    cell_size: float
    cell_height: float
    climb: float
    """Maximum climbable height difference in world units."""
    positions: np.ndarray                 # (K, 3) node centres
    cells: List[Cell]                     # cell of every node
    links: List[List[Tuple[int, float]]]  # (neighbour, cost) per node
    cell_nodes: Dict[Cell, List[int]]
    regions: np.ndarray
    tree: Optional[cKDTree] = field(default=None, repr=False)

    def node_count(self) -> int:
        return len(self.positions)

    def region_count(self) -> int:
        return int(self.regions.max()) + 1 if len(self.regions) else 0

    def cell_of(self, x: float, z: float) -> Cell:
        return (
            int(math.floor((x - self.origin[0]) / self.cell_size)),
            int(math.floor((z - self.origin[1]) / self.cell_size)),
        )

    def cell_bounds(self, node: int) -> Tuple[float, float, float, float]:
        ix, iz = self.cells[node]
        x0 = self.origin[0] + ix * self.cell_size
        z0 = self.origin[1] + iz * self.cell_size
        return x0, z0, x0 + self.cell_size, z0 + self.cell_size


def rasterize(
    positions: np.ndarray,
    triangles: np.ndarray,
    origin: np.ndarray,
    cell_size: float,
    walkable_slope_degrees: float,
) -> Dict[Cell, List[Tuple[float, int]]]:
    """Sample every triangle at the cell centres it covers in XZ."""
    samples: Dict[Cell, List[Tuple[float, int]]] = {}
    cos_slope = math.cos(math.radians(walkable_slope_degrees))

    for tri in triangles:
        p0, p1, p2 = positions[tri[0]], positions[tri[1]], positions[tri[2]]
        normal = np.cross(p1 - p0, p2 - p0)
        length = float(np.linalg.norm(normal))
        if length < 1e-12:
            continue
        up = normal[1] / length
        if up >= cos_slope:
            kind = SURFACE_WALKABLE
        elif up > 0.0:
            kind = SURFACE_STEEP
        else:
            kind = SURFACE_DOWN

        x0, z0 = p0[0], p0[2]
        x1, z1 = p1[0], p1[2]
        x2, z2 = p2[0], p2[2]
        det = (z1 - z2) * (x0 - x2) + (x2 - x1) * (z0 - z2)
        if abs(det) < 1e-12:
            # Vertical triangle, no footprint.
            continue

        ix_min = int(math.floor((min(x0, x1, x2) - origin[0]) / cell_size - 0.5))
        ix_max = int(math.ceil((max(x0, x1, x2) - origin[0]) / cell_size - 0.5))
        iz_min = int(math.floor((min(z0, z1, z2) - origin[1]) / cell_size - 0.5))
        iz_max = int(math.ceil((max(z0, z1, z2) - origin[1]) / cell_size - 0.5))

        ix = np.arange(ix_min, ix_max + 1)
        iz = np.arange(iz_min, iz_max + 1)
        gx, gz = np.meshgrid(ix, iz, indexing="ij")
        px = origin[0] + (gx + 0.5) * cell_size
        pz = origin[1] + (gz + 0.5) * cell_size

        l1 = ((z1 - z2) * (px - x2) + (x2 - x1) * (pz - z2)) / det
        l2 = ((z2 - z0) * (px - x2) + (x0 - x2) * (pz - z2)) / det
        l3 = 1.0 - l1 - l2
        inside = (l1 >= -1e-9) & (l2 >= -1e-9) & (l3 >= -1e-9)
        if not np.any(inside):
            continue

        heights = l1 * p0[1] + l2 * p1[1] + l3 * p2[1]
        for cx, cz, h in zip(gx[inside], gz[inside], heights[inside]):
            samples.setdefault((int(cx), int(cz)), []).append((float(h), kind))

    return samples


def floor_heights(
    cell_samples: List[Tuple[float, int]],
    min_clearance: float,
    eps: float,
) -> List[float]:
    """
    Floor heights of one cell.

    A walkable sample is a floor when the closest obstruction above it is at
    least min_clearance away. Obstructions are any surface more than eps
    above, and downward-facing surfaces at the same level (the underside of
    a solid resting on the floor). Floors closer than eps are merged.
    """
    floors: List[float] = []
    for h, kind in cell_samples:
        if kind != SURFACE_WALKABLE:
            continue
        obstruction = math.inf
        for other_h, other_kind in cell_samples:
            if other_h > h + eps or (other_kind == SURFACE_DOWN and other_h >= h - eps):
                obstruction = min(obstruction, other_h)
        if obstruction - h >= min_clearance:
            floors.append(h)

    floors.sort()
    merged: List[float] = []
    for h in floors:
        if merged and h - merged[-1] <= eps:
            merged[-1] = h
        else:
            merged.append(h)
    return merged


def _neighbor_in(
    cell_nodes: Dict[Cell, List[int]],
    heights: List[float],
    cell: Cell,
    h: float,
    climb: float,
) -> int:
    """Node of cell reachable from height h, preferring the closest height. -1 if none."""
    best = -1
    best_dh = math.inf
    for node in cell_nodes.get(cell, ()):
        dh = abs(heights[node] - h)
        if dh <= climb + 1e-9 and dh < best_dh:
            best = node
            best_dh = dh
    return best


def link_nodes(
    cells: List[Cell],
    heights: List[float],
    cell_nodes: Dict[Cell, List[int]],
    climb: float,
    cell_size: float,
) -> Tuple[List[List[Tuple[int, float]]], List[int]]:
    """
    8-connected links. Diagonals need both adjacent cardinal cells open.

    Returns:
        (links, number of cardinal links per node)
    """
    links: List[List[Tuple[int, float]]] = []
    cardinal_counts: List[int] = []
    for node, (ix, iz) in enumerate(cells):
        h = heights[node]
        node_links = []
        for dx, dz in CARDINAL:
            other = _neighbor_in(cell_nodes, heights, (ix + dx, iz + dz), h, climb)
            if other >= 0:
                node_links.append((other, math.hypot(cell_size, heights[other] - h)))
        cardinal_counts.append(len(node_links))
        for dx, dz in DIAGONAL:
            other = _neighbor_in(cell_nodes, heights, (ix + dx, iz + dz), h, climb)
            if other < 0:
                continue
            if _neighbor_in(cell_nodes, heights, (ix + dx, iz), h, climb) < 0:
                continue
            if _neighbor_in(cell_nodes, heights, (ix, iz + dz), h, climb) < 0:
                continue
            step = cell_size * math.sqrt(2.0)
            node_links.append((other, math.hypot(step, heights[other] - h)))
        links.append(node_links)
    return links, cardinal_counts


def erode(
    links: List[List[Tuple[int, float]]],
    cardinal_counts: List[int],
    radius: int,
) -> np.ndarray:
    """
    Mask of nodes at least radius steps away from a border node.

    Border nodes are nodes with fewer than four cardinal links.
    """
    n = len(links)
    keep = np.ones(n, dtype=bool)
    if radius <= 0:
        return keep

    distance = np.full(n, -1, dtype=np.int64)
    queue: deque = deque()
    for node in range(n):
        if cardinal_counts[node] < 4:
            distance[node] = 0
            queue.append(node)

    while queue:
        node = queue.popleft()
        if distance[node] + 1 >= radius:
            continue
        for other, _ in links[node]:
            if distance[other] < 0:
                distance[other] = distance[node] + 1
                queue.append(other)

    keep[(distance >= 0) & (distance < radius)] = False
    return keep


def label_regions(links: List[List[Tuple[int, float]]]) -> np.ndarray:
    n = len(links)
    regions = np.full(n, -1, dtype=np.int32)
    region = 0
    for seed in range(n):
        if regions[seed] >= 0:
            continue
        regions[seed] = region
        queue = deque([seed])
        while queue:
            node = queue.popleft()
            for other, _ in links[node]:
                if regions[other] < 0:
                    regions[other] = region
                    queue.append(other)
        region += 1
    return regions


def _compact(
    cells: List[Cell],
    heights: List[float],
    keep: np.ndarray,
) -> Tuple[List[Cell], List[float], Dict[Cell, List[int]]]:
    new_cells: List[Cell] = []
    new_heights: List[float] = []
    cell_nodes: Dict[Cell, List[int]] = {}
    for node in np.flatnonzero(keep):
        cell_nodes.setdefault(cells[node], []).append(len(new_cells))
        new_cells.append(cells[node])
        new_heights.append(heights[node])
    return new_cells, new_heights, cell_nodes


def build_grid_navmesh(
    positions: np.ndarray,
    triangles: np.ndarray,
    cell_size: float,
    cell_height: float,
    walkable_slope_degrees: float,
    walkable_height: int,
    walkable_climb: int,
    walkable_radius: int,
    min_region_area: float,
) -> Optional[GridNavMesh]:
    """
    Build a GridNavMesh. Returns None when no floor node survives.

    walkable_height, walkable_climb and walkable_radius are in voxels;
    min_region_area is a linear size, squared here into a node count.
    """
    positions = np.asarray(positions, dtype=np.float64)
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles) == 0:
        return None

    used = positions[np.unique(triangles.reshape(-1))]
    origin = np.array([used[:, 0].min(), used[:, 2].min()])
    climb = walkable_climb * cell_height
    eps = cell_height * 0.5

    samples = rasterize(positions, triangles, origin, cell_size, walkable_slope_degrees)

    cells: List[Cell] = []
    heights: List[float] = []
    for cell in sorted(samples):
        for h in floor_heights(sorted(samples[cell]), walkable_height * cell_height, eps):
            cells.append(cell)
            heights.append(h)
    if not cells:
        return None

    keep = np.ones(len(cells), dtype=bool)
    cells, heights, cell_nodes = _compact(cells, heights, keep)
    links, cardinal_counts = link_nodes(cells, heights, cell_nodes, climb, cell_size)

    keep = erode(links, cardinal_counts, walkable_radius)
    if not np.any(keep):
        return None
    cells, heights, cell_nodes = _compact(cells, heights, keep)
    links, _ = link_nodes(cells, heights, cell_nodes, climb, cell_size)

    regions = label_regions(links)
    region_sizes = np.bincount(regions)
    keep = region_sizes[regions] >= min_region_area * min_region_area
    if not np.any(keep):
        return None
    if not np.all(keep):
        cells, heights, cell_nodes = _compact(cells, heights, keep)
        links, _ = link_nodes(cells, heights, cell_nodes, climb, cell_size)
        regions = label_regions(links)

    centres = np.array(
        [
            [origin[0] + (ix + 0.5) * cell_size, h, origin[1] + (iz + 0.5) * cell_size]
            for (ix, iz), h in zip(cells, heights)
        ],
        dtype=np.float64,
    )

    return GridNavMesh(
        origin=origin,
        cell_size=cell_size,
        cell_height=cell_height,
        climb=climb,
        positions=centres,
        cells=cells,
        links=links,
        cell_nodes=cell_nodes,
        regions=regions,
        tree=cKDTree(centres),
    )
