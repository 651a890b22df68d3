"""Grid backend service: build, query and normalize."""

from __future__ import annotations

import heapq
import math
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from navbench import log
from navbench.adapter import to_grid_options
from navbench.backends.base import PathResult, as_path_result
from navbench.backends.grid.heightfield import CARDINAL, DIAGONAL, GridNavMesh, build_grid_navmesh
from navbench.extract import TriangleBuffer
from navbench.options import GenerationOptions, GridOptions


class Vector3(NamedTuple):
    x: float
    y: float
    z: float


def snap_to_node(
    navmesh: GridNavMesh,
    point: np.ndarray,
    half_extents: np.ndarray,
) -> Tuple[int, Optional[np.ndarray]]:
    """
    Closest floor node whose cell lies within the half-extents box of point.

    Returns:
        (node index, closest point on the node's cell) or (-1, None).
    """
    radius = float(np.linalg.norm(half_extents)) + navmesh.cell_size
    candidates = navmesh.tree.query_ball_point(point, r=radius)

    best = -1
    best_point = None
    best_dist = math.inf
    for node in sorted(candidates):
        x0, z0, x1, z1 = navmesh.cell_bounds(node)
        closest = np.array([
            min(max(point[0], x0), x1),
            navmesh.positions[node, 1],
            min(max(point[2], z0), z1),
        ])
        delta = np.abs(closest - point)
        if np.any(delta > half_extents):
            continue
        dist = float(np.dot(delta, delta))
        if dist < best_dist:
            best = node
            best_dist = dist
            best_point = closest
    return best, best_point


def astar_nodes(navmesh: GridNavMesh, start: int, goal: int) -> Optional[List[int]]:
    """A* over the node links. Returns node indices from start to goal, or None."""
    positions = navmesh.positions
    goal_pos = positions[goal]

    def heuristic(node: int) -> float:
        return float(np.linalg.norm(positions[node] - goal_pos))

    counter = 0
    open_set: List[Tuple[float, int, int]] = [(heuristic(start), counter, start)]
    came_from: dict[int, int] = {}
    g_score: dict[int, float] = {start: 0.0}
    closed: set[int] = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)
        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            return path[::-1]
        if current in closed:
            continue
        closed.add(current)

        for neighbor, cost in navmesh.links[current]:
            tentative_g = g_score[current] + cost
            if neighbor not in g_score or tentative_g < g_score[neighbor]:
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                counter += 1
                heapq.heappush(open_set, (tentative_g + heuristic(neighbor), counter, neighbor))

    return None


def has_line_of_sight(navmesh: GridNavMesh, a: np.ndarray, b: np.ndarray) -> bool:
    """
    Walk the segment a-b in half-cell steps and check that every sample
    lands on a floor node reachable (within climb) from the previous one.
    """
    dx = b[0] - a[0]
    dz = b[2] - a[2]
    steps = int(math.ceil(math.hypot(dx, dz) / (navmesh.cell_size * 0.5)))
    height = a[1]
    for step in range(steps + 1):
        t = step / steps if steps else 1.0
        cell = navmesh.cell_of(a[0] + dx * t, a[2] + dz * t)
        best = None
        best_dh = math.inf
        for node in navmesh.cell_nodes.get(cell, ()):
            dh = abs(navmesh.positions[node, 1] - height)
            if dh <= navmesh.climb + 1e-9 and dh < best_dh:
                best = node
                best_dh = dh
        if best is None:
            return False
        height = navmesh.positions[best, 1]
    return True


def simplify_path(navmesh: GridNavMesh, points: List[np.ndarray]) -> List[np.ndarray]:
    """Drop intermediate points that the previous kept point can see past."""
    if len(points) <= 2:
        return points
    result = [points[0]]
    anchor = 0
    candidate = 1
    while candidate < len(points) - 1:
        if has_line_of_sight(navmesh, points[anchor], points[candidate + 1]):
            candidate += 1
            continue
        result.append(points[candidate])
        anchor = candidate
        candidate += 1
    result.append(points[-1])
    return result


class GridBackend:
    """Heightfield navmesh on a cell lattice; A* over cells with line-of-sight smoothing."""

    name = "grid"
    label = "Grid"
    color = "#ff0000"

    def __init__(self):
        self._directions: Optional[np.ndarray] = None

    @property
    def initialized(self) -> bool:
        return self._directions is not None

    def initialize(self) -> None:
        """Prepare the neighbour direction table. Required before build()."""
        self._directions = np.array(CARDINAL + DIAGONAL, dtype=np.int64)
        log.debug(f"[Grid] Initialized {len(self._directions)} neighbour directions")

    def adapt_options(self, options: GenerationOptions) -> GridOptions:
        return to_grid_options(options)

    def build(self, buffer: TriangleBuffer, options: GridOptions) -> Optional[GridNavMesh]:
        if not self.initialized:
            raise RuntimeError("GridBackend.initialize() must be called before build()")
        return build_grid_navmesh(
            buffer.positions,
            buffer.triangles,
            cell_size=options.cs,
            cell_height=options.ch,
            walkable_slope_degrees=options.walkable_slope_angle,
            walkable_height=options.walkable_height,
            walkable_climb=options.walkable_climb,
            walkable_radius=options.walkable_radius,
            min_region_area=options.min_region_area,
        )

    def find_path(self, navmesh: GridNavMesh, start, end, half_extents) -> List[Vector3]:
        start = np.asarray(start, dtype=np.float64)
        end = np.asarray(end, dtype=np.float64)
        half_extents = np.asarray(half_extents, dtype=np.float64)

        start_node, start_point = snap_to_node(navmesh, start, half_extents)
        end_node, end_point = snap_to_node(navmesh, end, half_extents)
        if start_node < 0 or end_node < 0:
            return []

        nodes = astar_nodes(navmesh, start_node, end_node)
        if nodes is None:
            return []

        points = [start_point] + [navmesh.positions[n] for n in nodes[1:-1]] + [end_point]
        return [Vector3(float(p[0]), float(p[1]), float(p[2])) for p in simplify_path(navmesh, points)]

    def normalize_path(self, native: List[Vector3]) -> PathResult:
        return as_path_result(native)

    def debug_triangles(self, navmesh: GridNavMesh) -> tuple[np.ndarray, np.ndarray]:
        """Two triangles per floor node, at the node height."""
        vertices = []
        triangles = []
        for node in range(navmesh.node_count()):
            x0, z0, x1, z1 = navmesh.cell_bounds(node)
            h = navmesh.positions[node, 1]
            base = len(vertices)
            vertices.extend([[x0, h, z0], [x1, h, z0], [x1, h, z1], [x0, h, z1]])
            triangles.extend([[base, base + 3, base + 1], [base + 1, base + 3, base + 2]])
        return np.asarray(vertices, dtype=np.float64).reshape(-1, 3), np.asarray(triangles, dtype=np.int32).reshape(-1, 3)
