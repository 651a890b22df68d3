"""Trigraph backend service: build, query and normalize."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from navbench import log
from navbench.adapter import to_trigraph_options
from navbench.backends.base import PathResult, as_path_result
from navbench.backends.trigraph.navmesh import TriNavMesh, build_trinavmesh
from navbench.backends.trigraph.pathfinding import (
    astar_triangles,
    closest_point_on_triangle,
    funnel_algorithm,
    get_portals_from_path,
    shortcut_corridor,
    walk_straight,
)
from navbench.extract import TriangleBuffer
from navbench.options import GenerationOptions, TriGraphOptions


@dataclass
class PathPoint:
    """Corner of a trigraph path."""

    position: np.ndarray
    triangle: int
    """Triangle the corner lies on."""


def find_nearest_triangle(
    navmesh: TriNavMesh,
    point: np.ndarray,
    half_extents: np.ndarray,
) -> tuple[int, Optional[np.ndarray]]:
    """
    Find the triangle closest to point whose closest point lies within the
    half-extents box around it.

    Returns:
        (triangle index, closest point) or (-1, None).
    """
    radius = float(np.linalg.norm(half_extents)) + navmesh.max_radius
    candidates = navmesh.tree.query_ball_point(point, r=radius)

    best_tri = -1
    best_point = None
    best_dist = float("inf")
    for tri_idx in sorted(candidates):
        a, b, c = navmesh.vertices[navmesh.triangles[tri_idx]]
        closest = closest_point_on_triangle(point, a, b, c)
        delta = np.abs(closest - point)
        if np.any(delta > half_extents):
            continue
        dist = float(np.dot(delta, delta))
        if dist < best_dist:
            best_dist = dist
            best_tri = tri_idx
            best_point = closest
    return best_tri, best_point


class TriGraphBackend:
    """Navmesh made of the walkable scene triangles; A* plus funnel queries."""

    name = "trigraph"
    label = "TriGraph"
    color = "#00ff00"

    def initialize(self) -> None:
        log.debug("[TriGraph] Nothing to initialize")

    def adapt_options(self, options: GenerationOptions) -> TriGraphOptions:
        return to_trigraph_options(options)

    def build(self, buffer: TriangleBuffer, options: TriGraphOptions) -> Optional[TriNavMesh]:
        return build_trinavmesh(
            buffer.positions,
            buffer.triangles,
            cell_size=options.cell_size,
            cell_height=options.cell_height,
            walkable_slope_degrees=options.walkable_slope_angle_degrees,
            min_region_area=options.min_region_area,
        )

    def find_path(
        self,
        navmesh: TriNavMesh,
        start,
        end,
        half_extents,
    ) -> List[PathPoint]:
        start = np.asarray(start, dtype=np.float64)
        end = np.asarray(end, dtype=np.float64)
        half_extents = np.asarray(half_extents, dtype=np.float64)

        start_tri, start_point = find_nearest_triangle(navmesh, start, half_extents)
        end_tri, end_point = find_nearest_triangle(navmesh, end, half_extents)
        if start_tri < 0 or end_tri < 0:
            return []

        if start_tri == end_tri or walk_straight(
            start_tri, start_point, end_point,
            navmesh.triangles, navmesh.vertices, navmesh.neighbors,
        ):
            return [PathPoint(start_point, start_tri), PathPoint(end_point, end_tri)]

        corridor = astar_triangles(start_tri, end_tri, navmesh.neighbors, navmesh.centroids)
        if corridor is None:
            return []
        corridor = shortcut_corridor(corridor, navmesh.triangles, navmesh.vertices, start_point, end_point)

        portals = get_portals_from_path(
            corridor,
            navmesh.triangles,
            navmesh.vertices,
            navmesh.neighbors,
        )
        corners = funnel_algorithm(start_point, end_point, portals)

        # Corners other than the endpoints are portal vertices; tag each with
        # the first corridor triangle that owns it.
        points = [PathPoint(corners[0], start_tri)]
        for corner in corners[1:-1]:
            points.append(PathPoint(corner, _owner_triangle(navmesh, corridor, corner)))
        points.append(PathPoint(corners[-1], end_tri))
        return points

    def normalize_path(self, native: List[PathPoint]) -> PathResult:
        return as_path_result([p.position for p in native])

    def debug_triangles(self, navmesh: TriNavMesh) -> tuple[np.ndarray, np.ndarray]:
        return navmesh.vertices, navmesh.triangles


def _owner_triangle(navmesh: TriNavMesh, corridor: List[int], corner: np.ndarray) -> int:
    for tri_idx in corridor:
        if np.any(np.all(np.isclose(navmesh.vertices[navmesh.triangles[tri_idx]], corner), axis=1)):
            return tri_idx
    return corridor[0]
