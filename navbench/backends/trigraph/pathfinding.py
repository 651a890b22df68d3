"""
Corridor search and string pulling on a triangle graph.

Queries first try to walk the straight segment between the endpoints
across adjacent triangles. Otherwise A* between triangle centroids yields
a corridor of adjacent triangles, and the funnel algorithm pulls a taut
path through the shared edges (portals) of that corridor. Side tests are
done on the horizontal XZ plane; heights come from the portal vertices.
"""

from __future__ import annotations

import heapq
import numpy as np

EDGES = ((0, 1), (1, 2), (2, 0))


def build_adjacency(triangles: np.ndarray) -> np.ndarray:
    """
    Triangle adjacency through shared edges.

    Returns:
        (M, 3) int32 array; entry [t, e] is the triangle across edge e of
        triangle t (edge e runs from corner e to corner (e + 1) % 3), or -1.
        An edge owned by more than two triangles links only the first two.
    """
    triangles = np.asarray(triangles).reshape(-1, 3)
    neighbors = np.full((len(triangles), 3), -1, dtype=np.int32)

    owners: dict[tuple[int, int], list[tuple[int, int]]] = {}
    for tri_idx, corners in enumerate(triangles.tolist()):
        for edge_idx, (i, j) in enumerate(EDGES):
            a, b = corners[i], corners[j]
            key = (a, b) if a < b else (b, a)
            owners.setdefault(key, []).append((tri_idx, edge_idx))

    for shared in owners.values():
        if len(shared) < 2:
            continue
        (t0, e0), (t1, e1) = shared[0], shared[1]
        neighbors[t0, e0] = t1
        neighbors[t1, e1] = t0
    return neighbors


def compute_centroids(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    return vertices[triangles].mean(axis=1)


def triangle_areas_xz(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Areas of the triangles projected onto the horizontal XZ plane."""
    corners = vertices[triangles]
    e1 = corners[:, 1] - corners[:, 0]
    e2 = corners[:, 2] - corners[:, 0]
    return 0.5 * np.abs(e1[:, 0] * e2[:, 2] - e1[:, 2] * e2[:, 0])


def closest_point_on_triangle(
    p: np.ndarray,
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
) -> np.ndarray:
    """Closest point to p on triangle abc in 3D (Ericson, Real-Time Collision Detection 5.1.5)."""
    ab = b - a
    ac = c - a
    ap = p - a
    d1 = np.dot(ab, ap)
    d2 = np.dot(ac, ap)
    if d1 <= 0.0 and d2 <= 0.0:
        return a.copy()

    bp = p - b
    d3 = np.dot(ab, bp)
    d4 = np.dot(ac, bp)
    if d3 >= 0.0 and d4 <= d3:
        return b.copy()

    vc = d1 * d4 - d3 * d2
    if vc <= 0.0 and d1 >= 0.0 and d3 <= 0.0:
        return a + ab * (d1 / (d1 - d3))

    cp = p - c
    d5 = np.dot(ab, cp)
    d6 = np.dot(ac, cp)
    if d6 >= 0.0 and d5 <= d6:
        return c.copy()

    vb = d5 * d2 - d1 * d6
    if vb <= 0.0 and d2 >= 0.0 and d6 <= 0.0:
        return a + ac * (d2 / (d2 - d6))

    va = d3 * d6 - d5 * d4
    if va <= 0.0 and (d4 - d3) >= 0.0 and (d5 - d6) >= 0.0:
        return b + (c - b) * ((d4 - d3) / ((d4 - d3) + (d5 - d6)))

    denom = 1.0 / (va + vb + vc)
    return a + ab * (vb * denom) + ac * (vc * denom)


def astar_triangles(
    start_tri: int,
    end_tri: int,
    neighbors: np.ndarray,
    centroids: np.ndarray,
) -> list[int] | None:
    """
    Corridor from start_tri to end_tri, both included, or None when the
    triangles are not connected. Edge cost and heuristic are centroid
    distances.
    """
    goal = centroids[end_tri]
    open_heap: list[tuple[float, int, int]] = [(0.0, 0, start_tri)]
    came_from: dict[int, int] = {}
    g_score: dict[int, float] = {start_tri: 0.0}
    closed: set[int] = set()
    pushed = 0

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current == end_tri:
            corridor = [current]
            while current in came_from:
                current = came_from[current]
                corridor.append(current)
            corridor.reverse()
            return corridor
        if current in closed:
            continue
        closed.add(current)

        here = centroids[current]
        for neighbor in neighbors[current].tolist():
            if neighbor < 0 or neighbor in closed:
                continue
            there = centroids[neighbor]
            g = g_score[current] + float(np.linalg.norm(there - here))
            if g < g_score.get(neighbor, float("inf")):
                g_score[neighbor] = g
                came_from[neighbor] = current
                pushed += 1
                heapq.heappush(open_heap, (g + float(np.linalg.norm(goal - there)), pushed, neighbor))

    return None



def _area2_xz(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    """Twice the signed XZ area of triangle abc."""
    return (b[0] - a[0]) * (c[2] - a[2]) - (b[2] - a[2]) * (c[0] - a[0])


def _cross_xz(u: np.ndarray, v: np.ndarray) -> float:
    return float(u[0] * v[1] - u[1] * v[0])


def point_on_triangle(
    point: np.ndarray,
    tri_idx: int,
    triangles: np.ndarray,
    vertices: np.ndarray,
    eps: float = 1e-6,
) -> bool:
    """True when point lies on triangle tri_idx (edges and corners included)."""
    a, b, c = vertices[triangles[tri_idx]]
    closest = closest_point_on_triangle(point, a, b, c)
    return float(np.linalg.norm(closest - point)) <= eps


def walk_straight(
    start_tri: int,
    start: np.ndarray,
    end: np.ndarray,
    triangles: np.ndarray,
    vertices: np.ndarray,
    neighbors: np.ndarray,
) -> bool:
    """
    Walk the XZ segment start-end across adjacent triangles, beginning at
    start_tri. True when a triangle holding end is reached without
    leaving the mesh through a boundary edge.
    """
    origin = np.array([start[0], start[2]], dtype=np.float64)
    direction = np.array([end[0] - start[0], end[2] - start[2]], dtype=np.float64)

    current = int(start_tri)
    visited: set[int] = set()
    while True:
        if point_on_triangle(end, current, triangles, vertices):
            return True
        visited.add(current)

        corners = vertices[triangles[current]][:, [0, 2]]
        best_t = -np.inf
        best_edge = -1
        for edge_idx, (i, j) in enumerate(EDGES):
            if int(neighbors[current, edge_idx]) in visited:
                continue
            p = corners[i]
            edge = corners[j] - p
            denom = _cross_xz(direction, edge)
            if abs(denom) < 1e-12:
                continue
            t = _cross_xz(p - origin, edge) / denom
            u = _cross_xz(p - origin, direction) / denom
            if u < -1e-9 or u > 1.0 + 1e-9:
                continue
            if t > best_t:
                best_t, best_edge = t, edge_idx

        # Either no exit edge, or end lies inside in XZ but on another level
        if best_edge < 0 or best_t > 1.0 + 1e-9:
            return False
        following = int(neighbors[current, best_edge])
        if following < 0:
            return False
        current = following


def shortcut_corridor(
    corridor: list[int],
    triangles: np.ndarray,
    vertices: np.ndarray,
    start: np.ndarray,
    end: np.ndarray,
) -> list[int]:
    """
    Drop the corridor head up to the last triangle that still holds start,
    and the tail after the first triangle that holds end.

    An endpoint on a shared vertex is owned by a whole fan of triangles;
    without the cut every portal of the fan has the apex as an endpoint
    and the funnel opens wider than half a turn.
    """
    first = 0
    for k, tri_idx in enumerate(corridor):
        if point_on_triangle(start, tri_idx, triangles, vertices):
            first = k
    rest = corridor[first:]
    for k, tri_idx in enumerate(rest):
        if point_on_triangle(end, tri_idx, triangles, vertices):
            return rest[:k + 1]
    return rest


def get_portals_from_path(
    path: list[int],
    triangles: np.ndarray,
    vertices: np.ndarray,
    neighbors: np.ndarray,
) -> list[tuple[np.ndarray, np.ndarray]]:
    """
    Shared edge of every consecutive triangle pair of a corridor, as
    (left, right).

    Sides follow the winding of the triangle being left: for a triangle
    with negative XZ area (normal pointing up) its edge i -> j is crossed
    with j on the left. Walking along +X the left point has the smaller z,
    which is the orientation funnel_algorithm expects.
    """
    portals: list[tuple[np.ndarray, np.ndarray]] = []
    for tri_a, tri_b in zip(path, path[1:]):
        edge_idx = int(np.flatnonzero(neighbors[tri_a] == tri_b)[0])
        i, j = EDGES[edge_idx]
        corners = vertices[triangles[tri_a]]
        p = corners[i].copy()
        q = corners[j].copy()
        if _area2_xz(corners[0], corners[1], corners[2]) < 0.0:
            portals.append((q, p))
        else:
            portals.append((p, q))
    return portals


def funnel_algorithm(
    start: np.ndarray,
    end: np.ndarray,
    portals: list[tuple[np.ndarray, np.ndarray]],
) -> list[np.ndarray]:
    """
    Simple stupid funnel algorithm.

    The funnel is an apex plus a left and a right boundary point. Each
    portal tightens one side; when a side would cross the other, the
    crossed boundary point becomes a path corner and the funnel restarts
    from it. A corner equal to the previous one is not repeated.

    Returns:
        Corner points from start to end, both included.
    """
    start = np.array(start, dtype=np.float64)
    end = np.array(end, dtype=np.float64)
    if not portals:
        return [start, end]

    # The goal closes the corridor as a zero-width portal.
    gates = list(portals) + [(end, end)]
    corners = [start]

    def add_corner(point):
        if not np.allclose(corners[-1], point):
            corners.append(np.array(point, dtype=np.float64))
        return corners[-1]

    apex = start
    left, right = gates[0]
    left_idx = right_idx = 0

    i = 1
    while i < len(gates):
        gate_left, gate_right = gates[i]

        if _area2_xz(apex, right, gate_right) <= 0.0:
            if np.allclose(apex, right) or _area2_xz(apex, left, gate_right) > 0.0:
                right, right_idx = gate_right, i
            else:
                apex = add_corner(left)
                left = right = apex
                right_idx = left_idx
                i = left_idx + 1
                continue

        if _area2_xz(apex, left, gate_left) >= 0.0:
            if np.allclose(apex, left) or _area2_xz(apex, right, gate_left) < 0.0:
                left, left_idx = gate_left, i
            else:
                apex = add_corner(right)
                left = right = apex
                left_idx = right_idx
                i = right_idx + 1
                continue

        i += 1

    add_corner(end)
    return corners
