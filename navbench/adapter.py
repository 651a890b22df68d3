"""
Translation of canonical GenerationOptions into backend-native options.

The grid backend squares region areas and scales the detail sampling
values by the cell dimensions itself, so it receives them unchanged. The
trigraph backend takes them already converted. Each conversion is applied
here exactly once, to exactly one backend.

The converted values mirror the grid backend's internal arithmetic. They
make the inputs comparable, not geometrically identical: the backends
discretize the scene differently and their meshes are expected to differ.
"""

from __future__ import annotations

from typing import Callable, Dict

from navbench.options import GenerationOptions, GridOptions, TriGraphOptions


def to_grid_options(options: GenerationOptions) -> GridOptions:
    return GridOptions(
        cs=options.cell_size,
        ch=options.cell_height,
        walkable_radius=options.walkable_radius_voxels,
        walkable_climb=options.walkable_climb_voxels,
        walkable_height=options.walkable_height_voxels,
        walkable_slope_angle=options.walkable_slope_angle_degrees,
        border_size=options.border_size,
        min_region_area=options.min_region_area,
        merge_region_area=options.merge_region_area,
        max_simplification_error=options.max_simplification_error,
        max_edge_len=options.max_edge_length,
        max_verts_per_poly=options.max_vertices_per_poly,
        detail_sample_dist=options.detail_sample_distance,
        detail_sample_max_error=options.detail_sample_max_error,
    )


def to_trigraph_options(options: GenerationOptions) -> TriGraphOptions:
    return TriGraphOptions(
        cell_size=options.cell_size,
        cell_height=options.cell_height,
        walkable_radius_voxels=options.walkable_radius_voxels,
        walkable_radius_world=options.walkable_radius_world,
        walkable_climb_voxels=options.walkable_climb_voxels,
        walkable_climb_world=options.walkable_climb_world,
        walkable_height_voxels=options.walkable_height_voxels,
        walkable_height_world=options.walkable_height_world,
        walkable_slope_angle_degrees=options.walkable_slope_angle_degrees,
        border_size=options.border_size,
        # grid squares these internally
        min_region_area=options.min_region_area * options.min_region_area,
        merge_region_area=options.merge_region_area * options.merge_region_area,
        max_simplification_error=options.max_simplification_error,
        max_edge_length=options.max_edge_length,
        max_vertices_per_poly=options.max_vertices_per_poly,
        # grid scales these by cell dimensions internally
        detail_sample_distance=options.cell_size * options.detail_sample_distance,
        detail_sample_max_error=options.cell_height * options.detail_sample_max_error,
    )


ADAPTERS: Dict[str, Callable[[GenerationOptions], object]] = {
    "grid": to_grid_options,
    "trigraph": to_trigraph_options,
}


def adapt_options(backend_name: str, options: GenerationOptions):
    """Convert canonical options for the named backend."""
    try:
        adapter = ADAPTERS[backend_name]
    except KeyError:
        raise KeyError(f"No option adapter for backend '{backend_name}'") from None
    return adapter(options)
