"""
Navmesh generation options.

GenerationOptions is the canonical parameter set shared by both backends.
GridOptions and TriGraphOptions are the backend-native encodings produced by
navbench.adapter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields


@dataclass(frozen=True)
class GenerationOptions:
    """
    Canonical generation parameters in world units plus derived voxel units.

    Use create() to build an instance: it derives every *_voxels field as
    ceil(world / cell_height) once, so both backends see values from the
    same source.
    """

    cell_size: float
    cell_height: float
    walkable_radius_voxels: int
    walkable_radius_world: float
    walkable_climb_voxels: int
    walkable_climb_world: float
    walkable_height_voxels: int
    walkable_height_world: float
    walkable_slope_angle_degrees: float
    border_size: int
    min_region_area: float
    merge_region_area: float
    max_simplification_error: float
    max_edge_length: float
    max_vertices_per_poly: int
    detail_sample_distance: float
    detail_sample_max_error: float

    @classmethod
    def create(
        cls,
        cell_size: float = 0.15,
        cell_height: float = 0.3,
        walkable_radius_world: float = 0.2,
        walkable_climb_world: float = 0.5,
        walkable_height_world: float = 1.0,
        walkable_slope_angle_degrees: float = 45.0,
        border_size: int = 0,
        min_region_area: float = 8,
        merge_region_area: float = 20,
        max_simplification_error: float = 1.3,
        max_edge_length: float = 6.0,
        max_vertices_per_poly: int = 6,
        detail_sample_distance: float = 5.0,
        detail_sample_max_error: float = 1.3,
    ) -> "GenerationOptions":
        if cell_size <= 0 or cell_height <= 0:
            raise ValueError("cell_size and cell_height must be positive")
        return cls(
            cell_size=cell_size,
            cell_height=cell_height,
            walkable_radius_voxels=math.ceil(walkable_radius_world / cell_height),
            walkable_radius_world=walkable_radius_world,
            walkable_climb_voxels=math.ceil(walkable_climb_world / cell_height),
            walkable_climb_world=walkable_climb_world,
            walkable_height_voxels=math.ceil(walkable_height_world / cell_height),
            walkable_height_world=walkable_height_world,
            walkable_slope_angle_degrees=walkable_slope_angle_degrees,
            border_size=border_size,
            min_region_area=min_region_area,
            merge_region_area=merge_region_area,
            max_simplification_error=max_simplification_error,
            max_edge_length=max_edge_length,
            max_vertices_per_poly=max_vertices_per_poly,
            detail_sample_distance=detail_sample_distance,
            detail_sample_max_error=detail_sample_max_error,
        )

    def to_dict(self) -> dict:
        """Serialize the world-unit inputs. Voxel fields are derived on load."""
        data = asdict(self)
        for key in ("walkable_radius_voxels", "walkable_climb_voxels", "walkable_height_voxels"):
            del data[key]
        return data

    @staticmethod
    def from_dict(data: dict) -> "GenerationOptions":
        """Deserialize from dictionary, ignoring unknown and derived keys."""
        allowed = {f.name for f in fields(GenerationOptions)} - {
            "walkable_radius_voxels",
            "walkable_climb_voxels",
            "walkable_height_voxels",
        }
        kwargs = {key: value for key, value in data.items() if key in allowed}
        return GenerationOptions.create(**kwargs)


@dataclass(frozen=True)
class GridOptions:
    """Options of the grid backend. Walkable values in voxels, areas linear."""

    cs: float
    ch: float
    walkable_radius: int
    walkable_climb: int
    walkable_height: int
    walkable_slope_angle: float
    border_size: int
    min_region_area: float
    merge_region_area: float
    max_simplification_error: float
    max_edge_len: float
    max_verts_per_poly: int
    detail_sample_dist: float
    detail_sample_max_error: float


@dataclass(frozen=True)
class TriGraphOptions:
    """Options of the trigraph backend. Areas squared, detail values in world units."""

    cell_size: float
    cell_height: float
    walkable_radius_voxels: int
    walkable_radius_world: float
    walkable_climb_voxels: int
    walkable_climb_world: float
    walkable_height_voxels: int
    walkable_height_world: float
    walkable_slope_angle_degrees: float
    border_size: int
    min_region_area: float
    merge_region_area: float
    max_simplification_error: float
    max_edge_length: float
    max_vertices_per_poly: int
    detail_sample_distance: float
    detail_sample_max_error: float
