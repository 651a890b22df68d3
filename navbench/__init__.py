"""navbench - side-by-side benchmark and path cross-check of two navmesh backends."""

__version__ = "0.1.0"
