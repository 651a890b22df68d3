"""Mesh module - MeshData and primitive shapes."""

from navbench.mesh.mesh import MeshData
from navbench.mesh.primitives import BoxMesh, PlaneMesh

__all__ = ["MeshData", "BoxMesh", "PlaneMesh"]
