"""
Scene graph used as input of the geometry extractor.

Each node has a local pose relative to its parent and may carry mesh
geometry. World transforms are composed from the root down.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

import numpy as np

from navbench.geombase import GeneralPose3
from navbench.mesh import MeshData


class SceneNode:
    """Node of a scene hierarchy."""

    def __init__(
        self,
        name: str = "",
        pose: Optional[GeneralPose3] = None,
        mesh: Optional[MeshData] = None,
        children: Optional[List["SceneNode"]] = None,
    ):
        self.name = name
        self.pose = pose if pose is not None else GeneralPose3.identity()
        self.mesh = mesh
        self.children: List[SceneNode] = []
        self.parent: Optional[SceneNode] = None
        for child in children or []:
            self.add_child(child)

    def add_child(self, child: "SceneNode") -> "SceneNode":
        """Append a child node and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def world_matrix(self) -> np.ndarray:
        """4x4 transform of this node composed with all its ancestors."""
        matrix = self.pose.as_matrix()
        node = self.parent
        while node is not None:
            matrix = node.pose.as_matrix() @ matrix
            node = node.parent
        return matrix

    def traverse(self) -> Iterator[Tuple["SceneNode", np.ndarray]]:
        """
        Pre-order traversal yielding (node, world_matrix).

        Parents come before their children, siblings in stored order. World
        transforms are accumulated as 4x4 matrices, starting from this
        node's own world matrix, so a non-uniform parent scale above a
        rotated child shears correctly.
        """
        stack = [(self, self.world_matrix())]
        while stack:
            node, matrix = stack.pop()
            yield node, matrix
            for child in reversed(node.children):
                stack.append((child, matrix @ child.pose.as_matrix()))

    def find(self, name: str) -> Optional["SceneNode"]:
        """Find the first node with the given name in pre-order."""
        for node, _ in self.traverse():
            if node.name == name:
                return node
        return None

    def mesh_count(self) -> int:
        return sum(1 for node, _ in self.traverse() if node.mesh is not None)

    def __repr__(self):
        return f"SceneNode(name={self.name!r}, children={len(self.children)}, mesh={self.mesh is not None})"
