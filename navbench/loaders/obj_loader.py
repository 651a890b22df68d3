# navbench/loaders/obj_loader.py
"""Pure Python OBJ loader. Positions and faces only."""

import numpy as np
from pathlib import Path

from navbench import log
from navbench.mesh import MeshData
from navbench.scene import SceneNode


class _Group:
    def __init__(self, name):
        self.name = name
        self.remap = {}      # global position index -> local vertex index
        self.vertices = []
        self.indices = []

    def add_vertex(self, v_idx, positions):
        local = self.remap.get(v_idx)
        if local is None:
            local = len(self.vertices)
            self.remap[v_idx] = local
            self.vertices.append(positions[v_idx])
        self.indices.append(local)


def _resolve(index_str, count):
    """OBJ indices are 1-based; negative values count from the end."""
    idx = int(index_str)
    return idx - 1 if idx > 0 else count + idx


def load_obj_scene(path) -> SceneNode:
    """Load an OBJ file. Every ``o``/``g`` group becomes a child node with its own mesh."""
    path = Path(path)

    positions = []  # v
    groups = []
    current = None

    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            parts = line.split()
            cmd = parts[0]

            if cmd == "v" and len(parts) >= 4:
                positions.append((float(parts[1]), float(parts[2]), float(parts[3])))

            elif cmd in ("o", "g"):
                name = " ".join(parts[1:]) or f"group_{len(groups)}"
                current = _Group(name)
                groups.append(current)

            elif cmd == "f" and len(parts) >= 4:
                if current is None:
                    current = _Group(path.stem)
                    groups.append(current)

                # Format: v, v/vt, v/vt/vn, v//vn
                face = [_resolve(vert.split("/")[0], len(positions)) for vert in parts[1:]]

                # Fan triangulation for convex polygons
                for i in range(1, len(face) - 1):
                    current.add_vertex(face[0], positions)
                    current.add_vertex(face[i], positions)
                    current.add_vertex(face[i + 1], positions)

    root = SceneNode(name=path.stem)
    for group in groups:
        if not group.indices:
            continue
        mesh = MeshData(
            vertices=np.array(group.vertices, dtype=np.float32),
            indices=np.array(group.indices, dtype=np.uint32),
            name=group.name,
        )
        root.add_child(SceneNode(name=group.name, mesh=mesh))

    log.info(f"[OBJ] Loaded {path.name}: {len(root.children)} meshes, {len(positions)} positions")
    return root
