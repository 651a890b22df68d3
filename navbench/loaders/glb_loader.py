# navbench/loaders/glb_loader.py
"""GLB/glTF 2.0 loader.

Reads mesh positions, indices and the node hierarchy with TRS transforms.
Materials, textures, skins and animations are ignored.
"""

from __future__ import annotations

import json
import struct
from pathlib import Path
from typing import List, Optional

import numpy as np
from scipy.spatial.transform import Rotation

from navbench import log
from navbench.geombase import GeneralPose3
from navbench.mesh import MeshData
from navbench.scene import SceneNode


GLB_MAGIC = b"glTF"
CHUNK_JSON = 0x4E4F534A
CHUNK_BIN = 0x004E4942

MODE_TRIANGLES = 4


# ---------- ACCESSORS ----------

COMPONENT_DTYPES = {
    5120: np.int8,
    5121: np.uint8,
    5122: np.int16,
    5123: np.uint16,
    5125: np.uint32,
    5126: np.float32,
}

TYPE_WIDTH = {"SCALAR": 1, "VEC2": 2, "VEC3": 3, "VEC4": 4, "MAT4": 16}


def _read_accessor(gltf: dict, bin_data: bytes, accessor_index: int) -> np.ndarray:
    """Accessor contents; (count,) for SCALAR, (count, width) otherwise."""
    accessor = gltf["accessors"][accessor_index]
    view = gltf["bufferViews"][accessor["bufferView"]]

    dtype = np.dtype(COMPONENT_DTYPES[accessor["componentType"]])
    width = TYPE_WIDTH[accessor["type"]]
    count = accessor["count"]
    offset = view.get("byteOffset", 0) + accessor.get("byteOffset", 0)
    element = dtype.itemsize * width
    stride = view.get("byteStride") or element

    if stride == element:
        data = np.frombuffer(bin_data, dtype=dtype, count=count * width, offset=offset)
    else:
        # Interleaved view: copy element by element.
        data = np.empty((count, width), dtype=dtype)
        for k in range(count):
            data[k] = np.frombuffer(bin_data, dtype=dtype, count=width, offset=offset + k * stride)

    return data.reshape(count, width) if width > 1 else data.reshape(count)


# ---------- TRANSFORMS ----------

def _node_pose(node: dict) -> GeneralPose3:
    """Local pose of a glTF node from TRS properties or a column-major matrix."""
    if "matrix" in node:
        mat = np.array(node["matrix"], dtype=np.float64).reshape(4, 4).T
        translation = mat[:3, 3]
        basis = mat[:3, :3]
        scale = np.linalg.norm(basis, axis=0)
        if np.linalg.det(basis) < 0.0:
            scale[0] = -scale[0]
        return GeneralPose3(ang=Rotation.from_matrix(basis / scale).as_quat(), lin=translation, scale=scale)

    return GeneralPose3(
        ang=node.get("rotation", [0.0, 0.0, 0.0, 1.0]),
        lin=node.get("translation", [0.0, 0.0, 0.0]),
        scale=node.get("scale", [1.0, 1.0, 1.0]),
    )


# ---------- PARSING FUNCTIONS ----------

def _parse_meshes(gltf: dict, bin_data: bytes) -> List[Optional[MeshData]]:
    """One MeshData per glTF mesh, all triangle primitives merged."""
    meshes: List[Optional[MeshData]] = []
    for mesh_idx, mesh in enumerate(gltf.get("meshes", [])):
        name = mesh.get("name", f"Mesh_{mesh_idx}")
        vertices: List[np.ndarray] = []
        indices: List[np.ndarray] = []
        offset = 0

        for primitive in mesh.get("primitives", []):
            attributes = primitive.get("attributes", {})
            if "POSITION" not in attributes:
                continue
            if primitive.get("mode", MODE_TRIANGLES) != MODE_TRIANGLES:
                log.warn(f"[GLB] {name}: skipping non-triangle primitive")
                continue

            positions = _read_accessor(gltf, bin_data, attributes["POSITION"]).astype(np.float32)
            if "indices" in primitive:
                prim_indices = _read_accessor(gltf, bin_data, primitive["indices"]).astype(np.uint32).reshape(-1)
            else:
                prim_indices = np.arange(len(positions), dtype=np.uint32)

            vertices.append(positions)
            indices.append(prim_indices + np.uint32(offset))
            offset += len(positions)

        if not vertices:
            meshes.append(None)
            continue
        meshes.append(MeshData(np.concatenate(vertices), np.concatenate(indices), name=name))
    return meshes


def _build_node(gltf: dict, meshes: List[Optional[MeshData]], node_idx: int) -> SceneNode:
    node = gltf["nodes"][node_idx]
    mesh_index = node.get("mesh")
    scene_node = SceneNode(
        name=node.get("name", f"Node_{node_idx}"),
        pose=_node_pose(node),
        mesh=meshes[mesh_index] if mesh_index is not None else None,
    )
    for child_idx in node.get("children", []):
        scene_node.add_child(_build_node(gltf, meshes, child_idx))
    return scene_node


def _read_chunks(data: bytes) -> tuple[dict, bytes]:
    """Split a GLB container into its parsed JSON document and binary chunk."""
    if len(data) < 12 or data[:4] != GLB_MAGIC:
        raise ValueError("Not a GLB file")
    version, total = struct.unpack_from("<II", data, 4)
    if version != 2:
        raise ValueError(f"Unsupported glTF version: {version}")

    chunks: dict[int, bytes] = {}
    offset = 12
    end = min(total, len(data))
    while offset + 8 <= end:
        length, kind = struct.unpack_from("<II", data, offset)
        chunks.setdefault(kind, data[offset + 8:offset + 8 + length])
        offset += (8 + length + 3) & ~3

    if CHUNK_JSON not in chunks:
        raise ValueError("GLB has no JSON chunk")
    return json.loads(chunks[CHUNK_JSON].decode("utf-8")), chunks.get(CHUNK_BIN, b"")


def load_glb_scene(path: str | Path) -> SceneNode:
    """Load a GLB file as a SceneNode tree rooted at a node named after the file.

    Args:
        path: Path to .glb file

    Returns:
        Root SceneNode whose children are the default scene's root nodes.
    """
    path = Path(path)
    with open(path, "rb") as f:
        gltf, bin_data = _read_chunks(f.read())

    meshes = _parse_meshes(gltf, bin_data)

    scenes = gltf.get("scenes", [])
    default_scene = gltf.get("scene", 0)
    if scenes and default_scene < len(scenes):
        root_nodes = scenes[default_scene].get("nodes", [])
    else:
        # No scene list: every node that is nobody's child is a root.
        children = {c for node in gltf.get("nodes", []) for c in node.get("children", [])}
        root_nodes = [i for i in range(len(gltf.get("nodes", []))) if i not in children]

    root = SceneNode(name=path.stem)
    for node_idx in root_nodes:
        root.add_child(_build_node(gltf, meshes, node_idx))

    log.info(f"[GLB] Loaded {path.name}: {len(meshes)} meshes, {len(gltf.get('nodes', []))} nodes")
    return root
