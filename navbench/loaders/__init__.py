"""Scene loaders: GLB, OBJ and the built-in demo scene."""

from pathlib import Path

from navbench.loaders.demo_scene import make_demo_scene
from navbench.loaders.glb_loader import load_glb_scene
from navbench.loaders.obj_loader import load_obj_scene
from navbench.scene import SceneNode

LOADERS = {
    ".glb": load_glb_scene,
    ".obj": load_obj_scene,
}


def load_scene(path) -> SceneNode:
    """Load a scene file, dispatching on its extension."""
    path = Path(path)
    loader = LOADERS.get(path.suffix.lower())
    if loader is None:
        raise ValueError(f"Unsupported scene format: {path.suffix} (expected one of {', '.join(LOADERS)})")
    return loader(path)


__all__ = [
    "load_scene",
    "load_glb_scene",
    "load_obj_scene",
    "make_demo_scene",
]
