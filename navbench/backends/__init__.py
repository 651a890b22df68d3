"""
Navmesh backends compared by the harness.

Backends are looked up by name. Each one is a service object following
navbench.backends.base.NavMeshBackend.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from navbench.backends.base import NavMeshBackend, PathResult, as_path_result

_FACTORIES: Dict[str, Callable[[], NavMeshBackend]] = {}


def register_backend(name: str, factory: Callable[[], NavMeshBackend]) -> None:
    _FACTORIES[name] = factory


def available_backends() -> List[str]:
    return sorted(_FACTORIES)


def get_backend(name: str) -> NavMeshBackend:
    """Create a fresh backend instance by name."""
    try:
        factory = _FACTORIES[name]
    except KeyError:
        raise KeyError(
            f"Unknown backend '{name}'. Available: {', '.join(available_backends())}"
        ) from None
    return factory()


def _register_builtin() -> None:
    from navbench.backends.grid import GridBackend
    from navbench.backends.trigraph import TriGraphBackend

    register_backend(GridBackend.name, GridBackend)
    register_backend(TriGraphBackend.name, TriGraphBackend)


_register_builtin()

__all__ = [
    "NavMeshBackend",
    "PathResult",
    "as_path_result",
    "register_backend",
    "available_backends",
    "get_backend",
]
