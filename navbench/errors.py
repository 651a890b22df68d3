"""Exceptions raised by the harness."""


class NavBenchError(Exception):
    """Base class for harness errors."""


class GenerationError(NavBenchError):
    """A backend build produced no usable navmesh. Fatal for the run."""

    def __init__(self, backend: str, message: str = ""):
        self.backend = backend
        super().__init__(message or f"{backend} navmesh generation failed")


class ConfigError(NavBenchError):
    """Invalid run configuration."""
