"""
Run configuration: generation options, query endpoints, benchmark counts and
the pair of backends to compare.

Stored as JSON. Unknown keys are ignored; values with the wrong shape raise
ConfigError.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Tuple

from navbench import log
from navbench.errors import ConfigError
from navbench.options import GenerationOptions

Vec3 = Tuple[float, float, float]


def _vec3(data: dict, key: str, default: Vec3) -> Vec3:
    value = data.get(key, default)
    try:
        x, y, z = (float(v) for v in value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a list of three numbers, got {value!r}") from None
    return (x, y, z)


def _count(data: dict, key: str, default: int, minimum: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"'{key}' must be >= {minimum}, got {value}")
    return value


def _section(data: dict, key: str) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be an object, got {type(value).__name__}")
    return value


@dataclass
class QueryConfig:
    """Endpoints of the compared path query. Defaults fit the demo scene."""

    start: Vec3 = (-3.0, 0.0, -3.0)
    end: Vec3 = (3.0, 0.0, 3.0)
    half_extents: Vec3 = (1.0, 1.0, 1.0)

    def to_dict(self) -> dict:
        return {
            "start": list(self.start),
            "end": list(self.end),
            "half_extents": list(self.half_extents),
        }

    @staticmethod
    def from_dict(data: dict) -> "QueryConfig":
        defaults = QueryConfig()
        return QueryConfig(
            start=_vec3(data, "start", defaults.start),
            end=_vec3(data, "end", defaults.end),
            half_extents=_vec3(data, "half_extents", defaults.half_extents),
        )


@dataclass
class BenchmarkConfig:
    """Warmup and timed iteration counts of both benchmarks."""

    generation_warmup: int = 3
    generation_runs: int = 10
    query_warmup: int = 100
    query_runs: int = 10_000

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "BenchmarkConfig":
        defaults = BenchmarkConfig()
        return BenchmarkConfig(
            generation_warmup=_count(data, "generation_warmup", defaults.generation_warmup, 0),
            generation_runs=_count(data, "generation_runs", defaults.generation_runs, 1),
            query_warmup=_count(data, "query_warmup", defaults.query_warmup, 0),
            query_runs=_count(data, "query_runs", defaults.query_runs, 1),
        )


@dataclass
class RunConfig:
    """Complete configuration of one comparison run."""

    generation: GenerationOptions = field(default_factory=GenerationOptions.create)
    query: QueryConfig = field(default_factory=QueryConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)
    backends: List[str] = field(default_factory=lambda: ["grid", "trigraph"])

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "generation": self.generation.to_dict(),
            "query": self.query.to_dict(),
            "benchmark": self.benchmark.to_dict(),
            "backends": list(self.backends),
        }

    @staticmethod
    def from_dict(data: dict) -> "RunConfig":
        """Deserialize from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be an object, got {type(data).__name__}")

        try:
            generation = GenerationOptions.from_dict(_section(data, "generation"))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid generation options: {e}") from e

        backends = data.get("backends", ["grid", "trigraph"])
        if (
            not isinstance(backends, list)
            or len(backends) != 2
            or not all(isinstance(name, str) for name in backends)
        ):
            raise ConfigError(f"'backends' must be a list of two names, got {backends!r}")

        return RunConfig(
            generation=generation,
            query=QueryConfig.from_dict(_section(data, "query")),
            benchmark=BenchmarkConfig.from_dict(_section(data, "benchmark")),
            backends=list(backends),
        )


def load_config(path) -> RunConfig:
    """Load a RunConfig from a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON: {e}") from e
    config = RunConfig.from_dict(data)
    log.debug(f"[Config] Loaded {path}")
    return config


def save_config(config: RunConfig, path) -> None:
    """Write a RunConfig to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    log.debug(f"[Config] Saved {path}")
