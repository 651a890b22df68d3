"""
Dual-backend comparison harness.

Both backends receive the same triangle buffer and the same canonical
options, each translated into the backend's own units. Stages run strictly
one after another; any exception stops the run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

from navbench import log
from navbench.backends.base import NavMeshBackend, PathResult
from navbench.benchmark import BenchmarkResult, ResultCell, benchmark
from navbench.errors import GenerationError
from navbench.extract import TriangleBuffer, gather_triangles
from navbench.options import GenerationOptions
from navbench.scene import SceneNode


def slot_labels(backend_a: NavMeshBackend, backend_b: NavMeshBackend) -> tuple[str, str]:
    """Display labels for slots A and B; equal labels get the slot appended."""
    if backend_a.label == backend_b.label:
        return f"{backend_a.label} (A)", f"{backend_b.label} (B)"
    return backend_a.label, backend_b.label


@dataclass
class GenerationComparison:
    handle_a: Any
    handle_b: Any
    result_a: BenchmarkResult
    result_b: BenchmarkResult


@dataclass
class PathComparison:
    path_a: PathResult
    path_b: PathResult


@dataclass
class QueryComparison:
    result_a: BenchmarkResult
    result_b: BenchmarkResult


@dataclass
class ComparisonReport:
    """Everything one run produced, for the report and the figure."""

    backend_a: NavMeshBackend
    backend_b: NavMeshBackend
    buffer: TriangleBuffer
    init_ms: dict[str, float]
    """Initialization time per slot, keyed "A" and "B"."""
    generation: GenerationComparison
    paths: PathComparison
    queries: QueryComparison
    start: np.ndarray = field(default_factory=lambda: np.zeros(3))
    end: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def labels(self) -> tuple[str, str]:
        return slot_labels(self.backend_a, self.backend_b)


def _benchmark_build(
    backend: NavMeshBackend,
    label: str,
    buffer: TriangleBuffer,
    canonical: GenerationOptions,
    warmup_runs: int,
    runs: int,
) -> tuple[Any, BenchmarkResult]:
    options = backend.adapt_options(canonical)
    cell: ResultCell = ResultCell()

    def build_once():
        cell.put(backend.build(buffer, options))

    result = benchmark(f"{label} Generation", build_once, warmup_runs, runs)
    if cell.value is None:
        raise GenerationError(label)
    return cell.value, result


def compare_generation(
    buffer: TriangleBuffer,
    canonical: GenerationOptions,
    backend_a: NavMeshBackend,
    backend_b: NavMeshBackend,
    warmup_runs: int = 3,
    runs: int = 10,
) -> GenerationComparison:
    """
    Benchmark navmesh generation on both backends.

    The handle kept for each backend is the one built by its final timed
    iteration.

    Raises:
        GenerationError: a backend returned no navmesh.
    """
    label_a, label_b = slot_labels(backend_a, backend_b)
    log.info(f"[Harness] Benchmarking generation ({warmup_runs} warmup, {runs} runs)")
    handle_a, result_a = _benchmark_build(backend_a, label_a, buffer, canonical, warmup_runs, runs)
    handle_b, result_b = _benchmark_build(backend_b, label_b, buffer, canonical, warmup_runs, runs)
    return GenerationComparison(handle_a, handle_b, result_a, result_b)


def compare_paths(
    backend_a: NavMeshBackend,
    handle_a: Any,
    backend_b: NavMeshBackend,
    handle_b: Any,
    start: Sequence[float],
    end: Sequence[float],
    half_extents: Sequence[float],
) -> PathComparison:
    """Query each backend once with identical inputs and normalize the paths."""
    label_a, label_b = slot_labels(backend_a, backend_b)
    path_a = backend_a.normalize_path(backend_a.find_path(handle_a, start, end, half_extents))
    path_b = backend_b.normalize_path(backend_b.find_path(handle_b, start, end, half_extents))
    log.info(f"[Harness] {label_a} path: {len(path_a)} points")
    log.info(f"[Harness] {label_b} path: {len(path_b)} points")
    return PathComparison(path_a, path_b)


def benchmark_queries(
    backend_a: NavMeshBackend,
    handle_a: Any,
    backend_b: NavMeshBackend,
    handle_b: Any,
    start: Sequence[float],
    end: Sequence[float],
    half_extents: Sequence[float],
    warmup_runs: int = 100,
    runs: int = 10_000,
) -> QueryComparison:
    """Benchmark the point-to-point query on both backends."""
    label_a, label_b = slot_labels(backend_a, backend_b)
    log.info(f"[Harness] Benchmarking find path ({warmup_runs} warmup, {runs} runs)")
    result_a = benchmark(
        f"{label_a} Find Path",
        lambda: backend_a.find_path(handle_a, start, end, half_extents),
        warmup_runs,
        runs,
    )
    result_b = benchmark(
        f"{label_b} Find Path",
        lambda: backend_b.find_path(handle_b, start, end, half_extents),
        warmup_runs,
        runs,
    )
    return QueryComparison(result_a, result_b)


def initialize_backend(backend: NavMeshBackend, label: Optional[str] = None) -> float:
    """Run the backend's one-time setup. Returns its duration in ms."""
    t0 = time.perf_counter()
    backend.initialize()
    elapsed = (time.perf_counter() - t0) * 1000.0
    log.info(f"[Harness] {label or backend.label} init: {elapsed:.3f} ms")
    return elapsed


def run_comparison(
    root: SceneNode,
    backend_a: NavMeshBackend,
    backend_b: NavMeshBackend,
    canonical: Optional[GenerationOptions] = None,
    start: Sequence[float] = (-3.94, 0.26, 4.0),
    end: Sequence[float] = (2.52, 2.39, -2.2),
    half_extents: Sequence[float] = (1.0, 1.0, 1.0),
    generation_warmup: int = 3,
    generation_runs: int = 10,
    query_warmup: int = 100,
    query_runs: int = 10_000,
) -> ComparisonReport:
    """Extract, initialize, generate, query and benchmark, in that order."""
    if canonical is None:
        canonical = GenerationOptions.create()

    buffer = gather_triangles(root)
    log.info(
        f"[Harness] Extracted {buffer.vertex_count} vertices, {buffer.triangle_count} triangles"
    )

    label_a, label_b = slot_labels(backend_a, backend_b)
    init_ms = {
        "A": initialize_backend(backend_a, label_a),
        "B": initialize_backend(backend_b, label_b),
    }

    generation = compare_generation(
        buffer, canonical, backend_a, backend_b, generation_warmup, generation_runs
    )
    paths = compare_paths(
        backend_a, generation.handle_a, backend_b, generation.handle_b, start, end, half_extents
    )
    queries = benchmark_queries(
        backend_a,
        generation.handle_a,
        backend_b,
        generation.handle_b,
        start,
        end,
        half_extents,
        query_warmup,
        query_runs,
    )

    return ComparisonReport(
        backend_a=backend_a,
        backend_b=backend_b,
        buffer=buffer,
        init_ms=init_ms,
        generation=generation,
        paths=paths,
        queries=queries,
        start=np.asarray(start, dtype=np.float64),
        end=np.asarray(end, dtype=np.float64),
    )
