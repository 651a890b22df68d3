"""
Timed repetition of an operation with warmup and descriptive statistics.

Nothing here knows about navmeshes: any zero-argument callable can be
measured.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from navbench import log

T = TypeVar("T")


@dataclass(frozen=True)
class BenchmarkResult:
    """Timing statistics of one benchmark invocation. All times in milliseconds."""

    name: str
    warmup_runs: int
    runs: int
    times: tuple[float, ...]
    """Measured times in execution order, one per run."""
    mean: float
    median: float
    min: float
    max: float
    std_dev: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "warmup_runs": self.warmup_runs,
            "runs": self.runs,
            "times": list(self.times),
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "max": self.max,
            "std_dev": self.std_dev,
        }


class ResultCell(Generic[T]):
    """
    Single-slot holder for the artifact produced by a benchmarked operation.

    The operation stores its result with put(); every call overwrites the
    previous value, so after benchmarking the cell holds the result of the
    last run.
    """

    __slots__ = ("_value", "_filled")

    def __init__(self):
        self._value: Optional[T] = None
        self._filled = False

    def put(self, value: T) -> None:
        self._value = value
        self._filled = True

    @property
    def value(self) -> Optional[T]:
        return self._value

    @property
    def filled(self) -> bool:
        return self._filled

    def clear(self) -> None:
        self._value = None
        self._filled = False


def summarize(name: str, times: Sequence[float], warmup_runs: int = 0) -> BenchmarkResult:
    """
    Build a BenchmarkResult from a series of measured times.

    median is sorted[len // 2], i.e. the upper middle element for an even
    count. std_dev is the population standard deviation (divides by N).
    """
    if len(times) == 0:
        raise ValueError("cannot summarize an empty time series")

    times = tuple(float(t) for t in times)
    runs = len(times)
    ordered = sorted(times)

    mean = sum(times) / runs
    variance = sum((t - mean) ** 2 for t in times) / runs

    return BenchmarkResult(
        name=name,
        warmup_runs=warmup_runs,
        runs=runs,
        times=times,
        mean=mean,
        median=ordered[runs // 2],
        min=ordered[0],
        max=ordered[-1],
        std_dev=math.sqrt(variance),
    )


def benchmark(
    name: str,
    operation: Callable[[], Any],
    warmup_runs: int = 3,
    runs: int = 10,
    timer: Callable[[], float] = time.perf_counter,
) -> BenchmarkResult:
    """
    Run ``operation`` warmup_runs times untimed, then runs times timed.

    Only the call itself is inside the timed region. The return value of
    the operation is discarded; use a ResultCell to capture artifacts.

    Args:
        name: Label stored in the result.
        operation: Zero-argument callable.
        warmup_runs: Untimed iterations executed first.
        runs: Timed iterations, at least 1.
        timer: Monotonic clock returning seconds.
    """
    if runs < 1:
        raise ValueError(f"runs must be >= 1, got {runs}")
    if warmup_runs < 0:
        raise ValueError(f"warmup_runs must be >= 0, got {warmup_runs}")

    log.debug(f"[Benchmark] {name}: running {warmup_runs} warmup iterations...")
    for _ in range(warmup_runs):
        operation()

    log.debug(f"[Benchmark] {name}: running {runs} benchmark iterations...")
    times: list[float] = []
    for _ in range(runs):
        start = timer()
        operation()
        end = timer()
        times.append((end - start) * 1000.0)

    return summarize(name, times, warmup_runs)
