"""Plain-text formatting of benchmark results and comparison runs."""

from __future__ import annotations

from typing import List

from navbench.benchmark import BenchmarkResult
from navbench.harness import ComparisonReport


def format_benchmark(result: BenchmarkResult) -> str:
    return (
        f"{result.name}: {result.mean:.3f} ± {result.std_dev:.3f} ms "
        f"(median {result.median:.3f}, min {result.min:.3f}, max {result.max:.3f}, "
        f"{result.runs} runs, {result.warmup_runs} warmup)"
    )


def _ratio_line(title: str, a: BenchmarkResult, b: BenchmarkResult, label_a: str, label_b: str) -> str:
    if a.mean <= 0.0 or b.mean <= 0.0:
        return f"{title}: n/a"
    if a.mean <= b.mean:
        return f"{title}: {label_a} is {b.mean / a.mean:.2f}x faster than {label_b}"
    return f"{title}: {label_b} is {a.mean / b.mean:.2f}x faster than {label_a}"


def _query_lines(label: str, result: BenchmarkResult) -> List[str]:
    return [
        f"{label}: {result.warmup_runs} warmup + {result.runs} runs",
        format_benchmark(result),
        f"{label} total: {result.mean * result.runs:.3f} ms",
    ]


def format_summary(report: ComparisonReport) -> str:
    """Multi-line summary of a comparison run."""
    label_a, label_b = report.labels
    lines: List[str] = [
        "=== Scene ===",
        f"vertices: {report.buffer.vertex_count}, triangles: {report.buffer.triangle_count}",
        "",
        "=== Init ===",
        f"{label_a}: {report.init_ms['A']:.3f} ms",
        f"{label_b}: {report.init_ms['B']:.3f} ms",
        "",
        "=== Generation ===",
        format_benchmark(report.generation.result_a),
        format_benchmark(report.generation.result_b),
        _ratio_line("ratio", report.generation.result_a, report.generation.result_b, label_a, label_b),
        "",
        "=== Find Path ===",
        f"{label_a} path: {len(report.paths.path_a)} points",
        f"{label_b} path: {len(report.paths.path_b)} points",
    ]
    lines += _query_lines(label_a, report.queries.result_a)
    lines += _query_lines(label_b, report.queries.result_b)
    lines.append(_ratio_line("ratio", report.queries.result_a, report.queries.result_b, label_a, label_b))
    return "\n".join(lines)
