"""
Top-down (XZ) debug view of a comparison run.

Scene footprint in grey, each backend's navmesh as a translucent overlay in
its colour and each path as a polyline with point markers. A CheckButtons
panel toggles the four navmesh/path layers, named by slot ("A: Grid Mesh").
Toggling only changes artist visibility; nothing is rebuilt or re-measured.
"""

from __future__ import annotations

from typing import Dict, List

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
from matplotlib.widgets import CheckButtons

from navbench.harness import ComparisonReport

SCENE_COLOR = "#888888"


def _footprint(vertices: np.ndarray, triangles: np.ndarray) -> List[np.ndarray]:
    vertices = np.asarray(vertices, dtype=np.float64)
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles) == 0:
        return []
    return list(vertices[triangles][:, :, [0, 2]])


class ComparisonFigure:
    """Figure plus the artists behind each visibility toggle."""

    def __init__(self, figure, axes, layers: Dict[str, list], checks: CheckButtons):
        self.figure = figure
        self.axes = axes
        self.layers = layers
        self.checks = checks

    def set_visible(self, layer: str, visible: bool) -> None:
        for artist in self.layers[layer]:
            artist.set_visible(visible)
        self.figure.canvas.draw_idle()

    def is_visible(self, layer: str) -> bool:
        return all(artist.get_visible() for artist in self.layers[layer])

    def toggle(self, layer: str) -> None:
        self.set_visible(layer, not self.is_visible(layer))

    def save(self, path) -> None:
        self.figure.savefig(path, dpi=120)


def build_comparison_figure(report: ComparisonReport) -> ComparisonFigure:
    fig = plt.figure(figsize=(11, 8))
    ax = fig.add_axes([0.05, 0.05, 0.70, 0.90])
    check_ax = fig.add_axes([0.78, 0.55, 0.20, 0.25])

    ax.add_collection(
        PolyCollection(
            _footprint(report.buffer.positions, report.buffer.indices),
            facecolors=SCENE_COLOR,
            edgecolors="none",
            alpha=0.25,
        )
    )

    layers: Dict[str, list] = {}
    entries = [
        ("A", report.backend_a, report.generation.handle_a, report.paths.path_a),
        ("B", report.backend_b, report.generation.handle_b, report.paths.path_b),
    ]
    for slot, backend, handle, path in entries:
        vertices, triangles = backend.debug_triangles(handle)
        mesh = PolyCollection(
            _footprint(vertices, triangles),
            facecolors=backend.color,
            edgecolors=backend.color,
            linewidths=0.3,
            alpha=0.2,
        )
        ax.add_collection(mesh)
        layers[f"{slot}: {backend.label} Mesh"] = [mesh]

        if len(path):
            (line,) = ax.plot(path[:, 0], path[:, 2], color=backend.color, linewidth=2, marker="o", markersize=4)
        else:
            (line,) = ax.plot([], [], color=backend.color, linewidth=2)
        layers[f"{slot}: {backend.label} Path"] = [line]

    ax.plot(report.start[0], report.start[2], marker="s", color="black", markersize=7, linestyle="none")
    ax.plot(report.end[0], report.end[2], marker="*", color="black", markersize=10, linestyle="none")

    ax.autoscale_view()
    ax.set_aspect("equal")
    ax.set_xlabel("x")
    ax.set_ylabel("z")
    label_a, label_b = report.labels
    ax.set_title(f"{label_a} vs {label_b}")
    ax.grid(True, linestyle="--", alpha=0.4)

    labels = list(layers)
    checks = CheckButtons(check_ax, labels, [True] * len(labels))
    figure = ComparisonFigure(fig, ax, layers, checks)
    checks.on_clicked(lambda label: figure.toggle(label))
    return figure


def show() -> None:
    plt.show()
