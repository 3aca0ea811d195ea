"""Single-entry visualization helper for waypoint routes."""

from __future__ import annotations

from typing import Optional

import matplotlib.pyplot as plt

from .Objects import GridConfig, Path

START_COLOR = "#22c55e"
END_COLOR = "#ef4444"
REQUIRED_COLOR = "#fbbf24"
PATH_COLOR = "#38bdf8"


def _xy(n: int, cell) -> tuple[float, float]:
    r, c = cell
    return c + 0.5, n - 1 - r + 0.5


def visualize(
    config: GridConfig,
    path: Optional[Path] = None,
    show: bool = True,
    save_path: str | None = None,
    title: str | None = None,
) -> None:
    """Render the grid, its markers and an optional routed path.

    Args:
        config: grid configuration to draw.
        path: routed path, drawn with a direction arrow on every step.
        show: display via matplotlib.
        save_path: optional filepath to save PNG.
        title: optional axes title.
    """
    n = config.n
    fig, ax = plt.subplots(figsize=(max(3, n / 2), max(3, n / 2)))
    for r in range(n):
        for c in range(n):
            color = 'black' if (r, c) in config.blocked else 'white'
            ax.add_patch(plt.Rectangle((c, n - 1 - r), 1, 1, facecolor=color, edgecolor='lightgray'))

    marker_cells = []
    if config.start is not None:
        marker_cells.append((config.start, START_COLOR, "S"))
    if config.end is not None:
        marker_cells.append((config.end, END_COLOR, "E"))
    marker_cells.extend((cell, REQUIRED_COLOR, str(idx + 1)) for idx, cell in enumerate(config.required))
    for cell, color, label in marker_cells:
        r, c = cell
        ax.add_patch(plt.Rectangle((c, n - 1 - r), 1, 1, facecolor=color, edgecolor='black'))
        x, y = _xy(n, cell)
        ax.text(x, y, label, color='black', fontsize=8, ha='center', va='center', fontweight='bold')

    if path and len(path) >= 2:
        xs = [_xy(n, cell)[0] for cell in path]
        ys = [_xy(n, cell)[1] for cell in path]
        ax.plot(xs, ys, '-', color=PATH_COLOR, linewidth=2)
        for (x0, y0), (x1, y1) in zip(zip(xs, ys), zip(xs[1:], ys[1:])):
            ax.annotate("", xy=((x0 + x1) / 2, (y0 + y1) / 2), xytext=(x0, y0),
                        arrowprops=dict(arrowstyle='->', color='black', lw=1))

    ax.set_xlim(0, n)
    ax.set_ylim(0, n)
    ax.set_xticks(range(n + 1))
    ax.set_yticks(range(n + 1))
    ax.set_aspect('equal')
    ax.grid(True, color='black', linestyle=':', linewidth=0.5)
    if title:
        ax.set_title(title)

    if save_path:
        plt.savefig(save_path, bbox_inches='tight', dpi=150)
    if show:
        plt.show()
    else:
        plt.close(fig)
