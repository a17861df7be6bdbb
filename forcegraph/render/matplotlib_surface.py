"""Matplotlib axes as a drawing surface."""

from __future__ import annotations

from typing import Any, Hashable

from matplotlib.lines import Line2D
from matplotlib.patches import Circle
from matplotlib.text import Text

from forcegraph.render.surface import BACKGROUND, LABEL_OFFSET

# Stacking order: links under nodes under labels.
Z_LINE = 1
Z_CIRCLE = 2
Z_LABEL = 3


class MatplotlibSurface:
    """Draws primitives on an axes spanning the fixed viewport in data units.

    The y axis is inverted so coordinates read like screen space (origin top
    left), matching the layout's notion of the viewport.
    """

    def __init__(self, axes: Any, width: float, height: float) -> None:
        self._axes = axes
        axes.set_xlim(0, width)
        axes.set_ylim(height, 0)
        axes.set_aspect("equal")
        axes.set_facecolor(BACKGROUND)
        axes.figure.patch.set_facecolor(BACKGROUND)
        axes.set_xticks([])
        axes.set_yticks([])
        for spine in axes.spines.values():
            spine.set_visible(False)

    @property
    def axes(self) -> Any:
        return self._axes

    def add_line(self, key: Hashable, *, stroke: str, width: float) -> Line2D:
        line = Line2D([], [], color=stroke, linewidth=width, zorder=Z_LINE, gid=str(key))
        self._axes.add_line(line)
        return line

    def add_circle(self, key: Hashable, *, radius: float, fill: str) -> Circle:
        circle = Circle((0.0, 0.0), radius, facecolor=fill, edgecolor="none", zorder=Z_CIRCLE, gid=str(key))
        self._axes.add_patch(circle)
        return circle

    def add_label(self, key: Hashable, text: str, *, font_size: float, fill: str) -> Text:
        return self._axes.text(
            0.0,
            0.0,
            text,
            fontsize=font_size,
            color=fill,
            zorder=Z_LABEL,
            clip_on=True,
            gid=str(key),
        )

    def move_line(self, handle: Line2D, x1: float, y1: float, x2: float, y2: float) -> None:
        handle.set_data([x1, x2], [y1, y2])

    def move_circle(self, handle: Circle, x: float, y: float) -> None:
        handle.set_center((x, y))

    def move_label(self, handle: Text, x: float, y: float) -> None:
        handle.set_position((x + LABEL_OFFSET[0], y + LABEL_OFFSET[1]))

    def remove(self, handle: Any) -> None:
        handle.remove()

    def flush(self) -> None:
        self._axes.figure.canvas.draw_idle()
