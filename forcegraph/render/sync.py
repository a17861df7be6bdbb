"""Keeps drawing primitives in step with the simulation."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from forcegraph.render.surface import (
    LABEL_FILL,
    LABEL_FONT_SIZE,
    LINK_STROKE,
    NODE_FILL,
    DrawingSurface,
)
from forcegraph.simulation.arena import NodeArena, ResolvedLink
from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)


def link_stroke_width(weight: float | None) -> float:
    return math.sqrt(weight or 1) * 1.5


def label_text(label: str, node_type: str) -> str:
    return f"{label} [{node_type}]"


class RenderSync:
    """One circle and label per node, one line per link, moved on every tick.

    Primitives are held in lists aligned with arena and link indices; the key
    maps exist for lookup by entity identity (node id, or source id, target
    id, type and an occurrence ordinal for links).
    """

    def __init__(
        self,
        surface: DrawingSurface,
        nodes: NodeArena,
        links: Sequence[ResolvedLink],
    ) -> None:
        self._surface = surface
        self._nodes = nodes
        self._links = list(links)
        self._lines: list[Any] = []
        self._circles: list[Any] = []
        self._labels: list[Any] = []
        self.node_keys: dict[str, int] = {}
        self.link_keys: dict[tuple[str, str, str, int], int] = {}
        self._bound = False

    @property
    def bound(self) -> bool:
        return self._bound

    def bind(self) -> None:
        if self._bound:
            return
        seen: dict[tuple[str, str, str], int] = {}
        for link in self._links:
            source_id = self._nodes[link.source].id
            target_id = self._nodes[link.target].id
            ordinal = seen.get((source_id, target_id, link.type), 0)
            seen[(source_id, target_id, link.type)] = ordinal + 1
            key = (source_id, target_id, link.type, ordinal)
            self.link_keys[key] = link.index
            self._lines.append(self._surface.add_line(
                key,
                stroke=LINK_STROKE,
                width=link_stroke_width(link.weight),
            ))

        for node in self._nodes:
            self.node_keys[node.id] = node.index
            self._circles.append(self._surface.add_circle(
                node.id,
                radius=node.size,
                fill=node.color or NODE_FILL,
            ))
        for node in self._nodes:
            self._labels.append(self._surface.add_label(
                node.id,
                label_text(node.label, node.type),
                font_size=LABEL_FONT_SIZE,
                fill=LABEL_FILL,
            ))

        self._bound = True
        logger.debug("primitives_bound", circles=len(self._circles), lines=len(self._lines))
        self.update()

    def update(self, tick: int | None = None) -> None:
        """Write current node and link geometry into the primitives."""
        if not self._bound:
            return
        nodes = self._nodes
        surface = self._surface
        for link, line in zip(self._links, self._lines):
            source = nodes[link.source]
            target = nodes[link.target]
            surface.move_line(line, source.x, source.y, target.x, target.y)
        for node, circle, label in zip(nodes, self._circles, self._labels):
            surface.move_circle(circle, node.x, node.y)
            surface.move_label(label, node.x, node.y)
        surface.flush()

    def release(self) -> None:
        """Remove every primitive from the surface."""
        if not self._bound:
            return
        for handle in (*self._lines, *self._circles, *self._labels):
            self._surface.remove(handle)
        self._lines.clear()
        self._circles.clear()
        self._labels.clear()
        self.node_keys.clear()
        self.link_keys.clear()
        self._bound = False
        logger.debug("primitives_released")
