"""Drag-to-pin interaction on simulation nodes."""

from __future__ import annotations

from forcegraph.simulation.engine import REHEAT_ALPHA_TARGET, ForceSimulation
from forcegraph.utils.exceptions import InteractionError
from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)


class DragController:
    """Pins dragged nodes to the pointer and keeps the simulation warm meanwhile.

    Nodes are addressed by arena index. While any drag is active the
    simulation's alpha target stays at ``reheat_target`` so it keeps ticking;
    when the last drag ends the target drops back to zero and the layout
    decays to rest on its own.
    """

    def __init__(self, simulation: ForceSimulation, reheat_target: float = REHEAT_ALPHA_TARGET) -> None:
        self._simulation = simulation
        self._reheat_target = reheat_target
        self._active: set[int] = set()

    @property
    def active(self) -> frozenset[int]:
        return frozenset(self._active)

    def is_dragging(self, index: int) -> bool:
        return index in self._active

    def drag_start(self, index: int) -> None:
        if index in self._active:
            raise InteractionError(f"node {index} is already being dragged")
        node = self._simulation.nodes[index]

        if not self._active:
            self._simulation.reheat(self._reheat_target)
        self._active.add(index)
        node.pin(node.x, node.y)
        logger.debug("drag_started", node_id=node.id, x=node.x, y=node.y)

    def drag_move(self, index: int, x: float, y: float) -> None:
        if index not in self._active:
            raise InteractionError(f"node {index} is not being dragged")
        self._simulation.nodes[index].pin(x, y)

    def drag_end(self, index: int) -> None:
        if index not in self._active:
            raise InteractionError(f"node {index} is not being dragged")
        self._active.discard(index)
        node = self._simulation.nodes[index]

        # Release from exactly where the pointer left the node.
        if node.fx is not None:
            node.x = node.fx
            node.vx = 0.0
        if node.fy is not None:
            node.y = node.fy
            node.vy = 0.0
        node.unpin()

        if not self._active:
            self._simulation.alpha_target = 0.0
        logger.debug("drag_ended", node_id=node.id, x=node.x, y=node.y)

    def cancel_all(self) -> None:
        """End every active drag, e.g. when the view is torn down mid-gesture."""
        for index in sorted(self._active):
            self.drag_end(index)
