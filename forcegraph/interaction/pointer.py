"""Matplotlib pointer events wired to the drag controller."""

from __future__ import annotations

from typing import Any

from forcegraph.interaction.drag import DragController
from forcegraph.simulation.engine import ForceSimulation

# Extra slack around the node circle that still counts as a hit.
HIT_SLOP = 2.0


class PointerDragBinding:
    """Translates press/move/release on an axes into drag gestures.

    One pointer means at most one node in hand at a time.
    """

    def __init__(
        self,
        canvas: Any,
        axes: Any,
        simulation: ForceSimulation,
        controller: DragController,
    ) -> None:
        self._canvas = canvas
        self._axes = axes
        self._simulation = simulation
        self._controller = controller
        self._held: int | None = None
        self._cids: list[int] = []

    def connect(self) -> None:
        if self._cids:
            return
        self._cids = [
            self._canvas.mpl_connect("button_press_event", self.on_press),
            self._canvas.mpl_connect("motion_notify_event", self.on_move),
            self._canvas.mpl_connect("button_release_event", self.on_release),
        ]

    def disconnect(self) -> None:
        for cid in self._cids:
            self._canvas.mpl_disconnect(cid)
        self._cids = []
        if self._held is not None:
            self._controller.drag_end(self._held)
            self._held = None

    def _in_axes(self, event: Any) -> bool:
        return event.inaxes is self._axes and event.xdata is not None and event.ydata is not None

    def hit_test(self, x: float, y: float) -> int | None:
        node = self._simulation.find(x, y)
        if node is None:
            return None
        if (node.x - x) ** 2 + (node.y - y) ** 2 > (node.size + HIT_SLOP) ** 2:
            return None
        return node.index

    def on_press(self, event: Any) -> None:
        if self._held is not None or event.button != 1 or not self._in_axes(event):
            return
        index = self.hit_test(event.xdata, event.ydata)
        if index is None:
            return
        self._held = index
        self._controller.drag_start(index)

    def on_move(self, event: Any) -> None:
        if self._held is None or not self._in_axes(event):
            return
        self._controller.drag_move(self._held, event.xdata, event.ydata)

    def on_release(self, event: Any) -> None:
        if self._held is None:
            return
        index, self._held = self._held, None
        if self._in_axes(event):
            self._controller.drag_move(index, event.xdata, event.ydata)
        self._controller.drag_end(index)
