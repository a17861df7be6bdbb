"""Point quadtree used for Barnes–Hut repulsion and collision broad-phase.

Leaves hold node indices. A leaf holds more than one index only when the
points coincide exactly or the tree reached ``MAX_DEPTH``; every other insert
into an occupied leaf splits it into quadrants.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

MAX_DEPTH = 32


class QuadNode:
    __slots__ = ("x0", "y0", "x1", "y1", "children", "points", "weight", "cx", "cy", "radius")

    def __init__(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.children: list[QuadNode | None] | None = None
        self.points: list[int] = []
        # Aggregates filled in by the forces through visit_after().
        self.weight = 0.0
        self.cx = 0.0
        self.cy = 0.0
        self.radius = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    def child_for(self, x: float, y: float) -> int:
        xm = (self.x0 + self.x1) / 2
        ym = (self.y0 + self.y1) / 2
        return (int(y >= ym) << 1) | int(x >= xm)

    def make_child(self, quadrant: int) -> QuadNode:
        xm = (self.x0 + self.x1) / 2
        ym = (self.y0 + self.y1) / 2
        x0, x1 = (xm, self.x1) if quadrant & 1 else (self.x0, xm)
        y0, y1 = (ym, self.y1) if quadrant & 2 else (self.y0, ym)
        return QuadNode(x0, y0, x1, y1)


class QuadTree:
    """Quadtree over parallel coordinate lists; point ``i`` is ``(xs[i], ys[i])``."""

    def __init__(self, xs: Sequence[float], ys: Sequence[float]) -> None:
        if len(xs) != len(ys):
            raise ValueError("xs and ys must have the same length")
        self.xs = xs
        self.ys = ys
        self.root = self._cover()
        for i in range(len(xs)):
            self._insert(i)

    def __len__(self) -> int:
        return len(self.xs)

    def _cover(self) -> QuadNode:
        if not self.xs:
            return QuadNode(0.0, 0.0, 1.0, 1.0)
        x0, x1 = min(self.xs), max(self.xs)
        y0, y1 = min(self.ys), max(self.ys)
        # Square extent, nudged past the max so points on the upper edge
        # still fall inside the half-open quadrants.
        size = max(x1 - x0, y1 - y0, 1.0) * (1 + 1e-9) + 1e-9
        return QuadNode(x0, y0, x0 + size, y0 + size)

    def _insert(self, i: int) -> None:
        x, y = self.xs[i], self.ys[i]
        node = self.root
        depth = 0
        while True:
            if node.children is not None:
                quadrant = node.child_for(x, y)
                child = node.children[quadrant]
                if child is None:
                    child = node.children[quadrant] = node.make_child(quadrant)
                node = child
                depth += 1
                continue

            if not node.points or depth >= MAX_DEPTH:
                node.points.append(i)
                return

            first = node.points[0]
            if self.xs[first] == x and self.ys[first] == y:
                node.points.append(i)
                return

            # Split: the occupants coincide, so they move as one group.
            occupants = node.points
            node.points = []
            node.children = [None, None, None, None]
            quadrant = node.child_for(self.xs[first], self.ys[first])
            child = node.children[quadrant] = node.make_child(quadrant)
            child.points = occupants

    def visit(self, callback: Callable[[QuadNode], bool]) -> None:
        """Pre-order traversal; children are skipped when ``callback`` returns True."""
        stack = [self.root]
        while stack:
            quad = stack.pop()
            if callback(quad) or quad.children is None:
                continue
            for child in reversed(quad.children):
                if child is not None:
                    stack.append(child)

    def visit_after(self, callback: Callable[[QuadNode], None]) -> None:
        """Post-order traversal, every child before its parent."""
        stack = [self.root]
        order: list[QuadNode] = []
        while stack:
            quad = stack.pop()
            order.append(quad)
            if quad.children is not None:
                stack.extend(child for child in quad.children if child is not None)
        for quad in reversed(order):
            callback(quad)

    def leaves(self) -> list[QuadNode]:
        found: list[QuadNode] = []

        def collect(quad: QuadNode) -> bool:
            if quad.is_leaf and quad.points:
                found.append(quad)
            return False

        self.visit(collect)
        return found
