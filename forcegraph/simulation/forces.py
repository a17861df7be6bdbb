"""Forces applied by the simulation on every tick.

Each force is bound to the node arena once through ``initialize`` and then
called with the current alpha. Forces write velocity deltas (``vx``/``vy``)
except the center force, which translates positions directly.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from forcegraph.simulation.arena import NodeArena, NodeState, ResolvedLink
from forcegraph.simulation.quadtree import QuadNode, QuadTree

LINK_DISTANCE = 120.0
CHARGE_STRENGTH = -600.0
BARNES_HUT_THETA = 0.9
COLLIDE_PADDING = 5.0


class Force(ABC):
    """Base for simulation forces."""

    def __init__(self) -> None:
        self._nodes: NodeArena = NodeArena()
        self._rng = random.Random(0)

    def initialize(self, nodes: NodeArena, rng: random.Random) -> None:
        self._nodes = nodes
        self._rng = rng

    def _jiggle(self) -> float:
        return (self._rng.random() - 0.5) * 1e-6

    @abstractmethod
    def apply(self, alpha: float) -> None:
        ...


class LinkForce(Force):
    """Spring relaxation pulling linked nodes toward ``distance`` apart.

    Strength per link is ``1 / min(degree(source), degree(target))`` so hubs
    are not yanked around by their many neighbours; ``bias`` splits the
    correction so the lower-degree endpoint moves more.
    """

    def __init__(
        self,
        links: Sequence[ResolvedLink],
        distance: float = LINK_DISTANCE,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self.links = list(links)
        self.distance = distance
        self.iterations = iterations
        self._strengths: list[float] = []
        self._biases: list[float] = []

    def initialize(self, nodes: NodeArena, rng: random.Random) -> None:
        super().initialize(nodes, rng)
        degree = [0] * len(nodes)
        for link in self.links:
            degree[link.source] += 1
            degree[link.target] += 1
        self._strengths = [
            1.0 / min(degree[link.source], degree[link.target]) for link in self.links
        ]
        self._biases = [
            degree[link.source] / (degree[link.source] + degree[link.target])
            for link in self.links
        ]

    def apply(self, alpha: float) -> None:
        nodes = self._nodes
        for _ in range(self.iterations):
            for link, strength, bias in zip(self.links, self._strengths, self._biases):
                source = nodes[link.source]
                target = nodes[link.target]
                x = (target.x + target.vx - source.x - source.vx) or self._jiggle()
                y = (target.y + target.vy - source.y - source.vy) or self._jiggle()
                length = math.sqrt(x * x + y * y)
                scale = (length - self.distance) / length * alpha * strength
                x *= scale
                y *= scale
                target.vx -= x * bias
                target.vy -= y * bias
                source.vx += x * (1 - bias)
                source.vy += y * (1 - bias)


class ManyBodyForce(Force):
    """Mutual repulsion (negative strength) with a Barnes–Hut approximation.

    A quadtree cell of width ``w`` whose weighted centroid lies at squared
    distance ``l`` from the node is treated as a single body when
    ``w * w / theta ** 2 < l``. ``theta = 0.9`` keeps the per-node error a few
    percent of the exact all-pairs sum while visiting O(log n) cells.
    """

    def __init__(
        self,
        strength: float = CHARGE_STRENGTH,
        theta: float = BARNES_HUT_THETA,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> None:
        super().__init__()
        self.strength = strength
        self.theta = theta
        self.distance_min = distance_min
        self.distance_max = distance_max

    def apply(self, alpha: float) -> None:
        nodes = self._nodes
        if len(nodes) < 2:
            return
        tree = QuadTree([node.x for node in nodes], [node.y for node in nodes])
        tree.visit_after(lambda quad: self._accumulate(tree, quad))
        for node in nodes:
            tree.visit(self._visitor(node, alpha))

    def _accumulate(self, tree: QuadTree, quad: QuadNode) -> None:
        if quad.children is None:
            count = len(quad.points)
            quad.weight = self.strength * count
            if count:
                quad.cx = sum(tree.xs[i] for i in quad.points) / count
                quad.cy = sum(tree.ys[i] for i in quad.points) / count
            return

        weight = total = sx = sy = 0.0
        for child in quad.children:
            if child is None or not child.weight:
                continue
            magnitude = abs(child.weight)
            weight += child.weight
            total += magnitude
            sx += magnitude * child.cx
            sy += magnitude * child.cy
        quad.weight = weight
        if total:
            quad.cx = sx / total
            quad.cy = sy / total
        else:
            quad.cx = (quad.x0 + quad.x1) / 2
            quad.cy = (quad.y0 + quad.y1) / 2

    def _visitor(self, node: NodeState, alpha: float) -> Callable[[QuadNode], bool]:
        theta2 = self.theta * self.theta
        dmin2 = self.distance_min * self.distance_min
        dmax2 = self.distance_max * self.distance_max

        def visit(quad: QuadNode) -> bool:
            if not quad.weight:
                return True

            dx = quad.cx - node.x
            dy = quad.cy - node.y
            width = quad.width
            dist2 = dx * dx + dy * dy

            if width * width / theta2 < dist2:
                if dist2 < dmax2:
                    if dx == 0:
                        dx = self._jiggle()
                        dist2 += dx * dx
                    if dy == 0:
                        dy = self._jiggle()
                        dist2 += dy * dy
                    if dist2 < dmin2:
                        dist2 = math.sqrt(dmin2 * dist2)
                    node.vx += dx * quad.weight * alpha / dist2
                    node.vy += dy * quad.weight * alpha / dist2
                return True

            if quad.children is not None or dist2 >= dmax2:
                return False

            others = [i for i in quad.points if i != node.index]
            if not others:
                return False
            if dx == 0:
                dx = self._jiggle()
                dist2 += dx * dx
            if dy == 0:
                dy = self._jiggle()
                dist2 += dy * dy
            if dist2 < dmin2:
                dist2 = math.sqrt(dmin2 * dist2)
            w = self.strength * len(others) * alpha / dist2
            node.vx += dx * w
            node.vy += dy * w
            return False

        return visit


class CenterForce(Force):
    """Translates every node so the centroid sits on ``(x, y)``."""

    def __init__(self, x: float, y: float, strength: float = 1.0) -> None:
        super().__init__()
        self.x = x
        self.y = y
        self.strength = strength

    def apply(self, alpha: float) -> None:
        nodes = self._nodes
        if not nodes:
            return
        n = len(nodes)
        shift_x = (sum(node.x for node in nodes) / n - self.x) * self.strength
        shift_y = (sum(node.y for node in nodes) / n - self.y) * self.strength
        for node in nodes:
            node.x -= shift_x
            node.y -= shift_y


class CollideForce(Force):
    """Pushes overlapping node circles apart along the line between centres.

    Radius is ``size + padding``. Each pair is resolved once per iteration;
    the correction is split by ``rj^2 / (ri^2 + rj^2)`` so small nodes yield
    to large ones.
    """

    def __init__(
        self,
        padding: float = COLLIDE_PADDING,
        strength: float = 1.0,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self.padding = padding
        self.strength = strength
        self.iterations = iterations
        self._radii: list[float] = []

    def initialize(self, nodes: NodeArena, rng: random.Random) -> None:
        super().initialize(nodes, rng)
        self._radii = [node.size + self.padding for node in nodes]

    def radius(self, index: int) -> float:
        return self._radii[index]

    def apply(self, alpha: float) -> None:
        nodes = self._nodes
        if len(nodes) < 2:
            return
        for _ in range(self.iterations):
            tree = QuadTree(
                [node.x + node.vx for node in nodes],
                [node.y + node.vy for node in nodes],
            )
            tree.visit_after(self._prepare)
            for node in nodes:
                tree.visit(self._visitor(node))

    def _prepare(self, quad: QuadNode) -> None:
        if quad.children is None:
            quad.radius = max((self._radii[i] for i in quad.points), default=0.0)
        else:
            quad.radius = max((c.radius for c in quad.children if c is not None), default=0.0)

    def _visitor(self, node: NodeState) -> Callable[[QuadNode], bool]:
        nodes = self._nodes
        ri = self._radii[node.index]
        ri2 = ri * ri
        xi = node.x + node.vx
        yi = node.y + node.vy

        def visit(quad: QuadNode) -> bool:
            if quad.children is None:
                for j in quad.points:
                    if j <= node.index:
                        continue
                    other = nodes[j]
                    rj = self._radii[j]
                    r = ri + rj
                    x = xi - other.x - other.vx
                    y = yi - other.y - other.vy
                    dist2 = x * x + y * y
                    if dist2 >= r * r:
                        continue
                    if x == 0:
                        x = self._jiggle()
                        dist2 += x * x
                    if y == 0:
                        y = self._jiggle()
                        dist2 += y * y
                    dist = math.sqrt(dist2)
                    scale = (r - dist) / dist * self.strength
                    x *= scale
                    y *= scale
                    ratio = rj * rj / (ri2 + rj * rj)
                    node.vx += x * ratio
                    node.vy += y * ratio
                    other.vx -= x * (1 - ratio)
                    other.vy -= y * (1 - ratio)
                return False

            reach = quad.radius + ri
            return (
                quad.x0 > xi + reach
                or quad.x1 < xi - reach
                or quad.y0 > yi + reach
                or quad.y1 < yi - reach
            )

        return visit
