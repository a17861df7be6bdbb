"""Force simulation engine: alpha state machine and per-tick velocity integration."""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from forcegraph.simulation.arena import NodeArena, NodeState, ResolvedLink
from forcegraph.simulation.forces import (
    CenterForce,
    CollideForce,
    Force,
    LinkForce,
    ManyBodyForce,
)
from forcegraph.simulation.scheduler import FrameScheduler
from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)

VIEWPORT_WIDTH = 1200
VIEWPORT_HEIGHT = 800

ALPHA_MIN = 0.001
SETTLE_TICKS = 300
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / SETTLE_TICKS)
VELOCITY_DECAY = 0.6
REHEAT_ALPHA_TARGET = 0.3

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class SimulationState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"
    STOPPED = "stopped"


def default_forces(
    links: Sequence[ResolvedLink],
    center: tuple[float, float],
) -> dict[str, Force]:
    return {
        "link": LinkForce(links),
        "charge": ManyBodyForce(),
        "center": CenterForce(*center),
        "collide": CollideForce(),
    }


class ForceSimulation:
    """Advances node positions under a set of forces, one tick per frame.

    ``alpha`` moves toward ``alpha_target`` by ``alpha_decay`` every tick and
    scales the forces. While running, each frame performs one tick, notifies
    tick subscribers with the tick number and requests the next frame from
    the scheduler; once ``alpha`` drops below ``alpha_min`` the simulation
    settles and notifies end subscribers. Subscribers read the live arena.

    Without a scheduler nothing advances on its own; call ``step()`` or
    ``tick()`` directly.
    """

    def __init__(
        self,
        nodes: NodeArena,
        links: Sequence[ResolvedLink] = (),
        *,
        scheduler: FrameScheduler | None = None,
        center: tuple[float, float] = (VIEWPORT_WIDTH / 2, VIEWPORT_HEIGHT / 2),
        forces: dict[str, Force] | None = None,
        seed: int = 1,
    ) -> None:
        self.nodes = nodes
        self.links = list(links)
        self.center = center
        self.alpha_min = ALPHA_MIN
        self.alpha_decay = ALPHA_DECAY
        self.velocity_decay = VELOCITY_DECAY

        self._scheduler = scheduler
        self._rng = random.Random(seed)
        self._alpha = 1.0
        self._alpha_target = 0.0
        self._tick_count = 0
        self._state = SimulationState.IDLE
        self._frame: Any = None
        self._tick_listeners: list[Callable[[int], None]] = []
        self._end_listeners: list[Callable[[], None]] = []

        self._place_nodes()
        self._forces: dict[str, Force] = {}
        for name, force in (forces if forces is not None else default_forces(self.links, center)).items():
            self.add_force(name, force)

    # -- configuration -------------------------------------------------

    def add_force(self, name: str, force: Force) -> None:
        force.initialize(self.nodes, self._rng)
        self._forces[name] = force

    def remove_force(self, name: str) -> Force | None:
        return self._forces.pop(name, None)

    def get_force(self, name: str) -> Force | None:
        return self._forces.get(name)

    @property
    def alpha(self) -> float:
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        self._alpha = max(0.0, float(value))

    @property
    def alpha_target(self) -> float:
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        self._alpha_target = max(0.0, float(value))

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def max_settle_ticks(self) -> int:
        """Upper bound on ticks until ``alpha < alpha_min`` with a zero target."""
        if self._alpha < self.alpha_min:
            return 1
        # One tick of slack for accumulated rounding in the iterated decay.
        return math.ceil(math.log(self.alpha_min / self._alpha) / math.log(1 - self.alpha_decay)) + 1

    # -- subscriptions -------------------------------------------------

    def on_tick(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._tick_listeners.append(listener)
        return lambda: self._unsubscribe(self._tick_listeners, listener)

    def on_end(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._end_listeners.append(listener)
        return lambda: self._unsubscribe(self._end_listeners, listener)

    @staticmethod
    def _unsubscribe(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    # -- lifecycle -----------------------------------------------------

    def start(self) -> ForceSimulation:
        logger.info(
            "simulation_started",
            nodes=len(self.nodes),
            links=len(self.links),
            alpha=round(self._alpha, 4),
        )
        return self.restart()

    def restart(self) -> ForceSimulation:
        """Resume frame scheduling; the reheat path out of ``SETTLED``."""
        self._state = SimulationState.RUNNING
        if self._frame is None:
            self._request_frame()
        return self

    def stop(self) -> ForceSimulation:
        """Cancel the pending frame; no tick is delivered until ``restart``."""
        if self._frame is not None and self._scheduler is not None:
            self._scheduler.cancel(self._frame)
        self._frame = None
        if self._state is not SimulationState.STOPPED:
            logger.debug("simulation_stopped", ticks=self._tick_count)
        self._state = SimulationState.STOPPED
        return self

    def reheat(self, alpha_target: float = REHEAT_ALPHA_TARGET) -> ForceSimulation:
        self.alpha_target = alpha_target
        return self.restart()

    def _request_frame(self) -> None:
        if self._scheduler is not None:
            self._frame = self._scheduler.request_frame(self.step)

    # -- stepping ------------------------------------------------------

    def step(self) -> None:
        """Run one frame: tick, notify, then settle or request the next frame."""
        self._frame = None
        if self._state is not SimulationState.RUNNING:
            return

        self.tick()
        for listener in list(self._tick_listeners):
            listener(self._tick_count)

        if self._state is not SimulationState.RUNNING:
            # A listener stopped us.
            return

        if self._alpha < self.alpha_min:
            self._state = SimulationState.SETTLED
            logger.info("simulation_settled", ticks=self._tick_count)
            for listener in list(self._end_listeners):
                listener()
            return

        self._request_frame()

    def tick(self, iterations: int = 1) -> ForceSimulation:
        """Advance the physics without notifying anyone."""
        for _ in range(iterations):
            self._alpha += (self._alpha_target - self._alpha) * self.alpha_decay

            for force in self._forces.values():
                force.apply(self._alpha)

            for node in self.nodes:
                if node.fx is None:
                    node.vx *= self.velocity_decay
                    node.x += node.vx
                else:
                    node.x = node.fx
                    node.vx = 0.0
                if node.fy is None:
                    node.vy *= self.velocity_decay
                    node.y += node.vy
                else:
                    node.y = node.fy
                    node.vy = 0.0

            self._tick_count += 1
        return self

    def run_until_settled(self, max_ticks: int | None = None) -> int:
        """Synchronously step until settled; returns the number of ticks run."""
        limit = max_ticks if max_ticks is not None else self.max_settle_ticks()
        if self._frame is not None and self._scheduler is not None:
            self._scheduler.cancel(self._frame)
        self._frame = None
        start = self._tick_count
        self._state = SimulationState.RUNNING
        scheduler, self._scheduler = self._scheduler, None
        try:
            while self._state is SimulationState.RUNNING and self._tick_count - start < limit:
                self.step()
        finally:
            self._scheduler = scheduler
        return self._tick_count - start

    # -- queries -------------------------------------------------------

    def find(self, x: float, y: float, radius: float = math.inf) -> NodeState | None:
        """Closest node to ``(x, y)`` within ``radius``, or None."""
        closest: NodeState | None = None
        best = radius * radius
        for node in self.nodes:
            dx = x - node.x
            dy = y - node.y
            dist2 = dx * dx + dy * dy
            if dist2 < best:
                closest = node
                best = dist2
        return closest

    # -- setup ---------------------------------------------------------

    def _place_nodes(self) -> None:
        """Phyllotaxis placement for unpositioned nodes; pins win over positions."""
        cx, cy = self.center
        seen: set[tuple[float, float]] = set()
        for i, node in enumerate(self.nodes):
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if node.x is None or node.y is None:
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                node.x = cx + radius * math.cos(angle)
                node.y = cy + radius * math.sin(angle)
            # Coincident starts would make every pairwise force degenerate.
            while (node.x, node.y) in seen and not node.pinned:
                node.x += (self._rng.random() - 0.5) * 1e-6
                node.y += (self._rng.random() - 0.5) * 1e-6
            seen.add((node.x, node.y))
