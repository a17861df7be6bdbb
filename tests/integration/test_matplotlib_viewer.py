"""Integration tests: graph view on a real (Agg) Matplotlib figure."""

from __future__ import annotations

from types import SimpleNamespace

import matplotlib.pyplot as plt
import pytest
from matplotlib.backend_bases import CloseEvent, MouseEvent
from matplotlib.lines import Line2D
from matplotlib.patches import Circle

from forcegraph.interaction.drag import DragController
from forcegraph.interaction.pointer import PointerDragBinding
from forcegraph.main import create_view
from forcegraph.models.schemas import GraphData
from forcegraph.render.matplotlib_surface import MatplotlibSurface
from forcegraph.render.sync import RenderSync
from forcegraph.simulation.arena import NodeArena, resolve_links
from forcegraph.simulation.engine import ForceSimulation


@pytest.fixture
def figure():
    fig, ax = plt.subplots(figsize=(12, 8), dpi=100)
    yield fig, ax
    plt.close(fig)


@pytest.fixture
def mounted(figure, graph_payload):
    fig, ax = figure
    graph = GraphData.model_validate(graph_payload)
    arena = NodeArena.from_records(graph.nodes)
    links = resolve_links(arena, graph.links)
    sim = ForceSimulation(arena, links)
    surface = MatplotlibSurface(ax, 1200, 800)
    sync = RenderSync(surface, arena, links)
    sync.bind()
    return SimpleNamespace(fig=fig, ax=ax, sim=sim, sync=sync)


def test_surface_draws_artists_in_stacking_order(mounted):
    ax = mounted.ax
    circles = [p for p in ax.patches if isinstance(p, Circle)]
    lines = [line for line in ax.lines if isinstance(line, Line2D)]

    assert len(circles) == 3
    assert len(lines) == 2
    assert len(ax.texts) == 3
    assert {c.get_gid() for c in circles} == {"a", "b", "acme"}
    assert all(line.get_zorder() < c.get_zorder() for line in lines for c in circles)
    assert all(c.get_zorder() < t.get_zorder() for c in circles for t in ax.texts)
    assert ax.get_ylim() == (800.0, 0.0)


def test_surface_tracks_ticks(mounted):
    mounted.sim.on_tick(mounted.sync.update)
    mounted.sim.restart()
    for _ in range(3):
        mounted.sim.step()

    node = mounted.sim.nodes[2]
    circle = next(p for p in mounted.ax.patches if p.get_gid() == "acme")
    label = next(t for t in mounted.ax.texts if t.get_gid() == "acme")
    assert circle.center == pytest.approx((node.x, node.y))
    assert circle.radius == 20
    assert label.get_text() == "Acme [Company]"
    assert label.get_position() == pytest.approx((node.x + 15.0, node.y + 4.0))
    mounted.fig.canvas.draw()


def test_release_removes_artists(mounted):
    mounted.sync.release()
    assert list(mounted.ax.patches) == []
    assert list(mounted.ax.lines) == []
    assert list(mounted.ax.texts) == []


def _event(ax, x, y, button=1):
    return SimpleNamespace(inaxes=ax, xdata=x, ydata=y, button=button)


def test_pointer_drag_moves_node(mounted):
    controller = DragController(mounted.sim)
    binding = PointerDragBinding(mounted.fig.canvas, mounted.ax, mounted.sim, controller)
    node = mounted.sim.nodes[0]

    binding.on_press(_event(mounted.ax, node.x + 3.0, node.y))
    assert controller.is_dragging(0)

    binding.on_move(_event(mounted.ax, 500.0, 500.0))
    mounted.sim.step()
    assert (node.x, node.y) == (500.0, 500.0)

    binding.on_release(_event(mounted.ax, 510.0, 490.0))
    assert not controller.active
    assert not node.pinned
    assert (node.x, node.y) == (510.0, 490.0)


def test_pointer_ignores_misses_and_other_buttons(mounted):
    controller = DragController(mounted.sim)
    binding = PointerDragBinding(mounted.fig.canvas, mounted.ax, mounted.sim, controller)
    node = mounted.sim.nodes[0]

    binding.on_press(_event(mounted.ax, node.x, node.y, button=3))
    binding.on_press(_event(mounted.ax, -500.0, -500.0))
    binding.on_press(_event(None, node.x, node.y))

    assert not controller.active
    assert binding.hit_test(-500.0, -500.0) is None
    assert binding.hit_test(node.x, node.y) == 0


def test_release_outside_axes_ends_drag_at_last_position(mounted):
    controller = DragController(mounted.sim)
    binding = PointerDragBinding(mounted.fig.canvas, mounted.ax, mounted.sim, controller)
    node = mounted.sim.nodes[1]

    binding.on_press(_event(mounted.ax, node.x, node.y))
    binding.on_move(_event(mounted.ax, 42.0, 24.0))
    binding.on_release(_event(None, None, None))

    assert not controller.active
    assert (node.x, node.y) == (42.0, 24.0)


def test_disconnect_ends_held_drag(mounted):
    controller = DragController(mounted.sim)
    binding = PointerDragBinding(mounted.fig.canvas, mounted.ax, mounted.sim, controller)
    binding.connect()
    node = mounted.sim.nodes[0]
    binding.on_press(_event(mounted.ax, node.x, node.y))

    binding.disconnect()

    assert not controller.active
    assert not node.pinned


def _mouse(fig, ax, name, x, y):
    px, py = ax.transData.transform((x, y))
    return MouseEvent(name, fig.canvas, px, py, button=1)


def test_create_view_wires_canvas_events(graph_payload):
    fig, view = create_view("unused.json")
    try:
        ax = fig.axes[0]
        assert view.mount(GraphData.model_validate(graph_payload))
        fig.canvas.draw()
        node = view.simulation.nodes[0]

        for name, (x, y) in (
            ("button_press_event", (node.x, node.y)),
            ("motion_notify_event", (300.0, 200.0)),
        ):
            fig.canvas.callbacks.process(name, _mouse(fig, ax, name, x, y))

        assert view.drag.is_dragging(0)
        assert node.fx == pytest.approx(300.0, abs=0.5)
        assert node.fy == pytest.approx(200.0, abs=0.5)

        release = _mouse(fig, ax, "button_release_event", 300.0, 200.0)
        fig.canvas.callbacks.process("button_release_event", release)
        assert not view.drag.active
        assert node.x == pytest.approx(300.0, abs=0.5)

        fig.canvas.callbacks.process("close_event", CloseEvent("close_event", fig.canvas))
        assert not view.mounted
        assert list(ax.patches) == []
    finally:
        plt.close(fig)
