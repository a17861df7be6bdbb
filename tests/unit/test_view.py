"""Unit tests for the graph view lifecycle."""

from __future__ import annotations

import asyncio
import json

import pytest

from forcegraph.models.schemas import GraphData
from forcegraph.render.surface import MemorySurface
from forcegraph.simulation.engine import SimulationState
from forcegraph.utils.exceptions import TransportError
from forcegraph.view import GraphView


class FakeLoader:
    """Serves payloads by locator; a locator may be gated on an event."""

    def __init__(self, payloads: dict, gates: dict[str, asyncio.Event] | None = None) -> None:
        self.payloads = payloads
        self.gates = gates or {}
        self.requested: list[str] = []

    async def fetch(self, locator: str):
        self.requested.append(locator)
        if locator in self.gates:
            await self.gates[locator].wait()
        payload = self.payloads[locator]
        if isinstance(payload, Exception):
            raise payload
        return payload


def _view(payloads, scheduler, surface=None, gates=None) -> tuple[GraphView, MemorySurface]:
    surface = surface or MemorySurface()
    loader = FakeLoader(payloads, gates)
    view = GraphView(next(iter(payloads)), surface, scheduler=scheduler, loader=loader)
    return view, surface


@pytest.mark.asyncio
async def test_load_mounts_and_starts_simulation(raw_rows, scheduler):
    view, surface = _view({"rows.json": raw_rows}, scheduler)

    assert await view.load() is True

    assert view.mounted
    assert view.simulation.state is SimulationState.RUNNING
    assert len(surface.of_kind("circle")) == 5
    assert len(surface.of_kind("line")) == 5
    assert scheduler.has_pending


@pytest.mark.asyncio
async def test_ticks_reach_primitives(graph_payload, scheduler):
    view, surface = _view({"graph.json": graph_payload}, scheduler)
    await view.load()
    flushes = surface.flush_count

    scheduler.run_frame()
    scheduler.run_frame()

    assert surface.flush_count == flushes + 2
    node = view.simulation.nodes[0]
    assert surface.get("circle", node.id).attrs["cx"] == node.x


@pytest.mark.asyncio
async def test_load_from_local_file(tmp_path, graph_payload, scheduler):
    path = tmp_path / "graph_data.json"
    path.write_text(json.dumps(graph_payload), encoding="utf-8")
    view = GraphView(str(path), MemorySurface(), scheduler=scheduler)

    assert await view.load() is True
    assert [n.id for n in view.simulation.nodes] == ["a", "b", "acme"]


@pytest.mark.asyncio
async def test_transport_error_leaves_view_empty(scheduler):
    view, surface = _view({"down.json": TransportError("boom")}, scheduler)

    assert await view.load() is False
    assert not view.mounted
    assert surface.primitives == {}
    assert not scheduler.has_pending


@pytest.mark.asyncio
async def test_undecodable_file_leaves_view_empty(tmp_path, scheduler):
    path = tmp_path / "latin.json"
    path.write_bytes(b'[{"Source":1,"Target":2,"x":"\xff\xfe"}]')
    surface = MemorySurface()
    view = GraphView(str(path), surface, scheduler=scheduler)

    assert await view.load() is False
    assert not view.mounted
    assert surface.primitives == {}


@pytest.mark.asyncio
async def test_malformed_url_leaves_view_empty(scheduler):
    view = GraphView("http://[bad", MemorySurface(), scheduler=scheduler)

    assert await view.load() is False
    assert not view.mounted
    assert not scheduler.has_pending


@pytest.mark.asyncio
async def test_unresolved_link_mounts_nothing(scheduler):
    payload = {
        "nodes": [{"id": "a", "label": "A"}],
        "links": [{"source": "a", "target": "ghost"}],
    }
    view, surface = _view({"bad.json": payload}, scheduler)

    assert await view.load() is False
    assert not view.mounted
    assert surface.primitives == {}


@pytest.mark.asyncio
async def test_schema_error_mounts_nothing(scheduler):
    view, surface = _view({"bad.json": {"nodes": [{"id": "a"}], "links": []}}, scheduler)
    assert await view.load() is False
    assert not view.mounted


@pytest.mark.asyncio
async def test_empty_graph_is_not_mounted(scheduler):
    view, surface = _view({"empty.json": {"Source": 1}}, scheduler)
    assert await view.load() is False
    assert not view.mounted
    assert not scheduler.has_pending


@pytest.mark.asyncio
async def test_reload_replaces_previous_graph(raw_rows, graph_payload, scheduler):
    view, surface = _view({"rows.json": raw_rows, "graph.json": graph_payload}, scheduler)
    await view.load()
    first = view.simulation

    assert await view.set_data_url("graph.json") is True

    assert view.data_url == "graph.json"
    assert first.state is SimulationState.STOPPED
    assert view.simulation is not first
    assert len(surface.of_kind("circle")) == 3
    assert {p.key for p in surface.of_kind("circle")} == {"a", "b", "acme"}


@pytest.mark.asyncio
async def test_stale_load_is_discarded(raw_rows, graph_payload, scheduler):
    gate = asyncio.Event()
    view, surface = _view(
        {"slow.json": raw_rows, "fast.json": graph_payload},
        scheduler,
        gates={"slow.json": gate},
    )

    slow = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    assert await view.set_data_url("fast.json") is True

    gate.set()
    assert await slow is False

    assert view.data_url == "fast.json"
    assert {p.key for p in surface.of_kind("circle")} == {"a", "b", "acme"}


@pytest.mark.asyncio
async def test_unmount_stops_ticks_and_releases_primitives(raw_rows, scheduler):
    view, surface = _view({"rows.json": raw_rows}, scheduler)
    await view.load()
    sim = view.simulation
    ticks: list[int] = []
    sim.on_tick(ticks.append)
    scheduler.run_frame()

    view.unmount()

    assert surface.primitives == {}
    assert not scheduler.has_pending
    assert scheduler.run_frame() is False
    assert ticks == [1]
    assert sim.state is SimulationState.STOPPED
    view.unmount()


@pytest.mark.asyncio
async def test_close_discards_inflight_load(raw_rows, scheduler):
    gate = asyncio.Event()
    view, surface = _view({"slow.json": raw_rows}, scheduler, gates={"slow.json": gate})

    pending = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    view.close()
    gate.set()

    assert await pending is False
    assert not view.mounted
    assert surface.primitives == {}


@pytest.mark.asyncio
async def test_mount_hooks_run_around_lifecycle(raw_rows, scheduler):
    view, _ = _view({"rows.json": raw_rows}, scheduler)
    events: list[tuple[str, bool]] = []
    view.on_mount(lambda v: events.append(("mount", v.drag is not None)))
    view.on_unmount(lambda v: events.append(("unmount", v.simulation is not None)))

    await view.load()
    view.unmount()

    assert events == [("mount", True), ("unmount", True)]


def test_unmount_cancels_active_drag(graph_payload, scheduler):
    view, _ = _view({"graph.json": graph_payload}, scheduler)
    view.mount(GraphData.model_validate(graph_payload))
    nodes = view.simulation.nodes
    view.drag.drag_start(0)

    view.unmount()

    assert not nodes[0].pinned
