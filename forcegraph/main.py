"""Viewer entry points: a Matplotlib window, or a headless run to rest."""

from __future__ import annotations

import asyncio

from forcegraph.config import Settings, get_settings
from forcegraph.interaction.pointer import PointerDragBinding
from forcegraph.render.matplotlib_surface import MatplotlibSurface
from forcegraph.render.surface import MemorySurface
from forcegraph.services.loader import DataLoader
from forcegraph.simulation.engine import VIEWPORT_HEIGHT, VIEWPORT_WIDTH
from forcegraph.simulation.scheduler import AsyncioFrameScheduler, MatplotlibFrameScheduler
from forcegraph.utils.logging import get_logger, setup_logging
from forcegraph.view import GraphView

logger = get_logger(__name__)

DPI = 100


def create_view(data_url: str, settings: Settings | None = None):
    """Build the figure, surface and view; returns ``(figure, view)``."""
    import matplotlib.pyplot as plt

    settings = settings or get_settings()
    fig, ax = plt.subplots(figsize=(VIEWPORT_WIDTH / DPI, VIEWPORT_HEIGHT / DPI), dpi=DPI)
    fig.subplots_adjust(left=0, right=1, top=1, bottom=0)

    surface = MatplotlibSurface(ax, VIEWPORT_WIDTH, VIEWPORT_HEIGHT)
    view = GraphView(
        data_url,
        surface,
        scheduler=MatplotlibFrameScheduler(fig.canvas, settings.FRAME_INTERVAL_MS),
        loader=DataLoader.from_settings(settings),
    )

    bindings: list[PointerDragBinding] = []

    def bind_pointer(mounted: GraphView) -> None:
        binding = PointerDragBinding(fig.canvas, ax, mounted.simulation, mounted.drag)
        binding.connect()
        bindings.append(binding)

    def unbind_pointer(_: GraphView) -> None:
        while bindings:
            bindings.pop().disconnect()

    view.on_mount(bind_pointer)
    view.on_unmount(unbind_pointer)
    fig.canvas.mpl_connect("close_event", lambda _event: view.close())
    return fig, view


def run_viewer(data_url: str) -> bool:
    """Load ``data_url`` and block in the Matplotlib event loop until closed."""
    import matplotlib.pyplot as plt

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    fig, view = create_view(data_url, settings)
    mounted = asyncio.run(view.load())
    if not mounted:
        logger.warning("viewer_showing_empty_graph", url=data_url)
    plt.show()
    return mounted


async def settle_headless(
    data_url: str, settings: Settings | None = None, surface: MemorySurface | None = None
) -> GraphView | None:
    """Load ``data_url`` onto an in-memory surface and run the layout until it settles.

    Frames run back to back on the current asyncio loop. Returns the still
    mounted view, or None when nothing could be mounted.
    """
    settings = settings or get_settings()
    view = GraphView(
        data_url,
        surface or MemorySurface(),
        scheduler=AsyncioFrameScheduler(interval_ms=0),
        loader=DataLoader.from_settings(settings),
    )
    if not await view.load():
        return None

    settled = asyncio.Event()
    view.simulation.on_end(settled.set)
    await settled.wait()
    logger.info("headless_layout_settled", url=data_url, ticks=view.simulation.tick_count)
    return view


def layout_positions(view: GraphView) -> dict[str, list[float]]:
    return {node.id: [node.x, node.y] for node in view.simulation.nodes}


def run_headless(data_url: str) -> dict[str, list[float]] | None:
    """Settle ``data_url`` without a window; returns node positions keyed by id."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    async def _settle() -> dict[str, list[float]] | None:
        view = await settle_headless(data_url, settings)
        if view is None:
            return None
        positions = layout_positions(view)
        view.close()
        return positions

    return asyncio.run(_settle())
