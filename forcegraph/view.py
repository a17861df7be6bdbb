"""Graph view: loads a data locator and drives simulation, rendering and drag."""

from __future__ import annotations

from collections.abc import Callable

from forcegraph.graph.normalizer import coerce_graph_payload
from forcegraph.interaction.drag import DragController
from forcegraph.models.schemas import GraphData
from forcegraph.render.surface import DrawingSurface
from forcegraph.render.sync import RenderSync
from forcegraph.services.loader import DataLoader
from forcegraph.simulation.arena import NodeArena, resolve_links
from forcegraph.simulation.engine import ForceSimulation
from forcegraph.simulation.scheduler import FrameScheduler
from forcegraph.utils.exceptions import GraphSetupError, MalformedGraphError, TransportError
from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)

MountHook = Callable[["GraphView"], None]


class GraphView:
    """The visualization component.

    Its only configuration is the data locator. Surface, frame scheduler and
    loader are collaborators supplied by whoever hosts the view. Every load
    tears down the previous graph and runs normalize, simulate and render
    afresh; results of a load that has been superseded are discarded.
    """

    def __init__(
        self,
        data_url: str,
        surface: DrawingSurface,
        *,
        scheduler: FrameScheduler | None = None,
        loader: DataLoader | None = None,
        seed: int = 1,
    ) -> None:
        self._data_url = data_url
        self._surface = surface
        self._scheduler = scheduler
        self._loader = loader or DataLoader()
        self._seed = seed
        self._generation = 0
        self._unsubscribers: list[Callable[[], None]] = []
        self._mount_hooks: list[MountHook] = []
        self._unmount_hooks: list[MountHook] = []

        self.simulation: ForceSimulation | None = None
        self.sync: RenderSync | None = None
        self.drag: DragController | None = None

    @property
    def data_url(self) -> str:
        return self._data_url

    @property
    def mounted(self) -> bool:
        return self.simulation is not None

    def on_mount(self, hook: MountHook) -> None:
        self._mount_hooks.append(hook)

    def on_unmount(self, hook: MountHook) -> None:
        self._unmount_hooks.append(hook)

    async def load(self) -> bool:
        """Fetch, normalize and mount the current locator.

        Returns True when a graph was mounted. Transport, schema and setup
        failures are logged and leave the view empty.
        """
        self._generation += 1
        generation = self._generation
        url = self._data_url
        self.unmount()

        try:
            payload = await self._loader.fetch(url)
        except TransportError as exc:
            logger.error("graph_fetch_failed", url=url, error=str(exc))
            return False

        if generation != self._generation:
            logger.info("stale_load_discarded", url=url, generation=generation)
            return False

        try:
            return self.mount(coerce_graph_payload(payload))
        except (MalformedGraphError, GraphSetupError) as exc:
            logger.error("graph_setup_failed", url=url, error=str(exc))
            return False

    async def set_data_url(self, data_url: str) -> bool:
        self._data_url = data_url
        return await self.load()

    def mount(self, graph: GraphData) -> bool:
        """Resolve ``graph`` and start simulating it.

        Raises:
            GraphSetupError: duplicate node ids or unresolvable link endpoints;
                nothing is mounted.
        """
        self.unmount()
        if graph.is_empty:
            logger.warning("graph_empty", url=self._data_url)
            return False

        nodes = NodeArena.from_records(graph.nodes)
        links = resolve_links(nodes, graph.links)

        simulation = ForceSimulation(nodes, links, scheduler=self._scheduler, seed=self._seed)
        sync = RenderSync(self._surface, nodes, links)
        sync.bind()
        self._unsubscribers.append(simulation.on_tick(sync.update))

        self.simulation = simulation
        self.sync = sync
        self.drag = DragController(simulation)
        for hook in self._mount_hooks:
            hook(self)

        simulation.start()
        logger.info("graph_mounted", url=self._data_url, nodes=len(nodes), links=len(links))
        return True

    def unmount(self) -> None:
        """Stop ticking and release every primitive; safe to call repeatedly."""
        if self.simulation is None:
            return
        for hook in self._unmount_hooks:
            hook(self)
        if self.drag is not None:
            self.drag.cancel_all()
        self.simulation.stop()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        if self.sync is not None:
            self.sync.release()

        self.simulation = None
        self.sync = None
        self.drag = None
        logger.info("graph_unmounted", url=self._data_url)

    def close(self) -> None:
        """Unmount and invalidate any load still in flight."""
        self._generation += 1
        self.unmount()
