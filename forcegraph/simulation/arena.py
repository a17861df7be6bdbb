"""Node state arena and two-phase link resolution.

Nodes live in a single list indexed by position. The engine, the render sync
layer and the drag controller all address nodes by index, so there is exactly
one record per node and no shared references to juggle.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from forcegraph.models.schemas import LinkRecord, NodeRecord
from forcegraph.utils.exceptions import DuplicateNodeError, UnresolvedLinkError

DEFAULT_NODE_SIZE = 10.0


@dataclass(slots=True)
class NodeState:
    """One node's presentation fields plus the kinematic fields the engine owns."""

    index: int
    id: str
    label: str
    type: str
    size: float = DEFAULT_NODE_SIZE
    color: str | None = None
    x: float | None = None
    y: float | None = None
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None

    def pin(self, x: float | None, y: float | None) -> None:
        self.fx = x
        self.fy = y

    def unpin(self) -> None:
        self.fx = None
        self.fy = None


@dataclass(frozen=True, slots=True)
class ResolvedLink:
    """Link whose endpoints are arena indices."""

    index: int
    source: int
    target: int
    type: str
    weight: float | None = None


class NodeArena(Sequence[NodeState]):
    def __init__(self, nodes: Iterable[NodeState] = ()) -> None:
        self._nodes: list[NodeState] = []
        self._by_id: dict[str, int] = {}
        for node in nodes:
            self._append(node)

    @classmethod
    def from_records(cls, records: Iterable[NodeRecord]) -> NodeArena:
        arena = cls()
        for record in records:
            arena._append(NodeState(
                index=len(arena),
                id=record.id,
                label=record.label,
                type=record.type,
                size=record.size if record.size is not None else DEFAULT_NODE_SIZE,
                color=record.color,
            ))
        return arena

    def _append(self, node: NodeState) -> None:
        if node.id in self._by_id:
            raise DuplicateNodeError(node.id)
        node.index = len(self._nodes)
        self._by_id[node.id] = node.index
        self._nodes.append(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index):  # type: ignore[override]
        return self._nodes[index]

    def __iter__(self) -> Iterator[NodeState]:
        return iter(self._nodes)

    def index_of(self, node_id: str) -> int | None:
        return self._by_id.get(node_id)

    def positions(self) -> list[tuple[float | None, float | None]]:
        return [(node.x, node.y) for node in self._nodes]


def resolve_links(arena: NodeArena, links: Iterable[LinkRecord]) -> list[ResolvedLink]:
    """Turn id-based links into index-based links.

    Raises:
        UnresolvedLinkError: on the first endpoint missing from the arena; no
            partial result is returned.
    """
    resolved: list[ResolvedLink] = []
    for i, link in enumerate(links):
        source = arena.index_of(link.source)
        if source is None:
            raise UnresolvedLinkError(i, "source", link.source)
        target = arena.index_of(link.target)
        if target is None:
            raise UnresolvedLinkError(i, "target", link.target)
        resolved.append(ResolvedLink(
            index=i,
            source=source,
            target=target,
            type=link.type,
            weight=link.weight,
        ))
    return resolved
