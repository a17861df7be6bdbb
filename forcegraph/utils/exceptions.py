"""Custom exception hierarchy for the graph viewer."""

from __future__ import annotations


class ForceGraphError(Exception):
    """Base exception for all viewer errors."""


class MalformedGraphError(ForceGraphError):
    """Payload claims the internal graph schema but fails validation."""


class GraphSetupError(ForceGraphError):
    """Graph cannot be handed to a simulation; the whole load is rejected."""


class UnresolvedLinkError(GraphSetupError):
    """A link endpoint does not name a node in the node set."""

    def __init__(self, link_index: int, endpoint: str, node_id: str) -> None:
        super().__init__(f"link {link_index}: {endpoint} {node_id!r} is not a known node id")
        self.link_index = link_index
        self.endpoint = endpoint
        self.node_id = node_id


class DuplicateNodeError(GraphSetupError):
    """Two nodes share the same id."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"duplicate node id {node_id!r}")
        self.node_id = node_id


class TransportError(ForceGraphError):
    """Graph data could not be fetched or read (network, status, file access)."""


class InteractionError(ForceGraphError):
    """Pointer gesture violates the drag protocol."""
