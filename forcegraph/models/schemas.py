"""Internal graph JSON schema consumed by the simulation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_NODE_TYPE = "Entity"
DEFAULT_LINK_TYPE = "related"


class NodeRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    label: str
    type: str = DEFAULT_NODE_TYPE
    size: float | None = Field(default=None, gt=0)
    color: str | None = None


class LinkRecord(BaseModel):
    """Link between two nodes, referencing endpoints by node id."""

    model_config = ConfigDict(extra="ignore")

    source: str
    target: str
    type: str = DEFAULT_LINK_TYPE
    weight: float | None = Field(default=None, ge=0)


class GraphData(BaseModel):
    nodes: list[NodeRecord] = Field(default_factory=list)
    links: list[LinkRecord] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_json_dict(self) -> dict:
        """Serialize with optional presentation fields omitted when unset."""
        return self.model_dump(exclude_none=True)
