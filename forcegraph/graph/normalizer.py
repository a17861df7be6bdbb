"""Convert Neo4j relationship exports into the internal node/link schema."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from forcegraph.models.schemas import (
    DEFAULT_LINK_TYPE,
    DEFAULT_NODE_TYPE,
    GraphData,
    LinkRecord,
    NodeRecord,
)
from forcegraph.utils.exceptions import MalformedGraphError
from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)


def canonical_node_id(value: int | float) -> str:
    """String form of a numeric endpoint; integral floats drop the fraction."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_endpoint(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def normalize_relationships(raw: Any) -> GraphData:
    """Build a deduplicated node set and one link per valid relationship row.

    Rows look like ``{"Source": 1, "Target": 2, "RelationshipType": "KNOWS"}``.
    Rows without numeric ``Source``/``Target`` are skipped; nodes appear in
    first-encounter order so repeated runs produce identical output.
    """
    if not isinstance(raw, list):
        logger.warning("raw_data_not_a_list", received=type(raw).__name__)
        return GraphData()

    node_ids: dict[str, None] = {}
    links: list[LinkRecord] = []
    skipped = 0

    for position, row in enumerate(raw):
        if not isinstance(row, Mapping) or not (
            _is_endpoint(row.get("Source")) and _is_endpoint(row.get("Target"))
        ):
            skipped += 1
            logger.warning("relationship_skipped", position=position, row=row)
            continue

        source = canonical_node_id(row["Source"])
        target = canonical_node_id(row["Target"])
        node_ids.setdefault(source)
        node_ids.setdefault(target)

        rel_type = row.get("RelationshipType")
        links.append(LinkRecord(
            source=source,
            target=target,
            type=rel_type if isinstance(rel_type, str) and rel_type else DEFAULT_LINK_TYPE,
        ))

    nodes = [
        NodeRecord(id=node_id, label=f"Node {node_id}", type=DEFAULT_NODE_TYPE)
        for node_id in node_ids
    ]
    logger.info(
        "relationships_normalized",
        rows=len(raw),
        skipped=skipped,
        nodes=len(nodes),
        links=len(links),
    )
    return GraphData(nodes=nodes, links=links)


def coerce_graph_payload(payload: Any) -> GraphData:
    """Accept either the raw export (a list) or the internal ``{nodes, links}`` schema."""
    if isinstance(payload, list):
        return normalize_relationships(payload)

    if isinstance(payload, Mapping) and ("nodes" in payload or "links" in payload):
        try:
            return GraphData.model_validate(payload)
        except ValidationError as exc:
            raise MalformedGraphError(
                f"graph payload failed validation ({exc.error_count()} errors)"
            ) from exc

    logger.warning("graph_payload_unrecognized", received=type(payload).__name__)
    return GraphData()
