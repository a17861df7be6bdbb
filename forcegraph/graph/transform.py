"""Batch conversion of a Neo4j query table export into graph JSON."""

from __future__ import annotations

import json
from pathlib import Path

from forcegraph.graph.normalizer import normalize_relationships
from forcegraph.models.schemas import GraphData
from forcegraph.utils.exceptions import TransportError
from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)


def transform_file(input_path: str | Path, output_path: str | Path) -> GraphData:
    """Read a raw export, normalize it and write the result as indented JSON.

    Raises:
        TransportError: The input cannot be read or is not valid JSON, or the
            output cannot be written. Nothing is written in that case.
    """
    src = Path(input_path)
    dst = Path(output_path)

    try:
        raw = json.loads(src.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportError(f"cannot read export {src}: {exc}") from exc

    graph = normalize_relationships(raw)

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(
            json.dumps(graph.to_json_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as exc:
        raise TransportError(f"cannot write graph {dst}: {exc}") from exc

    logger.info(
        "export_transformed",
        input=str(src),
        output=str(dst),
        nodes=len(graph.nodes),
        links=len(graph.links),
    )
    return graph
