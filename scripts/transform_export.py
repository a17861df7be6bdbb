"""Convert a Neo4j query table export into the viewer's graph JSON.

Usage:
  python scripts/transform_export.py
  python scripts/transform_export.py --input export.json --output public/data/graph_data.json

Paths default to TRANSFORM_INPUT_PATH / TRANSFORM_OUTPUT_PATH from the
environment (or .env).
"""

from __future__ import annotations

import argparse
import sys

from forcegraph.config import get_settings
from forcegraph.graph.transform import transform_file
from forcegraph.utils.exceptions import TransportError
from forcegraph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Transform a Neo4j relationship export into graph JSON")
    parser.add_argument("--input", default=settings.TRANSFORM_INPUT_PATH, help="Raw export JSON path")
    parser.add_argument("--output", default=settings.TRANSFORM_OUTPUT_PATH, help="Graph JSON output path")
    args = parser.parse_args(argv)

    setup_logging(log_level=settings.LOG_LEVEL, log_format="console")

    try:
        graph = transform_file(args.input, args.output)
    except TransportError as exc:
        logger.error("transform_failed", input=args.input, error=str(exc))
        return 1

    print("Transform complete.")
    print(f"  Input:  {args.input}")
    print(f"  Output: {args.output}")
    print(f"  Nodes:  {len(graph.nodes)}")
    print(f"  Links:  {len(graph.links)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
