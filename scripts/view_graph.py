"""Open the interactive force layout for a graph data file or URL.

Usage:
  python scripts/view_graph.py public/data/graph_data.json
  python scripts/view_graph.py http://localhost:3000/data/graph_data.json
  python scripts/view_graph.py public/data/graph_data.json --layout-out layout.json

With --layout-out no window is opened: the layout runs to rest and the node
positions are written to the given file as ``{id: [x, y]}``.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from forcegraph.main import run_headless, run_viewer


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Interactive force-directed graph viewer")
    parser.add_argument(
        "data_url",
        nargs="?",
        default="public/data/graph_data.json",
        help="Path or URL of a raw export or graph JSON file",
    )
    parser.add_argument("--layout-out", help="Settle without a window and write positions here")
    args = parser.parse_args(argv)

    if args.layout_out is None:
        return 0 if run_viewer(args.data_url) else 1

    positions = run_headless(args.data_url)
    if positions is None:
        return 1
    out = Path(args.layout_out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(positions, indent=2), encoding="utf-8")
    print(f"Layout written to {out}")
    print(f"  Nodes: {len(positions)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
