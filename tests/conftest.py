"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch, tmp_path):
    """Keep settings independent of the developer's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "console")
    monkeypatch.setenv("FETCH_MAX_ATTEMPTS", "3")


class ManualFrameScheduler:
    """Frame scheduler driven by the test: frames run only on ``run_frame``."""

    def __init__(self) -> None:
        self.pending: list[Callable[[], None] | None] = []
        self.cancelled = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        self.pending.append(callback)
        return len(self.pending) - 1

    def cancel(self, handle: int) -> None:
        if self.pending[handle] is not None:
            self.pending[handle] = None
            self.cancelled += 1

    @property
    def has_pending(self) -> bool:
        return any(cb is not None for cb in self.pending)

    def run_frame(self) -> bool:
        for i, callback in enumerate(self.pending):
            if callback is not None:
                self.pending[i] = None
                callback()
                return True
        return False

    def run_until_idle(self, limit: int = 10_000) -> int:
        frames = 0
        while frames < limit and self.run_frame():
            frames += 1
        return frames


@pytest.fixture
def scheduler() -> ManualFrameScheduler:
    return ManualFrameScheduler()


@pytest.fixture
def raw_rows() -> list[dict]:
    """A small Neo4j query table export."""
    return [
        {"Source": 1, "Target": 2, "RelationshipType": "KNOWS"},
        {"Source": 2, "Target": 3, "RelationshipType": "WORKS_AT"},
        {"Source": 3, "Target": 1},
        {"Source": 4, "Target": 2, "RelationshipType": "KNOWS"},
        {"Source": 5, "Target": 4, "RelationshipType": "OWNS"},
    ]


@pytest.fixture
def graph_payload() -> dict:
    """Internal graph JSON with optional presentation fields."""
    return {
        "nodes": [
            {"id": "a", "label": "Alice", "type": "Person", "size": 14, "color": "#ff8800"},
            {"id": "b", "label": "Bob", "type": "Person"},
            {"id": "acme", "label": "Acme", "type": "Company", "size": 20},
        ],
        "links": [
            {"source": "a", "target": "b", "type": "KNOWS", "weight": 4},
            {"source": "b", "target": "acme", "type": "WORKS_AT"},
        ],
    }
