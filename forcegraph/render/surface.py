"""Drawing surface protocol, presentation constants and an in-memory surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Protocol

BACKGROUND = "#f0f8ff"
NODE_FILL = "#6495ed"
LINK_STROKE = "#778899"
LABEL_FILL = "#333"
LABEL_FONT_SIZE = 11
LABEL_OFFSET = (15.0, 4.0)


class DrawingSurface(Protocol):
    """Primitive factory the render sync layer writes into.

    Handles returned by ``add_*`` are opaque to callers and only passed back
    to ``move_*`` and ``remove``.
    """

    def add_line(self, key: Hashable, *, stroke: str, width: float) -> Any: ...

    def add_circle(self, key: Hashable, *, radius: float, fill: str) -> Any: ...

    def add_label(self, key: Hashable, text: str, *, font_size: float, fill: str) -> Any: ...

    def move_line(self, handle: Any, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def move_circle(self, handle: Any, x: float, y: float) -> None: ...

    def move_label(self, handle: Any, x: float, y: float) -> None: ...

    def remove(self, handle: Any) -> None: ...

    def flush(self) -> None: ...


@dataclass
class Primitive:
    kind: str
    key: Hashable
    attrs: dict[str, Any] = field(default_factory=dict)


class MemorySurface:
    """Keeps primitives as plain records; used headless and in tests."""

    def __init__(self) -> None:
        self.primitives: dict[int, Primitive] = {}
        self.flush_count = 0

    def _add(self, kind: str, key: Hashable, attrs: dict[str, Any]) -> Primitive:
        primitive = Primitive(kind=kind, key=key, attrs=attrs)
        self.primitives[id(primitive)] = primitive
        return primitive

    def add_line(self, key: Hashable, *, stroke: str, width: float) -> Primitive:
        return self._add("line", key, {"stroke": stroke, "width": width})

    def add_circle(self, key: Hashable, *, radius: float, fill: str) -> Primitive:
        return self._add("circle", key, {"r": radius, "fill": fill})

    def add_label(self, key: Hashable, text: str, *, font_size: float, fill: str) -> Primitive:
        return self._add("label", key, {"text": text, "font_size": font_size, "fill": fill})

    def move_line(self, handle: Primitive, x1: float, y1: float, x2: float, y2: float) -> None:
        handle.attrs.update(x1=x1, y1=y1, x2=x2, y2=y2)

    def move_circle(self, handle: Primitive, x: float, y: float) -> None:
        handle.attrs.update(cx=x, cy=y)

    def move_label(self, handle: Primitive, x: float, y: float) -> None:
        handle.attrs.update(x=x + LABEL_OFFSET[0], y=y + LABEL_OFFSET[1])

    def remove(self, handle: Primitive) -> None:
        self.primitives.pop(id(handle), None)

    def flush(self) -> None:
        self.flush_count += 1

    def of_kind(self, kind: str) -> list[Primitive]:
        return [p for p in self.primitives.values() if p.kind == kind]

    def get(self, kind: str, key: Hashable) -> Primitive | None:
        for primitive in self.primitives.values():
            if primitive.kind == kind and primitive.key == key:
                return primitive
        return None
