"""Total accessors over raw flow-diagram nodes.

Nodes arrive as free-form JSON produced by the editor. Every accessor here
tolerates missing or mistyped fields and falls back to a documented default
instead of raising.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_NODE_WIDTH = 180.0
DEFAULT_NODE_HEIGHT = 100.0


def to_number(value: Any, fallback: float) -> float:
    """Coerce *value* to a finite float, or return *fallback*.

    Booleans are not numbers here; numeric strings ("12.5") are, but not
    underscore-grouped ones ("1_000").
    """
    if isinstance(value, bool) or (isinstance(value, str) and "_" in value):
        return fallback
    if isinstance(value, (int, float)) or (isinstance(value, str) and value.strip()):
        try:
            parsed = float(value)
        except (ValueError, OverflowError):
            return fallback
        return parsed if math.isfinite(parsed) else fallback
    return fallback


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def normalize_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Selection:
    """What a selector node has picked and which group it belongs to."""

    group_id: str
    name: str
    avatar: str
    library_tag: str
    entry_library: str


@dataclass(frozen=True)
class NodeView:
    raw: Mapping[str, Any]

    @classmethod
    def from_raw(cls, node: Any) -> "NodeView":
        return cls(as_mapping(node))

    @property
    def id(self) -> Any:
        return self.raw.get("id")

    @property
    def type(self) -> str:
        value = self.raw.get("type")
        return value if isinstance(value, str) else ""

    @property
    def properties(self) -> Mapping[str, Any]:
        return as_mapping(self.raw.get("properties"))

    @property
    def position(self) -> Position:
        return Position(to_number(self.raw.get("x"), 0.0), to_number(self.raw.get("y"), 0.0))

    @property
    def size(self) -> Size:
        # The first field present in the chain wins, even if it turns out unparsable.
        props = self.properties
        style = as_mapping(props.get("style"))
        width = _first_present(self.raw.get("width"), style.get("width"), props.get("width"))
        height = _first_present(self.raw.get("height"), style.get("height"), props.get("height"))
        return Size(to_number(width, DEFAULT_NODE_WIDTH), to_number(height, DEFAULT_NODE_HEIGHT))

    @property
    def selection(self) -> Selection:
        props = self.properties
        meta = as_mapping(props.get("meta"))
        selected = as_mapping(props.get("selectedAsset"))
        return Selection(
            group_id=normalize_text(meta.get("groupId")),
            name=normalize_text(selected.get("name")),
            avatar=normalize_text(selected.get("avatar")),
            library_tag=normalize_text(props.get("assetLibrary")),
            entry_library=normalize_text(selected.get("library")),
        )

    def top_left(self) -> Position:
        pos = self.position
        size = self.size
        return Position(pos.x - size.width / 2, pos.y - size.height / 2)
