"""
Core geometry model classes for Manhattan connection routing.

Provides immutable points (optionally anchored to a shape center),
axis-aligned rectangles, docking directions and the four direction pairs,
plus their dict (JSON) representations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from manhattan_mcp.validation import InvalidDirectionError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Direction(Enum):
    """Side of a rectangle through which a connection docks."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def axis(self) -> str:
        """``"h"`` for left/right, ``"v"`` for top/bottom."""
        return "h" if self in (Direction.LEFT, Direction.RIGHT) else "v"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        if isinstance(value, Direction):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise InvalidDirectionError(
            f"unknown direction: <{value}>: expected one of top, right, bottom, left"
        )


class DirectionPair(Enum):
    """Axis combination of the start and end docking directions."""
    H_H = "h:h"
    H_V = "h:v"
    V_H = "v:h"
    V_V = "v:v"

    @property
    def start_axis(self) -> str:
        return self.value[0]

    @property
    def end_axis(self) -> str:
        return self.value[2]

    @classmethod
    def from_sides(cls, start: Direction, end: Direction) -> DirectionPair:
        return cls(f"{start.axis}:{end.axis}")

    @classmethod
    def parse(cls, value: Any) -> DirectionPair:
        """Parse the wire form (``"h:v"`` etc.), case-sensitive."""
        if isinstance(value, DirectionPair):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise InvalidDirectionError(
            f"unknown directions: <{value}>: directions must be specified as "
            "{a direction}:{b direction} (direction in h|v)"
        )


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D coordinate.

    ``original`` holds the shape center a docking point was projected from.
    Anchored points are shape-derived; points without it were placed by the
    user (or are plain bends produced by the connector).
    """
    x: float
    y: float
    original: Optional[Point] = None

    @property
    def is_anchored(self) -> bool:
        return self.original is not None

    @property
    def reference(self) -> Point:
        """The point this one is measured against when its shape moves."""
        return self.original if self.original is not None else self

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"x": self.x, "y": self.y}
        if self.original is not None:
            data["original"] = {"x": self.original.x, "y": self.original.y}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Point:
        original = data.get("original")
        return cls(
            data["x"],
            data["y"],
            cls(original["x"], original["y"]) if original is not None else None,
        )


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box of a shape."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(self.cx, self.cy)

    def expand(self, margin: float) -> Rect:
        """Grow the box by *margin* on every side."""
        return Rect(
            self.x - margin, self.y - margin,
            self.width + 2 * margin, self.height + 2 * margin,
        )

    def contains_point(self, px: float, py: float, margin: float = 0) -> bool:
        """Check if a point is inside this bounding box (with margin)."""
        return (
            self.x - margin <= px <= self.right + margin
            and self.y - margin <= py <= self.bottom + margin
        )

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rect:
        return cls(data["x"], data["y"], data["width"], data["height"])
