"""
Direction inference and orthogonal connection helpers.

These are the building blocks of Manhattan-style connection routing:
- Relative orientation of two shapes with a minimum-gap tolerance
- Direction pair selection (h:h, h:v, v:h, v:v) between two shapes
- Docking point projection from a shape center onto one of its sides
- Orthogonal bend construction between two points or two rectangles
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from manhattan_mcp.models import Direction, DirectionPair, Point, Rect
from manhattan_mcp.validation import DegenerateGeometryError


# Minimum gap (px) between two shapes before they count as side by side.
DEFAULT_TOLERANCE = 20

# Distance between a shape and its selection outline.
OUTLINE_OFFSET = 5


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class LayoutConfig:
    """Configuration for direction inference."""
    tolerance: float = DEFAULT_TOLERANCE  # Absolute minimum gap in px
    relative_tolerance: float = 0.0       # Fraction of the smallest shape side

    def tolerance_for(self, source: Rect, target: Rect) -> float:
        """Effective tolerance for a pair of shapes (the larger of both rules)."""
        smallest = min(source.width, source.height, target.width, target.height)
        return max(self.tolerance, self.relative_tolerance * smallest)


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def validate_rect(rect: Rect, name: str = "rect") -> Rect:
    """Reject shapes with zero or negative size."""
    if rect.width <= 0 or rect.height <= 0:
        raise DegenerateGeometryError(
            f"'{name}' must have a positive size, got {rect.width}x{rect.height}."
        )
    return rect


def points_aligned(a: Point, b: Point) -> Optional[str]:
    """Return ``"h"`` if *a* and *b* share a y coordinate, ``"v"`` if they
    share an x coordinate and ``None`` otherwise."""
    if a.y == b.y:
        return "h"
    if a.x == b.x:
        return "v"
    return None


def get_orientation(rect: Rect, reference: Rect, padding: float = 0) -> str:
    """Describe where *rect* lies relative to *reference*.

    Returns one of ``top``, ``right``, ``bottom``, ``left``, a diagonal such
    as ``top-right``, or ``intersect``. A side only counts once the gap
    between both boxes is at least *padding*.
    """
    top = rect.bottom + padding <= reference.y
    right = rect.x - padding >= reference.right
    bottom = rect.y - padding >= reference.bottom
    left = rect.right + padding <= reference.x

    vertical = "top" if top else ("bottom" if bottom else None)
    horizontal = "left" if left else ("right" if right else None)

    if vertical and horizontal:
        return f"{vertical}-{horizontal}"
    return vertical or horizontal or "intersect"


def get_directions(
    source: Rect,
    target: Rect,
    tolerance: float = DEFAULT_TOLERANCE,
) -> DirectionPair:
    """Choose the direction pair for connecting *source* to *target*.

    Shapes stacked above each other (with a horizontal gap smaller than
    *tolerance*) are connected ``v:v`` even when their centers are far apart
    horizontally; ``h:h`` would zig-zag across the stack. Side-by-side
    shapes are connected ``h:h``. Everything else goes along the axis with
    the larger center distance.
    """
    orientation = get_orientation(target, source, tolerance)

    if orientation in ("top", "bottom"):
        return DirectionPair.V_V
    if orientation in ("left", "right"):
        return DirectionPair.H_H

    dx = target.cx - source.cx
    dy = target.cy - source.cy
    if dx == 0 and dy == 0:
        raise DegenerateGeometryError(
            "Cannot infer directions between shapes sharing the center "
            f"({source.cx}, {source.cy})."
        )
    return DirectionPair.H_H if abs(dx) > abs(dy) else DirectionPair.V_V


def get_docking_sides(
    source: Rect,
    target: Rect,
    pair: DirectionPair,
) -> tuple[Direction, Direction]:
    """Pick the concrete (start, end) sides for each axis of *pair*."""
    ahead_x = target.cx >= source.cx
    ahead_y = target.cy >= source.cy

    if pair.start_axis == "h":
        start = Direction.RIGHT if ahead_x else Direction.LEFT
    else:
        start = Direction.BOTTOM if ahead_y else Direction.TOP

    if pair.end_axis == "h":
        end = Direction.LEFT if ahead_x else Direction.RIGHT
    else:
        end = Direction.TOP if ahead_y else Direction.BOTTOM

    return start, end


def get_docking_point(rect: Rect, direction: Union[Direction, str]) -> Point:
    """Project the center of *rect* onto the given side.

    The result is anchored: its ``original`` is the rectangle center.
    """
    side = Direction.parse(direction)
    center = rect.center

    if side is Direction.TOP:
        return Point(center.x, rect.y, center)
    if side is Direction.RIGHT:
        return Point(rect.right, center.y, center)
    if side is Direction.BOTTOM:
        return Point(center.x, rect.bottom, center)
    return Point(rect.x, center.y, center)


def get_docking_side(point: Point) -> Optional[Direction]:
    """Side an anchored docking point sits on, relative to its original."""
    if point.original is None:
        return None
    dx = point.x - point.original.x
    dy = point.y - point.original.y
    if dx == 0 and dy == 0:
        return None
    if abs(dx) >= abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.BOTTOM if dy > 0 else Direction.TOP


def get_outline_bounds(rect: Rect, offset: float = OUTLINE_OFFSET) -> Rect:
    """Bounds of the selection outline drawn around a shape."""
    return rect.expand(offset)


# ---------------------------------------------------------------------------
# Orthogonal connections
# ---------------------------------------------------------------------------

def _get_bendpoints(a: Point, b: Point, pair: DirectionPair) -> list[Point]:
    """Interior bends of the Manhattan path from *a* to *b*."""
    if pair is DirectionPair.H_V:
        return [Point(b.x, a.y)]
    if pair is DirectionPair.V_H:
        return [Point(a.x, b.y)]
    if pair is DirectionPair.H_H:
        mid_x = (a.x + b.x) / 2
        return [Point(mid_x, a.y), Point(mid_x, b.y)]
    # v:v
    mid_y = (a.y + b.y) / 2
    return [Point(a.x, mid_y), Point(b.x, mid_y)]


def connect_points(
    a: Point,
    b: Point,
    direction_pair: Union[DirectionPair, str, None] = None,
) -> list[Point]:
    """Connect two points with axis-aligned segments.

    Points already sharing an axis are connected directly. Otherwise the
    bends follow *direction_pair* (``h:h`` when omitted).

    Raises:
        InvalidDirectionError: *direction_pair* is not one of the four pairs.
    """
    pair = DirectionPair.parse(direction_pair) if direction_pair is not None else None

    if points_aligned(a, b):
        return [a, b]

    return [a, *_get_bendpoints(a, b, pair or DirectionPair.H_H), b]


def connect_rectangles(
    source: Rect,
    target: Rect,
    start_direction: Union[Direction, str, None] = None,
    end_direction: Union[Direction, str, None] = None,
    config: Optional[LayoutConfig] = None,
) -> list[Point]:
    """Connect two shapes with a Manhattan path.

    Missing directions are inferred from the relative position of the
    shapes. Both endpoints are docking points anchored to their shape
    center; the bends in between are not anchored.

    Raises:
        InvalidDirectionError: a direction is not a known side.
        DegenerateGeometryError: a shape has no area, or directions must be
            inferred for shapes sharing a center.
    """
    cfg = config or LayoutConfig()
    validate_rect(source, "source")
    validate_rect(target, "target")

    start = Direction.parse(start_direction) if start_direction is not None else None
    end = Direction.parse(end_direction) if end_direction is not None else None

    if start is None or end is None:
        pair = get_directions(source, target, cfg.tolerance_for(source, target))
        auto_start, auto_end = get_docking_sides(source, target, pair)
        start = start or auto_start
        end = end or auto_end

    return connect_points(
        get_docking_point(source, start),
        get_docking_point(target, end),
        DirectionPair.from_sides(start, end),
    )
