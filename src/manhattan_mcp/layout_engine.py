"""
Incremental repair of Manhattan connections.

When a connected shape moves, the existing waypoints are patched instead of
being recomputed, so bends the user dragged into place stay where they were:

1. Lift: measure both endpoints from their shape centers
2. Shift: move the bend next to a moved endpoint along with it
3. Cut: drop bends that ended up on top of a shape
4. Collapse: remove coincident and collinear bends
5. Dock: project moved endpoints back onto the shape boundary

Whenever no sensible partial repair exists the connection is laid out again
from scratch with :func:`~manhattan_mcp.layout.connect_rectangles`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Collection, Optional, Sequence, Union

from manhattan_mcp.layout import (
    LayoutConfig,
    connect_rectangles,
    get_docking_point,
    get_docking_side,
    points_aligned,
    validate_rect,
)
from manhattan_mcp.models import Direction, Point, Rect


logger = logging.getLogger("manhattan-mcp.repair")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class LayoutEngineConfig(LayoutConfig):
    """Configuration for connection repair."""
    intersection_threshold: float = 5  # Bends this close to a shape are cut
    collapse_tolerance: float = 1      # Bends this close together coincide


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------

def classify_segments(points: Sequence[Point]) -> list[Optional[str]]:
    """Axis of every segment: ``"h"``, ``"v"`` or ``None`` for free flow."""
    return [points_aligned(a, b) for a, b in zip(points, points[1:])]


def is_free_flow(points: Sequence[Point]) -> bool:
    """Whether any segment of the polyline is diagonal."""
    return any(axis is None for axis in classify_segments(points))


def shift_bendpoint(candidate: Point, old_peer: Point, new_peer: Point) -> Point:
    """Move *candidate* so it stays aligned with its peer after the peer
    moved from *old_peer* to *new_peer*.

    Only the coordinate perpendicular to the shared segment changes, which
    keeps the offset the user chose along the segment. Free-flow segments
    are left alone.
    """
    alignment = points_aligned(old_peer, candidate)

    if alignment == "v":
        dx = new_peer.x - old_peer.x
        return Point(candidate.x + dx, candidate.y) if dx else candidate
    if alignment == "h":
        dy = new_peer.y - old_peer.y
        return Point(candidate.x, candidate.y + dy) if dy else candidate
    return candidate


def _find_overlap(points: Sequence[Point], shapes: Sequence[Rect], threshold: float) -> Optional[int]:
    """Index of the bend farthest from ``points[0]`` lying on a shape."""
    for i in range(len(points) - 2, 0, -1):
        p = points[i]
        if any(shape.contains_point(p.x, p.y, threshold) for shape in shapes):
            return i
    return None


def shift_side(
    points: Sequence[Point],
    moved_to: Point,
    shapes: Sequence[Rect],
    threshold: float = 5,
) -> Optional[list[Point]]:
    """Repair the leading side of *points* after ``points[0]`` moved to *moved_to*.

    Bends overlapping one of *shapes* are cut together with everything
    between them and the moved end; the bend after the cut then takes the
    role of the old peer and the shift is repeated. Each round shortens the
    sequence, so this runs at most ``len(points)`` times.

    Returns ``None`` when fewer than three points would remain.
    """
    remaining = list(points)

    while len(remaining) >= 3:
        old_peer = remaining[0]
        shifted = [moved_to, shift_bendpoint(remaining[1], old_peer, moved_to), *remaining[2:]]

        cut = _find_overlap(shifted, shapes, threshold)
        if cut is None:
            return shifted
        remaining = shifted[cut:]

    return None


def _coincide(a: Point, b: Point, tolerance: float) -> bool:
    return abs(a.x - b.x) <= tolerance and abs(a.y - b.y) <= tolerance


def _is_redundant(prev: Point, cur: Point, nxt: Point, tolerance: float) -> bool:
    if _coincide(prev, cur, tolerance) or _coincide(cur, nxt, tolerance):
        return True
    same_x = abs(prev.x - cur.x) <= tolerance and abs(cur.x - nxt.x) <= tolerance
    same_y = abs(prev.y - cur.y) <= tolerance and abs(cur.y - nxt.y) <= tolerance
    return same_x or same_y


def remove_redundant_bends(
    points: Sequence[Point],
    tolerance: float = 1,
    fixed: Collection[int] = (),
) -> list[Point]:
    """Remove bends that coincide with a neighbor or lie on a straight run.

    Removing one bend can make its predecessor redundant too (stacked
    duplicates left behind by earlier edits), so the check is repeated
    backwards until the last kept bend is a real corner. Endpoints, bends
    whose index is in *fixed* and diagonal runs are kept as drawn.
    """
    if len(points) <= 2:
        return list(points)

    result: list[tuple[int, Point]] = [(0, points[0])]
    for i, p in enumerate(points[1:], start=1):
        while (
            len(result) >= 2
            and result[-1][0] not in fixed
            and _is_redundant(result[-2][1], result[-1][1], p, tolerance)
        ):
            result.pop()
        result.append((i, p))
    return [p for _, p in result]


def _touched_bends(count: int, start_moved: bool, end_moved: bool) -> set[int]:
    """Indices of the bends a side shift may have made redundant: the
    shifted bend and the first bend after it, for every moved side."""
    touched: set[int] = set()
    if start_moved:
        touched.update({1, 2})
    if end_moved:
        touched.update({count - 2, count - 3})
    return touched


def _dock_endpoint(old: Point, rect: Rect, neighbor: Optional[Point]) -> Point:
    """Place a moved endpoint on *rect*, facing *neighbor*."""
    center = rect.center
    if not old.is_anchored:
        return center

    alignment = points_aligned(center, neighbor) if neighbor is not None else None
    if alignment == "h":
        side = Direction.RIGHT if neighbor.x >= center.x else Direction.LEFT
    elif alignment == "v":
        side = Direction.BOTTOM if neighbor.y >= center.y else Direction.TOP
    else:
        side = get_docking_side(old)

    if side is None:
        return Point(center.x, center.y, center)
    return get_docking_point(rect, side)


def _keep_endpoint(old: Point, rect: Rect, neighbor: Point) -> Point:
    """Keep an unmoved endpoint unless its neighbor no longer lines up."""
    if points_aligned(old, neighbor) is not None or points_aligned(old.reference, neighbor) is None:
        return old
    return _dock_endpoint(old, rect, neighbor)


def _direction_changed(endpoint: Point, direction: Optional[Direction]) -> bool:
    if direction is None:
        return False
    current = get_docking_side(endpoint)
    return current is not None and current is not direction


# ---------------------------------------------------------------------------
# Repair
# ---------------------------------------------------------------------------

def repair_connection(
    source: Rect,
    target: Rect,
    waypoints: Optional[Sequence[Point]],
    start_direction: Union[Direction, str, None] = None,
    end_direction: Union[Direction, str, None] = None,
    config: Optional[LayoutEngineConfig] = None,
) -> list[Point]:
    """Repair a connection after *source* and/or *target* moved.

    *waypoints* is the last accepted polyline, endpoints included. Anchored
    endpoints (with ``original``) are measured from that original; endpoints
    without it are taken to be the shape's reference point themselves. Only
    the side whose shape moved is touched: the bend next to it is shifted
    along with the endpoint, bends that now overlap a shape are cut, and
    redundant bends are collapsed. The untouched side is returned as is.

    The connection is laid out from scratch when there are no bends to
    preserve, when an explicit direction differs from the side an endpoint
    currently docks on, or when the repair leaves no bend behind.

    The input sequence is never modified; a new list is returned.

    Raises:
        InvalidDirectionError: a direction is not a known side.
        DegenerateGeometryError: a shape has no area, or a fallback layout
            has to infer directions for shapes sharing a center.
    """
    cfg = config or LayoutEngineConfig()
    validate_rect(source, "source")
    validate_rect(target, "target")

    start = Direction.parse(start_direction) if start_direction is not None else None
    end = Direction.parse(end_direction) if end_direction is not None else None
    waypoints = list(waypoints or [])

    def relayout(reason: str) -> list[Point]:
        logger.debug("Relayout connection: %s", reason)
        return connect_rectangles(source, target, start, end, cfg)

    if len(waypoints) < 2:
        return relayout("no waypoints")

    first, last = waypoints[0], waypoints[-1]
    if _direction_changed(first, start) or _direction_changed(last, end):
        return relayout("docking direction changed")

    start_moved = first.reference != source.center
    end_moved = last.reference != target.center
    if not start_moved and not end_moved:
        return waypoints

    if len(waypoints) == 2:
        if is_free_flow(waypoints):
            return [
                _dock_endpoint(first, source, None) if start_moved else first,
                _dock_endpoint(last, target, None) if end_moved else last,
            ]
        return relayout("straight connection")

    logger.debug(
        "Repairing connection with %d waypoints (start moved: %s, end moved: %s, free flow: %s)",
        len(waypoints), start_moved, end_moved, is_free_flow(waypoints),
    )

    shapes = (source, target)
    points: Optional[list[Point]] = [first.reference, *waypoints[1:-1], last.reference]

    if start_moved:
        points = shift_side(points, source.center, shapes, cfg.intersection_threshold)
        if points is None:
            return relayout("start side collapsed")

    if end_moved:
        points = shift_side(points[::-1], target.center, shapes, cfg.intersection_threshold)
        if points is None:
            return relayout("end side collapsed")
        points.reverse()

    # bends on an untouched stretch stay as the user left them
    touched = _touched_bends(len(points), start_moved, end_moved)
    fixed = set(range(1, len(points) - 1)) - touched
    points = remove_redundant_bends(points, cfg.collapse_tolerance, fixed)
    if len(points) < 3:
        return relayout("no bends left")

    points[0] = _dock_endpoint(first, source, points[1]) if start_moved else _keep_endpoint(first, source, points[1])
    points[-1] = _dock_endpoint(last, target, points[-2]) if end_moved else _keep_endpoint(last, target, points[-2])

    # the repaired path must still leave through the requested sides
    if _direction_changed(points[0], start) or _direction_changed(points[-1], end):
        return relayout("repaired path docks on another side")
    return points
