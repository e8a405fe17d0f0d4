"""
Manhattan MCP Server — orthogonal connection routing via Model Context Protocol.

Exposes 2 tools that let a diagram editor (or an LLM agent driving one)
route connections between shapes and repair them after a shape moved.

Tools:
  1. route    — connect_points, connect_rectangles, repair
  2. inspect  — read-only: directions, docking_point, outline, segments
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from manhattan_mcp.layout import (
    OUTLINE_OFFSET,
    connect_points,
    connect_rectangles,
    get_directions,
    get_docking_point,
    get_orientation,
    get_outline_bounds,
)
from manhattan_mcp.layout_engine import (
    LayoutEngineConfig,
    classify_segments,
    is_free_flow,
    repair_connection,
)
from manhattan_mcp.models import Point, Rect
from manhattan_mcp.validation import (
    ValidationError,
    validate_action,
    validate_non_negative_number,
    validate_optional_string,
    validate_point_dict,
    validate_rect_dict,
    validate_waypoints,
    _INSPECT_ACTIONS,
    _ROUTE_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging: suppress routine FastMCP INFO messages that editors show
# as warnings (they go to stderr).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("manhattan-mcp")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "manhattan-mcp",
    instructions=(
        "MCP server for orthogonal (Manhattan) connection routing.\n\n"
        "=== ONLY 2 TOOLS — use the 'action' parameter to pick the operation ===\n\n"
        "1. route(action, ...) — connect_points, connect_rectangles, repair.\n"
        "2. inspect(action, ...) — read-only: directions, docking_point,\n"
        "   outline, segments.\n\n"
        "=== RULES ===\n"
        "- Points are {x, y}; rectangles are {x, y, width, height}.\n"
        "- Direction pairs are exactly 'h:h', 'h:v', 'v:h' or 'v:v'.\n"
        "- Sides are 'top', 'right', 'bottom' or 'left'.\n"
        "- Keep the 'original' field of returned points and send it back on\n"
        "  the next repair; it marks points docked to a shape center.\n"
        "- Call repair once per move, with the waypoints it returned last.\n"
    ),
)


# ===================================================================
# RESOURCES
# ===================================================================

@mcp.resource("manhattan://guide")
def routing_guide() -> str:
    """Guide to direction pairs and the repair rules."""
    return """# Manhattan Routing Guide

## Direction pairs

- h:h  leave horizontally, arrive horizontally (two bends at the x midpoint)
- v:v  leave vertically, arrive vertically (two bends at the y midpoint)
- h:v  leave horizontally, arrive vertically (one bend)
- v:h  leave vertically, arrive horizontally (one bend)

Points sharing an x or y coordinate are connected straight, without bends.

## Automatic directions

Shapes above/below each other are connected v:v, shapes side by side h:h.
Shapes whose gap along one axis is below the tolerance (default 20px) count
as stacked along the other axis.

## Repair

- Send the last waypoints (with their 'original' fields) and the new shape
  bounds; only the side of the moved shape changes.
- Bends next to a moved endpoint follow it along one axis.
- Bends that end up on a shape, or on top of each other, are removed.
- Diagonal (free-flow) segments are never straightened.
- With no bends to keep, the connection is laid out from scratch.
"""


# ===================================================================
# TOOL 1: route
# ===================================================================

@mcp.tool()
def route(
    action: str,
    start: Optional[dict[str, Any]] = None,
    end: Optional[dict[str, Any]] = None,
    source: Optional[dict[str, Any]] = None,
    target: Optional[dict[str, Any]] = None,
    waypoints: Optional[list[dict[str, Any]]] = None,
    direction_pair: str = "",
    start_direction: str = "",
    end_direction: str = "",
    tolerance: Optional[float] = None,
) -> str:
    """Route or repair an orthogonal connection.

    Actions:
      connect_points     — Connect two points. Params: start, end, direction_pair.
      connect_rectangles — Connect two shapes. Params: source, target,
                           start_direction, end_direction, tolerance.
      repair             — Repair a connection after a shape moved. Params:
                           source, target, waypoints, start_direction,
                           end_direction, tolerance.

    Args:
        action: One of: connect_points, connect_rectangles, repair.
        start: Start point {x, y} for connect_points.
        end: End point {x, y} for connect_points.
        source: Source shape bounds {x, y, width, height}.
        target: Target shape bounds {x, y, width, height}.
        waypoints: Previous waypoints (with 'original' where present).
        direction_pair: 'h:h', 'h:v', 'v:h' or 'v:v' (connect_points).
        start_direction: Docking side on the source (top/right/bottom/left).
        end_direction: Docking side on the target (top/right/bottom/left).
        tolerance: Minimum gap (px) for shapes to count as side by side.

    Returns:
        JSON array of points, or an error string.
    """
    try:
        action = validate_action(action, "route", _ROUTE_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    try:
        if action == "connect_points":
            a = Point.from_dict(validate_point_dict(start, "start"))
            b = Point.from_dict(validate_point_dict(end, "end"))
            pair = validate_optional_string(direction_pair, "direction_pair")
            result = connect_points(a, b, pair)

        else:
            src = Rect.from_dict(validate_rect_dict(source, "source"))
            tgt = Rect.from_dict(validate_rect_dict(target, "target"))
            first = validate_optional_string(start_direction, "start_direction")
            last = validate_optional_string(end_direction, "end_direction")
            cfg = _engine_config(tolerance)

            if action == "connect_rectangles":
                result = connect_rectangles(src, tgt, first, last, cfg)
            else:
                previous = [Point.from_dict(p) for p in validate_waypoints(waypoints or [])]
                result = repair_connection(src, tgt, previous, first, last, cfg)
    except ValidationError as exc:
        logger.warning("route(%s) rejected: %s", action, exc.message)
        return f"Error: {exc.message}"

    return json.dumps([p.to_dict() for p in result], indent=2)


# ===================================================================
# TOOL 2: inspect
# ===================================================================

@mcp.tool()
def inspect(
    action: str,
    source: Optional[dict[str, Any]] = None,
    target: Optional[dict[str, Any]] = None,
    rect: Optional[dict[str, Any]] = None,
    direction: str = "",
    waypoints: Optional[list[dict[str, Any]]] = None,
    offset: float = OUTLINE_OFFSET,
    tolerance: Optional[float] = None,
) -> str:
    """Read-only geometry queries.

    Actions:
      directions    — Direction pair and orientation between two shapes.
                      Params: source, target, tolerance.
      docking_point — Where a connection docks on a side of a shape.
                      Params: rect, direction.
      outline       — Bounds of the selection outline around a shape.
                      Params: rect, offset.
      segments      — Axis of every segment of a polyline. Params: waypoints.

    Args:
        action: One of: directions, docking_point, outline, segments.
        source: Source shape bounds {x, y, width, height}.
        target: Target shape bounds {x, y, width, height}.
        rect: Shape bounds for docking_point / outline.
        direction: Side for docking_point (top/right/bottom/left).
        waypoints: Polyline for segments.
        offset: Outline distance from the shape in px.
        tolerance: Minimum gap (px) for shapes to count as side by side.

    Returns:
        JSON data, or an error string.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    try:
        if action == "directions":
            src = Rect.from_dict(validate_rect_dict(source, "source"))
            tgt = Rect.from_dict(validate_rect_dict(target, "target"))
            cfg = _engine_config(tolerance)
            padding = cfg.tolerance_for(src, tgt)
            return json.dumps({
                "directions": get_directions(src, tgt, padding).value,
                "orientation": get_orientation(tgt, src, padding),
            }, indent=2)

        elif action == "docking_point":
            shape = Rect.from_dict(validate_rect_dict(rect, "rect"))
            side = validate_optional_string(direction, "direction")
            return json.dumps(get_docking_point(shape, side).to_dict(), indent=2)

        elif action == "outline":
            shape = Rect.from_dict(validate_rect_dict(rect, "rect"))
            margin = validate_non_negative_number(offset, "offset")
            return json.dumps(get_outline_bounds(shape, margin).to_dict(), indent=2)

        else:
            points = [Point.from_dict(p) for p in validate_waypoints(waypoints or [])]
            return json.dumps({
                "segments": classify_segments(points),
                "free_flow": is_free_flow(points),
            }, indent=2)
    except ValidationError as exc:
        logger.warning("inspect(%s) rejected: %s", action, exc.message)
        return f"Error: {exc.message}"


# ===================================================================
# Internal helpers
# ===================================================================

def _engine_config(tolerance: Any) -> LayoutEngineConfig:
    """Build the engine config, applying an optional tolerance override."""
    if tolerance is None:
        return LayoutEngineConfig()
    return LayoutEngineConfig(tolerance=validate_non_negative_number(tolerance, "tolerance"))


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
