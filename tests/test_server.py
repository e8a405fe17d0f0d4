"""Tests for the MCP server tools (2-tool architecture)."""

import json

from manhattan_mcp.server import inspect, route, routing_guide


SOURCE = {"x": 100, "y": 100, "width": 100, "height": 100}
TARGET = {"x": 200, "y": 400, "width": 100, "height": 100}


def test_connect_points() -> None:
    points = json.loads(route(action="connect_points", start={"x": 100, "y": 100},
                              end={"x": 200, "y": 200}, direction_pair="h:v"))
    assert points == [
        {"x": 100, "y": 100},
        {"x": 200, "y": 100},
        {"x": 200, "y": 200},
    ]


def test_connect_points_default_pair() -> None:
    points = json.loads(route(action="connect_points", start={"x": 100, "y": 100},
                              end={"x": 200, "y": 200}))
    # h:h bends at the x midpoint
    assert points[1] == {"x": 150, "y": 100}
    assert points[2] == {"x": 150, "y": 200}


def test_connect_points_aligned() -> None:
    points = json.loads(route(action="connect_points", start={"x": 0, "y": 50},
                              end={"x": 300, "y": 50}, direction_pair="v:v"))
    assert points == [{"x": 0, "y": 50}, {"x": 300, "y": 50}]


def test_connect_rectangles() -> None:
    points = json.loads(route(action="connect_rectangles", source=SOURCE, target=TARGET))
    assert points == [
        {"x": 150, "y": 200, "original": {"x": 150, "y": 150}},
        {"x": 150, "y": 300},
        {"x": 250, "y": 300},
        {"x": 250, "y": 400, "original": {"x": 250, "y": 450}},
    ]


def test_connect_rectangles_explicit_directions() -> None:
    points = json.loads(route(action="connect_rectangles", source=SOURCE, target=TARGET,
                              start_direction="right", end_direction="top"))
    assert points == [
        {"x": 200, "y": 150, "original": {"x": 150, "y": 150}},
        {"x": 250, "y": 150},
        {"x": 250, "y": 400, "original": {"x": 250, "y": 450}},
    ]


def test_repair_after_move() -> None:
    waypoints = json.loads(route(action="connect_rectangles", source=SOURCE, target=TARGET))
    moved = dict(TARGET, x=250)

    repaired = json.loads(route(action="repair", source=SOURCE, target=moved,
                                waypoints=waypoints))

    assert repaired == [
        {"x": 150, "y": 200, "original": {"x": 150, "y": 150}},
        {"x": 150, "y": 300},
        {"x": 300, "y": 300},
        {"x": 300, "y": 400, "original": {"x": 300, "y": 450}},
    ]

    # feeding the result back with unchanged shapes keeps it
    again = json.loads(route(action="repair", source=SOURCE, target=moved,
                             waypoints=repaired))
    assert again == repaired


def test_repair_without_waypoints_lays_out() -> None:
    repaired = json.loads(route(action="repair", source=SOURCE, target=TARGET))
    laid_out = json.loads(route(action="connect_rectangles", source=SOURCE, target=TARGET))
    assert repaired == laid_out


def test_inspect_directions() -> None:
    data = json.loads(inspect(action="directions", source=SOURCE, target=TARGET))
    assert data == {"directions": "v:v", "orientation": "bottom"}

    data = json.loads(inspect(action="directions", source=SOURCE,
                              target={"x": 400, "y": 100, "width": 100, "height": 100}))
    assert data == {"directions": "h:h", "orientation": "right"}


def test_inspect_directions_tolerance() -> None:
    target = {"x": 215, "y": 60, "width": 100, "height": 20}
    data = json.loads(inspect(action="directions", source=SOURCE, target=target))
    assert data == {"directions": "v:v", "orientation": "top"}

    data = json.loads(inspect(action="directions", source=SOURCE, target=target, tolerance=10))
    assert data == {"directions": "h:h", "orientation": "top-right"}


def test_inspect_docking_point() -> None:
    data = json.loads(inspect(action="docking_point",
                              rect={"x": 0, "y": 0, "width": 100, "height": 50},
                              direction="right"))
    assert data == {"x": 100, "y": 25, "original": {"x": 50, "y": 25}}


def test_inspect_outline() -> None:
    rect = {"x": 10, "y": 20, "width": 100, "height": 50}
    assert json.loads(inspect(action="outline", rect=rect)) == {
        "x": 5, "y": 15, "width": 110, "height": 60,
    }
    assert json.loads(inspect(action="outline", rect=rect, offset=0)) == rect


def test_inspect_segments() -> None:
    data = json.loads(inspect(action="segments", waypoints=[
        {"x": 0, "y": 0}, {"x": 0, "y": 10}, {"x": 20, "y": 30},
    ]))
    assert data == {"segments": ["v", None], "free_flow": True}


def test_routing_guide() -> None:
    guide = routing_guide()
    assert "h:v" in guide
    assert "Repair" in guide
