"""
Error types and input validation for the Manhattan routing engine.

Provides the exceptions raised by the layout functions and reusable
validators that produce clear error messages for the raw (JSON) parameters
received by the MCP server tools.
"""

from __future__ import annotations

import math
from typing import Any


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidDirectionError(ValidationError):
    """Raised for an unsupported direction or direction pair."""


class DegenerateGeometryError(ValidationError):
    """Raised for shapes on which routing is undefined.

    Zero or negative dimensions, or two shapes sharing the same center.
    """


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a finite numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if not math.isfinite(val):
        raise ValidationError(f"'{field_name}' must be finite, got {val}.")
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_non_negative_number(value: Any, field_name: str) -> float:
    return validate_number(value, field_name, min_val=0)


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


# ---------------------------------------------------------------------------
# Composite / domain validators
# ---------------------------------------------------------------------------

_ROUTE_ACTIONS = {"CONNECT_POINTS", "CONNECT_RECTANGLES", "REPAIR"}
_INSPECT_ACTIONS = {"DIRECTIONS", "DOCKING_POINT", "OUTLINE", "SEGMENTS"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


def validate_point_dict(value: Any, field_name: str) -> dict:
    """Validate a point object ``{"x", "y"}`` with an optional ``original``.

    Returns a normalized copy with float coordinates.
    """
    validate_dict(value, field_name)
    for key in ("x", "y"):
        if key not in value:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
    point: dict[str, Any] = {
        "x": validate_number(value["x"], f"{field_name}.x"),
        "y": validate_number(value["y"], f"{field_name}.y"),
    }
    original = value.get("original")
    if original is not None:
        validate_dict(original, f"{field_name}.original")
        for key in ("x", "y"):
            if key not in original:
                raise ValidationError(
                    f"'{field_name}.original' missing required key '{key}'."
                )
        point["original"] = {
            "x": validate_number(original["x"], f"{field_name}.original.x"),
            "y": validate_number(original["y"], f"{field_name}.original.y"),
        }
    return point


def validate_rect_dict(value: Any, field_name: str) -> dict:
    """Validate a rectangle object ``{"x", "y", "width", "height"}``.

    Malformed values raise :class:`ValidationError`; zero or negative
    dimensions raise :class:`DegenerateGeometryError`.
    """
    validate_dict(value, field_name)
    for key in ("x", "y", "width", "height"):
        if key not in value:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
    rect = {key: validate_number(value[key], f"{field_name}.{key}")
            for key in ("x", "y", "width", "height")}
    if rect["width"] <= 0 or rect["height"] <= 0:
        raise DegenerateGeometryError(
            f"'{field_name}' must have a positive size, got "
            f"{rect['width']}x{rect['height']}."
        )
    return rect


def validate_waypoints(value: Any, field_name: str = "waypoints") -> list[dict]:
    """Validate a list of point objects."""
    validate_list(value, field_name)
    return [validate_point_dict(p, f"{field_name}[{i}]") for i, p in enumerate(value)]


def validate_optional_string(value: Any, field_name: str) -> str | None:
    """Empty strings and ``None`` mean "not supplied"."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string, got {type(value).__name__}."
        )
    return value
