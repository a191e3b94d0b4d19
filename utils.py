from __future__ import annotations

from typing import Any, Dict

from game_types import Color


def clamp_int(v: int, lo: int, hi: int) -> int:
    """Clamp an integer value into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def clamp_float(v: float, lo: float, hi: float) -> float:
    """Clamp a float value into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def as_color(value: Any, default: Color) -> Color:
    """Parse a value into an RGB color tuple.

    Accepts a list/tuple-like value with at least 3 items (r, g, b) or a
    "#rrggbb" hex string.

    Args:
        value: Raw color value from config.
        default: The color to return if parsing fails.

    Returns:
        A clamped (r, g, b) tuple in the range [0, 255].
    """
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        try:
            r = clamp_int(int(value[0]), 0, 255)
            g = clamp_int(int(value[1]), 0, 255)
            b = clamp_int(int(value[2]), 0, 255)
        except (TypeError, ValueError):
            return default
        return (r, g, b)
    if isinstance(value, str):
        txt = value.strip().lstrip("#")
        if len(txt) == 6:
            try:
                return (int(txt[0:2], 16), int(txt[2:4], 16), int(txt[4:6], 16))
            except ValueError:
                return default
    return default


def deep_get(d: Dict[str, Any], path: str, default: Any) -> Any:
    """Get a nested value from a dict using a dotted path.

    Args:
        d: Source dictionary.
        path: Dot-separated key path (e.g. "window.width").
        default: Value to return if any path segment is missing.

    Returns:
        The found value or default.
    """
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a new dict with override recursively merged over base.

    Nested dicts are merged key by key; any other value in override
    (lists included) replaces the base value.
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
