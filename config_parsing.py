from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models import (
    GameConfig,
    LevelSpec,
    MazeConfig,
    MessagesConfig,
    Palette,
    PhysicsConfig,
    RulesConfig,
    WindowConfig,
)
from utils import as_color, clamp_int, deep_get


DEFAULT_LEVELS: List[Dict[str, Any]] = [
    {
        "level": 1, "has_timer": False, "path_width": 40, "timer_seconds": 0,
        "maze": "Simple maze with wide paths for introduction",
        "difficulty": "Easy - Wide paths, simple layout, slower movement",
    },
    {
        "level": 2, "has_timer": False, "path_width": 35, "timer_seconds": 0,
        "maze": "Slightly more complex with narrow paths",
        "difficulty": "Easy-Medium - Narrower paths, basic turns, slower movement",
    },
    {
        "level": 3, "has_timer": False, "path_width": 30, "timer_seconds": 0,
        "maze": "More complex routing required",
        "difficulty": "Medium - Complex layout, multiple paths, slower movement",
    },
    {
        "level": 4, "has_timer": True, "path_width": 25, "timer_seconds": 45,
        "maze": "Narrow paths with timer pressure",
        "difficulty": "Hard - Timer active, narrow paths, slower movement",
    },
    {
        "level": 5, "has_timer": True, "path_width": 22, "timer_seconds": 35,
        "maze": "Very narrow with complex routing",
        "difficulty": "Hard - Faster timer, very narrow paths, slower movement",
    },
    {
        "level": 6, "has_timer": True, "path_width": 18, "timer_seconds": 30,
        "maze": "Extremely narrow with death penalty",
        "difficulty": "Extreme - Death sends back 2 levels, slower movement",
    },
    {
        "level": 7, "has_timer": True, "path_width": 15, "timer_seconds": 25,
        "maze": "Final challenge - most difficult",
        "difficulty": "Nightmare - Ultimate challenge, slower movement",
    },
]

DEFAULT_HAUNTING = (
    "The walls are watching...",
    "The blood remembers your mistakes...",
    "Fall once, and you'll lose everything.",
    "You're moving too slow...",
    "The darkness grows hungry...",
    "Your fear feeds the maze...",
    "Turn back while you still can...",
    "The exit is just an illusion...",
)
DEFAULT_SUBLIMINAL = (
    "Give up...",
    "You're too slow...",
    "Failure...",
    "Hopeless...",
    "Turn back...",
    "You can't win...",
)


def _float(raw: Any, default: float) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _pair(raw: Any, default: Tuple[float, float]) -> Tuple[float, float]:
    """Parse a 2-item list into a float pair."""
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        return _float(raw[0], default[0]), _float(raw[1], default[1])
    return default


def _int_range(raw: Any, default: Tuple[int, int]) -> Tuple[int, int]:
    """Parse [lo, hi] milliseconds, swapping if given backwards."""
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        lo, hi = _int(raw[0], default[0]), _int(raw[1], default[1])
        return (lo, hi) if lo <= hi else (hi, lo)
    return default


def _text_list(raw: Any, default: Sequence[str]) -> Tuple[str, ...]:
    if not isinstance(raw, list):
        return tuple(default)
    cleaned = tuple(str(x).strip() for x in raw if isinstance(x, str) and x.strip())
    return cleaned or tuple(default)


def parse_window_config(raw: Dict[str, Any]) -> WindowConfig:
    return WindowConfig(
        width=max(200, _int(deep_get(raw, "window.width", 900), 900)),
        height=max(200, _int(deep_get(raw, "window.height", 760), 760)),
        title=str(deep_get(raw, "window.title", "Dread Maze")),
        fps=clamp_int(_int(deep_get(raw, "window.fps", 60), 60), 10, 240),
        resizable=bool(deep_get(raw, "window.resizable", True)),
    )


def parse_physics_config(raw: Dict[str, Any]) -> PhysicsConfig:
    """Parse the avatar physics block; every knob defaults to the classic feel."""
    p = raw.get("physics", {})
    if not isinstance(p, dict):
        p = {}
    d = PhysicsConfig()
    return PhysicsConfig(
        move_speed=_float(p.get("move_speed"), d.move_speed),
        friction=_float(p.get("friction"), d.friction),
        idle_epsilon=_float(p.get("idle_epsilon"), d.idle_epsilon),
        idle_drift_factor=_float(p.get("idle_drift_factor"), d.idle_drift_factor),
        radius_margin=_float(p.get("radius_margin"), d.radius_margin),
        collision_radius=_float(p.get("collision_radius"), d.collision_radius),
        entry_velocity=_pair(p.get("entry_velocity"), d.entry_velocity),
        pointer_dead_zone=_float(deep_get(p, "pointer.dead_zone", None), d.pointer_dead_zone),
        pointer_scale=_float(deep_get(p, "pointer.scale", None), d.pointer_scale),
        touch_dead_zone=_float(deep_get(p, "touch.dead_zone", None), d.touch_dead_zone),
        touch_scale=_float(deep_get(p, "touch.scale", None), d.touch_scale),
        touch_damping=_float(deep_get(p, "touch.damping", None), d.touch_damping),
    )


def parse_maze_config(raw: Dict[str, Any]) -> MazeConfig:
    m = raw.get("maze", {})
    if not isinstance(m, dict):
        m = {}
    d = MazeConfig()
    lo = _float(m.get("min_cell_size"), d.min_cell_size)
    hi = _float(m.get("max_cell_size"), d.max_cell_size)
    return MazeConfig(
        min_cell_size=min(lo, hi),
        max_cell_size=max(lo, hi),
        cells_across=max(1, _int(m.get("cells_across"), d.cells_across)),
        max_canvas=_pair(m.get("max_canvas"), d.max_canvas),
        canvas_fraction=_pair(m.get("canvas_fraction"), d.canvas_fraction),
        exit_zone=_float(m.get("exit_zone"), d.exit_zone),
    )


def parse_rules_config(raw: Dict[str, Any]) -> RulesConfig:
    r = raw.get("rules", {})
    if not isinstance(r, dict):
        r = {}
    d = RulesConfig()
    return RulesConfig(
        penalty_threshold=_int(r.get("penalty_threshold"), d.penalty_threshold),
        penalty_levels=max(0, _int(r.get("penalty_levels"), d.penalty_levels)),
        completion_delay_ms=max(0, _int(r.get("completion_delay_ms"), d.completion_delay_ms)),
        messages_from_level=_int(r.get("messages_from_level"), d.messages_from_level),
    )


def parse_messages_config(raw: Dict[str, Any]) -> MessagesConfig:
    m = raw.get("messages", {})
    if not isinstance(m, dict):
        m = {}
    return MessagesConfig(
        haunting=_text_list(m.get("haunting"), DEFAULT_HAUNTING),
        subliminal=_text_list(m.get("subliminal"), DEFAULT_SUBLIMINAL),
        haunting_every_ms=_int_range(m.get("haunting_every_ms"), (8000, 15000)),
        haunting_show_ms=max(0, _int(m.get("haunting_show_ms"), 3000)),
        subliminal_every_ms=_int_range(m.get("subliminal_every_ms"), (15000, 35000)),
        subliminal_show_ms=max(0, _int(m.get("subliminal_show_ms"), 200)),
    )


def parse_palette(raw: Dict[str, Any]) -> Palette:
    c = raw.get("colors", {})
    if not isinstance(c, dict):
        c = {}
    return Palette(
        background=as_color(c.get("background"), (10, 10, 10)),
        maze_wall=as_color(c.get("maze_wall"), (26, 26, 26)),
        maze_wall_glow=as_color(c.get("maze_wall_glow"), (139, 0, 0)),
        player=as_color(c.get("player"), (255, 255, 255)),
        player_glow=as_color(c.get("player_glow"), (255, 255, 255)),
        text_primary=as_color(c.get("text_primary"), (220, 20, 60)),
        text_secondary=as_color(c.get("text_secondary"), (139, 0, 0)),
        ui_accent=as_color(c.get("ui_accent"), (102, 0, 0)),
    )


def _parse_level(raw: Dict[str, Any], ordinal: int) -> LevelSpec:
    has_timer = bool(raw.get("has_timer", False))
    timer_seconds = max(0, _int(raw.get("timer_seconds"), 0)) if has_timer else 0
    speed_raw = raw.get("move_speed")
    move_speed: Optional[float] = None
    if speed_raw is not None:
        move_speed = _float(speed_raw, 0.0) or None
    return LevelSpec(
        level=ordinal,
        path_width_px=max(1, _int(raw.get("path_width"), 20)),
        has_timer=has_timer and timer_seconds > 0,
        timer_seconds=timer_seconds,
        move_speed=move_speed,
        maze=str(raw.get("maze", "")),
        difficulty=str(raw.get("difficulty", "")),
    )


def parse_levels(raw: Dict[str, Any]) -> Tuple[LevelSpec, ...]:
    """Parse the level table.

    Entries are taken in list order and renumbered 1..N, so the ordinal
    stored in the file is informational only. Non-dict entries are skipped.
    """
    levels_raw = raw.get("levels")
    if not isinstance(levels_raw, list) or not levels_raw:
        levels_raw = DEFAULT_LEVELS
    entries = [e for e in levels_raw if isinstance(e, dict)] or DEFAULT_LEVELS
    return tuple(_parse_level(e, i + 1) for i, e in enumerate(entries))


def parse_game_config(raw: Dict[str, Any]) -> GameConfig:
    """Parse the whole merged config dict into a GameConfig."""
    return GameConfig(
        window=parse_window_config(raw),
        physics=parse_physics_config(raw),
        maze=parse_maze_config(raw),
        rules=parse_rules_config(raw),
        messages=parse_messages_config(raw),
        colors=parse_palette(raw),
        levels=parse_levels(raw),
        progress_file=Path(str(raw.get("progress_file", "progress.json"))),
        progress_max_age_days=max(0.0, _float(raw.get("progress_max_age_days"), 7.0)),
    )
