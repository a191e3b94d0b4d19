from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from game_types import Color, Point


@dataclass(frozen=True)
class LevelSpec:
    level: int
    path_width_px: int
    has_timer: bool
    timer_seconds: int  # 0 when has_timer is False
    move_speed: Optional[float]  # None -> physics default
    maze: str
    difficulty: str


@dataclass(frozen=True)
class PhysicsConfig:
    move_speed: float = 1.0
    friction: float = 0.95
    idle_epsilon: float = 0.05
    idle_drift_factor: float = 0.2
    radius_margin: float = 10.0
    collision_radius: float = 8.0
    entry_velocity: Tuple[float, float] = (0.5, 0.0)
    pointer_dead_zone: float = 80.0
    pointer_scale: float = 0.6
    touch_dead_zone: float = 20.0
    touch_scale: float = 0.7
    touch_damping: float = 0.9


@dataclass(frozen=True)
class MazeConfig:
    min_cell_size: float = 15.0
    max_cell_size: float = 25.0
    cells_across: int = 40
    max_canvas: Tuple[float, float] = (800.0, 600.0)
    canvas_fraction: Tuple[float, float] = (0.9, 0.8)
    exit_zone: float = 60.0


@dataclass(frozen=True)
class RulesConfig:
    penalty_threshold: int = 6
    penalty_levels: int = 2
    completion_delay_ms: int = 1000
    messages_from_level: int = 4


@dataclass(frozen=True)
class MessagesConfig:
    haunting: Tuple[str, ...]
    subliminal: Tuple[str, ...]
    haunting_every_ms: Tuple[int, int] = (8000, 15000)
    haunting_show_ms: int = 3000
    subliminal_every_ms: Tuple[int, int] = (15000, 35000)
    subliminal_show_ms: int = 200


@dataclass(frozen=True)
class Palette:
    background: Color
    maze_wall: Color
    maze_wall_glow: Color
    player: Color
    player_glow: Color
    text_primary: Color
    text_secondary: Color
    ui_accent: Color


@dataclass(frozen=True)
class WindowConfig:
    width: int
    height: int
    title: str
    fps: int
    resizable: bool


@dataclass(frozen=True)
class GameConfig:
    window: WindowConfig
    physics: PhysicsConfig
    maze: MazeConfig
    rules: RulesConfig
    messages: MessagesConfig
    colors: Palette
    levels: Tuple[LevelSpec, ...]
    progress_file: Path
    progress_max_age_days: float = 7.0

    def level_spec(self, level: int) -> LevelSpec:
        """Return the LevelSpec for a 1-based level ordinal."""
        return self.levels[level - 1]

    @property
    def final_level(self) -> int:
        return len(self.levels)


@dataclass(frozen=True)
class ProgressSnapshot:
    """What gets written to disk after every death or completion."""

    level: int
    avatar_position: Point
    timer_remaining: int
    timestamp: str  # ISO-8601, seconds precision

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "avatar_position": {
                "x": self.avatar_position[0],
                "y": self.avatar_position[1],
            },
            "timer_remaining": self.timer_remaining,
            "timestamp": self.timestamp,
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "ProgressSnapshot":
        """Build a snapshot from parsed JSON.

        Raises:
            KeyError, TypeError, ValueError: If the payload is malformed.
        """
        pos = raw["avatar_position"]
        return ProgressSnapshot(
            level=int(raw["level"]),
            avatar_position=(float(pos["x"]), float(pos["y"])),
            timer_remaining=int(raw.get("timer_remaining", 0)),
            timestamp=str(raw["timestamp"]),
        )
