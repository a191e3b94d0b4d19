"""
level_director.py

Owns the level state machine and the per-tick simulation order.

    IDLE -> GENERATING -> RUNNING -> COMPLETED -> GENERATING (next level)
                                  -> DEAD      -> GENERATING (restart)
                                  -> VICTORY   -> IDLE       (reset)

A tick drains queued death requests (timer expiry, external callers)
first, then integrates motion, resolves collisions and checks the exit.
Only a RUNNING session accepts a transition, so a death and a win
landing in the same tick resolve to whichever is applied first.
"""

from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, Optional, Tuple

from canvas import CanvasMetrics
from collision import CollisionResolver
from events import (
    Death,
    EventBus,
    LevelCompleted,
    LevelStarted,
    ProgressCleared,
    ProgressOffered,
    TimerExpired,
    TimerTick,
    Victory,
)
from game_types import Point
from maze_grid import Grid
from models import GameConfig, LevelSpec, ProgressSnapshot
from motion import Avatar, InputState, MotionIntegrator, TouchDrag
from path_carver import PathCarver, end_anchor, start_anchor
from reachability import ReachabilityValidator


logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    GENERATING = "generating"
    RUNNING = "running"
    COMPLETED = "completed"
    DEAD = "dead"
    VICTORY = "victory"


@dataclass
class GameSession:
    """Everything the simulation mutates, passed around explicitly."""

    metrics: CanvasMetrics
    level: int = 1
    phase: Phase = Phase.IDLE
    grid: Grid = field(default_factory=lambda: Grid(0, 0))
    path_width: int = 1
    avatar: Avatar = field(default_factory=Avatar)
    timed: bool = False  # the level being played (or just cleared) has a countdown
    timer_active: bool = False
    timer_remaining: int = 0
    penalty_applied: bool = False
    paused: bool = False

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING and not self.paused


def path_width_for(spec: LevelSpec, cell_size: float) -> int:
    """Corridor thickness in cells for a level at the given cell size."""
    return max(1, math.floor(spec.path_width_px / cell_size))


def spawn_point(path_width: int, cell_size: float) -> Point:
    """Pixel centre of the start anchor cell."""
    sx, sy = start_anchor(path_width)
    return (sx * cell_size + cell_size / 2, sy * cell_size + cell_size / 2)


def start_zone(path_width: int) -> Tuple[int, int, int, int]:
    """Half-open cell box (x0, y0, x1, y1) forced open around the spawn."""
    sx, sy = start_anchor(path_width)
    return (0, 0, sx + path_width + 2, sy + path_width + 2)


def end_zone(grid: Grid, path_width: int) -> Tuple[int, int, int, int]:
    """Half-open cell box forced open at the bottom-right exit."""
    ex, ey = end_anchor(grid, path_width)
    return (ex, ey, grid.width, grid.height)


def zone_cells(zone: Tuple[int, int, int, int]):
    x0, y0, x1, y1 = zone
    return [(x, y) for y in range(max(0, y0), y1) for x in range(max(0, x0), x1)]


def generate_level_grid(
    width: int,
    height: int,
    level: int,
    path_width: int,
    rng: random.Random,
) -> Grid:
    """Build a complete level grid: route, dead ends and both cleared zones."""
    grid = Grid.create(width, height)
    PathCarver(rng).carve_level(grid, level, path_width)
    grid.clear_rect(*start_zone(path_width))
    grid.clear_rect(*end_zone(grid, path_width))
    return grid


def in_exit_zone(pos: Point, metrics: CanvasMetrics) -> bool:
    left, top, _, _ = metrics.exit_rect()
    return pos[0] > left and pos[1] > top


class LevelDirector:
    """Drives one game session from level to level."""

    def __init__(
        self,
        config: GameConfig,
        metrics: CanvasMetrics,
        bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.bus = bus or EventBus()
        self.rng = rng or random.Random()
        self._now = now
        self.session = GameSession(metrics=metrics)
        self.integrator = MotionIntegrator(config.physics)
        self.resolver = CollisionResolver(config.physics.collision_radius)
        self.touch = TouchDrag(config.physics)
        self.validator = ReachabilityValidator()

        self._pending_deaths: Deque[str] = deque()
        self._countdown_ms = 0.0
        self._next_level_in_ms: Optional[float] = None

    # ----------------------------
    # Queries
    # ----------------------------

    @property
    def phase(self) -> Phase:
        return self.session.phase

    @property
    def level(self) -> int:
        return self.session.level

    @property
    def level_spec(self) -> LevelSpec:
        return self.config.level_spec(self.session.level)

    def visible_timer(self) -> Optional[int]:
        """Seconds left to show on the HUD, or None when no countdown applies."""
        s = self.session
        if s.timed and s.phase in (Phase.RUNNING, Phase.COMPLETED):
            return max(0, s.timer_remaining)
        return None

    def _move_speed(self) -> float:
        override = self.level_spec.move_speed
        return self.config.physics.move_speed if override is None else override

    # ----------------------------
    # Control requests
    # ----------------------------

    def select_level(self, level: int) -> None:
        """Jump to a level before starting it (resume, debugging)."""
        if not 1 <= level <= self.config.final_level:
            raise ValueError(f"level must be in 1..{self.config.final_level}, got {level}")
        if self.session.phase is Phase.RUNNING:
            self._halt()
            self.session.phase = Phase.IDLE
        self.session.level = level

    def resume_from(self, snapshot: ProgressSnapshot) -> None:
        """Adopt the level of a saved snapshot; anything out of range starts at 1."""
        level = snapshot.level
        if not 1 <= level <= self.config.final_level:
            logger.warning("ignoring saved level %s", level)
            level = 1
        self.select_level(level)
        logger.info("resuming at level %s", level)

    def start(self) -> bool:
        """Generate the current level and begin running it.

        Not allowed from VICTORY; call reset() first.
        """
        s = self.session
        if s.phase is Phase.VICTORY:
            logger.warning("start ignored: game already won, reset first")
            return False

        self._halt()
        s.phase = Phase.GENERATING
        s.penalty_applied = False
        self._generate()

        spec = self.level_spec
        s.timed = spec.has_timer
        s.timer_active = spec.has_timer
        s.timer_remaining = spec.timer_seconds if spec.has_timer else 0
        s.phase = Phase.RUNNING
        logger.info("level %s started (timer=%ss)", s.level, s.timer_remaining)
        self.bus.emit(LevelStarted(s.level, spec.has_timer, spec.timer_seconds))
        return True

    def restart(self) -> bool:
        """Replay the current (possibly penalised) level from scratch."""
        if self.session.phase is Phase.VICTORY:
            return False
        self.bus.emit(ProgressCleared())
        return self.start()

    def reset(self) -> None:
        """Full reset back to level 1, waiting for start()."""
        self._halt()
        s = self.session
        s.level = 1
        s.phase = Phase.IDLE
        s.penalty_applied = False
        s.avatar.stop()
        self.bus.emit(ProgressCleared())

    def toggle_pause(self) -> bool:
        """Pause or unpause a running level. Returns the new paused flag."""
        s = self.session
        if s.phase is not Phase.RUNNING:
            return False
        s.paused = not s.paused
        logger.info("paused" if s.paused else "unpaused")
        return s.paused

    def resize(self, metrics: CanvasMetrics) -> None:
        """Adopt new canvas metrics; a running level is regenerated for them."""
        s = self.session
        s.metrics = metrics
        if s.phase is Phase.RUNNING:
            logger.debug("canvas resized mid-level, regenerating")
            self._generate(keep_velocity=True)

    def request_death(self, cause: str) -> None:
        """Queue a death for the start of the next tick."""
        if self.session.phase is Phase.RUNNING:
            self._pending_deaths.append(cause)

    # ----------------------------
    # Pointer / touch steering
    # ----------------------------

    def steer_pointer(self, target: Point) -> None:
        if self.session.running:
            self.integrator.steer_towards(self.session.avatar, target, self._move_speed())

    def touch_begin(self, pos: Point) -> None:
        self.touch.begin(pos)

    def touch_move(self, pos: Point) -> None:
        if self.session.running:
            self.touch.move(self.session.avatar, pos, self._move_speed())

    def touch_end(self) -> None:
        self.touch.end()

    # ----------------------------
    # Simulation
    # ----------------------------

    def tick(self, inputs: InputState, dt_ms: float) -> None:
        """Advance one frame of dt_ms milliseconds."""
        s = self.session
        if s.phase is Phase.COMPLETED:
            self._advance_completion_delay(dt_ms)
            return
        if not s.running:
            return

        self._advance_countdown(dt_ms)
        self._drain_pending()
        if s.phase is not Phase.RUNNING:
            return

        self.integrator.step(
            s.avatar, inputs, s.metrics.width, s.metrics.height, self._move_speed()
        )
        hit = self.resolver.check(
            s.grid, s.metrics.cell_size, s.avatar.position, s.metrics.width, s.metrics.height
        )
        if hit is not None:
            self.handle_death(hit.value)
        self.check_win()

    def check_win(self) -> bool:
        s = self.session
        if s.phase is Phase.RUNNING and in_exit_zone(s.avatar.position, s.metrics):
            return self.complete()
        return False

    def handle_death(self, cause: str) -> bool:
        """RUNNING -> DEAD. A no-op (returns False) in any other phase."""
        s = self.session
        if s.phase is not Phase.RUNNING:
            return False

        self._halt()
        died_on = s.level
        penalty = died_on >= self.config.rules.penalty_threshold
        if penalty:
            s.level = max(1, died_on - self.config.rules.penalty_levels)
        s.penalty_applied = penalty
        s.phase = Phase.DEAD
        logger.info(
            "died on level %s (%s); replaying level %s%s",
            died_on, cause, s.level, " after penalty" if penalty else "",
        )
        self._offer_progress()
        self.bus.emit(Death(level=s.level, penalty_applied=penalty, cause=cause))
        return True

    def complete(self) -> bool:
        """RUNNING -> COMPLETED, or VICTORY on the final level."""
        s = self.session
        if s.phase is not Phase.RUNNING:
            return False

        self._halt()
        finished = s.level
        if finished >= self.config.final_level:
            s.phase = Phase.VICTORY
            logger.info("final level %s cleared", finished)
            self._offer_progress()
            self.bus.emit(LevelCompleted(finished))
            self.bus.emit(Victory())
            return True

        s.level = finished + 1
        s.phase = Phase.COMPLETED
        self._next_level_in_ms = float(self.config.rules.completion_delay_ms)
        logger.info("level %s cleared, next is %s", finished, s.level)
        self._offer_progress()
        self.bus.emit(LevelCompleted(finished))
        return True

    # ----------------------------
    # Internals
    # ----------------------------

    def _generate(self, keep_velocity: bool = False) -> None:
        s = self.session
        m = s.metrics
        spec = self.level_spec
        s.path_width = path_width_for(spec, m.cell_size)
        s.grid = generate_level_grid(m.grid_width, m.grid_height, s.level, s.path_width, self.rng)

        vel = (s.avatar.vel.x, s.avatar.vel.y) if keep_velocity else self.config.physics.entry_velocity
        s.avatar.place(spawn_point(s.path_width, m.cell_size), vel)

        if logger.isEnabledFor(logging.DEBUG):
            reachable = self.validator.connects(
                s.grid,
                zone_cells(start_zone(s.path_width)),
                zone_cells(end_zone(s.grid, s.path_width)),
            )
            logger.debug(
                "level %s grid %sx%s pw=%s path_cells=%s reachable=%s",
                s.level, s.grid.width, s.grid.height, s.path_width,
                len(s.grid.path_cells()), reachable,
            )

    def _advance_countdown(self, dt_ms: float) -> None:
        s = self.session
        if not s.timer_active:
            return
        self._countdown_ms += dt_ms
        while self._countdown_ms >= 1000.0 and s.timer_active:
            self._countdown_ms -= 1000.0
            s.timer_remaining -= 1
            self.bus.emit(TimerTick(s.timer_remaining))
            if s.timer_remaining <= 0:
                s.timer_active = False
                self.bus.emit(TimerExpired())
                self.request_death("timer")

    def _advance_completion_delay(self, dt_ms: float) -> None:
        if self._next_level_in_ms is None:
            return
        self._next_level_in_ms -= dt_ms
        if self._next_level_in_ms <= 0:
            self._next_level_in_ms = None
            self.start()

    def _drain_pending(self) -> None:
        while self._pending_deaths:
            cause = self._pending_deaths.popleft()
            self.handle_death(cause)

    def _halt(self) -> None:
        """Disarm every per-level timer and queued request."""
        s = self.session
        s.timer_active = False
        s.paused = False
        self._countdown_ms = 0.0
        self._next_level_in_ms = None
        self._pending_deaths.clear()
        self.touch.end()

    def _offer_progress(self) -> None:
        s = self.session
        snapshot = ProgressSnapshot(
            level=s.level,
            avatar_position=s.avatar.position,
            timer_remaining=max(0, s.timer_remaining),
            timestamp=self._now().isoformat(timespec="seconds"),
        )
        self.bus.emit(ProgressOffered(snapshot))
