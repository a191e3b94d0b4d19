from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import pygame

from models import PhysicsConfig
from utils import clamp_float


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputState:
    """Per-tick directional snapshot, independent of the input device."""

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False

    @classmethod
    def from_keys(cls, keys: Sequence[bool]) -> "InputState":
        """Build from ``pygame.key.get_pressed()`` (arrows or WASD)."""
        return cls(
            up=bool(keys[pygame.K_UP] or keys[pygame.K_w]),
            down=bool(keys[pygame.K_DOWN] or keys[pygame.K_s]),
            left=bool(keys[pygame.K_LEFT] or keys[pygame.K_a]),
            right=bool(keys[pygame.K_RIGHT] or keys[pygame.K_d]),
        )


class Avatar:
    """Player marker: continuous position and velocity in canvas pixels."""

    def __init__(self, pos: Tuple[float, float] = (0.0, 0.0)) -> None:
        self.pos = pygame.Vector2(pos)
        self.vel = pygame.Vector2(0, 0)

    def place(self, pos: Tuple[float, float], vel: Tuple[float, float] = (0.0, 0.0)) -> None:
        self.pos.update(pos[0], pos[1])
        self.vel.update(vel[0], vel[1])

    def stop(self) -> None:
        self.vel.update(0, 0)

    @property
    def position(self) -> Tuple[float, float]:
        return (self.pos.x, self.pos.y)


class MotionIntegrator:
    """Advances avatar kinematics one tick at a time.

    Order per tick: input overrides velocity, idle drift, integrate,
    clamp to the canvas, friction.
    """

    def __init__(self, physics: PhysicsConfig) -> None:
        self.physics = physics

    def step(
        self,
        avatar: Avatar,
        inputs: InputState,
        canvas_w: float,
        canvas_h: float,
        move_speed: Optional[float] = None,
    ) -> None:
        p = self.physics
        speed = p.move_speed if move_speed is None else move_speed
        vel = avatar.vel

        if inputs.up:
            vel.y = -speed
        if inputs.down:
            vel.y = speed
        if inputs.left:
            vel.x = -speed
        if inputs.right:
            vel.x = speed

        # The avatar is never allowed to come to rest; friction alone only
        # reaches exact zero via underflow, so this fires rarely.
        if abs(vel.x) < p.idle_epsilon and abs(vel.y) < p.idle_epsilon:
            if vel.x == 0 and vel.y == 0:
                vel.x = speed * p.idle_drift_factor

        margin = p.radius_margin
        avatar.pos.x = clamp_float(avatar.pos.x + vel.x, margin, canvas_w - margin)
        avatar.pos.y = clamp_float(avatar.pos.y + vel.y, margin, canvas_h - margin)

        vel.x *= p.friction
        vel.y *= p.friction

    def steer_towards(
        self,
        avatar: Avatar,
        target: Tuple[float, float],
        move_speed: Optional[float] = None,
    ) -> bool:
        """Pointer-follow: aim velocity at target when it is far enough away.

        Returns True when velocity was changed.
        """
        p = self.physics
        speed = p.move_speed if move_speed is None else move_speed
        delta = pygame.Vector2(target) - avatar.pos
        distance = delta.length()
        if distance <= p.pointer_dead_zone:
            return False
        avatar.vel.update(delta / distance * speed * p.pointer_scale)
        return True


class TouchDrag:
    """Swipe steering: each drag past the dead zone nudges the dominant axis."""

    def __init__(self, physics: PhysicsConfig) -> None:
        self.physics = physics
        self.anchor: Optional[pygame.Vector2] = None

    def begin(self, pos: Tuple[float, float]) -> None:
        self.anchor = pygame.Vector2(pos)

    def end(self) -> None:
        self.anchor = None

    def move(
        self,
        avatar: Avatar,
        pos: Tuple[float, float],
        move_speed: Optional[float] = None,
    ) -> bool:
        """Apply a drag to pos. Returns True when the avatar was steered."""
        if self.anchor is None:
            return False
        p = self.physics
        speed = p.move_speed if move_speed is None else move_speed
        current = pygame.Vector2(pos)
        delta = current - self.anchor

        if abs(delta.x) <= p.touch_dead_zone and abs(delta.y) <= p.touch_dead_zone:
            return False

        push = speed * p.touch_scale
        if abs(delta.x) > abs(delta.y):
            avatar.vel.x = push if delta.x > 0 else -push
            avatar.vel.y *= p.touch_damping
        else:
            avatar.vel.y = push if delta.y > 0 else -push
            avatar.vel.x *= p.touch_damping
        self.anchor = current
        logger.debug("touch drag %s -> vel %s", delta, avatar.vel)
        return True
