from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Tuple

from maze_grid import Grid


class Hit(Enum):
    WALL = "wall"
    BOUNDS = "bounds"


def overlaps(
    box: Tuple[float, float, float, float],
    rect: Tuple[float, float, float, float],
) -> bool:
    """Strict AABB overlap of (left, top, right, bottom) boxes; touching edges do not count."""
    return box[2] > rect[0] and box[0] < rect[2] and box[3] > rect[1] and box[1] < rect[3]


class CollisionResolver:
    """Tests the avatar's radius-inflated square against nearby walls and the canvas."""

    def __init__(self, radius: float = 8.0) -> None:
        self.radius = radius

    def check(
        self,
        grid: Grid,
        cell_size: float,
        pos: Tuple[float, float],
        canvas_w: float,
        canvas_h: float,
    ) -> Optional[Hit]:
        """Return the first hit found this tick, or None when the avatar is safe."""
        x, y = pos
        r = self.radius
        box = (x - r, y - r, x + r, y + r)
        gx = math.floor(x / cell_size)
        gy = math.floor(y / cell_size)

        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                cx, cy = gx + dx, gy + dy
                if not grid.is_wall(cx, cy):
                    continue
                wall = (
                    cx * cell_size,
                    cy * cell_size,
                    (cx + 1) * cell_size,
                    (cy + 1) * cell_size,
                )
                if overlaps(box, wall):
                    return Hit.WALL

        if box[0] < 0 or box[2] > canvas_w or box[1] < 0 or box[3] > canvas_h:
            return Hit.BOUNDS
        return None
