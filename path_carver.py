"""
path_carver.py

Carves the traversable corridor network of a level into a wall-filled Grid.

Every strategy walks a sequence of anchor cells and stamps a
``path_width x path_width`` square of PATH at each one. Strategies only
differ in the order they visit anchors:

- Straight    (level 1)   diagonal-biased walk with random vertical jitter
- LShaped     (level 2)   right, down, right
- SShaped     (level 3)   right, down, back left, down, right
- Zigzag      (levels 4-5) full-width sweeps stepping down H/6 each pass
- Checkpoint  (levels 6+) four fixed checkpoints, axis-aligned legs

From level 3 on, random dead-end branches are stamped on top.

Randomness always comes from an injected ``random.Random`` so a seed
reproduces a maze exactly. All loops are bounded by grid dimensions;
grids smaller than the margins simply end up with fewer carved cells.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Tuple

from game_types import CellXY
from maze_grid import Cell, Grid


logger = logging.getLogger(__name__)

DEAD_ENDS_FROM_LEVEL = 3
DEAD_ENDS_PER_LEVEL = 2
DEAD_END_LENGTH = (3, 10)

CHECKPOINTS: Tuple[Tuple[float, float], ...] = (
    (0.3, 0.2),
    (0.7, 0.4),
    (0.2, 0.6),
    (0.8, 0.8),
)


def carve(grid: Grid, x: int, y: int, path_width: int) -> None:
    """Set the path_width square anchored at (x, y) to PATH, clipped to the grid."""
    for dy in range(path_width):
        for dx in range(path_width):
            grid.set_cell(x + dx, y + dy, Cell.PATH)


def start_anchor(path_width: int) -> CellXY:
    return (path_width + 2, path_width + 2)


def end_anchor(grid: Grid, path_width: int) -> CellXY:
    return (grid.width - path_width - 3, grid.height - path_width - 3)


def walk_to(grid: Grid, x: int, y: int, tx: int, ty: int, path_width: int) -> CellXY:
    """Carve an axis-aligned route from (x, y) to (tx, ty), X first, then Y.

    Both endpoints are carved. Returns the target.
    """
    while x != tx or y != ty:
        carve(grid, x, y, path_width)
        if x < tx:
            x += 1
        elif x > tx:
            x -= 1
        elif y < ty:
            y += 1
        else:
            y -= 1
    carve(grid, tx, ty, path_width)
    return tx, ty


class PathStrategy:
    """Base class for main-route strategies."""

    name = "base"

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng

    def carve_route(self, grid: Grid, path_width: int, start: CellXY, end: CellXY) -> None:
        raise NotImplementedError


class StraightPath(PathStrategy):
    name = "straight"

    # y advances when random() > ADVANCE, retreats when random() > RETREAT
    ADVANCE = 0.7
    RETREAT = 0.8

    def carve_route(self, grid: Grid, path_width: int, start: CellXY, end: CellXY) -> None:
        x, y = start
        top = start[1]
        ex, ey = end
        budget = (grid.width + grid.height) * 16

        # Each single-axis move is carved so narrow corridors stay 4-connected.
        steps = 0
        while (x < ex or y < ey) and steps < budget:
            carve(grid, x, y, path_width)
            if x < ex:
                x += 1
                carve(grid, x, y, path_width)
            if y < ey and self.rng.random() > self.ADVANCE:
                y += 1
                carve(grid, x, y, path_width)
            if y > top and self.rng.random() > self.RETREAT:
                y -= 1
                carve(grid, x, y, path_width)
            steps += 1

        if steps >= budget:
            logger.debug("straight walk hit its step budget at (%s, %s)", x, y)
        walk_to(grid, x, y, ex, ey, path_width)


class LShapedPath(PathStrategy):
    name = "l-shaped"

    TURN_AT = 0.6

    def carve_route(self, grid: Grid, path_width: int, start: CellXY, end: CellXY) -> None:
        x, y = start
        ex, ey = end
        turn_x = math.floor(grid.width * self.TURN_AT)

        while x < turn_x:
            carve(grid, x, y, path_width)
            x += 1
        while y < ey:
            carve(grid, x, y, path_width)
            y += 1
        while x < ex:
            carve(grid, x, y, path_width)
            x += 1
        walk_to(grid, x, y, ex, ey, path_width)


class SShapedPath(PathStrategy):
    name = "s-shaped"

    def carve_route(self, grid: Grid, path_width: int, start: CellXY, end: CellXY) -> None:
        x, y = start
        ex, ey = end
        far_x = grid.width * 0.8
        near_x = grid.width * 0.2
        mid_y = grid.height // 2

        while x < far_x:
            carve(grid, x, y, path_width)
            x += 1
        while y < mid_y:
            carve(grid, x, y, path_width)
            y += 1
        while x > near_x:
            carve(grid, x, y, path_width)
            x -= 1
        while y < ey:
            carve(grid, x, y, path_width)
            y += 1
        while x < ex:
            carve(grid, x, y, path_width)
            x += 1
        walk_to(grid, x, y, ex, ey, path_width)


class ZigzagPath(PathStrategy):
    name = "zigzag"

    SWEEPS_PER_HEIGHT = 6

    def carve_route(self, grid: Grid, path_width: int, start: CellXY, end: CellXY) -> None:
        x, y = start
        ex, ey = end
        right_x = grid.width - path_width - 3
        left_x = path_width + 2
        # at least one row per pass, otherwise tiny grids never reach ey
        drop = max(1, grid.height // self.SWEEPS_PER_HEIGHT)
        direction = 1

        while y < ey:
            target_x = right_x if direction > 0 else left_x
            while (direction > 0 and x < target_x) or (direction < 0 and x > target_x):
                carve(grid, x, y, path_width)
                x += direction

            target_y = min(y + drop, ey)
            while y < target_y:
                carve(grid, x, y, path_width)
                y += 1
            direction = -direction

        walk_to(grid, x, y, ex, ey, path_width)


class CheckpointPath(PathStrategy):
    name = "checkpoint"

    def carve_route(self, grid: Grid, path_width: int, start: CellXY, end: CellXY) -> None:
        x, y = start
        for fx, fy in CHECKPOINTS:
            cx = math.floor(grid.width * fx)
            cy = math.floor(grid.height * fy)
            x, y = walk_to(grid, x, y, cx, cy, path_width)
        walk_to(grid, x, y, end[0], end[1], path_width)


class DeadEndInjector:
    """Stamps short straight branches that lead nowhere."""

    # up, right, down, left
    DIRECTIONS: Tuple[CellXY, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng

    def inject(self, grid: Grid, path_width: int, count: int) -> None:
        margin = path_width * 2
        for _ in range(count):
            x = math.floor(self.rng.random() * (grid.width - path_width * 4)) + margin
            y = math.floor(self.rng.random() * (grid.height - path_width * 4)) + margin
            length = self.rng.randint(*DEAD_END_LENGTH)
            dx, dy = self.DIRECTIONS[self.rng.randrange(len(self.DIRECTIONS))]

            for _ in range(length):
                carve(grid, x, y, path_width)
                x += dx
                y += dy
                if not grid.in_bounds(x, y):
                    break


def strategy_for_level(level: int, rng: random.Random) -> PathStrategy:
    """Pick the route strategy for a 1-based level ordinal."""
    if level <= 1:
        return StraightPath(rng)
    if level == 2:
        return LShapedPath(rng)
    if level == 3:
        return SShapedPath(rng)
    if level <= 5:
        return ZigzagPath(rng)
    return CheckpointPath(rng)


def dead_end_count(level: int) -> int:
    if level < DEAD_ENDS_FROM_LEVEL:
        return 0
    return DEAD_ENDS_PER_LEVEL * level


class PathCarver:
    """Fills a fresh grid with a level's main route and dead ends."""

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.dead_ends = DeadEndInjector(rng)

    def carve_level(self, grid: Grid, level: int, path_width: int) -> PathStrategy:
        path_width = max(1, int(path_width))
        strategy = strategy_for_level(level, self.rng)
        start = start_anchor(path_width)
        end = end_anchor(grid, path_width)
        logger.debug(
            "carving level %s: strategy=%s grid=%sx%s pw=%s start=%s end=%s",
            level, strategy.name, grid.width, grid.height, path_width, start, end,
        )
        strategy.carve_route(grid, path_width, start, end)

        branches = dead_end_count(level)
        if branches:
            self.dead_ends.inject(grid, path_width, branches)
        return strategy
