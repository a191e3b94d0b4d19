#!/usr/bin/env python3
"""
preview_maze.py

Prints a generated level as ASCII ('#' wall, '.' path, 'S' spawn cell,
'E' end anchor) and reports whether the exit zone is reachable from the
spawn zone.

    python preview_maze.py 6 --width 40 --height 30 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional, Sequence

from config_io import load_layered_config
from config_parsing import parse_game_config
from level_director import end_zone, generate_level_grid, path_width_for, start_zone, zone_cells
from maze_grid import Grid
from path_carver import end_anchor, start_anchor, strategy_for_level
from reachability import ReachabilityValidator


def render_ascii(grid: Grid, path_width: int) -> List[str]:
    rows = [list(r) for r in grid.rows()]
    for (x, y), mark in ((start_anchor(path_width), "S"), (end_anchor(grid, path_width), "E")):
        if grid.in_bounds(x, y):
            rows[y][x] = mark
    return ["".join(r) for r in rows]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Preview a generated Dread Maze level.")
    p.add_argument("level", type=int, help="Level ordinal (1-based).")
    p.add_argument("--width", type=int, default=40, help="Grid width in cells (default: 40).")
    p.add_argument("--height", type=int, default=30, help="Grid height in cells (default: 30).")
    p.add_argument(
        "--cell-size",
        type=float,
        default=20.0,
        help="Cell size in px used to derive the path width (default: 20).",
    )
    p.add_argument("--seed", type=int, default=None, help="Optional RNG seed.")
    p.add_argument("--verbose", action="store_true", help="Log carving details.")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    cfg = parse_game_config(load_layered_config())
    if not 1 <= args.level <= cfg.final_level:
        raise SystemExit(f"level must be in 1..{cfg.final_level}")
    if args.width <= 0 or args.height <= 0:
        raise SystemExit("width and height must be > 0")

    rng = random.Random(args.seed)
    pw = path_width_for(cfg.level_spec(args.level), args.cell_size)
    grid = generate_level_grid(args.width, args.height, args.level, pw, rng)

    print("\n".join(render_ascii(grid, pw)))
    reachable = ReachabilityValidator().connects(
        grid, zone_cells(start_zone(pw)), zone_cells(end_zone(grid, pw))
    )
    print(
        f"\nlevel={args.level} strategy={strategy_for_level(args.level, rng).name} "
        f"size={grid.width}x{grid.height} path_width={pw} "
        f"path_cells={len(grid.path_cells())} reachable={reachable}"
    )


if __name__ == "__main__":
    main()
