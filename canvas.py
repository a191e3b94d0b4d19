from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import pygame

from models import MazeConfig
from utils import clamp_float


@dataclass(frozen=True)
class CanvasMetrics:
    """Pixel size of the maze canvas and the grid it is divided into."""

    width: float
    height: float
    cell_size: float
    grid_width: int
    grid_height: int
    exit_zone: float = 60.0

    def exit_rect(self) -> Tuple[float, float, float, float]:
        """(left, top, width, height) of the exit square at the bottom-right."""
        return (
            self.width - self.exit_zone,
            self.height - self.exit_zone,
            self.exit_zone,
            self.exit_zone,
        )


def canvas_size_for_window(window_w: int, window_h: int, cfg: MazeConfig) -> Tuple[float, float]:
    """Return the canvas (w, h): a fraction of the window, capped at max_canvas."""
    fw, fh = cfg.canvas_fraction
    max_w, max_h = cfg.max_canvas
    return min(window_w * fw, max_w), min(window_h * fh, max_h)


def metrics_for_canvas(canvas_w: float, canvas_h: float, cfg: MazeConfig) -> CanvasMetrics:
    """Derive cell size and grid dimensions from a canvas size."""
    cell = clamp_float(canvas_w / cfg.cells_across, cfg.min_cell_size, cfg.max_cell_size)
    return CanvasMetrics(
        width=canvas_w,
        height=canvas_h,
        cell_size=cell,
        grid_width=max(0, math.floor(canvas_w / cell)),
        grid_height=max(0, math.floor(canvas_h / cell)),
        exit_zone=cfg.exit_zone,
    )


def metrics_for_window(window_w: int, window_h: int, cfg: MazeConfig) -> CanvasMetrics:
    canvas_w, canvas_h = canvas_size_for_window(window_w, window_h, cfg)
    return metrics_for_canvas(canvas_w, canvas_h, cfg)


def canvas_origin(metrics: CanvasMetrics, window_w: int, window_h: int, top_bar: int = 0) -> pygame.Vector2:
    """Top-left of the canvas in window coordinates (centred below the HUD bar)."""
    x = (window_w - metrics.width) / 2
    y = top_bar + (window_h - top_bar - metrics.height) / 2
    return pygame.Vector2(max(0.0, x), max(float(top_bar), y))


def screen_to_canvas(pos: Tuple[int, int], origin: pygame.Vector2) -> pygame.Vector2:
    return pygame.Vector2(pos[0] - origin.x, pos[1] - origin.y)
