from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import pygame

from canvas import CanvasMetrics
from game_types import Color
from maze_grid import Grid
from models import Palette


@dataclass(frozen=True)
class Overlay:
    """A modal screen drawn over the maze (intro, death, victory, resume)."""

    title: str
    lines: Sequence[str]
    hint: str
    accent: Optional[str] = None  # extra warning line, e.g. the death penalty


@dataclass(frozen=True)
class HudState:
    level: int
    final_level: int
    timer_remaining: Optional[int]  # None when the level has no timer
    paused: bool


def cell_rect(x: int, y: int, cell_size: float, origin: pygame.Vector2) -> pygame.Rect:
    """Screen rect of a grid cell; edges are rounded so neighbours share them."""
    left = int(origin.x + x * cell_size)
    top = int(origin.y + y * cell_size)
    right = int(origin.x + (x + 1) * cell_size)
    bottom = int(origin.y + (y + 1) * cell_size)
    return pygame.Rect(left, top, right - left, bottom - top)


def draw_maze(
    surf: pygame.Surface,
    grid: Grid,
    metrics: CanvasMetrics,
    origin: pygame.Vector2,
    palette: Palette,
) -> None:
    """Fill the canvas and draw every wall cell with its glow outline."""
    canvas_rect = pygame.Rect(int(origin.x), int(origin.y), int(metrics.width), int(metrics.height))
    surf.fill(palette.background, canvas_rect)
    for x, y in grid.iter_walls():
        r = cell_rect(x, y, metrics.cell_size, origin)
        pygame.draw.rect(surf, palette.maze_wall, r)
        pygame.draw.rect(surf, palette.maze_wall_glow, r, width=2)


def draw_exit_zone(
    surf: pygame.Surface,
    metrics: CanvasMetrics,
    origin: pygame.Vector2,
    palette: Palette,
    font: pygame.font.Font,
) -> None:
    left, top, w, h = metrics.exit_rect()
    rect = pygame.Rect(int(origin.x + left), int(origin.y + top), int(w), int(h))
    fill = pygame.Surface((rect.w, rect.h), pygame.SRCALPHA)
    fill.fill((220, 20, 60, 102))
    surf.blit(fill, rect.topleft)
    pygame.draw.rect(surf, palette.text_primary, rect, width=3)
    label = font.render("EXIT", True, palette.text_primary)
    surf.blit(label, label.get_rect(center=(rect.centerx, rect.bottom - 25)))


def draw_avatar(
    surf: pygame.Surface,
    pos: pygame.Vector2,
    origin: pygame.Vector2,
    palette: Palette,
    radius: int = 6,
) -> None:
    center = (int(origin.x + pos.x), int(origin.y + pos.y))
    glow_r = radius * 2
    glow = pygame.Surface((glow_r * 2, glow_r * 2), pygame.SRCALPHA)
    pygame.draw.circle(glow, (*palette.player_glow, 70), (glow_r, glow_r), glow_r)
    surf.blit(glow, (center[0] - glow_r, center[1] - glow_r))
    pygame.draw.circle(surf, palette.player, center, radius)


def draw_hud(surf: pygame.Surface, hud_font: pygame.font.Font, hud: HudState, palette: Palette) -> int:
    """Draw the top status bar; returns its height."""
    bar_height = hud_font.get_height() + 12
    bar = pygame.Surface((surf.get_width(), bar_height), pygame.SRCALPHA)
    bar.fill((0, 0, 0, 230))
    surf.blit(bar, (0, 0))

    parts = [f"Level {hud.level}/{hud.final_level}"]
    if hud.timer_remaining is not None:
        parts.append(f"Time: {max(0, hud.timer_remaining)}")
    parts.append("P: pause | R: restart | ESC: quit")
    surf.blit(hud_font.render(" | ".join(parts), True, palette.text_primary), (12, 6))

    if hud.paused:
        label = hud_font.render("PAUSED", True, (255, 255, 255))
        surf.blit(label, label.get_rect(topright=(surf.get_width() - 12, 6)))
    return bar_height


def _wrap_text(text: str, font: pygame.font.Font, max_width: int) -> List[str]:
    """Simple word-wrap helper returning list of wrapped lines."""
    words = text.split()
    lines: List[str] = []
    cur = ""
    for word in words:
        candidate = word if not cur else f"{cur} {word}"
        if font.size(candidate)[0] <= max_width:
            cur = candidate
        else:
            if cur:
                lines.append(cur)
            cur = word
    if cur:
        lines.append(cur)
    return lines


def draw_overlay(
    surf: pygame.Surface,
    overlay: Overlay,
    title_font: pygame.font.Font,
    body_font: pygame.font.Font,
    palette: Palette,
) -> None:
    """Draw a dimmed modal panel with a title, body text and a key hint."""
    window_w, window_h = surf.get_size()
    dim = pygame.Surface((window_w, window_h), pygame.SRCALPHA)
    dim.fill((0, 0, 0, 230))
    surf.blit(dim, (0, 0))

    panel_w = min(int(window_w * 0.82), 720)
    panel_h = min(int(window_h * 0.7), 420)
    panel = pygame.Rect(0, 0, panel_w, panel_h)
    panel.center = (window_w // 2, window_h // 2)
    pygame.draw.rect(surf, palette.background, panel)
    pygame.draw.rect(surf, palette.ui_accent, panel, width=2)

    padding = 22
    cursor_y = panel.y + padding
    text_width = panel.w - padding * 2

    title = title_font.render(overlay.title, True, palette.text_primary)
    surf.blit(title, title.get_rect(midtop=(panel.centerx, cursor_y)))
    cursor_y += title.get_height() + 16

    for paragraph in overlay.lines:
        for line in _wrap_text(paragraph, body_font, text_width):
            rendered = body_font.render(line, True, (235, 235, 235))
            surf.blit(rendered, rendered.get_rect(midtop=(panel.centerx, cursor_y)))
            cursor_y += rendered.get_height() + 4
        cursor_y += 8

    if overlay.accent:
        for line in _wrap_text(overlay.accent, body_font, text_width):
            rendered = body_font.render(line, True, palette.text_primary)
            surf.blit(rendered, rendered.get_rect(midtop=(panel.centerx, cursor_y)))
            cursor_y += rendered.get_height() + 4

    hint = body_font.render(overlay.hint, True, palette.text_secondary)
    surf.blit(hint, hint.get_rect(midbottom=(panel.centerx, panel.bottom - padding)))


def draw_haunting(
    surf: pygame.Surface,
    text: str,
    font: pygame.font.Font,
    metrics: CanvasMetrics,
    origin: pygame.Vector2,
    color: Color,
) -> None:
    label = font.render(text, True, color)
    surf.blit(label, label.get_rect(center=(int(origin.x + metrics.width / 2), int(origin.y + 40))))


def draw_subliminal(surf: pygame.Surface, text: str, font: pygame.font.Font, color: Color) -> None:
    label = font.render(text, True, color)
    surf.blit(label, label.get_rect(center=(surf.get_width() // 2, surf.get_height() // 2)))


class GameRenderer:
    """Renderer that centralizes fonts and shared styling for overlays/HUD."""

    def __init__(self, palette: Palette) -> None:
        self.palette = palette
        self.update_fonts()

    def update_fonts(self) -> None:
        """(Re)create the monospace fonts used by the HUD and overlays."""
        self.hud_font = pygame.font.SysFont("monospace", 18)
        self.exit_font = pygame.font.SysFont("arial", 12)
        self.title_font = pygame.font.SysFont("monospace", 34, bold=True)
        self.body_font = pygame.font.SysFont("monospace", 18)
        self.haunting_font = pygame.font.SysFont("monospace", 22, italic=True)
        self.subliminal_font = pygame.font.SysFont("monospace", 48, bold=True)

    def hud_height(self) -> int:
        return self.hud_font.get_height() + 12

    def render_frame(
        self,
        screen: pygame.Surface,
        grid: Grid,
        metrics: CanvasMetrics,
        origin: pygame.Vector2,
        avatar_pos: pygame.Vector2,
        hud: HudState,
        haunting: Optional[str] = None,
        subliminal: Optional[str] = None,
        overlay: Optional[Overlay] = None,
    ) -> None:
        """Render and present a full frame."""
        p = self.palette
        screen.fill((0, 0, 0))
        draw_maze(screen, grid, metrics, origin, p)
        draw_exit_zone(screen, metrics, origin, p, self.exit_font)
        draw_avatar(screen, avatar_pos, origin, p)
        draw_hud(screen, self.hud_font, hud, p)
        if haunting:
            draw_haunting(screen, haunting, self.haunting_font, metrics, origin, p.text_primary)
        if subliminal:
            draw_subliminal(screen, subliminal, self.subliminal_font, p.text_secondary)
        if overlay:
            draw_overlay(screen, overlay, self.title_font, self.body_font, p)
        pygame.display.flip()
