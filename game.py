from __future__ import annotations

import logging
import random
from datetime import timedelta
from pathlib import Path
from typing import Optional, Tuple

import pygame

from canvas import canvas_origin, metrics_for_window, screen_to_canvas
from config_io import load_layered_config
from config_parsing import parse_game_config
from events import Death, EventBus, LevelCompleted, LevelStarted, ProgressCleared, ProgressOffered, Victory
from level_director import LevelDirector
from messages import MessageFlicker
from models import ProgressSnapshot
from motion import InputState
from progress import ProgressFile
from rendering import GameRenderer, HudState, Overlay


logger = logging.getLogger(__name__)

INTRO, RESUME, PLAYING, DEAD, WON = "intro", "resume", "playing", "dead", "won"


class Game:
    """Top-level game orchestration (window, input, loop, screens)."""

    def __init__(self, user_cfg_path: Optional[Path] = None, seed: Optional[int] = None) -> None:
        self.cfg = parse_game_config(load_layered_config(user_cfg_path))
        self.window_w = self.cfg.window.width
        self.window_h = self.cfg.window.height
        self.rng = random.Random(seed)

        self._init_pygame()
        self.renderer = GameRenderer(self.cfg.colors)
        self.metrics = metrics_for_window(self.window_w, self.window_h, self.cfg.maze)
        self.origin = canvas_origin(self.metrics, self.window_w, self.window_h, self.renderer.hud_height())

        self.bus = EventBus()
        self.director = LevelDirector(self.cfg, self.metrics, self.bus, self.rng)
        self.progress = ProgressFile(
            self.cfg.progress_file,
            max_age=timedelta(days=self.cfg.progress_max_age_days),
        )
        m = self.cfg.messages
        self.flicker = MessageFlicker(
            m.haunting,
            m.subliminal,
            self.rng,
            haunting_every_ms=m.haunting_every_ms,
            haunting_show_ms=m.haunting_show_ms,
            subliminal_every_ms=m.subliminal_every_ms,
            subliminal_show_ms=m.subliminal_show_ms,
        )
        self._subscribe()

        self.screen_name = INTRO
        self.saved: Optional[ProgressSnapshot] = self.progress.load()
        if self.saved is not None:
            self.screen_name = RESUME
        self.last_death: Optional[Death] = None

    # ----------------------------
    # Initialization
    # ----------------------------

    def _init_pygame(self) -> None:
        """Initialize pygame and create window + clock."""
        pygame.init()
        self._apply_display_mode()
        pygame.display.set_caption(self.cfg.window.title)
        self.clock = pygame.time.Clock()

    def _apply_display_mode(self) -> None:
        flags = pygame.RESIZABLE if self.cfg.window.resizable else 0
        self.screen = pygame.display.set_mode((self.window_w, self.window_h), flags)
        # Capture the actual size in case the platform adjusted it.
        self.window_w, self.window_h = self.screen.get_size()

    def _subscribe(self) -> None:
        self.bus.subscribe(ProgressOffered, lambda e: self.progress.save(e.snapshot))
        self.bus.subscribe(ProgressCleared, lambda e: self.progress.clear())
        self.bus.subscribe(LevelStarted, self._on_level_started)
        self.bus.subscribe(LevelCompleted, lambda e: self.flicker.disarm())
        self.bus.subscribe(Death, self._on_death)
        self.bus.subscribe(Victory, self._on_victory)

    # ----------------------------
    # Event handlers (simulation -> presentation)
    # ----------------------------

    def _on_level_started(self, e: LevelStarted) -> None:
        self.screen_name = PLAYING
        self.flicker.disarm()
        if e.level >= self.cfg.rules.messages_from_level:
            self.flicker.arm()
        pygame.display.set_caption(f"{self.cfg.window.title} - Level {e.level}")

    def _on_death(self, e: Death) -> None:
        self.flicker.disarm()
        self.last_death = e
        self.screen_name = DEAD

    def _on_victory(self, e: Victory) -> None:
        self.flicker.disarm()
        self.screen_name = WON

    # ----------------------------
    # Input
    # ----------------------------

    def _handle_resize(self, size: Tuple[int, int]) -> None:
        self.window_w, self.window_h = size
        self.metrics = metrics_for_window(self.window_w, self.window_h, self.cfg.maze)
        self.origin = canvas_origin(self.metrics, self.window_w, self.window_h, self.renderer.hud_height())
        self.director.resize(self.metrics)

    def _handle_keydown(self, key: int) -> bool:
        """Handle KEYDOWN events.

        Returns:
            False if the game should exit, True otherwise.
        """
        if key == pygame.K_ESCAPE:
            return False

        if self.screen_name == RESUME:
            if key == pygame.K_y and self.saved is not None:
                self.director.resume_from(self.saved)
                self.screen_name = INTRO
            elif key == pygame.K_n:
                self.progress.clear()
                self.saved = None
                self.screen_name = INTRO
        elif self.screen_name == INTRO:
            if key in (pygame.K_RETURN, pygame.K_SPACE):
                self.director.start()
        elif self.screen_name == PLAYING:
            if key == pygame.K_p:
                self.director.toggle_pause()
            elif key == pygame.K_r:
                self.director.restart()
        elif self.screen_name == DEAD:
            if key in (pygame.K_r, pygame.K_RETURN):
                self.director.restart()
        elif self.screen_name == WON:
            if key in (pygame.K_RETURN, pygame.K_SPACE):
                self.director.reset()
                self.director.start()
        return True

    def _finger_pos(self, e: pygame.event.Event) -> pygame.Vector2:
        # finger events carry normalized window coordinates
        screen_pos = (int(e.x * self.window_w), int(e.y * self.window_h))
        return screen_to_canvas(screen_pos, self.origin)

    def _handle_events(self) -> bool:
        """Process pygame events.

        Returns:
            False if the game should exit, True otherwise.
        """
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                return False
            if e.type == pygame.KEYDOWN:
                if not self._handle_keydown(e.key):
                    return False
            elif e.type == pygame.VIDEORESIZE:
                self._handle_resize((e.w, e.h))
            elif e.type == pygame.MOUSEMOTION and not e.touch:
                target = screen_to_canvas(e.pos, self.origin)
                self.director.steer_pointer((target.x, target.y))
            elif e.type == pygame.FINGERDOWN:
                p = self._finger_pos(e)
                self.director.touch_begin((p.x, p.y))
            elif e.type == pygame.FINGERMOTION:
                p = self._finger_pos(e)
                self.director.touch_move((p.x, p.y))
            elif e.type == pygame.FINGERUP:
                self.director.touch_end()
        return True

    # ----------------------------
    # Presentation
    # ----------------------------

    def _overlay(self) -> Optional[Overlay]:
        spec = self.director.level_spec
        if self.screen_name == RESUME and self.saved is not None:
            return Overlay(
                title="THE MAZE REMEMBERS",
                lines=[f"Resume previous progress from Level {self.saved.level}?"],
                hint="Y: resume | N: start over",
            )
        if self.screen_name == INTRO:
            return Overlay(
                title="DREAD MAZE",
                lines=[
                    "Guide the light to the EXIT. Touch a wall and you die.",
                    f"Level {self.director.level}: {spec.maze}",
                    spec.difficulty,
                ],
                hint="ENTER: enter the maze | ESC: quit",
            )
        if self.screen_name == DEAD:
            death = self.last_death
            penalty = death is not None and death.penalty_applied
            return Overlay(
                title="YOU DIED",
                lines=[f"You will return to level {self.director.level}."],
                accent="The maze drags you back two levels." if penalty else None,
                hint="R: try again | ESC: quit",
            )
        if self.screen_name == WON:
            return Overlay(
                title="YOU ESCAPED",
                lines=["For now."],
                hint="ENTER: play again | ESC: quit",
            )
        return None

    def _hud(self) -> HudState:
        s = self.director.session
        return HudState(
            level=s.level,
            final_level=self.cfg.final_level,
            timer_remaining=self.director.visible_timer(),
            paused=s.paused,
        )

    # ----------------------------
    # Loop
    # ----------------------------

    def _tick_ms(self) -> float:
        """Return elapsed milliseconds, capped at the configured FPS."""
        return float(self.clock.tick(self.cfg.window.fps))

    def update(self, dt_ms: float, keys) -> None:
        """Update one simulation step."""
        self.director.tick(InputState.from_keys(keys), dt_ms)
        if self.director.session.running:
            self.flicker.update(dt_ms)

    def run(self) -> None:
        """Run the main game loop."""
        running = True
        while running:
            dt_ms = self._tick_ms()
            running = self._handle_events()
            if not running:
                break

            if self.screen_name == PLAYING:
                self.update(dt_ms, pygame.key.get_pressed())

            s = self.director.session
            self.renderer.render_frame(
                screen=self.screen,
                grid=s.grid,
                metrics=s.metrics,
                origin=self.origin,
                avatar_pos=s.avatar.pos,
                hud=self._hud(),
                haunting=self.flicker.haunting_text(),
                subliminal=self.flicker.subliminal_text(),
                overlay=self._overlay(),
            )

        pygame.quit()
