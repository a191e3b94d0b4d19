import random
import unittest
from datetime import datetime

from canvas import metrics_for_canvas
from config_parsing import parse_game_config
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
from level_director import LevelDirector, Phase, in_exit_zone, path_width_for, spawn_point
from models import MazeConfig, ProgressSnapshot
from motion import InputState


FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0)


class Recorder:
    """Collects every event emitted on a bus, in order."""

    TYPES = (
        Death, LevelCompleted, LevelStarted, ProgressCleared,
        ProgressOffered, TimerExpired, TimerTick, Victory,
    )

    def __init__(self, bus):
        self.events = []
        for t in self.TYPES:
            bus.subscribe(t, self.events.append)

    def of(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


class LevelDirectorTest(unittest.TestCase):
    def setUp(self):
        self.cfg = parse_game_config({})
        self.metrics = metrics_for_canvas(800, 600, MazeConfig())
        self.bus = EventBus()
        self.recorder = Recorder(self.bus)
        self.director = LevelDirector(
            self.cfg, self.metrics, self.bus, random.Random(11), now=lambda: FIXED_NOW
        )

    def start_at(self, level):
        self.director.select_level(level)
        self.assertTrue(self.director.start())

    def test_start_spawns_at_start_anchor_with_entry_velocity(self):
        self.start_at(1)
        s = self.director.session
        self.assertIs(s.phase, Phase.RUNNING)
        self.assertEqual(s.path_width, 2)
        self.assertEqual(s.avatar.position, (90.0, 90.0))
        self.assertEqual(tuple(s.avatar.vel), (0.5, 0.0))
        self.assertEqual(self.recorder.of(LevelStarted), [LevelStarted(1, False, 0)])

    def test_idle_ticks_stay_alive_in_start_zone(self):
        self.start_at(1)
        for _ in range(120):
            self.director.tick(InputState(), 16)
        self.assertIs(self.director.phase, Phase.RUNNING)
        self.assertEqual(self.recorder.of(Death), [])

    def test_path_width_rounds_down_and_is_at_least_one(self):
        self.assertEqual(path_width_for(self.cfg.level_spec(2), 20), 1)
        self.assertEqual(path_width_for(self.cfg.level_spec(7), 20), 1)
        self.assertEqual(path_width_for(self.cfg.level_spec(1), 15), 2)
        self.assertEqual(spawn_point(1, 20), (70.0, 70.0))

    def test_exit_zone_threshold(self):
        self.assertTrue(in_exit_zone((741, 541), self.metrics))
        self.assertFalse(in_exit_zone((739, 541), self.metrics))
        self.assertFalse(in_exit_zone((741, 539), self.metrics))

    def test_reaching_exit_completes_level(self):
        self.start_at(1)
        self.director.session.avatar.place((739, 539))
        self.assertFalse(self.director.check_win())
        self.director.session.avatar.place((741, 541))
        self.assertTrue(self.director.check_win())
        self.assertIs(self.director.phase, Phase.COMPLETED)
        self.assertEqual(self.director.level, 2)
        self.assertEqual(self.recorder.of(LevelCompleted), [LevelCompleted(1)])
        self.assertEqual(self.recorder.of(ProgressOffered)[-1].snapshot.level, 2)

    def test_completion_delay_then_next_level(self):
        self.start_at(1)
        self.director.session.avatar.place((741, 541))
        self.director.check_win()
        self.director.tick(InputState(), 999)
        self.assertIs(self.director.phase, Phase.COMPLETED)
        self.director.tick(InputState(), 1)
        self.assertIs(self.director.phase, Phase.RUNNING)
        self.assertEqual(self.recorder.of(LevelStarted)[-1].level, 2)

    def test_final_level_is_victory(self):
        self.start_at(7)
        self.director.session.avatar.place((741, 541))
        self.assertTrue(self.director.check_win())
        self.assertIs(self.director.phase, Phase.VICTORY)
        self.assertEqual(self.recorder.of(LevelCompleted), [LevelCompleted(7)])
        self.assertEqual(len(self.recorder.of(Victory)), 1)
        self.assertFalse(self.director.start())

        self.director.reset()
        self.assertIs(self.director.phase, Phase.IDLE)
        self.assertEqual(self.director.level, 1)
        self.assertTrue(self.director.start())

    def test_death_below_threshold_keeps_level(self):
        self.start_at(3)
        self.assertTrue(self.director.handle_death("wall"))
        self.assertEqual(self.director.level, 3)
        self.assertEqual(self.recorder.of(Death), [Death(3, False, "wall")])

    def test_death_at_threshold_costs_two_levels(self):
        self.start_at(6)
        self.director.handle_death("wall")
        self.assertEqual(self.director.level, 4)
        self.assertTrue(self.director.session.penalty_applied)
        self.assertEqual(self.recorder.of(Death), [Death(4, True, "wall")])

        self.start_at(7)
        self.director.handle_death("bounds")
        self.assertEqual(self.director.level, 5)

    def test_death_is_applied_once(self):
        self.start_at(6)
        self.assertTrue(self.director.handle_death("wall"))
        self.assertFalse(self.director.handle_death("timer"))
        self.assertEqual(self.director.level, 4)
        self.assertEqual(len(self.recorder.of(Death)), 1)
        self.assertEqual(len(self.recorder.of(ProgressOffered)), 1)

    def test_queued_deaths_resolve_to_one(self):
        self.start_at(6)
        self.director.request_death("external")
        self.director.request_death("timer")
        self.director.tick(InputState(), 16)
        self.assertIs(self.director.phase, Phase.DEAD)
        self.assertEqual(self.recorder.of(Death), [Death(4, True, "external")])

    def test_no_win_after_death_in_same_tick(self):
        self.start_at(2)
        self.director.session.avatar.place((741, 541))
        self.director.request_death("external")
        self.director.tick(InputState(), 16)
        self.assertIs(self.director.phase, Phase.DEAD)
        self.assertEqual(self.recorder.of(LevelCompleted), [])

    def test_timer_expiry_kills(self):
        self.start_at(4)
        self.assertEqual(self.director.session.timer_remaining, 45)
        self.director.tick(InputState(), 44000)
        self.assertIs(self.director.phase, Phase.RUNNING)
        self.assertEqual(self.director.session.timer_remaining, 1)

        self.director.tick(InputState(), 1000)
        self.assertIs(self.director.phase, Phase.DEAD)
        self.assertEqual(len(self.recorder.of(TimerTick)), 45)
        self.assertEqual(self.recorder.of(TimerTick)[-1], TimerTick(0))
        self.assertEqual(len(self.recorder.of(TimerExpired)), 1)
        self.assertEqual(self.recorder.of(Death), [Death(4, False, "timer")])

    def test_countdown_accumulates_partial_seconds(self):
        self.start_at(5)
        for _ in range(3):
            self.director.tick(InputState(), 400)
        self.assertEqual(self.director.session.timer_remaining, 34)

    def test_pause_freezes_motion_and_timer(self):
        self.start_at(4)
        before = self.director.session.avatar.position
        self.assertTrue(self.director.toggle_pause())
        self.director.tick(InputState(right=True), 5000)
        self.assertEqual(self.director.session.avatar.position, before)
        self.assertEqual(self.director.session.timer_remaining, 45)
        self.assertFalse(self.director.toggle_pause())

    def test_restart_replays_penalised_level(self):
        self.start_at(6)
        self.director.handle_death("wall")
        self.assertTrue(self.director.restart())
        self.assertIs(self.director.phase, Phase.RUNNING)
        self.assertEqual(self.director.level, 4)
        self.assertFalse(self.director.session.penalty_applied)
        self.assertEqual(len(self.recorder.of(ProgressCleared)), 1)

    def test_restart_after_victory_keeps_saved_progress(self):
        self.start_at(7)
        self.director.session.avatar.place((741, 541))
        self.director.check_win()
        self.assertFalse(self.director.restart())
        self.assertEqual(self.recorder.of(ProgressCleared), [])
        self.assertIs(self.director.phase, Phase.VICTORY)

    def test_visible_timer_only_for_live_countdown(self):
        self.assertIsNone(self.director.visible_timer())
        self.start_at(1)
        self.assertIsNone(self.director.visible_timer())

        self.start_at(6)
        self.assertEqual(self.director.visible_timer(), 30)
        self.director.handle_death("wall")
        self.assertIsNone(self.director.visible_timer())

        self.director.restart()
        self.assertEqual(self.director.visible_timer(), 45)
        self.director.tick(InputState(), 2000)
        self.director.session.avatar.place((741, 541))
        self.director.check_win()
        self.assertIs(self.director.phase, Phase.COMPLETED)
        self.assertEqual(self.director.visible_timer(), 43)

        self.director.reset()
        self.assertIsNone(self.director.visible_timer())

    def test_progress_snapshot_contents(self):
        self.start_at(6)
        self.director.handle_death("wall")
        snapshot = self.recorder.of(ProgressOffered)[0].snapshot
        self.assertEqual(snapshot.level, 4)
        self.assertEqual(snapshot.timestamp, "2024-03-01T12:00:00")
        self.assertEqual(snapshot.timer_remaining, 30)

    def test_resize_regenerates_running_level(self):
        self.start_at(2)
        old_grid = self.director.session.grid
        self.director.resize(metrics_for_canvas(500, 400, MazeConfig()))
        s = self.director.session
        self.assertIsNot(s.grid, old_grid)
        self.assertEqual((s.grid.width, s.grid.height), (33, 26))
        self.assertEqual(s.avatar.position, spawn_point(s.path_width, 15))
        self.assertIs(s.phase, Phase.RUNNING)

    def test_resize_while_idle_only_updates_metrics(self):
        small = metrics_for_canvas(500, 400, MazeConfig())
        self.director.resize(small)
        self.assertIs(self.director.session.metrics, small)
        self.assertEqual(self.director.session.grid.width, 0)

    def test_select_level_range(self):
        with self.assertRaises(ValueError):
            self.director.select_level(0)
        with self.assertRaises(ValueError):
            self.director.select_level(8)

    def test_resume_from_snapshot(self):
        self.director.resume_from(ProgressSnapshot(5, (1.0, 2.0), 0, "2024-03-01T12:00:00"))
        self.assertEqual(self.director.level, 5)
        self.director.resume_from(ProgressSnapshot(99, (1.0, 2.0), 0, "2024-03-01T12:00:00"))
        self.assertEqual(self.director.level, 1)

    def test_pointer_steers_only_while_running(self):
        self.director.steer_pointer((500, 90))
        self.start_at(1)
        self.director.steer_pointer((500, 90))
        self.assertAlmostEqual(self.director.session.avatar.vel.x, 0.6)


if __name__ == "__main__":
    unittest.main()
