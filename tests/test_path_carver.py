import math
import random
import unittest

from level_director import end_zone, generate_level_grid, start_zone, zone_cells
from maze_grid import Cell, Grid
from path_carver import (
    CHECKPOINTS,
    CheckpointPath,
    DeadEndInjector,
    LShapedPath,
    PathCarver,
    SShapedPath,
    StraightPath,
    ZigzagPath,
    carve,
    dead_end_count,
    end_anchor,
    start_anchor,
    strategy_for_level,
    walk_to,
)
from reachability import ReachabilityValidator


class CarveTest(unittest.TestCase):
    def test_carve_stamps_square(self):
        grid = Grid(6, 6)
        carve(grid, 1, 1, 2)
        self.assertEqual(sorted(grid.path_cells()), [(1, 1), (1, 2), (2, 1), (2, 2)])

    def test_carve_is_clipped_to_grid(self):
        grid = Grid(5, 5)
        carve(grid, 3, 3, 4)
        self.assertEqual(grid.count(Cell.PATH), 4)
        carve(grid, -2, -2, 3)
        self.assertTrue(grid.is_path(0, 0))
        self.assertEqual(grid.count(Cell.PATH), 5)

    def test_walk_to_carves_both_ends_x_first(self):
        grid = Grid(5, 5)
        self.assertEqual(walk_to(grid, 0, 0, 3, 2, 1), (3, 2))
        self.assertEqual(
            sorted(grid.path_cells()),
            [(0, 0), (1, 0), (2, 0), (3, 0), (3, 1), (3, 2)],
        )

    def test_anchors(self):
        grid = Grid(40, 30)
        self.assertEqual(start_anchor(1), (3, 3))
        self.assertEqual(start_anchor(2), (4, 4))
        self.assertEqual(end_anchor(grid, 1), (36, 26))
        self.assertEqual(end_anchor(grid, 2), (35, 25))


class StrategySelectionTest(unittest.TestCase):
    def test_levels_map_to_strategies(self):
        rng = random.Random(0)
        expected = {
            1: StraightPath,
            2: LShapedPath,
            3: SShapedPath,
            4: ZigzagPath,
            5: ZigzagPath,
            6: CheckpointPath,
            7: CheckpointPath,
            12: CheckpointPath,
        }
        for level, cls in expected.items():
            self.assertIsInstance(strategy_for_level(level, rng), cls, level)

    def test_dead_end_count(self):
        self.assertEqual(dead_end_count(1), 0)
        self.assertEqual(dead_end_count(2), 0)
        self.assertEqual(dead_end_count(3), 6)
        self.assertEqual(dead_end_count(7), 14)


class FixedRng:
    """Stands in for random.Random with preset draws."""

    def __init__(self, value=0.0, length=10, direction=0):
        self.value = value
        self.length = length
        self.direction = direction

    def random(self):
        return self.value

    def randint(self, lo, hi):
        return self.length

    def randrange(self, n):
        return self.direction


class DeadEndInjectorTest(unittest.TestCase):
    def test_single_branch_is_a_short_straight_line(self):
        for seed in range(200):
            grid = Grid(40, 30)
            DeadEndInjector(random.Random(seed)).inject(grid, 1, 1)
            cells = grid.path_cells()
            # margin 2 leaves room for at least 3 cells in any direction
            self.assertTrue(3 <= len(cells) <= 10, (seed, len(cells)))
            xs = {x for x, _ in cells}
            ys = {y for _, y in cells}
            self.assertTrue(len(xs) == 1 or len(ys) == 1, seed)

    def test_branch_starts_inside_margin(self):
        grid = Grid(40, 30)
        DeadEndInjector(FixedRng(value=0.0, length=3, direction=2)).inject(grid, 2, 1)
        cells = grid.path_cells()
        self.assertEqual(min(x for x, _ in cells), 4)
        self.assertEqual(min(y for _, y in cells), 4)
        self.assertEqual(len(cells), 2 * 4)

    def test_branch_stops_at_grid_edge(self):
        grid = Grid(4, 4)
        DeadEndInjector(FixedRng(value=0.0, length=10, direction=1)).inject(grid, 1, 1)
        self.assertEqual(sorted(grid.path_cells()), [(2, 2), (3, 2)])


class RouteShapeTest(unittest.TestCase):
    START = (3, 3)
    END = (36, 26)

    def route(self, strategy_cls):
        grid = Grid(40, 30)
        strategy_cls(random.Random(0)).carve_route(grid, 1, self.START, self.END)
        return grid

    def test_l_shape_turns_at_sixty_percent(self):
        grid = self.route(LShapedPath)
        self.assertTrue(all(grid.is_path(x, 3) for x in range(3, 25)))
        self.assertTrue(all(grid.is_path(24, y) for y in range(3, 27)))
        self.assertTrue(all(grid.is_path(x, 26) for x in range(24, 37)))
        self.assertTrue(grid.is_wall(25, 3))
        self.assertEqual(grid.count(Cell.PATH), 57)

    def test_s_shape_doubles_back_through_the_middle_row(self):
        grid = self.route(SShapedPath)
        self.assertTrue(all(grid.is_path(x, 3) for x in range(3, 33)))
        self.assertTrue(grid.is_wall(33, 3))
        self.assertTrue(all(grid.is_path(32, y) for y in range(3, 16)))
        self.assertTrue(all(grid.is_path(x, 15) for x in range(8, 33)))
        self.assertTrue(grid.is_wall(7, 15))
        self.assertTrue(all(grid.is_path(8, y) for y in range(15, 27)))
        self.assertTrue(all(grid.is_path(x, 26) for x in range(8, 37)))

    def test_zigzag_sweeps_step_down_by_a_sixth(self):
        grid = self.route(ZigzagPath)
        full_rows = [y for y in range(30) if all(grid.is_path(x, y) for x in range(3, 37))]
        self.assertEqual(full_rows, [3, 8, 13, 18, 23])
        self.assertEqual([x for x in range(40) if grid.is_path(x, 5)], [36])
        self.assertEqual([x for x in range(40) if grid.is_path(x, 10)], [3])

    def test_checkpoint_visits_every_checkpoint(self):
        grid = self.route(CheckpointPath)
        for fx, fy in CHECKPOINTS:
            self.assertTrue(grid.is_path(math.floor(40 * fx), math.floor(30 * fy)), (fx, fy))
        # legs run along x first
        self.assertTrue(grid.is_path(28, 6))

    def test_carving_never_restores_walls(self):
        for level in range(1, 8):
            grid = Grid(40, 30)
            PathCarver(random.Random(level)).carve_level(grid, level, 1)
            before = set(grid.path_cells())
            PathCarver(random.Random(100 + level)).carve_level(grid, 8 - level, 2)
            self.assertTrue(before <= set(grid.path_cells()), level)


class GeneratedLevelTest(unittest.TestCase):
    def setUp(self):
        self.validator = ReachabilityValidator()

    def test_start_and_end_zones_are_always_open(self):
        for level in range(1, 8):
            for pw in (1, 2, 3):
                for seed in range(5):
                    grid = generate_level_grid(40, 30, level, pw, random.Random(seed))
                    self.assertTrue(grid.all_path(zone_cells(start_zone(pw))), (level, pw, seed))
                    self.assertTrue(grid.all_path(zone_cells(end_zone(grid, pw))), (level, pw, seed))

    def test_route_connects_start_to_end(self):
        for level in range(1, 8):
            for pw in (1, 2):
                for seed in range(10):
                    grid = generate_level_grid(40, 30, level, pw, random.Random(seed))
                    self.assertTrue(
                        self.validator.is_reachable(grid, start_anchor(pw), end_anchor(grid, pw)),
                        (level, pw, seed),
                    )

    def test_straight_narrow_route_is_connected(self):
        for seed in range(20):
            grid = Grid(40, 30)
            StraightPath(random.Random(seed)).carve_route(grid, 1, (3, 3), (36, 26))
            self.assertTrue(self.validator.is_reachable(grid, (3, 3), (36, 26)), seed)

    def test_same_seed_same_maze(self):
        a = generate_level_grid(40, 30, 5, 1, random.Random(42))
        b = generate_level_grid(40, 30, 5, 1, random.Random(42))
        self.assertEqual(a.rows(), b.rows())

    def test_checkpoint_on_tiny_grid_completes(self):
        grid = Grid(4, 4)
        strategy = PathCarver(random.Random(1)).carve_level(grid, 7, 1)
        self.assertEqual(strategy.name, "checkpoint")
        self.assertGreater(grid.count(Cell.PATH), 0)

    def test_degenerate_grids_terminate(self):
        for width, height in ((0, 0), (1, 1), (2, 50), (50, 2), (30, 5)):
            for level in range(1, 8):
                grid = generate_level_grid(width, height, level, 1, random.Random(3))
                self.assertEqual((grid.width, grid.height), (width, height))

    def test_wider_path_carves_more(self):
        narrow = generate_level_grid(40, 30, 2, 1, random.Random(0))
        wide = generate_level_grid(40, 30, 2, 3, random.Random(0))
        self.assertGreater(wide.count(Cell.PATH), narrow.count(Cell.PATH))


if __name__ == "__main__":
    unittest.main()
