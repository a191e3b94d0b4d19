from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, List, Tuple


class Cell(Enum):
    WALL = "#"
    PATH = "."
    OUT_OF_BOUNDS = " "


class Grid:
    """Rectangular wall/path occupancy grid for one level.

    Cells start as walls. Writes outside the grid are silently dropped
    and reads outside return ``Cell.OUT_OF_BOUNDS``; the carving code
    leans on both to stay total on tiny grids.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self._cells: List[List[Cell]] = [
            [Cell.WALL for _ in range(self.width)] for _ in range(self.height)
        ]

    @classmethod
    def create(cls, width: int, height: int) -> "Grid":
        return cls(width, height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Cell:
        if self.in_bounds(x, y):
            return self._cells[y][x]
        return Cell.OUT_OF_BOUNDS

    def set_cell(self, x: int, y: int, state: Cell) -> None:
        if state is Cell.OUT_OF_BOUNDS:
            return
        if self.in_bounds(x, y):
            self._cells[y][x] = state

    def is_wall(self, x: int, y: int) -> bool:
        return self.cell_at(x, y) is Cell.WALL

    def is_path(self, x: int, y: int) -> bool:
        return self.cell_at(x, y) is Cell.PATH

    def clear_rect(self, x0: int, y0: int, x1: int, y1: int) -> None:
        """Set every cell in the half-open box [x0, x1) x [y0, y1) to PATH."""
        for y in range(max(0, y0), min(self.height, y1)):
            row = self._cells[y]
            for x in range(max(0, x0), min(self.width, x1)):
                row[x] = Cell.PATH

    def iter_cells(self) -> Iterator[Tuple[int, int, Cell]]:
        """Yield (x, y, cell) in row-major order."""
        for y, row in enumerate(self._cells):
            for x, cell in enumerate(row):
                yield x, y, cell

    def iter_walls(self) -> Iterator[Tuple[int, int]]:
        for x, y, cell in self.iter_cells():
            if cell is Cell.WALL:
                yield x, y

    def path_cells(self) -> List[Tuple[int, int]]:
        return [(x, y) for x, y, cell in self.iter_cells() if cell is Cell.PATH]

    def count(self, state: Cell) -> int:
        return sum(1 for _, _, cell in self.iter_cells() if cell is state)

    def all_path(self, cells: Iterable[Tuple[int, int]]) -> bool:
        """True when every in-bounds cell of ``cells`` is PATH."""
        return all(self.is_path(x, y) for x, y in cells if self.in_bounds(x, y))

    def rows(self) -> List[str]:
        return ["".join(cell.value for cell in row) for row in self._cells]
