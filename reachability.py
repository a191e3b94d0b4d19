from __future__ import annotations

from collections import deque
from typing import Iterable, Set

from game_types import CellXY
from maze_grid import Grid


class ReachabilityValidator:
    """4-neighbour flood fill over PATH cells."""

    NEIGHBOURS = ((1, 0), (-1, 0), (0, 1), (0, -1))

    def flood(self, grid: Grid, start: CellXY) -> Set[CellXY]:
        """Return every PATH cell connected to start (empty if start is not PATH)."""
        if not grid.is_path(*start):
            return set()

        q = deque([start])
        visited = {start}
        while q:
            x, y = q.popleft()
            for dx, dy in self.NEIGHBOURS:
                nxt = (x + dx, y + dy)
                if nxt not in visited and grid.is_path(*nxt):
                    visited.add(nxt)
                    q.append(nxt)
        return visited

    def is_reachable(self, grid: Grid, start: CellXY, goal: CellXY) -> bool:
        return goal in self.flood(grid, start)

    def connects(self, grid: Grid, sources: Iterable[CellXY], targets: Iterable[CellXY]) -> bool:
        """True if any PATH cell in sources reaches any cell in targets."""
        wanted = set(targets)
        seen: Set[CellXY] = set()
        for src in sources:
            if src in seen:
                continue
            region = self.flood(grid, src)
            if region & wanted:
                return True
            seen |= region
        return False
