from __future__ import annotations

from typing import Tuple

Color = Tuple[int, int, int]
Point = Tuple[float, float]
CellXY = Tuple[int, int]
