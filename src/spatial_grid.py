"""Uniform spatial grid over the world rectangle.

The grid only narrows down candidates for a radius query; the World still
runs the exact distance test on whatever the grid returns, so query
results match a full scan exactly.
"""

import math
from typing import Dict, List, Set, Tuple

import numpy as np

from utils import BoundaryMode, Vector2


class SpatialGrid:
    """Buckets row indices of a position array by grid cell.

    Under TOROIDAL mode neighbor cells wrap around the edges, so an agent
    near one edge finds candidates near the opposite edge.
    """

    def __init__(
        self,
        cell_size: float,
        width: float,
        height: float,
        mode: BoundaryMode = BoundaryMode.TOROIDAL
    ):
        self.width = width
        self.height = height
        self.mode = mode
        cell_size = max(cell_size, 1e-9)
        # Cells tile the world exactly so wrapped column indices line up.
        self.cols = max(1, int(width // cell_size))
        self.rows = max(1, int(height // cell_size))
        self.cell_width = width / self.cols
        self.cell_height = height / self.rows
        self._cells: Dict[Tuple[int, int], List[int]] = {}

    def clear(self):
        self._cells.clear()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._cells.values())

    def insert(self, index: int, x: float, y: float):
        key = self._cell_key(x, y)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
        bucket.append(index)

    def build(self, positions: np.ndarray):
        """Rebuild from an (N, 2) position array; indices are row numbers."""
        self.clear()
        for index, (x, y) in enumerate(positions):
            self.insert(index, float(x), float(y))

    def candidates(self, position: Vector2, radius: float) -> List[int]:
        """Row indices in every cell that can hold a point within radius."""
        result: List[int] = []
        for key in self._query_cells(position, radius):
            bucket = self._cells.get(key)
            if bucket:
                result.extend(bucket)
        return result

    def _query_cells(self, position: Vector2, radius: float) -> Set[Tuple[int, int]]:
        cx, cy = self._cell_key(position.x, position.y)
        # One extra ring absorbs floating-point error at cell borders.
        range_x = int(math.ceil(radius / self.cell_width)) + 1
        range_y = int(math.ceil(radius / self.cell_height)) + 1

        columns = self._axis_cells(cx, range_x, self.cols)
        rows = self._axis_cells(cy, range_y, self.rows)
        return {(col, row) for col in columns for row in rows}

    def _axis_cells(self, center: int, cell_range: int, count: int) -> List[int]:
        if self.mode is BoundaryMode.TOROIDAL:
            if 2 * cell_range + 1 >= count:
                return list(range(count))
            return [(center + offset) % count for offset in range(-cell_range, cell_range + 1)]
        low = max(0, center - cell_range)
        high = min(count - 1, center + cell_range)
        return list(range(low, high + 1))

    def _cell_key(self, x: float, y: float) -> Tuple[int, int]:
        col = int(x // self.cell_width)
        row = int(y // self.cell_height)
        # Walled positions may sit exactly on the far edge.
        col = min(max(col, 0), self.cols - 1)
        row = min(max(row, 0), self.rows - 1)
        return col, row
