from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np


class GameGrid:
    """Fixed-size 2D occupancy board.

    Rows are indexed top to bottom. Cells hold 0 for empty and a piece color
    index 1..7 for occupied. The row count never changes: removing a row must
    be paired with inserting an empty row at the top.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    @classmethod
    def create(cls, width: int, height: int) -> "GameGrid":
        return cls(width, height)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> int:
        assert self.is_inside(x, y), f"cell ({x}, {y}) outside grid"
        return int(self.grid[y, x])

    def set(self, x: int, y: int, value: int) -> None:
        assert self.is_inside(x, y), f"cell ({x}, {y}) outside grid"
        assert 0 <= value <= 7, f"invalid cell value {value}"
        self.grid[y, x] = value

    def is_row_full(self, y: int) -> bool:
        return bool(np.all(self.grid[y] != 0))

    def remove_row(self, y: int) -> None:
        # Leaves the grid one row short until insert_empty_row_at_top runs.
        assert 0 <= y < self.grid.shape[0], f"row {y} outside grid"
        self.grid = np.delete(self.grid, y, axis=0)

    def insert_empty_row_at_top(self) -> None:
        empty = np.zeros((1, self.width), dtype=np.int8)
        self.grid = np.vstack((empty, self.grid))

    def occupied(self) -> Iterator[Tuple[int, int, int]]:
        """Yield (x, y, value) for every non-empty cell, row by row."""
        ys, xs = np.nonzero(self.grid)
        for y, x in zip(ys, xs):
            yield int(x), int(y), int(self.grid[y, x])

    def rows(self) -> int:
        return int(self.grid.shape[0])

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
