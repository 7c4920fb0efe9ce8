"""Pure board operations: legality test, locking, and row clearing."""

from __future__ import annotations

from .grid import GameGrid
from .pieces import Piece


def collides(grid: GameGrid, piece: Piece) -> bool:
    """True if any filled cell of ``piece`` is off the board or on an occupied cell."""
    for x, y, _ in piece.cells():
        if not grid.is_inside(x, y):
            return True
        if grid.grid[y, x] != 0:
            return True
    return False


def merge(grid: GameGrid, piece: Piece) -> None:
    """Write the piece's color into the grid. Caller must have checked ``collides``."""
    assert not collides(grid, piece), "merging a piece that collides"
    for x, y, value in piece.cells():
        grid.grid[y, x] = value


def clear_lines(grid: GameGrid) -> int:
    """Remove every full row, shifting the rows above down. Returns rows removed."""
    lines = 0
    y = grid.height - 1
    while y >= 0:
        if grid.is_row_full(y):
            grid.remove_row(y)
            grid.insert_empty_row_at_top()
            lines += 1
            # Same index again: the row above has moved into it.
            continue
        y -= 1
    assert grid.rows() == grid.height
    return lines
