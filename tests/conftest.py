from __future__ import annotations

import pytest

from blockfall.game import BlockfallGame, GameConfig, GameGrid, ManualScheduler, Piece, TetrominoType


def _fill_row(grid: GameGrid, y: int, skip=(), value: int = 1) -> None:
    for x in range(grid.width):
        if x not in skip:
            grid.grid[y, x] = value


@pytest.fixture
def fill_row():
    return _fill_row


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def game(scheduler: ManualScheduler) -> BlockfallGame:
    g = BlockfallGame(GameConfig(random_seed=1234), scheduler=scheduler)
    g.start()
    return g


@pytest.fixture
def o_piece() -> Piece:
    return Piece.from_template(TetrominoType.O, 10)
