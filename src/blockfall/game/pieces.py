from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


class TetrominoType(IntEnum):
    """Piece types; the value doubles as the piece's color index."""

    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


Shape = np.ndarray


def _template(rows: List[List[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    arr.flags.writeable = False
    return arr


TEMPLATES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: _template([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]]),
    TetrominoType.J: _template([[2, 0, 0], [2, 2, 2], [0, 0, 0]]),
    TetrominoType.L: _template([[0, 0, 3], [3, 3, 3], [0, 0, 0]]),
    TetrominoType.O: _template([[4, 4], [4, 4]]),
    TetrominoType.S: _template([[0, 5, 5], [5, 5, 0], [0, 0, 0]]),
    TetrominoType.T: _template([[0, 6, 0], [6, 6, 6], [0, 0, 0]]),
    TetrominoType.Z: _template([[7, 7, 0], [0, 7, 7], [0, 0, 0]]),
}

# Index 0 is "no color" and is never drawn.
COLORS: Tuple[Optional[Tuple[int, int, int]], ...] = (
    None,
    (0, 240, 240),    # I
    (30, 144, 255),   # J
    (255, 152, 0),    # L
    (249, 234, 54),   # O
    (67, 234, 46),    # S
    (162, 89, 247),   # T
    (255, 23, 68),    # Z
)


def rotate_shape(shape: Shape) -> Shape:
    """Transpose then reverse the row order, returning a new read-only matrix."""
    rotated = np.array(shape.T[::-1], dtype=np.int8)
    rotated.flags.writeable = False
    return rotated


@dataclass(frozen=True, eq=False)
class Piece:
    kind: TetrominoType
    shape: Shape
    x: int
    y: int

    @classmethod
    def from_template(cls, kind: TetrominoType, grid_width: int, spawn_y: int = 0) -> "Piece":
        shape = np.array(TEMPLATES[kind], dtype=np.int8)
        shape.flags.writeable = False
        w = shape.shape[1]
        x = grid_width // 2 - math.ceil(w / 2)
        return cls(kind=kind, shape=shape, x=x, y=spawn_y)

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self) -> "Piece":
        return replace(self, shape=rotate_shape(self.shape))

    def cells(self) -> List[Tuple[int, int, int]]:
        """Absolute (x, y, value) for every non-zero cell of the shape."""
        ys, xs = np.nonzero(self.shape)
        return [(self.x + int(dx), self.y + int(dy), int(self.shape[dy, dx])) for dy, dx in zip(ys, xs)]

    def same_placement(self, other: "Piece") -> bool:
        return (
            self.kind == other.kind
            and self.x == other.x
            and self.y == other.y
            and np.array_equal(self.shape, other.shape)
        )


def spawn(rng: random.Random, grid_width: int, spawn_y: int = 0) -> Piece:
    kind = rng.choice(list(TetrominoType))
    return Piece.from_template(kind, grid_width, spawn_y)
