"""Game module for Blockfall.

Exports the engine and supporting pieces:
- GameGrid: fixed-size occupancy board
- Piece, TetrominoType, TEMPLATES, COLORS: piece catalog and falling piece
- collides, merge, clear_lines: pure board operations
- ScoringRules: flat line-clear scoring
- ManualScheduler, PygameScheduler, RepeatingTimer: recurring timers
- BlockfallGame: state machine owning board, piece, score, time and timers
"""

from .grid import GameGrid
from .pieces import COLORS, TEMPLATES, Piece, TetrominoType, rotate_shape, spawn
from .collision import clear_lines, collides, merge
from .rules import ScoringRules
from .scheduler import ManualScheduler, PygameScheduler, RepeatingTimer, Scheduler, TaskHandle
from .core import Action, BlockfallGame, GameConfig, RunMode

__all__ = [
    "GameGrid",
    "Piece",
    "TetrominoType",
    "TEMPLATES",
    "COLORS",
    "rotate_shape",
    "spawn",
    "collides",
    "merge",
    "clear_lines",
    "ScoringRules",
    "Scheduler",
    "TaskHandle",
    "ManualScheduler",
    "PygameScheduler",
    "RepeatingTimer",
    "Action",
    "BlockfallGame",
    "GameConfig",
    "RunMode",
]
