from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, List, Optional

import numpy as np

from .collision import clear_lines, collides, merge
from .grid import GameGrid
from .pieces import Piece, spawn
from .rules import ScoringRules
from .scheduler import ManualScheduler, RepeatingTimer, Scheduler


logger = logging.getLogger(__name__)

DrawCell = Callable[[int, int, int], None]


class Action(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP_START = 2
    SOFT_DROP_STOP = 3
    ROTATE_CW = 4
    HARD_DROP = 5
    START = 6
    TOGGLE_PAUSE = 7
    RESTART = 8


class RunMode(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    spawn_y: int = 0
    normal_tick_ms: int = 500
    accelerated_tick_ms: int = 50
    clock_tick_ms: int = 1000


class BlockfallGame:
    """Falling-block game engine.

    Owns the board, the falling piece, score and elapsed time, plus the two
    recurring timers (gravity tick and seconds clock). All mutation happens
    through the methods below, which the presentation layer calls from a
    single event loop.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.current_piece: Optional[Piece] = None
        self.lines_cleared_total = 0
        self._score = 0
        self._elapsed_seconds = 0
        self._run_mode = RunMode.IDLE
        self._accelerated = False
        self._tick_timer = RepeatingTimer(self.scheduler, self.tick, name="tick")
        self._clock_timer = RepeatingTimer(self.scheduler, self._count_second, name="clock")
        self._change_listeners: List[Callable[[], None]] = []
        self._game_over_listeners: List[Callable[[int], None]] = []

    # Observable state

    @property
    def score(self) -> int:
        return self._score

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed_seconds

    @property
    def run_mode(self) -> RunMode:
        return self._run_mode

    @property
    def accelerated(self) -> bool:
        return self._accelerated

    @property
    def tick_period_ms(self) -> int:
        if self._accelerated:
            return self.config.accelerated_tick_ms
        return self.config.normal_tick_ms

    @property
    def game_over(self) -> bool:
        return self._run_mode is RunMode.GAME_OVER

    def add_change_listener(self, listener: Callable[[], None]) -> None:
        self._change_listeners.append(listener)

    def add_game_over_listener(self, listener: Callable[[int], None]) -> None:
        self._game_over_listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._change_listeners:
            listener()

    # State machine

    def _stop_timers(self) -> None:
        self._tick_timer.stop()
        self._clock_timer.stop()

    def _reset(self) -> None:
        self._stop_timers()
        self.grid = GameGrid.create(self.config.width, self.config.height)
        self._score = 0
        self._elapsed_seconds = 0
        self.lines_cleared_total = 0
        self._accelerated = False
        self.current_piece = spawn(self.rng, self.grid.width, self.config.spawn_y)

    def start(self) -> bool:
        """Begin a new game from Idle or GameOver."""
        if self._run_mode not in (RunMode.IDLE, RunMode.GAME_OVER):
            logger.debug("start ignored in %s", self._run_mode.value)
            return False
        self._begin()
        return True

    def restart(self) -> None:
        """Throw away the current game, whatever its state, and start a new one."""
        logger.info("restarting (score was %d)", self._score)
        self._begin()

    def _begin(self) -> None:
        self._reset()
        self._run_mode = RunMode.RUNNING
        self._tick_timer.start(self.config.normal_tick_ms)
        self._clock_timer.start(self.config.clock_tick_ms)
        logger.info("game started with %s", self.current_piece.kind.name)
        self._notify()

    def pause(self) -> bool:
        if self._run_mode is not RunMode.RUNNING:
            logger.debug("pause ignored in %s", self._run_mode.value)
            return False
        self._stop_timers()
        self._run_mode = RunMode.PAUSED
        logger.info("paused at %ds, score %d", self._elapsed_seconds, self._score)
        self._notify()
        return True

    def resume(self) -> bool:
        if self._run_mode is not RunMode.PAUSED:
            logger.debug("resume ignored in %s", self._run_mode.value)
            return False
        self._run_mode = RunMode.RUNNING
        self._tick_timer.start(self.tick_period_ms)
        self._clock_timer.start(self.config.clock_tick_ms)
        logger.info("resumed (accelerated=%s)", self._accelerated)
        self._notify()
        return True

    def toggle_pause(self) -> bool:
        if self._run_mode is RunMode.RUNNING:
            return self.pause()
        return self.resume()

    def set_accelerated(self, accelerated: bool) -> bool:
        """Switch the gravity period between normal and accelerated.

        While paused only the flag changes; resume picks it up.
        """
        if self._run_mode not in (RunMode.RUNNING, RunMode.PAUSED):
            return False
        if accelerated == self._accelerated:
            return False
        self._accelerated = accelerated
        if self._run_mode is RunMode.RUNNING:
            self._tick_timer.set_period(self.tick_period_ms)
        logger.debug("tick period now %d ms", self.tick_period_ms)
        return True

    def _game_over(self) -> None:
        self._stop_timers()
        self._run_mode = RunMode.GAME_OVER
        self._accelerated = False
        self.current_piece = None
        logger.info("game over: score %d, %d lines, %ds", self._score, self.lines_cleared_total, self._elapsed_seconds)
        self._notify()
        for listener in self._game_over_listeners:
            listener(self._score)

    # Piece control

    def _can_control(self) -> bool:
        return self._run_mode is RunMode.RUNNING and self.current_piece is not None

    def try_move(self, dx: int, dy: int) -> bool:
        if not self._can_control():
            return False
        candidate = self.current_piece.moved(dx, dy)
        if collides(self.grid, candidate):
            return False
        self.current_piece = candidate
        self._notify()
        return True

    def try_rotate(self) -> bool:
        # No kick offsets: a rotation that does not fit is rejected in place.
        if not self._can_control():
            return False
        candidate = self.current_piece.rotated()
        if collides(self.grid, candidate):
            return False
        self.current_piece = candidate
        self._notify()
        return True

    def advance_one_step(self) -> bool:
        """Move the piece down one row, locking it if it cannot move.

        Returns True if the piece moved, False if it locked (or nothing ran).
        """
        if not self._can_control():
            return False
        if self.try_move(0, 1):
            return True
        self._lock_piece()
        return False

    def _lock_piece(self) -> None:
        assert self.current_piece is not None
        piece = self.current_piece
        merge(self.grid, piece)
        lines = clear_lines(self.grid)
        self.lines_cleared_total += lines
        self._score += self.rules.score_for_lines(lines)
        logger.debug("locked %s at (%d, %d), cleared %d", piece.kind.name, piece.x, piece.y, lines)
        self.current_piece = spawn(self.rng, self.grid.width, self.config.spawn_y)
        if collides(self.grid, self.current_piece):
            self._game_over()
            return
        self._notify()

    def hard_drop(self) -> bool:
        if not self._can_control():
            return False
        while self.try_move(0, 1):
            pass
        self.advance_one_step()
        return True

    def tick(self) -> None:
        self.advance_one_step()

    def _count_second(self) -> None:
        self._elapsed_seconds += 1
        self._notify()

    def handle(self, action: Action) -> bool:
        """Apply one input action. Returns False if it had no effect."""
        if action == Action.START:
            return self.start()
        if action == Action.RESTART:
            self.restart()
            return True
        if action == Action.TOGGLE_PAUSE:
            return self.toggle_pause()
        if action == Action.SOFT_DROP_STOP:
            return self.set_accelerated(False)
        if not self._can_control():
            return False
        if action == Action.MOVE_LEFT:
            return self.try_move(-1, 0)
        if action == Action.MOVE_RIGHT:
            return self.try_move(1, 0)
        if action == Action.ROTATE_CW:
            return self.try_rotate()
        if action == Action.SOFT_DROP_START:
            self.set_accelerated(True)
            self.advance_one_step()
            return True
        if action == Action.HARD_DROP:
            return self.hard_drop()
        raise ValueError(f"unknown action {action!r}")

    # Rendering

    def visit_cells(self, draw: DrawCell) -> None:
        """Call ``draw(x, y, color_index)`` for every board cell, then the falling piece."""
        for x, y, value in self.grid.occupied():
            draw(x, y, value)
        if self.current_piece is not None:
            for x, y, value in self.current_piece.cells():
                draw(x, y, value)

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid; negative marks the falling piece
        state = self.grid.clone_state()
        if self.current_piece is not None:
            for x, y, value in self.current_piece.cells():
                if self.grid.is_inside(x, y):
                    state[y, x] = -value
        return state
