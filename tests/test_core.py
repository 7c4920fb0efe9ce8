import numpy as np

from blockfall.game import (
    Action,
    BlockfallGame,
    GameConfig,
    ManualScheduler,
    Piece,
    RunMode,
    TetrominoType,
    collides,
)


def test_new_game_is_idle():
    game = BlockfallGame(GameConfig(random_seed=0))
    assert game.run_mode is RunMode.IDLE
    assert game.current_piece is None
    assert not game.try_move(1, 0)
    assert not game.advance_one_step()


def test_start_spawns_piece_and_arms_timers(game, scheduler):
    assert game.run_mode is RunMode.RUNNING
    assert game.current_piece is not None
    assert game.current_piece.y == 0
    assert not collides(game.grid, game.current_piece)
    assert game.score == 0
    assert game.elapsed_seconds == 0
    assert scheduler.active_tasks == 2


def test_start_ignored_while_running(game):
    game.grid.set(0, 19, 1)
    assert not game.start()
    assert game.grid.get(0, 19) == 1


def test_failed_move_changes_nothing(game, o_piece):
    game.current_piece = o_piece.moved(-4, 0)
    board = game.grid.clone_state()
    before = game.current_piece
    assert not game.try_move(-1, 0)
    assert game.current_piece is before
    assert np.array_equal(game.grid.grid, board)


def test_rotation_blocked_by_wall_is_rejected(game):
    # Vertical I hugging the left wall cannot rotate back to horizontal without a kick
    piece = Piece.from_template(TetrominoType.I, 10).rotated()
    left = -int(np.nonzero(piece.shape)[1][0])
    game.current_piece = Piece(piece.kind, piece.shape, left, 5)
    assert not collides(game.grid, game.current_piece)
    before = game.current_piece
    assert not game.try_rotate()
    assert game.current_piece is before


def test_rotation_in_open_space(game):
    game.current_piece = Piece.from_template(TetrominoType.T, 10).moved(0, 5)
    assert game.try_rotate()
    assert game.current_piece.shape.tolist() == [[0, 6, 0], [6, 6, 0], [0, 6, 0]]


def test_o_piece_locks_at_bottom_after_nineteen_steps(game, o_piece):
    game.current_piece = o_piece
    assert (o_piece.x, o_piece.y) == (4, 0)
    for _ in range(18):
        assert game.advance_one_step()
    assert game.current_piece.y == 18
    assert not game.advance_one_step()
    assert game.grid.get(4, 18) == 4
    assert game.grid.get(5, 19) == 4
    assert np.count_nonzero(game.grid.grid) == 4
    assert game.score == 0
    assert game.current_piece.y == 0
    assert game.run_mode is RunMode.RUNNING


def test_hard_drop_clears_a_line(game, o_piece, fill_row):
    fill_row(game.grid, 19, skip=(0, 1))
    game.current_piece = o_piece.moved(-4, 0)
    assert game.hard_drop()
    assert game.score == 100
    assert game.lines_cleared_total == 1
    assert game.grid.rows() == 20
    # What was row 18 of the O is now the bottom row
    assert game.grid.grid[19].tolist() == [4, 4, 0, 0, 0, 0, 0, 0, 0, 0]


def test_score_for_double_is_applied_once(game, o_piece, fill_row):
    fill_row(game.grid, 18, skip=(0, 1))
    fill_row(game.grid, 19, skip=(0, 1))
    seen = []
    game.add_change_listener(lambda: seen.append(game.score))
    game.current_piece = o_piece.moved(-4, 0)
    game.hard_drop()
    assert game.score == 200
    assert 100 not in seen
    assert not np.any(game.grid.grid)


def test_game_over_when_spawn_collides(game, o_piece, fill_row):
    for y in range(2, 20):
        fill_row(game.grid, y, skip=(0,))
    final = []
    game.add_game_over_listener(final.append)
    game.current_piece = o_piece
    assert not game.advance_one_step()
    assert game.run_mode is RunMode.GAME_OVER
    assert game.current_piece is None
    assert final == [0]
    assert game.scheduler.active_tasks == 0
    assert not game.handle(Action.MOVE_LEFT)


def test_tick_drives_gravity(game, scheduler):
    y0 = game.current_piece.y
    scheduler.advance(499)
    assert game.current_piece.y == y0
    scheduler.advance(1)
    assert game.current_piece.y == y0 + 1


def test_elapsed_time_counts_seconds(game, scheduler):
    scheduler.advance(2500)
    assert game.elapsed_seconds == 2


def test_pause_freezes_everything(game, scheduler):
    scheduler.advance(1000)
    assert game.pause()
    piece = game.current_piece
    scheduler.advance(10000)
    assert game.current_piece is piece
    assert game.elapsed_seconds == 1
    assert scheduler.active_tasks == 0
    assert not game.try_move(1, 0)
    assert not game.pause()


def test_resume_restarts_both_timers(game, scheduler):
    game.pause()
    assert game.resume()
    assert game.run_mode is RunMode.RUNNING
    assert scheduler.active_tasks == 2
    assert not game.resume()


def test_resume_keeps_accelerated_rate(game, scheduler):
    game.set_accelerated(True)
    game.pause()
    game.resume()
    y0 = game.current_piece.y
    scheduler.advance(50)
    assert game.current_piece.y == y0 + 1


def test_release_during_pause_resumes_at_normal_rate(game, scheduler):
    game.set_accelerated(True)
    game.pause()
    game.set_accelerated(False)
    game.resume()
    assert game.tick_period_ms == 500
    y0 = game.current_piece.y
    scheduler.advance(450)
    assert game.current_piece.y == y0


def test_accelerate_and_release_leaves_one_tick_stream(game, scheduler):
    game.handle(Action.SOFT_DROP_START)
    game.handle(Action.SOFT_DROP_START)
    game.handle(Action.SOFT_DROP_STOP)
    game.handle(Action.SOFT_DROP_STOP)
    assert not game.accelerated
    assert game.tick_period_ms == 500
    # one tick timer plus the seconds clock
    assert scheduler.active_tasks == 2
    y0 = game.current_piece.y
    scheduler.advance(500)
    assert game.current_piece.y == y0 + 1


def test_soft_drop_start_steps_immediately(game):
    y0 = game.current_piece.y
    game.handle(Action.SOFT_DROP_START)
    assert game.current_piece.y == y0 + 1
    assert game.accelerated


def test_restart_resets_from_any_state(game, scheduler, fill_row):
    fill_row(game.grid, 19, skip=(0,))
    scheduler.advance(3000)
    game.pause()
    game.restart()
    assert game.run_mode is RunMode.RUNNING
    assert not np.any(game.grid.grid)
    assert game.elapsed_seconds == 0
    assert game.score == 0
    assert scheduler.active_tasks == 2


def test_start_after_game_over(game, o_piece, fill_row):
    for y in range(2, 20):
        fill_row(game.grid, y, skip=(0,))
    game.current_piece = o_piece
    game.advance_one_step()
    assert game.handle(Action.START)
    assert game.run_mode is RunMode.RUNNING
    assert game.score == 0


def test_visit_cells_skips_empty(game, o_piece):
    game.grid.set(0, 19, 2)
    game.current_piece = o_piece
    drawn = []
    game.visit_cells(lambda x, y, c: drawn.append((x, y, c)))
    assert (0, 19, 2) in drawn
    assert sorted(drawn[1:]) == [(4, 0, 4), (4, 1, 4), (5, 0, 4), (5, 1, 4)]
    assert all(c != 0 for _, _, c in drawn)


def test_get_state_marks_falling_piece_negative(game, o_piece):
    game.current_piece = o_piece
    state = game.get_state()
    assert state[0, 4] == -4
    assert game.grid.get(4, 0) == 0


def test_handle_toggle_pause(game):
    assert game.handle(Action.TOGGLE_PAUSE)
    assert game.run_mode is RunMode.PAUSED
    assert game.handle(Action.TOGGLE_PAUSE)
    assert game.run_mode is RunMode.RUNNING


def test_same_seed_same_pieces():
    kinds = []
    for _ in range(2):
        g = BlockfallGame(GameConfig(random_seed=99), scheduler=ManualScheduler())
        g.start()
        seq = []
        for _ in range(5):
            seq.append(g.current_piece.kind)
            g.hard_drop()
        kinds.append(seq)
    assert kinds[0] == kinds[1]
