"""Tests for the Board class: gravity, occupancy and win detection."""

import random

import numpy as np
import pytest

from connect_four.game.board import Board
from connect_four.utils import COLS, FULL_COLUMN, ROWS, Side


def _random_board(seed: int, moves: int) -> Board:
    rng = random.Random(seed)
    board = Board()
    side = Side.RED
    for _ in range(moves):
        legal = board.legal_columns()
        if not legal:
            break
        board.place(rng.choice(legal), side)
        side = side.other()
    return board


def test_new_board_is_empty():
    board = Board.create()
    assert board.grid.shape == (ROWS, COLS)
    assert board.token_count() == 0
    assert board.legal_columns() == list(range(COLS))


def test_clone_is_independent():
    board = Board()
    board.place(3, Side.RED)
    clone = board.clone()

    clone.grid[0, 0] = Side.YELLOW.value
    clone.place(3, Side.YELLOW)

    assert board.cell(0, 0) == Side.EMPTY
    assert board.cell(4, 3) == Side.EMPTY
    assert board.token_count() == 1
    assert clone.token_count() == 3


def test_lowest_empty_row_follows_gravity():
    board = Board()
    assert board.lowest_empty_row(0) == ROWS - 1

    board.grid[5, 0] = Side.RED.value
    assert board.lowest_empty_row(0) == 4
    board.grid[4, 0] = Side.YELLOW.value
    assert board.lowest_empty_row(0) == 3


def test_lowest_empty_row_full_and_out_of_range():
    board = Board()
    for row in range(ROWS):
        board.grid[row, 2] = Side.RED.value

    assert board.lowest_empty_row(2) == FULL_COLUMN
    assert board.lowest_empty_row(-1) == FULL_COLUMN
    assert board.lowest_empty_row(COLS) == FULL_COLUMN


def test_place_reports_landing_row():
    board = Board()
    first = board.place(4, Side.RED)
    second = board.place(4, Side.YELLOW)

    assert first.success and first.row == 5 and first.column == 4
    assert second.success and second.row == 4
    assert board.cell(5, 4) == Side.RED
    assert board.cell(4, 4) == Side.YELLOW


@pytest.mark.parametrize("column", [-1, COLS, 99])
def test_place_out_of_range_leaves_board_unchanged(column):
    board = Board()
    board.place(3, Side.RED)
    before = board.grid.copy()

    result = board.place(column, Side.YELLOW)

    assert not result.success
    assert result.row == FULL_COLUMN
    assert np.array_equal(board.grid, before)


def test_place_empty_side_raises():
    with pytest.raises(ValueError):
        Board().place(0, Side.EMPTY)


def test_every_placement_raises_the_landing_row_by_one():
    rng = random.Random(7)
    board = Board()
    side = Side.RED
    while board.legal_columns():
        column = rng.choice(board.legal_columns())
        before = board.lowest_empty_row(column)

        result = board.place(column, side)

        assert result.success and result.row == before
        after = board.lowest_empty_row(column)
        assert after == before - 1 or (before == 0 and after == FULL_COLUMN)
        side = side.other()
    assert board.is_board_full()


def test_full_column_rejects_seventh_token(play_columns):
    board = play_columns([0] * ROWS)
    before = board.grid.copy()

    result = board.place(0, Side.RED)

    assert not result.success
    assert board.is_column_full(0)
    assert 0 not in board.legal_columns()
    assert board.legal_columns() == [1, 2, 3, 4, 5, 6]
    assert np.array_equal(board.grid, before)


def test_is_column_full_out_of_range():
    board = Board()
    assert board.is_column_full(-1)
    assert board.is_column_full(COLS)
    assert not board.is_column_full(0)


def test_is_board_full_only_checks_top_row():
    board = Board()
    board.grid[0, :] = Side.RED.value
    assert board.is_board_full()

    board.grid[0, 6] = Side.EMPTY.value
    assert not board.is_board_full()


def test_horizontal_win_line(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1), (5, 2), (5, 3)],
                        Side.YELLOW: [(4, 0), (4, 1), (4, 2)]})

    result = board.check_win(5, 3, Side.RED)

    assert result.win
    assert result.line == [(5, 0), (5, 1), (5, 2), (5, 3)]


def test_vertical_win_line(make_board):
    board = make_board({Side.YELLOW: [(5, 6), (4, 6), (3, 6), (2, 6)]})

    result = board.check_win(2, 6, Side.YELLOW)

    assert result.win
    assert result.line == [(2, 6), (3, 6), (4, 6), (5, 6)]


def test_down_right_diagonal_win_line(make_board):
    board = make_board({Side.RED: [(2, 0), (3, 1), (4, 2), (5, 3)]})

    assert board.check_win(2, 0, Side.RED).line == [(2, 0), (3, 1), (4, 2), (5, 3)]
    assert board.check_win(5, 3, Side.RED).line == [(2, 0), (3, 1), (4, 2), (5, 3)]


def test_down_left_diagonal_win_line(make_board):
    board = make_board({Side.RED: [(5, 0), (4, 1), (3, 2), (2, 3)]})

    assert board.check_win(2, 3, Side.RED).line == [(2, 3), (3, 2), (4, 1), (5, 0)]
    assert board.check_win(5, 0, Side.RED).line == [(2, 3), (3, 2), (4, 1), (5, 0)]


def test_run_longer_than_four_is_truncated(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1), (5, 2), (5, 3), (5, 4)]})

    # A short forward run is extended backward, then cut to four cells
    assert board.check_win(5, 2, Side.RED).line == [(5, 0), (5, 1), (5, 2), (5, 3)]
    assert board.check_win(5, 0, Side.RED).line == [(5, 0), (5, 1), (5, 2), (5, 3)]
    assert board.check_win(5, 4, Side.RED).line == [(5, 1), (5, 2), (5, 3), (5, 4)]


def test_no_win_for_three_or_broken_lines(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1), (5, 3), (5, 4)],
                        Side.YELLOW: [(5, 6), (4, 6), (3, 6)]})

    assert not board.check_win(5, 1, Side.RED)
    assert not board.check_win(3, 6, Side.YELLOW)
    assert board.check_win(3, 6, Side.YELLOW).line == []


def test_check_win_requires_origin_to_hold_side(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1), (5, 2)]})

    assert not board.check_win(5, 3, Side.RED)
    assert not board.check_win(5, 0, Side.YELLOW)


@pytest.mark.parametrize("seed", range(20))
def test_check_win_is_symmetric_under_relabeling(seed):
    board = _random_board(seed, moves=30)
    swapped = Board(np.where(board.grid == 0, 0, 3 - board.grid))

    for row in range(ROWS):
        for col in range(COLS):
            for side in (Side.RED, Side.YELLOW):
                result = board.check_win(row, col, side)
                relabeled = swapped.check_win(row, col, side.other())
                assert result.win == relabeled.win
                assert result.line == relabeled.line


@pytest.mark.parametrize("seed", range(10))
def test_has_connection_matches_cell_scan(seed):
    board = _random_board(seed, moves=35)
    for side in (Side.RED, Side.YELLOW):
        scanned = any(board.check_win(r, c, side) for r in range(ROWS) for c in range(COLS))
        assert board.has_connection(side) == scanned


def test_from_list_validates_shape_and_values():
    with pytest.raises(ValueError):
        Board.from_list([[0] * COLS] * (ROWS - 1))
    with pytest.raises(ValueError):
        Board.from_list([[3] * COLS] * ROWS)

    board = Board.from_list([[0] * COLS] * (ROWS - 1) + [[1, 2, 0, 0, 0, 0, 0]])
    assert board.cell(5, 0) == Side.RED
    assert board.to_list()[5][:2] == [1, 2]


def test_render_shows_tokens():
    board = Board()
    board.place(0, Side.RED)
    board.place(1, Side.YELLOW)

    lines = board.render().splitlines()
    assert lines[0].split() == [str(c) for c in range(COLS)]
    assert lines[-2].startswith("5|R Y .")
