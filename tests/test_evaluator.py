"""Tests for the heuristic evaluator."""

import random

import pytest

from connect_four.ai.evaluator import evaluate, evaluation_breakdown
from connect_four.game.board import Board
from connect_four.utils import WIN_SCORE, Side


def test_empty_board_scores_zero():
    board = Board()
    assert evaluate(board, Side.RED) == 0
    assert evaluate(board, Side.YELLOW) == 0


def test_center_token_is_worth_three(make_board):
    board = make_board({Side.RED: [(5, 3)]})
    assert evaluate(board, Side.RED) == 3
    assert evaluate(board, Side.YELLOW) == -3


def test_adjacent_pairs_count_in_all_directions(make_board):
    horizontal = make_board({Side.RED: [(5, 0), (5, 1)]})
    vertical = make_board({Side.RED: [(5, 0), (4, 0)]})
    diagonal = make_board({Side.RED: [(5, 1), (4, 0)]})
    anti_diagonal = make_board({Side.RED: [(5, 0), (4, 1)]})

    for board in (horizontal, vertical, diagonal, anti_diagonal):
        assert evaluate(board, Side.RED) == 2


def test_center_column_stack(make_board):
    board = make_board({Side.RED: [(5, 3), (4, 3), (3, 3)], Side.YELLOW: [(5, 0)]})

    # Three center tokens plus two vertical pairs
    assert evaluate(board, Side.RED) == 3 * 3 + 2 * 2
    assert evaluate(board, Side.YELLOW) == -(3 * 3 + 2 * 2)


def test_opponent_pairs_subtract(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1)], Side.YELLOW: [(4, 0), (4, 1), (4, 2)]})
    # Red: one pair; Yellow: two pairs horizontally
    assert evaluate(board, Side.RED) == 2 - 4


def test_won_and_lost_positions(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1), (5, 2), (5, 3)],
                        Side.YELLOW: [(4, 0), (4, 1), (4, 2)]})

    assert evaluate(board, Side.RED) == WIN_SCORE
    assert evaluate(board, Side.YELLOW) == -WIN_SCORE


def test_own_connection_is_checked_first(make_board):
    board = make_board({Side.RED: [(5, 0), (5, 1), (5, 2), (5, 3)],
                        Side.YELLOW: [(4, 0), (4, 1), (4, 2), (4, 3)]})

    assert evaluate(board, Side.RED) == WIN_SCORE
    assert evaluate(board, Side.YELLOW) == WIN_SCORE


def _undecided_board(seed: int) -> Board:
    """Random position in which neither side has four in a row."""
    rng = random.Random(seed)
    board = Board()
    side = Side.RED
    for _ in range(rng.randint(1, 20)):
        safe = []
        for column in board.legal_columns():
            trial = board.clone()
            placement = trial.place(column, side)
            if not trial.check_win(placement.row, column, side):
                safe.append(column)
        if not safe:
            break
        board.place(rng.choice(safe), side)
        side = side.other()
    return board


@pytest.mark.parametrize("seed", range(15))
def test_score_is_antisymmetric_between_sides(seed):
    board = _undecided_board(seed)
    assert not board.has_connection(Side.RED)
    assert not board.has_connection(Side.YELLOW)

    assert evaluate(board, Side.RED) == -evaluate(board, Side.YELLOW)


def test_evaluate_does_not_modify_board(make_board):
    board = make_board({Side.RED: [(5, 3)], Side.YELLOW: [(5, 4)]})
    before = board.clone()

    evaluate(board, Side.RED)

    assert board == before


def test_evaluation_breakdown_terms(make_board):
    board = make_board({Side.RED: [(5, 3), (5, 2)], Side.YELLOW: [(4, 2)]})

    breakdown = evaluation_breakdown(board, Side.RED)

    assert breakdown == {'center': 3, 'pairs': 2, 'total': 5}
