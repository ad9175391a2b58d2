"""
evaluator.py - Heuristic position scoring for Connect Four

Scores a board from one side's point of view. Positive numbers favour that
side, negative numbers its opponent. Finished positions score +/-WIN_SCORE so
they always dominate the heuristic terms.
"""

from typing import Dict

from connect_four.game.board import Board, count_runs
from connect_four.utils import (CENTER_COLUMN, CENTER_WEIGHT, PAIR_WEIGHT, WIN_SCORE,
                                WIN_DIRECTIONS, Side)


def _center_score(board: Board, side: Side) -> int:
    center = board.grid[:, CENTER_COLUMN]
    mine = int((center == side.value).sum())
    theirs = int((center == side.other().value).sum())
    return (mine - theirs) * CENTER_WEIGHT


def _pair_score(board: Board, side: Side) -> int:
    mine = board.grid == side.value
    theirs = board.grid == side.other().value
    score = 0
    for dr, dc in WIN_DIRECTIONS:
        score += count_runs(mine, dr, dc, 2) * PAIR_WEIGHT
        score -= count_runs(theirs, dr, dc, 2) * PAIR_WEIGHT
    return score


def evaluate(board: Board, side: Side) -> int:
    """
    Score ``board`` for ``side``.

    Args:
        board: Position to score (not modified)
        side: Side the score is relative to

    Returns:
        WIN_SCORE / -WIN_SCORE for won / lost positions, otherwise the
        center-control and adjacent-pair heuristic
    """
    if board.has_connection(side):
        return WIN_SCORE
    if board.has_connection(side.other()):
        return -WIN_SCORE

    return _center_score(board, side) + _pair_score(board, side)


def evaluation_breakdown(board: Board, side: Side) -> Dict[str, int]:
    """Individual heuristic terms, used by the CLI position analysis."""
    return {
        'center': _center_score(board, side),
        'pairs': _pair_score(board, side),
        'total': evaluate(board, side),
    }
