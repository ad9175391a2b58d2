"""
search.py - Computer opponent for Connect Four

Three strength tiers pick a column for a given side:

1. RANDOM - uniform choice among legal columns
2. GREEDY - win now, else block the opponent's immediate win, else prefer
   center columns
3. SEARCH - minimax with alpha-beta pruning over cloned boards, scored by
   the heuristic evaluator at the horizon

Every simulation runs on a clone; the board handed in is never modified, so
a caller may discard a result it no longer needs.
"""

import math
import random
import time
from enum import Enum
from typing import Callable, List, Optional

from connect_four.ai.evaluator import evaluate
from connect_four.debug import debug
from connect_four.game.board import Board
from connect_four.utils import (CENTER_COLUMN, CENTER_ORDER, DEFAULT_SEARCH_DEPTH, NO_MOVE,
                                THINKING_DELAY_RANGE, WIN_SCORE, Side)


class Difficulty(Enum):
    """AI strength tier."""
    RANDOM = "random"
    GREEDY = "greedy"
    SEARCH = "search"

    @classmethod
    def from_string(cls, value: str) -> 'Difficulty':
        """Parse a tier name; accepts easy/medium/hard as aliases."""
        normalized = str(value).strip().lower()
        aliases = {"easy": cls.RANDOM, "medium": cls.GREEDY, "hard": cls.SEARCH}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown difficulty: {value!r}") from None


def random_move(board: Board, rng: Optional[random.Random] = None) -> int:
    """Uniformly pick a legal column, or NO_MOVE on a full board."""
    legal = board.legal_columns()
    if not legal:
        return NO_MOVE
    return (rng or random).choice(legal)


def find_winning_column(board: Board, side: Side) -> Optional[int]:
    """
    Find the first column in which ``side`` would complete four in a row.

    Args:
        board: Position to inspect (not modified)
        side: Side that would move

    Returns:
        The lowest such column index, or None
    """
    for column in board.legal_columns():
        test_board = board.clone()
        placement = test_board.place(column, side)
        if placement.success and test_board.check_win(placement.row, column, side):
            return column
    return None


def greedy_move(board: Board, side: Side, rng: Optional[random.Random] = None) -> int:
    """
    Pick a column by fixed priorities: win, block, center preference, random.

    Args:
        board: Position to move in (not modified)
        side: Side to move
        rng: Random source for the final fallback

    Returns:
        Chosen column, or NO_MOVE on a full board
    """
    legal = board.legal_columns()
    if not legal:
        return NO_MOVE

    winning = find_winning_column(board, side)
    if winning is not None:
        debug.debug(f"Greedy: winning move in column {winning}", "search")
        return winning

    blocking = find_winning_column(board, side.other())
    if blocking is not None:
        debug.debug(f"Greedy: blocking column {blocking}", "search")
        return blocking

    for column in CENTER_ORDER:
        if column in legal:
            return column

    return random_move(board, rng)


class MinimaxPlayer:
    """
    Fixed-depth minimax search with alpha-beta pruning.

    The root tries legal columns in ascending order and keeps the first one
    with the strictly highest score. Wins found deeper in the tree score
    WIN_SCORE plus the remaining depth, so faster wins beat slower ones and
    slower losses beat faster ones.
    """

    def __init__(self, depth: int = DEFAULT_SEARCH_DEPTH):
        """
        Initialize the minimax player.

        Args:
            depth: Plies searched, counting the root move
        """
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")
        self.depth = depth
        self.nodes_evaluated = 0
        self.last_score: Optional[float] = None

    def get_move(self, board: Board, side: Side) -> int:
        """
        Get the best column for ``side``.

        Args:
            board: The current position (not modified)
            side: Side to move

        Returns:
            The chosen column, or NO_MOVE on a full board
        """
        self.nodes_evaluated = 0
        self.last_score = None

        legal = board.legal_columns()
        if not legal:
            return NO_MOVE

        best_score = -math.inf
        best_column = legal[0]
        alpha = -math.inf
        beta = math.inf

        for column in legal:
            child = board.clone()
            child.place(column, side)

            score = self._minimax(child, self.depth - 1, alpha, beta, False, side)
            debug.trace(f"Root column {column} scored {score}", "search")

            if score > best_score:
                best_score = score
                best_column = column
            alpha = max(alpha, score)

        self.last_score = best_score
        return best_column

    @staticmethod
    def _ordered_columns(board: Board) -> List[int]:
        # Center-first ordering tightens the window sooner
        return sorted(board.legal_columns(), key=lambda c: abs(c - CENTER_COLUMN))

    def _minimax(self, board: Board, depth: int, alpha: float, beta: float,
                 is_maximizing: bool, side: Side) -> float:
        """
        Score ``board`` for ``side`` by searching ``depth`` more plies.

        Args:
            board: Position after the previous ply
            depth: Remaining plies
            alpha: Best score the maximizer can already guarantee
            beta: Best score the minimizer can already guarantee
            is_maximizing: True when ``side`` is to move
            side: The side the search is run for

        Returns:
            Position score from ``side``'s point of view
        """
        self.nodes_evaluated += 1
        opponent = side.other()

        if board.has_connection(side):
            return WIN_SCORE + depth
        if board.has_connection(opponent):
            return -WIN_SCORE - depth

        columns = self._ordered_columns(board)
        if not columns:
            return 0

        if depth <= 0:
            return evaluate(board, side)

        if is_maximizing:
            max_score = -math.inf
            for column in columns:
                child = board.clone()
                child.place(column, side)

                score = self._minimax(child, depth - 1, alpha, beta, False, side)
                max_score = max(max_score, score)
                alpha = max(alpha, score)

                if alpha >= beta:
                    break
            return max_score

        min_score = math.inf
        for column in columns:
            child = board.clone()
            child.place(column, opponent)

            score = self._minimax(child, depth - 1, alpha, beta, True, side)
            min_score = min(min_score, score)
            beta = min(beta, score)

            if alpha >= beta:
                break
        return min_score


def choose_move(board: Board, difficulty: Difficulty, side: Side,
                depth: int = DEFAULT_SEARCH_DEPTH,
                rng: Optional[random.Random] = None) -> int:
    """
    Pick a column for ``side`` at the given strength tier.

    Args:
        board: The current position (not modified)
        difficulty: Strength tier
        side: Side to move
        depth: Search depth for the SEARCH tier
        rng: Random source for the RANDOM tier and the GREEDY fallback

    Returns:
        A column from board.legal_columns(), or NO_MOVE if there is none
    """
    if not board.legal_columns():
        debug.warning("AI asked to move on a full board", "search")
        return NO_MOVE

    debug.start_timer("choose_move")
    if difficulty == Difficulty.RANDOM:
        column = random_move(board, rng)
    elif difficulty == Difficulty.GREEDY:
        column = greedy_move(board, side, rng)
    else:
        player = MinimaxPlayer(depth=depth)
        column = player.get_move(board, side)
        debug.debug(f"Search depth {depth}: {player.nodes_evaluated} nodes, "
                    f"score {player.last_score}", "search")
    elapsed = debug.end_timer("choose_move", "search")

    debug.info(f"{side.label} ({difficulty.value}) chose column {column} "
               f"in {elapsed:.3f}s", "search")
    return column


def simulate_thinking_delay(min_seconds: float = THINKING_DELAY_RANGE[0],
                            max_seconds: float = THINKING_DELAY_RANGE[1],
                            on_thinking: Optional[Callable[[], None]] = None,
                            sleep: Callable[[float], None] = time.sleep,
                            rng: Optional[random.Random] = None) -> float:
    """
    Pause for a random interval so AI replies do not appear instantly.

    Args:
        min_seconds: Shortest pause
        max_seconds: Longest pause
        on_thinking: Called once before pausing (e.g. to show a status line)
        sleep: Sleep function, replaceable in tests
        rng: Random source

    Returns:
        The interval slept, in seconds
    """
    delay = (rng or random).uniform(min_seconds, max_seconds)
    if on_thinking is not None:
        on_thinking()
    sleep(delay)
    return delay
