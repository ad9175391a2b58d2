"""
utils.py - Constants and enumerations shared across the Connect Four engine

Board geometry, scoring weights, AI tuning values and the Side / GameResult
enumerations live here so the board, evaluator, search and session modules
agree on them.
"""

from enum import Enum, auto
from typing import Tuple, List

import numpy as np

# Board geometry
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of tokens in a row to win

# Sentinels
FULL_COLUMN = -1  # lowest_empty_row() result for a full or invalid column
NO_MOVE = -1      # choose_move() result when no legal column exists

# Evaluation weights
WIN_SCORE = 10000
CENTER_COLUMN = COLS // 2
CENTER_WEIGHT = 3
PAIR_WEIGHT = 2

# AI tuning
CENTER_ORDER = (3, 2, 4, 1, 5, 0, 6)
DEFAULT_SEARCH_DEPTH = 5
THINKING_DELAY_RANGE = (0.5, 1.0)  # seconds

# Session limits
MAX_UNDO_DEPTH = ROWS * COLS


class Side(Enum):
    """A cell state, doubling as the identity of each competing side."""
    EMPTY = 0
    RED = 1
    YELLOW = 2

    def other(self) -> 'Side':
        """Get the opposing side."""
        if self == Side.RED:
            return Side.YELLOW
        elif self == Side.YELLOW:
            return Side.RED
        return Side.EMPTY

    @property
    def symbol(self) -> str:
        return {Side.EMPTY: ".", Side.RED: "R", Side.YELLOW: "Y"}[self]

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_string(cls, value: str) -> 'Side':
        """Parse 'red', 'yellow', 'r', 'y' or '1'/'2'."""
        normalized = str(value).strip().lower()
        aliases = {
            "red": cls.RED, "r": cls.RED, "1": cls.RED,
            "yellow": cls.YELLOW, "y": cls.YELLOW, "2": cls.YELLOW,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown side: {value!r}")
        return aliases[normalized]


class GameResult(Enum):
    """Outcome of a game after the most recent move."""
    IN_PROGRESS = auto()
    WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        return self != GameResult.IN_PROGRESS


# Win axes in the order check_win examines them: right, down, down-right, down-left
WIN_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


def is_valid_position(row: int, col: int) -> bool:
    """Check if a position is within the board boundaries."""
    return 0 <= row < ROWS and 0 <= col < COLS


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render a board grid as ASCII art.

    Args:
        grid: ROWS x COLS array of Side values

    Returns:
        Multi-line string with column numbers along the top
    """
    lines: List[str] = ["  " + " ".join(str(c) for c in range(COLS))]
    lines.append("  " + "-" * (COLS * 2 - 1))
    for row in range(ROWS):
        cells = " ".join(Side(int(grid[row, col])).symbol for col in range(COLS))
        lines.append(f"{row}|{cells}")
    lines.append("  " + "-" * (COLS * 2 - 1))
    return "\n".join(lines)
