"""
board.py - Board representation and core mechanics for Connect Four

This module implements the Board class: a 6x7 grid with gravity placement,
occupancy queries and win-line detection. The board records only what
occupies each cell; whose turn it is belongs to the game session.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from connect_four.debug import debug
from connect_four.utils import (ROWS, COLS, CONNECT_N, FULL_COLUMN, WIN_DIRECTIONS,
                                Side, is_valid_position, render_board_ascii)

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Placement:
    """Result of dropping a token into a column."""
    success: bool
    row: int
    column: int


@dataclass(frozen=True)
class WinCheck:
    """Result of a win query: the flag plus the four winning cells."""
    win: bool
    line: List[Cell] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.win


def _shifted_window(mask: np.ndarray, dr: int, dc: int, step: int, length: int) -> np.ndarray:
    """
    Slice of ``mask`` holding the ``step``-th cell of every run of ``length``
    cells along (dr, dc), aligned so that index [i, j] refers to the same run
    in every step.
    """
    rows, cols = mask.shape
    r_span = rows - (length - 1) * abs(dr)
    c_span = cols - (length - 1) * abs(dc)
    r0 = (length - 1) * max(0, -dr) + step * dr
    c0 = (length - 1) * max(0, -dc) + step * dc
    return mask[r0:r0 + r_span, c0:c0 + c_span]


def count_runs(mask: np.ndarray, dr: int, dc: int, length: int) -> int:
    """Count runs of ``length`` True cells along direction (dr, dc)."""
    acc = _shifted_window(mask, dr, dc, 0, length).copy()
    for step in range(1, length):
        acc &= _shifted_window(mask, dr, dc, step, length)
    return int(acc.sum())


class Board:
    """
    A Connect Four board.

    Cells hold Side values in a numpy array indexed [row, col]; row 0 is the
    top and row ROWS-1 the bottom. ``place`` is the only method that changes
    cell contents.
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Create a board, empty unless a grid is supplied.

        Args:
            grid: Optional ROWS x COLS array of Side values to copy
        """
        if grid is None:
            self.grid = np.zeros((ROWS, COLS), dtype=np.int8)
        else:
            grid = np.asarray(grid)
            if grid.shape != (ROWS, COLS):
                raise ValueError(f"Board grid must be {ROWS}x{COLS}, got {grid.shape}")
            if not np.isin(grid, [s.value for s in Side]).all():
                raise ValueError("Board grid may only contain 0, 1 or 2")
            self.grid = grid.astype(np.int8, copy=True)

    @classmethod
    def create(cls) -> 'Board':
        """Create a new empty board."""
        return cls()

    @classmethod
    def from_list(cls, rows: Sequence[Sequence[int]]) -> 'Board':
        """Build a board from nested lists of cell values (top row first)."""
        return cls(np.array(rows, dtype=np.int8))

    def clone(self) -> 'Board':
        """
        Create an independent deep copy of this board.

        Returns:
            A new Board whose grid shares no memory with this one
        """
        new_board = Board.__new__(Board)
        new_board.grid = self.grid.copy()
        return new_board

    copy = clone

    def cell(self, row: int, col: int) -> Side:
        return Side(int(self.grid[row, col]))

    def lowest_empty_row(self, column: int) -> int:
        """
        Find the row a token dropped into ``column`` would land on.

        Args:
            column: Column index (0-indexed)

        Returns:
            The bottommost empty row, or FULL_COLUMN if the column is full
            or out of range
        """
        if not (0 <= column < COLS):
            return FULL_COLUMN

        for row in range(ROWS - 1, -1, -1):
            if self.grid[row, column] == Side.EMPTY.value:
                return row
        return FULL_COLUMN

    def place(self, column: int, side: Side) -> Placement:
        """
        Drop a token for ``side`` into ``column``.

        Args:
            column: Column index (0-indexed)
            side: Side placing the token

        Returns:
            Placement with the landing row on success; on failure the board
            is unchanged and ``row`` is FULL_COLUMN
        """
        if side == Side.EMPTY:
            raise ValueError("Cannot place an EMPTY token")

        row = self.lowest_empty_row(column)
        if row == FULL_COLUMN:
            debug.debug(f"Rejected placement in column {column}: full or out of range", "board")
            return Placement(False, FULL_COLUMN, column)

        self.grid[row, column] = side.value
        debug.trace(f"{side.label} placed at ({row}, {column})", "board")
        return Placement(True, row, column)

    def is_column_full(self, column: int) -> bool:
        """True iff no token can be dropped into ``column``."""
        if not (0 <= column < COLS):
            return True
        return self.grid[0, column] != Side.EMPTY.value

    def is_board_full(self) -> bool:
        """True iff every column's top cell is occupied."""
        return bool((self.grid[0] != Side.EMPTY.value).all())

    def legal_columns(self) -> List[int]:
        """Columns that still accept a token, in ascending order."""
        return [col for col in range(COLS) if self.grid[0, col] == Side.EMPTY.value]

    def check_win(self, row: int, col: int, side: Side) -> WinCheck:
        """
        Check whether the cell at (row, col) is part of four in a row for ``side``.

        Each axis is walked forward from the origin first; only when that run
        is short of CONNECT_N is it extended backward, prepending cells. The
        first axis reaching CONNECT_N wins and its line is cut to the first
        CONNECT_N cells assembled.

        The origin must already hold ``side``; this asks whether an existing
        token completes a line, not whether dropping one there would. An
        origin holding anything else reports no win.

        Args:
            row: Row of the origin cell
            col: Column of the origin cell
            side: Side to check for

        Returns:
            WinCheck with the winning line, or a no-win result
        """
        if side == Side.EMPTY or not is_valid_position(row, col):
            return WinCheck(False)
        if self.grid[row, col] != side.value:
            return WinCheck(False)

        for d_row, d_col in WIN_DIRECTIONS:
            line: List[Cell] = [(row, col)]

            for i in range(1, CONNECT_N):
                r, c = row + d_row * i, col + d_col * i
                if not is_valid_position(r, c) or self.grid[r, c] != side.value:
                    break
                line.append((r, c))

            if len(line) < CONNECT_N:
                for i in range(1, CONNECT_N):
                    r, c = row - d_row * i, col - d_col * i
                    if not is_valid_position(r, c) or self.grid[r, c] != side.value:
                        break
                    line.insert(0, (r, c))

            if len(line) >= CONNECT_N:
                return WinCheck(True, line[:CONNECT_N])

        return WinCheck(False)

    def has_connection(self, side: Side) -> bool:
        """True iff ``side`` has CONNECT_N in a row anywhere on the board."""
        if side == Side.EMPTY:
            return False
        mask = self.grid == side.value
        return any(count_runs(mask, dr, dc, CONNECT_N) for dr, dc in WIN_DIRECTIONS)

    def token_count(self, side: Optional[Side] = None) -> int:
        """Number of tokens on the board, optionally for one side only."""
        if side is None:
            return int((self.grid != Side.EMPTY.value).sum())
        return int((self.grid == side.value).sum())

    def to_list(self) -> List[List[int]]:
        """Nested-list snapshot of the grid, safe to serialize."""
        return self.grid.tolist()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Board(tokens={self.token_count()})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))
