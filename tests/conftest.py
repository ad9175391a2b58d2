"""
Pytest configuration for the Connect Four tests.

Puts the project root on sys.path so the tests run from a plain checkout,
and provides small board builders shared by the test modules.
"""

import sys
from pathlib import Path
from typing import Dict, Iterable, Tuple

import pytest

_root_path = str(Path(__file__).resolve().parent.parent)
if _root_path not in sys.path:
    sys.path.insert(0, _root_path)

from connect_four.debug import debug, DebugLevel  # noqa: E402
from connect_four.game.board import Board  # noqa: E402
from connect_four.utils import Side  # noqa: E402

Cells = Iterable[Tuple[int, int]]


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep engine logging at WARNING unless a test changes it."""
    debug.configure(level=DebugLevel.WARNING, components=[])
    yield
    debug.configure(level=DebugLevel.WARNING, components=[])


@pytest.fixture
def make_board():
    """Build a board by setting cells directly: make_board({Side.RED: [(5, 0)]})."""
    def _make(cells: Dict[Side, Cells]) -> Board:
        board = Board()
        for side, positions in cells.items():
            for row, col in positions:
                board.grid[row, col] = side.value
        return board
    return _make


@pytest.fixture
def play_columns():
    """Drop tokens column by column with alternating sides, Red first."""
    def _play(columns: Iterable[int], first: Side = Side.RED) -> Board:
        board = Board()
        side = first
        for column in columns:
            assert board.place(column, side).success
            side = side.other()
        return board
    return _play
