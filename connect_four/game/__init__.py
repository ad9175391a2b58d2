"""
connect_four.game - Core game mechanics for Connect Four

This package contains the board representation and the game session
controller. Import the session from connect_four.game.session directly; it
depends on the AI package, which in turn depends on the board.
"""

from connect_four.game.board import Board, Placement, WinCheck

__all__ = ['Board', 'Placement', 'WinCheck']
