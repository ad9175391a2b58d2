"""
connect_four.data - Game record storage for Connect Four

This package persists finished games to a JSON history file and replays
them move by move.
"""

__all__ = ['history']
