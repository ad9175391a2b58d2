"""
connect_four - Connect Four game engine with a tiered computer opponent

This package provides the board model, a heuristic evaluator, random /
greedy / minimax AI tiers, a game session controller, a JSON game history
store and a terminal interface.
"""

# Version number
__version__ = '0.2.0'
