"""
connect_four/ai/__init__.py - Computer opponent for Connect Four

This package provides the heuristic position evaluator, the three AI
strength tiers and the cosmetic reactions the session attaches to AI moves.
"""

__all__ = ['evaluator', 'reactions', 'search']
