"""
connect_four.interfaces - User interfaces for Connect Four

This package contains the terminal interface used to play, review and
analyze games.
"""

# Don't import anything here to avoid circular imports
__all__ = ['cli']
