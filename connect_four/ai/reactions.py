"""
reactions.py - Cosmetic AI reactions attached to moves and outcomes

A Reaction is a tag the session attaches to AI moves and game outcomes; the
presentation layer decides how to show it. Reactions never feed back into
move selection.
"""

import random
from enum import Enum
from typing import Optional, Tuple


class Reaction(Enum):
    NEUTRAL = ("\U0001F610", ("Let's play.", "Ready when you are.", "Your move.", "I'm ready."))
    THINKING = ("\U0001F914", ("Thinking...", "Let me see...", "Hmm...", "Calculating..."))
    HAPPY = ("\U0001F604", ("Nice move!", "Good play!", "Interesting!", "I like this!"))
    FRUSTRATED = ("\U0001F624", ("Oof, nice block!", "You got me!", "Almost had it!", "Not fair!"))
    SMUG = ("\U0001F60E", ("Victory!", "I win!", "Too easy!", "Checkmate!"))
    SAD = ("\U0001F622", ("You got me!", "Well played!", "I lost...", "Good game!"))
    DRAW = ("\U0001F636", ("A tie.", "Draw game.", "Even match.", "Nobody wins."))

    @property
    def emoji(self) -> str:
        return self.value[0]

    @property
    def texts(self) -> Tuple[str, ...]:
        return self.value[1]


def reaction_text(reaction: Reaction, rng: Optional[random.Random] = None) -> str:
    """Pick one display line for ``reaction``."""
    chooser = rng or random
    return chooser.choice(reaction.texts)
