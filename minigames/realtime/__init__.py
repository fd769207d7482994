"""
Minigame Realtime.

Clock that drives timed game effects.
"""

from minigames.realtime.clock import GameClock, TickCallback

__all__ = [
    "GameClock",
    "TickCallback",
]
