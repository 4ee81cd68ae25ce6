"""
Labels for clarity.
"""

from typing import Literal

MatchType = Literal["exact", "wrong-order", "exact-word", "substring", "none"]
Difficulty = Literal["normal", "hard"]
GameStatus = Literal["playing", "won", "lost", "gave_up"]
TerminalStatus = Literal["won", "lost", "gave_up"]
ShareCell = Literal["green", "yellow", "black", "x"]

DIFFICULTIES = ("normal", "hard")
