"""
Shareable result text.

One cell per attempt:
- last attempt: green if won, X if gave up, black if lost
- earlier attempts: yellow when the verdict identified a partial match,
  black otherwise
"""

from datetime import date
from typing import Iterable, List, Optional, Sequence

from .engine import GuessVerdict
from .types import Difficulty, ShareCell, TerminalStatus

CELL_EMOJI = {
    "green": "🟩",
    "yellow": "🟨",
    "black": "⬛",
    "x": "❌",
}

# 2025-05-22 is Fusdle #1
FUSDLE_EPOCH = date(2025, 5, 22)
SHARE_URL = "fusdle.com"


def share_cells(verdicts: Sequence[GuessVerdict], terminal_status: TerminalStatus) -> List[ShareCell]:
    cells: List[ShareCell] = []
    last = len(verdicts) - 1
    for index, verdict in enumerate(verdicts):
        if index == last:
            if terminal_status == "won":
                cells.append("green")
            elif terminal_status == "gave_up":
                cells.append("x")
            else:
                cells.append("black")
        elif verdict.match_type != "none":
            cells.append("yellow")
        else:
            cells.append("black")
    return cells


def render_cells(cells: Iterable[ShareCell]) -> str:
    return "".join(CELL_EMOJI[cell] for cell in cells)


def build_share_grid(
    verdicts: Sequence[GuessVerdict],
    terminal_status: TerminalStatus,
    hints_used: int,
    total_hints: int,
) -> str:
    """Emoji row plus the hints line, e.g. "⬛🟨🟩\\nHints used: 1/3"."""
    row = render_cells(share_cells(verdicts, terminal_status))
    return f"{row}\nHints used: {hints_used}/{total_hints}"


def fusdle_number(puzzle_date: date, fallback: Optional[int] = None) -> int:
    days = (puzzle_date - FUSDLE_EPOCH).days
    if days >= 0:
        return days + 1
    return fallback or 1


def build_share_text(
    verdicts: Sequence[GuessVerdict],
    terminal_status: TerminalStatus,
    hints_used: int,
    total_hints: int,
    puzzle_date: date,
    difficulty: Difficulty = "normal",
    puzzle_number: Optional[int] = None,
    flawless_streak: int = 0,
) -> str:
    attempts = len(verdicts)
    header = f"Fusdle #{fusdle_number(puzzle_date, puzzle_number)}"
    if terminal_status == "won":
        header += f" - Solved in {attempts}"
    elif terminal_status == "gave_up":
        header += f" - Gave up after {attempts}"
    else:
        header += f" - Failed after {attempts}"

    lines = [header, render_cells(share_cells(verdicts, terminal_status))]
    lines.append("💀 Hard Mode" if difficulty == "hard" else "🎯 Normal Mode")
    lines.append(f"Hints used: {hints_used}/{total_hints}")
    if flawless_streak > 0 and hints_used == 0 and terminal_status == "won":
        lines.append(f"✨ Flawless streak: {flawless_streak}")
    lines.append(f"Play at: {SHARE_URL}")
    return "\n".join(lines)
