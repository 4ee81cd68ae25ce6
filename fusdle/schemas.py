"""
Explicit validation & Pydantic models
- Define the structure of API requests and responses.
- Python attributes are snake_case; JSON keys are camelCase (what the web client reads),
  e.g. is_correct <-> "isCorrect". Requests accept either spelling.
"""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .types import Difficulty, GameStatus, MatchType, ShareCell, TerminalStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# 1. Validates player's guess
class GuessRequest(ApiModel):
    guess: str = Field(..., description="Free-text guess, 1-100 characters")

    @field_validator("guess")
    @classmethod
    def validate_guess(cls, guess: str) -> str:
        """Trim first, then enforce the length limits on what is left."""
        guess = guess.strip()
        if not guess:
            raise ValueError("Guess cannot be empty")
        if len(guess) > 100:
            raise ValueError("Guess must be at most 100 characters")
        return guess

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"guess": "brainstorm"},
                {"guess": "peanut butter cup"},
            ]
        },
    )


# 2. Verdict for one guess
class GuessResponse(ApiModel):
    is_correct: bool = Field(..., description="True when the guess matches the answer")
    partial_match_feedback: Optional[str] = Field(None, description="Feedback when a partial match was found")
    matched_word: Optional[str] = Field(None, description="Guess word that triggered the partial match")
    match_type: MatchType = Field(..., description="exact | wrong-order | exact-word | substring | none")
    has_correct_words_wrong_order: bool = Field(False, description="Kept for older clients; same as match_type == 'wrong-order'")
    answer: Optional[str] = Field(None, description="Only returned once the guess is correct")


# 3. Puzzle as shown to players (no answer, no hints)
class PuzzleOut(ApiModel):
    id: int = Field(..., description="Puzzle identifier used in URLs (the puzzle number)")
    puzzle_number: int
    date: dt.date
    difficulty: Difficulty
    emojis: List[str]
    theme: str = ""
    is_fusion_twist: bool = False
    twist_type: Optional[str] = None
    word_count: int = Field(..., description="Number of words in the answer")
    total_hints: int = Field(..., description="How many hints the puzzle has")


# 4. Archive entries include the answer (past puzzles only)
class ArchivePuzzleOut(PuzzleOut):
    answer: str


class HintOut(ApiModel):
    hint: str


class AnswerOut(ApiModel):
    answer: str


# 5. Stateless share grid
class ShareRequest(ApiModel):
    match_types: List[MatchType] = Field(..., description="Verdict match_type per attempt, in order")
    terminal_status: TerminalStatus
    hints_used: int = Field(0, ge=0)
    total_hints: int = Field(3, ge=0)


class ShareOut(ApiModel):
    cells: List[ShareCell]
    grid: str


# 6. Play sessions
class SessionCreate(ApiModel):
    puzzle_id: int
    difficulty: Difficulty = "normal"
    puzzle_type: Optional[Literal["fusion"]] = None


class AttemptOut(ApiModel):
    attempt_index: int
    guess: str
    is_correct: bool
    match_type: MatchType
    matched_word: Optional[str] = None
    feedback_message: Optional[str] = None


class SessionState(ApiModel):
    session_id: str
    puzzle_id: int
    difficulty: Difficulty
    is_fusion_twist: bool
    status: GameStatus
    attempts: int
    attempts_left: Optional[int] = Field(None, description="None when guesses are unlimited")
    history: List[AttemptOut]
    partial_match_indices: List[int]
    revealed_hints: List[str]
    total_hints: int
    answer: Optional[str] = Field(None, description="Only revealed once the session is over")


class SessionGuessOut(ApiModel):
    verdict: GuessResponse
    session: SessionState


class SessionHintOut(ApiModel):
    hint: str
    hint_index: int
    session: SessionState


class SessionShareOut(ApiModel):
    text: str
    grid: str
    partial_match_indices: List[int]


# 7. Scoreboard
class StatsOut(ApiModel):
    games_started: int
    games_won: int
    games_lost: int
    games_gave_up: int
    current_streak: int = Field(..., description="Consecutive days won")
    best_streak: int
    flawless_streak: int = Field(..., description="Consecutive wins without hints")
    last_won_on: Optional[dt.date] = None
    normal_won: int
    hard_won: int
    hard_mode_unlocked: bool


class StatusOut(ApiModel):
    status: str
    environment: str
