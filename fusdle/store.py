"""
In-memory play sessions
Holds per-puzzle play state and the scoreboard in memory.

A session snapshots the puzzle (answer, hints, date) when it starts, so
guesses never touch the database.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import uuid4
from time import time
from threading import RLock

from . import time_client
from .engine import GuessVerdict, evaluate
from .types import Difficulty, GameStatus


@dataclass
class Attempt:
    guess: str
    verdict: GuessVerdict
    timestamp: float


@dataclass
class PlaySession:
    id: str
    puzzle_id: int
    puzzle_date: date
    answer: str
    hints: List[str]
    difficulty: Difficulty = "normal"
    is_fusion_twist: bool = False
    max_attempts: int = 0  # 0 = unlimited
    status: GameStatus = "playing"
    attempts: List[Attempt] = field(default_factory=list)
    revealed_hints: List[str] = field(default_factory=list)
    hints_used_at_attempts: List[int] = field(default_factory=list)
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)

    @property
    def verdicts(self) -> List[GuessVerdict]:
        return [a.verdict for a in self.attempts]

    @property
    def partial_match_indices(self) -> List[int]:
        """Attempt indices that render yellow in the share grid."""
        return [i for i, a in enumerate(self.attempts) if a.verdict.is_partial]

    @property
    def attempts_left(self) -> Optional[int]:
        if self.max_attempts <= 0:
            return None
        return max(self.max_attempts - len(self.attempts), 0)

    @property
    def is_finished(self) -> bool:
        return self.status != "playing"


# Scoreboard structure
@dataclass
class Stats:
    games_started: int = 0
    games_won: int = 0
    games_lost: int = 0
    games_gave_up: int = 0

    current_streak: int = 0
    best_streak: int = 0
    flawless_streak: int = 0
    last_won_on: Optional[date] = None

    # per-difficulty counters
    normal_won: int = 0
    hard_won: int = 0

    hard_mode_unlocked: bool = False


class SessionStore:
    def __init__(self, max_attempts: int = 0, session_ttl_seconds: float = 86400) -> None:
        self._sessions: Dict[str, PlaySession] = {}
        self._lock = RLock()
        self._stats = Stats()
        self.max_attempts = max_attempts
        # 0 = keep sessions forever
        self.session_ttl_seconds = session_ttl_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def evict_stale(self, now: Optional[float] = None) -> int:
        """Drop sessions untouched for longer than the TTL; returns how many went."""
        if self.session_ttl_seconds <= 0:
            return 0
        cutoff = (now if now is not None else time()) - self.session_ttl_seconds
        with self._lock:
            stale = [sid for sid, s in self._sessions.items() if s.updated_at < cutoff]
            for sid in stale:
                del self._sessions[sid]
        return len(stale)

    def create(
        self,
        puzzle_id: int,
        puzzle_date: date,
        answer: str,
        hints: List[str],
        difficulty: Difficulty = "normal",
        is_fusion_twist: bool = False,
    ) -> PlaySession:
        session = PlaySession(
            id=str(uuid4()),
            puzzle_id=puzzle_id,
            puzzle_date=puzzle_date,
            answer=answer,
            hints=list(hints),
            difficulty=difficulty,
            is_fusion_twist=is_fusion_twist,
            max_attempts=self.max_attempts,
        )
        with self._lock:
            self.evict_stale(session.created_at)
            self._sessions[session.id] = session
            self._stats.games_started += 1
        return session

    def get(self, session_id: str) -> Optional[PlaySession]:
        with self._lock:
            return self._sessions.get(session_id)

    def guess(
        self, session_id: str, guess: str, today: Optional[date] = None
    ) -> Tuple[Optional[PlaySession], Optional[GuessVerdict]]:
        """
        Returns (session, verdict). The verdict is None when the session is
        unknown or already over; extra guesses after the end are ignored.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None, None
            if session.is_finished:
                return session, None

            verdict = evaluate(guess, session.answer)
            session.attempts.append(Attempt(guess=guess, verdict=verdict, timestamp=time()))

            if verdict.is_correct:
                session.status = "won"
            elif session.attempts_left == 0:
                session.status = "lost"
            session.updated_at = time()

            if session.is_finished:
                self._update_stats_on_end(session, today or time_client.local_today())
            return session, verdict

    def reveal_hint(self, session_id: str) -> Tuple[str, Optional[str]]:
        """
        Returns a tuple like ("ok", hint)
        Or: ("not_found", None) if no session
            ("finished", None) if the session ended
            ("locked", None) until another guess is made (one hint per guess)
            ("exhausted", None) once every hint is shown
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return ("not_found", None)
            if session.is_finished:
                return ("finished", None)
            if len(session.attempts) <= len(session.revealed_hints):
                return ("locked", None)
            if len(session.revealed_hints) >= len(session.hints):
                return ("exhausted", None)

            hint = session.hints[len(session.revealed_hints)]
            session.revealed_hints.append(hint)
            session.hints_used_at_attempts.append(len(session.attempts))
            session.updated_at = time()

            # Any hint ends the flawless run right away
            self._stats.flawless_streak = 0
            return ("ok", hint)

    def give_up(self, session_id: str, today: Optional[date] = None) -> Optional[PlaySession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_finished:
                return session

            session.status = "gave_up"
            session.updated_at = time()
            self._update_stats_on_end(session, today or time_client.local_today())
            return session

    # Updates the scoreboard exactly once per session (on the terminal transition)
    def _update_stats_on_end(self, session: PlaySession, today: date) -> None:
        stats = self._stats
        if session.difficulty == "normal":
            stats.hard_mode_unlocked = True

        if session.status != "won":
            if session.status == "gave_up":
                stats.games_gave_up += 1
            else:
                stats.games_lost += 1
            stats.current_streak = 0
            stats.flawless_streak = 0
            stats.last_won_on = None
            return

        stats.games_won += 1
        if session.difficulty == "hard":
            stats.hard_won += 1
        else:
            stats.normal_won += 1

        # A second win on the same day leaves both streaks alone
        if stats.last_won_on == today:
            return

        if stats.last_won_on == today - timedelta(days=1):
            stats.current_streak += 1
        else:
            stats.current_streak = 1
        stats.last_won_on = today
        if stats.current_streak > stats.best_streak:
            stats.best_streak = stats.current_streak

        if session.revealed_hints:
            stats.flawless_streak = 0
        else:
            stats.flawless_streak += 1

    def get_stats(self) -> Stats:
        return self._stats

    def reset_stats(self) -> None:
        with self._lock:
            self._stats = Stats()
