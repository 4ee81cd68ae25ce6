"""
DB-backed puzzle repository.

Public methods:
- get(puzzle_number, difficulty) -> Puzzle | None
- get_fusion(puzzle_number) -> Puzzle | None
- get_for_date(day, difficulty) -> Puzzle | None
- get_today(today, difficulty) -> Puzzle | None
- get_archive(today, limit) -> list[Puzzle]
- create(...) -> Puzzle
- bulk_create(rows) -> list[Puzzle]

Routes only ever see the public DTOs built at the bottom, so the answer and
hints never leak by accident.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Puzzle as PuzzleORM
from .schemas import ArchivePuzzleOut, PuzzleOut
from .types import DIFFICULTIES, Difficulty

logger = logging.getLogger(__name__)


def effective_difficulty(difficulty: Optional[str]) -> Difficulty:
    """Anything other than "hard" is played as "normal"."""
    return difficulty if difficulty in DIFFICULTIES else "normal"


class PuzzleRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, puzzle_number: int, difficulty: Optional[str] = "normal") -> Optional[PuzzleORM]:
        stmt = select(PuzzleORM).where(
            PuzzleORM.puzzle_number == puzzle_number,
            PuzzleORM.difficulty == effective_difficulty(difficulty),
        )
        puzzle = self.db.execute(stmt).scalars().first()
        if puzzle is None:
            logger.info("Puzzle #%s (%s) not found", puzzle_number, difficulty)
        return puzzle

    def get_fusion(self, puzzle_number: int) -> Optional[PuzzleORM]:
        stmt = select(PuzzleORM).where(PuzzleORM.is_fusion_twist.is_(True))
        fusion = self.db.execute(
            stmt.where(PuzzleORM.puzzle_number == puzzle_number)
        ).scalars().first()
        if fusion is not None:
            return fusion

        # Any fusion puzzle is better than none
        fallback = self.db.execute(
            stmt.order_by(PuzzleORM.date.asc(), PuzzleORM.id.asc())
        ).scalars().first()
        if fallback is not None:
            logger.info(
                "Fusion puzzle #%s not found, using #%s", puzzle_number, fallback.puzzle_number
            )
        return fallback

    def get_for_date(self, day: date, difficulty: Optional[str] = "normal") -> Optional[PuzzleORM]:
        stmt = select(PuzzleORM).where(
            PuzzleORM.date == day,
            PuzzleORM.difficulty == effective_difficulty(difficulty),
        )
        return self.db.execute(stmt).scalars().first()

    def get_today(self, today: date, difficulty: Optional[str] = "normal") -> Optional[PuzzleORM]:
        puzzle = self.get_for_date(today, difficulty)
        if puzzle is not None:
            return puzzle

        # Fresh installs have no puzzle for today yet: serve the earliest one
        earliest = self.db.execute(
            select(PuzzleORM)
            .where(PuzzleORM.difficulty == effective_difficulty(difficulty))
            .order_by(PuzzleORM.date.asc(), PuzzleORM.id.asc())
            .limit(1)
        ).scalars().first()
        if earliest is not None:
            logger.info(
                "No puzzle found for %s, using earliest available puzzle #%s",
                today, earliest.puzzle_number,
            )
        return earliest

    def get_archive(self, today: date, limit: int = 30) -> list[PuzzleORM]:
        """Past puzzles only (strictly before today), newest first."""
        stmt = (
            select(PuzzleORM)
            .where(PuzzleORM.date < today)
            .order_by(PuzzleORM.date.desc(), PuzzleORM.id.asc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        puzzle_number: int,
        day: date,
        emojis: list[str],
        answer: str,
        hints: list[str],
        difficulty: Difficulty = "normal",
        theme: str = "",
        is_fusion_twist: bool = False,
        twist_type: Optional[str] = None,
    ) -> PuzzleORM:
        puzzle = PuzzleORM(
            puzzle_number=puzzle_number,
            date=day,
            difficulty=difficulty,
            emojis=list(emojis),
            answer=answer,
            theme=theme,
            hints=list(hints),
            is_fusion_twist=is_fusion_twist,
            twist_type=twist_type,
        )
        self.db.add(puzzle)
        self.db.commit()
        self.db.refresh(puzzle)
        return puzzle

    def bulk_create(self, rows: Iterable[dict]) -> list[PuzzleORM]:
        puzzles = [PuzzleORM(**row) for row in rows]
        if not puzzles:
            return []
        self.db.add_all(puzzles)
        self.db.commit()
        for puzzle in puzzles:
            self.db.refresh(puzzle)
        return puzzles

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(PuzzleORM)).scalar_one()


# --- DTO builders: DB row -> API response ---

def to_puzzle_out(puzzle: PuzzleORM) -> PuzzleOut:
    return PuzzleOut(
        id=puzzle.puzzle_number,
        puzzle_number=puzzle.puzzle_number,
        date=puzzle.date,
        difficulty=puzzle.difficulty,
        emojis=list(puzzle.emojis),
        theme=puzzle.theme,
        is_fusion_twist=puzzle.is_fusion_twist,
        twist_type=puzzle.twist_type,
        word_count=puzzle.word_count,
        total_hints=len(puzzle.hints),
    )


def to_archive_out(puzzle: PuzzleORM) -> ArchivePuzzleOut:
    return ArchivePuzzleOut(
        **to_puzzle_out(puzzle).model_dump(),
        answer=puzzle.answer,
    )
