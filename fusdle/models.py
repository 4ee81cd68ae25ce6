"""
SQLAlchemy ORM models.

Tables:
- puzzles: one row per (puzzle_number, difficulty); emojis and hints stored as JSON

Why JSON?
- Both are short lists of strings; JSON works the same on Postgres and SQLite.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import Boolean, Date, Enum, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base
from .types import Difficulty


class Puzzle(Base):
    __tablename__ = "puzzles"
    __table_args__ = (
        UniqueConstraint("puzzle_number", "difficulty", name="uq_puzzle_number_difficulty"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Public number shown to players; normal and hard share a number
    puzzle_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    difficulty: Mapped[Difficulty] = mapped_column(
        Enum("normal", "hard", name="difficulty"),
        nullable=False,
        default="normal",
    )

    emojis: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    answer: Mapped[str] = mapped_column(String(100), nullable=False)
    theme: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    hints: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Fusion twist: answer is a portmanteau of two concepts
    is_fusion_twist: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    twist_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    @property
    def word_count(self) -> int:
        return len(self.answer.split())
