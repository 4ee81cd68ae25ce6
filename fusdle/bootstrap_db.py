"""
Dev convenience: create tables if they don't exist and seed a few sample puzzles.
Call this at startup in local/dev only
"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from . import time_client
from .db import engine, Base, SessionLocal
from .repository import PuzzleRepository

logger = logging.getLogger(__name__)

# (emojis, answer, theme, hints, difficulty); a normal and a hard puzzle per day
SAMPLE_PUZZLES = [
    (["🧠", "⛈️"], "Brain Storm", "Thinking", ["Think together", "Mental weather", "Idea generation"], "normal"),
    (["🌪️", "😴", "🧿"], "Dream Catcher", "Bedroom", ["Sleep guardian", "Nightmare filter", "Bedside hanger"], "hard"),
    (["🌊", "🏄"], "Wave Surfer", "Sports", ["Ocean rider", "Crest glider", "Water sport"], "normal"),
    (["🍯", "🐻", "🌲"], "Honey Forest", "Nature", ["Sweet woods", "Bear's paradise", "Sticky wilderness"], "hard"),
    (["🏠", "🧹"], "Housekeeping", "Chores", ["Daily chores", "Tidy up", "Hotel staff"], "normal"),
    (["🍫", "🥜", "🧈"], "Peanut Butter Cup", "Sweets", ["Sweet nutty treat", "Chocolate disk", "Reese's product"], "hard"),
]

SAMPLE_FUSIONS = [
    (["🐯", "🦁", "❄️"], "Liger", "Animals", ["Hybrid cat", "Mixed predator", "Big feline blend"], "Animal Fusion"),
    (["🥐", "🍩"], "Cronut", "Bakery", ["Flaky ring", "Pastry mashup", "New York craze"], "Food Fusion"),
]


def create_all():
    Base.metadata.create_all(bind=engine)


def seed_sample_puzzles(db: Session, start: Optional[date] = None) -> int:
    """Insert the sample set once; returns how many puzzles were added."""
    repo = PuzzleRepository(db)
    if repo.count() > 0:
        return 0

    start = start or time_client.local_today()
    rows = []
    for position, (emojis, answer, theme, hints, difficulty) in enumerate(SAMPLE_PUZZLES):
        offset = position // 2
        rows.append(dict(
            puzzle_number=offset + 1,
            date=start + timedelta(days=offset),
            difficulty=difficulty,
            emojis=emojis,
            answer=answer,
            theme=theme,
            hints=hints,
            is_fusion_twist=False,
            twist_type=None,
        ))

    first_fusion = len(SAMPLE_PUZZLES) // 2 + 1
    for position, (emojis, answer, theme, hints, twist) in enumerate(SAMPLE_FUSIONS):
        rows.append(dict(
            puzzle_number=first_fusion + position,
            date=start + timedelta(days=first_fusion - 1 + position),
            difficulty="normal",
            emojis=emojis,
            answer=answer,
            theme=theme,
            hints=hints,
            is_fusion_twist=True,
            twist_type=twist,
        ))

    created = repo.bulk_create(rows)
    logger.info("Seeded %d sample puzzles starting %s", len(created), start)
    return len(created)


def bootstrap(start: Optional[date] = None) -> None:
    create_all()
    db = SessionLocal()
    try:
        seed_sample_puzzles(db, start)
    finally:
        db.close()
