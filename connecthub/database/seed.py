"""
connecthub.database.seed — Default Catalog Seeder
==================================================

Baseline interests, hobbies and skills so discovery works on a fresh
install.  Idempotent: only names that don't already exist are inserted,
and rows users created or edited are never touched.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from connecthub.database.models import Hobby, Interest, Skill

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default catalogue
# ---------------------------------------------------------------------------
DEFAULT_INTERESTS: dict[str, tuple[str, str, str]] = {
    "Photography": ("Capturing moments and places", "camera", "#6366f1"),
    "Hiking": ("Trails, peaks and the outdoors", "mountain", "#16a34a"),
    "Cooking": ("Recipes, techniques and shared meals", "chef-hat", "#ea580c"),
    "Music": ("Listening, playing and live shows", "music", "#db2777"),
    "Reading": ("Books, book clubs and literature", "book", "#0891b2"),
    "Gaming": ("Video, board and tabletop games", "gamepad", "#7c3aed"),
    "Travel": ("Exploring new places and cultures", "plane", "#0284c7"),
    "Fitness": ("Workouts, running and staying active", "dumbbell", "#dc2626"),
    "Movies": ("Film nights and cinema", "film", "#9333ea"),
    "Technology": ("Gadgets, code and the future", "cpu", "#475569"),
}
"""``name`` → ``(description, icon, color)``."""

DEFAULT_HOBBIES: dict[str, tuple[str, str, str]] = {
    "Gardening": ("physical", "easy", "Growing flowers, herbs and vegetables"),
    "Knitting": ("creative", "easy", "Needles, yarn and cosy projects"),
    "Chess": ("intellectual", "moderate", "Classic strategy over the board"),
    "Painting": ("creative", "moderate", "Watercolour, acrylic and oils"),
    "Bird Watching": ("physical", "easy", "Spotting and identifying birds"),
    "Dancing": ("social", "moderate", "Ballroom, salsa, swing and more"),
    "Rock Climbing": ("physical", "challenging", "Bouldering and rope climbing"),
    "Board Games": ("social", "easy", "Game nights with friends"),
}
"""``name`` → ``(category, difficulty_level, description)``."""

DEFAULT_SKILLS: dict[str, tuple[str, str]] = {
    "Python Programming": ("technology", "Writing software in Python"),
    "Spanish": ("language", "Conversational and written Spanish"),
    "Guitar": ("music", "Chords, strumming and songs"),
    "Public Speaking": ("communication", "Presenting with confidence"),
    "Baking": ("cooking", "Bread, cakes and pastry"),
    "Yoga": ("fitness", "Poses, breathing and flexibility"),
}
"""``name`` → ``(category, description)``."""


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------
def _existing_names(session: Session, model) -> set[str]:
    return set(session.scalars(select(model.name)).all())


def seed_default_catalog(engine: Engine) -> None:
    """Insert default catalog rows that don't yet exist."""
    session = Session(engine)
    inserted = 0
    try:
        names = _existing_names(session, Interest)
        for name, (desc, icon, color) in DEFAULT_INTERESTS.items():
            if name not in names:
                session.add(Interest(name=name, description=desc, icon=icon, color=color))
                inserted += 1

        names = _existing_names(session, Hobby)
        for name, (category, difficulty, desc) in DEFAULT_HOBBIES.items():
            if name not in names:
                session.add(Hobby(
                    name=name,
                    category=category,
                    difficulty_level=difficulty,
                    description=desc,
                ))
                inserted += 1

        names = _existing_names(session, Skill)
        for name, (category, desc) in DEFAULT_SKILLS.items():
            if name not in names:
                session.add(Skill(name=name, category=category, description=desc))
                inserted += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if inserted:
        logger.info("Seeded %d default catalog entries.", inserted)
