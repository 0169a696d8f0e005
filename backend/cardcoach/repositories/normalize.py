"""Lenient conversion of stored or imported card documents into Flashcard.

Documents reach the repository from older app versions and from imports, so
field names and types vary. Everything is coerced to a default instead of
raising:

- front/back fall back to the legacy italian/english fields
- a missing id gets a fresh uuid
- difficulty falls back to the legacy `level` (0-7) and is clamped to 1-5
- nextReview falls back to the legacy `dueDate` and is dropped for cards never reviewed
- mastered accepts booleans, numbers and "true"/"false" style strings
- timestamps may be ISO strings, datetimes or epoch milliseconds
- tags may be a list or a ';'-separated string
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from cardcoach.models.card import (
    DEFAULT_DIFFICULTY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    Flashcard,
    generate_uuid,
)
from cardcoach.srs.time import ensure_utc, parse_iso_z, utc_now

logger = logging.getLogger(__name__)


def _coerce_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning("Out-of-range epoch timestamp %r, ignoring", value)
            return None
    if isinstance(value, str):
        try:
            return parse_iso_z(value)
        except ValueError:
            logger.warning("Unparseable timestamp %r, ignoring", value)
            return None
    return None


def _coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def _coerce_difficulty(card: dict[str, Any]) -> int:
    difficulty = _coerce_int(card.get("difficulty"))
    if difficulty is None:
        level = _coerce_int(card.get("level"))
        if level is None or level <= 0:
            return DEFAULT_DIFFICULTY
        # Legacy levels only ever grew with correct answers
        difficulty = DEFAULT_DIFFICULTY + level // 2
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))


def coerce_tags(value: Any) -> list[str]:
    """Turn a list or ';'-separated string into a de-duplicated tag list."""
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.split(";")
    elif isinstance(value, (list, tuple, set)):
        raw = [str(tag) for tag in value]
    else:
        return []

    tags: list[str] = []
    for tag in raw:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _optional_str(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None


def _text(card: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = card.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def normalize_flashcard(card: dict[str, Any]) -> Flashcard:
    """Build a canonical Flashcard from a loosely shaped document."""
    now = utc_now()

    last_reviewed = _coerce_datetime(card.get("lastReviewed"))
    next_review = _coerce_datetime(card.get("nextReview") or card.get("dueDate"))
    if last_reviewed is None and next_review is not None:
        # Never reviewed cards are always due
        logger.info("Card %s was never reviewed, dropping its nextReview", card.get("id"))
        next_review = None
    elif last_reviewed is not None and next_review is not None and next_review < last_reviewed:
        logger.warning(
            "Card %s has nextReview before lastReviewed, clamping to lastReviewed",
            card.get("id"),
        )
        next_review = last_reviewed

    streak = _coerce_int(card.get("streak")) or 0
    total_reviews = _coerce_int(card.get("totalReviews")) or 0
    correct_reviews = _coerce_int(card.get("correctReviews")) or 0

    return Flashcard(
        id=str(card.get("id") or generate_uuid()),
        setId=_optional_str(card.get("setId")),
        userId=_optional_str(card.get("userId")),
        front=_text(card, "front", "italian"),
        back=_text(card, "back", "english"),
        tags=coerce_tags(card.get("tags")),
        notes=card.get("notes") if isinstance(card.get("notes"), str) else None,
        createdAt=_coerce_datetime(card.get("createdAt")) or now,
        updatedAt=_coerce_datetime(card.get("updatedAt")) or now,
        difficulty=_coerce_difficulty(card),
        mastered=_coerce_flag(card.get("mastered")),
        lastReviewed=last_reviewed,
        nextReview=next_review,
        streak=max(0, streak),
        totalReviews=max(0, total_reviews),
        correctReviews=max(0, min(correct_reviews, total_reviews)) if total_reviews else 0,
    )
