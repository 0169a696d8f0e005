"""Spaced-repetition scheduling over flashcard collections.

Every function here is pure: cards come in, new card objects (or new lists)
come out, and nothing is persisted. The current time is always passed in by
the caller.

Difficulty runs from 1 (hardest) to 5 (easiest). A rating moves the card
between bands and the new band picks the review interval:

    band 1 -> 1 hour
    band 2 -> 6 hours
    band 3 -> 1 day
    band 4 -> 3 days
    band 5 -> 7 days per consecutive top-band success (max 60 days)

An "unknown" rating (0) always schedules the card 10 minutes out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from cardcoach.models.card import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    Flashcard,
)
from cardcoach.models.practice import PracticeMode
from cardcoach.srs.time import add_interval, ensure_utc

RATING_UNKNOWN = 0
MIN_RATING = 0
MAX_RATING = 5

# Ratings at or above this count toward the mastery streak
SUCCESS_RATING = 4
# Ratings at or above this count as a correct recall in the review counters
CORRECT_RATING = 3

_DIFFICULTY_DELTA: dict[int, int] = {
    0: -2,
    1: -1,
    2: -1,
    3: 0,
    4: 1,
    5: 1,
}

UNKNOWN_INTERVAL = timedelta(minutes=10)
MAX_INTERVAL = timedelta(days=60)

_INTERVAL_BY_DIFFICULTY: dict[int, timedelta] = {
    1: timedelta(hours=1),
    2: timedelta(hours=6),
    3: timedelta(days=1),
    4: timedelta(days=3),
    5: timedelta(days=7),
}


class InvalidRatingError(ValueError):
    """Raised when a rating falls outside the accepted 0-5 domain."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"rating must be an integer between {MIN_RATING} and {MAX_RATING}, got {rating!r}")


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunable scheduling policy.

    mastery_streak: consecutive successful top-band reviews needed for mastery.
        1 masters a card on its first top-band success.
    difficult_threshold: cards at or below this band count as difficult.
    """

    mastery_streak: int = 2
    difficult_threshold: int = 2

    def __post_init__(self) -> None:
        if self.mastery_streak < 1:
            raise ValueError(f"mastery_streak must be >= 1, got {self.mastery_streak}")
        if not MIN_DIFFICULTY <= self.difficult_threshold <= MAX_DIFFICULTY:
            raise ValueError(
                f"difficult_threshold must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}, "
                f"got {self.difficult_threshold}"
            )


DEFAULT_CONFIG = SchedulerConfig()


@dataclass(frozen=True)
class FlashcardStats:
    total: int
    mastered: int
    learning: int
    to_review: int
    new: int
    total_reviews: int
    correct_reviews: int

    @property
    def accuracy(self) -> float:
        if self.total_reviews == 0:
            return 0.0
        return self.correct_reviews / self.total_reviews


def validate_rating(rating: object) -> int:
    """Return rating unchanged if it is an int in the accepted domain."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRatingError(rating)
    return rating


def clamp_difficulty(value: int) -> int:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, value))


def review_interval(difficulty: int, streak: int = 0) -> timedelta:
    """Interval until the next review for a card sitting in the given band."""
    difficulty = clamp_difficulty(difficulty)
    interval = _INTERVAL_BY_DIFFICULTY[difficulty]
    if difficulty == MAX_DIFFICULTY:
        interval = interval * max(1, streak)
    return min(interval, MAX_INTERVAL)


def is_due(card: Flashcard, now: datetime) -> bool:
    """Whether a card is eligible for review at `now`. Mastered cards never are."""
    if card.mastered:
        return False
    if card.nextReview is None:
        return True
    return ensure_utc(card.nextReview) <= ensure_utc(now)


def _due_order_key(card: Flashcard) -> tuple:
    # Unscheduled cards first, then earliest nextReview
    next_review = ensure_utc(card.nextReview) if card.nextReview is not None else None
    return (
        next_review is not None,
        next_review.timestamp() if next_review is not None else 0.0,
        ensure_utc(card.createdAt).timestamp(),
        card.id,
    )


def get_due_cards(cards: Iterable[Flashcard], now: datetime) -> list[Flashcard]:
    """Return non-mastered cards that are due at `now`.

    Order is stable: unscheduled cards first, then ascending nextReview.
    """
    return sorted((card for card in cards if is_due(card, now)), key=_due_order_key)


def get_difficult_cards(
    cards: Iterable[Flashcard],
    threshold: int | None = None,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> list[Flashcard]:
    """Return non-mastered cards whose difficulty is at or below the threshold, hardest first."""
    if threshold is None:
        threshold = config.difficult_threshold
    difficult = [card for card in cards if not card.mastered and card.difficulty <= threshold]
    return sorted(
        difficult,
        key=lambda card: (card.difficulty, ensure_utc(card.createdAt).timestamp(), card.id),
    )


def filter_by_tag(cards: Iterable[Flashcard], tag: str | None) -> list[Flashcard]:
    """Keep cards carrying the tag (case-insensitive). No tag keeps everything."""
    if not tag:
        return list(cards)
    wanted = tag.strip().lower()
    return [card for card in cards if any(t.lower() == wanted for t in card.tags)]


def select_cards(
    cards: Iterable[Flashcard],
    mode: PracticeMode,
    now: datetime,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> list[Flashcard]:
    """Pick the cards for a practice session. 'all' keeps mastered cards."""
    if mode == "due":
        return get_due_cards(cards, now)
    if mode == "difficult":
        return get_difficult_cards(cards, config=config)
    if mode == "all":
        return sorted(cards, key=_due_order_key)
    raise ValueError(f"Invalid practice mode: {mode}")


def update_card_difficulty(
    card: Flashcard,
    rating: int,
    now: datetime,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> Flashcard:
    """Apply one rating to a card and return the rescheduled copy.

    rating: 0 (unknown) to 5 (easy)

    Rules:
    - difficulty moves by the rating's delta and is clamped to the band range
    - a success (rating >= 4) that lands in the top band extends the streak,
      anything else resets it
    - the card becomes mastered once the streak reaches config.mastery_streak
      and stays mastered afterwards
    - nextReview = now + interval; rating 0 always uses the shortest interval

    Raises:
        InvalidRatingError: rating is not an int in 0..5. The card is untouched.
    """
    rating = validate_rating(rating)
    now = ensure_utc(now)

    difficulty = clamp_difficulty(card.difficulty + _DIFFICULTY_DELTA[rating])

    if rating >= SUCCESS_RATING and difficulty == MAX_DIFFICULTY:
        streak = card.streak + 1
    else:
        streak = 0

    if rating == RATING_UNKNOWN:
        interval = UNKNOWN_INTERVAL
    else:
        interval = review_interval(difficulty, streak)

    mastered = card.mastered or streak >= config.mastery_streak

    return card.model_copy(
        update={
            "difficulty": difficulty,
            "streak": streak,
            "mastered": mastered,
            "lastReviewed": now,
            "nextReview": add_interval(now, interval),
            "updatedAt": now,
            "totalReviews": card.totalReviews + 1,
            "correctReviews": card.correctReviews + (1 if rating >= CORRECT_RATING else 0),
        }
    )


def get_flashcard_stats(cards: Iterable[Flashcard], now: datetime) -> FlashcardStats:
    """Aggregate counts over a card collection in a single pass."""
    total = mastered = learning = to_review = new = 0
    total_reviews = correct_reviews = 0

    for card in cards:
        total += 1
        total_reviews += card.totalReviews
        correct_reviews += card.correctReviews
        if card.mastered:
            mastered += 1
            continue
        if card.lastReviewed is None:
            new += 1
        else:
            learning += 1
        if is_due(card, now):
            to_review += 1

    return FlashcardStats(
        total=total,
        mastered=mastered,
        learning=learning,
        to_review=to_review,
        new=new,
        total_reviews=total_reviews,
        correct_reviews=correct_reviews,
    )

