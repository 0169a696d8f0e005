"""SRS helpers (difficulty bands, due selection, practice sessions)."""

from .scheduler import (
    DEFAULT_CONFIG,
    FlashcardStats,
    InvalidRatingError,
    SchedulerConfig,
    filter_by_tag,
    get_difficult_cards,
    get_due_cards,
    get_flashcard_stats,
    is_due,
    review_interval,
    select_cards,
    update_card_difficulty,
)
from .forecast import ReviewForecast, build_review_forecast, days_until_review
from .grading import rating_for_answer, rating_for_grade, resolve_rating
from .session import PracticeSession, SessionStateError
from .time import (
    utc_now,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_z,
    ensure_utc,
)

__all__ = [
    "DEFAULT_CONFIG",
    "FlashcardStats",
    "InvalidRatingError",
    "SchedulerConfig",
    "filter_by_tag",
    "get_difficult_cards",
    "get_due_cards",
    "get_flashcard_stats",
    "is_due",
    "review_interval",
    "select_cards",
    "update_card_difficulty",
    "ReviewForecast",
    "build_review_forecast",
    "days_until_review",
    "rating_for_answer",
    "rating_for_grade",
    "resolve_rating",
    "PracticeSession",
    "SessionStateError",
    "utc_now",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_z",
    "ensure_utc",
]
