"""Models module for Pydantic schemas."""

from .flashcard_set import (
    FlashcardSet,
    FlashcardSetBase,
    FlashcardSetCreate,
    FlashcardSetUpdate,
    FlashcardSetResponse,
    FlashcardSetListResponse,
    LanguageCode,
)
from .card import (
    Flashcard,
    CardBase,
    CardCreate,
    CardUpdate,
    CardResponse,
    CardListResponse,
    FlashcardStatsResponse,
    ReviewForecastResponse,
    Grade,
    ReviewRequest,
    MIN_DIFFICULTY,
    MAX_DIFFICULTY,
    DEFAULT_DIFFICULTY,
)
from .practice import (
    PracticeActionRequest,
    PracticeMode,
    PracticeRateRequest,
    PracticeStartRequest,
    PracticeState,
    PracticeStateResponse,
)

__all__ = [
    "FlashcardSet",
    "FlashcardSetBase",
    "FlashcardSetCreate",
    "FlashcardSetUpdate",
    "FlashcardSetResponse",
    "FlashcardSetListResponse",
    "LanguageCode",
    "Flashcard",
    "CardBase",
    "CardCreate",
    "CardUpdate",
    "CardResponse",
    "CardListResponse",
    "FlashcardStatsResponse",
    "ReviewForecastResponse",
    "Grade",
    "ReviewRequest",
    "MIN_DIFFICULTY",
    "MAX_DIFFICULTY",
    "DEFAULT_DIFFICULTY",
    "PracticeActionRequest",
    "PracticeMode",
    "PracticeRateRequest",
    "PracticeStartRequest",
    "PracticeState",
    "PracticeStateResponse",
]
