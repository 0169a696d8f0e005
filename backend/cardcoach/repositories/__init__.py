"""Repositories module for data access layer."""

from .set_repository import (
    FlashcardSetRepository,
    FlashcardSetNotFoundError,
    get_set_repository,
)
from .card_repository import (
    CardRepository,
    CardNotFoundError,
    get_card_repository,
)
from .normalize import normalize_flashcard

__all__ = [
    "FlashcardSetRepository",
    "FlashcardSetNotFoundError",
    "get_set_repository",
    "CardRepository",
    "CardNotFoundError",
    "get_card_repository",
    "normalize_flashcard",
]
