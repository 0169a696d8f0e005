"""Mapping from named grades and answer buttons onto the numeric rating scale.

The scheduler only understands ratings 0-5. The study UI offers either named
grades or a plain correct/incorrect pair; both are translated here.
"""

from __future__ import annotations

from cardcoach.models.card import Grade
from cardcoach.srs.scheduler import InvalidRatingError, validate_rating


GRADE_TO_RATING: dict[Grade, int] = {
    "unknown": 0,
    "again": 1,
    "hard": 3,
    "good": 4,
    "easy": 5,
}

CORRECT_ANSWER_RATING = 4
INCORRECT_ANSWER_RATING = 1


def rating_for_grade(grade: str) -> int:
    """Translate a named grade into a rating.

    Raises:
        InvalidRatingError: If the grade is not one of the known names
    """
    try:
        return GRADE_TO_RATING[grade]  # type: ignore[index]
    except KeyError:
        raise InvalidRatingError(grade)


def rating_for_answer(correct: bool) -> int:
    """Rating for the binary correct/incorrect buttons."""
    return CORRECT_ANSWER_RATING if correct else INCORRECT_ANSWER_RATING


def resolve_rating(rating: int | None, grade: str | None, correct: bool | None = None) -> int:
    """Pick the rating from a request carrying a numeric rating, a named grade,
    or a correct/incorrect answer.

    Precedence is rating, then grade, then correct.

    Raises:
        InvalidRatingError: If nothing is given or the value is out of domain
    """
    if rating is not None:
        return validate_rating(rating)
    if grade is not None:
        return rating_for_grade(grade)
    if correct is not None:
        return rating_for_answer(correct)
    raise InvalidRatingError(None)
