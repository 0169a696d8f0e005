"""Upcoming review workload derived from card schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

from cardcoach.models.card import Flashcard
from cardcoach.srs.scheduler import is_due
from cardcoach.srs.time import ensure_utc


@dataclass
class ReviewForecast:
    due_now: int = 0
    due_this_week: int = 0
    due_next_week: int = 0
    due_by_date: dict[str, int] = field(default_factory=dict)


def days_until_review(next_review: datetime | None, now: datetime) -> int | None:
    """Number of calendar days (UTC) until next_review. Negative when overdue, None if unscheduled."""
    if next_review is None:
        return None
    return (ensure_utc(next_review).date() - ensure_utc(now).date()).days


def build_review_forecast(cards: Iterable[Flashcard], now: datetime) -> ReviewForecast:
    """Bucket non-mastered cards by when they come up for review.

    Cards with no scheduled review are due now and are counted under today's date.
    """
    now = ensure_utc(now)
    one_week = now + timedelta(days=7)
    two_weeks = now + timedelta(days=14)
    forecast = ReviewForecast()

    for card in cards:
        if card.mastered:
            continue

        review_at = ensure_utc(card.nextReview) if card.nextReview is not None else now
        date_key = review_at.date().isoformat()
        forecast.due_by_date[date_key] = forecast.due_by_date.get(date_key, 0) + 1

        if is_due(card, now):
            forecast.due_now += 1
        elif review_at < one_week:
            forecast.due_this_week += 1
        elif review_at < two_weeks:
            forecast.due_next_week += 1

    forecast.due_by_date = dict(sorted(forecast.due_by_date.items()))
    return forecast
