"""Practice queue state machine.

A session moves through three states:

    idle        -> no cards loaded (also after a selection that found nothing)
    in_session  -> a shuffled queue with a current position
    complete    -> every card in the queue has been rated or skipped

Starting again from any state re-runs card selection, so newly due cards are
picked up. The queue is shuffled once at start and never reordered afterwards.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from cardcoach.models.card import Flashcard
from cardcoach.models.practice import PracticeMode, PracticeState
from cardcoach.srs.scheduler import (
    CORRECT_RATING,
    DEFAULT_CONFIG,
    SchedulerConfig,
    select_cards,
    update_card_difficulty,
    validate_rating,
)


Shuffle = Callable[[list[Flashcard]], None]


class SessionStateError(Exception):
    """Raised when an action is not valid in the session's current state."""

    pass


@dataclass
class PracticeSession:
    """One pass over a queue of cards.

    Attributes:
        queue: Cards in presentation order; rated cards are replaced by their updated copy
        index: Position of the current card
        flipped: Whether the back side is showing
        mode: Selection mode used for the current queue
        rated/skipped/correct: Per-session tallies
    """
    config: SchedulerConfig = DEFAULT_CONFIG
    queue: list[Flashcard] = field(default_factory=list)
    index: int = 0
    flipped: bool = False
    mode: PracticeMode | None = None
    started: bool = False
    rated: int = 0
    skipped: int = 0
    correct: int = 0

    @property
    def state(self) -> PracticeState:
        if not self.started:
            return "idle"
        if self.index >= len(self.queue):
            return "complete"
        return "in_session"

    @property
    def current(self) -> Flashcard | None:
        """The card being shown, or None outside of a session."""
        if self.state != "in_session":
            return None
        return self.queue[self.index]

    def start(
        self,
        cards: Iterable[Flashcard],
        mode: PracticeMode,
        now: datetime,
        shuffle: Shuffle | None = None,
    ) -> PracticeState:
        """Select cards for the mode and begin a new pass.

        Returns the resulting state: 'in_session' when at least one card was
        selected, 'idle' otherwise.
        """
        selected = select_cards(cards, mode, now, self.config)
        (shuffle or random.shuffle)(selected)

        self.queue = selected
        self.index = 0
        self.flipped = False
        self.mode = mode
        self.started = bool(selected)
        self.rated = 0
        self.skipped = 0
        self.correct = 0
        return self.state

    def flip(self) -> bool:
        """Toggle the visible side of the current card."""
        self._require_in_session("flip")
        self.flipped = not self.flipped
        return self.flipped

    def schedule_current(self, rating: int, now: datetime, card: Flashcard | None = None) -> Flashcard:
        """Return the rescheduled copy of the current card without advancing.

        `card` replaces the queued snapshot when the caller has a fresher copy
        of the same card, e.g. one reloaded from storage.

        Raises:
            SessionStateError: If no card is currently shown
            InvalidRatingError: If rating is out of domain
        """
        self._require_in_session("rate")
        rating = validate_rating(rating)
        return update_card_difficulty(card or self.queue[self.index], rating, now, self.config)

    def record_rating(self, updated: Flashcard, rating: int) -> None:
        """Store the rated card in the queue, count it, and advance."""
        self._require_in_session("rate")
        self.queue[self.index] = updated
        self.rated += 1
        if rating >= CORRECT_RATING:
            self.correct += 1
        self._advance()

    def rate(self, rating: int, now: datetime, card: Flashcard | None = None) -> Flashcard:
        """Rate the current card, advance, and return its rescheduled copy.

        Raises:
            SessionStateError: If no card is currently shown
            InvalidRatingError: If rating is out of domain; the session does not advance
        """
        updated = self.schedule_current(rating, now, card)
        self.record_rating(updated, rating)
        return updated

    def skip(self) -> Flashcard:
        """Move past the current card without touching its schedule."""
        self._require_in_session("skip")
        card = self.queue[self.index]
        self.skipped += 1
        self._advance()
        return card

    def remove_card(self, card_id: str) -> bool:
        """Drop a card from the part of the queue not yet rated or skipped.

        Removing the current card shows the next one. Returns True if a card
        was removed.
        """
        for position in range(len(self.queue) - 1, self.index - 1, -1):
            if self.queue[position].id == card_id:
                del self.queue[position]
                if position == self.index:
                    self.flipped = False
                return True
        return False

    def _advance(self) -> None:
        self.index += 1
        self.flipped = False

    def _require_in_session(self, action: str) -> None:
        if self.state != "in_session":
            raise SessionStateError(f"Cannot {action} while session is {self.state}")
