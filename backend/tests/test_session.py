"""Tests for the practice queue state machine."""

from datetime import timedelta

import pytest

from cardcoach.srs.scheduler import InvalidRatingError, SchedulerConfig
from cardcoach.srs.session import PracticeSession, SessionStateError


def reverse(cards):
    cards.reverse()


def no_shuffle(cards):
    pass


class TestPracticeSessionStates:
    def test_starts_idle(self):
        session = PracticeSession()

        assert session.state == "idle"
        assert session.current is None

    def test_start_with_due_cards_enters_session(self, make_card, now):
        cards = [make_card(), make_card()]
        session = PracticeSession()

        state = session.start(cards, "due", now, shuffle=no_shuffle)

        assert state == "in_session"
        assert session.current == cards[0]
        assert session.index == 0
        assert session.flipped is False

    def test_start_with_nothing_due_stays_idle(self, make_card, now):
        session = PracticeSession()

        state = session.start([make_card(nextReview=now + timedelta(days=1))], "due", now)

        assert state == "idle"
        assert session.queue == []

    def test_queue_is_shuffled_once_at_start(self, make_card, now):
        cards = [make_card() for _ in range(3)]
        calls = []

        def recording_shuffle(queue):
            calls.append(list(queue))
            queue.reverse()

        session = PracticeSession()
        session.start(cards, "all", now, shuffle=recording_shuffle)
        session.rate(4, now)
        session.skip()

        assert len(calls) == 1
        assert [c.id for c in session.queue] == [c.id for c in reversed(cards)]

    def test_completes_after_last_card(self, make_card, now):
        session = PracticeSession()
        session.start([make_card(), make_card()], "all", now, shuffle=no_shuffle)

        session.rate(3, now)
        assert session.state == "in_session"
        session.rate(3, now)

        assert session.state == "complete"
        assert session.current is None

    def test_restart_after_complete_reselects(self, make_card, now):
        card = make_card()
        session = PracticeSession()
        session.start([card], "due", now, shuffle=no_shuffle)
        rated = session.rate(4, now)
        assert session.state == "complete"

        # The rated card is not due yet; a new card is
        newcomer = make_card()
        state = session.start([rated, newcomer], "due", now, shuffle=no_shuffle)

        assert state == "in_session"
        assert session.queue == [newcomer]
        assert session.rated == 0


class TestPracticeSessionActions:
    def test_flip_toggles_and_resets_on_advance(self, make_card, now):
        session = PracticeSession()
        session.start([make_card(), make_card()], "all", now, shuffle=no_shuffle)

        assert session.flip() is True
        assert session.flip() is False
        session.flip()
        session.skip()

        assert session.flipped is False

    def test_rate_updates_card_and_tallies(self, make_card, now):
        card = make_card()
        session = PracticeSession()
        session.start([card], "all", now, shuffle=no_shuffle)

        updated = session.rate(4, now)

        assert updated.id == card.id
        assert updated.lastReviewed == now
        assert updated.difficulty == card.difficulty + 1
        assert session.queue[0] == updated
        assert session.rated == 1
        assert session.correct == 1

    def test_rate_uses_session_config(self, make_card, now):
        session = PracticeSession(config=SchedulerConfig(mastery_streak=1))
        session.start([make_card(difficulty=5)], "all", now, shuffle=no_shuffle)

        assert session.rate(5, now).mastered is True

    def test_incorrect_rating_not_counted_correct(self, make_card, now):
        session = PracticeSession()
        session.start([make_card()], "all", now, shuffle=no_shuffle)

        session.rate(1, now)

        assert session.correct == 0

    def test_skip_leaves_schedule_untouched(self, make_card, now):
        card = make_card()
        session = PracticeSession()
        session.start([card, make_card()], "all", now, shuffle=no_shuffle)

        skipped = session.skip()

        assert skipped == card
        assert skipped.lastReviewed is None
        assert session.skipped == 1
        assert session.rated == 0
        assert session.index == 1

    def test_invalid_rating_does_not_advance(self, make_card, now):
        session = PracticeSession()
        session.start([make_card()], "all", now, shuffle=no_shuffle)

        with pytest.raises(InvalidRatingError):
            session.rate(7, now)

        assert session.index == 0
        assert session.rated == 0

    @pytest.mark.parametrize("action", ["flip", "skip"])
    def test_actions_rejected_when_idle(self, action):
        with pytest.raises(SessionStateError):
            getattr(PracticeSession(), action)()

    def test_rate_rejected_when_complete(self, make_card, now):
        session = PracticeSession()
        session.start([make_card()], "all", now, shuffle=no_shuffle)
        session.skip()

        with pytest.raises(SessionStateError) as exc_info:
            session.rate(3, now)

        assert "complete" in str(exc_info.value)

    def test_difficult_mode(self, make_card, now):
        hard = make_card(difficulty=1)
        session = PracticeSession()

        session.start([hard, make_card(difficulty=4)], "difficult", now, shuffle=reverse)

        assert session.queue == [hard]


class TestRatingWithStoredCopy:
    def test_rate_schedules_given_copy(self, make_card, now):
        card = make_card()
        session = PracticeSession()
        session.start([card], "all", now, shuffle=no_shuffle)
        stored = card.model_copy(update={"front": "edited", "totalReviews": 4})

        updated = session.rate(4, now, card=stored)

        assert updated.front == "edited"
        assert updated.totalReviews == 5
        assert session.queue[0] == updated

    def test_schedule_current_does_not_advance(self, make_card, now):
        session = PracticeSession()
        session.start([make_card(), make_card()], "all", now, shuffle=no_shuffle)

        updated = session.schedule_current(4, now)

        assert session.index == 0
        assert session.rated == 0
        assert updated.lastReviewed == now

        session.record_rating(updated, 4)

        assert session.index == 1
        assert session.rated == 1
        assert session.correct == 1
        assert session.queue[0] == updated


class TestRemoveCard:
    def test_remove_upcoming_card(self, make_card, now):
        first, second, third = make_card(), make_card(), make_card()
        session = PracticeSession()
        session.start([first, second, third], "all", now, shuffle=no_shuffle)

        assert session.remove_card(third.id) is True

        assert session.queue == [first, second]
        assert session.current == first

    def test_remove_current_card_shows_next(self, make_card, now):
        first, second = make_card(), make_card()
        session = PracticeSession()
        session.start([first, second], "all", now, shuffle=no_shuffle)
        session.flip()

        session.remove_card(first.id)

        assert session.current == second
        assert session.flipped is False

    def test_remove_last_card_completes(self, make_card, now):
        card = make_card()
        session = PracticeSession()
        session.start([card], "all", now, shuffle=no_shuffle)

        session.remove_card(card.id)

        assert session.state == "complete"

    def test_already_rated_card_is_kept(self, make_card, now):
        first, second = make_card(), make_card()
        session = PracticeSession()
        session.start([first, second], "all", now, shuffle=no_shuffle)
        session.skip()

        assert session.remove_card(first.id) is False
        assert len(session.queue) == 2
