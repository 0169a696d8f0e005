"""Unit tests for the SRS scheduler (due selection, ratings, mastery, stats)."""

from datetime import timedelta

import pytest

from cardcoach.models import DEFAULT_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY
from cardcoach.srs.scheduler import (
    DEFAULT_CONFIG,
    MAX_INTERVAL,
    UNKNOWN_INTERVAL,
    InvalidRatingError,
    SchedulerConfig,
    filter_by_tag,
    get_difficult_cards,
    get_due_cards,
    get_flashcard_stats,
    review_interval,
    select_cards,
    update_card_difficulty,
)


def _interval(card):
    return card.nextReview - card.lastReviewed


class TestGetDueCards:
    def test_empty_input(self, now):
        assert get_due_cards([], now) == []

    @pytest.mark.parametrize("offset", [timedelta(days=-400), timedelta(0), timedelta(days=400)])
    def test_unscheduled_cards_always_due(self, make_card, now, offset):
        card = make_card(nextReview=None)
        assert get_due_cards([card], now + offset) == [card]

    def test_due_boundary_is_inclusive(self, make_card, now):
        on_time = make_card(nextReview=now)
        one_ms_later = make_card(nextReview=now + timedelta(milliseconds=1))

        due = get_due_cards([on_time, one_ms_later], now)

        assert due == [on_time]

    def test_mastered_cards_never_due(self, make_card, now):
        mastered = make_card(mastered=True, nextReview=now - timedelta(days=30))
        mastered_unscheduled = make_card(mastered=True, nextReview=None)

        assert get_due_cards([mastered, mastered_unscheduled], now) == []

    def test_mixed_collection(self, make_card, now):
        """One unscheduled, one overdue and one mastered+overdue card."""
        fresh = make_card(nextReview=None)
        overdue = make_card(nextReview=now - timedelta(hours=2))
        mastered = make_card(mastered=True, nextReview=now - timedelta(hours=2))

        due = get_due_cards([mastered, overdue, fresh], now)

        assert due == [fresh, overdue]

    def test_stable_order(self, make_card, now):
        late = make_card(nextReview=now - timedelta(minutes=5))
        early = make_card(nextReview=now - timedelta(days=2))
        new_b = make_card(nextReview=None, createdAt=now - timedelta(hours=1))
        new_a = make_card(nextReview=None, createdAt=now - timedelta(hours=3))

        due = get_due_cards([late, new_b, early, new_a], now)

        assert [c.id for c in due] == [new_a.id, new_b.id, early.id, late.id]

    def test_naive_timestamps_treated_as_utc(self, make_card, now):
        card = make_card(nextReview=now.replace(tzinfo=None) - timedelta(seconds=1))
        assert get_due_cards([card], now) == [card]


class TestGetDifficultCards:
    def test_default_threshold(self, make_card):
        cards = [make_card(difficulty=d) for d in range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1)]

        difficult = get_difficult_cards(cards)

        assert [c.difficulty for c in difficult] == [1, 2]

    def test_hardest_first(self, make_card):
        two = make_card(difficulty=2)
        one = make_card(difficulty=1)

        assert get_difficult_cards([two, one]) == [one, two]

    def test_explicit_threshold_overrides_config(self, make_card):
        cards = [make_card(difficulty=d) for d in (1, 2, 3)]

        assert len(get_difficult_cards(cards, threshold=1)) == 1
        assert len(get_difficult_cards(cards, config=SchedulerConfig(difficult_threshold=3))) == 3

    def test_mastered_excluded(self, make_card):
        card = make_card(difficulty=1, mastered=True)
        assert get_difficult_cards([card]) == []

    def test_empty_input(self):
        assert get_difficult_cards([]) == []


class TestSelectCards:
    def test_all_mode_includes_mastered_and_future(self, make_card, now):
        cards = [
            make_card(mastered=True),
            make_card(nextReview=now + timedelta(days=3)),
            make_card(),
        ]
        assert len(select_cards(cards, "all", now)) == 3

    def test_due_and_difficult_modes(self, make_card, now):
        due = make_card(nextReview=None, difficulty=4)
        hard_not_due = make_card(nextReview=now + timedelta(days=1), difficulty=1)

        assert select_cards([due, hard_not_due], "due", now) == [due]
        assert select_cards([due, hard_not_due], "difficult", now) == [hard_not_due]

    def test_unknown_mode(self, now):
        with pytest.raises(ValueError):
            select_cards([], "random", now)


class TestFilterByTag:
    def test_case_insensitive_match(self, make_card):
        verb = make_card(tags=["Verbs"])
        noun = make_card(tags=["nouns"])

        assert filter_by_tag([verb, noun], "verbs") == [verb]

    def test_no_tag_keeps_everything(self, make_card):
        cards = [make_card(), make_card(tags=["x"])]
        assert filter_by_tag(cards, None) == cards


class TestUpdateCardDifficulty:
    def test_unknown_on_fresh_card(self, make_card, now):
        card = make_card()
        assert card.difficulty == DEFAULT_DIFFICULTY
        assert card.lastReviewed is None

        updated = update_card_difficulty(card, 0, now)

        assert updated.difficulty < DEFAULT_DIFFICULTY
        assert updated.lastReviewed == now
        assert updated.nextReview == now + UNKNOWN_INTERVAL
        assert updated.streak == 0
        assert updated.mastered is False

    def test_unknown_at_floor_stays_at_floor(self, make_card, now):
        updated = update_card_difficulty(make_card(difficulty=MIN_DIFFICULTY), 0, now)
        assert updated.difficulty == MIN_DIFFICULTY

    def test_original_card_is_not_mutated(self, make_card, now):
        card = make_card()
        update_card_difficulty(card, 5, now)

        assert card.difficulty == DEFAULT_DIFFICULTY
        assert card.lastReviewed is None
        assert card.totalReviews == 0

    @pytest.mark.parametrize("difficulty", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("streak", [0, 1, 3])
    def test_interval_monotonic_in_rating(self, make_card, now, difficulty, streak):
        card = make_card(difficulty=difficulty, streak=streak)
        intervals = [_interval(update_card_difficulty(card, rating, now)) for rating in range(6)]

        assert intervals == sorted(intervals)

    def test_difficulty_monotonic_in_rating(self, make_card, now):
        card = make_card()
        bands = [update_card_difficulty(card, rating, now).difficulty for rating in range(6)]
        assert bands == sorted(bands)

    def test_unknown_is_shortest_interval(self, make_card, now):
        for difficulty in range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1):
            card = make_card(difficulty=difficulty)
            unknown = _interval(update_card_difficulty(card, 0, now))
            others = [_interval(update_card_difficulty(card, r, now)) for r in range(1, 6)]
            assert unknown < min(others)

    def test_top_band_interval_much_longer_than_bottom(self):
        assert review_interval(MAX_DIFFICULTY) >= 24 * review_interval(MIN_DIFFICULTY)

    def test_interval_capped(self):
        assert review_interval(MAX_DIFFICULTY, streak=100) == MAX_INTERVAL

    def test_repeated_lowest_rating_is_bounded(self, make_card, now):
        card = make_card()
        for i in range(10):
            card = update_card_difficulty(card, 0, now + timedelta(minutes=i))
            assert card.difficulty >= MIN_DIFFICULTY
        assert card.difficulty == MIN_DIFFICULTY

    def test_repeated_highest_rating_is_bounded(self, make_card, now):
        card = make_card()
        for i in range(10):
            card = update_card_difficulty(card, 5, now + timedelta(days=i))
            assert card.difficulty <= MAX_DIFFICULTY
        assert card.difficulty == MAX_DIFFICULTY

    def test_review_counters(self, make_card, now):
        card = make_card()
        card = update_card_difficulty(card, 3, now)
        card = update_card_difficulty(card, 1, now)
        card = update_card_difficulty(card, 0, now)

        assert card.totalReviews == 3
        assert card.correctReviews == 1

    def test_streak_resets_on_weak_rating(self, make_card, now):
        card = make_card(difficulty=MAX_DIFFICULTY, streak=1)

        updated = update_card_difficulty(card, 3, now)

        assert updated.streak == 0
        assert updated.mastered is False

    def test_streak_only_grows_in_top_band(self, make_card, now):
        updated = update_card_difficulty(make_card(difficulty=3), 5, now)
        assert updated.difficulty == 4
        assert updated.streak == 0

    @pytest.mark.parametrize("rating", [-1, 6, 2.5, "4", None, True])
    def test_invalid_rating(self, make_card, now, rating):
        card = make_card()

        with pytest.raises(InvalidRatingError) as exc_info:
            update_card_difficulty(card, rating, now)

        assert exc_info.value.rating == rating
        assert card.lastReviewed is None

    def test_invalid_rating_is_a_value_error(self, make_card, now):
        with pytest.raises(ValueError):
            update_card_difficulty(make_card(), 9, now)


class TestMasteryPolicy:
    def test_two_consecutive_successes_by_default(self, make_card, now):
        """Top-band card rated easy twice masters under the default policy."""
        card = make_card(difficulty=MAX_DIFFICULTY, nextReview=now)

        first = update_card_difficulty(card, 5, now)
        assert first.mastered is False
        assert first.streak == 1

        later = first.nextReview
        second = update_card_difficulty(first, 5, later)
        assert second.mastered is True
        assert get_due_cards([second], later + timedelta(days=365)) == []

    def test_single_rating_policy(self, make_card, now):
        config = SchedulerConfig(mastery_streak=1)
        card = make_card(difficulty=MAX_DIFFICULTY)

        updated = update_card_difficulty(card, 5, now, config)

        assert updated.mastered is True
        assert get_due_cards([updated], now + timedelta(days=365)) == []

    def test_single_rating_policy_needs_top_band(self, make_card, now):
        config = SchedulerConfig(mastery_streak=1)

        updated = update_card_difficulty(make_card(difficulty=3), 5, now, config)

        assert updated.mastered is False

    def test_n_consecutive_policy(self, make_card, now):
        config = SchedulerConfig(mastery_streak=3)
        card = make_card(difficulty=MAX_DIFFICULTY)

        for i in range(2):
            card = update_card_difficulty(card, 4, now + timedelta(days=i), config)
            assert card.mastered is False

        # A weak rating breaks the run
        card = update_card_difficulty(card, 3, now + timedelta(days=3), config)
        assert card.streak == 0

        for i in range(3):
            card = update_card_difficulty(card, 5, now + timedelta(days=10 + i), config)
        assert card.mastered is True

    def test_mastery_is_sticky(self, make_card, now):
        card = make_card(difficulty=MAX_DIFFICULTY, mastered=True, streak=2)

        updated = update_card_difficulty(card, 0, now)

        assert updated.mastered is True
        assert updated.difficulty == MAX_DIFFICULTY - 2

    @pytest.mark.parametrize("kwargs", [{"mastery_streak": 0}, {"difficult_threshold": 0}, {"difficult_threshold": 6}])
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            SchedulerConfig(**kwargs)

    def test_default_config(self):
        assert DEFAULT_CONFIG.mastery_streak == 2
        assert DEFAULT_CONFIG.difficult_threshold == 2


class TestGetFlashcardStats:
    def test_empty(self, now):
        stats = get_flashcard_stats([], now)

        assert stats.total == 0
        assert stats.mastered == 0
        assert stats.learning == 0
        assert stats.to_review == 0
        assert stats.accuracy == 0.0

    def test_counts(self, make_card, now):
        cards = [
            make_card(),  # new, due
            make_card(lastReviewed=now - timedelta(days=2), nextReview=now - timedelta(days=1),
                      totalReviews=4, correctReviews=3),  # learning, due
            make_card(lastReviewed=now - timedelta(hours=1), nextReview=now + timedelta(days=1),
                      totalReviews=1, correctReviews=0),  # learning, not due
            make_card(mastered=True, lastReviewed=now - timedelta(days=1), nextReview=now - timedelta(days=1),
                      totalReviews=5, correctReviews=5),
        ]

        stats = get_flashcard_stats(cards, now)

        assert stats.total == 4
        assert stats.mastered == 1
        assert stats.learning == 2
        assert stats.new == 1
        assert stats.to_review == 2
        assert stats.total_reviews == 10
        assert stats.correct_reviews == 8
        assert stats.accuracy == pytest.approx(0.8)

    def test_consistency_over_rated_collection(self, make_card, now):
        config = SchedulerConfig(mastery_streak=1)
        cards = [make_card(difficulty=d) for d in (1, 3, 5, 5)]
        cards = [update_card_difficulty(card, rating, now, config) for card, rating in zip(cards, [0, 3, 5, 2])]
        cards.append(make_card())

        stats = get_flashcard_stats(cards, now)

        assert stats.total == len(cards)
        assert stats.mastered == sum(1 for c in cards if c.mastered)
        assert stats.mastered + stats.learning <= stats.total
