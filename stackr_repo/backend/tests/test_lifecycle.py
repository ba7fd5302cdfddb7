"""
Tests for the challenge lifecycle: start, record savings, complete, cancel.
"""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stackr.core.catalog import ChallengeCatalog
from stackr.core.exceptions import InvalidAmount, NotFound
from stackr.core.lifecycle import ChallengeLifecycle
from stackr.core.persistence import ChallengeStore, InMemoryStorage
from stackr.schemas.challenges import ChallengeStatus, NoticeType


class CountingStore(ChallengeStore):

    def __init__(self):
        super().__init__(InMemoryStorage())
        self.saves = 0

    def save(self, user_id, active, completed):
        self.saves += 1
        super().save(user_id, active, completed)


class BrokenStore(ChallengeStore):

    def __init__(self):
        super().__init__(InMemoryStorage())

    def save(self, user_id, active, completed):
        raise IOError("disk full")


class TestStartChallenge:

    def test_new_challenge_starts_empty_and_active(self, lifecycle, clock):
        challenge = lifecycle.start_challenge("hundred")

        assert challenge.status == ChallengeStatus.ACTIVE
        assert challenge.current_amount == 0
        assert challenge.progress == 0
        assert challenge.entries == []
        assert [m.claimed for m in challenge.milestones_claimed] == [False, False, False]
        assert challenge.start_date == clock.now
        assert (challenge.end_date - challenge.start_date).days == 10
        assert challenge.completed_date is None
        assert lifecycle.get_active_challenges() == (challenge,)

    def test_every_default_template_can_be_started(self, store, clock):
        lifecycle = ChallengeLifecycle("user-2", store, clock=clock)
        for template in ChallengeCatalog().list_templates():
            challenge = lifecycle.start_challenge(template.id)
            assert challenge.progress == 0
            assert not any(m.claimed for m in challenge.milestones_claimed)
        assert len(lifecycle.get_active_challenges()) == 7

    def test_unknown_template_raises_not_found(self, lifecycle):
        with pytest.raises(NotFound):
            lifecycle.start_challenge("nope")

    def test_starting_an_active_template_returns_existing(self, lifecycle):
        first = lifecycle.start_challenge("hundred")
        lifecycle.record_savings("hundred", 10)

        again = lifecycle.start_challenge("hundred")

        assert again is first
        assert again.current_amount == 10
        assert len(lifecycle.get_active_challenges()) == 1

    def test_challenge_copies_template_fields(self, lifecycle, small_catalog):
        challenge = lifecycle.start_challenge("hundred")
        template = small_catalog.get_template("hundred")

        assert challenge.title == template.title
        assert challenge.milestones == template.milestones
        challenge.title = "Renamed"
        assert template.title == "Hundred Dollar Challenge"

    def test_start_persists(self, small_catalog, clock):
        store = CountingStore()
        lifecycle = ChallengeLifecycle("u", store, catalog=small_catalog, clock=clock)
        lifecycle.start_challenge("hundred")
        assert store.saves == 1


class TestRecordSavings:

    def test_amounts_accumulate_and_progress_follows(self, lifecycle):
        lifecycle.start_challenge("big")
        for amount in (12.5, 40, 7.25, 100):
            challenge = lifecycle.record_savings("big", amount)

        assert challenge.current_amount == Decimal("159.75")
        assert challenge.current_amount == sum(e.amount for e in challenge.entries)
        assert challenge.progress == 16

    def test_progress_rounds_half_up(self, lifecycle):
        lifecycle.start_challenge("big")
        challenge = lifecycle.record_savings("big", 5)  # 0.5%
        assert challenge.progress == 1

    def test_entry_records_time_and_notes(self, lifecycle, clock):
        lifecycle.start_challenge("hundred")
        clock.advance(hours=3)
        challenge = lifecycle.record_savings("hundred", 10, notes="  skipped latte\n")

        entry = challenge.entries[-1]
        assert entry.date == clock.now
        assert entry.amount == 10
        assert entry.notes == "skipped latte"
        assert challenge.last_updated == clock.now

    def test_scenario_thirty_thirty_fifty(self, lifecycle, notices):
        """WHEN 30, 30, then 50 is saved toward a $100 target
        THEN milestones A, B, C are claimed one call at a time and the challenge completes
        """
        lifecycle.start_challenge("hundred")

        challenge = lifecycle.record_savings("hundred", 30)
        assert challenge.progress == 30
        assert [m.claimed for m in challenge.milestones_claimed] == [True, False, False]
        assert [n.message for n in notices] == ["You've earned: A"]

        challenge = lifecycle.record_savings("hundred", 30)
        assert challenge.progress == 60
        assert [m.claimed for m in challenge.milestones_claimed] == [True, True, False]
        assert notices[-1].message == "You've earned: B"
        assert len(notices) == 2

        challenge = lifecycle.record_savings("hundred", 50)
        assert challenge.progress == 100
        assert challenge.current_amount == 110
        assert all(m.claimed for m in challenge.milestones_claimed)
        assert challenge.status == ChallengeStatus.COMPLETED
        assert [n.title for n in notices[2:]] == ["Milestone Achieved!", "Challenge Completed!"]

    def test_reaching_target_exactly_completes(self, lifecycle, clock):
        lifecycle.start_challenge("hundred")
        lifecycle.record_savings("hundred", 60)
        clock.advance(days=1)
        challenge = lifecycle.record_savings("hundred", 40)

        assert challenge.status == ChallengeStatus.COMPLETED
        assert challenge.completed_date == clock.now
        assert lifecycle.get_active_challenges() == ()
        assert lifecycle.get_completed_challenges() == (challenge,)

    def test_negative_amount_rejected(self, lifecycle):
        lifecycle.start_challenge("hundred")
        with pytest.raises(InvalidAmount):
            lifecycle.record_savings("hundred", -5)

    def test_cent_amounts_add_up_exactly(self, lifecycle):
        """WHEN six cent amounts summing to exactly $100 are saved toward a $100 target
        THEN the total is exactly 100.00 and the challenge completes
        """
        lifecycle.start_challenge("hundred")
        for amount in (31.10, 17.20, 7.69, 39.97, 2.33, 1.71):
            challenge = lifecycle.record_savings("hundred", amount)

        assert challenge.current_amount == Decimal("100.00")
        assert challenge.progress == 100
        assert challenge.status == ChallengeStatus.COMPLETED
        assert lifecycle.get_active_challenges() == ()

    @pytest.mark.parametrize("amount", [Decimal("10.00"), Decimal("10"), 10, 10.0])
    def test_decimal_int_and_float_amounts_accepted(self, lifecycle, amount):
        lifecycle.start_challenge("hundred")
        challenge = lifecycle.record_savings("hundred", amount)

        assert challenge.current_amount == Decimal("10.00")
        assert challenge.entries[-1].amount == Decimal("10.00")
        assert challenge.progress == 10

    def test_amounts_are_kept_to_the_cent(self, lifecycle):
        lifecycle.start_challenge("hundred")
        challenge = lifecycle.record_savings("hundred", Decimal("2.345"))
        assert challenge.current_amount == Decimal("2.35")

    @pytest.mark.parametrize("amount", [0.001, Decimal("0.004")])
    def test_sub_cent_amount_rejected(self, lifecycle, amount):
        lifecycle.start_challenge("hundred")
        with pytest.raises(InvalidAmount):
            lifecycle.record_savings("hundred", amount)
        assert lifecycle.get_challenge_by_id("hundred").entries == []

    @pytest.mark.parametrize("amount", [0, float("nan"), float("inf"), Decimal("NaN"), Decimal("-1"), "10", None, True])
    def test_non_positive_or_non_numeric_rejected(self, lifecycle, amount):
        lifecycle.start_challenge("hundred")
        with pytest.raises(InvalidAmount):
            lifecycle.record_savings("hundred", amount)

        challenge = lifecycle.get_challenge_by_id("hundred")
        assert challenge.entries == []
        assert challenge.current_amount == 0

    def test_unknown_challenge_raises_not_found(self, lifecycle):
        with pytest.raises(NotFound):
            lifecycle.record_savings("nonexistent", 10)

    def test_completed_challenge_cannot_take_more_savings(self, lifecycle):
        lifecycle.start_challenge("hundred")
        lifecycle.record_savings("hundred", 100)
        with pytest.raises(NotFound):
            lifecycle.record_savings("hundred", 10)

    def test_each_call_persists_once(self, small_catalog, clock):
        store = CountingStore()
        lifecycle = ChallengeLifecycle("u", store, catalog=small_catalog, clock=clock)
        lifecycle.start_challenge("hundred")

        lifecycle.record_savings("hundred", 10)
        lifecycle.record_savings("hundred", 90)  # completes

        assert store.saves == 3

    def test_failed_save_keeps_in_memory_state(self, small_catalog, clock):
        lifecycle = ChallengeLifecycle("u", BrokenStore(), catalog=small_catalog, clock=clock)
        with pytest.raises(IOError):
            lifecycle.start_challenge("hundred")
        assert len(lifecycle.get_active_challenges()) == 1


class TestCompleteAndCancel:

    def test_manual_completion(self, lifecycle):
        lifecycle.start_challenge("big")
        lifecycle.record_savings("big", 20)

        challenge = lifecycle.complete_challenge("big")

        assert challenge.status == ChallengeStatus.COMPLETED
        assert challenge.completed_date is not None
        assert lifecycle.get_challenge_by_id("big") is challenge

    def test_completing_twice_raises_not_found(self, lifecycle):
        lifecycle.start_challenge("big")
        lifecycle.complete_challenge("big")
        with pytest.raises(NotFound):
            lifecycle.complete_challenge("big")

    def test_cancel_discards_challenge(self, lifecycle, notices):
        lifecycle.start_challenge("hundred")
        lifecycle.record_savings("hundred", 10)

        cancelled = lifecycle.cancel_challenge("hundred")

        assert cancelled.status == ChallengeStatus.CANCELLED
        assert lifecycle.get_active_challenges() == ()
        assert lifecycle.get_completed_challenges() == ()
        with pytest.raises(NotFound):
            lifecycle.get_challenge_by_id("hundred")
        assert notices[-1].type == NoticeType.INFO

    def test_cancel_unknown_raises_not_found(self, lifecycle):
        with pytest.raises(NotFound):
            lifecycle.cancel_challenge("hundred")

    def test_completed_challenge_cannot_be_cancelled(self, lifecycle):
        lifecycle.start_challenge("hundred")
        lifecycle.record_savings("hundred", 100)
        with pytest.raises(NotFound):
            lifecycle.cancel_challenge("hundred")

    def test_completed_template_can_be_restarted(self, lifecycle):
        lifecycle.start_challenge("hundred")
        lifecycle.record_savings("hundred", 100)

        restarted = lifecycle.start_challenge("hundred")

        assert restarted.status == ChallengeStatus.ACTIVE
        assert lifecycle.get_challenge_by_id("hundred") is restarted
        assert len(lifecycle.get_completed_challenges()) == 1


class TestStatsAndSuggestions:

    def test_stats_summarise_collections(self, lifecycle, clock):
        lifecycle.start_challenge("hundred")
        lifecycle.start_challenge("big")
        lifecycle.record_savings("big", 30)
        clock.advance(days=1)
        lifecycle.record_savings("big", 20)
        lifecycle.record_savings("hundred", 100)

        stats = lifecycle.get_challenge_stats()

        assert stats.total_active == 1
        assert stats.total_completed == 1
        assert stats.total_saved == 150
        # completed challenge's entries are not part of the streak
        assert stats.streak_days == 2

    def test_streak_days_follow_the_user_timezone(self, small_catalog, clock):
        """WHEN savings land at 20:00 and 01:00 UTC on consecutive UTC days two days apart
        THEN a UTC-4 user sees them on adjacent local days
        """
        eastern = timezone(timedelta(hours=-4))
        lifecycle = ChallengeLifecycle("u", ChallengeStore(InMemoryStorage()), catalog=small_catalog,
                                       clock=clock, tz=eastern)
        lifecycle.start_challenge("big")

        clock.now = datetime(2024, 5, 19, 20, 0, tzinfo=timezone.utc)
        lifecycle.record_savings("big", 10)
        clock.now = datetime(2024, 5, 21, 1, 0, tzinfo=timezone.utc)
        lifecycle.record_savings("big", 10)

        assert lifecycle.get_challenge_stats().streak_days == 2

        lifecycle.tz = None
        assert lifecycle.get_challenge_stats().streak_days == 1

    def test_stats_for_new_user(self, lifecycle):
        stats = lifecycle.get_challenge_stats()
        assert (stats.total_active, stats.total_completed, stats.total_saved, stats.streak_days) == (0, 0, 0, 0)

    def test_suggestions_are_cached_until_refreshed(self, store):
        lifecycle = ChallengeLifecycle("u", store, rng=random.Random(11))

        first = lifecycle.get_suggested_challenges()
        assert len(first) == 3
        assert len({t.id for t in first}) == 3
        assert lifecycle.get_suggested_challenges() == first

        refreshed = lifecycle.refresh_suggestions()
        assert len(refreshed) == 3
        assert lifecycle.get_suggested_challenges() == refreshed
