"""
Tests for productivity statistics.

Covers the derived window recompute (day rollover, week and month
windows) and each tracking call.
"""
from datetime import date, timedelta

import pytest

from radia.core.exceptions import ValidationError
from radia.database.entities import ProductivityStats
from radia.database.repositories import StatsRepository
from radia.database.stats import StatsAggregator, calculate_productivity, refresh

TODAY = date(2026, 10, 19)


def day(offset: int) -> str:
    return (TODAY + timedelta(days=offset)).isoformat()


@pytest.fixture
def aggregator(kv, clock):
    """StatsAggregator over an empty store, pinned to 2026-10-19."""
    return StatsAggregator(StatsRepository(kv), clock=clock)


class TestRefresh:
    """Tests for the derived-window recompute."""

    def test_week_window(self):
        """Days -5, -1 and today count; day -10 does not."""
        stats = ProductivityStats(
            daily_stats={day(-10): 3, day(-5): 4, day(-1): 2, day(0): 1},
        )
        refreshed = refresh(stats, TODAY)
        assert refreshed.week_copies == 7
        assert refreshed.month_copies == 10

    def test_todays_copies_added_to_ledger_sum(self):
        """todaysCopies is added on top of today's ledger entry."""
        stats = ProductivityStats(
            daily_stats={day(-1): 2, day(0): 1},
            todays_copies=1,
            last_copy_date=day(0),
        )
        refreshed = refresh(stats, TODAY)
        assert refreshed.week_copies == 4
        assert refreshed.month_copies == 4

    def test_stale_todays_copies_keep_ledger_entry(self):
        """Today's ledger entry counts even when lastCopyDate is stale."""
        stats = ProductivityStats(
            daily_stats={day(0): 3}, todays_copies=3, last_copy_date=day(-2)
        )
        refreshed = refresh(stats, TODAY)
        assert refreshed.todays_copies == 0
        assert refreshed.week_copies == 3

    def test_day_rollover_resets_todays_copies(self):
        """A last copy dated yesterday zeroes today's count."""
        stats = ProductivityStats(todays_copies=5, last_copy_date=day(-1))
        assert refresh(stats, TODAY).todays_copies == 0

    def test_todays_copies_kept_same_day(self):
        """Today's count survives a reload on the same day."""
        stats = ProductivityStats(todays_copies=5, last_copy_date=day(0))
        assert refresh(stats, TODAY).todays_copies == 5

    def test_empty_ledger_degrades_to_todays_copies(self):
        """With no ledger the windows equal today's count."""
        stats = ProductivityStats(todays_copies=2, last_copy_date=day(0))
        refreshed = refresh(stats, TODAY)
        assert refreshed.week_copies == 2
        assert refreshed.month_copies == 2

    def test_month_window_starts_on_the_first(self):
        """Only ledger days of the current month count."""
        stats = ProductivityStats(
            daily_stats={"2026-09-30": 10, "2026-10-01": 3, "2026-10-18": 2},
        )
        assert refresh(stats, TODAY).month_copies == 5

    def test_week_boundary_excludes_day_minus_seven(self):
        """The window holds today and the six days before it."""
        stats = ProductivityStats(daily_stats={day(-7): 5, day(-6): 1})
        assert refresh(stats, TODAY).week_copies == 1

    def test_future_entries_ignored(self):
        """Entries dated after today do not count."""
        stats = ProductivityStats(daily_stats={day(1): 9})
        refreshed = refresh(stats, TODAY)
        assert refreshed.week_copies == 0
        assert refreshed.month_copies == 0

    def test_stored_windows_not_trusted(self):
        """Stale derived values are replaced by the recompute."""
        stats = ProductivityStats(week_copies=999, month_copies=999)
        refreshed = refresh(stats, TODAY)
        assert refreshed.week_copies == 0
        assert refreshed.month_copies == 0

    def test_refresh_does_not_mutate_input(self):
        """refresh returns a new object."""
        stats = ProductivityStats(todays_copies=5, last_copy_date=day(-1))
        refresh(stats, TODAY)
        assert stats.todays_copies == 5


class TestTracking:
    """Tests for tracking calls."""

    def test_track_copy_updates_counter_ledger_and_windows(self, aggregator):
        """A copy increments its counter, today's ledger and the windows."""
        stats = aggregator.track_copy("report")
        assert stats.reports_copied == 1
        assert stats.todays_copies == 1
        assert stats.week_copies == 2
        assert stats.month_copies == 2
        assert stats.daily_stats == {day(0): 1}
        assert stats.last_copy_date == day(0)

    @pytest.mark.parametrize(
        "kind, attribute",
        [
            ("phrase", "phrases_copied"),
            ("ai-hallazgos", "ai_hallazgos_copied"),
            ("ai-conclusiones", "ai_conclusions_copied"),
            ("ai-diferenciales", "ai_diferenciales_copied"),
        ],
    )
    def test_copy_kinds(self, aggregator, kind, attribute):
        """Each copy kind maps to its own counter."""
        stats = aggregator.track_copy(kind)
        assert getattr(stats, attribute) == 1
        assert stats.total_copies == 1

    def test_unknown_copy_kind_rejected(self, aggregator):
        """Unknown kinds raise ValidationError."""
        with pytest.raises(ValidationError):
            aggregator.track_copy("email")

    def test_tracking_persists(self, kv, clock, aggregator):
        """A fresh aggregator sees earlier tracking."""
        aggregator.track_copy("phrase")
        aggregator.track_recording()
        reloaded = StatsAggregator(StatsRepository(kv), clock=clock).load()
        assert reloaded.phrases_copied == 1
        assert reloaded.recordings_count == 1

    def test_copies_roll_over_to_next_day(self, aggregator, clock):
        """Yesterday's copies move into the week window, not today."""
        aggregator.track_copy("report")
        aggregator.track_copy("report")
        clock.advance(days=1)

        stats = aggregator.current()
        assert stats.todays_copies == 0
        assert stats.week_copies == 2

        stats = aggregator.track_copy("report")
        assert stats.todays_copies == 1
        assert stats.week_copies == 4

    def test_non_copy_actions_leave_copy_ledger_alone(self, aggregator):
        """Recordings and AI actions do not count as copies."""
        aggregator.track_recording()
        aggregator.track_ai_report_generation()
        stats = aggregator.track_ai_chat_query()
        assert stats.recordings_count == 1
        assert stats.ai_reports_generated == 1
        assert stats.ai_chat_queries == 1
        assert stats.daily_stats == {}
        assert stats.todays_copies == 0

    def test_activity_dates_and_days_used(self, aggregator, clock):
        """Days used counts distinct active days."""
        aggregator.track_recording()
        stats = aggregator.track_recording()
        assert stats.first_use_date == day(0)
        assert stats.total_days_used == 1

        clock.advance(days=1)
        stats = aggregator.track_ai_chat_query()
        assert stats.first_use_date == day(0)
        assert stats.last_active_date == day(1)
        assert stats.total_days_used == 2

    def test_interaction_time(self, aggregator):
        """Minutes go to the total and today's interaction ledger."""
        aggregator.track_interaction_time(30)
        stats = aggregator.track_interaction_time(15.5)
        assert stats.total_interaction_time == 45.5
        assert stats.daily_interaction_time == {day(0): 45.5}

    @pytest.mark.parametrize("minutes", [0, -5, "10", True])
    def test_invalid_interaction_time(self, aggregator, minutes):
        """Minutes must be a positive number."""
        with pytest.raises(ValidationError):
            aggregator.track_interaction_time(minutes)

    def test_shares(self, aggregator):
        """Share counters increment independently."""
        aggregator.track_report_share()
        stats = aggregator.track_phrase_share()
        assert stats.reports_shared == 1
        assert stats.phrases_shared == 1

    def test_satisfaction_rating(self, aggregator):
        """Ratings 1-5 are stored with the date."""
        stats = aggregator.set_satisfaction_rating(4)
        assert stats.app_satisfaction_rating == 4
        assert stats.satisfaction_date == day(0)

    @pytest.mark.parametrize("rating", [0, 6, 3.5, "5"])
    def test_invalid_satisfaction_rating(self, aggregator, rating):
        """Out-of-range ratings are rejected."""
        with pytest.raises(ValidationError):
            aggregator.set_satisfaction_rating(rating)

    def test_economic_profitability(self, aggregator):
        """The estimate is stored and the month's benefit recorded."""
        data = {"monthlyIncome": 5000, "monthlyBenefit": 750, "calculatedAt": "x"}
        stats = aggregator.save_economic_profitability(data)
        assert stats.economic_profitability == data
        assert stats.monthly_profitability == {"2026-10": 750}

    def test_failed_save_keeps_previous_stats(self, flaky_kv, clock):
        """When the write fails the stored stats stay in effect."""
        aggregator = StatsAggregator(StatsRepository(flaky_kv), clock=clock)
        aggregator.track_copy("report")
        flaky_kv.fail_all_writes = True

        stats = aggregator.track_copy("report")
        assert stats.reports_copied == 1


class TestProductivity:
    """Tests for calculate_productivity."""

    def test_zero_without_interaction_time(self):
        """No recorded time means zero productivity."""
        assert calculate_productivity(ProductivityStats(reports_copied=10)) == 0

    def test_copies_per_hour_per_day(self):
        """total copies / (hours * days used), two decimals."""
        stats = ProductivityStats(
            reports_copied=10,
            phrases_copied=5,
            total_interaction_time=120,
            total_days_used=3,
        )
        assert calculate_productivity(stats) == 2.5

    def test_days_used_floor_of_one(self):
        """Zero days used counts as one."""
        stats = ProductivityStats(reports_copied=3, total_interaction_time=60)
        assert calculate_productivity(stats) == 3.0
