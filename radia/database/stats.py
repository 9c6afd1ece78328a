#!/usr/bin/env python3
"""
stats.py
--------------------
Productivity statistics: tracking calls and derived copy windows.

The derived fields of ProductivityStats are recomputed from the daily
ledger every time the stats are read or changed, never incremented in
place:

    todaysCopies  kept only while lastCopyDate is today, else 0
    weekCopies    ledger days d with today-7 < d <= today, plus todaysCopies
    monthCopies   ledger days d with monthStart <= d <= today, plus todaysCopies

Today's ledger entry is summed like any other day and todaysCopies is
added on top. Ledger entries dated after today are ignored.

Usage:
    aggregator = StatsAggregator(StatsRepository(kv), clock=utc_now)
    aggregator.track_copy("report")
    aggregator.current().week_copies
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import copy
import threading
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Callable, Dict, Optional

# --- Local imports ---
from radia.core.exceptions import ValidationError
from radia.core.logging_manager import RadiaLogger, safe_logger
from radia.core.timeutils import Clock, utc_now
from radia.core.validators import DataValidator

from .entities import ProductivityStats
from .repositories import StatsRepository

# Copy kind -> lifetime counter attribute
COPY_KINDS: Dict[str, str] = {
    "report": "reports_copied",
    "phrase": "phrases_copied",
    "ai-hallazgos": "ai_hallazgos_copied",
    "ai-conclusiones": "ai_conclusions_copied",
    "ai-diferenciales": "ai_diferenciales_copied",
}

WEEK_DAYS = 7


def refresh(stats: ProductivityStats, today: date) -> ProductivityStats:
    """
    Recompute the derived copy windows for ``today``.

    Args:
        stats: Stats as stored (derived fields are not trusted)
        today: Reference day

    Returns:
        A copy of ``stats`` with todays/week/month copies recomputed
    """
    last_copy = DataValidator.parse_date(stats.last_copy_date)
    todays = stats.todays_copies if last_copy == today else 0

    week_start = today - timedelta(days=WEEK_DAYS)
    month_start = today.replace(day=1)
    week = 0
    month = 0
    for day_key, count in stats.daily_stats.items():
        day = DataValidator.parse_date(day_key)
        if day is None or day > today:
            continue
        if day > week_start:
            week += count
        if day >= month_start:
            month += count

    return replace(
        stats,
        todays_copies=todays,
        week_copies=int(week) + todays,
        month_copies=int(month) + todays,
    )


def calculate_productivity(stats: ProductivityStats) -> float:
    """
    Copies per hour of interaction, per day of use.

    Returns:
        round(total copies / (hours * days used), 2), or 0 when no
        interaction time has been recorded
    """
    hours = stats.total_interaction_time / 60
    if hours == 0:
        return 0
    days_used = max(stats.total_days_used, 1)
    return round(stats.total_copies / (hours * days_used), 2)


class StatsAggregator:
    """
    Owns the ProductivityStats singleton on top of its repository.

    Every tracking call increments one lifetime counter, records today's
    activity, recomputes the derived windows and persists. A failed save
    leaves the previously stored stats in effect.
    """

    def __init__(
        self,
        repository: StatsRepository,
        clock: Optional[Clock] = None,
        logger: Optional[RadiaLogger] = None,
    ) -> None:
        self.repository = repository
        self.clock = clock or utc_now
        self.logger = logger
        self._lock = threading.RLock()

    def today(self) -> date:
        return self.clock().date()

    def current(self) -> ProductivityStats:
        """Stats with derived windows recomputed for today."""
        return refresh(self.repository.value, self.today())

    def load(self) -> ProductivityStats:
        """Reload from storage and recompute the derived windows."""
        return refresh(self.repository.load(), self.today())

    # --- Tracking ---
    def track_copy(self, kind: str) -> ProductivityStats:
        """
        Record one copy to the clipboard.

        Args:
            kind: One of report, phrase, ai-hallazgos, ai-conclusiones,
                ai-diferenciales

        Raises:
            ValidationError: If the kind is unknown
        """
        if kind not in COPY_KINDS:
            raise ValidationError(
                f"Unknown copy kind '{kind}' (expected one of {', '.join(COPY_KINDS)})"
            )
        counter = COPY_KINDS[kind]

        def mutate(stats: ProductivityStats, today: date) -> None:
            day_key = today.isoformat()
            setattr(stats, counter, getattr(stats, counter) + 1)
            stats.todays_copies += 1
            stats.daily_stats[day_key] = stats.daily_stats.get(day_key, 0) + 1
            stats.last_copy_date = day_key

        return self._apply("track_copy", mutate, {"kind": kind})

    def track_recording(self) -> ProductivityStats:
        return self._apply("track_recording", self._increment("recordings_count"))

    def track_ai_report_generation(self) -> ProductivityStats:
        return self._apply(
            "track_ai_report_generation", self._increment("ai_reports_generated")
        )

    def track_ai_chat_query(self) -> ProductivityStats:
        return self._apply("track_ai_chat_query", self._increment("ai_chat_queries"))

    def track_report_share(self) -> ProductivityStats:
        return self._apply("track_report_share", self._increment("reports_shared"))

    def track_phrase_share(self) -> ProductivityStats:
        return self._apply("track_phrase_share", self._increment("phrases_shared"))

    def track_interaction_time(self, minutes: float) -> ProductivityStats:
        """
        Add minutes of active use to the lifetime total and today's ledger.

        Raises:
            ValidationError: If minutes is not a positive number
        """
        if (
            isinstance(minutes, bool)
            or not isinstance(minutes, (int, float))
            or minutes <= 0
        ):
            raise ValidationError(f"Interaction minutes must be positive, got {minutes!r}")

        def mutate(stats: ProductivityStats, today: date) -> None:
            day_key = today.isoformat()
            stats.total_interaction_time += minutes
            stats.daily_interaction_time[day_key] = (
                stats.daily_interaction_time.get(day_key, 0) + minutes
            )

        return self._apply("track_interaction_time", mutate, {"minutes": minutes})

    def set_satisfaction_rating(self, rating: int) -> ProductivityStats:
        """
        Store the user's 1-5 star rating of the app.

        Raises:
            ValidationError: If rating is not an integer from 1 to 5
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError(f"Satisfaction rating must be 1-5, got {rating!r}")

        def mutate(stats: ProductivityStats, today: date) -> None:
            stats.app_satisfaction_rating = rating
            stats.satisfaction_date = today.isoformat()

        return self._apply("set_satisfaction_rating", mutate, track_activity=False)

    def save_economic_profitability(self, data: Dict[str, Any]) -> ProductivityStats:
        """
        Store the latest economic profitability estimate.

        The month's ``monthlyBenefit`` is also recorded in the
        monthlyProfitability ledger under 'YYYY-MM'.

        Raises:
            ValidationError: If data is not a mapping
        """
        DataValidator.ensure_mapping(data, "economic profitability")
        benefit = DataValidator.normalize_number(data.get("monthlyBenefit"))

        def mutate(stats: ProductivityStats, today: date) -> None:
            stats.economic_profitability = dict(data)
            stats.monthly_profitability[today.strftime("%Y-%m")] = benefit

        return self._apply(
            "save_economic_profitability", mutate, track_activity=False
        )

    def calculate_productivity(self) -> float:
        return calculate_productivity(self.current())

    # --- Internals ---
    @staticmethod
    def _increment(counter: str) -> Callable[[ProductivityStats, date], None]:
        def mutate(stats: ProductivityStats, today: date) -> None:
            setattr(stats, counter, getattr(stats, counter) + 1)

        return mutate

    @staticmethod
    def _record_activity(stats: ProductivityStats, today: date) -> None:
        day_key = today.isoformat()
        if not stats.first_use_date:
            stats.first_use_date = day_key
        if stats.last_active_date != day_key:
            stats.total_days_used += 1
            stats.last_active_date = day_key

    def _apply(
        self,
        operation: str,
        mutate: Callable[[ProductivityStats, date], None],
        details: Optional[Dict[str, Any]] = None,
        track_activity: bool = True,
    ) -> ProductivityStats:
        with self._lock:
            today = self.today()
            stats = copy.deepcopy(refresh(self.repository.value, today))
            mutate(stats, today)
            if track_activity:
                self._record_activity(stats, today)
            stats = refresh(stats, today)

            if self.repository.save(stats):
                safe_logger(self.logger).log_debug(
                    f"Stats updated: {operation}", details or {}
                )
            return self.current()
