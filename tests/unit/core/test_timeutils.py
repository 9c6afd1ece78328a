"""
Tests for clock, timestamp and id helpers.
"""
from datetime import datetime, timedelta, timezone

from radia.core.timeutils import MonotonicIdGenerator, as_utc, iso_micros, iso_millis


class FakeClock:
    def __init__(self, *instants):
        self.instants = list(instants)

    def __call__(self):
        return self.instants.pop(0) if len(self.instants) > 1 else self.instants[0]


INSTANT = datetime(2026, 10, 19, 8, 30, 0, 123456, tzinfo=timezone.utc)


class TestFormatting:
    """Tests for timestamp formatting."""

    def test_iso_millis(self):
        """Record timestamps carry milliseconds and a Z."""
        assert iso_millis(INSTANT) == "2026-10-19T08:30:00.123Z"

    def test_iso_micros(self):
        """Snapshot timestamps carry microseconds."""
        assert iso_micros(INSTANT) == "2026-10-19T08:30:00.123456Z"

    def test_other_offsets_converted(self):
        """Aware datetimes in other zones are shifted to UTC."""
        madrid = timezone(timedelta(hours=2))
        assert iso_millis(datetime(2026, 10, 19, 10, 30, tzinfo=madrid)) == (
            "2026-10-19T08:30:00.000Z"
        )

    def test_as_utc_naive(self):
        """Naive values are taken as UTC."""
        assert as_utc(datetime(2026, 10, 19)).tzinfo is timezone.utc


class TestMonotonicIdGenerator:
    """Tests for record id generation."""

    def test_ids_are_epoch_millis(self):
        """Ids are decimal epoch milliseconds."""
        new_id = MonotonicIdGenerator(FakeClock(INSTANT))
        assert new_id() == str(int(INSTANT.timestamp() * 1000))

    def test_same_instant_increments(self):
        """A stalled clock still yields increasing ids."""
        new_id = MonotonicIdGenerator(FakeClock(INSTANT))
        ids = [int(new_id()) for _ in range(3)]
        assert ids == [ids[0], ids[0] + 1, ids[0] + 2]

    def test_clock_going_backwards(self):
        """Ids never decrease when the clock moves back."""
        new_id = MonotonicIdGenerator(FakeClock(INSTANT, INSTANT - timedelta(seconds=5)))
        first = int(new_id())
        assert int(new_id()) == first + 1
