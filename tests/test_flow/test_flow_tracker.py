"""Tests for FlowTracker: 24h retention and windowed totals.

All test values use Decimal (project convention). Time is driven by a
manually advanced clock.
"""

from decimal import Decimal

import pytest

from converter.exceptions import InvalidInputError
from converter.flow.tracker import FlowTracker
from converter.models import Direction, FlowTotals
from fakes import FakeClock

DAY = 86400.0
HOUR = 3600.0
EPS = 0.001


@pytest.fixture
def tracker(clock: FakeClock) -> FlowTracker:
    return FlowTracker(retention_seconds=DAY, clock=clock)


class TestRecord:
    """Tests for recording flow."""

    def test_record_returns_entry_at_now(
        self, tracker: FlowTracker, clock: FakeClock
    ) -> None:
        entry = tracker.record(Direction.A_TO_B, Decimal("10"))
        assert entry.timestamp == clock.now
        assert entry.direction is Direction.A_TO_B
        assert entry.volume == Decimal("10")
        assert len(tracker) == 1

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_non_positive_rejected(self, tracker: FlowTracker, amount: Decimal) -> None:
        with pytest.raises(InvalidInputError):
            tracker.record(Direction.A_TO_B, amount)
        assert len(tracker) == 0

    def test_write_prunes_expired_records(
        self, tracker: FlowTracker, clock: FakeClock
    ) -> None:
        tracker.record(Direction.A_TO_B, Decimal("1"))
        clock.advance(HOUR)
        tracker.record(Direction.B_TO_A, Decimal("2"))
        clock.advance(DAY - HOUR + EPS)
        tracker.record(Direction.A_TO_B, Decimal("3"))
        # first record is now older than 24h, second is still inside
        assert len(tracker) == 2


class TestWindowedTotals:
    """Tests for windowed aggregate queries."""

    def test_empty_window_is_zero(self, tracker: FlowTracker) -> None:
        totals = tracker.windowed_totals(HOUR)
        assert totals == FlowTotals()
        assert totals.total == Decimal("0")

    def test_sums_per_direction(self, tracker: FlowTracker) -> None:
        tracker.record(Direction.A_TO_B, Decimal("10"))
        tracker.record(Direction.A_TO_B, Decimal("5"))
        tracker.record(Direction.B_TO_A, Decimal("2.5"))
        totals = tracker.windowed_totals(HOUR)
        assert totals.total_a_to_b == Decimal("15")
        assert totals.total_b_to_a == Decimal("2.5")
        assert totals.in_direction(Direction.B_TO_A) == Decimal("2.5")

    def test_records_outside_window_excluded(
        self, tracker: FlowTracker, clock: FakeClock
    ) -> None:
        tracker.record(Direction.A_TO_B, Decimal("10"))
        clock.advance(2 * HOUR)
        tracker.record(Direction.A_TO_B, Decimal("1"))
        assert tracker.windowed_totals(HOUR).total_a_to_b == Decimal("1")
        assert tracker.windowed_totals(3 * HOUR).total_a_to_b == Decimal("11")

    def test_included_just_before_24h(
        self, tracker: FlowTracker, clock: FakeClock
    ) -> None:
        tracker.record(Direction.A_TO_B, Decimal("7"))
        clock.advance(DAY - EPS)
        assert tracker.windowed_totals(DAY).total_a_to_b == Decimal("7")

    def test_excluded_just_after_24h(
        self, tracker: FlowTracker, clock: FakeClock
    ) -> None:
        tracker.record(Direction.A_TO_B, Decimal("7"))
        clock.advance(DAY + EPS)
        assert tracker.windowed_totals(DAY).total_a_to_b == Decimal("0")

    def test_window_clamped_to_retention_without_write(
        self, tracker: FlowTracker, clock: FakeClock
    ) -> None:
        tracker.record(Direction.B_TO_A, Decimal("7"))
        clock.advance(DAY + EPS)
        # no write since, so the record is still stored but must not count
        assert len(tracker) == 1
        assert tracker.windowed_totals(7 * DAY).total_b_to_a == Decimal("0")
