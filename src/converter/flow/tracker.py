"""Recent conversion flow tracking.

Every priced conversion contributes a FlowRecord. Records older than the
retention period (24h) are pruned on every write, and windowed queries
never look further back than the retention period either.

CRITICAL: Volumes use Decimal. Never use float.
"""

import time
from collections import deque
from collections.abc import Callable
from decimal import Decimal

from converter.exceptions import InvalidInputError
from converter.logging import get_logger
from converter.models import Direction, FlowRecord, FlowTotals

logger = get_logger(__name__)


class FlowTracker:
    """Time-ordered store of recent conversion volumes per direction.

    Methods are synchronous and never await, so on a single event loop each
    call is atomic with respect to other coroutines.

    Args:
        retention_seconds: Hard retention window for records (default 24h).
        clock: Time source returning Unix seconds. Defaults to time.time.
    """

    def __init__(
        self,
        retention_seconds: float = 86400.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._retention = retention_seconds
        self._clock = clock
        self._records: deque[FlowRecord] = deque()

    def __len__(self) -> int:
        return len(self._records)

    def record(self, direction: Direction, amount: Decimal) -> FlowRecord:
        """Append a record at the current instant, then prune expired records.

        Raises:
            InvalidInputError: If ``amount`` is not positive.
        """
        if amount <= 0:
            raise InvalidInputError(f"flow volume must be positive, got {amount}")

        now = self._clock()
        entry = FlowRecord(timestamp=now, direction=direction, volume=amount)
        self._records.append(entry)
        pruned = self._prune(now)

        if pruned:
            logger.debug("flow_records_pruned", count=pruned, remaining=len(self._records))
        return entry

    def windowed_totals(self, window_seconds: float) -> FlowTotals:
        """Sum volume per direction over ``[now - window, now]``.

        The window is clamped to the retention period.
        """
        now = self._clock()
        start = now - min(window_seconds, self._retention)

        total_a_to_b = Decimal("0")
        total_b_to_a = Decimal("0")
        for entry in self._records:
            if entry.timestamp < start or entry.timestamp > now:
                continue
            if entry.direction is Direction.A_TO_B:
                total_a_to_b += entry.volume
            else:
                total_b_to_a += entry.volume

        return FlowTotals(total_a_to_b=total_a_to_b, total_b_to_a=total_b_to_a)

    def _prune(self, now: float) -> int:
        """Drop records older than the retention cutoff. Returns count removed."""
        cutoff = now - self._retention
        removed = 0
        # records are appended with a non-decreasing clock, oldest at the left
        while self._records and self._records[0].timestamp < cutoff:
            self._records.popleft()
            removed += 1
        return removed
