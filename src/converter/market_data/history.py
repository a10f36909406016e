"""Bounded, append-only time series for price (or volume) samples."""

import time
from collections import deque
from collections.abc import Callable, Iterator
from typing import Generic, Protocol, TypeVar


class Timestamped(Protocol):
    timestamp: float


S = TypeVar("S", bound=Timestamped)


class HistoryBuffer(Generic[S]):
    """FIFO buffer holding the most recent ``capacity`` samples.

    Samples stay in insertion order. When a push would exceed capacity the
    oldest sample is evicted. Samples dated after ``clock()`` are rejected.

    Args:
        capacity: Maximum number of retained samples.
        clock: Time source returning Unix seconds. Defaults to time.time.
    """

    def __init__(
        self,
        capacity: int = 100,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._samples: deque[S] = deque(maxlen=capacity)
        self._clock = clock

    @property
    def capacity(self) -> int:
        return self._samples.maxlen  # type: ignore[return-value]

    def __len__(self) -> int:
        return len(self._samples)

    def push(self, sample: S) -> None:
        """Append a sample, evicting the oldest beyond capacity.

        Raises:
            ValueError: If the sample is dated in the future.
        """
        if sample.timestamp > self._clock():
            raise ValueError(f"future-dated sample: {sample.timestamp}")
        self._samples.append(sample)

    def snapshot(self) -> list[S]:
        """Return a copy of all samples, oldest first."""
        return list(self._samples)

    def filter_since(self, since: float) -> Iterator[S]:
        """Lazily yield samples with ``timestamp >= since`` in original order.

        Each call iterates over its own copy, so it can be called repeatedly
        and is unaffected by pushes made while iterating.
        """
        return (s for s in tuple(self._samples) if s.timestamp >= since)

    def latest(self) -> S | None:
        """Return the most recently pushed sample, or None if empty."""
        return self._samples[-1] if self._samples else None
