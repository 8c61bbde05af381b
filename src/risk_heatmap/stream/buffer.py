"""
Live Point Buffer
=================

Bounded, time-windowed working set of events.

This module provides the LivePointBuffer class, which holds the events
the density estimator is run against.

Design Rules:
    - Two independent eviction rules: age first, then capacity
    - Capacity overflow keeps the most recently ingested events,
      in ingestion order (drops oldest, never reports an error)
    - No deduplication by id
    - Snapshots are immutable copies, safe to hand to filters and the
      estimator while the buffer keeps changing
    - Does NOT process or modify events
"""

import logging
from collections import deque
from typing import Deque, Iterable, Tuple

from risk_heatmap.models.event import Event


logger = logging.getLogger(__name__)


MS_PER_HOUR = 3_600_000
DEFAULT_MAX_EVENTS = 1000


class LivePointBuffer:
    """
    Bounded, time-windowed event buffer.

    State is just "N <= maxsize live events". Transitions are ingest
    (N -> N+1, then capacity-trim), evict (N -> N-k) and replace (manual
    reset). Evicted and trimmed events are permanently discarded.

    Attributes:
        maxsize: Maximum number of retained events
        evicted_count: Events removed by the age rule
        trimmed_count: Events removed by the capacity rule

    Example:
        buffer = LivePointBuffer(maxsize=1000)

        # Timer tick
        buffer.ingest(event)
        buffer.evict(now=now_ms, window_hours=24)

        # Evaluation
        grid = estimator.evaluate(buffer.snapshot(), config, mode)
    """

    def __init__(self, maxsize: int = DEFAULT_MAX_EVENTS) -> None:
        """
        Initialize live point buffer.

        Args:
            maxsize: Maximum events to retain. Must be >= 1.
        """
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")

        self._maxsize = maxsize
        self._events: Deque[Event] = deque()
        self._total_ingested: int = 0
        self._evicted_count: int = 0
        self._trimmed_count: int = 0

    @property
    def maxsize(self) -> int:
        """Maximum buffer size."""
        return self._maxsize

    @property
    def size(self) -> int:
        """Current number of events in buffer."""
        return len(self._events)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def evicted_count(self) -> int:
        """Number of events removed because they aged out."""
        return self._evicted_count

    @property
    def trimmed_count(self) -> int:
        """Number of events dropped due to capacity."""
        return self._trimmed_count

    @property
    def total_ingested(self) -> int:
        """Total events ever ingested."""
        return self._total_ingested

    def ingest(self, event: Event) -> None:
        """
        Append one event, then enforce capacity.

        Args:
            event: Event to add
        """
        self._events.append(event)
        self._total_ingested += 1
        self._trim()

    def evict(self, now: float, window_hours: float) -> int:
        """
        Remove events that fell out of the time window, then enforce capacity.

        An event is removed when now - event.t >= window_hours * 3,600,000.

        Args:
            now: Current time (epoch milliseconds)
            window_hours: Retention horizon in hours

        Returns:
            Number of events removed by the age rule.
        """
        horizon = window_hours * MS_PER_HOUR
        before = len(self._events)
        self._events = deque(e for e in self._events if now - e.t < horizon)
        removed = before - len(self._events)
        self._evicted_count += removed
        if removed:
            logger.debug(f"Evicted {removed} stale events (window={window_hours}h)")
        self._trim()
        return removed

    def snapshot(self) -> Tuple[Event, ...]:
        """
        Current retained events, in ingestion order.

        Returns:
            Immutable copy of the buffer contents.
        """
        return tuple(self._events)

    def replace(self, events: Iterable[Event]) -> None:
        """
        Replace the entire buffer contents (manual reset).

        Args:
            events: New contents, in ingestion order
        """
        cleared = len(self._events)
        self._events = deque(events)
        self._total_ingested += len(self._events)
        logger.info(f"Buffer replaced: cleared={cleared}, loaded={len(self._events)}")
        self._trim()

    def _trim(self) -> None:
        overflow = len(self._events) - self._maxsize
        if overflow <= 0:
            return
        for _ in range(overflow):
            self._events.popleft()
        self._trimmed_count += overflow
        logger.warning(
            f"Buffer over capacity, dropped {overflow} oldest events. "
            f"Total dropped: {self._trimmed_count}"
        )

    def metrics(self) -> dict:
        """
        Get buffer metrics for observability.

        Returns:
            Dict with size, maxsize, total_ingested, evicted_count, trimmed_count
        """
        return {
            "size": self.size,
            "maxsize": self._maxsize,
            "total_ingested": self._total_ingested,
            "evicted_count": self._evicted_count,
            "trimmed_count": self._trimmed_count,
        }
