"""
Mock Event Generator
====================

Synthetic abnormal access events for demos and tests.

The generator simulates:
    - A fixed catalogue of abnormal types, each with a dimension and
      risk level
    - Clustering: most events land in one of four hot zones
      (x in {20, 70}, y in {30, 80}) with uniform jitter, the rest are
      uniform over [0, 100]²
    - Timestamps uniform over the trailing time window

Seeded NumPy Generator for reproducible sequences.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from risk_heatmap.models.event import AbnormalDimension, Event, RiskLevel
from risk_heatmap.stream.buffer import MS_PER_HOUR


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AbnormalType:
    """Catalogue entry for a kind of abnormal access."""

    code: str
    name: str
    dimension: AbnormalDimension
    risk_level: RiskLevel


ABNORMAL_TYPES = (
    AbnormalType("T1", "Off-hours access", AbnormalDimension.TIME, RiskLevel.HIGH),
    AbnormalType("T2", "Abnormal login frequency", AbnormalDimension.TIME, RiskLevel.MEDIUM),
    AbnormalType("B1", "Bulk archive download", AbnormalDimension.BEHAVIOR, RiskLevel.CRITICAL),
    AbnormalType("B2", "Operation path jump", AbnormalDimension.BEHAVIOR, RiskLevel.MEDIUM),
    AbnormalType("S1", "Core archive privilege violation", AbnormalDimension.SENSITIVITY, RiskLevel.CRITICAL),
    AbnormalType("S2", "Sensitive term search", AbnormalDimension.SENSITIVITY, RiskLevel.HIGH),
    AbnormalType("C1", "Cross-region coordinated operation", AbnormalDimension.COMBINED, RiskLevel.CRITICAL),
)

USER_NAMES = ("Zhang San", "Li Si", "Wang Wu", "Admin_01", "Auditor_X")
HOT_ZONE_X = (20.0, 70.0)
HOT_ZONE_Y = (30.0, 80.0)
# Largest jitter keeping every hot zone inside [0, 100]
MAX_CLUSTER_SPREAD = 40.0


def now_ms() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000.0


class MockEventGenerator:
    """
    Clustered random event generator.

    Attributes:
        time_window_hours: Span of generated timestamps before "now"
        cluster_probability: Probability an event lands in a hot zone
        cluster_spread: Width of the jitter around a hot zone center

    Example:
        generator = MockEventGenerator(seed=7)
        buffer.replace(generator.generate_batch(200))
    """

    def __init__(
        self,
        time_window_hours: float = 24.0,
        cluster_probability: float = 0.6,
        cluster_spread: float = 15.0,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize mock event generator.

        Args:
            time_window_hours: Timestamps fall in [now - window, now]
            cluster_probability: Probability in [0, 1] of clustering
            cluster_spread: Jitter width around hot zone centers, at most 40
            seed: RNG seed (None = nondeterministic)
        """
        if time_window_hours <= 0:
            raise ValueError("time_window_hours must be positive")
        if not 0 <= cluster_probability <= 1:
            raise ValueError("cluster_probability must be in [0, 1]")
        if not 0 <= cluster_spread <= MAX_CLUSTER_SPREAD:
            raise ValueError(f"cluster_spread must be in [0, {MAX_CLUSTER_SPREAD}]")

        self.time_window_hours = time_window_hours
        self.cluster_probability = cluster_probability
        self.cluster_spread = cluster_spread
        self._rng = np.random.default_rng(seed)
        self._counter: int = 0

        logger.info(
            f"MockEventGenerator initialized: window={time_window_hours}h, "
            f"cluster_p={cluster_probability}, seed={seed}"
        )

    def generate(self, now: Optional[float] = None) -> Event:
        """
        Generate one event.

        Args:
            now: Reference time in epoch milliseconds (wall clock if None)

        Returns:
            New Event with a fresh "pt-<n>" id
        """
        if now is None:
            now = now_ms()
        rng = self._rng

        kind = ABNORMAL_TYPES[int(rng.integers(len(ABNORMAL_TYPES)))]

        if rng.random() < self.cluster_probability:
            cx = HOT_ZONE_X[int(rng.integers(2))]
            cy = HOT_ZONE_Y[int(rng.integers(2))]
            x = cx + (rng.random() - 0.5) * self.cluster_spread
            y = cy + (rng.random() - 0.5) * self.cluster_spread
        else:
            x = rng.random() * 100.0
            y = rng.random() * 100.0

        t = now - rng.random() * self.time_window_hours * MS_PER_HOUR

        event_id = f"pt-{self._counter}"
        self._counter += 1

        return Event(
            id=event_id,
            x=float(x),
            y=float(y),
            t=float(t),
            dimension=kind.dimension,
            risk_level=kind.risk_level,
            abnormal_type=kind.name,
            user_name=USER_NAMES[int(rng.integers(len(USER_NAMES)))],
            terminal=f"Terminal-{100 + int(rng.integers(10))}",
            details=(
                f"Detected abnormal {kind.name} at specified coordinates. "
                f"Potential security breach."
            ),
        )

    def generate_batch(self, count: int, now: Optional[float] = None) -> List[Event]:
        """Generate count events against the same reference time."""
        if now is None:
            now = now_ms()
        return [self.generate(now) for _ in range(count)]

    @property
    def generated_count(self) -> int:
        """Number of events generated so far."""
        return self._counter
