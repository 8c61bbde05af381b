"""
Test Configuration
==================

Pytest fixtures and test configuration for the risk heatmap.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import pytest


@dataclass(frozen=True)
class ScoredPoint:
    """Estimator input with a free risk score (for linearity checks)."""

    x: float
    y: float
    t: float
    risk_score: float


def epoch_ms(hour: int, minute: int = 0, second: int = 0) -> float:
    """Epoch milliseconds for a UTC wall-clock time on a fixed day."""
    moment = datetime(2024, 3, 14, hour, minute, second, tzinfo=timezone.utc)
    return moment.timestamp() * 1000.0


@pytest.fixture
def kde_config():
    """Provide the reference configuration."""
    from risk_heatmap.config import KDEConfig

    return KDEConfig(
        bandwidth=8.0,
        ws=0.4,
        wb=0.3,
        wt=0.3,
        grid_size=2,
        time_window_hours=24,
    )


@pytest.fixture
def make_event():
    """Factory for events with sensible defaults."""
    from risk_heatmap.models.event import AbnormalDimension, Event, RiskLevel

    counter = {"n": 0}

    def _make(
        x: float = 50.0,
        y: float = 50.0,
        t: float = 0.0,
        dimension=AbnormalDimension.BEHAVIOR,
        risk_level=RiskLevel.CRITICAL,
        user_name: str = "Admin_01",
    ) -> Event:
        counter["n"] += 1
        return Event(
            id=f"ev-{counter['n']}",
            x=x,
            y=y,
            t=t,
            dimension=dimension,
            risk_level=risk_level,
            abnormal_type="Bulk archive download",
            user_name=user_name,
            terminal="Terminal-101",
        )

    return _make


@pytest.fixture
def scattered_events(make_event):
    """A handful of events across the plane and the day."""
    from risk_heatmap.models.event import AbnormalDimension, RiskLevel

    return [
        make_event(20, 30, epoch_ms(2, 15), AbnormalDimension.TIME, RiskLevel.HIGH, "Li Si"),
        make_event(70, 80, epoch_ms(9, 40), AbnormalDimension.BEHAVIOR, RiskLevel.CRITICAL, "Wang Wu"),
        make_event(22, 33, epoch_ms(14, 5), AbnormalDimension.SENSITIVITY, RiskLevel.MEDIUM, "Li Si"),
        make_event(90, 10, epoch_ms(23, 55), AbnormalDimension.COMBINED, RiskLevel.LOW, "Auditor_X"),
    ]
