"""
Analytics Module
================

Summary metrics for operator dashboards.

This module computes analytics for observability ONLY.
Analytics do NOT influence density estimation.

Derived from:
    - Filtered event subset (critical/high counts, distinct users)
    - DensityGrid (peak cell, total mass, mean density)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from risk_heatmap.models.event import Event, RiskLevel
from risk_heatmap.models.grid import DensityCell, DensityGrid


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EventStats:
    """Counts over the filtered event subset."""

    total: int
    critical_count: int
    high_count: int
    users_count: int


@dataclass(frozen=True, slots=True)
class GridSummary:
    """
    Summary of a density surface.

    peak is None for an all-zero grid.
    """

    peak: Optional[DensityCell]
    max_density: float
    mean_density: float
    total_density: float


def compute_event_stats(events: Sequence[Event]) -> EventStats:
    """Count critical and high events and distinct users."""
    return EventStats(
        total=len(events),
        critical_count=sum(1 for e in events if e.risk_level is RiskLevel.CRITICAL),
        high_count=sum(1 for e in events if e.risk_level is RiskLevel.HIGH),
        users_count=len({e.user_name for e in events}),
    )


def summarize_grid(grid: DensityGrid) -> GridSummary:
    """Peak cell and aggregate density of a grid."""
    densities = np.asarray(grid.densities(), dtype=np.float64)
    if densities.size == 0 or not np.any(densities > 0):
        return GridSummary(peak=None, max_density=0.0, mean_density=0.0, total_density=0.0)

    peak = grid.cells[int(np.argmax(densities))]
    return GridSummary(
        peak=peak,
        max_density=float(densities.max()),
        mean_density=float(densities.mean()),
        total_density=float(densities.sum()),
    )
