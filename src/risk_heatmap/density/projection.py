"""
Projections
===========

Axis-mapping strategies for the density grid.

A projection supplies the per-axis sample ranges and the weighted
distance between a grid sample and an event. The estimator runs the
same grid-sampling routine for every projection.

Projections:
    SpatialBehavioral (2-D):
        axis 1 = x in [0, 100], axis 2 = y in [0, 100]
        d = sqrt(ws * (gx - px)² + wb * (gy - py)²)

    SpatialTemporal (3-D):
        axis 1 = x in [0, 100], axis 2 = hour of day in [0, 24]
        d = sqrt(ws * (gx - px)² + wt * ((gh - ph) * 100/24)²)

        The time axis is rescaled by 100/24 so that its range matches the
        spatial axis before weighting, keeping one bandwidth meaningful
        across both axes.

Midnight Boundary:
    By default hour of day is linear on [0, 24): 23:55 and 00:05 are
    ~23.8 hours apart. With wrap_time_of_day=True the hour difference is
    measured on a 24h circle (at most 12 hours).
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone, tzinfo
from typing import Optional, Sequence, Tuple

import numpy as np

from risk_heatmap.config import KDEConfig
from risk_heatmap.models.event import Event
from risk_heatmap.models.grid import ProjectionMode


HOURS_PER_DAY = 24.0
TIME_AXIS_SCALE = 100.0 / HOURS_PER_DAY


def hour_of_day(t_ms: float, tz: Optional[tzinfo] = None) -> float:
    """
    Reduce an epoch-millisecond timestamp to a continuous hour of day.

    Args:
        t_ms: Epoch timestamp in milliseconds
        tz: Timezone of the wall clock (UTC if None)

    Returns:
        Hour of day in [0, 24), including fractional minutes and seconds
    """
    moment = datetime.fromtimestamp(t_ms / 1000.0, tz or timezone.utc)
    return (
        moment.hour
        + moment.minute / 60.0
        + moment.second / 3600.0
        + moment.microsecond / 3_600_000_000.0
    )


def _sample_axis(lower: float, upper: float, grid_size: int) -> np.ndarray:
    # i / n * span keeps both endpoints exact
    steps = np.arange(grid_size + 1, dtype=np.float64) / grid_size
    return lower + steps * (upper - lower)


class Projection(ABC):
    """
    Base class for grid projections.

    Subclasses define the axis-2 range, how events map onto the two axes,
    and the weighted distance.
    """

    mode: ProjectionMode
    axis1_range: Tuple[float, float] = (0.0, 100.0)
    axis2_range: Tuple[float, float] = (0.0, 100.0)

    def axis_samples(self, grid_size: int) -> Tuple[np.ndarray, np.ndarray]:
        """Sample coordinates for both axes (grid_size + 1 each)."""
        return (
            _sample_axis(*self.axis1_range, grid_size),
            _sample_axis(*self.axis2_range, grid_size),
        )

    @abstractmethod
    def event_coordinates(
        self,
        events: Sequence[Event],
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Map events onto (axis1, axis2) in axis units."""
        ...

    @abstractmethod
    def distance(
        self,
        g1: np.ndarray,
        g2: np.ndarray,
        p1: np.ndarray,
        p2: np.ndarray,
        config: KDEConfig,
    ) -> np.ndarray:
        """
        Weighted distance between grid samples and event coordinates.

        Inputs broadcast against each other.
        """
        ...

    def weighted_distance(
        self,
        grid_point: Tuple[float, float],
        event: Event,
        config: KDEConfig,
    ) -> float:
        """Scalar distance between one grid sample and one event."""
        p1, p2 = self.event_coordinates([event])
        d = self.distance(
            np.float64(grid_point[0]),
            np.float64(grid_point[1]),
            p1[0],
            p2[0],
            config,
        )
        return float(d)


class SpatialBehavioral(Projection):
    """2-D projection: spatial feature x behavioral feature."""

    mode = ProjectionMode.MODE_2D

    def event_coordinates(self, events):
        x = np.fromiter((e.x for e in events), dtype=np.float64, count=len(events))
        y = np.fromiter((e.y for e in events), dtype=np.float64, count=len(events))
        return x, y

    def distance(self, g1, g2, p1, p2, config):
        dx = g1 - p1
        dy = g2 - p2
        return np.sqrt(config.ws * dx * dx + config.wb * dy * dy)


class SpatialTemporal(Projection):
    """
    3-D projection: spatial feature x hour of day.

    Attributes:
        tz: Wall-clock timezone for hour-of-day reduction
        wrap: Measure hour differences on a 24h circle
    """

    mode = ProjectionMode.MODE_3D
    axis2_range = (0.0, HOURS_PER_DAY)

    def __init__(self, tz: Optional[tzinfo] = None, wrap: bool = False) -> None:
        self.tz = tz or timezone.utc
        self.wrap = wrap

    def event_coordinates(self, events):
        x = np.fromiter((e.x for e in events), dtype=np.float64, count=len(events))
        hours = np.fromiter(
            (hour_of_day(e.t, self.tz) for e in events),
            dtype=np.float64,
            count=len(events),
        )
        return x, hours

    def distance(self, g1, g2, p1, p2, config):
        ds = g1 - p1
        dh = np.abs(g2 - p2)
        if self.wrap:
            dh = np.minimum(dh, HOURS_PER_DAY - dh)
        dt = dh * TIME_AXIS_SCALE
        return np.sqrt(config.ws * ds * ds + config.wt * dt * dt)


def projection_for(
    mode: ProjectionMode,
    tz: Optional[tzinfo] = None,
    wrap_time_of_day: bool = False,
) -> Projection:
    """Build the projection strategy for a mode."""
    mode = ProjectionMode(mode)
    if mode is ProjectionMode.MODE_2D:
        return SpatialBehavioral()
    return SpatialTemporal(tz=tz, wrap=wrap_time_of_day)
