"""
Density Grid Estimator
======================

Grid-sampled, severity-weighted kernel density estimation.

For each of the (grid_size + 1)² grid samples g:

    density(g) = Σ_p  p.risk_score * K(distance(g, p), bandwidth)

where K is the Gaussian kernel and distance is the projection's
weighted distance.

Design Rules:
    - Stateless: the configuration is passed per call, never retained
    - Deterministic: identical inputs give bit-identical grids
    - Full recompute on every call, O(grid_size² * |points|)
    - Empty input yields an all-zero grid (not an error)
    - No clamping: scores <= 0 reduce density
    - Assumes a validated KDEConfig (see config.validate_kde_config)

Evaluation is vectorized with NumPy one axis-1 row at a time, which
bounds memory at (grid_size + 1) * |points| floats.
"""

import logging
import time
from datetime import tzinfo
from typing import Optional, Sequence

import numpy as np

from risk_heatmap.config import KDEConfig
from risk_heatmap.density.kernel import gaussian_kernel
from risk_heatmap.density.projection import Projection, projection_for
from risk_heatmap.models.event import Event
from risk_heatmap.models.grid import DensityCell, DensityGrid, ProjectionMode


logger = logging.getLogger(__name__)


class DensityGridEstimator:
    """
    Kernel density estimator over a regular grid.

    Holds only projection settings (wall-clock timezone, midnight
    wrapping). Everything that varies per evaluation is an argument.

    Example:
        estimator = DensityGridEstimator()
        grid = estimator.evaluate(points, KDEConfig(), ProjectionMode.MODE_2D)
        peak = grid.max_cell()
    """

    def __init__(
        self,
        tz: Optional[tzinfo] = None,
        wrap_time_of_day: bool = False,
        slow_evaluation_ms: float = 250.0,
    ) -> None:
        """
        Initialize estimator.

        Args:
            tz: Timezone for hour-of-day reduction in 3-D mode (UTC if None)
            wrap_time_of_day: Treat hour of day as circular in 3-D mode
            slow_evaluation_ms: Log a warning above this evaluation time
        """
        self.tz = tz
        self.wrap_time_of_day = wrap_time_of_day
        self.slow_evaluation_ms = slow_evaluation_ms
        self._last_evaluation_ms: float = 0.0
        self._evaluation_count: int = 0

        logger.info(
            f"DensityGridEstimator initialized: tz={tz or 'UTC'}, "
            f"wrap_time_of_day={wrap_time_of_day}"
        )

    def projection(self, mode: ProjectionMode) -> Projection:
        """Projection strategy for a mode, using this estimator's settings."""
        return projection_for(mode, tz=self.tz, wrap_time_of_day=self.wrap_time_of_day)

    def evaluate(
        self,
        points: Sequence[Event],
        config: KDEConfig,
        mode: ProjectionMode = ProjectionMode.MODE_2D,
    ) -> DensityGrid:
        """
        Evaluate the density surface.

        Args:
            points: Events to estimate from (treated as read-only)
            config: Validated estimation parameters
            mode: Projection to sample in

        Returns:
            DensityGrid with (grid_size + 1)² cells, axis-1-major
        """
        start_time = time.perf_counter()

        projection = self.projection(mode)
        grid_size = config.grid_size
        g1, g2 = projection.axis_samples(grid_size)
        p1, p2 = projection.event_coordinates(points)
        scores = np.fromiter(
            (p.risk_score for p in points),
            dtype=np.float64,
            count=len(points),
        )

        cells = []
        for a1 in g1:
            if len(points) == 0:
                row = np.zeros(g2.shape, dtype=np.float64)
            else:
                # (axis2 samples, points)
                dist = projection.distance(
                    a1,
                    g2[:, np.newaxis],
                    p1[np.newaxis, :],
                    p2[np.newaxis, :],
                    config,
                )
                weights = gaussian_kernel(dist, config.bandwidth)
                row = np.sum(weights * scores[np.newaxis, :], axis=1)
            a1_value = float(a1)
            cells.extend(
                DensityCell(a1_value, float(a2), float(d))
                for a2, d in zip(g2, row)
            )

        grid = DensityGrid(
            mode=projection.mode,
            grid_size=grid_size,
            cells=tuple(cells),
        )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._last_evaluation_ms = elapsed_ms
        self._evaluation_count += 1
        if elapsed_ms > self.slow_evaluation_ms:
            logger.warning(
                f"Density evaluation took {elapsed_ms:.1f}ms "
                f"(grid={grid_size}, points={len(points)}, mode={projection.mode.value})"
            )
        else:
            logger.debug(
                f"Density evaluation: {elapsed_ms:.1f}ms, "
                f"grid={grid_size}, points={len(points)}"
            )

        return grid

    def get_metrics(self) -> dict:
        """Get estimator metrics for observability."""
        return {
            "evaluation_count": self._evaluation_count,
            "last_evaluation_ms": round(self._last_evaluation_ms, 2),
            "wrap_time_of_day": self.wrap_time_of_day,
        }


def evaluate(
    points: Sequence[Event],
    config: KDEConfig,
    mode: ProjectionMode = ProjectionMode.MODE_2D,
) -> DensityGrid:
    """Evaluate with a default (UTC, linear time axis) estimator."""
    return DensityGridEstimator().evaluate(points, config, mode)
