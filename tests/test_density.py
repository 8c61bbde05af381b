"""
Density Estimation Tests
========================

Kernel, projections and the grid estimator.
"""

import math

import numpy as np
import pytest

from risk_heatmap.config import KDEConfig
from risk_heatmap.density import (
    DensityGridEstimator,
    SpatialBehavioral,
    SpatialTemporal,
    evaluate,
    gaussian_kernel,
    hour_of_day,
    kernel_peak,
    projection_for,
)
from risk_heatmap.models.grid import ProjectionMode

from conftest import ScoredPoint, epoch_ms


class TestKernel:
    """Tests for the Gaussian kernel."""

    @pytest.mark.parametrize("bandwidth", [0.5, 1.0, 8.0, 25.0])
    def test_peak_value(self, bandwidth):
        """Verify the kernel peaks at 1 / (h * sqrt(2 pi))."""
        expected = 1.0 / (bandwidth * math.sqrt(2 * math.pi))
        assert gaussian_kernel(0.0, bandwidth) == pytest.approx(expected, rel=1e-12)
        assert kernel_peak(bandwidth) == pytest.approx(expected, rel=1e-12)

    def test_strictly_decreasing(self):
        """Verify weight falls as distance grows."""
        distances = np.linspace(0.0, 40.0, 200)
        weights = gaussian_kernel(distances, 8.0)
        assert np.all(np.diff(weights) < 0)

    def test_positive_far_away(self):
        """Verify distant points still contribute."""
        assert gaussian_kernel(60.0, 8.0) > 0.0

    def test_symmetric_in_distance(self):
        """Verify the kernel depends on distance magnitude only."""
        assert gaussian_kernel(-3.0, 2.0) == gaussian_kernel(3.0, 2.0)

    def test_scalar_returns_float(self):
        """Verify scalar input yields a plain float."""
        assert isinstance(gaussian_kernel(1.0, 1.0), float)


class TestProjections:
    """Tests for weighted distance and axis sampling."""

    def test_spatial_behavioral_distance(self, kde_config, make_event):
        """Verify the weighted 2-D distance."""
        event = make_event(x=10.0, y=20.0)
        d = SpatialBehavioral().weighted_distance((13.0, 24.0), event, kde_config)
        assert d == pytest.approx(math.sqrt(0.4 * 9 + 0.3 * 16))

    def test_zero_weights_give_zero_distance(self, make_event):
        """Verify zero weights collapse every distance to zero."""
        config = KDEConfig(ws=0.0, wb=0.0, wt=0.0)
        event = make_event(x=0.0, y=0.0)
        assert SpatialBehavioral().weighted_distance((100.0, 100.0), event, config) == 0.0

    def test_spatial_temporal_rescales_time(self, kde_config, make_event):
        """Verify hours are rescaled onto the 0-100 axis."""
        event = make_event(x=40.0, t=epoch_ms(6))
        d = SpatialTemporal().weighted_distance((40.0, 12.0), event, kde_config)
        assert d == pytest.approx(math.sqrt(0.3) * 6 * (100 / 24))

    def test_hour_of_day_is_continuous(self):
        """Verify minutes and seconds carry into the hour."""
        assert hour_of_day(epoch_ms(13, 30)) == pytest.approx(13.5)
        assert hour_of_day(epoch_ms(0, 0, 36)) == pytest.approx(0.01)

    def test_linear_time_axis_has_no_wraparound(self, kde_config, make_event):
        """Verify 23:54 and 00:06 are far apart by default."""
        event = make_event(x=50.0, t=epoch_ms(23, 54))
        d = SpatialTemporal().weighted_distance((50.0, 0.1), event, kde_config)
        assert d == pytest.approx(math.sqrt(0.3) * 23.8 * (100 / 24))

    def test_wrapped_time_axis(self, kde_config, make_event):
        """Verify the circular hour axis wraps at midnight."""
        event = make_event(x=50.0, t=epoch_ms(23, 54))
        d = SpatialTemporal(wrap=True).weighted_distance((50.0, 0.1), event, kde_config)
        assert d == pytest.approx(math.sqrt(0.3) * 0.2 * (100 / 24))

    def test_axis_samples_include_bounds(self):
        """Verify both axis bounds are sampled."""
        g1, g2 = projection_for(ProjectionMode.MODE_3D).axis_samples(4)
        assert list(g1) == [0.0, 25.0, 50.0, 75.0, 100.0]
        assert list(g2) == [0.0, 6.0, 12.0, 18.0, 24.0]


class TestDensityGridEstimator:
    """Tests for grid evaluation."""

    @pytest.mark.parametrize("mode", list(ProjectionMode))
    @pytest.mark.parametrize("grid_size", [1, 2, 7])
    def test_empty_points_give_zero_grid(self, mode, grid_size):
        """Verify no points yield a full grid of zeros."""
        config = KDEConfig(grid_size=grid_size)
        grid = evaluate([], config, mode)
        assert len(grid) == (grid_size + 1) ** 2
        assert all(cell.density == 0.0 for cell in grid)

    def test_reference_scenario(self, kde_config, make_event):
        """Verify a single CRITICAL point peaks at its own cell."""
        point = make_event(x=50.0, y=50.0)
        assert point.risk_score == 5

        grid = evaluate([point], kde_config, ProjectionMode.MODE_2D)

        assert len(grid) == 9
        center = grid.cell_at(1, 1)
        assert (center.axis1, center.axis2) == (50.0, 50.0)
        assert grid.max_cell() == center
        assert center.density == pytest.approx(5 / (8 * math.sqrt(2 * math.pi)))
        assert center.density == pytest.approx(0.2494, abs=1e-4)

        origin = grid.cell_at(0, 0)
        assert (origin.axis1, origin.axis2) == (0.0, 0.0)
        assert origin.density < center.density

    def test_axis1_major_order(self, kde_config):
        """Verify cells are ordered axis-1-major."""
        grid = evaluate([], kde_config, ProjectionMode.MODE_2D)
        coords = [(c.axis1, c.axis2) for c in grid]
        assert coords[:4] == [(0.0, 0.0), (0.0, 50.0), (0.0, 100.0), (50.0, 0.0)]

    def test_3d_axis2_spans_day(self, kde_config):
        """Verify the 3-D second axis spans 0 to 24 hours."""
        grid = evaluate([], kde_config, ProjectionMode.MODE_3D)
        assert grid.mode is ProjectionMode.MODE_3D
        assert sorted({c.axis2 for c in grid}) == [0.0, 12.0, 24.0]

    def test_density_non_negative(self, scattered_events):
        """Verify non-negative scores give non-negative density."""
        config = KDEConfig(grid_size=10)
        for mode in ProjectionMode:
            grid = evaluate(scattered_events, config, mode)
            assert all(cell.density >= 0.0 for cell in grid)

    def test_doubling_scores_doubles_density(self):
        """Verify density is linear in risk score."""
        config = KDEConfig(grid_size=6)
        base = [
            ScoredPoint(12.0, 80.0, epoch_ms(3, 10), 3),
            ScoredPoint(55.5, 41.0, epoch_ms(11, 45), 4),
            ScoredPoint(90.0, 5.0, epoch_ms(20, 0), 5),
        ]
        doubled = [ScoredPoint(p.x, p.y, p.t, p.risk_score * 2) for p in base]

        for mode in ProjectionMode:
            a = evaluate(base, config, mode).to_matrix()
            b = evaluate(doubled, config, mode).to_matrix()
            assert np.array_equal(b, 2 * a)

    def test_negative_scores_reduce_density(self):
        """Verify negative scores are summed as given."""
        config = KDEConfig(grid_size=2)
        positive = [ScoredPoint(50.0, 50.0, 0.0, 5)]
        mixed = positive + [ScoredPoint(50.0, 50.0, 0.0, -1)]
        a = evaluate(positive, config, ProjectionMode.MODE_2D)
        b = evaluate(mixed, config, ProjectionMode.MODE_2D)
        assert b.cell_at(1, 1).density < a.cell_at(1, 1).density

    def test_deterministic(self, scattered_events):
        """Verify identical inputs give identical grids."""
        config = KDEConfig(grid_size=12)
        estimator = DensityGridEstimator()
        for mode in ProjectionMode:
            first = estimator.evaluate(scattered_events, config, mode)
            second = estimator.evaluate(list(scattered_events), config, mode)
            assert first == second

    def test_zero_weights_give_uniform_grid(self, scattered_events):
        """Verify zero weights flatten the surface."""
        config = KDEConfig(ws=0.0, wb=0.0, wt=0.0, grid_size=3)
        densities = evaluate(scattered_events, config, ProjectionMode.MODE_2D).densities()
        assert len(set(densities)) == 1

    def test_3d_density_follows_hour_of_day(self, make_event):
        """Verify the 3-D peak sits at the event's hour."""
        config = KDEConfig(grid_size=24)
        grid = evaluate([make_event(x=50.0, t=epoch_ms(6))], config, ProjectionMode.MODE_3D)
        peak = grid.max_cell()
        assert (peak.axis1, peak.axis2) == (50.0, 6.0)

    def test_matrix_shape(self, scattered_events):
        """Verify the matrix is (grid_size + 1) square."""
        grid = evaluate(scattered_events, KDEConfig(grid_size=5), ProjectionMode.MODE_2D)
        assert grid.to_matrix().shape == (6, 6)

    def test_metrics_count_evaluations(self, kde_config):
        """Verify evaluations are counted."""
        estimator = DensityGridEstimator()
        estimator.evaluate([], kde_config)
        estimator.evaluate([], kde_config)
        assert estimator.get_metrics()["evaluation_count"] == 2
