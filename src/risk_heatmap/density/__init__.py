"""
Density Module
==============

Kernel density estimation for the risk heatmap.

Components:
    - gaussian_kernel: Distance + bandwidth -> weight
    - SpatialBehavioral, SpatialTemporal: Axis-mapping strategies with
      weighted distance (2-D and 3-D projections)
    - DensityGridEstimator: Grid-sampled, severity-weighted KDE

Example:
    from risk_heatmap.density import DensityGridEstimator
    from risk_heatmap.models import ProjectionMode

    estimator = DensityGridEstimator()
    grid = estimator.evaluate(events, config, ProjectionMode.MODE_3D)
"""

from risk_heatmap.density.kernel import gaussian_kernel, kernel_peak
from risk_heatmap.density.projection import (
    Projection,
    SpatialBehavioral,
    SpatialTemporal,
    hour_of_day,
    projection_for,
)
from risk_heatmap.density.estimator import DensityGridEstimator, evaluate


__all__ = [
    "gaussian_kernel",
    "kernel_peak",
    "Projection",
    "SpatialBehavioral",
    "SpatialTemporal",
    "hour_of_day",
    "projection_for",
    "DensityGridEstimator",
    "evaluate",
]
