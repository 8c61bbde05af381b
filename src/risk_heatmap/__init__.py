"""
RiskHeatmap
===========

Kernel density risk heatmap for abnormal access events.

This package turns a bounded, time-windowed stream of abnormal access
events into a smooth risk-intensity surface for operator review, in a
2-D (space x behavior) and a 3-D (space x hour of day) projection.

Components:
    - density: Gaussian kernel, projections and the grid estimator
    - stream: Live point buffer, event filters and mock generator
    - observability: Dashboard stats and renderer encoding
    - service: Wiring of buffer, generator and estimator
    - main: FastAPI application

Example:
    from risk_heatmap.config import KDEConfig
    from risk_heatmap.density import DensityGridEstimator
    from risk_heatmap.models import ProjectionMode

    grid = DensityGridEstimator().evaluate(events, KDEConfig(), ProjectionMode.MODE_2D)
"""

__version__ = "0.1.0"
__author__ = "RiskHeatmap Project"

__all__ = [
    "__version__",
]
