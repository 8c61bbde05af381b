"""
Data Models
===========

Models shared across the estimator, the buffer and the HTTP layer.

Models:
    Event:
        - RiskLevel, AbnormalDimension: Categorical event attributes
        - Event: Immutable abnormal access event
        - EventMessage: Pydantic schema for inbound events

    Grid:
        - ProjectionMode: 2D (space x behavior) or 3D (space x hour of day)
        - DensityCell, DensityGrid: Estimator output
"""

from risk_heatmap.models.event import (
    AbnormalDimension,
    Event,
    EventMessage,
    RiskLevel,
    risk_score_for,
)
from risk_heatmap.models.grid import DensityCell, DensityGrid, ProjectionMode

__all__ = [
    # Event
    "RiskLevel",
    "AbnormalDimension",
    "Event",
    "EventMessage",
    "risk_score_for",
    # Grid
    "ProjectionMode",
    "DensityCell",
    "DensityGrid",
]
