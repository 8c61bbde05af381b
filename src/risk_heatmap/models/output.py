"""
Heatmap Output Models
=====================

Output contract of the heatmap endpoint.

Output Contract:
    {
        "timestamp": 1770500938284.0,
        "mode": "2D",
        "config": {"bandwidth": 8.0, "ws": 0.4, ...},
        "cells": [[0.0, 0.0, 0.0012], ...],
        "heatmap": "<base64 JSON matrix>",
        "points": [{"id": "pt-1", "x": 21.4, ...}, ...],
        "stats": {"total": 120, "critical_count": 51, ...},
        "summary": {"peak": [20.0, 30.0, 0.81], ...}
    }

Design Rules:
    - `cells` and `points` are what the renderer draws
    - `stats` and `summary` are observability-only
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from risk_heatmap.config import KDEConfig
from risk_heatmap.models.grid import ProjectionMode


class EventStatsOutput(BaseModel):
    """Counts over the filtered events."""

    total: int = Field(..., ge=0)
    critical_count: int = Field(..., ge=0)
    high_count: int = Field(..., ge=0)
    users_count: int = Field(..., ge=0)


class GridSummaryOutput(BaseModel):
    """Peak and aggregate density of the grid."""

    peak: Optional[List[float]] = Field(
        default=None,
        description="[axis1, axis2, density] of the densest cell",
    )
    max_density: float = Field(..., ge=0.0)
    mean_density: float = Field(..., ge=0.0)
    total_density: float = Field(..., ge=0.0)


class HeatmapOutput(BaseModel):
    """
    Complete heatmap payload.

    Attributes:
        timestamp: Evaluation time (epoch milliseconds)
        mode: Projection the grid was sampled in
        config: Configuration the grid was evaluated with
        cells: [axis1, axis2, density] triples, axis-1-major
        heatmap: Base64 JSON matrix (see observability.visualization)
        points: Filtered events for overlay markers and click-through
        stats: Counts over the filtered events
        summary: Grid summary
    """

    timestamp: float
    mode: ProjectionMode
    config: KDEConfig
    cells: List[List[float]]
    heatmap: str
    points: List[dict]
    stats: EventStatsOutput
    summary: GridSummaryOutput
