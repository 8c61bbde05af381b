"""
Observability Module
====================

Analytics and visualization for the risk heatmap.

This module provides:
    - compute_event_stats / summarize_grid: Dashboard metrics
    - encode_heatmap: Renderer-ready grid encoding

DESIGN RULES:
    - Does NOT influence density estimation
"""

from risk_heatmap.observability.analytics import (
    EventStats,
    GridSummary,
    compute_event_stats,
    summarize_grid,
)
from risk_heatmap.observability.visualization import (
    decode_heatmap,
    encode_heatmap,
)


__all__ = [
    "EventStats",
    "GridSummary",
    "compute_event_stats",
    "summarize_grid",
    "decode_heatmap",
    "encode_heatmap",
]
