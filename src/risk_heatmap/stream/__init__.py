"""
Stream Module
=============

Live event ingestion components.

This module provides the ingestion layer for the risk heatmap:
    - LivePointBuffer: Bounded, time-windowed working set
    - MockEventGenerator: Clustered synthetic events
    - filters: Dimension / risk-level selection over a snapshot

Example:
    from risk_heatmap.stream import LivePointBuffer, MockEventGenerator

    buffer = LivePointBuffer(maxsize=1000)
    generator = MockEventGenerator(time_window_hours=24)

    # One timer tick
    buffer.ingest(generator.generate())
    buffer.evict(now=now_ms(), window_hours=24)
"""

from risk_heatmap.stream.buffer import LivePointBuffer, MS_PER_HOUR
from risk_heatmap.stream.filters import EventFilter
from risk_heatmap.stream.generator import (
    ABNORMAL_TYPES,
    AbnormalType,
    MockEventGenerator,
    now_ms,
)


__all__ = [
    "LivePointBuffer",
    "MS_PER_HOUR",
    "EventFilter",
    "ABNORMAL_TYPES",
    "AbnormalType",
    "MockEventGenerator",
    "now_ms",
]
