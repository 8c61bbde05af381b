"""
Heatmap Service
===============

Wires the live buffer, the event generator and the density estimator.

Data Flow:
    generator -> LivePointBuffer.ingest
              -> LivePointBuffer.snapshot -> EventFilter.apply
              -> DensityGridEstimator.evaluate -> HeatmapOutput

Triggers:
    - tick(): periodic; one ingest + one window evict
    - reset(): manual; replaces the buffer with a fresh batch
    - update_config(): validates and swaps the KDE configuration

Every evaluation runs on an immutable snapshot and a configuration
passed by value, so buffer mutation never races a grid scan.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

from risk_heatmap.config import KDEConfig, Settings, resolve_timezone, validate_kde_config
from risk_heatmap.density.estimator import DensityGridEstimator
from risk_heatmap.models.event import Event
from risk_heatmap.models.grid import ProjectionMode
from risk_heatmap.models.output import EventStatsOutput, GridSummaryOutput, HeatmapOutput
from risk_heatmap.observability.analytics import compute_event_stats, summarize_grid
from risk_heatmap.observability.visualization import encode_heatmap
from risk_heatmap.stream.buffer import LivePointBuffer
from risk_heatmap.stream.filters import EventFilter
from risk_heatmap.stream.generator import MockEventGenerator, now_ms


logger = logging.getLogger(__name__)


class HeatmapService:
    """
    Owns the live working set and produces heatmap payloads.

    Attributes:
        buffer: Live point buffer
        generator: Mock event source for ticks and resets
        estimator: Density grid estimator
        kde_config: Current validated configuration
    """

    def __init__(
        self,
        kde_config: KDEConfig,
        buffer: LivePointBuffer,
        generator: MockEventGenerator,
        estimator: DensityGridEstimator,
        initial_events: int = 200,
    ) -> None:
        self.kde_config = kde_config
        self.buffer = buffer
        self.generator = generator
        self.estimator = estimator
        self.initial_events = initial_events
        self._tick_count: int = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "HeatmapService":
        """Build a service from loaded settings."""
        return cls(
            kde_config=settings.kde,
            buffer=LivePointBuffer(maxsize=settings.buffer.max_events),
            generator=MockEventGenerator(
                time_window_hours=settings.kde.time_window_hours,
                cluster_probability=settings.generator.cluster_probability,
                cluster_spread=settings.generator.cluster_spread,
                seed=settings.generator.seed,
            ),
            estimator=DensityGridEstimator(
                tz=resolve_timezone(settings.projection.timezone),
                wrap_time_of_day=settings.projection.wrap_time_of_day,
            ),
            initial_events=settings.buffer.initial_events,
        )

    @property
    def tick_count(self) -> int:
        return self._tick_count

    # -------------------------------------------------------------------------
    # Buffer triggers
    # -------------------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> Event:
        """
        One timer tick: ingest a generated event, then evict stale ones.

        Returns:
            The ingested event
        """
        if now is None:
            now = now_ms()
        event = self.generator.generate(now)
        self.buffer.ingest(event)
        self.buffer.evict(now, self.kde_config.time_window_hours)
        self._tick_count += 1
        return event

    def ingest(self, event: Event, now: Optional[float] = None) -> None:
        """Ingest an externally supplied event, then evict stale ones."""
        self.buffer.ingest(event)
        self.buffer.evict(now_ms() if now is None else now, self.kde_config.time_window_hours)

    def reset(self, now: Optional[float] = None) -> int:
        """
        Replace the buffer with a fresh generated batch.

        Returns:
            Number of events loaded
        """
        self.generator.time_window_hours = self.kde_config.time_window_hours
        batch = self.generator.generate_batch(self.initial_events, now)
        self.buffer.replace(batch)
        return self.buffer.size

    def update_config(self, changes: Mapping[str, Any]) -> KDEConfig:
        """
        Validate and apply configuration changes.

        Raises:
            ConfigurationError: If the result is invalid (current config kept)
        """
        config = validate_kde_config(changes, base=self.kde_config)
        self.kde_config = config
        self.generator.time_window_hours = config.time_window_hours
        logger.info(f"KDE configuration updated: {config.model_dump()}")
        return config

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def filtered_events(self, event_filter: Optional[EventFilter] = None):
        """Filtered snapshot of the live buffer."""
        return (event_filter or EventFilter()).apply(self.buffer.snapshot())

    def heatmap(
        self,
        mode: ProjectionMode = ProjectionMode.MODE_2D,
        event_filter: Optional[EventFilter] = None,
    ) -> HeatmapOutput:
        """
        Evaluate the density surface for the filtered snapshot.

        Args:
            mode: Projection to sample in
            event_filter: Selection (defaults apply if None)

        Returns:
            HeatmapOutput with grid, filtered points and stats
        """
        config = self.kde_config
        points = self.filtered_events(event_filter)
        grid = self.estimator.evaluate(points, config, mode)

        stats = compute_event_stats(points)
        summary = summarize_grid(grid)

        return HeatmapOutput(
            timestamp=now_ms(),
            mode=grid.mode,
            config=config,
            cells=[list(c.as_tuple()) for c in grid.cells],
            heatmap=encode_heatmap(grid),
            points=[p.to_dict() for p in points],
            stats=EventStatsOutput(
                total=stats.total,
                critical_count=stats.critical_count,
                high_count=stats.high_count,
                users_count=stats.users_count,
            ),
            summary=GridSummaryOutput(
                peak=list(summary.peak.as_tuple()) if summary.peak else None,
                max_density=summary.max_density,
                mean_density=summary.mean_density,
                total_density=summary.total_density,
            ),
        )

    def get_metrics(self) -> dict:
        """Get service metrics for observability."""
        return {
            "tick_count": self._tick_count,
            "generated_count": self.generator.generated_count,
            **self.buffer.metrics(),
            **self.estimator.get_metrics(),
        }


async def run_ticks(
    service: HeatmapService,
    interval_seconds: float,
    is_live,
    stop_event: asyncio.Event,
) -> None:
    """
    Periodic tick loop.

    Args:
        service: Service to tick
        interval_seconds: Seconds between ticks
        is_live: Callable returning whether ticks are currently enabled
        stop_event: Set to stop the loop
    """
    logger.info(f"Tick loop started: interval={interval_seconds}s")
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            break
        except asyncio.TimeoutError:
            pass

        if not is_live():
            continue
        try:
            service.tick()
        except Exception as e:
            logger.error(f"Tick error: {e}")
    logger.info("Tick loop stopped")
