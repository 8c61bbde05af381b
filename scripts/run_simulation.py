#!/usr/bin/env python3
"""
Offline Simulation Script
=========================

Standalone script to exercise the buffer + estimator pipeline without
the HTTP layer.

This script:
    1. Loads an initial batch of mock events
    2. Runs a number of simulated ticks (ingest + evict)
    3. Evaluates the heatmap every N ticks and logs the peak cell
    4. Reports final buffer and estimator metrics

Usage:
    python scripts/run_simulation.py --ticks 500
    python scripts/run_simulation.py --mode 3D --grid-size 30 --seed 7
"""

import argparse
import logging
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_heatmap.config import KDEConfig, validate_kde_config
from risk_heatmap.density import DensityGridEstimator
from risk_heatmap.models.grid import ProjectionMode
from risk_heatmap.service import HeatmapService
from risk_heatmap.stream import LivePointBuffer, MockEventGenerator, now_ms


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_simulation(
    ticks: int,
    tick_seconds: float,
    config: KDEConfig,
    mode: ProjectionMode,
    report_every: int,
    seed: int,
) -> dict:
    """
    Run the simulation on a virtual clock.

    Args:
        ticks: Number of ticks to simulate
        tick_seconds: Virtual seconds between ticks
        config: Validated KDE configuration
        mode: Projection to evaluate
        report_every: Ticks between heatmap evaluations
        seed: Generator seed

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("Risk heatmap simulation")
    logger.info("=" * 60)
    logger.info(f"Ticks: {ticks} x {tick_seconds}s, mode: {mode.value}")
    logger.info(f"Config: {config.model_dump()}")
    logger.info("=" * 60)

    service = HeatmapService(
        kde_config=config,
        buffer=LivePointBuffer(),
        generator=MockEventGenerator(time_window_hours=config.time_window_hours, seed=seed),
        estimator=DensityGridEstimator(),
    )

    clock = now_ms()
    service.reset(now=clock)

    for i in range(1, ticks + 1):
        clock += tick_seconds * 1000.0
        service.tick(now=clock)

        if i % report_every == 0:
            output = service.heatmap(mode)
            peak = output.summary.peak
            logger.info(
                f"[tick {i}] buffer={service.buffer.size}, "
                f"points={output.stats.total}, "
                f"peak={peak}"
            )

    metrics = service.get_metrics()

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    for key, value in metrics.items():
        logger.info(f"{key}: {value}")

    return metrics


def main() -> None:
    parser = argparse.ArgumentParser(description="Risk heatmap offline simulation")
    parser.add_argument("--ticks", type=int, default=300, help="Ticks to simulate")
    parser.add_argument("--tick-seconds", type=float, default=3.0, help="Virtual seconds per tick")
    parser.add_argument("--mode", choices=["2D", "3D"], default="2D", help="Projection")
    parser.add_argument("--grid-size", type=int, default=50, help="Grid intervals per axis")
    parser.add_argument("--bandwidth", type=float, default=8.0, help="Kernel bandwidth")
    parser.add_argument("--window-hours", type=float, default=24.0, help="Time window")
    parser.add_argument("--report-every", type=int, default=50, help="Ticks between reports")
    parser.add_argument("--seed", type=int, default=42, help="Generator seed")
    args = parser.parse_args()

    config = validate_kde_config({
        "grid_size": args.grid_size,
        "bandwidth": args.bandwidth,
        "time_window_hours": args.window_hours,
    })

    run_simulation(
        ticks=args.ticks,
        tick_seconds=args.tick_seconds,
        config=config,
        mode=ProjectionMode(args.mode),
        report_every=max(1, args.report_every),
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
