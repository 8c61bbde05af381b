"""
Risk Heatmap Main Application
=============================

FastAPI entry point for the risk density heatmap service.

Endpoints:
    GET  /            - Service information
    GET  /health      - Liveness probe
    GET  /ready       - Readiness probe (buffer initialized?)
    GET  /metrics     - Buffer, tick and estimator metrics
    GET  /config      - Current KDE configuration
    PUT  /config      - Validate and replace KDE configuration
    GET  /events      - Filtered snapshot of the live buffer
    POST /events      - Ingest one event
    POST /reset       - Replace the buffer with a fresh batch
    POST /live        - Enable or pause the periodic tick
    GET  /heatmap     - Density grid + filtered points + stats
    WS   /ws/heatmap  - Heatmap pushed every tick interval
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Body, FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from risk_heatmap.config import ConfigurationError, settings
from risk_heatmap.models.event import AbnormalDimension, EventMessage, RiskLevel
from risk_heatmap.models.grid import ProjectionMode
from risk_heatmap.service import HeatmapService, run_ticks
from risk_heatmap.stream.filters import EventFilter


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_service: Optional[HeatmapService] = None
_tick_task: Optional[asyncio.Task] = None
_stop_event: Optional[asyncio.Event] = None
_live: bool = settings.buffer.live
_startup_time: float = 0.0


# =============================================================================
# Getters
# =============================================================================

def get_service() -> Optional[HeatmapService]:
    return _service

def is_live() -> bool:
    return _live

def is_ready() -> bool:
    return _service is not None


def _not_ready() -> JSONResponse:
    return JSONResponse({"error": "Service not initialized"}, status_code=503)


def _build_filter(
    dimensions: Optional[List[AbnormalDimension]],
    risk_levels: Optional[List[RiskLevel]],
) -> EventFilter:
    return EventFilter.from_query(dimensions=dimensions, risk_levels=risk_levels)


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _service, _tick_task, _stop_event, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _service = HeatmapService.from_settings(settings)
    loaded = _service.reset()
    logger.info(f"Initial buffer loaded: {loaded} events")

    _stop_event = asyncio.Event()
    _tick_task = asyncio.create_task(
        run_ticks(
            _service,
            interval_seconds=settings.buffer.tick_interval_seconds,
            is_live=is_live,
            stop_event=_stop_event,
        ),
        name="tick_loop",
    )

    yield

    logger.info("Shutting down gracefully...")
    _stop_event.set()
    if _tick_task:
        try:
            await asyncio.wait_for(_tick_task, timeout=5.0)
        except asyncio.TimeoutError:
            _tick_task.cancel()
            try:
                await _tick_task
            except asyncio.CancelledError:
                pass

    _service = None
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="RiskHeatmap",
    description="Kernel density risk heatmap for abnormal access events",
    version=settings.service.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "RiskHeatmap",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "live": _live,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process runs."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness probe.

    Returns 200 once the buffer is initialized, 503 otherwise.
    """
    if not is_ready():
        return JSONResponse({"status": "not_ready"}, status_code=503)
    return JSONResponse({
        "status": "ready",
        "buffer_size": _service.buffer.size,
        "live": _live,
    })


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    service = get_service()
    service_metrics = service.get_metrics() if service else {}
    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "live": _live,
        **service_metrics,
    })


@app.get("/config")
async def get_config() -> JSONResponse:
    """Current KDE configuration."""
    service = get_service()
    if service is None:
        return _not_ready()
    return JSONResponse(service.kde_config.model_dump())


@app.put("/config")
async def put_config(changes: Dict[str, Any] = Body(...)) -> JSONResponse:
    """
    Validate and apply KDE configuration changes.

    Omitted fields keep their current value. Returns 422 and keeps the
    current configuration if validation fails.
    """
    service = get_service()
    if service is None:
        return _not_ready()
    try:
        config = service.update_config(changes)
    except ConfigurationError as e:
        return JSONResponse({"error": "invalid_configuration", "detail": str(e)}, status_code=422)
    return JSONResponse(config.model_dump())


@app.get("/events")
async def list_events(
    dimensions: Optional[List[AbnormalDimension]] = Query(default=None),
    risk_levels: Optional[List[RiskLevel]] = Query(default=None),
) -> JSONResponse:
    """Filtered snapshot of the live buffer."""
    service = get_service()
    if service is None:
        return _not_ready()
    events = service.filtered_events(_build_filter(dimensions, risk_levels))
    return JSONResponse({
        "count": len(events),
        "events": [e.to_dict() for e in events],
    })


@app.post("/events", status_code=201)
async def ingest_event(message: EventMessage) -> JSONResponse:
    """Ingest one externally generated event."""
    service = get_service()
    if service is None:
        return _not_ready()
    event = message.to_event()
    service.ingest(event)
    return JSONResponse(
        {"ingested": event.to_dict(), "buffer_size": service.buffer.size},
        status_code=201,
    )


@app.post("/reset")
async def reset() -> JSONResponse:
    """Replace the buffer with a freshly generated batch."""
    service = get_service()
    if service is None:
        return _not_ready()
    loaded = service.reset()
    return JSONResponse({"status": "reset", "buffer_size": loaded})


@app.post("/live")
async def set_live(enabled: bool = Query(...)) -> JSONResponse:
    """Enable or pause the periodic tick."""
    global _live
    _live = enabled
    logger.info(f"Live ticking {'enabled' if enabled else 'paused'}")
    return JSONResponse({"live": _live})


@app.get("/heatmap")
async def heatmap(
    mode: ProjectionMode = Query(default=ProjectionMode.MODE_2D),
    dimensions: Optional[List[AbnormalDimension]] = Query(default=None),
    risk_levels: Optional[List[RiskLevel]] = Query(default=None),
) -> JSONResponse:
    """Density grid, filtered points and stats for the current buffer."""
    service = get_service()
    if service is None:
        return _not_ready()
    output = service.heatmap(mode, _build_filter(dimensions, risk_levels))
    return JSONResponse(output.model_dump(mode="json"))


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/heatmap")
async def heatmap_stream(websocket: WebSocket, mode: ProjectionMode = ProjectionMode.MODE_2D) -> None:
    """WebSocket endpoint pushing the heatmap every tick interval."""
    await websocket.accept()
    logger.info("Client connected to /ws/heatmap")

    try:
        while _stop_event is not None and not _stop_event.is_set():
            service = get_service()
            if service is not None:
                output = service.heatmap(mode)
                await websocket.send_json(output.model_dump(mode="json"))
            # Client messages are ignored; a disconnect ends the stream
            try:
                await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.buffer.tick_interval_seconds,
                )
            except asyncio.TimeoutError:
                pass
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        logger.info("Client disconnected from /ws/heatmap")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "risk_heatmap.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
