"""
Risk Heatmap Configuration
==========================

This module handles configuration loading for the risk heatmap service,
and the validation boundary for density estimation parameters.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    RISK_HEATMAP_BANDWIDTH          -> kde.bandwidth
    RISK_HEATMAP_GRID_SIZE          -> kde.grid_size
    RISK_HEATMAP_TIME_WINDOW_HOURS  -> kde.time_window_hours
    RISK_HEATMAP_MAX_EVENTS         -> buffer.max_events
    RISK_HEATMAP_TICK_INTERVAL      -> buffer.tick_interval_seconds
    RISK_HEATMAP_SEED               -> generator.seed
    RISK_HEATMAP_TIMEZONE           -> projection.timezone
    RISK_HEATMAP_PORT               -> server.port
    RISK_HEATMAP_LOG_LEVEL          -> logging.level
    PORT                            -> server.port (Cloud Run)

Validation Boundary:
    KDEConfig is the immutable bundle passed by value into every
    evaluation. It is validated here, once, before the estimator sees it.
    The estimator does not re-check.

Example:
    from risk_heatmap.config import settings, validate_kde_config

    print(settings.kde.bandwidth)
    config = validate_kde_config({"bandwidth": 6.0, "grid_size": 40})
"""

import os
import logging
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration fails validation."""
    pass


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="risk-heatmap", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class KDEConfig(BaseModel):
    """
    Density estimation parameters.

    Immutable per evaluation. Axis weights need not sum to 1.

    Attributes:
        bandwidth: Kernel spread (> 0)
        ws: Spatial axis weight (>= 0)
        wb: Behavioral axis weight (>= 0)
        wt: Time-of-day axis weight (>= 0)
        grid_size: Sampling intervals per axis; grid has grid_size + 1
            samples per axis, both bounds included (>= 1)
        time_window_hours: Retention horizon of the live buffer (> 0)
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    bandwidth: float = Field(default=8.0, gt=0, description="Kernel bandwidth")
    ws: float = Field(default=0.4, ge=0, description="Spatial weight")
    wb: float = Field(default=0.3, ge=0, description="Behavioral weight")
    wt: float = Field(default=0.3, ge=0, description="Time-of-day weight")
    grid_size: int = Field(default=50, ge=1, description="Grid intervals per axis")
    time_window_hours: float = Field(
        default=24.0,
        gt=0,
        description="Retention horizon in hours",
    )


class BufferConfig(BaseModel):
    """Live point buffer configuration."""

    max_events: int = Field(
        default=1000,
        ge=1,
        description="Maximum retained events (most recent kept)",
    )
    tick_interval_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Interval of the ingest + evict tick",
    )
    initial_events: int = Field(
        default=200,
        ge=0,
        description="Events generated at startup and on reset",
    )
    live: bool = Field(default=True, description="Start the tick on startup")


class GeneratorConfig(BaseModel):
    """Mock event generator configuration."""

    seed: Optional[int] = Field(default=None, description="RNG seed (None = random)")
    cluster_probability: float = Field(
        default=0.6,
        ge=0,
        le=1.0,
        description="Probability an event lands in a hot zone",
    )
    cluster_spread: float = Field(
        default=15.0,
        ge=0,
        le=40.0,
        description="Width of the uniform jitter around a hot zone center",
    )


class ProjectionConfig(BaseModel):
    """Time-of-day projection configuration."""

    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to reduce timestamps to hour of day",
    )
    wrap_time_of_day: bool = Field(
        default=False,
        description="Measure hour-of-day distance on a 24h circle",
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        resolve_timezone(value)
        return value


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the risk heatmap service.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    kde: KDEConfig = Field(default_factory=KDEConfig)
    buffer: BufferConfig = Field(default_factory=BufferConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Validation Boundary
# =============================================================================

def validate_kde_config(
    data: Mapping[str, Any],
    base: Optional[KDEConfig] = None,
) -> KDEConfig:
    """
    Validate density estimation parameters.

    Fields missing from data are taken from base (or the defaults).

    Args:
        data: Raw parameter mapping (e.g. from a control surface)
        base: Configuration supplying values for omitted fields

    Returns:
        KDEConfig: Validated, immutable configuration

    Raises:
        ConfigurationError: If any parameter is out of range
    """
    merged = (base or KDEConfig()).model_dump()
    merged.update(data)
    try:
        return KDEConfig.model_validate(merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        logger.warning(f"Rejected KDE configuration: {problems}")
        raise ConfigurationError(problems) from e


def resolve_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValueError: If the name is unknown
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # KDE settings
    if env_bw := os.environ.get("RISK_HEATMAP_BANDWIDTH"):
        config_data.setdefault("kde", {})["bandwidth"] = float(env_bw)
    if env_grid := os.environ.get("RISK_HEATMAP_GRID_SIZE"):
        config_data.setdefault("kde", {})["grid_size"] = int(env_grid)
    if env_window := os.environ.get("RISK_HEATMAP_TIME_WINDOW_HOURS"):
        config_data.setdefault("kde", {})["time_window_hours"] = float(env_window)

    # Buffer settings
    if env_max := os.environ.get("RISK_HEATMAP_MAX_EVENTS"):
        config_data.setdefault("buffer", {})["max_events"] = int(env_max)
    if env_tick := os.environ.get("RISK_HEATMAP_TICK_INTERVAL"):
        config_data.setdefault("buffer", {})["tick_interval_seconds"] = float(env_tick)

    # Generator settings
    if env_seed := os.environ.get("RISK_HEATMAP_SEED"):
        config_data.setdefault("generator", {})["seed"] = int(env_seed)

    # Projection settings
    if env_tz := os.environ.get("RISK_HEATMAP_TIMEZONE"):
        config_data.setdefault("projection", {})["timezone"] = env_tz

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("RISK_HEATMAP_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("RISK_HEATMAP_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
