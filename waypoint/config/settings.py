"""
Configuration models for Waypoint

Every tunable of the discovery subsystem lives on one of these models and is
passed explicitly to the component that needs it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from waypoint.exceptions import ConfigError

logger = structlog.get_logger(__name__)

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class SubnetBounds(BaseModel):
    """Fourth-octet sweep range, lower inclusive and upper exclusive."""

    lower: int = Field(default=0, ge=0, le=256, description="First fourth octet to probe")
    upper: int = Field(default=255, ge=0, le=256, description="Fourth octet to stop before")

    @model_validator(mode="after")
    def check_order(self) -> SubnetBounds:
        if self.lower > self.upper:
            raise ValueError(f"lower bound {self.lower} exceeds upper bound {self.upper}")
        return self


class ScanConfig(BaseModel):
    """Subnet scan configuration."""

    port: int = Field(default=8000, ge=1, le=65535, description="Port the orchestrator listens on")
    endpoint_path: str = Field(default="/ping", description="Path requested on every candidate")
    probe_timeout: float = Field(default=2.0, gt=0, description="Per-probe timeout in seconds")
    bounds: SubnetBounds = Field(default_factory=SubnetBounds)

    @field_validator("endpoint_path")
    @classmethod
    def validate_endpoint_path(cls, v: str) -> str:
        """Probe paths are appended to host:port and must be absolute."""
        if not v.startswith("/"):
            return f"/{v}"
        return v


class HealthCheckPolicy(BaseModel):
    """Retry policy for waiting on a single URL."""

    target: str | None = Field(default=None, description="URL to poll")
    timeout: float = Field(default=1.0, gt=0, description="Per-attempt timeout in seconds")
    interval: float = Field(default=0.5, ge=0, description="Sleep between attempts in seconds")
    max_attempts: int | None = Field(
        default=None, ge=0, description="Attempt budget, None retries forever"
    )

    @property
    def bounded(self) -> bool:
        return self.max_attempts is not None


class BeaconConfig(BaseModel):
    """Orchestrator-side ping service."""

    bind: str = Field(default="0.0.0.0", description="Address the beacon binds to")  # noqa: S104
    port: int = Field(default=8000, ge=1, le=65535)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {v}")
        return level


class WaypointConfig(BaseModel):
    """Top-level Waypoint configuration."""

    scan: ScanConfig = Field(default_factory=ScanConfig)
    health: HealthCheckPolicy = Field(default_factory=HealthCheckPolicy)
    beacon: BeaconConfig = Field(default_factory=BeaconConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Path | None = None) -> WaypointConfig:
    """Load configuration from a YAML file, falling back to defaults.

    Args:
        config_path: Path to a YAML configuration file

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file cannot be parsed or fails validation
    """
    defaults: dict[str, Any] = WaypointConfig().model_dump()

    if config_path is None:
        return WaypointConfig()

    if not config_path.exists():
        logger.warning("Config file not found, using defaults", config_path=str(config_path))
        return WaypointConfig()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    try:
        config = WaypointConfig.model_validate(_merge(defaults, file_config))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    logger.debug("Loaded configuration", config_path=str(config_path))
    return config
