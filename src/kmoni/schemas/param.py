"""ParamConfig: Expert defaults for kmoni.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from kmoni.schemas.base import KmoniBaseModel
from kmoni.web.client import DEFAULT_BASE_URL


RegistryFormat = Literal["csv", "pbf", "json"]
DataKind = Literal[
    "jma", "acmap", "vcmap", "dcmap",
    "rsp0125", "rsp0250", "rsp0500", "rsp1000", "rsp2000", "rsp4000",
]


# =============================================================================
# Nested Configuration Models
# =============================================================================

class RegistryConfig(KmoniBaseModel):
    """Observation point registry file."""
    path: Optional[str] = None
    format: Optional[RegistryFormat] = Field(None, description="Inferred from suffix when None")
    encoding: str = "utf-8"


class ClassifierConfig(KmoniBaseModel):
    """Color classification settings."""
    max_color_distance: float = Field(24.0, ge=0, description="Max RGB distance from the scale")
    interpolate: bool = True
    decimals: int = Field(1, ge=0, le=6)

    @field_validator("max_color_distance", mode="before")
    @classmethod
    def coerce_distance_to_float(cls, v):
        """Allow int or float for max_color_distance."""
        return float(v)


class ClientConfig(KmoniBaseModel):
    """Map image client settings."""
    base_url: str = DEFAULT_BASE_URL
    timeout_sec: float = Field(5.0, gt=0)
    data_kind: DataKind = "jma"
    include_subsurface: bool = False

    @field_validator("data_kind", mode="before")
    @classmethod
    def normalize_data_kind(cls, v):
        """Normalize data kind names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class MonitorConfig(KmoniBaseModel):
    """Polling and time range settings."""
    interval_sec: float = Field(1.0, gt=0, description="Seconds between realtime polls")
    delay_sec: int = Field(2, ge=0, description="Lag behind wall clock for realtime images")
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    step_sec: int = Field(1, ge=1, description="Historical step between images")


class OutputConfig(KmoniBaseModel):
    """Result export configuration."""
    results_path: Optional[str] = None
    compression: Literal["snappy", "gzip", "lz4", "none"] = "snappy"


class LoggingConfig(KmoniBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(KmoniBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    mode: Literal["realtime", "historical"] = "realtime"
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
