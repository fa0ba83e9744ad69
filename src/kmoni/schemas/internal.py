"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully
validated, normalized, and immutable.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import ConfigDict, Field, model_validator
from kmoni.schemas.base import KmoniBaseModel
from kmoni.schemas.param import DataKind, RegistryFormat


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalRegistryConfig(KmoniBaseModel):
    """Runtime registry configuration.

    Note: path may be None during merging; commands that need a registry
    check it before loading.
    """
    path: Optional[str]
    format: Optional[RegistryFormat]
    encoding: str


class InternalClassifierConfig(KmoniBaseModel):
    """Runtime classifier configuration."""
    max_color_distance: float = Field(ge=0)
    interpolate: bool
    decimals: int = Field(ge=0, le=6)


class InternalClientConfig(KmoniBaseModel):
    """Runtime image client configuration."""
    base_url: str
    timeout_sec: float = Field(gt=0)
    data_kind: DataKind
    include_subsurface: bool


class InternalMonitorConfig(KmoniBaseModel):
    """Runtime monitor configuration. Times are parsed here, once."""
    interval_sec: float = Field(gt=0)
    delay_sec: int = Field(ge=0)
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    step_sec: int = Field(ge=1)


class InternalOutputConfig(KmoniBaseModel):
    """Runtime output configuration."""
    results_path: Optional[str]
    compression: Literal["snappy", "gzip", "lz4", "none"]


class InternalLoggingConfig(KmoniBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_file: Optional[str]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(KmoniBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.interval = config.monitor.interval_sec  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    mode: Literal["realtime", "historical"]
    registry: InternalRegistryConfig
    classifier: InternalClassifierConfig
    client: InternalClientConfig
    monitor: InternalMonitorConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )

    @model_validator(mode="after")
    def check_historical_range(self):
        """Historical mode needs an ordered start/end time pair."""
        if self.mode == "historical":
            start, end = self.monitor.start_time, self.monitor.end_time
            if start is None or end is None:
                raise ValueError("historical mode requires monitor.start_time and monitor.end_time")
            if (start.tzinfo is None) != (end.tzinfo is None):
                raise ValueError("start_time and end_time must both carry a timezone or both omit it")
            if end < start:
                raise ValueError(f"end_time {end} is before start_time {start}")
        return self
