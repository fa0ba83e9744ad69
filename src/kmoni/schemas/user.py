"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., REGISTRY_PATH → registry_path).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from kmoni.schemas.base import KmoniBaseModel


class UserRegistryConfig(KmoniBaseModel):
    """User-facing registry config."""
    path: Optional[str] = None
    format: Optional[str] = None
    encoding: Optional[str] = None

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        """Normalize format names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserClassifierConfig(KmoniBaseModel):
    """User-facing classifier config."""
    max_color_distance: Optional[float] = None
    interpolate: Optional[bool] = None
    decimals: Optional[int] = None


class UserClientConfig(KmoniBaseModel):
    """User-facing client config."""
    base_url: Optional[str] = None
    timeout_sec: Optional[float] = None
    data_kind: Optional[str] = None
    include_subsurface: Optional[bool] = None


class UserMonitorConfig(KmoniBaseModel):
    """User-facing monitor config."""
    interval_sec: Optional[float] = None
    delay_sec: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    step_sec: Optional[int] = None


class UserOutputConfig(KmoniBaseModel):
    """User-facing output config."""
    results_path: Optional[str] = None
    compression: Optional[str] = None


class UserConfig(KmoniBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            registry_path="points.csv",
            data_kind="jma",
            start_time="2024-01-01T16:10:00+09:00",
            end_time="2024-01-01T16:12:00+09:00",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    mode: Optional[Literal["realtime", "historical"]] = Field(None, alias="MODE")

    # Registry settings (flat aliases)
    registry_path: Optional[str] = Field(None, alias="REGISTRY_PATH")
    registry_format: Optional[str] = Field(None, alias="REGISTRY_FORMAT")
    registry_encoding: Optional[str] = Field(None, alias="REGISTRY_ENCODING")

    # Image settings (flat aliases)
    base_url: Optional[str] = Field(None, alias="BASE_URL")
    data_kind: Optional[str] = Field(None, alias="DATA_KIND")
    include_subsurface: Optional[bool] = Field(None, alias="INCLUDE_SUBSURFACE")
    max_color_distance: Optional[float] = Field(None, alias="MAX_COLOR_DISTANCE")

    # Realtime settings
    interval_sec: Optional[float] = Field(None, alias="INTERVAL_SEC")
    delay_sec: Optional[int] = Field(None, alias="DELAY_SEC")

    # Historical settings
    start_time: Optional[str] = Field(None, alias="START_TIME")
    end_time: Optional[str] = Field(None, alias="END_TIME")

    # Output
    results_path: Optional[str] = Field(None, alias="RESULTS_PATH")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(None, alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="LOG_FILE")

    # Nested overrides (advanced users)
    registry: Optional[UserRegistryConfig] = None
    classifier: Optional[UserClassifierConfig] = None
    client: Optional[UserClientConfig] = None
    monitor: Optional[UserMonitorConfig] = None
    output: Optional[UserOutputConfig] = None

    model_config = KmoniBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @model_validator(mode="after")
    def infer_historical_mode_from_times(self):
        """If times provided but mode not specified, set mode to historical."""
        if self.mode is None:
            if self.start_time or self.end_time:
                self.mode = "historical"
            elif self.monitor and (self.monitor.start_time or self.monitor.end_time):
                self.mode = "historical"

        return self

    @field_validator("max_color_distance", "interval_sec", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("registry_format", "data_kind", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize format and data kind names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.mode is not None:
            overrides["mode"] = self.mode

        # Registry section
        registry = {}
        if self.registry_path is not None:
            registry["path"] = self.registry_path
        if self.registry_format is not None:
            registry["format"] = self.registry_format
        if self.registry_encoding is not None:
            registry["encoding"] = self.registry_encoding
        if self.registry is not None:
            registry.update(self.registry.model_dump(exclude_none=True))
        if registry:
            overrides["registry"] = registry

        # Classifier section
        classifier = {}
        if self.max_color_distance is not None:
            classifier["max_color_distance"] = self.max_color_distance
        if self.classifier is not None:
            classifier.update(self.classifier.model_dump(exclude_none=True))
        if classifier:
            overrides["classifier"] = classifier

        # Client section
        client = {}
        if self.base_url is not None:
            client["base_url"] = self.base_url
        if self.data_kind is not None:
            client["data_kind"] = self.data_kind
        if self.include_subsurface is not None:
            client["include_subsurface"] = self.include_subsurface
        if self.client is not None:
            client.update(self.client.model_dump(exclude_none=True))
        if client:
            overrides["client"] = client

        # Monitor section
        monitor = {}
        if self.interval_sec is not None:
            monitor["interval_sec"] = self.interval_sec
        if self.delay_sec is not None:
            monitor["delay_sec"] = self.delay_sec
        if self.start_time is not None:
            monitor["start_time"] = self.start_time
        if self.end_time is not None:
            monitor["end_time"] = self.end_time
        if self.monitor is not None:
            monitor.update(self.monitor.model_dump(exclude_none=True))
        if monitor:
            overrides["monitor"] = monitor

        # Output section
        output = {}
        if self.results_path is not None:
            output["results_path"] = self.results_path
        if self.output is not None:
            output.update(self.output.model_dump(exclude_none=True))
        if output:
            overrides["output"] = output

        # Logging section
        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_file is not None:
            logging_cfg["log_file"] = self.log_file
        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
