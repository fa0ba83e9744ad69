"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: mode, registry path, time range, output path, verbosity.
"""

from typing import Literal, Optional
from pydantic import model_validator
from kmoni.schemas.base import KmoniBaseModel


class CLIConfig(KmoniBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Notes
    -----
    If start_time or end_time are provided but mode is not, mode is
    automatically set to "historical".

    Usage
    -----
        cli_cfg = CLIConfig(
            registry_path="points.pbf",
            start_time="2024-01-01T16:10:00+09:00",
            end_time="2024-01-01T16:10:30+09:00",
        )
        # mode automatically set to "historical"

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    mode: Optional[Literal["realtime", "historical"]] = None
    registry_path: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    results_path: Optional[str] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @model_validator(mode="after")
    def infer_historical_mode_from_times(self):
        """If times provided but mode not specified, set mode to historical."""
        if self.mode is None:
            if self.start_time or self.end_time:
                self.mode = "historical"

        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.mode is not None:
            overrides["mode"] = self.mode

        if self.registry_path is not None:
            overrides["registry"] = {"path": self.registry_path}

        monitor_overrides = {}
        if self.start_time is not None:
            monitor_overrides["start_time"] = self.start_time
        if self.end_time is not None:
            monitor_overrides["end_time"] = self.end_time
        if monitor_overrides:
            overrides["monitor"] = monitor_overrides

        if self.results_path is not None:
            overrides["output"] = {"results_path": self.results_path}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
