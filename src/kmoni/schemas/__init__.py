"""Pydantic configuration schemas for kmoni.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from kmoni.schemas.resolve import resolve_config
from kmoni.schemas.internal import InternalConfig
from kmoni.schemas.param import ParamConfig
from kmoni.schemas.user import UserConfig
from kmoni.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
