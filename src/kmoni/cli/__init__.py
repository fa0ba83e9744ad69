"""Command-line interface modules for kmoni.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from kmoni.cli.run_kmoni import (
    build_config,
    configure_logging,
    convert_registry,
    load_registry,
    load_user_config_dict,
    main,
    run_analysis,
)

__all__ = [
    'build_config',
    'configure_logging',
    'convert_registry',
    'load_registry',
    'load_user_config_dict',
    'main',
    'run_analysis',
]
