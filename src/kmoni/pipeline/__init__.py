"""Fetch/decode orchestration, the monitor thread and result export."""

from kmoni.pipeline.monitor import (
    IntensityMonitor,
    classifier_from_config,
    client_from_config,
    parse_intensity_from_parameter,
)
from kmoni.pipeline.export import (
    RESULT_COLUMNS,
    cycles_to_dataframe,
    results_to_dataframe,
    save_results,
)

__all__ = [
    'IntensityMonitor',
    'classifier_from_config',
    'client_from_config',
    'parse_intensity_from_parameter',
    'RESULT_COLUMNS',
    'cycles_to_dataframe',
    'results_to_dataframe',
    'save_results',
]
