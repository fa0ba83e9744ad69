"""Map image retrieval."""

from kmoni.web.client import (
    DEFAULT_BASE_URL,
    JST,
    FetchError,
    KmoniImageClient,
    RealTimeDataType,
    to_jst,
)

__all__ = [
    'DEFAULT_BASE_URL',
    'JST',
    'FetchError',
    'KmoniImageClient',
    'RealTimeDataType',
    'to_jst',
]
