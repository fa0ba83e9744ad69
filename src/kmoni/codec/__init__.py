"""Registry codecs.

Each format has independent encode/decode functions over the same
in-memory ObservationPoint records:

- csv: line-granular, fault-tolerant decode (bad lines counted and skipped)
- pbf: protocol buffers wire format, all-or-nothing decode
- json: pydantic-validated array, all-or-nothing decode

``load_points`` / ``save_points`` pick the format from the file suffix.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Literal, Optional, Union

from kmoni.codec.errors import CodecFatalError, RecordParseError
from kmoni.codec.csv_codec import (
    CsvLoadResult,
    CsvRecordOutcome,
    dumps_csv,
    iter_csv_records,
    load_csv,
    loads_csv,
    parse_csv_line,
    save_csv,
)
from kmoni.codec.pbf_codec import dumps_pbf, load_pbf, loads_pbf, save_pbf
from kmoni.codec.json_codec import dumps_json, load_json, loads_json, save_json
from kmoni.points.observation_point import ObservationPoint

__all__ = [
    'CodecFatalError',
    'RecordParseError',
    'CsvLoadResult',
    'CsvRecordOutcome',
    'PointsLoadResult',
    'RegistryFormat',
    'detect_format',
    'load_points',
    'save_points',
    'parse_csv_line',
    'iter_csv_records',
    'loads_csv',
    'load_csv',
    'dumps_csv',
    'save_csv',
    'loads_pbf',
    'load_pbf',
    'dumps_pbf',
    'save_pbf',
    'loads_json',
    'load_json',
    'dumps_json',
    'save_json',
]

logger = logging.getLogger(__name__)

RegistryFormat = Literal["csv", "pbf", "json"]

_SUFFIX_FORMATS = {
    ".csv": "csv",
    ".txt": "csv",
    ".pbf": "pbf",
    ".pb": "pbf",
    ".bin": "pbf",
    ".json": "json",
}


@dataclass
class PointsLoadResult:
    """Format-independent load result.

    Binary and JSON loads either succeed completely (``error == 0``) or raise.
    """
    points: List[ObservationPoint] = field(default_factory=list)
    success: int = 0
    error: int = 0


def detect_format(path: Union[str, Path]) -> str:
    """Infer the registry format from a file suffix.

    Raises
    ------
    ValueError
        If the suffix is not a known registry suffix.
    """
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_FORMATS[suffix]
    except KeyError:
        raise ValueError(f"Cannot infer registry format from suffix {suffix!r}") from None


def load_points(path: Union[str, Path], format: Optional[RegistryFormat] = None,
                encoding: str = "utf-8") -> PointsLoadResult:
    """Load a registry file in any supported format."""
    fmt = format or detect_format(path)
    if fmt == "csv":
        result = load_csv(path, encoding=encoding)
        return PointsLoadResult(result.points, result.success, result.error)
    if fmt == "pbf":
        points = load_pbf(path)
    elif fmt == "json":
        points = load_json(path, encoding=encoding)
    else:
        raise ValueError(f"Unknown registry format: {fmt!r}")
    return PointsLoadResult(points, len(points), 0)


def save_points(points: Iterable[ObservationPoint], path: Union[str, Path],
                format: Optional[RegistryFormat] = None, encoding: str = "utf-8") -> int:
    """Save a registry file in any supported format. Returns records written."""
    fmt = format or detect_format(path)
    if fmt == "csv":
        return save_csv(points, path, encoding=encoding)
    if fmt == "pbf":
        return save_pbf(points, path)
    if fmt == "json":
        return save_json(points, path, encoding=encoding)
    raise ValueError(f"Unknown registry format: {fmt!r}")
