"""Comma-separated text format for the observation point registry.

One record per line, fields in fixed order::

    type,code,is_suspended,name,region,latitude,longitude,pixel_x,pixel_y[,classification_id,prefecture_classification_id]

Decoding is line-granular and fault-tolerant: a line that fails to parse is
counted as an error and skipped, and decoding carries on to the end of the
input. Only an unreadable source fails the whole load.

Encoding is atomic: the full text is built first, and a point that cannot be
written without breaking the line format aborts the call before anything
touches the destination.
"""

import io
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from kmoni.codec.errors import CodecFatalError, RecordParseError
from kmoni.points.observation_point import ObservationPoint, ObservationPointType
from kmoni.points.types import GeoLocation, PixelCoordinate

__all__ = [
    'CsvRecordOutcome',
    'CsvLoadResult',
    'parse_csv_line',
    'format_csv_line',
    'iter_csv_records',
    'loads_csv',
    'load_csv',
    'dumps_csv',
    'save_csv',
]

logger = logging.getLogger(__name__)

DELIMITER = ","
MIN_FIELDS = 9
MAX_FIELDS = 11
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1

# Line breaks are exactly the ones io splits on with newline=""
LINE_BREAKS = ("\r", "\n")
_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)
_DECIMAL = re.compile(r"\s*[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?\s*", re.ASCII)


@dataclass(frozen=True)
class CsvRecordOutcome:
    """Result of parsing one line: exactly one of point / error is set."""
    line_number: int
    point: Optional[ObservationPoint] = None
    error: Optional[RecordParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CsvLoadResult:
    """Aggregated outcome of a CSV load.

    ``success`` and ``error`` are the record counts; ``failures`` keeps the
    individual parse errors (with line numbers) for diagnostics.
    """
    points: List[ObservationPoint] = field(default_factory=list)
    success: int = 0
    error: int = 0
    failures: List[RecordParseError] = field(default_factory=list)


def _parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise RecordParseError(f"invalid boolean: {text!r}")


def _parse_int(text: str, name: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise RecordParseError(f"invalid integer for {name}: {text!r}")
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        raise RecordParseError(f"{name} out of int32 range: {text!r}")
    return value


def _parse_float(text: str, name: str) -> float:
    if not _DECIMAL.fullmatch(text):
        raise RecordParseError(f"invalid number for {name}: {text!r}")
    value = float(text)
    if not math.isfinite(value):
        raise RecordParseError(f"non-finite {name}: {text!r}")
    return value


def _parse_optional_int(text: str, name: str) -> Optional[int]:
    if not text.strip():
        return None
    return _parse_int(text, name)


def parse_csv_line(line: str) -> ObservationPoint:
    """Parse a single registry line.

    Parameters
    ----------
    line : str
        One record, without its line terminator.

    Returns
    -------
    ObservationPoint

    Raises
    ------
    RecordParseError
        If the line has too few fields, or any field fails to parse or
        validate. The reason names the offending field.
    """
    fields = line.split(DELIMITER)
    if len(fields) < MIN_FIELDS:
        raise RecordParseError(f"expected at least {MIN_FIELDS} fields, got {len(fields)}")

    type_value = _parse_int(fields[0], "type")
    try:
        point_type = ObservationPointType(type_value)
    except ValueError:
        raise RecordParseError(f"unknown observation point type: {type_value}") from None

    is_suspended = _parse_bool(fields[2])
    latitude = _parse_float(fields[5], "latitude")
    longitude = _parse_float(fields[6], "longitude")

    # Pixel is only set when both coordinates are present
    pixel = None
    if fields[7].strip() and fields[8].strip():
        pixel = (_parse_int(fields[7], "pixel_x"), _parse_int(fields[8], "pixel_y"))

    classification_id = None
    prefecture_classification_id = None
    if len(fields) > 9:
        classification_id = _parse_optional_int(fields[9], "classification_id")
    if len(fields) > 10:
        prefecture_classification_id = _parse_optional_int(fields[10], "prefecture_classification_id")

    try:
        return ObservationPoint(
            type=point_type,
            code=fields[1],
            is_suspended=is_suspended,
            name=fields[3],
            region=fields[4],
            location=GeoLocation(latitude=latitude, longitude=longitude),
            point=PixelCoordinate(x=pixel[0], y=pixel[1]) if pixel else None,
            classification_id=classification_id,
            prefecture_classification_id=prefecture_classification_id,
        )
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise RecordParseError(f"invalid record: {errors}") from None


def iter_csv_records(lines: Iterable[str]) -> Iterator[CsvRecordOutcome]:
    """Parse lines one at a time, yielding an outcome per record.

    Blank lines are not records and yield nothing. Line numbers are 1-based
    and count blank lines, so they match the source file.
    """
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            yield CsvRecordOutcome(line_number, point=parse_csv_line(line))
        except RecordParseError as e:
            e.line = line
            e.line_number = line_number
            yield CsvRecordOutcome(line_number, error=e)


def _collect(lines: Iterable[str]) -> CsvLoadResult:
    result = CsvLoadResult()
    for outcome in iter_csv_records(lines):
        if outcome.ok:
            result.points.append(outcome.point)
            result.success += 1
        else:
            logger.debug("Skipping registry record: %s", outcome.error)
            result.failures.append(outcome.error)
            result.error += 1
    return result


def loads_csv(text: str) -> CsvLoadResult:
    """Decode registry text already held in memory."""
    return _collect(io.StringIO(text, newline=""))


def load_csv(path: Union[str, Path], encoding: str = "utf-8") -> CsvLoadResult:
    """Load observation points from a CSV file.

    Parameters
    ----------
    path : str or Path
        Registry file.
    encoding : str, optional
        Text encoding of the file (default UTF-8).

    Returns
    -------
    CsvLoadResult
        Parsed points in file order plus success/error counts.

    Raises
    ------
    CodecFatalError
        If the file cannot be opened or decoded with ``encoding``.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            result = _collect(f)
    except (OSError, UnicodeError, LookupError) as e:
        raise CodecFatalError(f"Cannot read registry {path}: {e}") from e

    if result.error:
        logger.warning("Loaded %d points from %s (%d records failed)",
                       result.success, path.name, result.error)
    else:
        logger.info("Loaded %d points from %s", result.success, path.name)
    return result


def _check_text(value: str, name: str, code: str) -> str:
    if any(c in value for c in (DELIMITER,) + LINE_BREAKS):
        raise CodecFatalError(
            f"Cannot encode {name} of point {code!r}: contains delimiter or line break"
        )
    return value


def _check_int(value: int, name: str, code: str) -> str:
    if not INT32_MIN <= value <= INT32_MAX:
        raise CodecFatalError(f"Cannot encode {name} of point {code!r}: {value} does not fit in int32")
    return str(value)


def _format_optional(value: Optional[int], name: str, code: str) -> str:
    return "" if value is None else _check_int(value, name, code)


def format_csv_line(point: ObservationPoint) -> str:
    """Format one point as a registry line (no terminator).

    Raises
    ------
    CodecFatalError
        If a text field contains the delimiter or a line break, or an
        integer field does not fit in int32.
    """
    code = _check_text(point.code, "code", point.code)
    fields = [
        str(int(point.type)),
        code,
        "True" if point.is_suspended else "False",
        _check_text(point.name, "name", code),
        _check_text(point.region, "region", code),
        repr(float(point.location.latitude)),
        repr(float(point.location.longitude)),
        "" if point.point is None else _check_int(point.point.x, "pixel_x", code),
        "" if point.point is None else _check_int(point.point.y, "pixel_y", code),
        _format_optional(point.classification_id, "classification_id", code),
        _format_optional(point.prefecture_classification_id, "prefecture_classification_id", code),
    ]
    return DELIMITER.join(fields)


def dumps_csv(points: Iterable[ObservationPoint]) -> str:
    """Encode points as registry text, one line per point in iteration order."""
    return "".join(format_csv_line(p) + "\n" for p in points)


def save_csv(points: Iterable[ObservationPoint], path: Union[str, Path],
             encoding: str = "utf-8") -> int:
    """Write points to a CSV registry file.

    Returns
    -------
    int
        Number of records written.

    Raises
    ------
    CodecFatalError
        If any point cannot be encoded (nothing is written) or the file
        cannot be written.
    """
    points = list(points)
    text = dumps_csv(points)
    path = Path(path)
    try:
        with open(path, "w", encoding=encoding, newline="") as f:
            f.write(text)
    except (OSError, UnicodeError, LookupError) as e:
        raise CodecFatalError(f"Cannot write registry {path}: {e}") from e
    logger.info("Saved %d points to %s", len(points), path.name)
    return len(points)
