"""Binary registry format (protocol buffers wire encoding).

The whole registry is one framed value: a repeated, length-delimited field 1
holding one message per observation point. Field numbers are fixed and
independent of attribute order, so new optional fields can be appended
without breaking existing files; unknown fields are skipped on read.

Message layout
--------------
ObservationPoint:
    1 type (varint)              2 code (string)
    3 is_suspended (varint)      4 name (string)
    5 region (string)            6 location (Location)
    7 point (Point2, optional)   8 classification_id (varint, optional)
    9 prefecture_classification_id (varint, optional)
Location:
    1 latitude                   2 longitude
    written as doubles; 32-bit floats are accepted on read
Point2:
    1 x (varint)                 2 y (varint)

Integer fields are int32 on the wire; larger values cannot be encoded.

Unlike the CSV codec there is no partial recovery: any malformed frame or
invalid record fails the whole decode with CodecFatalError.
"""

import logging
import struct
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

from pydantic import ValidationError

from kmoni.codec.errors import CodecFatalError
from kmoni.points.observation_point import ObservationPoint, ObservationPointType
from kmoni.points.types import GeoLocation, PixelCoordinate

__all__ = ['dumps_pbf', 'loads_pbf', 'save_pbf', 'load_pbf']

logger = logging.getLogger(__name__)

# Wire types
WT_VARINT = 0
WT_FIXED64 = 1
WT_LENGTH = 2
WT_FIXED32 = 5

# Field tags
ROOT_POINT = 1

POINT_TYPE = 1
POINT_CODE = 2
POINT_IS_SUSPENDED = 3
POINT_NAME = 4
POINT_REGION = 5
POINT_LOCATION = 6
POINT_PIXEL = 7
POINT_CLASSIFICATION_ID = 8
POINT_PREF_CLASSIFICATION_ID = 9

LOCATION_LATITUDE = 1
LOCATION_LONGITUDE = 2

PIXEL_X = 1
PIXEL_Y = 2

_UINT64_MASK = (1 << 64) - 1
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


# =============================================================================
# Encoding
# =============================================================================

def _varint(value: int) -> bytes:
    # Negative int32/int64 values go out as 64-bit two's complement (10 bytes)
    if value < 0:
        value &= _UINT64_MASK
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _key(tag: int, wire_type: int) -> bytes:
    return _varint((tag << 3) | wire_type)


def _int_field(tag: int, value: int) -> bytes:
    value = int(value)
    if not INT32_MIN <= value <= INT32_MAX:
        raise OverflowError(f"field {tag} value {value} does not fit in int32")
    return _key(tag, WT_VARINT) + _varint(value)


def _bytes_field(tag: int, payload: bytes) -> bytes:
    return _key(tag, WT_LENGTH) + _varint(len(payload)) + payload


def _double_field(tag: int, value: float) -> bytes:
    return _key(tag, WT_FIXED64) + struct.pack("<d", value)


def _encode_location(location: GeoLocation) -> bytes:
    return (_double_field(LOCATION_LATITUDE, location.latitude)
            + _double_field(LOCATION_LONGITUDE, location.longitude))


def _encode_pixel(pixel: PixelCoordinate) -> bytes:
    return _int_field(PIXEL_X, pixel.x) + _int_field(PIXEL_Y, pixel.y)


def _encode_point(point: ObservationPoint) -> bytes:
    parts = [
        _int_field(POINT_TYPE, int(point.type)),
        _bytes_field(POINT_CODE, point.code.encode("utf-8")),
        _int_field(POINT_IS_SUSPENDED, 1 if point.is_suspended else 0),
        _bytes_field(POINT_NAME, point.name.encode("utf-8")),
        _bytes_field(POINT_REGION, point.region.encode("utf-8")),
        _bytes_field(POINT_LOCATION, _encode_location(point.location)),
    ]
    if point.point is not None:
        parts.append(_bytes_field(POINT_PIXEL, _encode_pixel(point.point)))
    if point.classification_id is not None:
        parts.append(_int_field(POINT_CLASSIFICATION_ID, point.classification_id))
    if point.prefecture_classification_id is not None:
        parts.append(_int_field(POINT_PREF_CLASSIFICATION_ID, point.prefecture_classification_id))
    return b"".join(parts)


def dumps_pbf(points: Iterable[ObservationPoint]) -> bytes:
    """Encode points as a single binary registry frame."""
    try:
        return b"".join(_bytes_field(ROOT_POINT, _encode_point(p)) for p in points)
    except (UnicodeError, struct.error, OverflowError) as e:
        raise CodecFatalError(f"Cannot encode registry: {e}") from e


# =============================================================================
# Decoding
# =============================================================================

def _read_varint(data: bytes, pos: int) -> Tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise CodecFatalError("Truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift >= 70:
            raise CodecFatalError("Varint too long")


def _to_signed(value: int) -> int:
    value &= _UINT64_MASK
    if value >= 1 << 63:
        value -= 1 << 64
    return value


def _to_int32(value: int, what: str) -> int:
    value = _to_signed(value)
    if not INT32_MIN <= value <= INT32_MAX:
        raise CodecFatalError(f"Value {value} for {what} does not fit in int32")
    return value


def _iter_fields(data: bytes):
    """Yield (tag, wire_type, value) for each field in a message.

    Varints yield an int, fixed32/fixed64 yield the raw bytes, and
    length-delimited fields yield the payload bytes.
    """
    pos = 0
    end = len(data)
    while pos < end:
        key, pos = _read_varint(data, pos)
        tag, wire_type = key >> 3, key & 0x07
        if tag == 0:
            raise CodecFatalError("Invalid field tag 0")
        if wire_type == WT_VARINT:
            value, pos = _read_varint(data, pos)
        elif wire_type == WT_FIXED64:
            if pos + 8 > end:
                raise CodecFatalError(f"Truncated fixed64 field {tag}")
            value, pos = data[pos:pos + 8], pos + 8
        elif wire_type == WT_LENGTH:
            length, pos = _read_varint(data, pos)
            if pos + length > end:
                raise CodecFatalError(f"Truncated length-delimited field {tag}")
            value, pos = data[pos:pos + length], pos + length
        elif wire_type == WT_FIXED32:
            if pos + 4 > end:
                raise CodecFatalError(f"Truncated fixed32 field {tag}")
            value, pos = data[pos:pos + 4], pos + 4
        else:
            raise CodecFatalError(f"Unsupported wire type {wire_type} for field {tag}")
        yield tag, wire_type, value


def _expect(wire_type: int, expected: int, what: str) -> None:
    if wire_type != expected:
        raise CodecFatalError(f"Unexpected wire type {wire_type} for {what}")


def _decode_float(wire_type: int, value: bytes, what: str) -> float:
    if wire_type == WT_FIXED64:
        return struct.unpack("<d", value)[0]
    if wire_type == WT_FIXED32:
        return struct.unpack("<f", value)[0]
    raise CodecFatalError(f"Unexpected wire type {wire_type} for {what}")


def _decode_string(value: bytes, what: str) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CodecFatalError(f"Invalid UTF-8 in {what}") from e


def _decode_location(data: bytes) -> Dict[str, float]:
    fields = {"latitude": 0.0, "longitude": 0.0}
    for tag, wire_type, value in _iter_fields(data):
        if tag == LOCATION_LATITUDE:
            fields["latitude"] = _decode_float(wire_type, value, "latitude")
        elif tag == LOCATION_LONGITUDE:
            fields["longitude"] = _decode_float(wire_type, value, "longitude")
    return fields


def _decode_pixel(data: bytes) -> Dict[str, int]:
    fields = {"x": 0, "y": 0}
    for tag, wire_type, value in _iter_fields(data):
        if tag == PIXEL_X:
            _expect(wire_type, WT_VARINT, "pixel x")
            fields["x"] = _to_int32(value, "pixel x")
        elif tag == PIXEL_Y:
            _expect(wire_type, WT_VARINT, "pixel y")
            fields["y"] = _to_int32(value, "pixel y")
    return fields


def _decode_point(data: bytes) -> ObservationPoint:
    fields = {
        "type": ObservationPointType.UNKNOWN,
        "code": "",
        "is_suspended": False,
        "name": "",
        "region": "",
    }
    location = None
    for tag, wire_type, value in _iter_fields(data):
        if tag == POINT_TYPE:
            _expect(wire_type, WT_VARINT, "type")
            fields["type"] = _to_int32(value, "type")
        elif tag == POINT_CODE:
            _expect(wire_type, WT_LENGTH, "code")
            fields["code"] = _decode_string(value, "code")
        elif tag == POINT_IS_SUSPENDED:
            _expect(wire_type, WT_VARINT, "is_suspended")
            fields["is_suspended"] = bool(value)
        elif tag == POINT_NAME:
            _expect(wire_type, WT_LENGTH, "name")
            fields["name"] = _decode_string(value, "name")
        elif tag == POINT_REGION:
            _expect(wire_type, WT_LENGTH, "region")
            fields["region"] = _decode_string(value, "region")
        elif tag == POINT_LOCATION:
            _expect(wire_type, WT_LENGTH, "location")
            location = _decode_location(value)
        elif tag == POINT_PIXEL:
            _expect(wire_type, WT_LENGTH, "point")
            fields["point"] = _decode_pixel(value)
        elif tag == POINT_CLASSIFICATION_ID:
            _expect(wire_type, WT_VARINT, "classification_id")
            fields["classification_id"] = _to_int32(value, "classification_id")
        elif tag == POINT_PREF_CLASSIFICATION_ID:
            _expect(wire_type, WT_VARINT, "prefecture_classification_id")
            fields["prefecture_classification_id"] = _to_int32(value, "prefecture_classification_id")
        else:
            logger.debug("Skipping unknown point field %d (wire type %d)", tag, wire_type)

    if location is None:
        raise CodecFatalError(f"Point {fields['code']!r} has no location")
    fields["location"] = location

    try:
        return ObservationPoint.model_validate(fields)
    except ValidationError as e:
        raise CodecFatalError(f"Invalid point {fields['code']!r}: {e}") from e


def loads_pbf(data: bytes) -> List[ObservationPoint]:
    """Decode a binary registry frame.

    Raises
    ------
    CodecFatalError
        On any malformed data or invalid record. No partial result is returned.
    """
    points = []
    for tag, wire_type, value in _iter_fields(bytes(data)):
        if tag != ROOT_POINT:
            logger.debug("Skipping unknown root field %d", tag)
            continue
        _expect(wire_type, WT_LENGTH, "observation point")
        points.append(_decode_point(value))
    return points


def load_pbf(path: Union[str, Path]) -> List[ObservationPoint]:
    """Load observation points from a binary registry file.

    Raises
    ------
    CodecFatalError
        If the file cannot be read or its content is malformed.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise CodecFatalError(f"Cannot read registry {path}: {e}") from e
    points = loads_pbf(data)
    logger.info("Loaded %d points from %s", len(points), path.name)
    return points


def save_pbf(points: Iterable[ObservationPoint], path: Union[str, Path]) -> int:
    """Write points to a binary registry file. Returns the number written."""
    points = list(points)
    data = dumps_pbf(points)
    path = Path(path)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise CodecFatalError(f"Cannot write registry {path}: {e}") from e
    logger.info("Saved %d points to %s", len(points), path.name)
    return len(points)
