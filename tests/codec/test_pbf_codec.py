"""Tests for the protocol buffers wire-format registry codec."""

import struct

import pytest

from kmoni.codec import CodecFatalError, dumps_pbf, load_pbf, loads_pbf, save_pbf
from kmoni.points import ObservationPointType

pytestmark = pytest.mark.unit


def _varint(value):
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _field(tag, wire_type, payload):
    key = _varint((tag << 3) | wire_type)
    if wire_type == 2:
        return key + _varint(len(payload)) + payload
    return key + payload


def _point_message(location, extra=b""):
    return (
        _field(1, 0, _varint(1))
        + _field(2, 2, b"K01")
        + _field(4, 2, "千歳".encode("utf-8"))
        + _field(6, 2, location)
        + extra
    )


class TestRoundTrip:

    def test_round_trip(self, sample_points):
        assert loads_pbf(dumps_pbf(sample_points)) == sample_points

    def test_optional_fields_omitted(self, make_point):
        p = make_point("A002", None, None)
        data = dumps_pbf([p])
        decoded = loads_pbf(data)[0]
        assert decoded.point is None
        assert decoded.classification_id is None
        assert decoded.prefecture_classification_id is None

    def test_empty_registry(self):
        assert dumps_pbf([]) == b""
        assert loads_pbf(b"") == []

    def test_save_and_load(self, temp_dir, sample_points):
        path = temp_dir / "points.pbf"
        assert save_pbf(sample_points, path) == 3
        assert load_pbf(path) == sample_points


class TestCompatibility:

    def test_float32_location_accepted(self):
        location = _field(1, 5, struct.pack("<f", 42.75)) + _field(2, 5, struct.pack("<f", 141.5))
        data = _field(1, 2, _point_message(location))

        (p,) = loads_pbf(data)
        assert p.type == ObservationPointType.KIK_NET
        assert p.code == "K01"
        assert p.name == "千歳"
        assert p.location.latitude == 42.75
        assert p.location.longitude == 141.5
        assert p.point is None

    def test_unknown_fields_skipped(self):
        location = _field(1, 1, struct.pack("<d", 35.0)) + _field(2, 1, struct.pack("<d", 139.0))
        extra = _field(15, 0, _varint(7)) + _field(16, 2, b"future")
        data = _field(1, 2, _point_message(location, extra)) + _field(9, 0, _varint(1))

        (p,) = loads_pbf(data)
        assert p.code == "K01"
        assert p.location.latitude == 35.0


class TestMalformed:

    def test_truncated_frame(self, sample_points):
        data = dumps_pbf(sample_points)
        with pytest.raises(CodecFatalError):
            loads_pbf(data[:-3])

    def test_missing_location(self):
        data = _field(1, 2, _field(2, 2, b"K01"))
        with pytest.raises(CodecFatalError, match="no location"):
            loads_pbf(data)

    def test_invalid_record_fails_whole_decode(self):
        location = _field(1, 1, struct.pack("<d", 35.0)) + _field(2, 1, struct.pack("<d", 139.0))
        good = _field(1, 2, _point_message(location))
        bad = _field(1, 2, _field(6, 2, location))  # empty code
        with pytest.raises(CodecFatalError):
            loads_pbf(good + bad)

    def test_unsupported_wire_type(self):
        with pytest.raises(CodecFatalError, match="wire type"):
            loads_pbf(bytes([(1 << 3) | 3]))

    def test_missing_file(self, temp_dir):
        with pytest.raises(CodecFatalError):
            load_pbf(temp_dir / "missing.pbf")

    def test_varint_beyond_int32_rejected(self):
        location = _field(1, 1, struct.pack("<d", 35.0)) + _field(2, 1, struct.pack("<d", 139.0))
        data = _field(1, 2, _point_message(location, _field(8, 0, _varint(1 << 40))))
        with pytest.raises(CodecFatalError, match="int32"):
            loads_pbf(data)


class TestIntegerRange:

    @pytest.mark.parametrize("value", [2 ** 64, 2 ** 31, -(2 ** 31) - 1])
    def test_out_of_range_classification_not_encoded(self, make_point, value):
        with pytest.raises(CodecFatalError, match="int32"):
            dumps_pbf([make_point(classification_id=value)])

    def test_out_of_range_pixel_not_encoded(self, make_point):
        with pytest.raises(CodecFatalError):
            dumps_pbf([make_point(x=2 ** 40)])

    def test_int32_bounds_round_trip(self, make_point):
        p = make_point(classification_id=2 ** 31 - 1, prefecture_classification_id=-(2 ** 31))
        assert loads_pbf(dumps_pbf([p])) == [p]
