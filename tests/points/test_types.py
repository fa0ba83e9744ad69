"""Tests for coordinate and color value types."""

import math

import numpy as np
import pytest
from pydantic import ValidationError

from kmoni.points import Color, GeoLocation, PixelCoordinate

pytestmark = pytest.mark.unit


class TestGeoLocation:

    def test_accepts_finite_values(self):
        loc = GeoLocation(latitude=35.5, longitude=139.25)
        assert loc.latitude == 35.5
        assert loc.longitude == 139.25

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_rejects_non_finite(self, bad):
        with pytest.raises(ValidationError):
            GeoLocation(latitude=bad, longitude=139.0)

    def test_frozen(self):
        loc = GeoLocation(latitude=1.0, longitude=2.0)
        with pytest.raises(ValidationError):
            loc.latitude = 3.0

    def test_hashable_and_equal_by_value(self):
        assert GeoLocation(latitude=1.0, longitude=2.0) == GeoLocation(latitude=1.0, longitude=2.0)
        assert len({GeoLocation(latitude=1.0, longitude=2.0),
                    GeoLocation(latitude=1.0, longitude=2.0)}) == 1


class TestPixelCoordinate:

    def test_origin_is_valid(self):
        p = PixelCoordinate(x=0, y=0)
        assert (p.x, p.y) == (0, 0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            PixelCoordinate(x=-1, y=5)


class TestColor:

    def test_alpha_defaults_opaque(self):
        assert Color(r=1, g=2, b=3).a == 255

    def test_channel_range_enforced(self):
        with pytest.raises(ValidationError):
            Color(r=256, g=0, b=0)

    def test_from_sequence_rgb(self):
        assert Color.from_sequence((10, 20, 30)).as_tuple() == (10, 20, 30, 255)

    def test_from_sequence_numpy_row(self):
        row = np.array([10, 20, 30, 0], dtype=np.uint8)
        c = Color.from_sequence(row)
        assert c.as_tuple() == (10, 20, 30, 0)
        assert c.is_transparent

    def test_from_sequence_wrong_length(self):
        with pytest.raises(ValueError, match="3 or 4 channels"):
            Color.from_sequence((1, 2))
