"""Tests for color to intensity classification."""

import numpy as np
import pytest

from kmoni.image import (
    SHINDO_PALETTE,
    ColorClassifier,
    PaletteEntry,
    classify,
    intensity_to_shindo_class,
)
from kmoni.points import Color

pytestmark = pytest.mark.unit


class TestExactMatches:

    @pytest.mark.parametrize("entry", SHINDO_PALETTE, ids=lambda e: str(e.intensity))
    def test_every_reference_color_returns_its_intensity(self, entry):
        assert classify(entry.color) == entry.intensity

    def test_palette_is_ordered(self):
        values = [e.intensity for e in SHINDO_PALETTE]
        assert values == sorted(values)

    def test_intensity_three(self):
        assert classify(Color(r=255, g=215, b=0)) == 3.0


class TestUnclassifiable:

    def test_gray_is_off_scale(self):
        assert classify(Color(r=128, g=128, b=128)) is None

    def test_white_background(self):
        assert classify((255, 255, 255)) is None

    def test_transparent_pixel(self):
        assert classify(Color(r=255, g=215, b=0, a=0)) is None

    def test_zero_distance_only_exact(self):
        clf = ColorClassifier(max_distance=0.0)
        assert clf.classify((255, 215, 0)) == 3.0
        assert clf.classify((250, 215, 5)) is None


class TestInterpolation:

    def test_between_neighbours(self):
        # one fifth of the way from 3.0 (255,215,0) to 3.5 (255,175,0)
        assert classify((255, 207, 0)) == 3.1

    def test_near_miss_snaps_to_segment(self):
        assert classify((252, 215, 3)) == 3.0

    def test_nearest_mode(self):
        clf = ColorClassifier(interpolate=False)
        assert clf.classify((255, 207, 0)) == 3.0
        assert clf.classify((255, 180, 0)) == 3.5

    def test_accepts_numpy_rows(self):
        assert classify(np.array([255, 215, 0, 255], dtype=np.uint8)) == 3.0

    def test_callable(self):
        clf = ColorClassifier()
        assert clf((255, 215, 0)) == 3.0

    def test_custom_palette(self):
        palette = [
            PaletteEntry(Color(r=0, g=0, b=0), 0.0),
            PaletteEntry(Color(r=100, g=0, b=0), 10.0),
        ]
        clf = ColorClassifier(palette, decimals=2)
        assert clf.classify((25, 0, 0)) == 2.5

    def test_palette_needs_two_entries(self):
        with pytest.raises(ValueError):
            ColorClassifier(SHINDO_PALETTE[:1])

    def test_negative_distance_rejected(self):
        with pytest.raises(ValueError):
            ColorClassifier(max_distance=-1)


@pytest.mark.parametrize("value, label", [
    (None, None),
    (-3.0, "0"),
    (0.49, "0"),
    (0.5, "1"),
    (3.0, "3"),
    (4.5, "5-"),
    (5.2, "5+"),
    (5.9, "6-"),
    (6.4, "6+"),
    (6.5, "7"),
    (7.0, "7"),
])
def test_shindo_class(value, label):
    assert intensity_to_shindo_class(value) == label
