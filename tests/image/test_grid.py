"""Tests for pixel grid normalization and image decoding."""

import numpy as np
import pytest
import xarray as xr

from kmoni.contracts import ContractViolation
from kmoni.image import ImageDecodeError, as_pixel_grid, decode_image

from tests.helpers.fake_grid import encode_png

pytestmark = pytest.mark.unit


class TestAsPixelGrid:

    def test_rgb_gets_opaque_alpha(self):
        grid = as_pixel_grid(np.zeros((3, 4, 3), dtype=np.uint8))
        assert grid.dims == ("y", "x", "channel")
        assert grid.shape == (3, 4, 4)
        assert (grid.sel(channel="a") == 255).all()

    def test_int_dtype_in_range_is_cast(self):
        grid = as_pixel_grid(np.full((2, 2, 4), 200, dtype=np.int64))
        assert grid.dtype == np.uint8

    def test_out_of_range_values_rejected(self):
        with pytest.raises(ContractViolation, match="8-bit"):
            as_pixel_grid(np.full((2, 2, 3), 300, dtype=np.int32))

    def test_float_rejected(self):
        with pytest.raises(ContractViolation):
            as_pixel_grid(np.zeros((2, 2, 3), dtype=np.float32))

    def test_wrong_shape_rejected(self):
        with pytest.raises(ContractViolation, match="shape"):
            as_pixel_grid(np.zeros((4, 4), dtype=np.uint8))

    def test_dataarray_is_transposed(self, make_grid):
        arr = make_grid(width=5, height=3, pixels={(4, 1): (1, 2, 3)})
        da = xr.DataArray(arr, dims=("y", "x", "channel")).transpose("channel", "x", "y")
        grid = as_pixel_grid(da, attrs={"timestamp": "t"})
        assert grid.dims == ("y", "x", "channel")
        assert tuple(grid.values[1, 4]) == (1, 2, 3, 255)
        assert grid.attrs["timestamp"] == "t"


class TestDecodeImage:

    def test_png_bytes(self, make_grid):
        arr = make_grid(width=6, height=4, pixels={(2, 3): (255, 215, 0)})
        grid = decode_image(encode_png(arr), attrs={"data_kind": "jma"})
        assert grid.shape == (4, 6, 4)
        assert tuple(grid.values[3, 2]) == (255, 215, 0, 255)
        assert grid.attrs["format"] == "PNG"
        assert grid.attrs["data_kind"] == "jma"

    def test_garbage_bytes(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"not an image")
