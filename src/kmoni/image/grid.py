"""Pixel grid handling.

The decoder works on a single representation: an ``xarray.DataArray`` of
uint8 with dims ``(y, x, channel)`` and channels ``r, g, b, a``. This module
turns numpy arrays, other DataArrays, and raw image bytes (GIF/PNG as served
by the map service) into that form.
"""

import io
import logging
from typing import Any, Dict, Optional, Union

import numpy as np
import xarray as xr
from PIL import Image, UnidentifiedImageError

from kmoni.contracts import require
from kmoni.contracts.grid import PIXEL_GRID_DIMS

__all__ = ['ImageDecodeError', 'as_pixel_grid', 'decode_image', 'CHANNELS']

logger = logging.getLogger(__name__)

CHANNELS = ["r", "g", "b", "a"]


class ImageDecodeError(ValueError):
    """Raised when image bytes cannot be decoded into a pixel grid."""
    pass


def _to_rgba_array(arr: np.ndarray) -> np.ndarray:
    require(
        arr.ndim == 3 and arr.shape[2] in (3, 4),
        f"Pixel grid contract violated: shape {arr.shape}, expected (height, width, 3|4)"
    )
    if arr.dtype != np.uint8:
        require(
            arr.dtype.kind in "iu" and (arr.size == 0 or (arr.min() >= 0 and arr.max() <= 255)),
            f"Pixel grid contract violated: dtype {arr.dtype} cannot be read as 8-bit channels"
        )
        arr = arr.astype(np.uint8)
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    return arr


def as_pixel_grid(grid: Union[np.ndarray, xr.DataArray],
                  attrs: Optional[Dict[str, Any]] = None) -> xr.DataArray:
    """Normalize an image array into the decoder's pixel grid.

    Parameters
    ----------
    grid : np.ndarray or xr.DataArray
        ``(height, width, 3|4)`` array of 8-bit channels. A DataArray whose
        dims include ``y``, ``x`` and ``channel`` is transposed into that
        order first. RGB input gets an opaque alpha channel.
    attrs : dict, optional
        Metadata to attach (e.g. timestamp, data kind).

    Returns
    -------
    xr.DataArray
        uint8 grid with dims ``(y, x, channel)``.

    Raises
    ------
    ContractViolation
        If the input cannot be interpreted as an RGB/RGBA image.
    """
    merged_attrs = {}
    if isinstance(grid, xr.DataArray):
        if set(PIXEL_GRID_DIMS) <= set(grid.dims):
            grid = grid.transpose(*PIXEL_GRID_DIMS)
        merged_attrs.update(grid.attrs)
        arr = np.asarray(grid.values)
    else:
        arr = np.asarray(grid)
    merged_attrs.update(attrs or {})

    arr = _to_rgba_array(arr)
    height, width = arr.shape[:2]
    return xr.DataArray(
        arr,
        dims=PIXEL_GRID_DIMS,
        coords={
            "y": np.arange(height),
            "x": np.arange(width),
            "channel": CHANNELS,
        },
        attrs=merged_attrs,
    )


def decode_image(data: bytes, attrs: Optional[Dict[str, Any]] = None) -> xr.DataArray:
    """Decode GIF/PNG bytes into an RGBA pixel grid.

    Raises
    ------
    ImageDecodeError
        If Pillow cannot identify or read the image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            rgba = np.asarray(img.convert("RGBA"))
            fmt = img.format
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Cannot decode image ({len(data)} bytes): {e}") from e

    logger.debug("Decoded %s image %dx%d", fmt, rgba.shape[1], rgba.shape[0])
    merged = {"format": fmt or "unknown"}
    merged.update(attrs or {})
    return as_pixel_grid(rgba, attrs=merged)
