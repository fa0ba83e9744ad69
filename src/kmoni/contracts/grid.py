"""Pixel grid contract.

Enforces that an image handed to the decoder is a 2-D RGBA grid.
"""

import numpy as np
import xarray as xr

from kmoni.contracts.base import require

PIXEL_GRID_DIMS = ("y", "x", "channel")


def assert_pixel_grid(grid: xr.DataArray) -> None:
    """Enforce pixel grid contract.

    Called by the decoder after normalization, before any station is
    sampled.

    Parameters
    ----------
    grid : xr.DataArray
        Normalized grid from ``as_pixel_grid``.

    Raises
    ------
    ContractViolation
        If the grid is not a (y, x, channel) uint8 array with 4 channels.
    """
    require(
        isinstance(grid, xr.DataArray),
        f"Pixel grid contract violated: got {type(grid).__name__}, expected DataArray"
    )
    require(
        grid.dims == PIXEL_GRID_DIMS,
        f"Pixel grid contract violated: dims are {grid.dims}, expected {PIXEL_GRID_DIMS}"
    )
    require(
        grid.sizes["channel"] == 4,
        f"Pixel grid contract violated: {grid.sizes['channel']} channels, expected 4 (RGBA)"
    )
    require(
        grid.dtype == np.uint8,
        f"Pixel grid contract violated: dtype is {grid.dtype}, expected uint8"
    )
