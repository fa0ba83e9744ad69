import io

import numpy as np
from PIL import Image


def make_rgba_grid(width=40, height=30, fill=(255, 255, 255, 255), pixels=None):
    """
    Create a (height, width, 4) uint8 array filled with ``fill``.

    ``pixels`` maps (x, y) to an RGB or RGBA tuple to paint at that spot.
    """
    if len(fill) == 3:
        fill = tuple(fill) + (255,)
    grid = np.empty((height, width, 4), dtype=np.uint8)
    grid[:, :] = fill

    for (x, y), color in (pixels or {}).items():
        if len(color) == 3:
            color = tuple(color) + (255,)
        grid[y, x] = color

    return grid


def encode_png(grid):
    """Encode an RGBA array as PNG bytes, the way a map image arrives."""
    buf = io.BytesIO()
    Image.fromarray(np.asarray(grid, dtype=np.uint8)).save(buf, format="PNG")
    return buf.getvalue()
