"""Reference color table for the realtime intensity map.

The kyoshin monitor renders realtime seismic intensity on a continuous
color scale running from deep blue (-3.0) through green and yellow to dark
red (7.0). This table samples that scale every 0.5 intensity units; the
classifier interpolates between neighbouring entries.

The table is static configuration and must stay ordered by intensity.
"""

from typing import NamedTuple, Tuple

from kmoni.points.types import Color

__all__ = ['PaletteEntry', 'SHINDO_PALETTE', 'DEFAULT_PALETTE']


class PaletteEntry(NamedTuple):
    color: Color
    intensity: float


def _entry(r: int, g: int, b: int, intensity: float) -> PaletteEntry:
    return PaletteEntry(Color(r=r, g=g, b=b), intensity)


SHINDO_PALETTE: Tuple[PaletteEntry, ...] = (
    _entry(0, 0, 205, -3.0),
    _entry(0, 32, 240, -2.5),
    _entry(0, 72, 250, -2.0),
    _entry(0, 120, 255, -1.5),
    _entry(0, 170, 255, -1.0),
    _entry(0, 215, 240, -0.5),
    _entry(0, 245, 200, 0.0),
    _entry(30, 255, 130, 0.5),
    _entry(90, 255, 60, 1.0),
    _entry(160, 255, 10, 1.5),
    _entry(210, 255, 0, 2.0),
    _entry(245, 245, 0, 2.5),
    _entry(255, 215, 0, 3.0),
    _entry(255, 175, 0, 3.5),
    _entry(255, 135, 0, 4.0),
    _entry(255, 95, 0, 4.5),
    _entry(255, 50, 0, 5.0),
    _entry(245, 10, 0, 5.5),
    _entry(215, 0, 0, 6.0),
    _entry(185, 0, 20, 6.5),
    _entry(160, 0, 40, 7.0),
)

DEFAULT_PALETTE = SHINDO_PALETTE
