"""Color to intensity classification.

Maps a color sampled from a rendered intensity map back to the intensity
value that produced it, using a fixed reference palette.

Algorithm
---------
1. Fully transparent pixels carry no data: unclassifiable.
2. A color that exactly matches a palette entry returns that entry's value.
3. Otherwise the color is projected (in RGB space) onto every segment
   between neighbouring palette entries. The closest segment wins (ties go
   to the lower intensity) and the intensity is interpolated along it.
4. If even the closest segment is farther than ``max_distance``, the color
   is outside the scale (background, coastline, labels): unclassifiable.

Classification is pure and deterministic; the palette is never modified.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from kmoni.image.palette import DEFAULT_PALETTE, PaletteEntry
from kmoni.points.types import Color

__all__ = ['ColorClassifier', 'classify', 'intensity_to_shindo_class', 'DEFAULT_MAX_DISTANCE']

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE = 24.0

ColorLike = Union[Color, Sequence[int], np.ndarray]


class ColorClassifier:
    """Classifies colors against a reference palette.

    Parameters
    ----------
    palette : sequence of PaletteEntry, optional
        Reference colors ordered by intensity (default: realtime shindo scale).
    max_distance : float, optional
        Largest RGB distance from the scale that still counts as a match.
    interpolate : bool, optional
        If True (default), interpolate between neighbouring entries. If
        False, return the intensity of the nearest palette entry.
    decimals : int, optional
        Rounding applied to interpolated values (default 1).

    Examples
    --------
    >>> clf = ColorClassifier()
    >>> clf.classify(Color(r=255, g=215, b=0))
    3.0
    >>> clf.classify(Color(r=128, g=128, b=128)) is None
    True
    """

    def __init__(self, palette: Sequence[PaletteEntry] = DEFAULT_PALETTE,
                 max_distance: float = DEFAULT_MAX_DISTANCE,
                 interpolate: bool = True, decimals: int = 1):
        if len(palette) < 2:
            raise ValueError("Palette needs at least two entries")
        if max_distance < 0:
            raise ValueError(f"max_distance must be >= 0, got {max_distance}")

        self.palette = tuple(palette)
        self.max_distance = float(max_distance)
        self.interpolate = interpolate
        self.decimals = decimals

        self._exact = {(e.color.r, e.color.g, e.color.b): e.intensity for e in self.palette}
        self._colors = np.array(
            [[e.color.r, e.color.g, e.color.b] for e in self.palette], dtype=np.float64
        )
        self._intensities = np.array([e.intensity for e in self.palette], dtype=np.float64)

        self._seg_start = self._colors[:-1]
        self._seg_vec = self._colors[1:] - self._colors[:-1]
        self._seg_len2 = np.einsum("ij,ij->i", self._seg_vec, self._seg_vec)
        # Coincident neighbours would divide by zero; treat them as points
        self._seg_len2[self._seg_len2 == 0] = np.inf

    @staticmethod
    def _to_rgba(color: ColorLike) -> tuple:
        if isinstance(color, Color):
            return color.as_tuple()
        return Color.from_sequence(color).as_tuple()

    def classify(self, color: ColorLike) -> Optional[float]:
        """Return the intensity for ``color``, or None if unclassifiable."""
        r, g, b, a = self._to_rgba(color)
        if a == 0:
            return None

        exact = self._exact.get((r, g, b))
        if exact is not None:
            return exact

        rgb = np.array([r, g, b], dtype=np.float64)

        if not self.interpolate:
            dists = np.linalg.norm(self._colors - rgb, axis=1)
            idx = int(np.argmin(dists))
            if dists[idx] > self.max_distance:
                return None
            return float(self._intensities[idx])

        t = np.einsum("ij,ij->i", rgb - self._seg_start, self._seg_vec) / self._seg_len2
        t = np.clip(t, 0.0, 1.0)
        nearest = self._seg_start + t[:, None] * self._seg_vec
        dists = np.linalg.norm(nearest - rgb, axis=1)

        idx = int(np.argmin(dists))
        if dists[idx] > self.max_distance:
            return None

        low, high = self._intensities[idx], self._intensities[idx + 1]
        value = low + float(t[idx]) * (high - low)
        return round(float(value), self.decimals)

    def __call__(self, color: ColorLike) -> Optional[float]:
        return self.classify(color)


_DEFAULT_CLASSIFIER = ColorClassifier()


def classify(color: ColorLike) -> Optional[float]:
    """Classify ``color`` with the default realtime shindo palette."""
    return _DEFAULT_CLASSIFIER.classify(color)


# Upper bounds (exclusive) of each JMA intensity class
_SHINDO_CLASSES = (
    (0.5, "0"),
    (1.5, "1"),
    (2.5, "2"),
    (3.5, "3"),
    (4.5, "4"),
    (5.0, "5-"),
    (5.5, "5+"),
    (6.0, "6-"),
    (6.5, "6+"),
)


def intensity_to_shindo_class(value: Optional[float]) -> Optional[str]:
    """Map a continuous intensity to its JMA seismic intensity class label.

    >>> intensity_to_shindo_class(4.7)
    '5-'
    >>> intensity_to_shindo_class(-1.2)
    '0'
    """
    if value is None:
        return None
    for upper, label in _SHINDO_CLASSES:
        if value < upper:
            return label
    return "7"
