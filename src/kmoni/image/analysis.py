"""Per-station intensity decoding.

For each observation point, reads the map pixel at the station's registered
coordinate and classifies its color into an intensity value.

Every entry ends in exactly one terminal state:

- SKIPPED: no pixel coordinate, or the station is suspended. The grid is
  never touched for these.
- CLASSIFIED: pixel read and matched to the intensity scale.
- UNCLASSIFIABLE: pixel read but its color is not on the scale.
- SAMPLE_FAILED: the pixel could not be read (e.g. coordinate outside the
  image). Logged and recorded on the result; the batch carries on.

One bad station never invalidates the rest of the batch. The output always
has one result per input entry, in input order.
"""

import logging
from collections import Counter
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import xarray as xr
from pydantic import BaseModel, ConfigDict

from kmoni.contracts import assert_analysis_output, assert_pixel_grid
from kmoni.image.classifier import ColorClassifier, intensity_to_shindo_class
from kmoni.image.grid import as_pixel_grid
from kmoni.points.observation_point import ObservationPoint
from kmoni.points.types import Color

__all__ = [
    'AnalysisStatus',
    'AnalysisResult',
    'SampleFailure',
    'SampleOutOfBounds',
    'sample_pixel',
    'parse_intensity_from_image',
    'summarize_results',
]

logger = logging.getLogger(__name__)

_DEFAULT_CLASSIFIER = ColorClassifier()


class AnalysisStatus(str, Enum):
    """Lifecycle of one AnalysisResult within a decoding pass."""
    PENDING = "pending"
    SKIPPED = "skipped"
    CLASSIFIED = "classified"
    UNCLASSIFIABLE = "unclassifiable"
    SAMPLE_FAILED = "sample_failed"


class SampleFailure(Exception):
    """A station pixel could not be read from the grid."""
    pass


class SampleOutOfBounds(SampleFailure):
    """The station pixel lies outside the grid."""
    pass


class AnalysisResult(BaseModel):
    """Decoded intensity for one observation point.

    ``point`` refers to the caller's ObservationPoint; it is not copied.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
    )

    point: ObservationPoint
    color: Optional[Color] = None
    intensity: Optional[float] = None
    status: AnalysisStatus = AnalysisStatus.PENDING
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != AnalysisStatus.PENDING

    @property
    def shindo_class(self) -> Optional[str]:
        """JMA intensity class label for the decoded intensity."""
        return intensity_to_shindo_class(self.intensity)


def sample_pixel(values: np.ndarray, x: int, y: int) -> Color:
    """Read the RGBA color at (x, y) from a (height, width, 4) array.

    Raises
    ------
    SampleOutOfBounds
        If (x, y) lies outside the array. Negative indices are rejected
        rather than wrapped.
    """
    height, width = values.shape[:2]
    if not (0 <= x < width and 0 <= y < height):
        raise SampleOutOfBounds(f"pixel ({x}, {y}) outside {width}x{height} grid")
    return Color.from_sequence(values[y, x])


def _wrap(entry: Union[ObservationPoint, AnalysisResult]) -> AnalysisResult:
    # Results from an earlier pass may already be held by a consumer
    if isinstance(entry, AnalysisResult):
        return AnalysisResult(point=entry.point)
    if isinstance(entry, ObservationPoint):
        return AnalysisResult(point=entry)
    raise TypeError(f"Expected ObservationPoint or AnalysisResult, got {type(entry).__name__}")


def _analyze_one(result: AnalysisResult, values: np.ndarray,
                 classifier: ColorClassifier) -> None:
    point = result.point
    if point.point is None or point.is_suspended:
        result.status = AnalysisStatus.SKIPPED
        return

    try:
        color = sample_pixel(values, point.point.x, point.point.y)
        intensity = classifier.classify(color)
    except SampleFailure as e:
        logger.debug("Sample failed for %s: %s", point.code, e)
        result.status = AnalysisStatus.SAMPLE_FAILED
        result.error = str(e)
        return
    except Exception as e:
        logger.warning("Unexpected error sampling %s: %s", point.code, e, exc_info=True)
        result.status = AnalysisStatus.SAMPLE_FAILED
        result.error = f"{type(e).__name__}: {e}"
        return

    result.color = color
    result.intensity = intensity
    result.status = (AnalysisStatus.CLASSIFIED if intensity is not None
                     else AnalysisStatus.UNCLASSIFIABLE)


def parse_intensity_from_image(
    entries: Sequence[Union[ObservationPoint, AnalysisResult]],
    grid: Union[np.ndarray, xr.DataArray],
    classifier: Optional[ColorClassifier] = None,
) -> List[AnalysisResult]:
    """Decode per-station intensities from a map image.

    Parameters
    ----------
    entries : sequence of ObservationPoint or AnalysisResult
        Stations to decode. Every entry gets a fresh result; an existing
        result contributes only its point and is left untouched.
    grid : np.ndarray or xr.DataArray
        The rendered map, ``(height, width, 3|4)`` 8-bit channels, already
        decoded from its image format.
    classifier : ColorClassifier, optional
        Color classifier (default: realtime shindo palette).

    Returns
    -------
    list of AnalysisResult
        One result per entry, in input order.

    Raises
    ------
    ContractViolation
        If ``grid`` is not a usable RGB/RGBA image. Per-station problems never
        raise.

    Examples
    --------
    >>> results = parse_intensity_from_image(registry, grid)
    >>> {r.point.code: r.intensity for r in results}
    {'A001': 3.0, 'A002': None}
    """
    classifier = classifier or _DEFAULT_CLASSIFIER
    entries = list(entries)
    pixel_grid = as_pixel_grid(grid)
    assert_pixel_grid(pixel_grid)
    values = pixel_grid.values

    results = [_wrap(entry) for entry in entries]
    for result in results:
        _analyze_one(result, values, classifier)

    assert_analysis_output(results, len(entries))

    counts = summarize_results(results)
    failed = counts.get(AnalysisStatus.SAMPLE_FAILED.value, 0)
    if failed:
        logger.warning("Decoded %d stations, %d could not be sampled", len(results), failed)
    logger.debug("Decode summary: %s", counts)
    return results


def summarize_results(results: Sequence[AnalysisResult]) -> Dict[str, int]:
    """Count results per status value."""
    return dict(Counter(r.status.value for r in results))
