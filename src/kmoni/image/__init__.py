"""Map image decoding: pixel grids, color classification, per-station analysis."""

from kmoni.image.palette import PaletteEntry, SHINDO_PALETTE, DEFAULT_PALETTE
from kmoni.image.classifier import ColorClassifier, classify, intensity_to_shindo_class
from kmoni.image.grid import ImageDecodeError, as_pixel_grid, decode_image
from kmoni.image.analysis import (
    AnalysisResult,
    AnalysisStatus,
    SampleFailure,
    SampleOutOfBounds,
    parse_intensity_from_image,
    summarize_results,
)

__all__ = [
    'PaletteEntry',
    'SHINDO_PALETTE',
    'DEFAULT_PALETTE',
    'ColorClassifier',
    'classify',
    'intensity_to_shindo_class',
    'ImageDecodeError',
    'as_pixel_grid',
    'decode_image',
    'AnalysisResult',
    'AnalysisStatus',
    'SampleFailure',
    'SampleOutOfBounds',
    'parse_intensity_from_image',
    'summarize_results',
]
