"""Observation point records and registry."""

from kmoni.points.types import GeoLocation, PixelCoordinate, Color
from kmoni.points.observation_point import ObservationPoint, ObservationPointType
from kmoni.points.registry import ObservationPointRegistry, DuplicatePointError

__all__ = [
    'GeoLocation',
    'PixelCoordinate',
    'Color',
    'ObservationPoint',
    'ObservationPointType',
    'ObservationPointRegistry',
    'DuplicatePointError',
]
