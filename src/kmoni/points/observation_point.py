"""Observation point record.

An observation point is one strong-motion station: its network, code,
human-readable names, geographic location and (optionally) the pixel it
occupies on the rendered kyoshin monitor map. Points order by ``code``.
"""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from kmoni.points.types import GeoLocation, PixelCoordinate

__all__ = ['ObservationPointType', 'ObservationPoint']


class ObservationPointType(IntEnum):
    """Network the station belongs to. Values are stored in registry files."""
    UNKNOWN = 0
    KIK_NET = 1
    K_NET = 2


class ObservationPoint(BaseModel):
    """A single station in the registry.

    Fields other than ``code`` can be reassigned after construction and
    every assignment is validated. ``code`` is the registry key and is
    fixed once the point exists.

    Examples
    --------
    >>> p = ObservationPoint(
    ...     type=ObservationPointType.K_NET,
    ...     code="TKY007",
    ...     name="Shinjuku",
    ...     region="Tokyo",
    ...     location=GeoLocation(latitude=35.6895, longitude=139.6917),
    ...     point=PixelCoordinate(x=243, y=221),
    ... )
    >>> p.is_mapped
    True
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
    )

    type: ObservationPointType = ObservationPointType.UNKNOWN
    code: str = Field(min_length=1, frozen=True)
    name: str = ""
    region: str = ""
    is_suspended: bool = False
    location: GeoLocation
    point: Optional[PixelCoordinate] = None
    classification_id: Optional[int] = None
    prefecture_classification_id: Optional[int] = None

    @property
    def is_mapped(self) -> bool:
        """True when the station has a pixel position on the map image."""
        return self.point is not None

    @property
    def is_sampleable(self) -> bool:
        """True when the decoder should read a pixel for this station."""
        return self.point is not None and not self.is_suspended

    # Ordering is by code only; equality stays field-wise.
    def __lt__(self, other):
        if not isinstance(other, ObservationPoint):
            return NotImplemented
        return self.code < other.code

    def __le__(self, other):
        if not isinstance(other, ObservationPoint):
            return NotImplemented
        return self.code <= other.code

    def __gt__(self, other):
        if not isinstance(other, ObservationPoint):
            return NotImplemented
        return self.code > other.code

    def __ge__(self, other):
        if not isinstance(other, ObservationPoint):
            return NotImplemented
        return self.code >= other.code

    def __repr__(self) -> str:
        return f"ObservationPoint(code={self.code!r}, name={self.name!r}, point={self.point})"
