"""Immutable value types shared by the registry and the image decoder.

GeoLocation and PixelCoordinate describe where a station is, on the ground
and on the rendered map image. Color is a single RGBA sample taken from
that image.
"""

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

__all__ = ['GeoLocation', 'PixelCoordinate', 'Color']


class _FrozenValue(BaseModel):
    """Base for small hashable value objects."""

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
    )


class GeoLocation(_FrozenValue):
    """Geographic position in decimal degrees."""
    latitude: FiniteFloat
    longitude: FiniteFloat


class PixelCoordinate(_FrozenValue):
    """Integer pixel position on a map image, origin at the top-left."""
    x: int = Field(ge=0)
    y: int = Field(ge=0)


class Color(_FrozenValue):
    """8-bit RGBA color. Alpha defaults to fully opaque."""
    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)
    a: int = Field(255, ge=0, le=255)

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "Color":
        """Build a Color from 3 (RGB) or 4 (RGBA) channel values.

        Accepts tuples, lists and numpy rows such as ``grid[y, x]``.
        """
        channels = [int(v) for v in values]
        if len(channels) == 3:
            r, g, b = channels
            return cls(r=r, g=g, b=b)
        if len(channels) == 4:
            r, g, b, a = channels
            return cls(r=r, g=g, b=b, a=a)
        raise ValueError(f"Expected 3 or 4 channels, got {len(channels)}")

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    @property
    def is_transparent(self) -> bool:
        return self.a == 0
