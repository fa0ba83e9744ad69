"""Sorted, code-keyed collection of observation points.

The registry keeps points ordered by ``code`` at all times, so iteration
order matches the order the original registry files are written in and
lookups are a binary search.

Notes
-----
- Reads (iteration, lookup) are safe from several decode passes at once
- Structural changes (add, upsert, remove) are NOT synchronized; callers
  that mutate a shared registry must hold their own lock
"""

import bisect
import logging
from typing import Iterable, Iterator, List, Optional

from kmoni.points.observation_point import ObservationPoint

__all__ = ['ObservationPointRegistry', 'DuplicatePointError']

logger = logging.getLogger(__name__)


class DuplicatePointError(KeyError):
    """Raised when adding a point whose code is already registered."""
    pass


class ObservationPointRegistry:
    """Ordered set of ObservationPoint keyed by ``code``.

    Examples
    --------
    >>> registry = ObservationPointRegistry.from_points(points)
    >>> "TKY007" in registry
    True
    >>> [p.code for p in registry]  # always sorted
    ['AIC001', 'TKY007']
    """

    def __init__(self, points: Optional[Iterable[ObservationPoint]] = None):
        self._codes: List[str] = []
        self._points: List[ObservationPoint] = []
        for point in points or ():
            self.add(point)

    @classmethod
    def from_points(cls, points: Iterable[ObservationPoint],
                    replace_duplicates: bool = False) -> "ObservationPointRegistry":
        """Build a registry from any iterable of points.

        Parameters
        ----------
        points : iterable of ObservationPoint
            Points in any order.
        replace_duplicates : bool, optional
            If True, a later point with an already-seen code replaces the
            earlier one. If False (default), duplicates raise.

        Raises
        ------
        DuplicatePointError
            If two points share a code and replace_duplicates is False.
        """
        registry = cls()
        for point in points:
            if replace_duplicates:
                registry.upsert(point)
            else:
                registry.add(point)
        return registry

    def _index(self, code: str) -> int:
        idx = bisect.bisect_left(self._codes, code)
        if idx < len(self._codes) and self._codes[idx] == code:
            return idx
        return -1

    def add(self, point: ObservationPoint) -> None:
        """Insert a new point in code order.

        Raises
        ------
        DuplicatePointError
            If a point with the same code is already registered.
        """
        idx = bisect.bisect_left(self._codes, point.code)
        if idx < len(self._codes) and self._codes[idx] == point.code:
            raise DuplicatePointError(f"Observation point already registered: {point.code}")
        self._codes.insert(idx, point.code)
        self._points.insert(idx, point)

    def upsert(self, point: ObservationPoint) -> bool:
        """Insert or replace a point. Returns True if an existing point was replaced."""
        idx = self._index(point.code)
        if idx >= 0:
            logger.debug("Replacing observation point %s", point.code)
            self._points[idx] = point
            return True
        self.add(point)
        return False

    def get(self, code: str) -> Optional[ObservationPoint]:
        idx = self._index(code)
        return self._points[idx] if idx >= 0 else None

    def remove(self, code: str) -> ObservationPoint:
        """Remove and return the point with this code.

        Raises
        ------
        KeyError
            If no such point is registered.
        """
        idx = self._index(code)
        if idx < 0:
            raise KeyError(code)
        del self._codes[idx]
        return self._points.pop(idx)

    def points(self) -> List[ObservationPoint]:
        """Return a list copy of all points in code order."""
        return list(self._points)

    def codes(self) -> List[str]:
        return list(self._codes)

    def active(self) -> List[ObservationPoint]:
        """Points that are not suspended."""
        return [p for p in self._points if not p.is_suspended]

    def suspended(self) -> List[ObservationPoint]:
        return [p for p in self._points if p.is_suspended]

    def mapped(self) -> List[ObservationPoint]:
        """Points that have a pixel coordinate on the map image."""
        return [p for p in self._points if p.point is not None]

    def __getitem__(self, code: str) -> ObservationPoint:
        idx = self._index(code)
        if idx < 0:
            raise KeyError(code)
        return self._points[idx]

    def __contains__(self, code) -> bool:
        if isinstance(code, ObservationPoint):
            code = code.code
        return self._index(code) >= 0

    def __iter__(self) -> Iterator[ObservationPoint]:
        return iter(list(self._points))

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ObservationPointRegistry):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"ObservationPointRegistry({len(self)} points)"
