"""JSON registry format.

The registry is a JSON array of point objects using the model's field
names. Validation is all-or-nothing: one invalid record fails the load.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import TypeAdapter, ValidationError

from kmoni.codec.errors import CodecFatalError
from kmoni.points.observation_point import ObservationPoint

__all__ = ['dumps_json', 'loads_json', 'save_json', 'load_json']

logger = logging.getLogger(__name__)

_POINTS_ADAPTER = TypeAdapter(List[ObservationPoint])


def dumps_json(points: Iterable[ObservationPoint], indent: int = 2) -> str:
    return _POINTS_ADAPTER.dump_json(list(points), indent=indent).decode("utf-8")


def loads_json(text: Union[str, bytes]) -> List[ObservationPoint]:
    """Decode a JSON registry.

    Raises
    ------
    CodecFatalError
        If the document is not valid JSON or any record fails validation.
    """
    try:
        return _POINTS_ADAPTER.validate_json(text)
    except ValidationError as e:
        raise CodecFatalError(f"Invalid JSON registry: {e.error_count()} error(s): {e}") from e


def load_json(path: Union[str, Path], encoding: str = "utf-8") -> List[ObservationPoint]:
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeError, LookupError) as e:
        raise CodecFatalError(f"Cannot read registry {path}: {e}") from e
    points = loads_json(text)
    logger.info("Loaded %d points from %s", len(points), path.name)
    return points


def save_json(points: Iterable[ObservationPoint], path: Union[str, Path],
              encoding: str = "utf-8") -> int:
    points = list(points)
    text = dumps_json(points)
    path = Path(path)
    try:
        path.write_text(text, encoding=encoding)
    except (OSError, UnicodeError, LookupError) as e:
        raise CodecFatalError(f"Cannot write registry {path}: {e}") from e
    logger.info("Saved %d points to %s", len(points), path.name)
    return len(points)
