"""Result export to pandas DataFrames and files."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Sequence, Tuple, Union

import pandas as pd

from kmoni.image.analysis import AnalysisResult

__all__ = ['RESULT_COLUMNS', 'results_to_dataframe', 'cycles_to_dataframe', 'save_results']

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "code", "name", "region", "type", "suspended",
    "latitude", "longitude", "x", "y",
    "r", "g", "b", "a",
    "intensity", "shindo_class", "status", "error",
]


def _result_row(result: AnalysisResult) -> dict:
    point = result.point
    pixel = point.point
    color = result.color
    return {
        "code": point.code,
        "name": point.name,
        "region": point.region,
        "type": int(point.type),
        "suspended": point.is_suspended,
        "latitude": point.location.latitude,
        "longitude": point.location.longitude,
        "x": pixel.x if pixel is not None else None,
        "y": pixel.y if pixel is not None else None,
        "r": color.r if color is not None else None,
        "g": color.g if color is not None else None,
        "b": color.b if color is not None else None,
        "a": color.a if color is not None else None,
        "intensity": result.intensity,
        "shindo_class": result.shindo_class,
        "status": result.status.value,
        "error": result.error,
    }


def results_to_dataframe(results: Sequence[AnalysisResult]) -> pd.DataFrame:
    """One row per result, in result order.

    Pixel and color columns use pandas nullable integers so stations
    without a mapping or sample keep ``<NA>`` rather than turning floats.
    """
    df = pd.DataFrame([_result_row(r) for r in results], columns=RESULT_COLUMNS)
    for col in ("x", "y", "r", "g", "b", "a"):
        df[col] = df[col].astype("Int64")
    df["intensity"] = df["intensity"].astype("float64")
    return df


def save_results(results: Union[Sequence[AnalysisResult], pd.DataFrame],
                 path: Union[str, Path], compression: str = "snappy") -> Path:
    """Write results to Parquet, or CSV when ``path`` ends in ``.csv``.

    Parameters
    ----------
    results : sequence of AnalysisResult or pd.DataFrame
        Results to write. A DataFrame is written as-is.
    path : str or Path
        Output file. Parent directories are created.
    compression : str, optional
        Parquet compression codec ("snappy", "gzip", "lz4" or "none").

    Returns
    -------
    Path
        The written file.
    """
    df = results if isinstance(results, pd.DataFrame) else results_to_dataframe(results)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        df.to_parquet(path, engine='pyarrow',
                      compression=None if compression == "none" else compression,
                      index=False)

    logger.info("Saved %d results to %s", len(df), path)
    return path


def cycles_to_dataframe(cycles: Sequence[Tuple[datetime, Sequence[AnalysisResult]]]) -> pd.DataFrame:
    """Stack several decoding cycles into one frame with a ``timestamp`` column."""
    frames = []
    for timestamp, results in cycles:
        df = results_to_dataframe(results)
        df.insert(0, "timestamp", pd.Timestamp(timestamp))
        frames.append(df)
    if not frames:
        return pd.DataFrame(columns=["timestamp"] + RESULT_COLUMNS)
    return pd.concat(frames, ignore_index=True)
