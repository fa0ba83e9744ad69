"""Tests for result export."""

from datetime import datetime

import pandas as pd
import pytest

from kmoni.image import parse_intensity_from_image
from kmoni.pipeline import RESULT_COLUMNS, cycles_to_dataframe, results_to_dataframe, save_results
from kmoni.web import JST

pytestmark = pytest.mark.unit


@pytest.fixture
def results(sample_points, make_grid):
    grid = make_grid(width=40, height=30, pixels={(10, 20): (255, 215, 0)})
    return parse_intensity_from_image(sample_points, grid)


def test_one_row_per_result(results):
    df = results_to_dataframe(results)
    assert list(df.columns) == RESULT_COLUMNS
    assert list(df["code"]) == ["A001", "A002", "B001"]

    row = df.iloc[0]
    assert row["intensity"] == 3.0
    assert row["shindo_class"] == "3"
    assert row["status"] == "classified"
    assert (row["r"], row["g"], row["b"], row["a"]) == (255, 215, 0, 255)
    assert row["type"] == 2


def test_missing_values_are_na(results):
    df = results_to_dataframe(results)
    assert pd.isna(df.loc[1, "x"])
    assert pd.isna(df.loc[1, "r"])
    assert pd.isna(df.loc[1, "intensity"])
    assert df["x"].dtype == "Int64"


def test_empty():
    df = results_to_dataframe([])
    assert df.empty
    assert list(df.columns) == RESULT_COLUMNS


def test_cycles_stack_with_timestamp(results):
    t0 = datetime(2024, 1, 1, 16, 10, 0, tzinfo=JST)
    t1 = datetime(2024, 1, 1, 16, 10, 1, tzinfo=JST)
    df = cycles_to_dataframe([(t0, results), (t1, results)])
    assert len(df) == 6
    assert df.columns[0] == "timestamp"
    assert df["timestamp"].nunique() == 2


def test_save_parquet(temp_dir, results):
    path = save_results(results, temp_dir / "out" / "results.parquet")
    df = pd.read_parquet(path)
    assert list(df["code"]) == ["A001", "A002", "B001"]
    assert df.loc[0, "intensity"] == 3.0


def test_save_parquet_uncompressed(temp_dir, results):
    path = save_results(results, temp_dir / "results.parquet", compression="none")
    assert len(pd.read_parquet(path)) == 3


def test_save_csv(temp_dir, results):
    path = save_results(results, temp_dir / "results.csv")
    df = pd.read_csv(path)
    assert list(df["status"]) == ["classified", "skipped", "skipped"]
