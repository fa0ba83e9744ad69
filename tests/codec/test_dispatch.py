"""Tests for suffix-based registry format dispatch."""

import pytest

from kmoni.codec import detect_format, load_points, save_points

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("name, fmt", [
    ("points.csv", "csv"),
    ("POINTS.TXT", "csv"),
    ("points.pbf", "pbf"),
    ("points.bin", "pbf"),
    ("points.json", "json"),
])
def test_detect_format(name, fmt):
    assert detect_format(name) == fmt


def test_detect_format_unknown():
    with pytest.raises(ValueError, match="suffix"):
        detect_format("points.xlsx")


@pytest.mark.parametrize("name", ["points.csv", "points.pbf", "points.json"])
def test_save_load_each_format(temp_dir, sample_points, name):
    path = temp_dir / name
    assert save_points(sample_points, path) == 3
    result = load_points(path)
    assert result.points == sample_points
    assert (result.success, result.error) == (3, 0)


def test_explicit_format_overrides_suffix(temp_dir, sample_points):
    path = temp_dir / "points.dat"
    save_points(sample_points, path, format="pbf")
    assert load_points(path, format="pbf").points == sample_points


def test_csv_errors_reported(temp_dir):
    path = temp_dir / "points.csv"
    path.write_text("2,A001,False,a,r,35.0,139.0,1,2\ngarbage\n", encoding="utf-8")
    result = load_points(path)
    assert (result.success, result.error) == (1, 1)
