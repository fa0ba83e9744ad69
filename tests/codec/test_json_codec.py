"""Tests for the JSON registry codec."""

import json

import pytest

from kmoni.codec import CodecFatalError, dumps_json, load_json, loads_json, save_json

pytestmark = pytest.mark.unit


def test_round_trip(sample_points):
    assert loads_json(dumps_json(sample_points)) == sample_points


def test_document_shape(sample_points):
    doc = json.loads(dumps_json(sample_points))
    assert isinstance(doc, list)
    assert doc[0]["code"] == "A001"
    assert doc[0]["type"] == 2
    assert doc[0]["point"] == {"x": 10, "y": 20}
    assert doc[1]["point"] is None


def test_invalid_record_is_fatal(sample_points):
    doc = json.loads(dumps_json(sample_points))
    doc[1]["location"]["latitude"] = "north"
    with pytest.raises(CodecFatalError):
        loads_json(json.dumps(doc))


def test_not_json_is_fatal():
    with pytest.raises(CodecFatalError):
        loads_json("{not json")


def test_save_and_load(temp_dir, sample_points):
    path = temp_dir / "points.json"
    assert save_json(sample_points, path) == 3
    assert load_json(path) == sample_points
