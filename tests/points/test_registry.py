"""Tests for the sorted, uniquely keyed point registry."""

import pytest
from pydantic import ValidationError

from kmoni.points import DuplicatePointError, ObservationPointRegistry

pytestmark = pytest.mark.unit


class TestRegistryOrdering:

    def test_iterates_in_code_order(self, make_point):
        reg = ObservationPointRegistry.from_points(
            [make_point("C"), make_point("A"), make_point("B")]
        )
        assert [p.code for p in reg] == ["A", "B", "C"]
        assert reg.codes() == ["A", "B", "C"]

    def test_add_keeps_order(self, make_point):
        reg = ObservationPointRegistry([make_point("A"), make_point("C")])
        reg.add(make_point("B"))
        assert reg.codes() == ["A", "B", "C"]


class TestRegistryUniqueness:

    def test_add_duplicate_raises(self, make_point):
        reg = ObservationPointRegistry([make_point("A")])
        with pytest.raises(DuplicatePointError):
            reg.add(make_point("A", name="other"))
        assert len(reg) == 1

    def test_from_points_duplicates_raise_by_default(self, make_point):
        with pytest.raises(DuplicatePointError):
            ObservationPointRegistry.from_points([make_point("A"), make_point("A")])

    def test_from_points_replace_duplicates_keeps_last(self, make_point):
        reg = ObservationPointRegistry.from_points(
            [make_point("A", name="first"), make_point("A", name="second")],
            replace_duplicates=True,
        )
        assert len(reg) == 1
        assert reg["A"].name == "second"

    def test_upsert(self, make_point):
        reg = ObservationPointRegistry()
        assert reg.upsert(make_point("A")) is False
        assert reg.upsert(make_point("A", name="new")) is True
        assert reg["A"].name == "new"


class TestRegistryAccess:

    def test_registered_code_cannot_change(self, sample_registry):
        with pytest.raises(ValidationError):
            sample_registry.get("A001").code = "Z001"
        assert sample_registry.codes() == ["A001", "A002", "B001"]
        assert sample_registry["A001"].code == "A001"
        assert "Z001" not in sample_registry

    def test_get_and_contains(self, sample_registry, sample_points):
        assert sample_registry.get("A001") is sample_points[0]
        assert sample_registry.get("missing") is None
        assert "A002" in sample_registry
        assert sample_points[2] in sample_registry
        assert "Z999" not in sample_registry

    def test_getitem_missing(self, sample_registry):
        with pytest.raises(KeyError):
            sample_registry["Z999"]

    def test_remove(self, sample_registry):
        removed = sample_registry.remove("A002")
        assert removed.code == "A002"
        assert "A002" not in sample_registry
        with pytest.raises(KeyError):
            sample_registry.remove("A002")

    def test_points_returns_copy(self, sample_registry):
        pts = sample_registry.points()
        pts.clear()
        assert len(sample_registry) == 3

    def test_filtered_views(self, sample_registry):
        assert [p.code for p in sample_registry.active()] == ["A001", "A002"]
        assert [p.code for p in sample_registry.suspended()] == ["B001"]
        assert [p.code for p in sample_registry.mapped()] == ["A001", "B001"]

    def test_equality(self, sample_points):
        a = ObservationPointRegistry.from_points(sample_points)
        b = ObservationPointRegistry.from_points(reversed(sample_points))
        assert a == b
