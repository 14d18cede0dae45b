"""Tests for the Location value object."""

import pytest

from cumulus.domain.value_objects.location import Location, LocationScope


class TestLocation:
    def test_str(self):
        assert str(Location(LocationScope.ZONE, "us-east-1a")) == "zone:us-east-1a"

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            Location(LocationScope.REGION, "")

    def test_immutable(self):
        location = Location(LocationScope.REGION, "us-east-1")
        with pytest.raises(AttributeError):
            location.id = "us-west-2"

    def test_equality_ignores_description_and_parent(self):
        a = Location(LocationScope.REGION, "r1", "Region one")
        b = Location(
            LocationScope.REGION,
            "r1",
            "Another label",
            parent=Location(LocationScope.PROVIDER, "aws"),
        )
        assert a == b
        assert hash(a) == hash(b)

    def test_scope_participates_in_equality(self):
        assert Location(LocationScope.REGION, "x") != Location(LocationScope.ZONE, "x")

    def test_usable_as_dict_key(self):
        grouping = {Location(LocationScope.ZONE, "z1"): {"a"}}
        grouping.setdefault(Location(LocationScope.ZONE, "z1", "same zone"), set()).add("b")
        assert grouping == {Location(LocationScope.ZONE, "z1"): {"a", "b"}}


class TestLocationHierarchy:
    def test_with_zone_links_parent(self):
        region = Location(LocationScope.REGION, "eu-west-1", iso3166_codes=("IE",))
        zone = region.with_zone("eu-west-1a")
        assert zone.scope is LocationScope.ZONE
        assert zone.parent is region
        assert zone.iso3166_codes == ("IE",)
        assert zone.description == "eu-west-1a"

    def test_region_of_zone(self):
        region = Location(LocationScope.REGION, "eu-west-1")
        assert region.with_zone("eu-west-1b").region is region

    def test_region_of_region_is_self(self):
        region = Location(LocationScope.REGION, "eu-west-1")
        assert region.region is region

    def test_region_of_provider_is_none(self):
        assert Location(LocationScope.PROVIDER, "aws").region is None
