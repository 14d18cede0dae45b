"""Global test configuration.

Shared factories for building nodes and locations without a provider adapter.
"""

import logging

import pytest

from cumulus.domain.value_objects.location import Location, LocationScope
from cumulus.domain.value_objects.node import NodeMetadata, NodeState


def make_location(location_id: str = "loc1", scope: LocationScope = LocationScope.ZONE) -> Location:
    region = Location(LocationScope.REGION, "region1", "Test region", iso3166_codes=("US-CA",))
    if scope is LocationScope.REGION:
        return Location(LocationScope.REGION, location_id, parent=region.parent)
    return region.with_zone(location_id)


def make_node(
    provider_id: str,
    location: Location | None = None,
    state: NodeState = NodeState.RUNNING,
    tags: tuple[str, ...] = (),
) -> NodeMetadata:
    return NodeMetadata(
        id=f"region1/{provider_id}",
        provider_id=provider_id,
        name=provider_id.lower(),
        location=location or make_location(),
        state=state,
        tags=frozenset(tags),
    )


@pytest.fixture
def node_factory():
    return make_node


@pytest.fixture
def location_factory():
    return make_location


@pytest.fixture(autouse=True)
def _reset_cumulus_logger():
    """configure_logging() mutates the shared logger; undo it between tests."""
    yield
    logger = logging.getLogger("cumulus")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
