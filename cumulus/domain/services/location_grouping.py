"""
Location Grouping Service

Architectural Intent:
- Buckets live nodes by location so one load balancer can be built per location
- The resulting map is built fresh per call and owned by the caller
"""

import logging
from typing import Iterable

from cumulus.domain.services.node_predicates import NodePredicate, and_, not_, terminated
from cumulus.domain.value_objects.location import Location
from cumulus.domain.value_objects.node import NodeMetadata

logger = logging.getLogger(__name__)


def group_by_location(
    nodes: Iterable[NodeMetadata], predicate: NodePredicate
) -> dict[Location, set[str]]:
    """Map each location to the provider ids of its matching, non-terminated nodes."""
    keep = and_(predicate, not_(terminated))
    location_map: dict[Location, set[str]] = {}
    for node in nodes:
        if not keep(node):
            logger.debug("Skipping node %s (state=%s)", node, node.state.name)
            continue
        location_map.setdefault(node.location, set()).add(node.provider_id)
    return location_map
