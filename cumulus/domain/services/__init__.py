"""
Domain Services Package

Architectural Intent:
- Pure functions over domain value objects
- No I/O; safe to call from any layer
"""

from cumulus.domain.services.location_grouping import group_by_location
from cumulus.domain.services.node_predicates import (
    NodePredicate,
    all_nodes,
    and_,
    in_location,
    not_,
    running,
    terminated,
    with_ids,
    with_tag,
)

__all__ = [
    "group_by_location",
    "NodePredicate",
    "all_nodes",
    "and_",
    "in_location",
    "not_",
    "running",
    "terminated",
    "with_ids",
    "with_tag",
]
