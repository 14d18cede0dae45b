"""
Node Predicates

Architectural Intent:
- Reusable boolean tests over NodeMetadata for filtering compute inventories
- Plain callables so callers can mix them with lambdas freely
"""

from typing import Callable

from cumulus.domain.value_objects.location import Location
from cumulus.domain.value_objects.node import NodeMetadata, NodeState

NodePredicate = Callable[[NodeMetadata], bool]


def all_nodes(node: NodeMetadata) -> bool:
    return True


def terminated(node: NodeMetadata) -> bool:
    return node.state is NodeState.TERMINATED


def running(node: NodeMetadata) -> bool:
    return node.state is NodeState.RUNNING


def in_location(location: Location) -> NodePredicate:
    """Match nodes in the location or any location nested under it."""

    def predicate(node: NodeMetadata) -> bool:
        current = node.location
        while current is not None:
            if current == location:
                return True
            current = current.parent
        return False

    return predicate


def with_tag(tag: str) -> NodePredicate:
    return lambda node: tag in node.tags


def with_ids(*ids: str) -> NodePredicate:
    wanted = frozenset(ids)
    return lambda node: node.id in wanted or node.provider_id in wanted


def and_(*predicates: NodePredicate) -> NodePredicate:
    return lambda node: all(p(node) for p in predicates)


def not_(predicate: NodePredicate) -> NodePredicate:
    return lambda node: not predicate(node)
