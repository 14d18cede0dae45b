"""
Compute Service Port

Architectural Intent:
- Port interface for a provider's compute inventory
- Abstracts node listing, placement discovery, creation and destruction
- Implemented by the AWS, GCP and Azure adapters

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- Listing takes a predicate so callers filter on the normalised NodeMetadata,
  not on provider-specific tag or label syntax
"""

from typing import Any, Protocol, runtime_checkable

from cumulus.domain.services.node_predicates import NodePredicate
from cumulus.domain.value_objects.location import Location
from cumulus.domain.value_objects.node import NodeMetadata


@runtime_checkable
class ComputeServicePort(Protocol):
    """Port for compute inventory operations."""

    async def list_nodes_details_matching(
        self, predicate: NodePredicate
    ) -> list[NodeMetadata]:
        """List every node the provider knows about that satisfies predicate."""
        ...

    async def list_assignable_locations(self) -> list[Location]:
        """List the locations nodes can be created in."""
        ...

    async def create_node(
        self, name: str, location_id: str, **kwargs: Any
    ) -> NodeMetadata:
        """Create a node in the given location and return its metadata."""
        ...

    async def destroy_node(self, node_id: str) -> bool:
        """Destroy a node. Returns True when the node existed and was removed."""
        ...
