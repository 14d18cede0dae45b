"""
Load Balancer Strategy Ports

Architectural Intent:
- Provider-specific create/destroy operations behind two narrow contracts
- The orchestrating service owns grouping, retry and aggregation; strategies
  only talk to the provider
"""

from typing import AbstractSet, Protocol, runtime_checkable

from cumulus.domain.ports.resolver_port import IPAddress
from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol
from cumulus.domain.value_objects.location import Location


@runtime_checkable
class LoadBalanceNodesStrategy(Protocol):
    async def execute(
        self,
        location: Location,
        name: str,
        protocol: LoadBalancerProtocol,
        load_balancer_port: int,
        instance_port: int,
        node_ids: AbstractSet[str],
    ) -> str:
        """Create a load balancer over node_ids and return its DNS name."""
        ...


@runtime_checkable
class DestroyLoadBalancerStrategy(Protocol):
    async def execute(self, address: IPAddress) -> bool:
        """Destroy the load balancer answering on address. True on success."""
        ...
