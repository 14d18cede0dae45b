"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from cumulus.domain.ports.compute_service_port import ComputeServicePort
from cumulus.domain.ports.event_bus_port import EventBusPort
from cumulus.domain.ports.load_balancer_strategy_port import (
    DestroyLoadBalancerStrategy,
    LoadBalanceNodesStrategy,
)
from cumulus.domain.ports.resolver_port import (
    AddressResolverPort,
    IPAddress,
    UnknownHostError,
)

__all__ = [
    "ComputeServicePort",
    "EventBusPort",
    "LoadBalanceNodesStrategy",
    "DestroyLoadBalancerStrategy",
    "AddressResolverPort",
    "IPAddress",
    "UnknownHostError",
]
