"""
Load Balancer Events

Raised by LoadBalancerService. aggregate_id is the load balancer name.
"""

from dataclasses import dataclass

from cumulus.domain.events.event_base import DomainEvent


@dataclass(frozen=True, kw_only=True)
class LoadBalancerCreatedEvent(DomainEvent):
    location_id: str
    dns_name: str
    node_ids: frozenset[str]


@dataclass(frozen=True, kw_only=True)
class LoadBalancerUnresolvedEvent(DomainEvent):
    """A balancer was created but its DNS name never resolved; no address was returned."""
    location_id: str
    dns_name: str
    attempts: int


@dataclass(frozen=True, kw_only=True)
class LoadBalancerDestroyedEvent(DomainEvent):
    address: str
    successful: bool
