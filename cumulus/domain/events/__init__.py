"""
Domain Events Package

Architectural Intent:
- Contains domain events and their common base
- Events are the primary mechanism for cross-boundary communication
"""

from cumulus.domain.events.event_base import DomainEvent
from cumulus.domain.events.load_balancer_events import (
    LoadBalancerCreatedEvent,
    LoadBalancerDestroyedEvent,
    LoadBalancerUnresolvedEvent,
)

__all__ = [
    "DomainEvent",
    "LoadBalancerCreatedEvent",
    "LoadBalancerUnresolvedEvent",
    "LoadBalancerDestroyedEvent",
]
