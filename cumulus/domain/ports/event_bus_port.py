"""
Event Bus Port

Architectural Intent:
- Abstract interface for publishing load-balancing domain events
- Lets audit, metrics or notification consumers observe outcomes (including
  silently skipped locations) without the service knowing about them
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

from cumulus.domain.events.event_base import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, events: list[DomainEvent]) -> None: ...

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None: ...

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None: ...
