"""
Load Balancer DTOs

Architectural Intent:
- Data Transfer Objects for the load-balancing use case boundary
- Input validation at the application boundary, before any provider call
- Per-location outcomes so callers can tell "nothing matched here" apart from
  "created but never resolved"
"""

from dataclasses import dataclass, field
from enum import Enum, auto

from cumulus.domain.ports.resolver_port import IPAddress
from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol
from cumulus.domain.value_objects.location import Location


@dataclass(frozen=True)
class LoadBalanceNodesRequest:
    load_balancer_name: str
    protocol: LoadBalancerProtocol
    load_balancer_port: int
    instance_port: int

    def __post_init__(self) -> None:
        if not self.load_balancer_name:
            raise ValueError("load_balancer_name cannot be empty")
        object.__setattr__(self, "protocol", LoadBalancerProtocol.parse(self.protocol))
        for name in ("load_balancer_port", "instance_port"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


class LocationStatus(Enum):
    RESOLVED = auto()
    UNRESOLVED = auto()


@dataclass(frozen=True)
class LocationOutcome:
    location: Location
    dns_name: str
    node_ids: frozenset[str]
    status: LocationStatus
    addresses: frozenset[IPAddress] = frozenset()
    attempts: int = 0


@dataclass(frozen=True)
class LoadBalancingReport:
    load_balancer_name: str
    outcomes: tuple[LocationOutcome, ...] = field(default=())

    @property
    def addresses(self) -> set[IPAddress]:
        result: set[IPAddress] = set()
        for outcome in self.outcomes:
            result.update(outcome.addresses)
        return result

    @property
    def unresolved(self) -> tuple[LocationOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status is LocationStatus.UNRESOLVED)

    @property
    def is_complete(self) -> bool:
        return not self.unresolved
