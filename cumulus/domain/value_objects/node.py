"""
Node Metadata Value Object

Architectural Intent:
- Immutable snapshot of a compute node as reported by a provider
- Owned by the compute service; read-only to load balancing
- Validates identifiers and address literals (IPv4, IPv6)
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Mapping, Optional

from cumulus.domain.value_objects.location import Location


class NodeState(Enum):
    PENDING = auto()
    RUNNING = auto()
    SUSPENDED = auto()
    TERMINATED = auto()
    ERROR = auto()
    UNRECOGNIZED = auto()

    @classmethod
    def from_provider(
        cls, value: Optional[str], mapping: Mapping[str, "NodeState"]
    ) -> "NodeState":
        """Translate a raw provider state string; unknown values are UNRECOGNIZED."""
        if value is None:
            return cls.UNRECOGNIZED
        return mapping.get(value.lower(), cls.UNRECOGNIZED)


def _validate_addresses(addresses: tuple[str, ...]) -> None:
    for address in addresses:
        try:
            ipaddress.ip_address(address)
        except ValueError:
            raise ValueError(f"Invalid IP address: {address!r}") from None


@dataclass(frozen=True)
class NodeMetadata:
    """
    Value Object representing a compute node in a provider's inventory.
    """
    id: str
    provider_id: str
    location: Location
    state: NodeState = NodeState.RUNNING
    name: str = ""
    tags: frozenset[str] = frozenset()
    public_addresses: tuple[str, ...] = ()
    private_addresses: tuple[str, ...] = ()
    user_metadata: Mapping[str, str] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Node id cannot be empty")
        if not self.provider_id:
            raise ValueError("Node provider_id cannot be empty")
        _validate_addresses(self.public_addresses)
        _validate_addresses(self.private_addresses)

    def __str__(self) -> str:
        return f"{self.name or self.id}[{self.provider_id}]@{self.location.id}"

    @property
    def is_terminated(self) -> bool:
        return self.state is NodeState.TERMINATED
