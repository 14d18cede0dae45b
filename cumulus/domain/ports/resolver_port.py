"""
Address Resolver Port

Architectural Intent:
- Turns a DNS name handed back by a provider into network addresses
- UnknownHostError is the only failure callers are expected to retry on
"""

from ipaddress import IPv4Address, IPv6Address
from typing import Protocol, Union, runtime_checkable

IPAddress = Union[IPv4Address, IPv6Address]


class UnknownHostError(LookupError):
    """The name does not (yet) resolve to any address."""

    def __init__(self, hostname: str, reason: str = "") -> None:
        self.hostname = hostname
        message = f"Unknown host: {hostname}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


@runtime_checkable
class AddressResolverPort(Protocol):
    async def resolve(self, hostname: str) -> list[IPAddress]:
        """Resolve hostname; raise UnknownHostError when it has no addresses."""
        ...
