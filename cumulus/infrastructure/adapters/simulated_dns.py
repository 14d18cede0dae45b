"""
Simulated DNS Zone

Architectural Intent:
- In-memory stand-in for provider-managed DNS, shared by the simulated
  provider adapters
- Implements AddressResolverPort so LoadBalancerService can be exercised
  end-to-end without network access
- Models propagation delay: a newly registered record can be configured to
  stay invisible for the first N lookups, which is exactly the window the
  service's retry loop exists for

Design Decisions:
- IP literals always resolve to themselves, matching getaddrinfo behaviour
- Names are case-insensitive and a trailing dot is ignored
"""

import ipaddress
import logging
from typing import Iterable

from cumulus.domain.ports.resolver_port import IPAddress, UnknownHostError

logger = logging.getLogger(__name__)


def _normalise(name: str) -> str:
    return name.strip().rstrip(".").lower()


class InMemoryDnsZone:
    def __init__(self, propagation_lookups: int = 0) -> None:
        if propagation_lookups < 0:
            raise ValueError("propagation_lookups cannot be negative")
        self.propagation_lookups = propagation_lookups
        self._records: dict[str, list[IPAddress]] = {}
        self._pending_lookups: dict[str, int] = {}
        self.lookups: list[str] = []

    def register(
        self,
        name: str,
        addresses: Iterable[str],
        propagation_lookups: int | None = None,
    ) -> None:
        key = _normalise(name)
        self._records[key] = [ipaddress.ip_address(a) for a in addresses]
        delay = self.propagation_lookups if propagation_lookups is None else propagation_lookups
        self._pending_lookups[key] = delay
        logger.debug("DNS register %s -> %s (delay=%d)", key, self._records[key], delay)

    def unregister(self, name: str) -> bool:
        key = _normalise(name)
        self._pending_lookups.pop(key, None)
        return self._records.pop(key, None) is not None

    def names_for(self, address: IPAddress) -> list[str]:
        return [name for name, addrs in self._records.items() if address in addrs]

    async def resolve(self, hostname: str) -> list[IPAddress]:
        key = _normalise(hostname)
        self.lookups.append(key)
        try:
            return [ipaddress.ip_address(key)]
        except ValueError:
            pass

        if key not in self._records:
            raise UnknownHostError(hostname, "NXDOMAIN")
        remaining = self._pending_lookups.get(key, 0)
        if remaining > 0:
            self._pending_lookups[key] = remaining - 1
            raise UnknownHostError(hostname, "record not yet propagated")
        return list(self._records[key])
