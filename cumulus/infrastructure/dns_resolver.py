"""
DNS Resolver

Architectural Intent:
- Implements AddressResolverPort with the operating system resolver
- Runs getaddrinfo through the event loop so resolution does not block it
- Translates socket.gaierror into UnknownHostError, the retryable failure
"""

import asyncio
import ipaddress
import logging
import socket

from cumulus.domain.ports.resolver_port import IPAddress, UnknownHostError

logger = logging.getLogger(__name__)


class SocketAddressResolver:
    def __init__(self, family: int = socket.AF_UNSPEC) -> None:
        self.family = family

    async def resolve(self, hostname: str) -> list[IPAddress]:
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(
                hostname, None, family=self.family, type=socket.SOCK_STREAM
            )
        except socket.gaierror as e:
            raise UnknownHostError(hostname, str(e)) from e

        addresses: list[IPAddress] = []
        for _family, _type, _proto, _canonname, sockaddr in infos:
            # IPv6 sockaddrs may carry a "%scope" suffix
            address = ipaddress.ip_address(str(sockaddr[0]).split("%", 1)[0])
            if address not in addresses:
                addresses.append(address)

        if not addresses:
            raise UnknownHostError(hostname, "no addresses")
        logger.debug("Resolved %s to %s", hostname, addresses)
        return addresses
