"""
Adapter-backed Load Balancer Strategies

Architectural Intent:
- The two strategy ports (create, destroy) implemented once, over any
  provider adapter that exposes create_load_balancer / destroy_load_balancer_at
- The composition root picks the adapter; these classes keep the service
  unaware of which provider it is talking to
"""

import logging
from typing import AbstractSet, Protocol

from cumulus.domain.ports.resolver_port import IPAddress
from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol
from cumulus.domain.value_objects.location import Location

logger = logging.getLogger(__name__)


class LoadBalancerBackend(Protocol):
    provider_id: str

    async def create_load_balancer(
        self,
        location: Location,
        name: str,
        protocol: LoadBalancerProtocol,
        load_balancer_port: int,
        instance_port: int,
        node_ids: AbstractSet[str],
    ) -> str: ...

    async def destroy_load_balancer_at(self, address: IPAddress) -> bool: ...


class AdapterLoadBalanceNodesStrategy:
    def __init__(self, backend: LoadBalancerBackend) -> None:
        self.backend = backend

    async def execute(
        self,
        location: Location,
        name: str,
        protocol: LoadBalancerProtocol,
        load_balancer_port: int,
        instance_port: int,
        node_ids: AbstractSet[str],
    ) -> str:
        logger.debug(
            "%s: create load balancer %s in %s", self.backend.provider_id, name, location
        )
        return await self.backend.create_load_balancer(
            location, name, protocol, load_balancer_port, instance_port, node_ids
        )


class AdapterDestroyLoadBalancerStrategy:
    def __init__(self, backend: LoadBalancerBackend) -> None:
        self.backend = backend

    async def execute(self, address: IPAddress) -> bool:
        logger.debug("%s: destroy load balancer at %s", self.backend.provider_id, address)
        return await self.backend.destroy_load_balancer_at(address)
