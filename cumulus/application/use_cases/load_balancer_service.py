"""
Load Balancer Service Use Case

Architectural Intent:
- Orchestrates load balancer creation across every location that hosts
  matching nodes, one balancer per location
- Provider work (create/destroy) is delegated to pluggable strategies chosen
  at composition time; this class only lists, groups, retries and aggregates
- DNS names returned by providers are resolved with bounded retry because new
  balancer records are frequently not visible yet

Behaviour notes:
- Locations are processed sequentially; a strategy error aborts the remaining
  locations and propagates unchanged
- A location whose DNS name never resolves contributes no address and raises
  nothing. load_balance_nodes_matching() hides it; create_load_balancers()
  reports it as UNRESOLVED, and a LoadBalancerUnresolvedEvent is published
- Cancellation during the retry backoff propagates and aborts the whole call
"""

import asyncio
import ipaddress
import logging
from typing import AbstractSet, Awaitable, Callable, Optional, Union

from opentelemetry import metrics, trace

from cumulus.application.dtos.load_balancer_dtos import (
    LoadBalanceNodesRequest,
    LoadBalancingReport,
    LocationOutcome,
    LocationStatus,
)
from cumulus.domain.events.load_balancer_events import (
    LoadBalancerCreatedEvent,
    LoadBalancerDestroyedEvent,
    LoadBalancerUnresolvedEvent,
)
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
from cumulus.domain.services.location_grouping import group_by_location
from cumulus.domain.services.node_predicates import NodePredicate, all_nodes
from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol
from cumulus.domain.value_objects.location import Location

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

_created_counter = meter.create_counter(
    "cumulus.load_balancer.created",
    unit="1",
    description="Load balancers created, one per location",
)
_unresolved_counter = meter.create_counter(
    "cumulus.load_balancer.unresolved",
    unit="1",
    description="Load balancers whose DNS name never resolved",
)

DEFAULT_RESOLVE_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0


class LoadBalancerService:
    def __init__(
        self,
        compute_service: ComputeServicePort,
        load_balance_strategy: LoadBalanceNodesStrategy,
        destroy_strategy: DestroyLoadBalancerStrategy,
        resolver: AddressResolverPort,
        event_bus: Optional[EventBusPort] = None,
        resolve_attempts: int = DEFAULT_RESOLVE_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if resolve_attempts < 1:
            raise ValueError(f"resolve_attempts must be >= 1, got {resolve_attempts}")
        if retry_delay < 0:
            raise ValueError(f"retry_delay cannot be negative, got {retry_delay}")
        self.compute_service = compute_service
        self.load_balance_strategy = load_balance_strategy
        self.destroy_strategy = destroy_strategy
        self.resolver = resolver
        self.event_bus = event_bus
        self.resolve_attempts = resolve_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def load_balance_nodes_matching(
        self,
        node_filter: NodePredicate,
        load_balancer_name: str,
        protocol: Union[str, LoadBalancerProtocol],
        load_balancer_port: int,
        instance_port: int,
    ) -> set[IPAddress]:
        """Create one load balancer per location of the matching nodes.

        Returns the resolved addresses of every balancer whose DNS name
        resolved. Locations that never resolved are silently absent; use
        create_load_balancers() to see them.
        """
        report = await self.create_load_balancers(
            node_filter, load_balancer_name, protocol, load_balancer_port, instance_port
        )
        return report.addresses

    async def create_load_balancers(
        self,
        node_filter: NodePredicate,
        load_balancer_name: str,
        protocol: Union[str, LoadBalancerProtocol],
        load_balancer_port: int,
        instance_port: int,
    ) -> LoadBalancingReport:
        """Same algorithm as load_balance_nodes_matching, reported per location."""
        request = LoadBalanceNodesRequest(
            load_balancer_name=load_balancer_name,
            protocol=protocol,
            load_balancer_port=load_balancer_port,
            instance_port=instance_port,
        )

        with tracer.start_as_current_span(
            "cumulus.load_balancer.create",
            attributes={
                "cumulus.load_balancer.name": request.load_balancer_name,
                "cumulus.load_balancer.protocol": request.protocol.value,
            },
        ):
            nodes = await self.compute_service.list_nodes_details_matching(all_nodes)
            location_map = group_by_location(nodes, node_filter)
            logger.info(
                "Load balancing %d location(s) for %s",
                len(location_map),
                request.load_balancer_name,
            )

            outcomes: list[LocationOutcome] = []
            for location, node_ids in location_map.items():
                outcome = await self._create_in_location(
                    request, location, frozenset(node_ids)
                )
                outcomes.append(outcome)

        report = LoadBalancingReport(
            load_balancer_name=request.load_balancer_name, outcomes=tuple(outcomes)
        )
        if not report.is_complete:
            logger.warning(
                "%d of %d load balancer(s) for %s did not resolve",
                len(report.unresolved),
                len(outcomes),
                request.load_balancer_name,
            )
        return report

    async def destroy_load_balancer(self, address: Union[str, IPAddress]) -> None:
        """Destroy the load balancer answering on address."""
        load_balancer = ipaddress.ip_address(address)
        with tracer.start_as_current_span(
            "cumulus.load_balancer.destroy",
            attributes={"cumulus.load_balancer.address": str(load_balancer)},
        ):
            logger.debug(">> destroying load balancer(%s)", load_balancer)
            successful = await self.destroy_strategy.execute(load_balancer)
            logger.debug(
                "<< destroyed load balancer(%s) success(%s)", load_balancer, successful
            )
        if not successful:
            logger.warning("Destroying load balancer %s reported failure", load_balancer)
        await self._publish(
            LoadBalancerDestroyedEvent(address=str(load_balancer), successful=successful)
        )

    async def _create_in_location(
        self,
        request: LoadBalanceNodesRequest,
        location: Location,
        node_ids: AbstractSet[str],
    ) -> LocationOutcome:
        logger.debug(
            ">> creating load balancer (%s) in %s over %d node(s)",
            request.load_balancer_name,
            location,
            len(node_ids),
        )
        dns_name = await self.load_balance_strategy.execute(
            location,
            request.load_balancer_name,
            request.protocol,
            request.load_balancer_port,
            request.instance_port,
            node_ids,
        )
        _created_counter.add(1, {"cumulus.location": location.id})
        await self._publish(
            LoadBalancerCreatedEvent(
                aggregate_id=request.load_balancer_name,
                location_id=location.id,
                dns_name=dns_name,
                node_ids=frozenset(node_ids),
            )
        )

        addresses, attempts = await self._resolve(dns_name)
        if addresses:
            logger.debug(
                "<< created load balancer (%s) DNS (%s)", request.load_balancer_name, dns_name
            )
            return LocationOutcome(
                location=location,
                dns_name=dns_name,
                node_ids=frozenset(node_ids),
                status=LocationStatus.RESOLVED,
                addresses=addresses,
                attempts=attempts,
            )

        logger.warning(
            "Load balancer %s in %s: DNS name %s did not resolve after %d attempt(s)",
            request.load_balancer_name,
            location,
            dns_name,
            attempts,
        )
        _unresolved_counter.add(1, {"cumulus.location": location.id})
        await self._publish(
            LoadBalancerUnresolvedEvent(
                aggregate_id=request.load_balancer_name,
                location_id=location.id,
                dns_name=dns_name,
                attempts=attempts,
            )
        )
        return LocationOutcome(
            location=location,
            dns_name=dns_name,
            node_ids=frozenset(node_ids),
            status=LocationStatus.UNRESOLVED,
            attempts=attempts,
        )

    async def _resolve(self, dns_name: str) -> tuple[frozenset[IPAddress], int]:
        for attempt in range(1, self.resolve_attempts + 1):
            try:
                addresses = await self.resolver.resolve(dns_name)
            except UnknownHostError as e:
                logger.debug("Resolve attempt %d for %s failed: %s", attempt, dns_name, e)
            else:
                if addresses:
                    return frozenset(addresses), attempt
                logger.debug("Resolve attempt %d for %s returned nothing", attempt, dns_name)
            if attempt < self.resolve_attempts:
                await self._sleep(self.retry_delay)
        return frozenset(), self.resolve_attempts

    async def _publish(self, event) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish([event])
