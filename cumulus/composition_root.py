"""
Composition Root

Architectural Intent:
- Dependency injection composition root for cumulus
- Single place where the provider adapter, strategies, resolver and service
  are wired together
- The provider is chosen here, from configuration; nothing downstream knows
  which cloud it is talking to

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- One shared InMemoryDnsZone per container so simulated balancers resolve
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from cumulus.application.use_cases.load_balancer_service import LoadBalancerService
from cumulus.domain.entities.provider_metadata import ProviderMetadata
from cumulus.infrastructure.adapters.aws_adapter import AWSAdapter
from cumulus.infrastructure.adapters.azure_adapter import AzureAdapter
from cumulus.infrastructure.adapters.gcp_adapter import GCPAdapter
from cumulus.infrastructure.adapters.simulated_dns import InMemoryDnsZone
from cumulus.infrastructure.adapters.strategies import (
    AdapterDestroyLoadBalancerStrategy,
    AdapterLoadBalanceNodesStrategy,
)
from cumulus.infrastructure.config import CumulusConfig
from cumulus.infrastructure.dns_resolver import SocketAddressResolver
from cumulus.infrastructure.event_bus import EventBus
from cumulus.infrastructure.providers import get_provider

ProviderAdapter = Union[AWSAdapter, GCPAdapter, AzureAdapter]


def _aws(config: CumulusConfig, zone: InMemoryDnsZone) -> AWSAdapter:
    return AWSAdapter(
        region=config.aws.region,
        profile=config.aws.profile or None,
        default_ami=config.aws.default_ami,
        default_instance_type=config.aws.default_instance_type,
        dns_zone=zone,
    )


def _gcp(config: CumulusConfig, zone: InMemoryDnsZone) -> GCPAdapter:
    return GCPAdapter(
        project=config.gcp.project,
        region=config.gcp.region,
        default_machine_type=config.gcp.default_machine_type,
        dns_zone=zone,
    )


def _azure(config: CumulusConfig, zone: InMemoryDnsZone) -> AzureAdapter:
    return AzureAdapter(
        subscription_id=config.azure.subscription_id,
        resource_group=config.azure.resource_group,
        location=config.azure.location,
        default_vm_size=config.azure.default_vm_size,
        dns_zone=zone,
    )


ADAPTER_FACTORIES: dict[str, Callable[[CumulusConfig, InMemoryDnsZone], ProviderAdapter]] = {
    "aws": _aws,
    "gcp": _gcp,
    "azure": _azure,
}


@dataclass
class CumulusContainer:
    """DI container holding all wired dependencies."""

    config: CumulusConfig
    provider: ProviderMetadata
    dns_zone: InMemoryDnsZone
    adapter: ProviderAdapter
    event_bus: EventBus
    load_balancer_service: LoadBalancerService


def create_container(config: Optional[CumulusConfig] = None) -> CumulusContainer:
    """Create and wire all dependencies for the configured provider."""
    config = config or CumulusConfig()
    provider_name = config.provider.name
    if provider_name not in ADAPTER_FACTORIES:
        known = ", ".join(sorted(ADAPTER_FACTORIES))
        raise ValueError(f"Unknown provider {provider_name!r} (known: {known})")

    lb_config = config.load_balancer
    dns_zone = InMemoryDnsZone(propagation_lookups=lb_config.dns_propagation_lookups)
    adapter = ADAPTER_FACTORIES[provider_name](config, dns_zone)
    event_bus = EventBus()

    if lb_config.resolver == "system":
        resolver = SocketAddressResolver()
    elif lb_config.resolver == "simulated":
        resolver = dns_zone
    else:
        raise ValueError(f"Unknown resolver {lb_config.resolver!r} (simulated, system)")

    service = LoadBalancerService(
        compute_service=adapter,
        load_balance_strategy=AdapterLoadBalanceNodesStrategy(adapter),
        destroy_strategy=AdapterDestroyLoadBalancerStrategy(adapter),
        resolver=resolver,
        event_bus=event_bus,
        resolve_attempts=lb_config.resolve_attempts,
        retry_delay=lb_config.retry_delay_seconds,
    )

    return CumulusContainer(
        config=config,
        provider=get_provider(provider_name),
        dns_zone=dns_zone,
        adapter=adapter,
        event_bus=event_bus,
        load_balancer_service=service,
    )
