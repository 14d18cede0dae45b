"""Tests for the simulated Azure adapter."""

import ipaddress

import pytest

from cumulus.domain.ports.compute_service_port import ComputeServicePort
from cumulus.domain.services.node_predicates import all_nodes
from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol
from cumulus.domain.value_objects.node import NodeState
from cumulus.infrastructure.adapters.azure_adapter import (
    AzureAdapter,
    AzureResourceNotFoundError,
)
from cumulus.infrastructure.adapters.simulated_dns import InMemoryDnsZone


def _make_azure(**kwargs) -> AzureAdapter:
    """Return an AzureAdapter pre-configured for tests."""
    defaults = dict(
        subscription_id="aaaabbbb-cccc-dddd-eeee-ffffffffffff",
        resource_group="cumulus-test-rg",
        location="westeurope",
        default_vm_size="Standard_B2s",
        dns_zone=InMemoryDnsZone(),
    )
    defaults.update(kwargs)
    return AzureAdapter(**defaults)


class TestAzureCompute:
    def test_satisfies_port(self):
        assert isinstance(_make_azure(), ComputeServicePort)

    def test_unknown_location(self):
        with pytest.raises(ValueError, match="Unknown Azure location"):
            _make_azure(location="atlantis")

    @pytest.mark.asyncio
    async def test_locations(self):
        locations = await _make_azure().list_assignable_locations()
        assert [loc.id for loc in locations] == ["westeurope-1", "westeurope-2", "westeurope-3"]
        assert locations[0].iso3166_codes == ("NL",)

    @pytest.mark.asyncio
    async def test_create_node(self):
        adapter = _make_azure()
        node = await adapter.create_node("web-1", "westeurope-2", tags=["web"])

        assert node.provider_id == (
            "/subscriptions/aaaabbbb-cccc-dddd-eeee-ffffffffffff/resourceGroups/cumulus-test-rg"
            "/providers/Microsoft.Compute/virtualMachines/web-1"
        )
        assert node.id == node.provider_id
        assert node.location.id == "westeurope-2"
        assert node.state is NodeState.RUNNING
        assert node.tags == frozenset({"web"})
        assert node.private_addresses == ("172.16.0.4",)

    @pytest.mark.asyncio
    async def test_failed_provisioning_is_error(self):
        adapter = _make_azure()
        node = await adapter.create_node("web-1", "westeurope-1")
        adapter._vms[node.provider_id]["properties"]["provisioningState"] = "Failed"
        (listed,) = await adapter.list_nodes_details_matching(all_nodes)
        assert listed.state is NodeState.ERROR

    @pytest.mark.asyncio
    async def test_duplicate_vm(self):
        adapter = _make_azure()
        await adapter.create_node("web-1", "westeurope-1")
        with pytest.raises(ValueError, match="already exists"):
            await adapter.create_node("web-1", "westeurope-2")

    @pytest.mark.asyncio
    async def test_destroy(self):
        adapter = _make_azure()
        node = await adapter.create_node("web-1", "westeurope-1")
        assert await adapter.destroy_node(node.provider_id) is True
        assert await adapter.list_nodes_details_matching(all_nodes) == []
        assert await adapter.destroy_node(node.provider_id) is False


class TestAzureLoadBalancer:
    @pytest.mark.asyncio
    async def test_create_publishes_fqdn(self):
        adapter = _make_azure()
        node = await adapter.create_node("web-1", "westeurope-1")

        fqdn = await adapter.create_load_balancer(
            node.location, "Web", LoadBalancerProtocol.HTTP, 80, 8080, {node.provider_id}
        )

        assert fqdn == "web-westeurope-1.westeurope.cloudapp.azure.com"
        (lb,) = adapter.list_load_balancers()
        assert lb["name"] == "Web-westeurope-1"
        rule = lb["properties"]["loadBalancingRules"][0]["properties"]
        assert (rule["frontendPort"], rule["backendPort"]) == (80, 8080)
        probe = lb["properties"]["probes"][0]["properties"]
        assert probe["protocol"] == "Http"
        (address,) = await adapter.dns_zone.resolve(fqdn)
        assert address.version == 4

    @pytest.mark.asyncio
    async def test_unknown_vm(self):
        adapter = _make_azure()
        location = (await adapter.list_assignable_locations())[0]
        with pytest.raises(AzureResourceNotFoundError):
            await adapter.create_load_balancer(
                location, "web", LoadBalancerProtocol.TCP, 80, 80, {"/subscriptions/x/vm"}
            )

    @pytest.mark.asyncio
    async def test_deallocated_vm_rejected(self):
        adapter = _make_azure()
        node = await adapter.create_node("web-1", "westeurope-1")
        adapter._vms[node.provider_id]["properties"]["powerState"] = "PowerState/deallocated"

        with pytest.raises(AzureResourceNotFoundError, match="deallocated"):
            await adapter.create_load_balancer(
                node.location, "web", LoadBalancerProtocol.TCP, 80, 80, {node.provider_id}
            )
        assert adapter.list_load_balancers() == []

    @pytest.mark.asyncio
    async def test_foreign_region_rejected(self):
        adapter = _make_azure()
        other = await _make_azure(location="eastus").list_assignable_locations()
        with pytest.raises(ValueError, match="not served"):
            await adapter.create_load_balancer(
                other[0], "web", LoadBalancerProtocol.TCP, 80, 80, set()
            )

    @pytest.mark.asyncio
    async def test_destroy_by_address(self):
        adapter = _make_azure()
        node = await adapter.create_node("web-1", "westeurope-1")
        fqdn = await adapter.create_load_balancer(
            node.location, "web", LoadBalancerProtocol.TCP, 80, 80, {node.provider_id}
        )
        (address,) = await adapter.dns_zone.resolve(fqdn)

        assert await adapter.destroy_load_balancer_at(address) is True
        assert adapter.list_load_balancers() == []
        assert adapter.dns_zone.names_for(address) == []
        assert await adapter.destroy_load_balancer_at(ipaddress.ip_address("192.0.2.1")) is False
