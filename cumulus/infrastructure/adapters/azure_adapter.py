"""
Azure Cloud Provider Adapter

Architectural Intent:
- Implements ComputeServicePort for Azure Virtual Machines and the load
  balancer backend with Standard Load Balancers fronted by a public IP
- Simulates azure-mgmt-compute / azure-mgmt-network SDK call patterns without
  importing the real libraries, enabling integration testing and local
  development with zero Azure credentials
- When the SDKs are available, replace the _stub_* helpers with
  ComputeManagementClient / NetworkManagementClient calls; the public method
  signatures remain stable

Design Decisions:
- Locations are "<region>-<zone>" for zonal VMs (e.g. "eastus-1"); a balancer
  built for a zone is named "<name>-<zone location>"
- The public IP carries a DNS label, so the balancer's DNS name is
  "<label>.<region>.cloudapp.azure.com" and is published to the shared zone
- Backend pool membership is expressed with VM resource ids, which are the
  nodes' provider ids

Simulated defaults:
  subscription : 00000000-0000-0000-0000-000000000000
  resource_group : cumulus-rg
  location : eastus
  vm_size : Standard_B1s
"""

import datetime
import ipaddress
import logging
import re
import uuid
from typing import AbstractSet, Any, Optional

from cumulus.domain.ports.resolver_port import IPAddress
from cumulus.domain.services.node_predicates import NodePredicate
from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol
from cumulus.domain.value_objects.location import Location, LocationScope
from cumulus.domain.value_objects.node import NodeMetadata, NodeState
from cumulus.infrastructure.adapters.simulated_dns import InMemoryDnsZone

logger = logging.getLogger(__name__)

AZURE_REGIONS: dict[str, tuple[str, tuple[str, ...]]] = {
    "eastus": ("US-VA", ("1", "2", "3")),
    "westus2": ("US-WA", ("1", "2", "3")),
    "northeurope": ("IE", ("1", "2", "3")),
    "westeurope": ("NL", ("1", "2", "3")),
    "southeastasia": ("SG", ("1", "2", "3")),
}

_POWER_STATES = {
    "powerstate/starting": NodeState.PENDING,
    "powerstate/running": NodeState.RUNNING,
    "powerstate/stopping": NodeState.PENDING,
    "powerstate/stopped": NodeState.SUSPENDED,
    "powerstate/deallocating": NodeState.PENDING,
    "powerstate/deallocated": NodeState.SUSPENDED,
}

_DNS_LABEL_RE = re.compile(r"^[a-z][a-z0-9-]{1,61}[a-z0-9]$")


class AzureResourceNotFoundError(LookupError):
    """Mirrors azure.core.exceptions.ResourceNotFoundError."""


# ---------------------------------------------------------------------------
# Internal helpers that mimic azure-mgmt-compute / Azure REST API payloads
# ---------------------------------------------------------------------------

def _resource_id(
    subscription_id: str, resource_group: str, provider: str, kind: str, name: str
) -> str:
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/{provider}/{kind}/{name}"
    )


def _make_private_ip(index: int = 0) -> str:
    """Return a deterministic private IP for simulation."""
    return f"172.16.{(index // 256) % 256}.{index % 256 + 4}"


def _make_public_ip(index: int = 0) -> str:
    return f"20.{(index // 65536) % 256 + 40}.{(index // 256) % 256}.{index % 256 + 1}"


def _stub_virtual_machines_create_or_update(
    subscription_id: str,
    resource_group: str,
    location: str,
    zone: str,
    name: str,
    vm_size: str,
    tags: dict[str, str],
    private_ip: str,
) -> dict:
    """
    Simulate ComputeManagementClient.virtual_machines.begin_create_or_update()
    LRO result.

    The real call looks like:
        poller = client.virtual_machines.begin_create_or_update(
            resource_group_name=resource_group,
            vm_name=name,
            parameters=VirtualMachine(location=location, zones=[zone], ...),
        )
        vm = poller.result()
    """
    now = datetime.datetime.now(datetime.UTC).isoformat()
    nic_id = _resource_id(
        subscription_id, resource_group, "Microsoft.Network", "networkInterfaces", f"{name}-nic"
    )
    return {
        "id": _resource_id(
            subscription_id, resource_group, "Microsoft.Compute", "virtualMachines", name
        ),
        "name": name,
        "type": "Microsoft.Compute/virtualMachines",
        "location": location,
        "zones": [zone],
        "tags": {"ManagedBy": "cumulus", **tags},
        "properties": {
            "vmId": str(uuid.uuid4()),
            "hardwareProfile": {"vmSize": vm_size},
            "networkProfile": {
                "networkInterfaces": [{"id": nic_id, "properties": {"primary": True}}]
            },
            "provisioningState": "Succeeded",
            "powerState": "PowerState/running",
            "timeCreated": now,
            # Fetched from the NIC resource in reality.
            "privateIPAddress": private_ip,
        },
    }


def _stub_virtual_machines_delete(subscription_id: str, location: str) -> dict:
    """
    Simulate ComputeManagementClient.virtual_machines.begin_delete() LRO result.

    The real call looks like:
        client.virtual_machines.begin_delete(resource_group_name=rg, vm_name=name).result()
    """
    now = datetime.datetime.now(datetime.UTC).isoformat()
    return {
        "id": (
            f"/subscriptions/{subscription_id}/providers/Microsoft.Compute/locations"
            f"/{location}/operations/{uuid.uuid4()}"
        ),
        "status": "Succeeded",
        "startTime": now,
        "endTime": now,
    }


def _stub_public_ip_create(
    subscription_id: str,
    resource_group: str,
    location: str,
    name: str,
    dns_label: str,
    address: str,
) -> dict:
    """
    Simulate NetworkManagementClient.public_ip_addresses.begin_create_or_update().
    """
    return {
        "id": _resource_id(
            subscription_id, resource_group, "Microsoft.Network", "publicIPAddresses", name
        ),
        "name": name,
        "location": location,
        "sku": {"name": "Standard"},
        "properties": {
            "publicIPAllocationMethod": "Static",
            "ipAddress": address,
            "dnsSettings": {
                "domainNameLabel": dns_label,
                "fqdn": f"{dns_label}.{location}.cloudapp.azure.com",
            },
            "provisioningState": "Succeeded",
        },
    }


def _stub_load_balancer_create(
    subscription_id: str,
    resource_group: str,
    location: str,
    name: str,
    public_ip_id: str,
    protocol: str,
    frontend_port: int,
    backend_port: int,
    backend_vm_ids: list[str],
) -> dict:
    """
    Simulate NetworkManagementClient.load_balancers.begin_create_or_update().

    The real call looks like:
        network.load_balancers.begin_create_or_update(
            resource_group, name,
            LoadBalancer(
                location=location,
                sku=LoadBalancerSku(name="Standard"),
                frontend_ip_configurations=[...public_ip_id...],
                backend_address_pools=[BackendAddressPool(name=f"{name}-pool")],
                load_balancing_rules=[LoadBalancingRule(protocol=..., ...)],
            ),
        ).result()
    """
    lb_id = _resource_id(
        subscription_id, resource_group, "Microsoft.Network", "loadBalancers", name
    )
    return {
        "id": lb_id,
        "name": name,
        "location": location,
        "sku": {"name": "Standard"},
        "properties": {
            "frontendIPConfigurations": [
                {"name": "frontend", "properties": {"publicIPAddress": {"id": public_ip_id}}}
            ],
            "backendAddressPools": [
                {
                    "name": f"{name}-pool",
                    "properties": {"backendIPConfigurations": [{"id": v} for v in backend_vm_ids]},
                }
            ],
            "loadBalancingRules": [
                {
                    "name": f"{name}-rule",
                    "properties": {
                        # Azure rules are L4; HTTP is balanced as TCP
                        "protocol": "Tcp",
                        "frontendPort": frontend_port,
                        "backendPort": backend_port,
                    },
                }
            ],
            "probes": [
                {
                    "name": f"{name}-probe",
                    "properties": {
                        "protocol": "Http" if protocol == "HTTP" else "Tcp",
                        "port": backend_port,
                        **({"requestPath": "/"} if protocol == "HTTP" else {}),
                    },
                }
            ],
            "provisioningState": "Succeeded",
        },
    }


# ---------------------------------------------------------------------------
# Public adapter
# ---------------------------------------------------------------------------

class AzureAdapter:
    """
    Azure Virtual Machines + Standard Load Balancer adapter.

    Configuration parameters
    ------------------------
    subscription_id : str
        Azure subscription ID (UUID format).
    resource_group : str
        Resource group containing all managed resources.
    location : str
        Azure region (e.g. "eastus", "westeurope").
    default_vm_size : str
        VM SKU used when the caller does not specify one.
    dns_zone : InMemoryDnsZone | None
        Zone that receives the public IPs' FQDN records.
    """

    provider_id = "azure"

    def __init__(
        self,
        subscription_id: str = "00000000-0000-0000-0000-000000000000",
        resource_group: str = "cumulus-rg",
        location: str = "eastus",
        default_vm_size: str = "Standard_B1s",
        dns_zone: Optional[InMemoryDnsZone] = None,
    ) -> None:
        if location not in AZURE_REGIONS:
            raise ValueError(f"Unknown Azure location: {location!r}")
        self.subscription_id = subscription_id
        self.resource_group = resource_group
        self.location = location
        self.default_vm_size = default_vm_size
        self.dns_zone = dns_zone if dns_zone is not None else InMemoryDnsZone()

        # Keyed by VM resource id.
        self._vms: dict[str, dict] = {}
        self._load_balancers: dict[str, dict] = {}
        self._public_ips: dict[str, dict] = {}
        self._vm_count = 0
        self._ip_count = 0

        iso_code, zones = AZURE_REGIONS[location]
        self._region_location = Location(
            scope=LocationScope.REGION,
            id=location,
            description=location,
            parent=Location(LocationScope.PROVIDER, "azure", "Microsoft Azure"),
            iso3166_codes=(iso_code,),
        )
        self._zones = {
            f"{location}-{z}": self._region_location.with_zone(f"{location}-{z}")
            for z in zones
        }

        logger.debug(
            "AzureAdapter initialised (subscription=%s, resource_group=%s, location=%s)",
            subscription_id,
            resource_group,
            location,
        )

    # ------------------------------------------------------------------
    # ComputeServicePort implementation
    # ------------------------------------------------------------------

    async def list_assignable_locations(self) -> list[Location]:
        return list(self._zones.values())

    async def list_nodes_details_matching(
        self, predicate: NodePredicate
    ) -> list[NodeMetadata]:
        logger.info(
            "Azure virtual_machines.list (resource_group=%s)", self.resource_group
        )
        response = {"value": list(self._vms.values()), "nextLink": None}
        nodes = [self._to_node(vm) for vm in response["value"]]
        nodes = [node for node in nodes if predicate(node)]
        logger.info("list_nodes_details_matching found %d node(s)", len(nodes))
        return nodes

    async def create_node(
        self, name: str, location_id: str, **kwargs: Any
    ) -> NodeMetadata:
        """
        Create a zonal VM in location_id ("<region>-<zone>").

        kwargs
            vm_size : str            - Override the default VM size.
            tags : list[str]         - Bare tags (stored with "" values).
        """
        if location_id not in self._zones:
            raise ValueError(f"Zone {location_id!r} is not in location {self.location}")
        zone = location_id.rsplit("-", 1)[-1]
        vm_size = kwargs.get("vm_size", self.default_vm_size)
        index = self._vm_count
        self._vm_count += 1

        logger.info(
            "Azure virtual_machines.begin_create_or_update: name=%s size=%s zone=%s",
            name,
            vm_size,
            location_id,
        )
        vm = _stub_virtual_machines_create_or_update(
            subscription_id=self.subscription_id,
            resource_group=self.resource_group,
            location=self.location,
            zone=zone,
            name=name,
            vm_size=vm_size,
            tags={t: "" for t in kwargs.get("tags", ())},
            private_ip=_make_private_ip(index),
        )
        if vm["id"] in self._vms:
            raise ValueError(f"VM {name!r} already exists in {self.resource_group}")
        self._vms[vm["id"]] = vm
        return self._to_node(vm)

    async def destroy_node(self, node_id: str) -> bool:
        if node_id not in self._vms:
            logger.warning("destroy_node: no Azure VM %s", node_id)
            return False
        logger.info("Azure virtual_machines.begin_delete: id=%s", node_id)
        result = _stub_virtual_machines_delete(self.subscription_id, self.location)
        if result["status"] == "Succeeded":
            del self._vms[node_id]
            return True
        logger.error("Unexpected delete status for %s: %s", node_id, result["status"])
        return False

    # ------------------------------------------------------------------
    # Load balancer backend
    # ------------------------------------------------------------------

    async def create_load_balancer(
        self,
        location: Location,
        name: str,
        protocol: LoadBalancerProtocol,
        load_balancer_port: int,
        instance_port: int,
        node_ids: AbstractSet[str],
    ) -> str:
        if location.scope is LocationScope.REGION:
            if location.id != self.location:
                raise ValueError(f"Location {location} is not {self.location}")
            lb_name = name
        elif location.id in self._zones:
            lb_name = f"{name}-{location.id}"
        else:
            raise ValueError(f"Location {location} is not served by {self.location}")

        dns_label = lb_name.lower()
        if not _DNS_LABEL_RE.match(dns_label):
            raise ValueError(f"Invalid DNS label for public IP: {dns_label!r}")
        if lb_name in self._load_balancers:
            raise ValueError(f"Load balancer {lb_name!r} already exists")
        for vm_id in node_ids:
            if vm_id not in self._vms:
                raise AzureResourceNotFoundError(f"Virtual machine {vm_id!r} not found")
            if self._vms[vm_id]["properties"].get("powerState") == "PowerState/deallocated":
                raise AzureResourceNotFoundError(f"Virtual machine {vm_id!r} is deallocated")

        address = _make_public_ip(self._ip_count)
        self._ip_count += 1
        logger.info(
            "Azure public_ip_addresses.begin_create_or_update: name=%s-ip label=%s",
            lb_name,
            dns_label,
        )
        public_ip = _stub_public_ip_create(
            self.subscription_id,
            self.resource_group,
            self.location,
            f"{lb_name}-ip",
            dns_label,
            address,
        )
        logger.info(
            "Azure load_balancers.begin_create_or_update: name=%s %s %d->%d backends=%d",
            lb_name,
            protocol.value,
            load_balancer_port,
            instance_port,
            len(node_ids),
        )
        lb = _stub_load_balancer_create(
            self.subscription_id,
            self.resource_group,
            self.location,
            lb_name,
            public_ip["id"],
            protocol.value,
            load_balancer_port,
            instance_port,
            sorted(node_ids),
        )
        self._public_ips[public_ip["id"]] = public_ip
        self._load_balancers[lb_name] = lb

        fqdn = public_ip["properties"]["dnsSettings"]["fqdn"]
        self.dns_zone.register(fqdn, [address])
        return fqdn

    async def destroy_load_balancer_at(self, address: IPAddress) -> bool:
        for ip_id, public_ip in list(self._public_ips.items()):
            if ipaddress.ip_address(public_ip["properties"]["ipAddress"]) != address:
                continue
            for lb_name, lb in list(self._load_balancers.items()):
                frontends = lb["properties"]["frontendIPConfigurations"]
                if any(f["properties"]["publicIPAddress"]["id"] == ip_id for f in frontends):
                    logger.info("Azure load_balancers.begin_delete: name=%s", lb_name)
                    del self._load_balancers[lb_name]
            logger.info("Azure public_ip_addresses.begin_delete: id=%s", ip_id)
            del self._public_ips[ip_id]
            self.dns_zone.unregister(public_ip["properties"]["dnsSettings"]["fqdn"])
            return True
        logger.warning("No Azure public IP answers on %s", address)
        return False

    def list_load_balancers(self) -> list[dict]:
        return [dict(lb) for lb in self._load_balancers.values()]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _to_node(self, vm: dict) -> NodeMetadata:
        props = vm["properties"]
        if props.get("provisioningState") == "Failed":
            state = NodeState.ERROR
        else:
            state = NodeState.from_provider(props.get("powerState"), _POWER_STATES)
        tags = dict(vm.get("tags", {}))
        location_id = f"{vm['location']}-{vm['zones'][0]}"
        return NodeMetadata(
            id=vm["id"],
            provider_id=vm["id"],
            name=vm["name"],
            location=self._zones[location_id],
            state=state,
            tags=frozenset(k for k in tags if k != "ManagedBy"),
            private_addresses=(props["privateIPAddress"],),
            user_metadata=tags,
        )
