"""
GCP Cloud Provider Adapter

Architectural Intent:
- Implements ComputeServicePort for Google Compute Engine and the load
  balancer backend with target pools + forwarding rules (network load
  balancing)
- Simulates google-cloud-compute SDK call patterns without importing the real
  library, enabling integration testing and local development with zero GCP
  credentials
- When google-cloud-compute is available, replace the _stub_* helpers with
  actual compute_v1.InstancesClient / TargetPoolsClient /
  ForwardingRulesClient calls; the public method signatures remain stable

Design Decisions:
- Network load balancers have no DNS name; the forwarding rule's IP literal
  is returned in its place, which any resolver maps to itself
- Target pools forward without port translation, so a balancer port that
  differs from the instance port is rejected the way the API would
- GCE "TERMINATED" means stopped, not deleted; it maps to SUSPENDED.
  Deleted instances disappear from instances.list

Simulated defaults:
  project : my-cumulus-project
  region  : us-central1
  machine : e2-micro
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

GCP_REGIONS: dict[str, tuple[str, tuple[str, ...]]] = {
    "us-central1": ("US-IA", ("a", "b", "c", "f")),
    "us-east1": ("US-SC", ("b", "c", "d")),
    "us-west1": ("US-OR", ("a", "b", "c")),
    "europe-west1": ("BE", ("b", "c", "d")),
    "europe-west4": ("NL", ("a", "b", "c")),
    "asia-southeast1": ("SG", ("a", "b", "c")),
}

_GCE_STATES = {
    "provisioning": NodeState.PENDING,
    "staging": NodeState.PENDING,
    "running": NodeState.RUNNING,
    "stopping": NodeState.PENDING,
    "suspending": NodeState.PENDING,
    "suspended": NodeState.SUSPENDED,
    "terminated": NodeState.SUSPENDED,
    "repairing": NodeState.ERROR,
}

_GCE_NAME_RE = re.compile(r"^[a-z](?:[-a-z0-9]{0,61}[a-z0-9])?$")


class ResourceNotFoundError(LookupError):
    """Mirrors google.api_core.exceptions.NotFound."""


# ---------------------------------------------------------------------------
# Internal helpers that mimic the shape of GCP Compute Engine REST API payloads
# ---------------------------------------------------------------------------

def _make_instance_id() -> str:
    """Return a plausible GCP numeric instance ID (uint64 in the real API)."""
    return str(uuid.uuid4().int >> 64)


def _make_internal_ip(index: int = 0) -> str:
    """Return a deterministic internal IP for simulation."""
    return f"10.128.{(index // 256) % 256}.{index % 256 + 2}"


def _make_external_ip(index: int = 0) -> str:
    return f"34.{(index // 65536) % 256 + 64}.{(index // 256) % 256}.{index % 256 + 1}"


def _self_link(project: str, scope: str, resource: str, name: str) -> str:
    return (
        f"https://www.googleapis.com/compute/v1/projects/{project}"
        f"/{scope}/{resource}/{name}"
    )


def _stub_operation(project: str, target_link: str, operation_type: str) -> dict:
    """
    Simulate a completed Compute Engine Operation, as returned by
    operation.result() after insert/delete calls.
    """
    return {
        "id": str(uuid.uuid4().int >> 64),
        "name": f"operation-{uuid.uuid4().hex[:8]}",
        "operationType": operation_type,
        "targetLink": target_link,
        "status": "DONE",
        "progress": 100,
        "kind": "compute#operation",
    }


def _stub_instances_aggregated_list(project: str, instances: list[dict]) -> dict:
    """
    Simulate InstancesClient.aggregated_list().

    The real call looks like:
        client = compute_v1.InstancesClient()
        for zone, scoped in client.aggregated_list(project=project):
            ...
    """
    items: dict[str, dict] = {}
    for inst in instances:
        zone = inst["zone"].rsplit("/", 1)[-1]
        items.setdefault(f"zones/{zone}", {"instances": []})["instances"].append(inst)
    return {
        "id": f"projects/{project}/aggregated/instances",
        "items": items,
        "kind": "compute#instanceAggregatedList",
    }


def _stub_instances_insert(
    project: str,
    zone: str,
    name: str,
    machine_type: str,
    labels: dict[str, str],
    tags: list[str],
    internal_ip: str,
    external_ip: Optional[str],
) -> dict:
    """
    Simulate InstancesClient.insert() and return the created Instance resource.

    The real call looks like:
        operation = client.insert(
            project=project, zone=zone, instance_resource=compute_v1.Instance(...)
        )
        operation.result()
    """
    now = datetime.datetime.now(datetime.UTC).isoformat()
    return {
        "id": _make_instance_id(),
        "name": name,
        "machineType": _self_link(project, f"zones/{zone}", "machineTypes", machine_type),
        "status": "RUNNING",
        "creationTimestamp": now,
        "zone": _self_link(project, "", "zones", zone).replace("//zones", "/zones"),
        "selfLink": _self_link(project, f"zones/{zone}", "instances", name),
        "networkInterfaces": [
            {
                "networkIP": internal_ip,
                "accessConfigs": (
                    [{"type": "ONE_TO_ONE_NAT", "natIP": external_ip}] if external_ip else []
                ),
            }
        ],
        "labels": {"managed-by": "cumulus", **labels},
        "tags": {"items": list(tags)},
        "kind": "compute#instance",
    }


# ---------------------------------------------------------------------------
# Public adapter
# ---------------------------------------------------------------------------

class GCPAdapter:
    """
    GCP Compute Engine + network load balancing adapter.

    Configuration parameters
    ------------------------
    project : str
        GCP project ID.
    region : str
        Region whose zones this adapter manages (e.g. "us-central1").
    default_machine_type : str
        Machine type used when the caller does not specify one.
    dns_zone : InMemoryDnsZone | None
        Unused for resolution (forwarding rules expose IP literals) but kept
        so every adapter can share one zone.
    """

    provider_id = "gcp"

    def __init__(
        self,
        project: str = "my-cumulus-project",
        region: str = "us-central1",
        default_machine_type: str = "e2-micro",
        dns_zone: Optional[InMemoryDnsZone] = None,
    ) -> None:
        if region not in GCP_REGIONS:
            raise ValueError(f"Unknown GCP region: {region!r}")
        self.project = project
        self.region = region
        self.default_machine_type = default_machine_type
        self.dns_zone = dns_zone if dns_zone is not None else InMemoryDnsZone()

        # Keyed by instance name (unique per project in this simulation).
        self._instances: dict[str, dict] = {}
        self._target_pools: dict[str, dict] = {}
        self._forwarding_rules: dict[str, dict] = {}
        self._insert_count = 0
        self._rule_count = 0

        iso_code, zones = GCP_REGIONS[region]
        self._region_location = Location(
            scope=LocationScope.REGION,
            id=region,
            description=region,
            parent=Location(LocationScope.PROVIDER, "gcp", "Google Cloud Platform"),
            iso3166_codes=(iso_code,),
        )
        self._zones = {
            f"{region}-{z}": self._region_location.with_zone(f"{region}-{z}")
            for z in zones
        }

        logger.debug(
            "GCPAdapter initialised (project=%s, region=%s, machine_type=%s)",
            project,
            region,
            default_machine_type,
        )

    # ------------------------------------------------------------------
    # ComputeServicePort implementation
    # ------------------------------------------------------------------

    async def list_assignable_locations(self) -> list[Location]:
        return list(self._zones.values())

    async def list_nodes_details_matching(
        self, predicate: NodePredicate
    ) -> list[NodeMetadata]:
        logger.info("GCP Compute instances.aggregatedList (project=%s)", self.project)
        response = _stub_instances_aggregated_list(
            self.project, list(self._instances.values())
        )
        nodes: list[NodeMetadata] = []
        for scoped in response["items"].values():
            for instance in scoped.get("instances", []):
                node = self._to_node(instance)
                if predicate(node):
                    nodes.append(node)
        logger.info("list_nodes_details_matching found %d node(s)", len(nodes))
        return nodes

    async def create_node(
        self, name: str, location_id: str, **kwargs: Any
    ) -> NodeMetadata:
        """
        Insert a Compute Engine instance in zone location_id.

        kwargs
            machine_type : str        - Override the default machine type.
            tags : list[str]          - Network tags.
            labels : dict[str, str]   - Key/value labels.
            public_ip : bool          - Attach an ephemeral external IP (default True).
        """
        if location_id not in self._zones:
            raise ValueError(f"Zone {location_id!r} is not in region {self.region}")
        if not _GCE_NAME_RE.match(name):
            raise ValueError(f"Invalid GCE resource name: {name!r}")
        if name in self._instances:
            raise ValueError(f"Instance {name!r} already exists")

        index = self._insert_count
        self._insert_count += 1
        machine_type = kwargs.get("machine_type", self.default_machine_type)
        logger.info(
            "GCP Compute instances.insert: name=%s type=%s zone=%s",
            name,
            machine_type,
            location_id,
        )
        instance = _stub_instances_insert(
            project=self.project,
            zone=location_id,
            name=name,
            machine_type=machine_type,
            labels=kwargs.get("labels", {}),
            tags=list(kwargs.get("tags", ())),
            internal_ip=_make_internal_ip(index),
            external_ip=_make_external_ip(index) if kwargs.get("public_ip", True) else None,
        )
        self._instances[name] = instance
        return self._to_node(instance)

    async def destroy_node(self, node_id: str) -> bool:
        name = node_id.rsplit("/", 1)[-1]
        instance = self._instances.get(name)
        if instance is None:
            logger.warning("destroy_node: no GCE instance %s", node_id)
            return False
        logger.info("GCP Compute instances.delete: name=%s", name)
        operation = _stub_operation(self.project, instance["selfLink"], "delete")
        if operation["status"] == "DONE":
            del self._instances[name]
            return True
        logger.error("Unexpected operation status for delete of %s: %s", name, operation)
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
        rule_name = name if location.scope is LocationScope.REGION else f"{name}-{location.id}"
        if not _GCE_NAME_RE.match(rule_name):
            raise ValueError(f"Invalid GCE resource name: {rule_name!r}")
        if rule_name in self._forwarding_rules:
            raise ValueError(f"Forwarding rule {rule_name!r} already exists")
        if load_balancer_port != instance_port:
            raise ValueError(
                "Network load balancing does not translate ports: "
                f"{load_balancer_port} != {instance_port}"
            )
        instance_links = []
        for node_id in sorted(node_ids):
            instance = self._instances.get(node_id)
            if instance is None:
                raise ResourceNotFoundError(f"Instance {node_id!r} was not found")
            if instance["status"] == "TERMINATED":
                raise ResourceNotFoundError(f"Instance {node_id!r} is not running (TERMINATED)")
            instance_links.append(instance["selfLink"])

        pool_name = f"{rule_name}-pool"
        region_scope = f"regions/{self.region}"
        logger.info(
            "GCP Compute targetPools.insert: name=%s instances=%d",
            pool_name,
            len(instance_links),
        )
        self._target_pools[pool_name] = {
            "name": pool_name,
            "instances": instance_links,
            "selfLink": _self_link(self.project, region_scope, "targetPools", pool_name),
        }
        _stub_operation(self.project, self._target_pools[pool_name]["selfLink"], "insert")

        address = _make_external_ip(40_000 + self._rule_count)
        self._rule_count += 1
        logger.info(
            "GCP Compute forwardingRules.insert: name=%s ip=%s port=%d (%s)",
            rule_name,
            address,
            load_balancer_port,
            protocol.value,
        )
        self._forwarding_rules[rule_name] = {
            "name": rule_name,
            "IPAddress": address,
            "IPProtocol": "TCP",
            "portRange": f"{load_balancer_port}-{load_balancer_port}",
            "target": self._target_pools[pool_name]["selfLink"],
            "description": f"{protocol.value} load balancer {name}",
        }
        return address

    async def destroy_load_balancer_at(self, address: IPAddress) -> bool:
        for rule_name, rule in list(self._forwarding_rules.items()):
            if ipaddress.ip_address(rule["IPAddress"]) == address:
                pool_name = rule["target"].rsplit("/", 1)[-1]
                logger.info(
                    "GCP Compute forwardingRules.delete: name=%s (pool %s)",
                    rule_name,
                    pool_name,
                )
                del self._forwarding_rules[rule_name]
                self._target_pools.pop(pool_name, None)
                return True
        logger.warning("No forwarding rule answers on %s", address)
        return False

    def list_forwarding_rules(self) -> list[dict]:
        return [dict(rule) for rule in self._forwarding_rules.values()]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _to_node(self, instance: dict) -> NodeMetadata:
        zone = instance["zone"].rsplit("/", 1)[-1]
        nic = instance["networkInterfaces"][0]
        public = tuple(c["natIP"] for c in nic.get("accessConfigs", []) if c.get("natIP"))
        return NodeMetadata(
            id=f"{self.project}/{zone}/{instance['name']}",
            provider_id=instance["name"],
            name=instance["name"],
            location=self._zones[zone],
            state=NodeState.from_provider(instance.get("status"), _GCE_STATES),
            tags=frozenset(instance.get("tags", {}).get("items", [])),
            public_addresses=public,
            private_addresses=(nic["networkIP"],),
            user_metadata=dict(instance.get("labels", {})),
        )
