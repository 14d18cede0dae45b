"""
AWS Cloud Provider Adapter

Architectural Intent:
- Implements ComputeServicePort for AWS EC2 and the load balancer backend for
  Classic Elastic Load Balancing
- Simulates boto3 SDK call patterns without importing the real SDK, enabling
  integration testing and local development with zero cloud credentials
- When the real boto3 library is available, replace the _stub_* helpers with
  actual boto3.client("ec2") / boto3.client("elb") calls; the public method
  signatures remain stable

Design Decisions:
- __init__ accepts all provider configuration (region, credentials profile,
  AMI/instance-type defaults) so the adapter is fully self-contained
- Terminated instances stay visible in DescribeInstances (as they do on EC2
  for about an hour), so callers must filter on state themselves
- Classic ELB names are unique per region; a balancer created for a zone is
  named "<name>-<zone>" so the same logical name can span several zones
- Every simulated API call is logged at DEBUG level with the request payload,
  mirroring the structure of boto3 response dictionaries

Simulated AWS region defaults: us-east-1
Simulated AMI: ami-0abcdef1234567890 (placeholder)
"""

import datetime
import hashlib
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

# region -> (ISO 3166 code, zone suffixes)
AWS_REGIONS: dict[str, tuple[str, tuple[str, ...]]] = {
    "us-east-1": ("US-VA", ("a", "b", "c", "d", "f")),
    "us-east-2": ("US-OH", ("a", "b", "c")),
    "us-west-2": ("US-OR", ("a", "b", "c", "d")),
    "eu-west-1": ("IE", ("a", "b", "c")),
    "eu-central-1": ("DE-HE", ("a", "b", "c")),
    "ap-southeast-1": ("SG", ("a", "b", "c")),
}

_EC2_STATES = {
    "pending": NodeState.PENDING,
    "running": NodeState.RUNNING,
    "shutting-down": NodeState.PENDING,
    "stopping": NodeState.PENDING,
    "stopped": NodeState.SUSPENDED,
    "terminated": NodeState.TERMINATED,
}

_ELB_NAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,30}[A-Za-z0-9])?$")


class InvalidInstanceError(LookupError):
    """Mirrors the ELB InvalidInstance / EC2 InvalidInstanceID.NotFound errors."""


# ---------------------------------------------------------------------------
# Internal helpers that mimic the shape of real boto3 response payloads.
# ---------------------------------------------------------------------------

def _make_instance_id() -> str:
    """Return a plausible EC2 instance ID."""
    return "i-" + uuid.uuid4().hex[:17]


def _make_private_ip(index: int = 0) -> str:
    """Return a deterministic private IP for simulation."""
    return f"10.0.{(index // 256) % 256}.{index % 256 + 1}"


def _make_public_ip(index: int = 0) -> str:
    return f"54.{(index // 65536) % 256}.{(index // 256) % 256}.{index % 256 + 1}"


def _response_metadata() -> dict:
    return {
        "RequestId": str(uuid.uuid4()),
        "HTTPStatusCode": 200,
        "HTTPHeaders": {},
    }


def _stub_describe_instances(simulated_instances: list[dict]) -> dict:
    """
    Simulate a boto3 EC2.describe_instances() response.

    The real call looks like:
        ec2 = boto3.client("ec2", region_name=region)
        response = ec2.describe_instances()
    """
    return {
        "Reservations": [
            {
                "ReservationId": "r-" + uuid.uuid4().hex[:17],
                "OwnerId": "123456789012",
                "Instances": [inst],
            }
            for inst in simulated_instances
        ],
        "ResponseMetadata": _response_metadata(),
    }


def _stub_run_instances(
    availability_zone: str,
    image_id: str,
    instance_type: str,
    name: str,
    tags: dict[str, str],
    private_ip: str,
    public_ip: Optional[str],
) -> dict:
    """
    Simulate a boto3 EC2.run_instances() response.

    The real call looks like:
        response = ec2.run_instances(
            ImageId=image_id,
            InstanceType=instance_type,
            MinCount=1,
            MaxCount=1,
            Placement={"AvailabilityZone": availability_zone},
            TagSpecifications=[{"ResourceType": "instance", "Tags": [...]}],
        )
    """
    now = datetime.datetime.now(datetime.UTC).isoformat()
    all_tags = {"Name": name, "ManagedBy": "cumulus", **tags}
    return {
        "Instances": [
            {
                "InstanceId": _make_instance_id(),
                "InstanceType": instance_type,
                "ImageId": image_id,
                "State": {"Code": 0, "Name": "pending"},
                "PrivateIpAddress": private_ip,
                "PublicIpAddress": public_ip,
                "LaunchTime": now,
                "Placement": {"AvailabilityZone": availability_zone},
                "Tags": [{"Key": k, "Value": v} for k, v in all_tags.items()],
            }
        ],
        "ResponseMetadata": _response_metadata(),
    }


def _stub_terminate_instances(instance_ids: list[str]) -> dict:
    """
    Simulate a boto3 EC2.terminate_instances() response.

    The real call looks like:
        response = ec2.terminate_instances(InstanceIds=instance_ids)
    """
    return {
        "TerminatingInstances": [
            {
                "InstanceId": iid,
                "CurrentState": {"Code": 32, "Name": "shutting-down"},
                "PreviousState": {"Code": 16, "Name": "running"},
            }
            for iid in instance_ids
        ],
        "ResponseMetadata": _response_metadata(),
    }


def _stub_create_load_balancer(
    region: str,
    name: str,
    listeners: list[dict],
    availability_zones: list[str],
) -> dict:
    """
    Simulate a boto3 ELB.create_load_balancer() response.

    The real call looks like:
        elb = boto3.client("elb", region_name=region)
        response = elb.create_load_balancer(
            LoadBalancerName=name,
            Listeners=listeners,
            AvailabilityZones=availability_zones,
        )
    """
    suffix = hashlib.sha1(f"{region}/{name}".encode()).hexdigest()[:10]
    return {
        "DNSName": f"{name}-{suffix}.{region}.elb.amazonaws.com",
        "ResponseMetadata": _response_metadata(),
    }


def _stub_register_instances(name: str, instance_ids: list[str]) -> dict:
    """
    Simulate a boto3 ELB.register_instances_with_load_balancer() response.

    The real call looks like:
        elb.register_instances_with_load_balancer(
            LoadBalancerName=name,
            Instances=[{"InstanceId": iid} for iid in instance_ids],
        )
    """
    return {
        "Instances": [{"InstanceId": iid} for iid in instance_ids],
        "ResponseMetadata": _response_metadata(),
    }


def _stub_delete_load_balancer(name: str) -> dict:
    """
    Simulate a boto3 ELB.delete_load_balancer() response.

    The real call looks like:
        elb.delete_load_balancer(LoadBalancerName=name)
    """
    return {"ResponseMetadata": _response_metadata()}


# ---------------------------------------------------------------------------
# Public adapter
# ---------------------------------------------------------------------------

class AWSAdapter:
    """
    AWS EC2 + Classic ELB adapter.

    The in-memory registries (_instances, _load_balancers) play the role of the
    EC2 and ELB backends. Balancer DNS names are published into the shared
    InMemoryDnsZone so the load balancer service can resolve them.

    Configuration parameters
    ------------------------
    region : str
        AWS region name (e.g. "us-east-1").
    profile : str | None
        AWS credentials profile name passed to boto3.Session. Ignored in
        stub mode.
    default_ami : str
        AMI ID used when the caller does not supply one via kwargs.
    default_instance_type : str
        Instance type used when the caller does not supply one via kwargs.
    dns_zone : InMemoryDnsZone | None
        Zone that receives balancer DNS records. A private zone is created
        when omitted.
    """

    provider_id = "aws"

    def __init__(
        self,
        region: str = "us-east-1",
        profile: Optional[str] = None,
        default_ami: str = "ami-0abcdef1234567890",
        default_instance_type: str = "t3.micro",
        dns_zone: Optional[InMemoryDnsZone] = None,
    ) -> None:
        if region not in AWS_REGIONS:
            raise ValueError(f"Unknown AWS region: {region!r}")
        self.region = region
        self.profile = profile
        self.default_ami = default_ami
        self.default_instance_type = default_instance_type
        self.dns_zone = dns_zone if dns_zone is not None else InMemoryDnsZone()

        # Keyed by InstanceId; value is the raw instance dict.
        self._instances: dict[str, dict] = {}
        # Keyed by LoadBalancerName.
        self._load_balancers: dict[str, dict] = {}
        self._launch_count = 0
        self._lb_count = 0

        iso_code, zones = AWS_REGIONS[region]
        self._region_location = Location(
            scope=LocationScope.REGION,
            id=region,
            description=region,
            parent=Location(LocationScope.PROVIDER, "aws", "Amazon Web Services"),
            iso3166_codes=(iso_code,),
        )
        self._zones = {
            f"{region}{z}": self._region_location.with_zone(f"{region}{z}")
            for z in zones
        }

        logger.debug(
            "AWSAdapter initialised (region=%s, profile=%s, ami=%s)",
            region,
            profile,
            default_ami,
        )

    # ------------------------------------------------------------------
    # ComputeServicePort implementation
    # ------------------------------------------------------------------

    async def list_assignable_locations(self) -> list[Location]:
        return list(self._zones.values())

    async def list_nodes_details_matching(
        self, predicate: NodePredicate
    ) -> list[NodeMetadata]:
        logger.info("AWS EC2 describe_instances (region=%s)", self.region)
        response = _stub_describe_instances(list(self._instances.values()))
        logger.debug(
            "describe_instances returned %d reservation(s)",
            len(response["Reservations"]),
        )

        nodes: list[NodeMetadata] = []
        for reservation in response["Reservations"]:
            for instance in reservation["Instances"]:
                node = self._to_node(instance)
                if predicate(node):
                    nodes.append(node)
        logger.info("list_nodes_details_matching found %d node(s)", len(nodes))
        return nodes

    async def create_node(
        self, name: str, location_id: str, **kwargs: Any
    ) -> NodeMetadata:
        """
        Launch an EC2 instance in the availability zone location_id.

        kwargs
            ami : str            - Override the default AMI ID.
            instance_type : str  - Override the default instance type.
            tags : list[str]     - Bare tags (stored as EC2 tags with "" values).
            public_ip : bool     - Assign a public address (default True).
        """
        if location_id not in self._zones:
            raise ValueError(
                f"Availability zone {location_id!r} is not in region {self.region}"
            )
        image_id = kwargs.get("ami", self.default_ami)
        instance_type = kwargs.get("instance_type", self.default_instance_type)
        tags = {t: "" for t in kwargs.get("tags", ())}
        index = self._launch_count
        self._launch_count += 1

        logger.info(
            "AWS EC2 run_instances: name=%s type=%s zone=%s ami=%s",
            name,
            instance_type,
            location_id,
            image_id,
        )
        response = _stub_run_instances(
            availability_zone=location_id,
            image_id=image_id,
            instance_type=instance_type,
            name=name,
            tags=tags,
            private_ip=_make_private_ip(index),
            public_ip=_make_public_ip(index) if kwargs.get("public_ip", True) else None,
        )
        instance = response["Instances"][0]
        # Simulate the instance reaching "running" state.
        instance["State"] = {"Code": 16, "Name": "running"}
        self._instances[instance["InstanceId"]] = instance
        logger.info("Launched EC2 instance %s in %s", instance["InstanceId"], location_id)
        return self._to_node(instance)

    async def destroy_node(self, node_id: str) -> bool:
        instance = self._instances.get(node_id)
        if instance is None or instance["State"]["Name"] == "terminated":
            logger.warning("destroy_node: no live instance %s", node_id)
            return False

        logger.info("AWS EC2 terminate_instances: instance_id=%s", node_id)
        response = _stub_terminate_instances([node_id])
        terminating = response.get("TerminatingInstances", [])
        if terminating and terminating[0]["CurrentState"]["Name"] == "shutting-down":
            # The instance stays listed, in its final state.
            instance["State"] = {"Code": 48, "Name": "terminated"}
            return True

        logger.error("Unexpected termination response for %s: %s", node_id, terminating)
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
        elb_name = self._elb_name(location, name)
        if elb_name in self._load_balancers:
            raise ValueError(f"Load balancer {elb_name!r} already exists in {self.region}")
        zones = self._zones_for(location)
        for iid in node_ids:
            instance = self._instances.get(iid)
            if instance is None or instance["State"]["Name"] == "terminated":
                raise InvalidInstanceError(f"InvalidInstance: {iid}")

        listeners = [
            {
                "Protocol": protocol.value,
                "LoadBalancerPort": load_balancer_port,
                "InstanceProtocol": protocol.value,
                "InstancePort": instance_port,
            }
        ]
        logger.info(
            "AWS ELB create_load_balancer: name=%s zones=%s listeners=%s",
            elb_name,
            zones,
            listeners,
        )
        response = _stub_create_load_balancer(self.region, elb_name, listeners, zones)
        registered = _stub_register_instances(elb_name, sorted(node_ids))
        logger.debug(
            "register_instances_with_load_balancer: %s", registered["Instances"]
        )

        dns_name = response["DNSName"]
        address = _make_public_ip(50_000 + self._lb_count)
        self._lb_count += 1
        self._load_balancers[elb_name] = {
            "LoadBalancerName": elb_name,
            "DNSName": dns_name,
            "ListenerDescriptions": [{"Listener": listener} for listener in listeners],
            "AvailabilityZones": zones,
            "Instances": registered["Instances"],
            "Address": ipaddress.ip_address(address),
        }
        self.dns_zone.register(dns_name, [address])
        return dns_name

    async def destroy_load_balancer_at(self, address: IPAddress) -> bool:
        for elb_name, lb in list(self._load_balancers.items()):
            if lb["Address"] == address:
                logger.info("AWS ELB delete_load_balancer: name=%s", elb_name)
                _stub_delete_load_balancer(elb_name)
                self.dns_zone.unregister(lb["DNSName"])
                del self._load_balancers[elb_name]
                return True
        logger.warning("No ELB answers on %s", address)
        return False

    def describe_load_balancers(self) -> list[dict]:
        return [dict(lb) for lb in self._load_balancers.values()]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _elb_name(self, location: Location, name: str) -> str:
        elb_name = name if location.scope is LocationScope.REGION else f"{name}-{location.id}"
        if not _ELB_NAME_RE.match(elb_name):
            raise ValueError(
                f"ValidationError: load balancer name {elb_name!r} must be 1-32 "
                "alphanumeric or hyphen characters"
            )
        return elb_name

    def _zones_for(self, location: Location) -> list[str]:
        if location.scope is LocationScope.ZONE and location.id in self._zones:
            return [location.id]
        if location.scope is LocationScope.REGION and location.id == self.region:
            return sorted(self._zones)
        raise ValueError(f"Location {location} is not served by region {self.region}")

    def _to_node(self, instance: dict) -> NodeMetadata:
        tags = {t["Key"]: t["Value"] for t in instance.get("Tags", [])}
        zone = instance["Placement"]["AvailabilityZone"]
        public_ip = instance.get("PublicIpAddress")
        private_ip = instance.get("PrivateIpAddress")
        return NodeMetadata(
            id=f"{self.region}/{instance['InstanceId']}",
            provider_id=instance["InstanceId"],
            name=tags.get("Name", ""),
            location=self._zones[zone],
            state=NodeState.from_provider(instance["State"]["Name"], _EC2_STATES),
            tags=frozenset(k for k in tags if k not in ("Name", "ManagedBy")),
            public_addresses=(public_ip,) if public_ip else (),
            private_addresses=(private_ip,) if private_ip else (),
            user_metadata=tags,
        )
