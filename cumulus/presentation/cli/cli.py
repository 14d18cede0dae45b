"""
CLI Module

Architectural Intent:
- Command-line interface for cumulus
- Entry point for all user interactions
- Delegates to the load balancer service via the composition root
- Supports --verbose/--debug flags for log level control

Provider adapters are simulated in memory, so each invocation starts from an
empty inventory; --inventory seeds it from a JSON file:

    {"nodes": [{"name": "web-1", "location": "us-east-1a", "tags": ["web"]},
               {"name": "web-2", "location": "us-east-1b", "terminated": true}]}
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Optional

from cumulus.application.dtos.load_balancer_dtos import LocationStatus
from cumulus.composition_root import CumulusContainer, create_container
from cumulus.domain.events.load_balancer_events import LoadBalancerDestroyedEvent
from cumulus.domain.services.node_predicates import (
    NodePredicate,
    all_nodes,
    and_,
    in_location,
    with_tag,
)
from cumulus.domain.value_objects.location import Location, LocationScope
from cumulus.infrastructure.config import ProviderConfig, load_config
from cumulus.infrastructure.logging import configure_logging
from cumulus.infrastructure.providers import list_providers
from cumulus.infrastructure.telemetry.otel_exporter import OTELConfig, configure_telemetry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="cumulus: multi-provider cloud load balancing"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config (default: cumulus.json)"
    )
    parser.add_argument(
        "--provider", "-p", default=None, help="Provider id overriding the config"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("providers", help="List supported providers")

    locations_parser = subparsers.add_parser(
        "locations", help="List assignable locations for the provider"
    )
    locations_parser.add_argument("--inventory", "-i", help="JSON node inventory to seed")

    lb_parser = subparsers.add_parser("lb", help="Manage load balancers")
    lb_sub = lb_parser.add_subparsers(dest="lb_command", help="Load balancer commands")

    create_parser = lb_sub.add_parser(
        "create", help="Create one load balancer per location of matching nodes"
    )
    create_parser.add_argument("--name", "-n", required=True, help="Load balancer name")
    create_parser.add_argument(
        "--protocol", default="HTTP", help="HTTP or TCP (case-insensitive)"
    )
    create_parser.add_argument(
        "--lb-port", type=int, default=80, help="Port the balancer listens on"
    )
    create_parser.add_argument(
        "--instance-port", type=int, default=80, help="Backend instance port"
    )
    create_parser.add_argument("--tag", "-t", help="Only balance nodes with this tag")
    create_parser.add_argument(
        "--location", "-l", help="Only balance nodes in this location (region or zone)"
    )
    create_parser.add_argument("--inventory", "-i", help="JSON node inventory to seed")

    destroy_parser = lb_sub.add_parser("destroy", help="Destroy a load balancer")
    destroy_parser.add_argument("address", help="Address returned by 'lb create'")

    return parser


def build_filter(tag: Optional[str], location_id: Optional[str]) -> NodePredicate:
    predicates: list[NodePredicate] = []
    if tag:
        predicates.append(with_tag(tag))
    if location_id:
        # Location equality is (scope, id); try both scopes a user may mean.
        region = in_location(Location(LocationScope.REGION, location_id))
        zone = in_location(Location(LocationScope.ZONE, location_id))
        predicates.append(lambda node: region(node) or zone(node))
    return and_(*predicates) if predicates else all_nodes


async def seed_inventory(container: CumulusContainer, path: str) -> int:
    """Create (and optionally terminate) the nodes listed in an inventory file."""
    with open(Path(path)) as f:
        data = json.load(f)
    count = 0
    for entry in data.get("nodes", []):
        node = await container.adapter.create_node(
            entry["name"], entry["location"], tags=entry.get("tags", [])
        )
        if entry.get("terminated"):
            await container.adapter.destroy_node(node.provider_id)
        count += 1
    logger.info("Seeded %d node(s) from %s", count, path)
    return count


async def async_main():
    parser = build_parser()
    args = parser.parse_args()
    config = load_config(args.config)

    # Flags win over the configured level
    if args.debug:
        configure_logging(level=logging.DEBUG, json_format=config.log_json)
    elif args.verbose:
        configure_logging(level=logging.INFO, json_format=config.log_json)
    else:
        configure_logging(level=config.log_level, json_format=config.log_json)

    verbose = args.verbose or args.debug

    if args.command == "providers":
        for provider in list_providers():
            regions = ", ".join(provider.iso3166_codes)
            print(f"{provider.id:<8} {provider.name:<24} api={provider.api.id:<14} {regions}")
        return

    if args.command is None or (args.command == "lb" and args.lb_command is None):
        parser.print_help()
        return

    if args.provider:
        config = dataclasses.replace(config, provider=ProviderConfig(name=args.provider))

    try:
        container = create_container(config)
    except ValueError as e:
        print(f"[-] {e}")
        sys.exit(2)

    telemetry = configure_telemetry(
        OTELConfig(
            endpoint=config.telemetry.endpoint,
            service_name=config.telemetry.service_name,
            insecure=config.telemetry.insecure,
        )
    )
    try:
        await _dispatch(args, container, verbose)
    finally:
        telemetry.shutdown()


async def _dispatch(args: argparse.Namespace, container: CumulusContainer, verbose: bool):
    service = container.load_balancer_service

    if args.command == "locations":
        if args.inventory:
            await seed_inventory(container, args.inventory)
        for location in await container.adapter.list_assignable_locations():
            region = location.region
            print(f"{location.id:<20} {location.scope.value:<8} region={region.id if region else '-'}")
        return

    if args.lb_command == "create":
        try:
            if args.inventory:
                await seed_inventory(container, args.inventory)
            print(
                f"[*] Creating load balancer '{args.name}' "
                f"({args.protocol} {args.lb_port}->{args.instance_port}) "
                f"on {container.provider.name}..."
            )
            report = await service.create_load_balancers(
                build_filter(args.tag, args.location),
                args.name,
                args.protocol,
                args.lb_port,
                args.instance_port,
            )
        except FileNotFoundError as e:
            print(f"[-] Inventory file not found: {e}")
            sys.exit(1)
        except ValueError as e:
            print(f"[-] Invalid request: {e}")
            if verbose:
                traceback.print_exc()
            sys.exit(2)
        except Exception as e:
            print(f"[-] Load balancer creation failed: {e}")
            if verbose:
                traceback.print_exc()
            sys.exit(1)

        if not report.outcomes:
            print("[-] No running nodes matched; nothing was created.")
            sys.exit(1)
        for outcome in report.outcomes:
            if outcome.status is LocationStatus.RESOLVED:
                addresses = ", ".join(sorted(str(a) for a in outcome.addresses))
                print(f"[+] {outcome.location.id}: {outcome.dns_name} -> {addresses}")
            else:
                print(
                    f"[!] {outcome.location.id}: {outcome.dns_name} created but did not "
                    f"resolve after {outcome.attempts} attempt(s)"
                )
        if not report.is_complete:
            sys.exit(3)
        return

    if args.lb_command == "destroy":
        outcomes: list[LoadBalancerDestroyedEvent] = []

        async def record(event: LoadBalancerDestroyedEvent) -> None:
            outcomes.append(event)

        container.event_bus.subscribe(LoadBalancerDestroyedEvent, record)
        try:
            print(f"[*] Destroying load balancer at {args.address}...")
            await service.destroy_load_balancer(args.address)
        except ValueError as e:
            print(f"[-] Invalid address: {e}")
            sys.exit(2)
        except Exception as e:
            print(f"[-] Destroy failed: {e}")
            if verbose:
                traceback.print_exc()
            sys.exit(1)
        finally:
            container.event_bus.unsubscribe(LoadBalancerDestroyedEvent, record)

        if not outcomes or not outcomes[-1].successful:
            print(f"[-] No load balancer answers on {args.address}; nothing was destroyed.")
            sys.exit(1)
        print(f"[+] Destroyed load balancer at {args.address}")
        return


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
