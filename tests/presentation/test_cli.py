"""Tests for CLI module."""

import json
from unittest.mock import patch

import pytest

from cumulus.composition_root import create_container
from cumulus.domain.services.node_predicates import all_nodes
from cumulus.infrastructure.config import CumulusConfig, ProviderConfig
from cumulus.presentation.cli.cli import async_main, build_filter


def _write_inventory(tmp_path, nodes):
    path = tmp_path / "inventory.json"
    path.write_text(json.dumps({"nodes": nodes}))
    return str(path)


def _write_config(tmp_path, **sections):
    path = tmp_path / "cumulus.json"
    path.write_text(json.dumps(sections))
    return str(path)


AWS_NODES = [
    {"name": "web-1", "location": "us-east-1a", "tags": ["web"]},
    {"name": "web-2", "location": "us-east-1a", "tags": ["web"]},
    {"name": "web-3", "location": "us-east-1b", "tags": ["web"], "terminated": True},
]


class TestCLIHelp:
    """Test all help outputs (no adapter dependencies)."""

    @pytest.mark.asyncio
    async def test_no_command_prints_help(self, capsys):
        with patch("sys.argv", ["cumulus"]):
            await async_main()
        captured = capsys.readouterr()
        assert "multi-provider cloud load balancing" in captured.out

    @pytest.mark.asyncio
    async def test_help_flag(self):
        with patch("sys.argv", ["cumulus", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_lb_create_help(self):
        with patch("sys.argv", ["cumulus", "lb", "create", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_lb_without_subcommand_prints_help(self, capsys):
        with patch("sys.argv", ["cumulus", "lb"]):
            await async_main()
        assert "usage" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_verbose_flag(self):
        with patch("sys.argv", ["cumulus", "--verbose"]):
            await async_main()

    @pytest.mark.asyncio
    async def test_debug_flag(self):
        with patch("sys.argv", ["cumulus", "--debug"]):
            await async_main()


class TestCLIListing:
    @pytest.mark.asyncio
    async def test_providers(self, capsys):
        with patch("sys.argv", ["cumulus", "providers"]):
            await async_main()
        out = capsys.readouterr().out
        assert "Amazon Web Services" in out
        assert "Google Cloud Platform" in out
        assert "Microsoft Azure" in out

    @pytest.mark.asyncio
    async def test_locations(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        with patch("sys.argv", ["cumulus", "-c", config, "-p", "gcp", "locations"]):
            await async_main()
        out = capsys.readouterr().out
        assert "us-central1-a" in out
        assert "region=us-central1" in out

    @pytest.mark.asyncio
    async def test_unknown_provider(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        with patch("sys.argv", ["cumulus", "-c", config, "-p", "nimbus", "locations"]), \
             pytest.raises(SystemExit, match="2"):
            await async_main()
        assert "Unknown provider" in capsys.readouterr().out


class TestCLILoadBalancer:
    @pytest.mark.asyncio
    async def test_create(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        inventory = _write_inventory(tmp_path, AWS_NODES)
        with patch("sys.argv", [
            "cumulus", "-c", config, "lb", "create",
            "--name", "web", "--protocol", "tcp", "--lb-port", "80",
            "--instance-port", "8080", "--inventory", inventory,
        ]):
            await async_main()

        out = capsys.readouterr().out
        assert "[+] us-east-1a: web-us-east-1a-" in out
        assert "us-east-1b" not in out

    @pytest.mark.asyncio
    async def test_create_with_filters(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        inventory = _write_inventory(tmp_path, [
            {"name": "web-1", "location": "us-east-1a", "tags": ["web"]},
            {"name": "db-1", "location": "us-east-1c", "tags": ["db"]},
        ])
        with patch("sys.argv", [
            "cumulus", "-c", config, "lb", "create", "--name", "web",
            "--tag", "web", "--location", "us-east-1", "--inventory", inventory,
        ]):
            await async_main()

        out = capsys.readouterr().out
        assert "[+] us-east-1a" in out
        assert "us-east-1c" not in out

    @pytest.mark.asyncio
    async def test_invalid_protocol(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        inventory = _write_inventory(tmp_path, AWS_NODES)
        with patch("sys.argv", [
            "cumulus", "-c", config, "lb", "create", "--name", "web",
            "--protocol", "UDP", "--inventory", inventory,
        ]), pytest.raises(SystemExit, match="2"):
            await async_main()
        assert "Acceptable values for protocol are HTTP or TCP" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_nothing_matched(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        with patch("sys.argv", ["cumulus", "-c", config, "lb", "create", "--name", "web"]), \
             pytest.raises(SystemExit, match="1"):
            await async_main()
        assert "No running nodes matched" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_missing_inventory(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        with patch("sys.argv", [
            "cumulus", "-c", config, "lb", "create", "--name", "web",
            "--inventory", str(tmp_path / "missing.json"),
        ]), pytest.raises(SystemExit, match="1"):
            await async_main()
        assert "Inventory file not found" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_unresolved_location_exit_code(self, capsys, tmp_path):
        config = _write_config(tmp_path, load_balancer={
            "resolve_attempts": 2,
            "retry_delay_seconds": 0,
            "dns_propagation_lookups": 5,
        })
        inventory = _write_inventory(tmp_path, AWS_NODES)
        with patch("sys.argv", [
            "cumulus", "-c", config, "lb", "create", "--name", "web", "--inventory", inventory,
        ]), pytest.raises(SystemExit, match="3"):
            await async_main()
        assert "did not resolve after 2 attempt(s)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_destroy_unknown_address_fails(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        with patch("sys.argv", ["cumulus", "-c", config, "lb", "destroy", "192.0.2.10"]), \
             pytest.raises(SystemExit, match="1"):
            await async_main()
        out = capsys.readouterr().out
        assert "[-] No load balancer answers on 192.0.2.10" in out
        assert "[+]" not in out

    @pytest.mark.asyncio
    async def test_destroy_existing_balancer(self, capsys, tmp_path):
        container = create_container(CumulusConfig(provider=ProviderConfig(name="gcp")))
        await container.adapter.create_node("web-1", "us-central1-a")
        (address,) = await container.load_balancer_service.load_balance_nodes_matching(
            all_nodes, "web", "TCP", 80, 80
        )
        config = _write_config(tmp_path, provider={"name": "gcp"})
        with patch("sys.argv", ["cumulus", "-c", config, "lb", "destroy", str(address)]), \
             patch("cumulus.presentation.cli.cli.create_container", return_value=container):
            await async_main()

        assert f"[+] Destroyed load balancer at {address}" in capsys.readouterr().out
        assert container.adapter.list_forwarding_rules() == []

    @pytest.mark.asyncio
    async def test_destroy_invalid_address(self, capsys, tmp_path):
        config = _write_config(tmp_path)
        with patch("sys.argv", ["cumulus", "-c", config, "lb", "destroy", "lb.example.com"]), \
             pytest.raises(SystemExit, match="2"):
            await async_main()
        assert "Invalid address" in capsys.readouterr().out


class TestBuildFilter:
    def test_no_filters_matches_all(self, node_factory):
        assert build_filter(None, None)(node_factory("A"))

    def test_location_matches_zone_or_region(self, node_factory, location_factory):
        node = node_factory("A", location=location_factory("z1"))
        assert build_filter(None, "z1")(node)
        assert build_filter(None, "region1")(node)
        assert not build_filter(None, "z2")(node)

    def test_tag_and_location(self, node_factory, location_factory):
        node = node_factory("A", location=location_factory("z1"), tags=("web",))
        assert build_filter("web", "z1")(node)
        assert not build_filter("db", "z1")(node)
