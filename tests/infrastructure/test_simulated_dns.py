"""Tests for the in-memory DNS zone."""

import ipaddress

import pytest

from cumulus.domain.ports.resolver_port import AddressResolverPort, UnknownHostError
from cumulus.infrastructure.adapters.simulated_dns import InMemoryDnsZone


class TestInMemoryDnsZone:
    def test_satisfies_port(self):
        assert isinstance(InMemoryDnsZone(), AddressResolverPort)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            InMemoryDnsZone(propagation_lookups=-1)

    @pytest.mark.asyncio
    async def test_registered_name_resolves(self):
        zone = InMemoryDnsZone()
        zone.register("lb.example.com", ["10.0.0.1", "10.0.0.2"])
        assert await zone.resolve("lb.example.com") == [
            ipaddress.ip_address("10.0.0.1"),
            ipaddress.ip_address("10.0.0.2"),
        ]

    @pytest.mark.asyncio
    async def test_names_are_case_insensitive_and_ignore_trailing_dot(self):
        zone = InMemoryDnsZone()
        zone.register("LB.Example.com.", ["10.0.0.1"])
        assert await zone.resolve("lb.example.COM") == [ipaddress.ip_address("10.0.0.1")]

    @pytest.mark.asyncio
    async def test_unknown_name(self):
        with pytest.raises(UnknownHostError, match="NXDOMAIN"):
            await InMemoryDnsZone().resolve("nope.example.com")

    @pytest.mark.asyncio
    async def test_ip_literal_resolves_to_itself(self):
        assert await InMemoryDnsZone().resolve("34.64.1.1") == [ipaddress.ip_address("34.64.1.1")]

    @pytest.mark.asyncio
    async def test_propagation_delay(self):
        zone = InMemoryDnsZone(propagation_lookups=2)
        zone.register("lb.example.com", ["10.0.0.1"])
        for _ in range(2):
            with pytest.raises(UnknownHostError, match="not yet propagated"):
                await zone.resolve("lb.example.com")
        assert await zone.resolve("lb.example.com") == [ipaddress.ip_address("10.0.0.1")]
        assert zone.lookups == ["lb.example.com"] * 3

    @pytest.mark.asyncio
    async def test_per_record_delay_override(self):
        zone = InMemoryDnsZone(propagation_lookups=5)
        zone.register("lb.example.com", ["10.0.0.1"], propagation_lookups=0)
        assert await zone.resolve("lb.example.com")

    @pytest.mark.asyncio
    async def test_unregister(self):
        zone = InMemoryDnsZone()
        zone.register("lb.example.com", ["10.0.0.1"])
        assert zone.unregister("lb.example.com") is True
        assert zone.unregister("lb.example.com") is False
        with pytest.raises(UnknownHostError):
            await zone.resolve("lb.example.com")

    def test_names_for(self):
        zone = InMemoryDnsZone()
        zone.register("a.example.com", ["10.0.0.1"])
        zone.register("b.example.com", ["10.0.0.2"])
        assert zone.names_for(ipaddress.ip_address("10.0.0.2")) == ["b.example.com"]
