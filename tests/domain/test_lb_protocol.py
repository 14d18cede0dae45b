"""Tests for LoadBalancerProtocol parsing."""

import pytest

from cumulus.domain.value_objects.lb_protocol import LoadBalancerProtocol


class TestLoadBalancerProtocol:
    @pytest.mark.parametrize("raw", ["HTTP", "http", "Http"])
    def test_http_any_case(self, raw):
        assert LoadBalancerProtocol.parse(raw) is LoadBalancerProtocol.HTTP

    @pytest.mark.parametrize("raw", ["TCP", "tcp", "tCp"])
    def test_tcp_any_case(self, raw):
        assert LoadBalancerProtocol.parse(raw) is LoadBalancerProtocol.TCP

    def test_enum_passes_through(self):
        assert LoadBalancerProtocol.parse(LoadBalancerProtocol.TCP) is LoadBalancerProtocol.TCP

    @pytest.mark.parametrize("raw", ["UDP", "", "HTTPS", "tcp/ip", " http ", " tcp ", "HTTP\n"])
    def test_rejects_other_values(self, raw):
        with pytest.raises(ValueError, match="Acceptable values for protocol are HTTP or TCP"):
            LoadBalancerProtocol.parse(raw)

    def test_rejects_non_string(self):
        with pytest.raises(ValueError, match="HTTP or TCP"):
            LoadBalancerProtocol.parse(None)

    def test_str_is_canonical_name(self):
        assert str(LoadBalancerProtocol.TCP) == "TCP"
        assert LoadBalancerProtocol.HTTP == "HTTP"
