"""Tests for API and provider metadata."""

import pytest

from cumulus.domain.entities.provider_metadata import ApiMetadata, ApiType, ProviderMetadata


def _make_api(**overrides) -> ApiMetadata:
    defaults = dict(
        id="openstack-nova",
        name="OpenStack Nova API",
        type=ApiType.COMPUTE,
        identity_name="tenantName:user",
        credential_name="password",
        documentation="https://docs.openstack.org/api-ref/compute/",
        default_endpoint="http://localhost:5000/v2.0/",
        version="1.1",
    )
    defaults.update(overrides)
    return ApiMetadata(**defaults)


def _make_provider(**overrides) -> ProviderMetadata:
    defaults = dict(
        id="example-cloud",
        name="Example Cloud",
        api=_make_api(),
        homepage="https://cloud.example.com",
        console="https://console.example.com",
        iso3166_codes=("US-CA", "MY-10", "DE"),
    )
    defaults.update(overrides)
    return ProviderMetadata(**defaults)


class TestApiMetadata:
    def test_fields(self):
        api = _make_api()
        assert api.type is ApiType.COMPUTE
        assert api.version == "1.1"

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError, match="id"):
            _make_api(id="")

    def test_non_http_documentation_rejected(self):
        with pytest.raises(ValueError, match="documentation"):
            _make_api(documentation="ftp://docs.example.com")

    def test_derive_replaces_fields(self):
        base = _make_api()
        derived = base.derive(id="openstack-nova-ec2", name="Nova EC2 API")
        assert derived.id == "openstack-nova-ec2"
        assert derived.identity_name == base.identity_name
        assert base.id == "openstack-nova"

    def test_derive_validates(self):
        with pytest.raises(ValueError):
            _make_api().derive(default_endpoint="not a uri")


class TestProviderMetadata:
    def test_effective_endpoint_falls_back_to_api(self):
        assert _make_provider().effective_endpoint == "http://localhost:5000/v2.0/"

    def test_effective_endpoint_override(self):
        provider = _make_provider(endpoint="https://api.example.com")
        assert provider.effective_endpoint == "https://api.example.com"

    @pytest.mark.parametrize("code", ["us-ca", "USA", "US_CA", "US-CALIF"])
    def test_invalid_iso_codes_rejected(self, code):
        with pytest.raises(ValueError, match="ISO 3166"):
            _make_provider(iso3166_codes=(code,))

    def test_derive_keeps_api(self):
        base = _make_provider()
        reseller = base.derive(id="reseller", name="Reseller", iso3166_codes=("AU-NSW",))
        assert reseller.api is base.api
        assert reseller.iso3166_codes == ("AU-NSW",)

    def test_invalid_homepage_rejected(self):
        with pytest.raises(ValueError, match="homepage"):
            _make_provider(homepage="cloud.example.com")
