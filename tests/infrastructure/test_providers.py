"""Tests for the provider catalog."""

import pytest

from cumulus.domain.entities.provider_metadata import ApiType
from cumulus.infrastructure.providers import (
    AWS_EC2_API,
    AWS_ELB_API,
    LOAD_BALANCER_APIS,
    get_provider,
    list_providers,
)


class TestProviderCatalog:
    def test_list_sorted(self):
        assert [p.id for p in list_providers()] == ["aws", "azure", "gcp"]

    def test_get_provider(self):
        aws = get_provider("aws")
        assert aws.name == "Amazon Web Services"
        assert aws.api is AWS_EC2_API
        assert "US-VA" in aws.iso3166_codes

    def test_unknown_provider(self):
        with pytest.raises(KeyError, match="known: aws, azure, gcp"):
            get_provider("rackspace")

    def test_elb_api_derived_from_ec2(self):
        assert AWS_ELB_API.type is ApiType.LOADBALANCER
        assert AWS_ELB_API.identity_name == AWS_EC2_API.identity_name
        assert AWS_ELB_API.credential_name == AWS_EC2_API.credential_name

    def test_every_provider_has_load_balancer_api(self):
        assert set(LOAD_BALANCER_APIS) == {p.id for p in list_providers()}

    def test_effective_endpoint(self):
        assert get_provider("azure").effective_endpoint == "https://management.azure.com"
