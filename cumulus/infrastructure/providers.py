"""
Provider Catalog

Architectural Intent:
- Describes the providers cumulus ships adapters for
- Looked up by id from configuration and the CLI
- Related APIs are derived from a base API with derive(), the same way a
  vendor clone reuses another vendor's dialect
"""

from cumulus.domain.entities.provider_metadata import (
    ApiMetadata,
    ApiType,
    ProviderMetadata,
)

AWS_EC2_API = ApiMetadata(
    id="aws-ec2",
    name="Amazon Elastic Compute Cloud (EC2) API",
    type=ApiType.COMPUTE,
    identity_name="Access Key ID",
    credential_name="Secret Access Key",
    documentation="https://docs.aws.amazon.com/AWSEC2/latest/APIReference/",
    default_endpoint="https://ec2.us-east-1.amazonaws.com",
    version="2016-11-15",
)

AWS_ELB_API = AWS_EC2_API.derive(
    id="aws-elb",
    name="Elastic Load Balancing API",
    type=ApiType.LOADBALANCER,
    documentation="https://docs.aws.amazon.com/elasticloadbalancing/2012-06-01/APIReference/",
    default_endpoint="https://elasticloadbalancing.us-east-1.amazonaws.com",
    version="2012-06-01",
)

GCP_COMPUTE_API = ApiMetadata(
    id="gcp-compute",
    name="Google Compute Engine API",
    type=ApiType.COMPUTE,
    identity_name="Service Account Email",
    credential_name="Private Key (JSON)",
    documentation="https://cloud.google.com/compute/docs/reference/rest/v1",
    default_endpoint="https://compute.googleapis.com/compute/v1",
    version="v1",
)

AZURE_COMPUTE_API = ApiMetadata(
    id="azure-compute",
    name="Azure Compute Resource Provider API",
    type=ApiType.COMPUTE,
    identity_name="Client ID",
    credential_name="Client Secret",
    documentation="https://learn.microsoft.com/en-us/rest/api/compute/",
    default_endpoint="https://management.azure.com",
    version="2024-03-01",
)

AZURE_NETWORK_API = AZURE_COMPUTE_API.derive(
    id="azure-network",
    name="Azure Network Resource Provider API",
    type=ApiType.LOADBALANCER,
    documentation="https://learn.microsoft.com/en-us/rest/api/load-balancer/",
    version="2024-01-01",
)

_PROVIDERS: dict[str, ProviderMetadata] = {
    p.id: p
    for p in (
        ProviderMetadata(
            id="aws",
            name="Amazon Web Services",
            api=AWS_EC2_API,
            homepage="https://aws.amazon.com",
            console="https://console.aws.amazon.com",
            iso3166_codes=("US-VA", "US-OH", "US-CA", "US-OR", "IE", "DE-HE", "SG", "JP-13"),
        ),
        ProviderMetadata(
            id="gcp",
            name="Google Cloud Platform",
            api=GCP_COMPUTE_API,
            homepage="https://cloud.google.com",
            console="https://console.cloud.google.com",
            iso3166_codes=("US-IA", "US-SC", "US-OR", "BE", "NL", "SG"),
        ),
        ProviderMetadata(
            id="azure",
            name="Microsoft Azure",
            api=AZURE_COMPUTE_API,
            homepage="https://azure.microsoft.com",
            console="https://portal.azure.com",
            iso3166_codes=("US-VA", "US-WA", "IE", "NL", "SG"),
        ),
    )
}

LOAD_BALANCER_APIS: dict[str, ApiMetadata] = {
    "aws": AWS_ELB_API,
    "gcp": GCP_COMPUTE_API,
    "azure": AZURE_NETWORK_API,
}


def list_providers() -> list[ProviderMetadata]:
    return sorted(_PROVIDERS.values(), key=lambda p: p.id)


def get_provider(provider_id: str) -> ProviderMetadata:
    try:
        return _PROVIDERS[provider_id]
    except KeyError:
        known = ", ".join(sorted(_PROVIDERS))
        raise KeyError(f"Unknown provider {provider_id!r} (known: {known})") from None
