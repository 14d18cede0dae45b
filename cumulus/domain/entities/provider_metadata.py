"""
Provider Metadata Module

Architectural Intent:
- Describes a cloud API dialect (ApiMetadata) and a concrete vendor offering
  that speaks it (ProviderMetadata)
- Pure data: identifiers, credential labels, documentation and console URIs,
  ISO 3166 codes of the regions a provider serves
- Derived metadata (an API clone, a regional reseller) is produced by copying
  an existing instance with changes, never by subclassing

Design Decisions:
- Frozen dataclasses; derive() is a thin wrapper over dataclasses.replace so
  validation in __post_init__ runs for every copy
"""

from __future__ import annotations
import dataclasses
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

# ISO 3166-1 alpha-2 with optional ISO 3166-2 subdivision, e.g. "US", "US-CA", "MY-10"
_ISO3166_RE = re.compile(r"^[A-Z]{2}(-[A-Z0-9]{1,3})?$")


class ApiType(Enum):
    COMPUTE = "compute"
    BLOBSTORE = "blobstore"
    LOADBALANCER = "loadbalancer"


def _check_uri(name: str, value: Optional[str]) -> None:
    if value is None:
        return
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{name} must be an http(s) URI, got {value!r}")


@dataclass(frozen=True)
class ApiMetadata:
    """Metadata for one provider API dialect."""
    id: str
    name: str
    type: ApiType
    identity_name: str
    documentation: str
    credential_name: Optional[str] = None
    default_endpoint: Optional[str] = None
    version: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("API id cannot be empty")
        if not self.name:
            raise ValueError("API name cannot be empty")
        _check_uri("documentation", self.documentation)
        _check_uri("default_endpoint", self.default_endpoint)

    def derive(self, **changes: Any) -> ApiMetadata:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ProviderMetadata:
    """Metadata for a vendor offering built on an API dialect."""
    id: str
    name: str
    api: ApiMetadata
    homepage: str
    console: Optional[str] = None
    iso3166_codes: tuple[str, ...] = ()
    endpoint: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Provider id cannot be empty")
        _check_uri("homepage", self.homepage)
        _check_uri("console", self.console)
        _check_uri("endpoint", self.endpoint)
        for code in self.iso3166_codes:
            if not _ISO3166_RE.match(code):
                raise ValueError(f"Invalid ISO 3166 code: {code!r}")

    @property
    def effective_endpoint(self) -> Optional[str]:
        return self.endpoint or self.api.default_endpoint

    def derive(self, **changes: Any) -> ProviderMetadata:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)
