"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to provider, load-balancing and telemetry settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- The provider section selects which adapter the composition root wires
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Which provider adapter to use."""
    name: str = "aws"


@dataclass(frozen=True)
class AWSConfig:
    """AWS EC2 / Elastic Load Balancing settings."""
    region: str = "us-east-1"
    profile: str = ""
    default_ami: str = "ami-0abcdef1234567890"
    default_instance_type: str = "t3.micro"


@dataclass(frozen=True)
class GCPConfig:
    """GCP Compute Engine settings."""
    project: str = "my-cumulus-project"
    region: str = "us-central1"
    default_machine_type: str = "e2-micro"


@dataclass(frozen=True)
class AzureConfig:
    """Azure Compute / Load Balancer settings."""
    subscription_id: str = "00000000-0000-0000-0000-000000000000"
    resource_group: str = "cumulus-rg"
    location: str = "eastus"
    default_vm_size: str = "Standard_B1s"


@dataclass(frozen=True)
class LoadBalancerConfig:
    """DNS resolution behaviour after a balancer is created."""
    resolve_attempts: int = 3
    retry_delay_seconds: float = 1.0
    resolver: str = "simulated"  # "simulated" or "system"
    dns_propagation_lookups: int = 0


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False
    service_name: str = "cumulus"


@dataclass(frozen=True)
class CumulusConfig:
    """Root configuration for cumulus."""
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    aws: AWSConfig = field(default_factory=AWSConfig)
    gcp: GCPConfig = field(default_factory=GCPConfig)
    azure: AzureConfig = field(default_factory=AzureConfig)
    load_balancer: LoadBalancerConfig = field(default_factory=LoadBalancerConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"
    log_json: bool = False


def _env_override(data: dict, prefix: str = "CUMULUS") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern CUMULUS_SECTION_KEY.
    For example: CUMULUS_AWS_REGION=eu-west-1, CUMULUS_PROVIDER_NAME=gcp.
    Section names containing underscores are matched against known sections
    first, so CUMULUS_LOAD_BALANCER_RESOLVE_ATTEMPTS=5 works.
    """
    sections = sorted(
        (f.name for f in dataclasses.fields(CumulusConfig)
         if dataclasses.is_dataclass(f.default_factory)),
        key=len,
        reverse=True,
    )
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        remainder = key[len(prefix) + 1:].lower()
        for section in sections:
            if remainder.startswith(f"{section}_"):
                data.setdefault(section, {})[remainder[len(section) + 1:]] = value
                break
        else:
            data[remainder] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _coerce(type_name: str, value):
    if not isinstance(value, str):
        return value
    if type_name == "int":
        return int(value)
    if type_name == "float":
        return float(value)
    if type_name == "bool":
        return value.lower() in ("true", "1", "yes")
    return value


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {}
    for k, v in data.items():
        if k not in valid_fields:
            continue
        try:
            filtered[k] = _coerce(valid_fields[k].type, v)
        except ValueError:
            logger.warning(
                "Invalid value %r for %s.%s, using default", v, cls.__name__, k
            )
    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "CUMULUS",
) -> CumulusConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (CUMULUS_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to cumulus.json in CWD.
        env_prefix: Environment variable prefix. Defaults to CUMULUS.
    """
    config_path = Path(path) if path else Path("cumulus.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return CumulusConfig(
        provider=_build_sub_config(ProviderConfig, data.get("provider", {})),
        aws=_build_sub_config(AWSConfig, data.get("aws", {})),
        gcp=_build_sub_config(GCPConfig, data.get("gcp", {})),
        azure=_build_sub_config(AzureConfig, data.get("azure", {})),
        load_balancer=_build_sub_config(
            LoadBalancerConfig, data.get("load_balancer", {})
        ),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {})),
        log_level=data.get("log_level", "WARNING"),
        log_json=_coerce("bool", data.get("log_json", False)),
    )
