"""
cumulus Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for observability
- Traces and metrics export over OTLP
"""

from cumulus.infrastructure.telemetry.otel_exporter import (
    OTELConfig,
    TelemetryHandle,
    configure_telemetry,
)

__all__ = [
    "OTELConfig",
    "TelemetryHandle",
    "configure_telemetry",
]
