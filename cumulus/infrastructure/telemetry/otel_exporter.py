"""
OpenTelemetry Exporter for cumulus

Architectural Intent:
- Installs SDK tracer and meter providers that export spans and counters
  recorded by LoadBalancerService to an OTLP-compatible backend
- Without an endpoint nothing is installed and the opentelemetry API stays a
  no-op, so library users pay nothing unless they opt in

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
- Validation in __post_init__ prevents accidental plaintext export
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse
import logging

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "cumulus"
    environment: str = "development"
    export_interval_ms: int = 5000
    enable_traces: bool = True
    enable_metrics: bool = True
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


@dataclass
class TelemetryHandle:
    """Providers installed by configure_telemetry; shut them down on exit."""
    tracer_provider: Optional[TracerProvider] = None
    meter_provider: Optional[MeterProvider] = None

    @property
    def enabled(self) -> bool:
        return self.tracer_provider is not None or self.meter_provider is not None

    def shutdown(self) -> None:
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()


def build_resource(config: OTELConfig) -> Resource:
    return Resource(
        attributes={
            SERVICE_NAME: config.service_name,
            "deployment.environment": config.environment,
        }
    )


def configure_telemetry(config: OTELConfig) -> TelemetryHandle:
    """Install global OTLP exporting providers when an endpoint is configured."""
    handle = TelemetryHandle()
    if not config.endpoint:
        logger.info("OTEL endpoint not configured, telemetry disabled")
        return handle

    resource = build_resource(config)
    insecure = config.insecure or urlparse(config.endpoint).scheme == "http"

    if config.enable_traces:
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=config.endpoint, insecure=insecure)
            )
        )
        trace.set_tracer_provider(provider)
        handle.tracer_provider = provider

    if config.enable_metrics:
        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=config.endpoint, insecure=insecure),
            export_interval_millis=config.export_interval_ms,
        )
        meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
        metrics.set_meter_provider(meter_provider)
        handle.meter_provider = meter_provider

    logger.info(
        "Telemetry exporting to %s (traces=%s, metrics=%s)",
        config.endpoint,
        config.enable_traces,
        config.enable_metrics,
    )
    return handle
