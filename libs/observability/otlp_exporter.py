"""
Factory functions for OTLP exporters (gRPC logging, metrics, trace) and the
shared OpenTelemetry resource.
"""

from typing import Dict, Optional

from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.attributes.service_attributes import SERVICE_NAME

from libs.config import OTELConfig


def _parse_pairs(raw: Optional[str]) -> Dict[str, str]:
    """Parse `k1=v1,k2=v2` into a dict, skipping malformed entries."""
    if not raw:
        return {}
    return {
        kv.split("=", 1)[0].strip(): kv.split("=", 1)[1].strip()
        for kv in raw.split(",")
        if "=" in kv
    }


def build_resource(cfg: OTELConfig) -> Resource:
    """
    Build the Resource attached to every span, metric and log record.

    Args:
        cfg: OTEL settings carrying the service name and resource attributes.

    Returns:
        A Resource with `service.name` plus the configured attributes.
    """
    attrs = _parse_pairs(cfg.resource_attributes)
    return Resource.create({SERVICE_NAME: cfg.service_name, **attrs})


def _common_kwargs(cfg: OTELConfig) -> Dict[str, object]:
    headers = _parse_pairs(cfg.otlp_headers) or None
    return {
        "endpoint": cfg.otlp_endpoint,
        "headers": headers,
        "insecure": cfg.otlp_insecure,
    }


def build_trace_exporter(cfg: OTELConfig) -> OTLPSpanExporter:
    """Create an OTLP span exporter for the configured collector."""
    return OTLPSpanExporter(**_common_kwargs(cfg))


def build_metric_exporter(cfg: OTELConfig) -> OTLPMetricExporter:
    """Create an OTLP metric exporter for the configured collector."""
    return OTLPMetricExporter(**_common_kwargs(cfg))


def build_log_exporter(cfg: OTELConfig) -> OTLPLogExporter:
    """Create an OTLP log exporter for the configured collector."""
    return OTLPLogExporter(**_common_kwargs(cfg))
