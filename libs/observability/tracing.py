"""
OpenTelemetry tracing initialization and tracer helper.
"""

from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Tracer

from libs.config import OTELConfig
from libs.observability.otlp_exporter import build_resource, build_trace_exporter

_service_name: str = "loosehanger-datagen"


def init_tracing(cfg: OTELConfig) -> None:
    """
    Install the global TracerProvider.

    Spans are exported over OTLP only when `cfg.export_enabled` is set;
    otherwise the provider still produces valid span contexts so log lines
    keep their trace/span ids.

    Args:
        cfg: OTEL settings.
    """
    global _service_name
    _service_name = cfg.service_name

    provider = TracerProvider(resource=build_resource(cfg))
    if cfg.export_enabled:
        provider.add_span_processor(BatchSpanProcessor(build_trace_exporter(cfg)))
    trace.set_tracer_provider(provider)


def get_tracer(name: Optional[str] = None) -> Tracer:
    """
    Get a Tracer for the given instrumentation scope.

    Args:
        name: Logical scope name. Defaults to the service name.
    """
    return trace.get_tracer(name or _service_name)
