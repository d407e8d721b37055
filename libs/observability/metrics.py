"""
Metrics initialization and meter provider for OpenTelemetry.

When `init_metrics` has not been called (unit tests, scripts) the global
no-op MeterProvider is used, so instruments can always be created safely.
"""

from typing import List

from opentelemetry import metrics
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader

from libs.config import OTELConfig
from libs.observability.otlp_exporter import build_metric_exporter, build_resource

_initialized: bool = False
_service_name: str = "loosehanger-datagen"


def init_metrics(cfg: OTELConfig) -> None:
    """
    Install a process-wide MeterProvider.

    Idempotent: only the first call installs a provider.

    Args:
        cfg: OTEL settings.
    """
    global _initialized, _service_name

    if _initialized:
        return

    readers: List[MetricReader] = []
    if cfg.export_enabled:
        readers.append(PeriodicExportingMetricReader(build_metric_exporter(cfg)))

    provider = MeterProvider(resource=build_resource(cfg), metric_readers=readers)
    metrics.set_meter_provider(provider)

    _service_name = cfg.service_name
    _initialized = True


def get_meter() -> Meter:
    """Return the Meter for the current service."""
    return metrics.get_meter(_service_name)
