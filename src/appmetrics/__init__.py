"""appmetrics: startup wiring for runtime metrics, health checks and a filtered management reporter."""

__version__ = "0.1.0"

from .config import CoreMetricsConfiguration, JmxMetricsConfiguration
from .filter import CustomMetricFilter, MetricFilterProperties
from .health import HealthCheck, HealthCheckRegistry
from .metrics import MetricRegistry, SharedMetricRegistries
from .orchestration import MetricsApplicationContext
from .reporting import JmxReporter

__all__ = [
    "CoreMetricsConfiguration",
    "CustomMetricFilter",
    "HealthCheck",
    "HealthCheckRegistry",
    "JmxMetricsConfiguration",
    "JmxReporter",
    "MetricFilterProperties",
    "MetricRegistry",
    "MetricsApplicationContext",
    "SharedMetricRegistries",
]
