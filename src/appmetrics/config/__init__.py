"""Startup configuration units."""

from .core import CoreMetricsConfiguration
from .jmx import JmxMetricsConfiguration
from .properties import JMX_ENABLED_PROPERTY, MetricsProperties, ReporterProperties

__all__ = [
    "CoreMetricsConfiguration",
    "JMX_ENABLED_PROPERTY",
    "JmxMetricsConfiguration",
    "MetricsProperties",
    "ReporterProperties",
]
