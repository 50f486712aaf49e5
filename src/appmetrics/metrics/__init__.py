"""Metric types and the metric registry."""

from .decorators import counted, metered, timed
from .models import (
    CallbackGauge,
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    MetricSet,
    RatioGauge,
    SimpleGauge,
    Timer,
)
from .registry import (
    MetricFilter,
    MetricRegistry,
    MetricRegistryListener,
    SharedMetricRegistries,
    match_all,
    metric_kind,
)
from .units import TimeUnit

__all__ = [
    "CallbackGauge",
    "Counter",
    "Gauge",
    "Histogram",
    "Meter",
    "Metric",
    "MetricFilter",
    "MetricRegistry",
    "MetricRegistryListener",
    "MetricSet",
    "RatioGauge",
    "SharedMetricRegistries",
    "SimpleGauge",
    "TimeUnit",
    "Timer",
    "counted",
    "match_all",
    "metered",
    "metric_kind",
    "timed",
]
