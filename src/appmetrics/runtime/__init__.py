"""Interpreter and process metric sets."""

from .attributes import ManagedAttributeGaugeSet
from .gauges import (
    AllocatorMetricSet,
    FileDescriptorRatioGauge,
    GarbageCollectorMetricSet,
    MemoryUsageGaugeSet,
    ModuleLoadingGaugeSet,
    RuntimeAttributeGaugeSet,
    ThreadStatesGaugeSet,
)

__all__ = [
    "AllocatorMetricSet",
    "FileDescriptorRatioGauge",
    "GarbageCollectorMetricSet",
    "ManagedAttributeGaugeSet",
    "MemoryUsageGaugeSet",
    "ModuleLoadingGaugeSet",
    "RuntimeAttributeGaugeSet",
    "ThreadStatesGaugeSet",
]
