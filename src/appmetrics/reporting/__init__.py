"""Reporters publishing registry contents."""

from .attributes import UnitConverter, metric_attributes, read_attributes
from .dataframe import registry_snapshot, registry_to_dataframe
from .jmx import DEFAULT_DOMAIN, JmxReporter, create_object_name

__all__ = [
    "DEFAULT_DOMAIN",
    "JmxReporter",
    "UnitConverter",
    "create_object_name",
    "metric_attributes",
    "read_attributes",
    "registry_snapshot",
    "registry_to_dataframe",
]
