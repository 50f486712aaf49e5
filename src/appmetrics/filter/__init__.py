"""Metric name filtering."""

from .custom import CustomMetricFilter, matches_pattern
from .properties import FILTER_PREFIX, MetricFilterProperties

__all__ = ["CustomMetricFilter", "FILTER_PREFIX", "MetricFilterProperties", "matches_pattern"]
