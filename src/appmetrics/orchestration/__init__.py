"""Startup orchestration."""

from .application_context import DEFAULT_CONFIGURATIONS, MetricsApplicationContext

__all__ = ["DEFAULT_CONFIGURATIONS", "MetricsApplicationContext"]
