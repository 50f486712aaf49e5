"""Serving context and the listeners that publish registries into it."""

from .context import ListenerRegistration, ServingContext, ServingContextEvent, ServingContextListener
from .listeners import HealthCheckServlet, MetricsServlet

__all__ = [
    "HealthCheckServlet",
    "ListenerRegistration",
    "MetricsServlet",
    "ServingContext",
    "ServingContextEvent",
    "ServingContextListener",
]
