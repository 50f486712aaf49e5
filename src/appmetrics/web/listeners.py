"""Context attribute keys and listeners read by the metrics and health endpoints."""

import logging

from ..health import HealthCheckRegistry
from ..metrics import MetricRegistry
from .context import ServingContextEvent, ServingContextListener

logger = logging.getLogger(__name__)


class MetricsServlet:
    """Contract of the external metrics endpoint."""

    METRICS_REGISTRY = "appmetrics.web.MetricsServlet.registry"

    class ContextListener(ServingContextListener):
        """Publishes a metric registry. Subclasses implement :meth:`get_metric_registry`."""

        def get_metric_registry(self) -> MetricRegistry:
            raise NotImplementedError

        def context_initialized(self, event: ServingContextEvent) -> None:
            event.context.set_attribute(MetricsServlet.METRICS_REGISTRY, self.get_metric_registry())


class HealthCheckServlet:
    """Contract of the external health-check endpoint."""

    HEALTH_CHECK_REGISTRY = "appmetrics.web.HealthCheckServlet.registry"

    class ContextListener(ServingContextListener):
        """Publishes a health-check registry. Subclasses implement :meth:`get_health_check_registry`."""

        def get_health_check_registry(self) -> HealthCheckRegistry:
            raise NotImplementedError

        def context_initialized(self, event: ServingContextEvent) -> None:
            event.context.set_attribute(
                HealthCheckServlet.HEALTH_CHECK_REGISTRY, self.get_health_check_registry()
            )
