"""Configuration unit provisioning the shared registry and the health checks."""

import logging
from typing import Any, Dict, Optional

from ..health import HealthCheckRegistry
from ..management import ALLOCATOR_BEAN, ManagementServer, get_platform_server
from ..metrics import Metric, MetricRegistry, SharedMetricRegistries
from ..runtime import (
    AllocatorMetricSet,
    FileDescriptorRatioGauge,
    GarbageCollectorMetricSet,
    ManagedAttributeGaugeSet,
    MemoryUsageGaugeSet,
    ModuleLoadingGaugeSet,
    RuntimeAttributeGaugeSet,
    ThreadStatesGaugeSet,
)
from ..utils.beans import bean
from ..web import HealthCheckServlet, ListenerRegistration, MetricsServlet, ServingContextListener
from .properties import MetricsProperties

logger = logging.getLogger(__name__)


class CoreMetricsConfiguration:
    """Enables metrics: the shared registry, its runtime metric sets, and the
    listeners that hand the metric and health-check registries to the
    serving context.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        management_server: Optional[ManagementServer] = None,
    ) -> None:
        self.properties = MetricsProperties.from_config(config)
        self.management_server = (
            management_server if management_server is not None else get_platform_server()
        )

    @bean(name="registry", primary=True)
    def get_metric_registry(self) -> MetricRegistry:
        """Retrieve the shared registry, registering the runtime metric sets.

        Safe to call repeatedly: metric sets that are already registered are
        skipped.
        """
        registry = SharedMetricRegistries.get_or_create(self.properties.registry_name)
        runtime = self.properties.runtime_prefix
        server = self.management_server

        self._register_metric(registry, GarbageCollectorMetricSet(), runtime, "gc")
        self._register_metric(registry, MemoryUsageGaugeSet(), runtime, "memory")
        self._register_metric(registry, ThreadStatesGaugeSet(), runtime, "thread-states")
        self._register_metric(registry, FileDescriptorRatioGauge(), runtime, "fd", "usage")
        self._register_metric(registry, AllocatorMetricSet(server), runtime, "allocator", "usage")
        self._register_metric(registry, RuntimeAttributeGaugeSet(server), runtime, "runtime")
        self._register_metric(registry, ModuleLoadingGaugeSet(), runtime, "modules")

        # Management bean attributes
        self._register_metric(
            registry,
            ManagedAttributeGaugeSet(ALLOCATOR_BEAN, server),
            runtime, "lang", "allocator",
        )

        return registry

    @staticmethod
    def _register_metric(registry: MetricRegistry, metric: Metric, name: str, *names: str) -> None:
        # Repeated startups in one process (tests) hit names that already exist.
        full_name = MetricRegistry.name(name, *names)
        try:
            registry.register(full_name, metric)
        except ValueError as e:
            logger.debug(f"Skipping metric {full_name}: {e}")

    @bean()
    def get_context_listener(self) -> ServingContextListener:
        """Make the metric registry available to the metrics endpoint."""
        configuration = self

        class RegistryListener(MetricsServlet.ContextListener):
            def get_metric_registry(self) -> MetricRegistry:
                logger.debug("Registering metrics registry...")
                return configuration.get_metric_registry()

        return RegistryListener()

    @bean()
    def register_health_check_registry(self) -> ListenerRegistration:
        """Hand an empty health-check registry to the health-check endpoint.

        Checks are registered later by whoever owns them.
        """
        health_check_registry = HealthCheckRegistry()

        class HealthListener(HealthCheckServlet.ContextListener):
            def get_health_check_registry(self) -> HealthCheckRegistry:
                logger.debug("Registering health check registry...")
                return health_check_registry

        return ListenerRegistration(HealthListener())
