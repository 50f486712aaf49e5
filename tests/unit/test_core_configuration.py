"""
Unit tests for the configuration units.
"""

import pytest

from appmetrics.config import CoreMetricsConfiguration, JmxMetricsConfiguration, ReporterProperties
from appmetrics.filter import MetricFilterProperties
from appmetrics.health import HealthCheckRegistry
from appmetrics.metrics import MetricRegistry, SharedMetricRegistries, TimeUnit
from appmetrics.reporting import JmxReporter
from appmetrics.utils.beans import conditions_match
from appmetrics.web import HealthCheckServlet, ListenerRegistration, MetricsServlet, ServingContext


class TestCoreMetricsConfiguration:
    """Test provisioning of the shared registry."""

    def test_registers_runtime_metric_sets(self, server):
        """Test that every runtime metric set is registered."""
        registry = CoreMetricsConfiguration(management_server=server).get_metric_registry()

        names = registry.get_names()
        assert "python.gc.gen0.collections" in names
        assert "python.memory.rss" in names
        assert "python.thread-states.count" in names
        assert "python.fd.usage" in names
        assert "python.allocator.usage.blocks" in names
        assert "python.runtime.pid" in names
        assert "python.modules.loaded" in names
        assert "python.lang.allocator.allocated.blocks" in names

    def test_uses_shared_registry(self, server):
        """Test that the default shared registry is returned."""
        registry = CoreMetricsConfiguration(management_server=server).get_metric_registry()
        assert registry is SharedMetricRegistries.get_or_create("")

    def test_repeated_calls_are_safe(self, server):
        """Test that duplicate registrations are skipped."""
        configuration = CoreMetricsConfiguration(management_server=server)
        first = configuration.get_metric_registry()
        size = len(first)

        second = configuration.get_metric_registry()
        assert second is first
        assert len(second) == size

        assert CoreMetricsConfiguration(management_server=server).get_metric_registry() is first

    def test_custom_prefix_and_registry_name(self, server):
        """Test the configurable registry name and runtime prefix."""
        config = {"metrics": {"registry_name": "app", "runtime_prefix": "interpreter"}}
        registry = CoreMetricsConfiguration(config, server).get_metric_registry()

        assert registry is SharedMetricRegistries.get_or_create("app")
        assert "interpreter.memory.rss" in registry
        assert not any(name.startswith("python.") for name in registry.get_names())

    def test_without_platform_beans(self, empty_server):
        """Test that missing beans only drop the bean-backed metrics."""
        registry = CoreMetricsConfiguration(management_server=empty_server).get_metric_registry()
        names = registry.get_names()
        assert "python.memory.rss" in names
        assert not any(name.startswith("python.lang.allocator") for name in names)
        assert not any(name.startswith("python.runtime") for name in names)

    def test_context_listener_publishes_registry(self, server):
        """Test that the listener hands the shared registry to the serving context."""
        configuration = CoreMetricsConfiguration(management_server=server)
        listener = configuration.get_context_listener()
        assert isinstance(listener, MetricsServlet.ContextListener)

        context = ServingContext()
        context.add_listener(listener)
        context.initialize()

        published = context.get_attribute(MetricsServlet.METRICS_REGISTRY)
        assert published is configuration.get_metric_registry()

    def test_health_check_registration(self, server):
        """Test that an empty health-check registry is published."""
        registration = CoreMetricsConfiguration(management_server=server).register_health_check_registry()
        assert isinstance(registration, ListenerRegistration)

        context = ServingContext()
        registration.register_with(context)
        context.initialize()

        health_checks = context.get_attribute(HealthCheckServlet.HEALTH_CHECK_REGISTRY)
        assert isinstance(health_checks, HealthCheckRegistry)
        assert len(health_checks) == 0

        health_checks.register("always", lambda: True)
        assert health_checks.run_health_check("always").healthy


class TestJmxMetricsConfiguration:
    """Test provisioning of the reporter."""

    def test_enabled_by_default(self):
        """Test the reporter condition."""
        assert conditions_match(JmxMetricsConfiguration, {})
        assert conditions_match(JmxMetricsConfiguration, {"metrics": {"report": {"jmx": True}}})
        assert not conditions_match(JmxMetricsConfiguration, {"metrics": {"report": {"jmx": False}}})
        assert not conditions_match(JmxMetricsConfiguration, {"metrics.report.jmx": "false"})

    def test_registers_started_reporter(self, empty_server):
        """Test the reporter defaults and that it is running."""
        registry = MetricRegistry()
        registry.counter("app.requests")

        reporter = JmxMetricsConfiguration(management_server=empty_server).register_jmx_reporter(
            registry, MetricFilterProperties()
        )

        assert isinstance(reporter, JmxReporter)
        assert reporter.is_started
        assert reporter.rate_unit is TimeUnit.SECONDS
        assert reporter.duration_unit is TimeUnit.MILLISECONDS
        assert empty_server.is_registered("metrics:name=app.requests,type=counters")

    def test_applies_filter(self, empty_server):
        """Test that the filter properties select the published metrics."""
        registry = MetricRegistry()
        registry.gauge("python.gc.gen0.count", lambda: 0)
        registry.gauge("python.memory.rss", lambda: 0)

        reporter = JmxMetricsConfiguration(management_server=empty_server).register_jmx_reporter(
            registry, MetricFilterProperties(exclude=["python.gc"])
        )

        assert list(reporter.object_names()) == ["python.memory.rss"]

    def test_reporter_properties(self, empty_server):
        """Test a configured domain and units."""
        properties = ReporterProperties(domain="app", rate_unit="minutes", duration_unit="seconds")
        reporter = JmxMetricsConfiguration(properties, empty_server).register_jmx_reporter(
            MetricRegistry(), MetricFilterProperties()
        )
        assert reporter.domain == "app"
        assert reporter.rate_unit is TimeUnit.MINUTES
        assert reporter.duration_unit is TimeUnit.SECONDS

    def test_start_failure_propagates(self, empty_server):
        """Test that reporter failures are not swallowed."""

        class BrokenRegistry(MetricRegistry):
            def add_listener(self, listener):
                raise RuntimeError("registry unavailable")

        with pytest.raises(RuntimeError, match="registry unavailable"):
            JmxMetricsConfiguration(management_server=empty_server).register_jmx_reporter(
                BrokenRegistry(), MetricFilterProperties()
            )
