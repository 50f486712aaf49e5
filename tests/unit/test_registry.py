"""
Unit tests for the metric registry and shared registries.
"""

import threading

import pytest

from appmetrics.metrics import (
    CallbackGauge,
    Counter,
    MetricRegistry,
    MetricRegistryListener,
    MetricSet,
    SharedMetricRegistries,
    Timer,
    metric_kind,
)


class RecordingListener(MetricRegistryListener):
    def __init__(self):
        self.events = []

    def on_gauge_added(self, name, gauge):
        self.events.append(("gauge+", name))

    def on_gauge_removed(self, name):
        self.events.append(("gauge-", name))

    def on_counter_added(self, name, counter):
        self.events.append(("counter+", name))

    def on_counter_removed(self, name):
        self.events.append(("counter-", name))

    def on_timer_added(self, name, timer):
        self.events.append(("timer+", name))


class NameReadingListener(MetricRegistryListener):
    """Reads the registry from another thread while being notified."""

    def __init__(self, registry):
        self.registry = registry
        self.seen = []

    def on_counter_added(self, name, counter):
        names = []
        reader = threading.Thread(target=lambda: names.append(self.registry.get_names()))
        reader.start()
        reader.join(timeout=2)
        self.seen.append(names)


class PoolMetrics(MetricSet):
    def get_metrics(self):
        return {
            "size": CallbackGauge(lambda: 4),
            "waiting": CallbackGauge(lambda: 0),
        }


class TestMetricNames:
    """Test dotted name construction."""

    def test_joins_segments(self):
        """Test that segments are joined with dots."""
        assert MetricRegistry.name("python", "gc", "gen0") == "python.gc.gen0"

    def test_skips_empty_segments(self):
        """Test that empty and None segments are dropped."""
        assert MetricRegistry.name("python", "", None, "fd") == "python.fd"


class TestMetricRegistry:
    """Test registration and lookup."""

    def test_register_and_lookup(self):
        """Test that registered metrics can be found by name and kind."""
        registry = MetricRegistry()
        counter = registry.register("requests", Counter())

        assert "requests" in registry
        assert len(registry) == 1
        assert registry.get_counters() == {"requests": counter}
        assert registry.get_gauges() == {}

    def test_duplicate_name_rejected(self):
        """Test that a second metric under the same name raises."""
        registry = MetricRegistry()
        registry.register("requests", Counter())

        with pytest.raises(ValueError, match="already exists"):
            registry.register("requests", Counter())

    def test_metric_set_registers_members_under_prefix(self):
        """Test that a metric set is flattened under its prefix."""
        registry = MetricRegistry()
        registry.register("pool", PoolMetrics())

        assert registry.get_names() == ["pool.size", "pool.waiting"]
        assert registry.get_gauges()["pool.size"].get_value() == 4

    def test_metric_set_registered_twice_raises(self):
        """Test that re-registering a metric set fails on its first member."""
        registry = MetricRegistry()
        registry.register("pool", PoolMetrics())

        with pytest.raises(ValueError):
            registry.register("pool", PoolMetrics())

    def test_get_or_add(self):
        """Test that typed accessors return the existing metric."""
        registry = MetricRegistry()
        assert registry.counter("hits") is registry.counter("hits")
        assert registry.timer("latency") is registry.timer("latency")

    def test_get_or_add_kind_conflict(self):
        """Test that a name used by another kind of metric is rejected."""
        registry = MetricRegistry()
        registry.counter("hits")

        with pytest.raises(ValueError, match="different type"):
            registry.meter("hits")

    def test_timer_is_not_a_meter(self):
        """Test timer classification."""
        registry = MetricRegistry()
        registry.timer("latency")

        assert metric_kind(Timer()) == "timer"
        assert list(registry.get_timers()) == ["latency"]
        assert registry.get_meters() == {}
        assert registry.get_histograms() == {}

    def test_get_matching_with_filter(self):
        """Test that filters apply to names and results are sorted."""
        registry = MetricRegistry()
        registry.counter("b.requests")
        registry.counter("a.requests")
        registry.counter("c.other")

        selected = registry.get_matching(lambda name, metric: name.endswith("requests"))
        assert list(selected) == ["a.requests", "b.requests"]

    def test_pyformance_views(self):
        """Test that the base registry views see registered metrics."""
        registry = MetricRegistry()
        registry.counter("hits").inc(3)
        registry.register("queue", CallbackGauge(lambda: 7))

        assert registry.get_metrics("hits") == {"count": 3}
        assert registry.get_metrics("queue") == {"value": 7}

    def test_clear(self):
        """Test that clear removes every metric and notifies listeners."""
        registry = MetricRegistry()
        registry.counter("hits")
        listener = RecordingListener()
        registry.add_listener(listener)

        registry.clear()

        assert len(registry) == 0
        assert registry.get_metrics("hits") == {}
        assert listener.events[-1] == ("counter-", "hits")

    def test_remove(self):
        """Test removal of single and matching metrics."""
        registry = MetricRegistry()
        registry.register("pool", PoolMetrics())
        registry.counter("hits")

        assert registry.remove("hits") is True
        assert registry.remove("hits") is False

        registry.remove_matching(lambda name, metric: name.startswith("pool."))
        assert len(registry) == 0


class TestRegistryListeners:
    """Test listener notifications."""

    def test_existing_metrics_replayed_on_add(self):
        """Test that a new listener sees metrics registered before it."""
        registry = MetricRegistry()
        registry.counter("hits")
        listener = RecordingListener()

        registry.add_listener(listener)

        assert listener.events == [("counter+", "hits")]

    def test_add_and_remove_notifications(self):
        """Test notifications for later registrations and removals."""
        registry = MetricRegistry()
        listener = RecordingListener()
        registry.add_listener(listener)

        registry.gauge("queue.depth", lambda: 3)
        registry.timer("latency")
        registry.remove("queue.depth")

        assert listener.events == [
            ("gauge+", "queue.depth"),
            ("timer+", "latency"),
            ("gauge-", "queue.depth"),
        ]

    def test_listener_notified_after_lock_released(self):
        """Test that a created metric is visible to other threads during notification."""
        registry = MetricRegistry()
        listener = NameReadingListener(registry)
        registry.add_listener(listener)

        registry.counter("hits")

        assert listener.seen == [[["hits"]]]

    def test_removed_listener_not_notified(self):
        """Test that a removed listener stops receiving events."""
        registry = MetricRegistry()
        listener = RecordingListener()
        registry.add_listener(listener)
        registry.remove_listener(listener)

        registry.counter("hits")
        assert listener.events == []


class TestSharedMetricRegistries:
    """Test the process-wide registries."""

    def test_get_or_create_returns_same_instance(self):
        """Test that the same name yields the same registry."""
        first = SharedMetricRegistries.get_or_create("app")
        assert SharedMetricRegistries.get_or_create("app") is first
        assert SharedMetricRegistries.get_or_create("other") is not first
        assert SharedMetricRegistries.names() == ["app", "other"]

    def test_add_keeps_existing(self):
        """Test that add does not replace an existing registry."""
        existing = SharedMetricRegistries.get_or_create("app")
        assert SharedMetricRegistries.add("app", MetricRegistry()) is existing

    def test_remove_and_clear(self):
        """Test removal of shared registries."""
        SharedMetricRegistries.get_or_create("app")
        SharedMetricRegistries.get_or_create("other")

        SharedMetricRegistries.remove("app")
        assert SharedMetricRegistries.names() == ["other"]

        SharedMetricRegistries.clear()
        assert SharedMetricRegistries.names() == []
