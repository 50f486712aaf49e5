"""Metric registry and process-wide shared registries."""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from pyformance.registry import MetricsRegistry as PyformanceRegistry

from .models import CallbackGauge, Counter, Gauge, Histogram, Meter, Metric, MetricSet, SimpleGauge, Timer

logger = logging.getLogger(__name__)

MetricFilter = Callable[[str, Metric], bool]
"""Predicate deciding whether a named metric is visible."""


def match_all(name: str, metric: Metric) -> bool:
    """The filter that accepts every metric."""
    return True


class MetricRegistryListener:
    """Receives notifications when metrics are added to or removed from a registry.

    Every hook is a no-op by default; subclasses override what they need.
    """

    def on_gauge_added(self, name: str, gauge: Gauge) -> None:
        pass

    def on_gauge_removed(self, name: str) -> None:
        pass

    def on_counter_added(self, name: str, counter: Counter) -> None:
        pass

    def on_counter_removed(self, name: str) -> None:
        pass

    def on_histogram_added(self, name: str, histogram: Histogram) -> None:
        pass

    def on_histogram_removed(self, name: str) -> None:
        pass

    def on_meter_added(self, name: str, meter: Meter) -> None:
        pass

    def on_meter_removed(self, name: str) -> None:
        pass

    def on_timer_added(self, name: str, timer: Timer) -> None:
        pass

    def on_timer_removed(self, name: str) -> None:
        pass


_KINDS = (
    (Gauge, "gauge"),
    (Counter, "counter"),
    (Timer, "timer"),
    (Histogram, "histogram"),
    (Meter, "meter"),
)


def metric_kind(metric: Metric) -> str:
    """Return ``gauge``, ``counter``, ``histogram``, ``meter`` or ``timer``."""
    for cls, kind in _KINDS:
        if isinstance(metric, cls):
            return kind
    raise TypeError(f"Unsupported metric type: {type(metric).__name__}")


class MetricRegistry(PyformanceRegistry):
    """A thread-safe pyformance registry keyed by unique dotted names.

    Unlike the base registry, a name identifies one metric of any kind, metric
    sets register each member under ``<name>.<member>``, metrics can be
    removed, and listeners are told about every change.
    """

    def __init__(self, clock: Any = time) -> None:
        self._names: Dict[str, Metric] = {}
        self._listeners: List[MetricRegistryListener] = []
        self._lock = threading.RLock()
        super().__init__()
        self._clock = clock

    @staticmethod
    def name(name: str, *names: Optional[str]) -> str:
        """Join name segments with dots, skipping empty or ``None`` segments."""
        parts = [part for part in (name, *names) if part]
        return ".".join(parts)

    def _store(self, kind: str) -> Dict[str, Metric]:
        return {
            "gauge": self._gauges,
            "counter": self._counters,
            "histogram": self._histograms,
            "meter": self._meters,
            "timer": self._timers,
        }[kind]

    def _put(self, name: str, metric: Metric) -> None:
        if name in self._names:
            raise ValueError(f"A metric named {name} already exists")
        self._store(metric_kind(metric))[name] = metric
        self._names[name] = metric

    def register(self, name: str, metric: Metric) -> Metric:
        """Register ``metric`` under ``name``.

        A :class:`MetricSet` registers each member under ``name.<member>``.

        Raises:
            ValueError: If a metric with the same name already exists.
        """
        if isinstance(metric, MetricSet):
            self._register_all(name, metric)
            return metric

        with self._lock:
            self._put(name, metric)
            listeners = list(self._listeners)

        self._notify_added(listeners, name, metric)
        return metric

    def add(self, key: str, metric: Metric) -> None:
        self.register(key, metric)

    def _register_all(self, prefix: str, metric_set: MetricSet) -> None:
        for member, metric in metric_set.get_metrics().items():
            self.register(self.name(prefix, member), metric)

    def remove(self, name: str) -> bool:
        """Remove the metric named ``name``. Returns whether one was removed."""
        with self._lock:
            metric = self._names.pop(name, None)
            if metric is not None:
                self._store(metric_kind(metric)).pop(name, None)
            listeners = list(self._listeners)

        if metric is None:
            return False
        for listener in listeners:
            getattr(listener, f"on_{metric_kind(metric)}_removed")(name)
        return True

    def remove_matching(self, metric_filter: MetricFilter) -> None:
        for name, metric in self.get_matching(metric_filter).items():
            self.remove(name)

    def clear(self) -> None:
        self.remove_matching(match_all)

    def _get_or_add(self, name: str, kind: str, factory: Callable[[], Metric]) -> Any:
        with self._lock:
            existing = self._names.get(name)
            if existing is None:
                metric = factory()
                self._put(name, metric)
                listeners = list(self._listeners)
            elif metric_kind(existing) == kind:
                return existing
            else:
                raise ValueError(f"{name} is already used for a different type of metric")

        self._notify_added(listeners, name, metric)
        return metric

    def counter(self, key: str) -> Counter:
        return self._get_or_add(key, "counter", Counter)

    def histogram(self, key: str) -> Histogram:
        return self._get_or_add(key, "histogram", lambda: Histogram(clock=self._clock))

    def meter(self, key: str) -> Meter:
        return self._get_or_add(key, "meter", lambda: Meter(clock=self._clock))

    def timer(self, key: str) -> Timer:
        return self._get_or_add(key, "timer", lambda: Timer(clock=self._clock))

    def gauge(self, key: str, gauge: Any = None, default: float = float("nan")) -> Gauge:
        """Return the gauge ``key``, creating it from ``gauge`` on first use.

        ``gauge`` may be a :class:`Gauge`, a callable supplying the value, or
        ``None`` for a settable gauge holding ``default``.
        """

        def create() -> Gauge:
            if gauge is None:
                return SimpleGauge(default)
            if isinstance(gauge, Gauge):
                return gauge
            return CallbackGauge(gauge)

        return self._get_or_add(key, "gauge", create)

    def get_names(self) -> List[str]:
        with self._lock:
            return sorted(self._names)

    def get_matching(self, metric_filter: MetricFilter = match_all) -> Dict[str, Metric]:
        """Return matching metrics sorted by name."""
        with self._lock:
            items = sorted(self._names.items())
        return {name: metric for name, metric in items if metric_filter(name, metric)}

    def _of_kind(self, kind: str, metric_filter: MetricFilter) -> Dict[str, Any]:
        return {
            name: metric
            for name, metric in self.get_matching(metric_filter).items()
            if metric_kind(metric) == kind
        }

    def get_gauges(self, metric_filter: MetricFilter = match_all) -> Dict[str, Gauge]:
        return self._of_kind("gauge", metric_filter)

    def get_counters(self, metric_filter: MetricFilter = match_all) -> Dict[str, Counter]:
        return self._of_kind("counter", metric_filter)

    def get_histograms(self, metric_filter: MetricFilter = match_all) -> Dict[str, Histogram]:
        return self._of_kind("histogram", metric_filter)

    def get_meters(self, metric_filter: MetricFilter = match_all) -> Dict[str, Meter]:
        return self._of_kind("meter", metric_filter)

    def get_timers(self, metric_filter: MetricFilter = match_all) -> Dict[str, Timer]:
        return self._of_kind("timer", metric_filter)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def add_listener(self, listener: MetricRegistryListener) -> None:
        """Attach ``listener`` and replay every existing metric to it."""
        with self._lock:
            self._listeners.append(listener)
            existing: List[Tuple[str, Metric]] = sorted(self._names.items())
        for name, metric in existing:
            self._notify_added([listener], name, metric)

    def remove_listener(self, listener: MetricRegistryListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @staticmethod
    def _notify_added(listeners: List[MetricRegistryListener], name: str, metric: Metric) -> None:
        kind = metric_kind(metric)
        for listener in listeners:
            getattr(listener, f"on_{kind}_added")(name, metric)
        logger.debug(f"Registered {kind} {name}")


class SharedMetricRegistries:
    """Process-wide named registries."""

    _registries: Dict[str, MetricRegistry] = {}
    _lock = threading.Lock()

    @classmethod
    def get_or_create(cls, name: str) -> MetricRegistry:
        """Return the registry called ``name``, creating it on first use."""
        with cls._lock:
            registry = cls._registries.get(name)
            if registry is None:
                registry = MetricRegistry()
                cls._registries[name] = registry
                logger.debug(f"Created shared metric registry {name!r}")
            return registry

    @classmethod
    def add(cls, name: str, registry: MetricRegistry) -> MetricRegistry:
        """Store ``registry`` under ``name`` unless one exists; return the stored one."""
        with cls._lock:
            return cls._registries.setdefault(name, registry)

    @classmethod
    def names(cls) -> List[str]:
        with cls._lock:
            return sorted(cls._registries)

    @classmethod
    def remove(cls, name: str) -> None:
        with cls._lock:
            cls._registries.pop(name, None)

    @classmethod
    def clear(cls) -> None:
        with cls._lock:
            cls._registries.clear()
