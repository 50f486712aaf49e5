"""Reporter exposing registry contents as management beans."""

import logging
import threading
from typing import Dict, Optional

from ..management import ManagedBean, ManagementServer, ObjectName, get_platform_server
from ..metrics import (
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    MetricFilter,
    MetricRegistry,
    MetricRegistryListener,
    TimeUnit,
    Timer,
    match_all,
)
from .attributes import UnitConverter, metric_attributes

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "metrics"

_TYPE_KEYS = {
    "gauge": "gauges",
    "counter": "counters",
    "histogram": "histograms",
    "meter": "meters",
    "timer": "timers",
}


def _escape(value: str) -> str:
    return value.replace(",", "_").replace("=", "_")


def create_object_name(domain: str, kind: str, name: str) -> ObjectName:
    """``<domain>:name=<metric name>,type=<kind>s``."""
    return ObjectName(domain, {"name": _escape(name), "type": _TYPE_KEYS[kind]})


class _BeanRegistrar(MetricRegistryListener):
    """Turns registry notifications into bean registrations."""

    def __init__(self, reporter: "JmxReporter") -> None:
        self._reporter = reporter

    def on_gauge_added(self, name: str, gauge: Gauge) -> None:
        self._reporter._register(name, "gauge", gauge)

    def on_gauge_removed(self, name: str) -> None:
        self._reporter._unregister(name, "gauge")

    def on_counter_added(self, name: str, counter: Counter) -> None:
        self._reporter._register(name, "counter", counter)

    def on_counter_removed(self, name: str) -> None:
        self._reporter._unregister(name, "counter")

    def on_histogram_added(self, name: str, histogram: Histogram) -> None:
        self._reporter._register(name, "histogram", histogram)

    def on_histogram_removed(self, name: str) -> None:
        self._reporter._unregister(name, "histogram")

    def on_meter_added(self, name: str, meter: Meter) -> None:
        self._reporter._register(name, "meter", meter)

    def on_meter_removed(self, name: str) -> None:
        self._reporter._unregister(name, "meter")

    def on_timer_added(self, name: str, timer: Timer) -> None:
        self._reporter._register(name, "timer", timer)

    def on_timer_removed(self, name: str) -> None:
        self._reporter._unregister(name, "timer")


class JmxReporter:
    """Publishes every accepted metric of a registry as a managed bean.

    The reporter listens to the registry: metrics present when it starts and
    metrics added later are published; removed metrics are withdrawn.
    Attribute values are read live, with rates expressed per ``rate_unit`` and
    timer durations in ``duration_unit``.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        server: Optional[ManagementServer] = None,
        domain: str = DEFAULT_DOMAIN,
        rate_unit: TimeUnit = TimeUnit.SECONDS,
        duration_unit: TimeUnit = TimeUnit.MILLISECONDS,
        metric_filter: MetricFilter = match_all,
    ) -> None:
        self.registry = registry
        self.server = server if server is not None else get_platform_server()
        self.domain = domain
        self.metric_filter = metric_filter
        self.converter = UnitConverter(rate_unit, duration_unit)
        self._listener = _BeanRegistrar(self)
        self._registered: Dict[str, ObjectName] = {}
        self._lock = threading.Lock()
        self._started = False

    @property
    def rate_unit(self) -> TimeUnit:
        return self.converter.rate_unit

    @property
    def duration_unit(self) -> TimeUnit:
        return self.converter.duration_unit

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.registry.add_listener(self._listener)
        logger.info(f"JMX reporter started in domain {self.domain!r} with {len(self._registered)} beans")

    def stop(self) -> None:
        """Detach from the registry and withdraw every bean this reporter created."""
        if not self._started:
            return
        self.registry.remove_listener(self._listener)
        with self._lock:
            registered = list(self._registered.values())
            self._registered.clear()
        for object_name in registered:
            self._unregister_bean(object_name)
        self._started = False
        logger.info(f"JMX reporter stopped, {len(registered)} beans unregistered")

    def __enter__(self) -> "JmxReporter":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def object_names(self) -> Dict[str, ObjectName]:
        with self._lock:
            return dict(self._registered)

    def _register(self, name: str, kind: str, metric: Metric) -> None:
        if not self.metric_filter(name, metric):
            logger.debug(f"Metric {name} filtered out of JMX reporting")
            return

        object_name = create_object_name(self.domain, kind, name)
        bean = ManagedBean(metric_attributes(metric, self.converter))
        try:
            self.server.register_bean(object_name, bean)
        except ValueError as e:
            logger.warning(f"Unable to register {kind} {name}: {e}")
            return
        with self._lock:
            self._registered[name] = object_name

    def _unregister(self, name: str, kind: str) -> None:
        with self._lock:
            object_name = self._registered.pop(name, None)
        if object_name is not None:
            self._unregister_bean(object_name)

    def _unregister_bean(self, object_name: ObjectName) -> None:
        try:
            self.server.unregister_bean(object_name)
        except KeyError:
            logger.warning(f"Unable to unregister {object_name}: not registered")
