"""Attribute views of metrics, with rate and duration unit conversion."""

import math
from typing import Any, Callable, Dict

from ..metrics import Counter, Gauge, Histogram, Meter, Metric, TimeUnit, Timer, metric_kind

AttributeSuppliers = Dict[str, Callable[[], Any]]

PERCENTILES = {
    "p50": 0.5,
    "p75": 0.75,
    "p95": 0.95,
    "p98": 0.98,
    "p99": 0.99,
    "p999": 0.999,
}


class UnitConverter:
    """Converts per-second rates and durations in seconds into reporting units."""

    def __init__(
        self,
        rate_unit: TimeUnit = TimeUnit.SECONDS,
        duration_unit: TimeUnit = TimeUnit.MILLISECONDS,
    ) -> None:
        self.rate_unit = rate_unit
        self.duration_unit = duration_unit
        self._rate_factor = rate_unit.seconds
        self._duration_factor = 1.0 / duration_unit.seconds

    def rate(self, per_second: float) -> float:
        return per_second * self._rate_factor

    def duration(self, seconds: float) -> float:
        return seconds * self._duration_factor

    @property
    def rate_label(self) -> str:
        return f"events/{self.rate_unit.singular}"

    @property
    def duration_label(self) -> str:
        return self.duration_unit.label


def _distribution_attributes(sampled: Any, scale: Callable[[float], float]) -> AttributeSuppliers:
    """Min, max, mean, deviation and percentiles of a histogram or timer.

    An empty distribution reads as zeros, and a single value has no deviation.
    """

    def guarded(read: Callable[[], float], minimum: int = 1) -> Callable[[], float]:
        return lambda: scale(read()) if sampled.get_count() >= minimum else 0.0

    def percentile(quantile: float) -> Callable[[], float]:
        def read() -> float:
            snapshot = sampled.get_snapshot()
            if snapshot.get_size() == 0:
                return 0.0
            return scale(snapshot.get_percentile(quantile))

        return read

    attributes: AttributeSuppliers = {
        "min": guarded(sampled.get_min),
        "max": guarded(sampled.get_max),
        "mean": guarded(sampled.get_mean),
        "std_dev": guarded(sampled.get_stddev, minimum=2),
    }
    for name, quantile in PERCENTILES.items():
        attributes[name] = percentile(quantile)
    return attributes


def _rate_attributes(metered: Any, converter: UnitConverter) -> AttributeSuppliers:
    return {
        "count": lambda: int(metered.get_count()),
        "mean_rate": lambda: converter.rate(metered.get_mean_rate()),
        "m1_rate": lambda: converter.rate(metered.get_one_minute_rate()),
        "m5_rate": lambda: converter.rate(metered.get_five_minute_rate()),
        "m15_rate": lambda: converter.rate(metered.get_fifteen_minute_rate()),
        "rate_unit": lambda: converter.rate_label,
    }


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def metric_attributes(metric: Metric, converter: UnitConverter) -> AttributeSuppliers:
    """Return the named attribute suppliers describing ``metric``."""
    kind = metric_kind(metric)
    if kind == "gauge":
        gauge: Gauge = metric  # type: ignore[assignment]
        return {"value": gauge.get_value}
    if kind == "counter":
        counter: Counter = metric  # type: ignore[assignment]
        return {"count": counter.get_count}
    if kind == "histogram":
        histogram: Histogram = metric  # type: ignore[assignment]
        attributes: AttributeSuppliers = {"count": histogram.get_count}
        attributes.update(_distribution_attributes(histogram, lambda v: _finite(float(v))))
        return attributes
    if kind == "meter":
        meter: Meter = metric  # type: ignore[assignment]
        return _rate_attributes(meter, converter)

    timer: Timer = metric  # type: ignore[assignment]
    attributes = _rate_attributes(timer, converter)
    attributes.update(
        _distribution_attributes(timer, lambda v: converter.duration(_finite(float(v))))
    )
    attributes["duration_unit"] = lambda: converter.duration_label
    return attributes


def read_attributes(metric: Metric, converter: UnitConverter) -> Dict[str, Any]:
    """Read every attribute of ``metric`` once."""
    return {name: supplier() for name, supplier in metric_attributes(metric, converter).items()}
