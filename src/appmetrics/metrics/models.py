"""Metric types held by a metric registry.

Counters, gauges, histograms, meters and timers are pyformance's. This
module adds the grouping and ratio types the runtime metric sets are built
from.
"""

import math
from typing import Dict, Tuple, Union

from pyformance.meters import CallbackGauge, Counter, Gauge, Histogram, Meter, SimpleGauge, Timer


class MetricSet:
    """A bundle of related metrics registered together under a name prefix."""

    def get_metrics(self) -> Dict[str, "Metric"]:
        """Return the member metrics keyed by their name relative to the prefix."""
        raise NotImplementedError


Metric = Union[Counter, Gauge, Histogram, Meter, Timer, MetricSet]


class RatioGauge(Gauge):
    """A gauge whose value is ``numerator / denominator``.

    Subclasses implement :meth:`get_ratio`. Undefined ratios (zero or
    non-finite denominator) read as NaN.
    """

    def get_ratio(self) -> Tuple[float, float]:
        raise NotImplementedError

    def get_value(self) -> float:
        numerator, denominator = self.get_ratio()
        if math.isnan(denominator) or math.isinf(denominator) or denominator == 0:
            return float("nan")
        return numerator / denominator
