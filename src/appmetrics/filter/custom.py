"""Name-based metric filter used by the reporter."""

import logging
from typing import Iterable, Optional

from ..metrics import Metric
from .properties import MetricFilterProperties

logger = logging.getLogger(__name__)


def matches_pattern(name: str, pattern: str) -> bool:
    """Whether ``name`` falls under the dotted prefix ``pattern``."""
    if pattern == "*":
        return True
    return name == pattern or name.startswith(pattern + ".")


def _matches_any(name: str, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(name, pattern) for pattern in patterns)


class CustomMetricFilter:
    """Decides which registered metrics the reporter exports.

    Exclusions win over inclusions. With no include patterns every name that
    is not excluded passes.
    """

    def __init__(self, properties: Optional[MetricFilterProperties] = None) -> None:
        self.properties = properties or MetricFilterProperties()
        logger.debug(
            f"Metric filter: include={self.properties.include} "
            f"exclude={self.properties.exclude}"
        )

    def matches(self, name: str, metric: Optional[Metric] = None) -> bool:
        if _matches_any(name, self.properties.exclude):
            return False
        if not self.properties.include:
            return True
        return _matches_any(name, self.properties.include)

    def __call__(self, name: str, metric: Optional[Metric] = None) -> bool:
        return self.matches(name, metric)
