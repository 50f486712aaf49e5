"""Configuration properties for the reporter's metric filter."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..utils.properties import get_section

FILTER_PREFIX = "metrics.filter"


class MetricFilterProperties(BaseModel):
    """Include and exclude patterns over dotted metric names.

    Patterns are dotted prefixes matched on segment boundaries. A trailing
    ``.*`` is the same as the bare prefix and ``*`` matches every name.
    Loaded once at startup and immutable afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    include: List[str] = []
    exclude: List[str] = []

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [part for part in value.split(",")]
        patterns = []
        for pattern in value:
            pattern = str(pattern).strip()
            if not pattern:
                raise ValueError("metric name patterns must not be empty")
            if pattern.endswith(".*"):
                pattern = pattern[:-2] or "*"
            if pattern.startswith(".") or pattern.endswith(".") or ".." in pattern:
                raise ValueError(f"malformed metric name pattern: {pattern!r}")
            patterns.append(pattern)
        return patterns

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "MetricFilterProperties":
        """Build properties from the ``metrics.filter`` section of ``config``."""
        return cls(**get_section(config, FILTER_PREFIX))
