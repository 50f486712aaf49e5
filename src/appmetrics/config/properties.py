"""Typed views of the ``metrics`` configuration section."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..metrics import TimeUnit
from ..utils.properties import as_bool, get_section

REPORT_PREFIX = "metrics.report"
JMX_ENABLED_PROPERTY = "metrics.report.jmx"


class MetricsProperties(BaseModel):
    """Settings of the shared registry."""

    model_config = ConfigDict(frozen=True)

    registry_name: str = ""
    runtime_prefix: str = "python"

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "MetricsProperties":
        section = get_section(config, "metrics")
        return cls(**{k: v for k, v in section.items() if k in cls.model_fields})


class ReporterProperties(BaseModel):
    """Settings of the JMX reporter."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    jmx: bool = True
    domain: str = "metrics"
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS

    @field_validator("jmx", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if value is None:
            return True
        return as_bool(value)

    @field_validator("rate_unit", "duration_unit", mode="before")
    @classmethod
    def _parse_unit(cls, value: Any) -> TimeUnit:
        return TimeUnit.parse(value)

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        if not value or ":" in value:
            raise ValueError(f"invalid management domain: {value!r}")
        return value

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "ReporterProperties":
        return cls(**get_section(config, REPORT_PREFIX))
