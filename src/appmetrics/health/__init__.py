"""Health checks and their registry."""

from .registry import (
    FunctionHealthCheck,
    HealthCheck,
    HealthCheckRegistry,
    NoSuchHealthCheckError,
    Result,
)

__all__ = [
    "FunctionHealthCheck",
    "HealthCheck",
    "HealthCheckRegistry",
    "NoSuchHealthCheckError",
    "Result",
]
