"""Health checks and the health-check registry."""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Result:
    """The outcome of running a health check."""

    healthy: bool
    message: Optional[str] = None
    error: Optional[BaseException] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    duration_ms: float = 0.0

    @classmethod
    def healthy_result(cls, message: Optional[str] = None, **details: Any) -> "Result":
        return cls(healthy=True, message=message, details=details)

    @classmethod
    def unhealthy_result(
        cls, message: Optional[str] = None, error: Optional[BaseException] = None, **details: Any
    ) -> "Result":
        if message is None and error is not None:
            message = str(error)
        return cls(healthy=False, message=message, error=error, details=details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            "healthy": self.healthy,
            "timestamp": self.timestamp,
            "duration_ms": self.duration_ms,
        }
        if self.message is not None:
            data["message"] = self.message
        if self.error is not None:
            data["error"] = f"{type(self.error).__name__}: {self.error}"
        if self.details:
            data["details"] = self.details
        return data


class HealthCheck:
    """Base class for health checks. Subclasses implement :meth:`check`."""

    def check(self) -> Result:
        raise NotImplementedError

    def execute(self) -> Result:
        """Run :meth:`check`, turning any exception into an unhealthy result."""
        start = time.perf_counter()
        try:
            result = self.check()
        except Exception as e:
            logger.warning(f"Health check {type(self).__name__} failed: {e}")
            result = Result.unhealthy_result(error=e)
        result.duration_ms = (time.perf_counter() - start) * 1000
        return result


class FunctionHealthCheck(HealthCheck):
    """Adapts a callable returning a :class:`Result` or a bool."""

    def __init__(self, func: Callable[[], Any]) -> None:
        self._func = func

    def check(self) -> Result:
        outcome = self._func()
        if isinstance(outcome, Result):
            return outcome
        return Result(healthy=bool(outcome))


class NoSuchHealthCheckError(KeyError):
    """Raised when running a health check that is not registered."""


HealthCheckFilter = Callable[[str, HealthCheck], bool]


class HealthCheckRegistry:
    """A thread-safe registry of named health checks."""

    def __init__(self) -> None:
        self._checks: Dict[str, HealthCheck] = {}
        self._lock = threading.Lock()

    def register(self, name: str, check: Any) -> HealthCheck:
        """Register ``check`` (a :class:`HealthCheck` or a callable) under ``name``.

        Raises:
            ValueError: If a check with the same name already exists.
        """
        if not isinstance(check, HealthCheck):
            if not callable(check):
                raise TypeError(f"Health check {name} must be a HealthCheck or callable")
            check = FunctionHealthCheck(check)

        with self._lock:
            if name in self._checks:
                raise ValueError(f"A health check named {name} already exists")
            self._checks[name] = check
        logger.debug(f"Registered health check {name}")
        return check

    def unregister(self, name: str) -> None:
        with self._lock:
            self._checks.pop(name, None)

    def get_names(self) -> List[str]:
        with self._lock:
            return sorted(self._checks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._checks)

    def run_health_check(self, name: str) -> Result:
        with self._lock:
            check = self._checks.get(name)
        if check is None:
            raise NoSuchHealthCheckError(f"No health check named {name} exists")
        return check.execute()

    def run_health_checks(self, check_filter: Optional[HealthCheckFilter] = None) -> Dict[str, Result]:
        """Run every (matching) check and return results sorted by name."""
        with self._lock:
            checks = sorted(self._checks.items())
        return {
            name: check.execute()
            for name, check in checks
            if check_filter is None or check_filter(name, check)
        }
