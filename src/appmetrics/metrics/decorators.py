"""Decorators that record calls of a function into a metric registry.

Each decorator works bare (``@timed``) or with arguments
(``@timed(name="db.query")``), on plain and ``async`` functions. Unless a
registry is given, the shared registry ``registry_name`` is looked up on every
call, so a function decorated at import time reports into whichever registry
the application provisions later.
"""

import functools
import inspect
from typing import Any, Callable, Optional

from .registry import MetricRegistry, SharedMetricRegistries


def _metric_name(func: Callable[..., Any], name: Optional[str], suffix: str) -> str:
    if name:
        return name
    return MetricRegistry.name(func.__module__, func.__qualname__, suffix)


def _resolver(
    registry: Optional[MetricRegistry], registry_name: str
) -> Callable[[], MetricRegistry]:
    if registry is not None:
        return lambda: registry
    return lambda: SharedMetricRegistries.get_or_create(registry_name)


def _instrument(
    func: Optional[Callable[..., Any]],
    make: Callable[[Callable[..., Any]], Callable[..., Any]],
) -> Any:
    if func is not None:
        return make(func)
    return make


def timed(
    func: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    registry: Optional[MetricRegistry] = None,
    registry_name: str = "",
) -> Any:
    """Time every call with the timer ``name``.

    The timer defaults to ``<module>.<qualname>.timer``. Calls that raise are
    timed too.
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        metric_name = _metric_name(f, name, "timer")
        get_registry = _resolver(registry, registry_name)

        if inspect.iscoroutinefunction(f):

            @functools.wraps(f)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                context = get_registry().timer(metric_name).time()
                try:
                    return await f(*args, **kwargs)
                finally:
                    context.stop()

            return async_wrapper

        @functools.wraps(f)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            context = get_registry().timer(metric_name).time()
            try:
                return f(*args, **kwargs)
            finally:
                context.stop()

        return sync_wrapper

    return _instrument(func, decorator)


def metered(
    func: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    registry: Optional[MetricRegistry] = None,
    registry_name: str = "",
) -> Any:
    """Mark the meter ``name`` (default ``<module>.<qualname>.meter``) once per call."""

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        metric_name = _metric_name(f, name, "meter")
        get_registry = _resolver(registry, registry_name)

        if inspect.iscoroutinefunction(f):

            @functools.wraps(f)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                get_registry().meter(metric_name).mark()
                return await f(*args, **kwargs)

            return async_wrapper

        @functools.wraps(f)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            get_registry().meter(metric_name).mark()
            return f(*args, **kwargs)

        return sync_wrapper

    return _instrument(func, decorator)


def counted(
    func: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    monotonic: bool = False,
    registry: Optional[MetricRegistry] = None,
    registry_name: str = "",
) -> Any:
    """Count calls with the counter ``name`` (default ``<module>.<qualname>.counter``).

    By default the counter holds the number of calls in flight: it is
    incremented on entry and decremented on return or raise. With
    ``monotonic=True`` it only ever increments and so counts every call.
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        metric_name = _metric_name(f, name, "counter")
        get_registry = _resolver(registry, registry_name)

        if inspect.iscoroutinefunction(f):

            @functools.wraps(f)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                counter = get_registry().counter(metric_name)
                counter.inc()
                try:
                    return await f(*args, **kwargs)
                finally:
                    if not monotonic:
                        counter.dec()

            return async_wrapper

        @functools.wraps(f)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            counter = get_registry().counter(metric_name)
            counter.inc()
            try:
                return f(*args, **kwargs)
            finally:
                if not monotonic:
                    counter.dec()

        return sync_wrapper

    return _instrument(func, decorator)
