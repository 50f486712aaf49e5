"""Gauge sets describing the running interpreter and its process."""

import gc
import logging
import sys
import threading
from typing import Dict, Optional, Sequence, Tuple

import psutil

from ..management import ALLOCATOR_BEAN, RUNTIME_BEAN, ManagementServer, get_platform_server
from ..metrics import CallbackGauge, Metric, MetricSet, RatioGauge

logger = logging.getLogger(__name__)


def _at(values: Sequence[int], index: int) -> int:
    return values[index] if index < len(values) else 0


class GarbageCollectorMetricSet(MetricSet):
    """Collection statistics for each garbage collector generation."""

    def get_metrics(self) -> Dict[str, Metric]:
        metrics: Dict[str, Metric] = {}
        for generation in range(len(gc.get_stats())):
            prefix = f"gen{generation}"
            metrics[f"{prefix}.collections"] = CallbackGauge(
                lambda g=generation: gc.get_stats()[g]["collections"]
            )
            metrics[f"{prefix}.collected"] = CallbackGauge(
                lambda g=generation: gc.get_stats()[g]["collected"]
            )
            metrics[f"{prefix}.uncollectable"] = CallbackGauge(
                lambda g=generation: gc.get_stats()[g]["uncollectable"]
            )
            metrics[f"{prefix}.count"] = CallbackGauge(
                lambda g=generation: _at(gc.get_count(), g)
            )
            metrics[f"{prefix}.threshold"] = CallbackGauge(
                lambda g=generation: _at(gc.get_threshold(), g)
            )
        return metrics


class MemoryUsageGaugeSet(MetricSet):
    """Resident and virtual memory of this process, plus system totals."""

    def __init__(self, process: Optional[psutil.Process] = None) -> None:
        self._process = process or psutil.Process()

    def get_metrics(self) -> Dict[str, Metric]:
        return {
            "rss": CallbackGauge(lambda: self._process.memory_info().rss),
            "vms": CallbackGauge(lambda: self._process.memory_info().vms),
            "rss.usage": CallbackGauge(
                lambda: self._process.memory_info().rss / psutil.virtual_memory().total
            ),
            "objects": CallbackGauge(lambda: len(gc.get_objects())),
            "system.total": CallbackGauge(lambda: psutil.virtual_memory().total),
            "system.available": CallbackGauge(lambda: psutil.virtual_memory().available),
        }


class ThreadStatesGaugeSet(MetricSet):
    """Thread counts as seen by the threading module and by the OS."""

    def __init__(self, process: Optional[psutil.Process] = None) -> None:
        self._process = process or psutil.Process()

    def get_metrics(self) -> Dict[str, Metric]:
        return {
            "count": CallbackGauge(threading.active_count),
            "daemon.count": CallbackGauge(
                lambda: sum(1 for t in threading.enumerate() if t.daemon)
            ),
            "non-daemon.count": CallbackGauge(
                lambda: sum(1 for t in threading.enumerate() if not t.daemon)
            ),
            "native.count": CallbackGauge(self._process.num_threads),
        }


class FileDescriptorRatioGauge(RatioGauge):
    """Ratio of open file descriptors to the soft descriptor limit.

    Reads NaN on platforms without descriptor counts or limits.
    """

    def __init__(self, process: Optional[psutil.Process] = None) -> None:
        super().__init__()
        self._process = process or psutil.Process()

    def get_ratio(self) -> Tuple[float, float]:
        limit_kind = getattr(psutil, "RLIMIT_NOFILE", None)
        if limit_kind is None or not hasattr(self._process, "num_fds"):
            return float("nan"), float("nan")
        soft, _hard = self._process.rlimit(limit_kind)
        if soft == getattr(psutil, "RLIM_INFINITY", -1) or soft <= 0:
            return float("nan"), float("nan")
        return float(self._process.num_fds()), float(soft)


class AllocatorMetricSet(MetricSet):
    """Allocator usage read from the interpreter's allocator bean."""

    ATTRIBUTES = {
        "blocks": "allocated_blocks",
        "traced.current": "traced_current",
        "traced.peak": "traced_peak",
    }

    def __init__(self, server: ManagementServer) -> None:
        self._server = server

    def get_metrics(self) -> Dict[str, Metric]:
        if not self._server.is_registered(ALLOCATOR_BEAN):
            logger.debug(f"Allocator bean {ALLOCATOR_BEAN} not registered, skipping allocator metrics")
            return {}
        return {
            name: CallbackGauge(lambda attr=attribute: self._server.get_attribute(ALLOCATOR_BEAN, attr))
            for name, attribute in self.ATTRIBUTES.items()
        }


class RuntimeAttributeGaugeSet(MetricSet):
    """Interpreter identity and uptime, read from the runtime bean."""

    def __init__(self, server: Optional[ManagementServer] = None) -> None:
        self._server = server if server is not None else get_platform_server()

    def get_metrics(self) -> Dict[str, Metric]:
        if not self._server.is_registered(RUNTIME_BEAN):
            logger.debug(f"Runtime bean {RUNTIME_BEAN} not registered, skipping runtime attributes")
            return {}
        return {
            attr: CallbackGauge(lambda a=attr: self._server.get_attribute(RUNTIME_BEAN, a))
            for attr in ("name", "implementation", "version", "pid", "uptime")
        }


class ModuleLoadingGaugeSet(MetricSet):
    """Number of loaded modules, and modules unloaded since creation."""

    def __init__(self) -> None:
        self._initial = set(sys.modules)

    def get_metrics(self) -> Dict[str, Metric]:
        return {
            "loaded": CallbackGauge(lambda: len(sys.modules)),
            "unloaded": CallbackGauge(lambda: len(self._initial.difference(sys.modules))),
        }
