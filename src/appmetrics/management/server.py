"""In-process namespace of named management beans.

A bean is a named bundle of attributes whose values are read on demand.
Beans are addressed by an :class:`ObjectName` of the form
``domain:key=value[,key=value...]``.
"""

import logging
import os
import platform
import sys
import threading
import time
import tracemalloc
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class MalformedObjectNameError(ValueError):
    """Raised when an object name string cannot be parsed."""


class InstanceAlreadyExistsError(ValueError):
    """Raised when a bean is registered under a name already in use."""


class InstanceNotFoundError(KeyError):
    """Raised when no bean is registered under the requested name."""


class ObjectName:
    """A bean name: a domain plus an ordered set of key properties."""

    def __init__(self, domain: str, properties: Mapping[str, str]) -> None:
        if not domain or ":" in domain:
            raise MalformedObjectNameError(f"Invalid domain: {domain!r}")
        if not properties:
            raise MalformedObjectNameError("An object name needs at least one key property")
        for key, value in properties.items():
            if not key or any(ch in key for ch in ",=:") or any(ch in str(value) for ch in ",="):
                raise MalformedObjectNameError(f"Invalid key property {key}={value}")
        self.domain = domain
        self.properties: Dict[str, str] = {k: str(v) for k, v in properties.items()}

    @classmethod
    def parse(cls, name: Union[str, "ObjectName"]) -> "ObjectName":
        if isinstance(name, ObjectName):
            return name

        domain, sep, rest = name.partition(":")
        if not sep:
            raise MalformedObjectNameError(f"Missing ':' in object name {name!r}")
        properties: Dict[str, str] = {}
        for pair in rest.split(","):
            key, eq, value = pair.partition("=")
            if not eq:
                raise MalformedObjectNameError(f"Invalid key property {pair!r} in {name!r}")
            properties[key.strip()] = value.strip()
        return cls(domain.strip(), properties)

    def get(self, key: str) -> Optional[str]:
        return self.properties.get(key)

    def _key(self) -> Tuple[str, frozenset]:
        return self.domain, frozenset(self.properties.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectName):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        props = ",".join(f"{k}={v}" for k, v in self.properties.items())
        return f"{self.domain}:{props}"

    def __repr__(self) -> str:
        return f"ObjectName({str(self)!r})"


class ManagedBean:
    """A set of named attributes backed by supplier functions."""

    def __init__(self, attributes: Optional[Mapping[str, Callable[[], Any]]] = None) -> None:
        self._attributes: Dict[str, Callable[[], Any]] = dict(attributes or {})

    def attribute_names(self) -> List[str]:
        return list(self._attributes)

    def get_attribute(self, name: str) -> Any:
        try:
            supplier = self._attributes[name]
        except KeyError:
            raise AttributeError(f"No attribute {name!r}") from None
        return supplier()

    def get_attributes(self) -> Dict[str, Any]:
        return {name: supplier() for name, supplier in self._attributes.items()}


class ManagementServer:
    """A thread-safe registry of managed beans keyed by object name."""

    def __init__(self) -> None:
        self._beans: Dict[ObjectName, ManagedBean] = {}
        self._lock = threading.Lock()

    def register_bean(self, name: Union[str, ObjectName], bean: ManagedBean) -> ObjectName:
        object_name = ObjectName.parse(name)
        with self._lock:
            if object_name in self._beans:
                raise InstanceAlreadyExistsError(f"{object_name} is already registered")
            self._beans[object_name] = bean
        logger.debug(f"Registered managed bean {object_name}")
        return object_name

    def unregister_bean(self, name: Union[str, ObjectName]) -> None:
        object_name = ObjectName.parse(name)
        with self._lock:
            if self._beans.pop(object_name, None) is None:
                raise InstanceNotFoundError(str(object_name))
        logger.debug(f"Unregistered managed bean {object_name}")

    def is_registered(self, name: Union[str, ObjectName]) -> bool:
        with self._lock:
            return ObjectName.parse(name) in self._beans

    def get_bean(self, name: Union[str, ObjectName]) -> ManagedBean:
        object_name = ObjectName.parse(name)
        with self._lock:
            bean = self._beans.get(object_name)
        if bean is None:
            raise InstanceNotFoundError(str(object_name))
        return bean

    def get_attribute(self, name: Union[str, ObjectName], attribute: str) -> Any:
        return self.get_bean(name).get_attribute(attribute)

    def query_names(
        self,
        domain: Optional[str] = None,
        **properties: str,
    ) -> List[ObjectName]:
        """Return names matching ``domain`` and every given key property, sorted."""
        with self._lock:
            names = list(self._beans)
        matched = [
            name for name in names
            if (domain is None or name.domain == domain)
            and all(name.get(k) == v for k, v in properties.items())
        ]
        return sorted(matched, key=str)

    def __len__(self) -> int:
        with self._lock:
            return len(self._beans)


RUNTIME_BEAN = "python.lang:type=Runtime"
ALLOCATOR_BEAN = "python.lang:type=Allocator"

_START_TIME = time.time()


def _traced_memory(index: int) -> int:
    if not tracemalloc.is_tracing():
        return 0
    return tracemalloc.get_traced_memory()[index]


def register_platform_beans(server: ManagementServer) -> None:
    """Register the interpreter's own beans on ``server``."""
    server.register_bean(
        RUNTIME_BEAN,
        ManagedBean({
            "name": lambda: f"{os.getpid()}@{platform.node()}",
            "implementation": platform.python_implementation,
            "version": platform.python_version,
            "pid": os.getpid,
            "start_time": lambda: int(_START_TIME * 1000),
            "uptime": lambda: int((time.time() - _START_TIME) * 1000),
        }),
    )
    server.register_bean(
        ALLOCATOR_BEAN,
        ManagedBean({
            "allocated_blocks": sys.getallocatedblocks,
            "tracing": tracemalloc.is_tracing,
            "traced_current": lambda: _traced_memory(0),
            "traced_peak": lambda: _traced_memory(1),
        }),
    )


_platform_server: Optional[ManagementServer] = None
_platform_lock = threading.Lock()


def get_platform_server() -> ManagementServer:
    """Return the process-wide management server, creating it on first use."""
    global _platform_server
    with _platform_lock:
        if _platform_server is None:
            server = ManagementServer()
            register_platform_beans(server)
            _platform_server = server
            logger.info("Platform management server initialized")
        return _platform_server
