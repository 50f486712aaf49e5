"""Serving context: shared attributes plus startup and shutdown listeners."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ServingContextEvent:
    """Delivered to listeners when the serving context starts or stops."""

    context: "ServingContext"


class ServingContextListener:
    """Receives serving context lifecycle events. Both hooks default to no-ops."""

    def context_initialized(self, event: ServingContextEvent) -> None:
        pass

    def context_destroyed(self, event: ServingContextEvent) -> None:
        pass


@dataclass
class ListenerRegistration:
    """A listener handed to the serving context at startup.

    Lower ``order`` values are initialized first and destroyed last.
    """

    listener: ServingContextListener
    order: int = 0
    enabled: bool = True

    def register_with(self, context: "ServingContext") -> None:
        if not self.enabled:
            logger.info(f"Listener {type(self.listener).__name__} is disabled, not registering")
            return
        context.add_listener(self.listener, self.order)


class ServingContext:
    """Attributes shared with request handlers, and the listeners that set them."""

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._attributes: Dict[str, Any] = {}
        self._listeners: List[tuple] = []
        self._lock = threading.Lock()
        self.initialized = False

    def set_attribute(self, key: str, value: Any) -> None:
        with self._lock:
            self._attributes[key] = value

    def get_attribute(self, key: str, default: Optional[Any] = None) -> Any:
        with self._lock:
            return self._attributes.get(key, default)

    def remove_attribute(self, key: str) -> None:
        with self._lock:
            self._attributes.pop(key, None)

    def attribute_names(self) -> List[str]:
        with self._lock:
            return sorted(self._attributes)

    def add_listener(self, listener: ServingContextListener, order: int = 0) -> None:
        with self._lock:
            self._listeners.append((order, len(self._listeners), listener))
            self._listeners.sort(key=lambda entry: entry[:2])

    def remove_listener(self, listener: ServingContextListener) -> None:
        with self._lock:
            self._listeners = [entry for entry in self._listeners if entry[2] is not listener]

    @property
    def listeners(self) -> List[ServingContextListener]:
        with self._lock:
            return [listener for _, _, listener in self._listeners]

    def initialize(self) -> None:
        """Fire ``context_initialized`` on every listener, in order."""
        if self.initialized:
            return
        event = ServingContextEvent(self)
        for listener in self.listeners:
            listener.context_initialized(event)
        self.initialized = True
        logger.info(f"Serving context {self.name!r} initialized with {len(self.listeners)} listeners")

    def destroy(self) -> None:
        """Fire ``context_destroyed`` on every listener, in reverse order."""
        if not self.initialized:
            return
        event = ServingContextEvent(self)
        for listener in reversed(self.listeners):
            listener.context_destroyed(event)
        self.initialized = False
        logger.info(f"Serving context {self.name!r} destroyed")
