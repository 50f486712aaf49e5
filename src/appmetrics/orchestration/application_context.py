"""Application context wiring the metrics configuration units at startup."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from ..config import CoreMetricsConfiguration, JmxMetricsConfiguration, ReporterProperties
from ..filter import MetricFilterProperties
from ..management import ManagementServer, get_platform_server
from ..reporting import JmxReporter
from ..utils.beans import BeanStore, bean_methods, conditions_match
from ..utils.config_validator import ConfigurationError, MetricsConfigValidator, load_config
from ..web import ListenerRegistration, ServingContext, ServingContextListener

logger = logging.getLogger(__name__)

# Reporter configuration depends on the registry bean, so it loads second.
DEFAULT_CONFIGURATIONS: Sequence[Type] = (CoreMetricsConfiguration, JmxMetricsConfiguration)


class MetricsApplicationContext:
    """Main entry point to set up the metrics beans and start serving them."""

    def __init__(
        self,
        config_data: Optional[Dict[str, Any]] = None,
        configurations: Sequence[Type] = DEFAULT_CONFIGURATIONS,
        serving_context: Optional[ServingContext] = None,
        management_server: Optional[ManagementServer] = None,
    ):
        """Initialize the context.

        Args:
            config_data: Configuration dictionary holding a ``metrics`` section
            configurations: Configuration classes whose bean methods are invoked,
                in order
            serving_context: Context receiving the published registries
            management_server: Namespace the reporter registers beans in
                (defaults to the platform server)
        """
        self.config = config_data or {}
        self.configurations = list(configurations)
        self.serving_context = serving_context or ServingContext()
        self.management_server = (
            management_server if management_server is not None else get_platform_server()
        )
        self.beans = BeanStore()
        self.active = False
        self.closed = False

    @classmethod
    def from_file(cls, config_path: str, **kwargs: Any) -> "MetricsApplicationContext":
        """Create a context from a YAML or JSON configuration file."""
        return cls(load_config(config_path), **kwargs)

    def refresh(self) -> "MetricsApplicationContext":
        """Create every bean, then initialize the serving context.

        A refresh that fails is undone and may be retried.

        Raises:
            ConfigurationError: If the configuration is invalid.
            RuntimeError: If the context was closed.
        """
        if self.active:
            return self
        if self.closed:
            raise RuntimeError("A closed metrics application context cannot be refreshed again")

        is_valid, errors = MetricsConfigValidator.validate(self.config)
        if not is_valid:
            raise ConfigurationError(errors)

        logger.info("Refreshing metrics application context...")
        listeners_before = self.serving_context.listeners
        try:
            self._register_infrastructure_beans()

            for configuration_class in self.configurations:
                if not conditions_match(configuration_class, self.config):
                    logger.info(f"Skipping {configuration_class.__name__}: conditions not met")
                    continue
                self._load_configuration(configuration_class)

            for listener_bean in self.beans.of_type(ServingContextListener).values():
                self.serving_context.add_listener(listener_bean)
            for registration in self.beans.of_type(ListenerRegistration).values():
                registration.register_with(self.serving_context)
            self.serving_context.initialize()
        except Exception as e:
            logger.error(f"Metrics application context failed to start: {e}")
            self._discard(listeners_before)
            raise

        self.active = True
        logger.info(f"Metrics application context started with beans: {self.beans.names()}")
        return self

    def _discard(self, listeners_before: List[ServingContextListener]) -> None:
        """Undo a failed refresh so that it can be retried."""
        for reporter in self.beans.of_type(JmxReporter).values():
            if reporter.is_started:
                reporter.stop()
        for listener in self.serving_context.listeners:
            if not any(listener is kept for kept in listeners_before):
                self.serving_context.remove_listener(listener)
        self.beans = BeanStore()

    def _register_infrastructure_beans(self) -> None:
        self.beans.add("config", self.config)
        self.beans.add("serving_context", self.serving_context)
        self.beans.add("management_server", self.management_server)
        self.beans.add("metric_filter_properties", MetricFilterProperties.from_config(self.config))
        self.beans.add("reporter_properties", ReporterProperties.from_config(self.config))

    def _load_configuration(self, configuration_class: Type) -> None:
        configuration = self.beans.call(configuration_class)
        for attr, definition in bean_methods(configuration_class):
            instance = self.beans.call(getattr(configuration, attr))
            self.beans.add(definition.name, instance, primary=definition.primary)
            logger.debug(f"Created bean {definition.name} from {configuration_class.__name__}.{attr}")

    def get_bean(self, name: str) -> Any:
        return self.beans.get(name)

    def get_bean_of_type(self, cls: type) -> Any:
        return self.beans.by_type(cls)

    def contains_bean(self, name: str) -> bool:
        return name in self.beans

    def bean_names(self) -> List[str]:
        return self.beans.names()

    def close(self) -> None:
        """Fire the serving context shutdown event.

        Reporters are left running; stopping them is up to the caller.
        """
        if not self.active:
            return
        self.serving_context.destroy()
        self.active = False
        self.closed = True
        logger.info("Metrics application context closed")

    def __enter__(self) -> "MetricsApplicationContext":
        return self.refresh()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
