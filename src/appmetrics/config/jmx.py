"""Configuration unit registering the JMX reporter."""

import logging
from typing import Optional

from ..filter import CustomMetricFilter, MetricFilterProperties
from ..management import ManagementServer
from ..metrics import MetricRegistry
from ..reporting import JmxReporter
from ..utils.beans import bean, conditional_on_property
from .properties import JMX_ENABLED_PROPERTY, ReporterProperties

logger = logging.getLogger(__name__)


@conditional_on_property(JMX_ENABLED_PROPERTY, match_if_missing=True)
class JmxMetricsConfiguration:
    """Registers the JMX reporter. Loaded after :class:`CoreMetricsConfiguration`."""

    def __init__(
        self,
        reporter_properties: Optional[ReporterProperties] = None,
        management_server: Optional[ManagementServer] = None,
    ) -> None:
        self.reporter_properties = reporter_properties or ReporterProperties()
        self.management_server = management_server

    @bean()
    def register_jmx_reporter(
        self, registry: MetricRegistry, properties: MetricFilterProperties
    ) -> JmxReporter:
        """Start a reporter exposing the filtered registry as managed beans.

        Rates are reported per second and durations in milliseconds unless
        the reporter properties say otherwise. Failures propagate.
        """
        metric_filter = CustomMetricFilter(properties)

        reporter = JmxReporter(
            registry,
            server=self.management_server,
            domain=self.reporter_properties.domain,
            rate_unit=self.reporter_properties.rate_unit,
            duration_unit=self.reporter_properties.duration_unit,
            metric_filter=metric_filter,
        )
        reporter.start()
        logger.debug("Registered JMX metrics reporter.")

        return reporter
