"""Gauge set exposing the attributes of a management bean."""

import logging
from typing import Dict, Optional, Union

from ..management import ManagementServer, ObjectName, get_platform_server
from ..metrics import CallbackGauge, Metric, MetricSet

logger = logging.getLogger(__name__)


class ManagedAttributeGaugeSet(MetricSet):
    """One gauge per attribute of the bean named ``object_name``.

    Attribute names become metric names with underscores replaced by dots,
    e.g. ``traced_peak`` becomes ``traced.peak``. A bean that is not
    registered yields an empty set.
    """

    def __init__(
        self,
        object_name: Union[str, ObjectName],
        server: Optional[ManagementServer] = None,
    ) -> None:
        self.object_name = ObjectName.parse(object_name)
        self._server = server if server is not None else get_platform_server()

    def get_metrics(self) -> Dict[str, Metric]:
        if not self._server.is_registered(self.object_name):
            logger.warning(f"No managed bean registered as {self.object_name}")
            return {}

        bean = self._server.get_bean(self.object_name)
        return {
            attribute.replace("_", "."): CallbackGauge(lambda a=attribute: bean.get_attribute(a))
            for attribute in bean.attribute_names()
        }
