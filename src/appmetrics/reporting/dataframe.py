"""Tabular snapshots of a metric registry."""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ..metrics import MetricFilter, MetricRegistry, match_all, metric_kind
from .attributes import UnitConverter, read_attributes

logger = logging.getLogger(__name__)


def registry_snapshot(
    registry: MetricRegistry,
    metric_filter: MetricFilter = match_all,
    converter: Optional[UnitConverter] = None,
) -> List[Dict[str, Any]]:
    """Read every matching metric once, one dict of attributes per metric."""
    converter = converter or UnitConverter()
    rows = []
    for name, metric in registry.get_matching(metric_filter).items():
        row: Dict[str, Any] = {"name": name, "type": metric_kind(metric)}
        try:
            row.update(read_attributes(metric, converter))
        except Exception as e:
            logger.warning(f"Failed to read metric {name}: {e}")
            row["error"] = str(e)
        rows.append(row)
    return rows


def registry_to_dataframe(
    registry: MetricRegistry,
    metric_filter: MetricFilter = match_all,
    converter: Optional[UnitConverter] = None,
) -> pd.DataFrame:
    """Get a registry snapshot as a pandas DataFrame indexed by metric name."""
    rows = registry_snapshot(registry, metric_filter, converter)
    if not rows:
        return pd.DataFrame(columns=["type"]).rename_axis("name")
    return pd.DataFrame(rows).set_index("name")
