"""
Configuration validation for the metrics startup wiring.

This module provides validation for:
- The registry settings (``metrics``)
- Reporter settings (``metrics.report``)
- Filter patterns (``metrics.filter``)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from ..config.properties import JMX_ENABLED_PROPERTY, REPORT_PREFIX, ReporterProperties
from ..filter import FILTER_PREFIX, MetricFilterProperties
from .properties import as_bool, get_property, get_section

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: Union[str, List[str]]) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


def _pydantic_errors(section: str, error: ValidationError) -> List[str]:
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        where = f"{section}.{location}" if location else section
        messages.append(f"{where}: {detail['msg']}")
    return messages


class RegistryConfigValidator:
    """Validates the registry settings."""

    KNOWN_KEYS = {"registry_name", "runtime_prefix", "report", "filter"}

    @classmethod
    def validate(cls, metrics: Dict[str, Any]) -> List[str]:
        errors = []

        unknown = set(metrics) - cls.KNOWN_KEYS
        # Flat dotted keys such as "report.jmx" belong to a known section
        unknown = {key for key in unknown if key.split(".")[0] not in cls.KNOWN_KEYS}
        if unknown:
            errors.append(f"Unknown keys in metrics section: {sorted(unknown)}")

        name = metrics.get("registry_name", "")
        if not isinstance(name, str):
            errors.append(f"metrics.registry_name must be a string, got {type(name).__name__}")

        prefix = metrics.get("runtime_prefix", "python")
        if not isinstance(prefix, str) or not prefix:
            errors.append("metrics.runtime_prefix must be a non-empty string")
        elif prefix.startswith(".") or prefix.endswith(".") or ".." in prefix:
            errors.append(f"Malformed metrics.runtime_prefix: {prefix!r}")

        return errors


class ReporterConfigValidator:
    """Validates the reporter settings."""

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        errors = []
        section = get_property(config, REPORT_PREFIX, {})
        if section is not None and not isinstance(section, dict):
            return [f"{REPORT_PREFIX} must be a mapping"]

        enabled = get_property(config, JMX_ENABLED_PROPERTY)
        if enabled is not None:
            try:
                as_bool(enabled)
            except ValueError as e:
                return [f"{JMX_ENABLED_PROPERTY}: {e}"]

        try:
            ReporterProperties.from_config(config)
        except ValidationError as e:
            errors.extend(_pydantic_errors(REPORT_PREFIX, e))
        return errors


class FilterConfigValidator:
    """Validates include/exclude patterns."""

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        errors = []
        section = get_property(config, FILTER_PREFIX, {})
        if section is not None and not isinstance(section, dict):
            return [f"{FILTER_PREFIX} must be a mapping"]

        try:
            properties = MetricFilterProperties.from_config(config)
        except ValidationError as e:
            return _pydantic_errors(FILTER_PREFIX, e)

        overlap = set(properties.include) & set(properties.exclude)
        if overlap:
            logger.warning(f"Patterns both included and excluded (exclusion wins): {sorted(overlap)}")
        return errors


class MetricsConfigValidator:
    """Validates a complete configuration document."""

    @classmethod
    def validate(cls, config: Any) -> Tuple[bool, List[str]]:
        if config is None:
            config = {}
        if not isinstance(config, dict):
            return False, ["Configuration must be a mapping"]

        metrics = get_property(config, "metrics", {})
        if metrics is None:
            metrics = {}
        if not isinstance(metrics, dict):
            return False, ["metrics section must be a mapping"]

        all_errors = []
        all_errors.extend(RegistryConfigValidator.validate(metrics))
        all_errors.extend(ReporterConfigValidator.validate(config))
        all_errors.extend(FilterConfigValidator.validate(config))
        return len(all_errors) == 0, all_errors


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file. An empty file is an empty config."""
    config_file = Path(config_path)

    with open(config_file) as f:
        if config_file.suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(f)
        else:
            config = json.load(f)

    return config or {}


def validate_and_load_config(
    config_path: Union[str, Path],
) -> Tuple[bool, List[str], Optional[Dict[str, Any]]]:
    """
    Load and validate a configuration file.

    Returns:
        (is_valid, errors, config)
    """
    config = load_config(config_path)
    is_valid, errors = MetricsConfigValidator.validate(config)

    if not is_valid:
        logger.warning(f"Configuration has {len(errors)} validation errors")
        for error in errors[:10]:
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")

    return is_valid, errors, config
