"""Dotted property lookup over nested configuration dictionaries."""

from typing import Any, Dict, Mapping, Optional

_MISSING = object()


def get_property(config: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Look up a dotted ``key`` such as ``metrics.report.jmx``.

    Nested sections and flat dotted keys may be mixed: ``{"metrics":
    {"report.jmx": False}}`` and ``{"metrics.report.jmx": False}`` both
    resolve. The longest flat key wins at each level.
    """
    value = _lookup(config, key.split("."))
    return default if value is _MISSING else value


def _lookup(node: Any, parts: list) -> Any:
    if not parts:
        return node
    if not isinstance(node, Mapping):
        return _MISSING
    for split in range(len(parts), 0, -1):
        candidate = ".".join(parts[:split])
        if candidate in node:
            found = _lookup(node[candidate], parts[split:])
            if found is not _MISSING:
                return found
    return _MISSING


def as_bool(value: Any) -> bool:
    """Interpret a configuration value as a boolean flag."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in ("true", "yes", "on", "1"):
        return True
    if text in ("false", "no", "off", "0", ""):
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def is_enabled(config: Mapping[str, Any], key: str, match_if_missing: bool = True) -> bool:
    """Whether the flag ``key`` is on, treating an absent key as ``match_if_missing``."""
    value = get_property(config, key, _MISSING)
    if value is _MISSING or value is None:
        return match_if_missing
    return as_bool(value)


def set_property(config: Dict[str, Any], key: str, value: Any) -> None:
    """Set a dotted ``key`` in ``config``, creating nested sections as needed."""
    parts = key.split(".")
    node = config
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value


def flatten(config: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested sections into dotted leaf keys.

    ``{"metrics": {"report.jmx": True, "report": {"domain": "x"}}}`` becomes
    ``{"metrics.report.jmx": True, "metrics.report.domain": "x"}``. Empty
    sections and lists are leaves. Later keys win when two spellings name the
    same leaf.
    """
    flat: Dict[str, Any] = {}
    for key, value in config.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, name))
        else:
            flat[name] = value
    return flat


def get_section(config: Optional[Mapping[str, Any]], prefix: str) -> Dict[str, Any]:
    """Collect every leaf under ``prefix``, keyed relative to it.

    Nested and flat dotted spellings are merged, so ``metrics.report`` of
    ``{"metrics": {"report.jmx": True, "report.rate_unit": "minutes"}}`` is
    ``{"jmx": True, "rate_unit": "minutes"}``.
    """
    start = f"{prefix}."
    return {
        key[len(start):]: value
        for key, value in flatten(config or {}).items()
        if key.startswith(start)
    }
