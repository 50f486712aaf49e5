"""Time units used for rate and duration conversion."""

from enum import Enum
from typing import Union


class TimeUnit(Enum):
    """A unit of time, valued in seconds."""

    NANOSECONDS = 1e-9
    MICROSECONDS = 1e-6
    MILLISECONDS = 1e-3
    SECONDS = 1.0
    MINUTES = 60.0
    HOURS = 3600.0
    DAYS = 86400.0

    @property
    def seconds(self) -> float:
        """Length of one unit in seconds."""
        return self.value

    @property
    def label(self) -> str:
        """Plural lowercase name, e.g. ``milliseconds``."""
        return self.name.lower()

    @property
    def singular(self) -> str:
        """Singular lowercase name, e.g. ``second``."""
        return self.label[:-1]

    def convert(self, duration: float, source: "TimeUnit") -> float:
        """Convert ``duration`` expressed in ``source`` units into this unit."""
        return duration * source.seconds / self.seconds

    @classmethod
    def parse(cls, value: Union[str, "TimeUnit"]) -> "TimeUnit":
        """Parse a unit from its name or a common abbreviation."""
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        for unit in cls:
            if key in (unit.label, unit.singular):
                return unit
        if key in _ABBREVIATIONS:
            return cls[_ABBREVIATIONS[key]]
        raise ValueError(f"Unknown time unit: {value!r}")


_ABBREVIATIONS = {
    "ns": "NANOSECONDS",
    "us": "MICROSECONDS",
    "ms": "MILLISECONDS",
    "s": "SECONDS",
    "sec": "SECONDS",
    "m": "MINUTES",
    "min": "MINUTES",
    "h": "HOURS",
    "d": "DAYS",
}
