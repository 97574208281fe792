"""Control severity levels derived from a control's base score."""

from __future__ import annotations

from enum import IntEnum

SEVERITY_CRITICAL_STRING = "Critical"
SEVERITY_HIGH_STRING = "High"
SEVERITY_MEDIUM_STRING = "Medium"
SEVERITY_LOW_STRING = "Low"
SEVERITY_UNKNOWN_STRING = "Unknown"

NUMBER_OF_SEVERITIES = 5


class Severity(IntEnum):
    """Severity levels, ordered from least to most severe."""

    UNKNOWN = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        """Human readable name of the severity."""
        return _LABELS[self]


_LABELS = {
    Severity.UNKNOWN: SEVERITY_UNKNOWN_STRING,
    Severity.LOW: SEVERITY_LOW_STRING,
    Severity.MEDIUM: SEVERITY_MEDIUM_STRING,
    Severity.HIGH: SEVERITY_HIGH_STRING,
    Severity.CRITICAL: SEVERITY_CRITICAL_STRING,
}


def get_supported_severities() -> list[str]:
    """Return the names of the severities a control can be given."""
    return [
        SEVERITY_LOW_STRING,
        SEVERITY_MEDIUM_STRING,
        SEVERITY_HIGH_STRING,
        SEVERITY_CRITICAL_STRING,
    ]


def control_severity_to_int(base_score: float) -> Severity:
    """Map a base score to a severity: 9+ critical, 7+ high, 4+ medium, 1+ low."""
    if base_score >= 9:
        return Severity.CRITICAL
    if base_score >= 7:
        return Severity.HIGH
    if base_score >= 4:
        return Severity.MEDIUM
    if base_score >= 1:
        return Severity.LOW
    return Severity.UNKNOWN


def severity_number_to_string(severity_number: int) -> str:
    """Return the name of a severity number, "Unknown" when out of range."""
    try:
        return Severity(severity_number).label
    except ValueError:
        return SEVERITY_UNKNOWN_STRING


def control_severity_to_string(base_score: float) -> str:
    """Return the severity name for a base score."""
    return severity_number_to_string(control_severity_to_int(base_score))