"""Scanning statuses, sub statuses and their combination rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ScanningStatus(str, Enum):
    """Outcome of scanning a resource or a control."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    UNKNOWN = ""
    # deprecated statuses, see convert_status_to_new_status
    EXCLUDED = "excluded"
    IRRELEVANT = "irrelevant"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class ScanningSubStatus(str, Enum):
    """Refinement of a scanning status."""

    EXCEPTION = "w/exceptions"
    IRRELEVANT = "irrelevant"
    CONFIGURATION = "configuration"
    INTEGRATION = "integration"
    REQUIRES_REVIEW = "requires review"
    MANUAL_REVIEW = "manual review"
    UNKNOWN = ""

    def __str__(self) -> str:
        return self.value


class StatusMsg(str, Enum):
    """Informational messages attached to sub statuses."""

    CONFIGURATION_INFO = "Control missing configuration"
    REQUIRES_REVIEW_INFO = "Control type is requires-review"
    MANUAL_REVIEW_INFO = "Control type is manual-review"

    def __str__(self) -> str:
        return self.value


def compare(a: ScanningStatus, b: ScanningStatus) -> ScanningStatus:
    """Return the more significant of two statuses (failed > skipped > passed)."""
    if ScanningStatus.FAILED in (a, b):
        return ScanningStatus.FAILED
    if ScanningStatus.SKIPPED in (a, b):
        return ScanningStatus.SKIPPED
    if a == ScanningStatus.UNKNOWN and b == ScanningStatus.UNKNOWN:
        return ScanningStatus.UNKNOWN
    return ScanningStatus.PASSED


_PASSED_SUB_PRIORITY = (ScanningSubStatus.EXCEPTION, ScanningSubStatus.IRRELEVANT)
_SKIPPED_SUB_PRIORITY = (
    ScanningSubStatus.CONFIGURATION,
    ScanningSubStatus.INTEGRATION,
    ScanningSubStatus.REQUIRES_REVIEW,
    ScanningSubStatus.MANUAL_REVIEW,
)


def compare_status_and_sub_status(
    a: ScanningStatus,
    b: ScanningStatus,
    a_sub: ScanningSubStatus,
    b_sub: ScanningSubStatus,
) -> tuple[ScanningStatus, ScanningSubStatus]:
    """Return the more significant status together with the matching sub status."""
    status = compare(a, b)
    if status == ScanningStatus.PASSED:
        candidates = _PASSED_SUB_PRIORITY
    elif status == ScanningStatus.SKIPPED:
        candidates = _SKIPPED_SUB_PRIORITY
    else:
        candidates = ()
    for sub in candidates:
        if sub in (a_sub, b_sub):
            return status, sub
    return status, ScanningSubStatus.UNKNOWN


def convert_status_to_new_status(
    status: ScanningStatus,
) -> tuple[ScanningStatus, ScanningSubStatus]:
    """Translate deprecated statuses (excluded, irrelevant) to status and sub status."""
    if status == ScanningStatus.EXCLUDED:
        return ScanningStatus.PASSED, ScanningSubStatus.EXCEPTION
    if status == ScanningStatus.IRRELEVANT:
        return ScanningStatus.PASSED, ScanningSubStatus.IRRELEVANT
    return status, ScanningSubStatus.UNKNOWN


@dataclass
class StatusInfo:
    """A status with its sub status and an informational message."""

    status: ScanningStatus = ScanningStatus.UNKNOWN
    sub_status: ScanningSubStatus = ScanningSubStatus.UNKNOWN
    info: str = ""

    def is_passed(self) -> bool:
        return self.status == ScanningStatus.PASSED

    def is_failed(self) -> bool:
        return self.status == ScanningStatus.FAILED

    def is_skipped(self) -> bool:
        return self.status == ScanningStatus.SKIPPED

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a mapping, leaving out empty fields."""
        result: dict[str, Any] = {}
        if self.status:
            result["status"] = str(self.status)
        if self.sub_status:
            result["subStatus"] = str(self.sub_status)
        if self.info:
            result["info"] = self.info
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatusInfo":
        """Build from a mapping as produced by to_dict."""
        return cls(
            status=ScanningStatus(data.get("status", "")),
            sub_status=ScanningSubStatus(data.get("subStatus", "")),
            info=data.get("info", ""),
        )