"""A plain scanning status holder and status constructors."""

from __future__ import annotations

from dataclasses import dataclass

from postureutils.statuses import ScanningStatus, ScanningSubStatus, StatusInfo


@dataclass
class Status:
    """A status and sub status without informational text."""

    status: ScanningStatus = ScanningStatus.UNKNOWN
    sub_status: ScanningSubStatus = ScanningSubStatus.UNKNOWN

    @property
    def info(self) -> str:
        """Always empty: a bare status carries no message."""
        return ""

    def is_passed(self) -> bool:
        return self.status == ScanningStatus.PASSED

    def is_failed(self) -> bool:
        return self.status == ScanningStatus.FAILED

    def is_skipped(self) -> bool:
        return self.status == ScanningStatus.SKIPPED


def new_status(status: ScanningStatus) -> Status:
    """Build a Status with no sub status."""
    return Status(status=status)


def new_status_info(
    status: ScanningStatus, sub_status: ScanningSubStatus, info: str
) -> StatusInfo:
    """Build a StatusInfo from its parts."""
    return StatusInfo(status=status, sub_status=sub_status, info=info)