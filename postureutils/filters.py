"""Filters that narrow exceptions and listings by framework, control or status."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from postureutils.designators import PostureExceptionPolicy
from postureutils.statuses import ScanningStatus


@dataclass
class Filters:
    """Fields that may affect a resource's status; empty means no filtering."""

    framework_names: list[str] = field(default_factory=list)

    def list_framework_names(self) -> list[str]:
        """Return the framework names, without empty ones."""
        return [name for name in self.framework_names if name]

    def filter_exceptions(
        self, exceptions: Iterable[PostureExceptionPolicy]
    ) -> list[PostureExceptionPolicy]:
        """Keep exceptions that apply to the filtered frameworks.

        An exception is kept once for every posture policy that has no
        framework name or names one of the frameworks (ignoring case).
        """
        exceptions = list(exceptions)
        names = {name.lower() for name in self.list_framework_names()}
        if not names or not exceptions:
            return exceptions
        return [
            exception
            for exception in exceptions
            for policy in exception.posture_policies
            if not policy.framework_name or policy.framework_name.lower() in names
        ]


@dataclass
class ListingFilters:
    """Restrict listings; an empty list means no restriction."""

    framework_names: list[str] = field(default_factory=list)
    controls_names: list[str] = field(default_factory=list)
    controls_ids: list[str] = field(default_factory=list)
    statuses: list[ScanningStatus] = field(default_factory=list)