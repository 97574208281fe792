"""Control, framework and posture reports built from rule reports."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from postureutils.results import (
    STATUS_FAILED,
    STATUS_PASSED,
    STATUS_WARNING,
    ResourcesIDs,
    ResourceUniqueCounter,
    RuleReport,
    percentage,
)

SOURCE_TYPE_JSON = "JSON"
SOURCE_TYPE_YAML = "YAML"
SOURCE_TYPE_HELM_CHART = "Helm Chart"
SOURCE_TYPE_KUSTOMIZE_DIRECTORY = "Kustomize Directory"

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def _fnv1a32(text: str) -> int:
    digest = _FNV32_OFFSET
    for byte in text.encode("utf-8"):
        digest ^= byte
        digest = (digest * _FNV32_PRIME) & 0xFFFFFFFF
    return digest


def _parse_time(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp into local time; None when absent."""
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError(f"invalid timestamp {value!r}")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no time zone")
    return parsed.astimezone()


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class ControlReport:
    """The results of one control: the reports of its rules."""

    name: str = ""
    guid: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    legacy_id: str = ""
    control_id: str = ""
    rule_reports: list[RuleReport] = field(default_factory=list)
    remediation: str = ""
    description: str = ""
    score: float = 0.0
    base_score: float = 0.0
    armo_improvement: float = 0.0
    counters: ResourceUniqueCounter = field(default_factory=ResourceUniqueCounter)

    def list_resources_ids(self) -> ResourcesIDs:
        """Distinct resource ids of all rules, each with its worst status."""
        ids = ResourcesIDs()
        for rule_report in self.rule_reports:
            ids.merge(rule_report.list_resources_ids())
        return ids

    def set_resources_counters(self) -> None:
        ids = self.list_resources_ids()
        self.counters.total_resources = len(ids.all_resources())
        self.counters.warning_resources = len(ids.warning_resources)
        self.counters.failed_resources = len(ids.failed_resources)

    def list_controls_input_kinds(self) -> list[str]:
        """Input ids of every rule, in rule order."""
        return [kind for r in self.rule_reports for kind in r.list_input_kinds]

    def passed(self) -> bool:
        return not any(r.failed() or r.warning() for r in self.rule_reports)

    def failed(self) -> bool:
        if self.passed():
            return False
        return any(r.failed() for r in self.rule_reports)

    def warning(self) -> bool:
        if self.passed() or self.failed():
            return False
        return any(r.warning() for r in self.rule_reports)

    def get_status(self) -> str:
        if self.passed():
            return STATUS_PASSED
        if self.warning():
            return STATUS_WARNING
        return STATUS_FAILED

    def get_id(self) -> str:
        """Return "C-" followed by the FNV-1a 32 hash of the control name."""
        return f"C-{_fnv1a32(self.name)}"

    def remove_data(
        self, keep_fields: Iterable[str], keep_metadata_fields: Iterable[str]
    ) -> None:
        keep_fields = list(keep_fields)
        keep_metadata_fields = list(keep_metadata_fields)
        for rule_report in self.rule_reports:
            rule_report.remove_data(keep_fields, keep_metadata_fields)

    def set_default_score(self) -> None:
        """Score as the share of resources that did not fail."""
        self.score = float(
            percentage(self.counters.total_resources, self.counters.failed_resources)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ControlReport:
        return cls(
            name=data.get("name", ""),
            guid=data.get("guid", ""),
            attributes=dict(data.get("attributes") or {}),
            legacy_id=data.get("id", ""),
            control_id=data.get("controlID", ""),
            rule_reports=[RuleReport.from_dict(r) for r in data.get("ruleReports") or []],
            remediation=data.get("remediation", ""),
            description=data.get("description", ""),
            score=float(data.get("score") or 0.0),
            base_score=float(data.get("baseScore") or 0.0),
            armo_improvement=float(data.get("ARMOImprovement") or 0.0),
            counters=ResourceUniqueCounter.from_dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"guid": self.guid, "name": self.name}
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.legacy_id:
            result["id"] = self.legacy_id
        result.update(
            {
                "controlID": self.control_id,
                "ruleReports": [r.to_dict() for r in self.rule_reports],
                "remediation": self.remediation,
                "description": self.description,
                "score": self.score,
            }
        )
        if self.base_score:
            result["baseScore"] = self.base_score
        if self.armo_improvement:
            result["ARMOImprovement"] = self.armo_improvement
        result.update(self.counters.to_dict())
        return result


@dataclass
class FrameworkReport:
    """The results of one framework: the reports of its controls."""

    name: str = ""
    control_reports: list[ControlReport] = field(default_factory=list)
    score: float = 0.0
    armo_improvement: float = 0.0
    wcs_score: float = 0.0
    counters: ResourceUniqueCounter = field(default_factory=ResourceUniqueCounter)

    def list_resources_ids(self) -> ResourcesIDs:
        """Distinct resource ids of all controls, each with its worst status."""
        ids = ResourcesIDs()
        for control_report in self.control_reports:
            ids.merge(control_report.list_resources_ids())
        return ids

    def set_resources_counters(self) -> None:
        ids = self.list_resources_ids()
        self.counters.total_resources = len(ids.all_resources())
        self.counters.warning_resources = len(ids.warning_resources)
        self.counters.failed_resources = len(ids.failed_resources)

    def passed(self) -> bool:
        return not any(c.failed() or c.warning() for c in self.control_reports)

    def failed(self) -> bool:
        if self.passed():
            return False
        return any(c.failed() for c in self.control_reports)

    def warning(self) -> bool:
        if self.passed() or self.failed():
            return False
        return any(c.warning() for c in self.control_reports)

    def get_status(self) -> str:
        if self.passed():
            return STATUS_PASSED
        if self.warning():
            return STATUS_WARNING
        return STATUS_FAILED

    def remove_data(
        self, keep_fields: Iterable[str], keep_metadata_fields: Iterable[str]
    ) -> None:
        keep_fields = list(keep_fields)
        keep_metadata_fields = list(keep_metadata_fields)
        for control_report in self.control_reports:
            control_report.remove_data(keep_fields, keep_metadata_fields)

    def set_default_score(self) -> None:
        """Score as the share of resources that did not fail."""
        self.score = float(
            percentage(self.counters.total_resources, self.counters.failed_resources)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FrameworkReport:
        return cls(
            name=data.get("name", ""),
            control_reports=[
                ControlReport.from_dict(c) for c in data.get("controlReports") or []
            ],
            score=float(data.get("score") or 0.0),
            armo_improvement=float(data.get("ARMOImprovement") or 0.0),
            wcs_score=float(data.get("wcsScore") or 0.0),
            counters=ResourceUniqueCounter.from_dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "controlReports": [c.to_dict() for c in self.control_reports],
        }
        if self.score:
            result["score"] = self.score
        if self.armo_improvement:
            result["ARMOImprovement"] = self.armo_improvement
        if self.wcs_score:
            result["wcsScore"] = self.wcs_score
        result.update(self.counters.to_dict())
        return result


@dataclass
class LastCommit:
    """The last commit that touched a file in a git repository."""

    hash: str = ""
    date: datetime | None = None
    committer_name: str = ""
    committer_email: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LastCommit:
        return cls(
            hash=data.get("hash", ""),
            date=_parse_time(data.get("date")),
            committer_name=data.get("committerName", ""),
            committer_email=data.get("committerEmail", ""),
            message=data.get("message", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in (
            ("hash", self.hash),
            ("date", _format_time(self.date)),
            ("committerName", self.committer_name),
            ("committerEmail", self.committer_email),
            ("message", self.message),
        ):
            if value:
                result[key] = value
        return result


@dataclass
class Source:
    """Where a scanned file came from."""

    path: str = ""
    relative_path: str = ""
    file_type: str = ""
    helm_chart_name: str = ""
    kustomize_directory_name: str = ""
    last_commit: LastCommit = field(default_factory=LastCommit)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Source:
        return cls(
            path=data.get("path", ""),
            relative_path=data.get("relativePath", ""),
            file_type=data.get("fileType", ""),
            helm_chart_name=data.get("helmChartName", ""),
            kustomize_directory_name=data.get("kustomizeDirectoryName", ""),
            last_commit=LastCommit.from_dict(data.get("lastCommit") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in (
            ("path", self.path),
            ("relativePath", self.relative_path),
            ("fileType", self.file_type),
            ("helmChartName", self.helm_chart_name),
            ("kustomizeDirectoryName", self.kustomize_directory_name),
        ):
            if value:
                result[key] = value
        result["lastCommit"] = self.last_commit.to_dict()
        return result


@dataclass
class PostureReport:
    """A full posture scan of a cluster."""

    customer_guid: str = ""
    cluster_name: str = ""
    cluster_api_server_info: dict[str, Any] | None = None
    cluster_cloud_provider: str = ""
    report_id: str = ""
    job_id: str = ""
    report_generation_time: datetime | None = None
    framework_reports: list[FrameworkReport] = field(default_factory=list)
    rbac_objects: dict[str, Any] = field(default_factory=dict)
    resources: list[dict[str, Any]] = field(default_factory=list)

    def remove_data(
        self, keep_fields: Iterable[str], keep_metadata_fields: Iterable[str]
    ) -> None:
        keep_fields = list(keep_fields)
        keep_metadata_fields = list(keep_metadata_fields)
        for framework_report in self.framework_reports:
            framework_report.remove_data(keep_fields, keep_metadata_fields)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PostureReport:
        """Build from the JSON mapping; the generation time is converted to local time.

        Raises ValueError when the generation time is not RFC 3339.
        """
        info = data.get("clusterAPIServerInfo")
        return cls(
            customer_guid=data.get("customerGUID", ""),
            cluster_name=data.get("clusterName", ""),
            cluster_api_server_info=dict(info) if info is not None else None,
            cluster_cloud_provider=data.get("clusterCloudProvider", ""),
            report_id=data.get("reportID", ""),
            job_id=data.get("jobID", ""),
            report_generation_time=_parse_time(data.get("generationTime")),
            framework_reports=[
                FrameworkReport.from_dict(f) for f in data.get("frameworks") or []
            ],
            rbac_objects=dict(data.get("rbacObjects") or {}),
            resources=[dict(r) for r in data.get("resource") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "customerGUID": self.customer_guid,
            "clusterName": self.cluster_name,
            "clusterAPIServerInfo": (
                dict(self.cluster_api_server_info)
                if self.cluster_api_server_info is not None
                else None
            ),
            "clusterCloudProvider": self.cluster_cloud_provider,
            "reportID": self.report_id,
            "jobID": self.job_id,
        }
        if self.report_generation_time is not None:
            result["generationTime"] = _format_time(self.report_generation_time)
        result["frameworks"] = [f.to_dict() for f in self.framework_reports]
        if self.rbac_objects:
            result["rbacObjects"] = dict(self.rbac_objects)
        if self.resources:
            result["resource"] = [dict(r) for r in self.resources]
        return result