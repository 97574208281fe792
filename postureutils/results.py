"""Rule responses and rule reports, with the resource identifiers they flag."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from postureutils.designators import PostureExceptionPolicy
from postureutils.objects import list_map_to_meta

STATUS_PASSED = "success"
STATUS_WARNING = "warning"
STATUS_IGNORE = "ignore"
STATUS_FAILED = "failed"


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _trim_unique(items: Iterable[str], remove: Iterable[str]) -> list[str]:
    excluded = set(remove)
    return [item for item in _unique(items) if item not in excluded]


def string_in_slice(str_slice: Iterable[str], value: str) -> bool:
    """True if value is one of the strings."""
    return value in str_slice


def remove_response(responses: Sequence[RuleResponse], index: int) -> list[RuleResponse]:
    """Return the responses without the one at index; IndexError if out of range."""
    if not 0 <= index < len(responses):
        raise IndexError(f"response index {index} out of range")
    return [*responses[:index], *responses[index + 1:]]


def percentage(big: int, small: int) -> int:
    """Share of big that is not small, in whole percent; 100 when both are zero."""
    if big == 0:
        return 100 if small == 0 else 0
    return int((big - small) / big * 100)


@dataclass
class AlertObject:
    """The objects a rule response is about."""

    k8s_api_objects: list[dict[str, Any]] = field(default_factory=list)
    external_objects: dict[str, Any] | None = None

    def _objects(self) -> list[dict[str, Any]]:
        objects = list(self.k8s_api_objects)
        if self.external_objects is not None:
            objects.append(self.external_objects)
        return objects

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AlertObject:
        external = data.get("externalObjects")
        return cls(
            k8s_api_objects=[dict(o) for o in data.get("k8sApiObjects") or []],
            external_objects=dict(external) if external is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.k8s_api_objects:
            result["k8sApiObjects"] = [dict(o) for o in self.k8s_api_objects]
        if self.external_objects:
            result["externalObjects"] = dict(self.external_objects)
        return result


@dataclass
class RuleResponse:
    """The outcome of one rule run on one set of objects."""

    alert_message: str = ""
    failed_paths: list[str] = field(default_factory=list)
    fix_paths: list[dict[str, Any]] = field(default_factory=list)
    fix_command: str = ""
    rule_status: str = ""
    package_name: str = ""
    alert_score: float = 0.0
    alert_object: AlertObject = field(default_factory=AlertObject)
    context: list[str] = field(default_factory=list)
    rulename: str = ""
    exception: PostureExceptionPolicy | None = None

    def passed(self) -> bool:
        """A response is never passed: it only exists when a rule alerted."""
        return False

    def warning(self) -> bool:
        """True when an alert-only exception covers the response."""
        return self.exception is not None and self.exception.is_alert_only()

    def failed(self) -> bool:
        """True when no exception covers the response."""
        return self.exception is None

    def get_status(self) -> str:
        if self.warning():
            return STATUS_WARNING
        if self.passed():
            return STATUS_PASSED
        return STATUS_FAILED

    def failed_resources(self) -> list[dict[str, Any]]:
        """The alerted objects, when the response failed."""
        return self.alert_object._objects() if self.failed() else []

    def warning_resources(self) -> list[dict[str, Any]]:
        """The alerted objects, when the response is a warning."""
        return self.alert_object._objects() if self.warning() else []

    def remove_data(
        self, keep_fields: Iterable[str], keep_metadata_fields: Iterable[str]
    ) -> None:
        """Strip the Kubernetes objects down to the kept fields and metadata fields."""
        keep = set(keep_fields)
        keep_meta = set(keep_metadata_fields)
        for obj in self.alert_object.k8s_api_objects:
            for key in [k for k in obj if k not in keep]:
                del obj[key]
            metadata = obj.get("metadata")
            if isinstance(metadata, dict):
                for key in [k for k in metadata if k not in keep_meta]:
                    del metadata[key]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleResponse:
        exception = data.get("exception")
        return cls(
            alert_message=data.get("alertMessage", ""),
            failed_paths=list(data.get("failedPaths") or []),
            fix_paths=[dict(p) for p in data.get("fixPaths") or []],
            fix_command=data.get("fixCommand", ""),
            rule_status=data.get("ruleStatus", ""),
            package_name=data.get("packagename", ""),
            alert_score=float(data.get("alertScore") or 0.0),
            alert_object=AlertObject.from_dict(data.get("alertObject") or {}),
            context=list(data.get("context") or []),
            rulename=data.get("rulename", ""),
            exception=(
                PostureExceptionPolicy.from_dict(exception) if exception else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "alertMessage": self.alert_message,
            "failedPaths": list(self.failed_paths),
            "fixPaths": [dict(p) for p in self.fix_paths],
        }
        if self.fix_command:
            result["fixCommand"] = self.fix_command
        result.update(
            {
                "ruleStatus": self.rule_status,
                "packagename": self.package_name,
                "alertScore": self.alert_score,
                "alertObject": self.alert_object.to_dict(),
            }
        )
        if self.context:
            result["context"] = list(self.context)
        if self.rulename:
            result["rulename"] = self.rulename
        if self.exception is not None:
            result["exception"] = self.exception.to_dict()
        return result


@dataclass
class RuleStatus:
    """Whether a rule ran; failed when it could not be compiled."""

    status: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleStatus:
        return cls(status=data.get("status", ""), message=data.get("message", ""))

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "message": self.message}


@dataclass
class ResourceUniqueCounter:
    """Counts of distinct resources in total, failed and warning."""

    total_resources: int = 0
    failed_resources: int = 0
    warning_resources: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResourceUniqueCounter:
        return cls(
            total_resources=int(data.get("totalResources") or 0),
            failed_resources=int(data.get("failedResources") or 0),
            warning_resources=int(data.get("warningResources") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalResources": self.total_resources,
            "failedResources": self.failed_resources,
            "warningResources": self.warning_resources,
        }


class ResourcesIDs:
    """Distinct resource ids by status; each id keeps only its worst status.

    Failed ids come first, warning ids exclude failed ones, and passed ids
    exclude both.
    """

    def __init__(
        self,
        *,
        failed: Iterable[str] = (),
        warning: Iterable[str] = (),
        passed: Iterable[str] = (),
    ) -> None:
        self._assign(failed, warning, passed)

    def _assign(
        self, failed: Iterable[str], warning: Iterable[str], passed: Iterable[str]
    ) -> None:
        self._failed = _unique(failed)
        self._warning = _trim_unique(warning, self._failed)
        self._passed = _trim_unique(passed, [*self._failed, *self._warning])

    @property
    def failed_resources(self) -> list[str]:
        return list(self._failed)

    @property
    def warning_resources(self) -> list[str]:
        return list(self._warning)

    @property
    def passed_resources(self) -> list[str]:
        return list(self._passed)

    def merge(self, other: ResourcesIDs) -> None:
        """Add the ids of another set, keeping each id's worst status."""
        self._assign(
            [*self._failed, *other._failed],
            [*self._warning, *other._warning],
            [*self._passed, *other._passed],
        )

    def all_resources(self) -> list[str]:
        """Failed, then warning, then passed ids."""
        return [*self._failed, *self._warning, *self._passed]


@dataclass
class RuleReport:
    """The results of one rule over all its inputs."""

    name: str = ""
    remediation: str = ""
    rule_status: RuleStatus = field(default_factory=RuleStatus)
    rule_responses: list[RuleResponse] = field(default_factory=list)
    list_input_kinds: list[str] = field(default_factory=list)
    counters: ResourceUniqueCounter = field(default_factory=ResourceUniqueCounter)

    def passed(self) -> bool:
        """True when the rule produced no responses."""
        return not self.rule_responses

    def warning(self) -> bool:
        """True when there are responses and none of them failed."""
        if self.passed():
            return False
        return not any(r.failed() for r in self.rule_responses)

    def failed(self) -> bool:
        """True when any response failed."""
        if self.passed():
            return False
        return any(r.failed() for r in self.rule_responses)

    def get_status(self) -> str:
        if self.passed():
            return STATUS_PASSED
        if self.warning():
            return STATUS_WARNING
        return STATUS_FAILED

    def all_resources_ids(self) -> list[str]:
        """Ids of every input resource of the rule."""
        return self.list_input_kinds

    def failed_resources(self) -> list[dict[str, Any]]:
        return [obj for r in self.rule_responses for obj in r.failed_resources()]

    def warning_resources(self) -> list[dict[str, Any]]:
        return [obj for r in self.rule_responses for obj in r.warning_resources()]

    def list_resources_ids(self) -> ResourcesIDs:
        """Distinct ids of failed, warning and passed resources."""
        return ResourcesIDs(
            failed=[m.get_id() for m in list_map_to_meta(self.failed_resources())],
            warning=[m.get_id() for m in list_map_to_meta(self.warning_resources())],
            passed=self.all_resources_ids(),
        )

    def set_resources_counters(self) -> None:
        ids = self.list_resources_ids()
        self.counters.total_resources = len(ids.all_resources())
        self.counters.warning_resources = len(ids.warning_resources)
        self.counters.failed_resources = len(ids.failed_resources)

    def remove_data(
        self, keep_fields: Iterable[str], keep_metadata_fields: Iterable[str]
    ) -> None:
        keep_fields = list(keep_fields)
        keep_metadata_fields = list(keep_metadata_fields)
        for response in self.rule_responses:
            response.remove_data(keep_fields, keep_metadata_fields)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleReport:
        return cls(
            name=data.get("name", ""),
            remediation=data.get("remediation", ""),
            rule_status=RuleStatus.from_dict(data.get("ruleStatus") or {}),
            rule_responses=[
                RuleResponse.from_dict(r) for r in data.get("ruleResponses") or []
            ],
            list_input_kinds=list(data.get("listInputIDs") or []),
            counters=ResourceUniqueCounter.from_dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "remediation": self.remediation,
            "ruleStatus": self.rule_status.to_dict(),
            "ruleResponses": [r.to_dict() for r in self.rule_responses],
            "listInputIDs": list(self.list_input_kinds),
        }
        result.update(self.counters.to_dict())
        return result