"""Exception policies, resource designators and a cache of digested designators."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ATTRIBUTE_CLUSTER = "cluster"
ATTRIBUTE_NAMESPACE = "namespace"
ATTRIBUTE_KIND = "kind"
ATTRIBUTE_NAME = "name"
ATTRIBUTE_PATH = "path"

_WLID_PREFIX = "wlid://"


class DesignatorType(str, Enum):
    """How a designator identifies resources."""

    ATTRIBUTES = "Attributes"
    ATTRIBUTE = "Attribute"
    WLID = "Wlid"
    WILD_WLID = "WildWlid"
    WLID_CONTAINER = "WlidContainer"
    WLID_PROCESS = "WlidProcess"
    SID = "Sid"

    def __str__(self) -> str:
        return self.value


class ExceptionAction(str, Enum):
    """What an exception policy does to matching results."""

    ALERT_ONLY = "alertOnly"
    DISABLE = "disable"

    def __str__(self) -> str:
        return self.value


@dataclass
class AttributesDesignators:
    """The resource attributes a designator selects on."""

    cluster: str = ""
    namespace: str = ""
    kind: str = ""
    name: str = ""
    path: str = ""
    labels: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.cluster
            or self.namespace
            or self.kind
            or self.name
            or self.path
            or self.labels
        )


_ATTRIBUTE_FIELDS = {
    ATTRIBUTE_CLUSTER: "cluster",
    ATTRIBUTE_NAMESPACE: "namespace",
    ATTRIBUTE_KIND: "kind",
    ATTRIBUTE_NAME: "name",
    ATTRIBUTE_PATH: "path",
}


def _digest_attributes(attributes: Mapping[str, str]) -> AttributesDesignators:
    result = AttributesDesignators()
    for key, value in attributes.items():
        attr = _ATTRIBUTE_FIELDS.get(key)
        if attr is None:
            result.labels[key] = value
        else:
            setattr(result, attr, value)
    return result


def _digest_wlid(wlid: str) -> AttributesDesignators:
    result = AttributesDesignators()
    body = wlid[len(_WLID_PREFIX):] if wlid.startswith(_WLID_PREFIX) else wlid
    for part in filter(None, body.split("/")):
        if part.startswith("cluster-") and not result.cluster:
            result.cluster = part[len("cluster-"):]
        elif part.startswith("namespace-") and not result.namespace:
            result.namespace = part[len("namespace-"):]
        elif not result.kind:
            kind, _, name = part.partition("-")
            result.kind, result.name = kind, name
    return result


@dataclass
class PortalDesignator:
    """Selects resources by attributes or by workload id."""

    designator_type: DesignatorType = DesignatorType.ATTRIBUTES
    wlid: str = ""
    wild_wlid: str = ""
    sid: str = ""
    attributes: dict[str, str] = field(default_factory=dict)

    def digest(self) -> AttributesDesignators:
        """Reduce the designator to the attributes it selects on."""
        if self.designator_type in (DesignatorType.ATTRIBUTES, DesignatorType.ATTRIBUTE):
            return _digest_attributes(self.attributes)
        if self.designator_type in (
            DesignatorType.WLID,
            DesignatorType.WLID_CONTAINER,
            DesignatorType.WLID_PROCESS,
        ):
            return _digest_wlid(self.wlid)
        if self.designator_type == DesignatorType.WILD_WLID:
            return _digest_wlid(self.wild_wlid)
        return AttributesDesignators()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortalDesignator:
        kind = data.get("designatorType")
        return cls(
            designator_type=DesignatorType(kind) if kind else DesignatorType.ATTRIBUTES,
            wlid=data.get("wlid", ""),
            wild_wlid=data.get("wildwlid", ""),
            sid=data.get("sid", ""),
            attributes=dict(data.get("attributes") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"designatorType": self.designator_type.value}
        if self.wlid:
            result["wlid"] = self.wlid
        if self.wild_wlid:
            result["wildwlid"] = self.wild_wlid
        if self.sid:
            result["sid"] = self.sid
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        return result


@dataclass
class PosturePolicy:
    """Which frameworks, controls and rules an exception applies to."""

    framework_name: str = ""
    control_name: str = ""
    control_id: str = ""
    rule_name: str = ""

    def is_empty(self) -> bool:
        return not (
            self.framework_name or self.control_name or self.control_id or self.rule_name
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PosturePolicy:
        return cls(
            framework_name=data.get("frameworkName", ""),
            control_name=data.get("controlName", ""),
            control_id=data.get("controlID", ""),
            rule_name=data.get("ruleName", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in (
            ("frameworkName", self.framework_name),
            ("controlName", self.control_name),
            ("controlID", self.control_id),
            ("ruleName", self.rule_name),
        ):
            if value:
                result[key] = value
        return result


@dataclass
class PostureExceptionPolicy:
    """An exception: the resources and policies it covers and what it does."""

    name: str = ""
    guid: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    policy_type: str = ""
    creation_time: str = ""
    actions: list[ExceptionAction] = field(default_factory=list)
    resources: list[PortalDesignator] = field(default_factory=list)
    posture_policies: list[PosturePolicy] = field(default_factory=list)

    def is_disable(self) -> bool:
        return ExceptionAction.DISABLE in self.actions

    def is_alert_only(self) -> bool:
        """True when the exception only alerts and does not disable."""
        if self.is_disable():
            return False
        return ExceptionAction.ALERT_ONLY in self.actions

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PostureExceptionPolicy:
        return cls(
            name=data.get("name", ""),
            guid=data.get("guid", ""),
            attributes=dict(data.get("attributes") or {}),
            policy_type=data.get("policyType", ""),
            creation_time=data.get("creationTime", ""),
            actions=[ExceptionAction(a) for a in data.get("actions") or []],
            resources=[PortalDesignator.from_dict(r) for r in data.get("resources") or []],
            posture_policies=[
                PosturePolicy.from_dict(p) for p in data.get("posturePolicies") or []
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"guid": self.guid, "name": self.name}
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        result["policyType"] = self.policy_type
        result["creationTime"] = self.creation_time
        result["actions"] = [a.value for a in self.actions]
        result["resources"] = [r.to_dict() for r in self.resources]
        result["posturePolicies"] = [p.to_dict() for p in self.posture_policies]
        return result


class DesignatorCache:
    """Thread-safe cache of digested designators, keyed by designator content."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[Any, ...], AttributesDesignators] = {}

    @staticmethod
    def _key(designator: PortalDesignator) -> tuple[Any, ...]:
        return (
            designator.designator_type,
            designator.wlid,
            designator.wild_wlid,
            designator.sid,
            frozenset(designator.attributes.items()),
        )

    def get(self, designator: PortalDesignator) -> AttributesDesignators | None:
        """Return the cached digest, or None if absent."""
        key = self._key(designator)
        with self._lock:
            return self._entries.get(key)

    def set(self, designator: PortalDesignator, value: AttributesDesignators) -> None:
        key = self._key(designator)
        with self._lock:
            self._entries[key] = value