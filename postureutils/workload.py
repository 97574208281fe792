"""Generic wrappers around Kubernetes-style object mappings."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any


class ObjectType(str, Enum):
    """The kind of envelope an object mapping is wrapped in."""

    WORKLOAD = "workload"
    LIST_WORKLOADS = "list"
    BASE_OBJECT = "base"
    REGO_RESPONSE = "regoResponse"
    HOST_SENSOR = "HostSensor"
    LOCAL_WORKLOAD = "LocalWorkload"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


def inspect_map(obj: Any, *args: str) -> Any:
    """Follow a path of keys through nested mappings; None if any key is missing."""
    current = obj
    for key in args:
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    return current


def _str_at(obj: Any, *args: str) -> str:
    value = inspect_map(obj, *args)
    return value if isinstance(value, str) else ""


def _set_in(obj: dict[str, Any], path: list[str], key: str, value: Any) -> None:
    current = obj
    for part in path:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[key] = value


def is_type_workload(obj: Any) -> bool:
    """True if the mapping has apiVersion, kind and metadata."""
    if not isinstance(obj, Mapping):
        return False
    return all(key in obj for key in ("apiVersion", "kind", "metadata"))


def is_type_list_workloads(obj: Any) -> bool:
    """True if the mapping holds a list of items."""
    return isinstance(obj, Mapping) and isinstance(obj.get("items"), list)


def is_base_object(obj: Any) -> bool:
    """True if the mapping at least names a kind."""
    return isinstance(obj, Mapping) and "kind" in obj


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split "group/version" into (group, version); a bare version has no group."""
    parts = api_version.split("/")
    if len(parts) >= 2:
        return parts[0], parts[1]
    return "", parts[0]


def join_group_version(group: str, version: str) -> str:
    """Join a group and a version as "group/version"."""
    return f"{group}/{version}"


class BaseObject:
    """An object with the basic Kubernetes layout: apiVersion, kind and metadata."""

    object_type = ObjectType.BASE_OBJECT

    def __init__(self, obj: dict[str, Any]) -> None:
        if not isinstance(obj, dict):
            raise TypeError("object must be a mapping")
        self._object = obj

    @classmethod
    def from_bytes(cls, data: bytes | str) -> BaseObject:
        """Build from JSON text; raises ValueError if it is not a JSON object."""
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError("JSON document is not an object")
        return cls(obj)

    @property
    def object(self) -> dict[str, Any]:
        return self._object

    @object.setter
    def object(self, obj: dict[str, Any]) -> None:
        self._object = obj

    @property
    def api_version(self) -> str:
        return _str_at(self._object, "apiVersion")

    @api_version.setter
    def api_version(self, value: str) -> None:
        self._object["apiVersion"] = value

    @property
    def kind(self) -> str:
        return _str_at(self._object, "kind")

    @kind.setter
    def kind(self, value: str) -> None:
        self._object["kind"] = value

    @property
    def namespace(self) -> str:
        return _str_at(self._object, "metadata", "namespace")

    @namespace.setter
    def namespace(self, value: str) -> None:
        _set_in(self._object, ["metadata"], "namespace", value)

    @property
    def name(self) -> str:
        return _str_at(self._object, "metadata", "name")

    @name.setter
    def name(self, value: str) -> None:
        _set_in(self._object, ["metadata"], "name", value)

    def get_id(self) -> str:
        """Return "<group>/<version>/<namespace>/<kind>/<name>"."""
        group_version = join_group_version(*split_api_version(self.api_version))
        return f"{group_version}/{self.namespace}/{self.kind}/{self.name}"

    def __str__(self) -> str:
        return json.dumps(self._object)


class WorkloadObject(BaseObject):
    """A Kubernetes workload with labels and annotations."""

    object_type = ObjectType.WORKLOAD

    @property
    def labels(self) -> dict[str, str]:
        value = inspect_map(self._object, "metadata", "labels")
        return dict(value) if isinstance(value, Mapping) else {}

    @labels.setter
    def labels(self, value: Mapping[str, str]) -> None:
        _set_in(self._object, ["metadata"], "labels", dict(value))

    @property
    def annotations(self) -> dict[str, str]:
        value = inspect_map(self._object, "metadata", "annotations")
        return dict(value) if isinstance(value, Mapping) else {}

    @annotations.setter
    def annotations(self, value: Mapping[str, str]) -> None:
        _set_in(self._object, ["metadata"], "annotations", dict(value))


class ListWorkloads(BaseObject):
    """An object holding a list of workloads under "items"."""

    object_type = ObjectType.LIST_WORKLOADS

    @property
    def items(self) -> list[dict[str, Any]]:
        value = self._object.get("items")
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    def get_id(self) -> str:
        """Return the sorted IDs of the items, joined with "/"."""
        return "/".join(sorted(BaseObject(item).get_id() for item in self.items))