"""Wrapping of raw object mappings in the matching envelope."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any, Union

from postureutils.hostsensor import HostSensorDataEnvelope, is_type_host_sensor
from postureutils.localworkload import LocalWorkload, is_type_local_workload
from postureutils.workload import (
    BaseObject,
    ListWorkloads,
    ObjectType,
    WorkloadObject,
    is_base_object,
    is_type_list_workloads,
    is_type_workload,
)

RELATED_OBJECTS_KEY = "relatedObjects"


def is_type_rego_response_vector(obj: Any) -> bool:
    """True if the mapping has kind, name and relatedObjects keys."""
    if not isinstance(obj, Mapping):
        return False
    return all(key in obj for key in ("kind", "name", RELATED_OBJECTS_KEY))


class RegoResponseVectorObject:
    """A non-Kubernetes object returned by a rule, such as a subject.

    Fields sit at the top level: name, namespace, kind, apiVersion (or
    apiGroup) and relatedObjects, the objects to be shown alongside it.
    """

    object_type = ObjectType.REGO_RESPONSE

    def __init__(self, obj: dict[str, Any]) -> None:
        self.object = obj

    @classmethod
    def from_bytes(cls, data: bytes | str | None) -> RegoResponseVectorObject:
        """Build from JSON text; empty input gives an empty object."""
        if not data:
            return cls({})
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError("JSON document is not an object")
        return cls(obj)

    def _get(self, key: str) -> str:
        value = self.object.get(key)
        return value if isinstance(value, str) else ""

    @property
    def api_version(self) -> str:
        if "apiVersion" in self.object:
            return self._get("apiVersion")
        return self._get("apiGroup")

    @api_version.setter
    def api_version(self, value: str) -> None:
        self.object["apiVersion"] = value

    @property
    def namespace(self) -> str:
        return self._get("namespace")

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.object["namespace"] = value

    @property
    def name(self) -> str:
        return self._get("name")

    @name.setter
    def name(self, value: str) -> None:
        self.object["name"] = value

    @property
    def kind(self) -> str:
        return self._get("kind")

    @kind.setter
    def kind(self, value: str) -> None:
        self.object["kind"] = value

    def set_related_objects(self, related_objects: Iterable[dict[str, Any]]) -> None:
        self.object[RELATED_OBJECTS_KEY] = list(related_objects)

    def related_objects(self) -> list[Metadata]:
        """Wrap the related objects; unrecognised entries are skipped."""
        raw = self.object.get(RELATED_OBJECTS_KEY)
        if not isinstance(raw, list):
            return []
        wrapped = (new_object(item) for item in raw if isinstance(item, dict))
        return [item for item in wrapped if item is not None]

    def get_id(self) -> str:
        """Sorted IDs of related objects and of this object, joined with "/"."""
        ids = [related.get_id() for related in self.related_objects()]
        ids.append(f"{self.api_version}/{self.namespace}/{self.kind}/{self.name}")
        return "/".join(sorted(ids))

    def __str__(self) -> str:
        return json.dumps(self.object)


Metadata = Union[
    RegoResponseVectorObject,
    HostSensorDataEnvelope,
    LocalWorkload,
    WorkloadObject,
    ListWorkloads,
    BaseObject,
]


def get_object_type(obj: Any) -> ObjectType:
    """Detect which envelope suits a mapping, most specific first."""
    if is_type_rego_response_vector(obj):
        return ObjectType.REGO_RESPONSE
    if is_type_host_sensor(obj):
        return ObjectType.HOST_SENSOR
    if is_type_local_workload(obj):
        return ObjectType.LOCAL_WORKLOAD
    if is_type_workload(obj):
        return ObjectType.WORKLOAD
    if is_type_list_workloads(obj):
        return ObjectType.LIST_WORKLOADS
    if is_base_object(obj):
        return ObjectType.BASE_OBJECT
    return ObjectType.UNKNOWN


def new_object(obj: dict[str, Any] | None) -> Metadata | None:
    """Wrap a mapping in its envelope; None if it is None or unrecognised."""
    if obj is None:
        return None
    object_type = get_object_type(obj)
    if object_type == ObjectType.REGO_RESPONSE:
        return RegoResponseVectorObject(obj)
    if object_type == ObjectType.HOST_SENSOR:
        return HostSensorDataEnvelope.from_object(obj)
    if object_type == ObjectType.LOCAL_WORKLOAD:
        return LocalWorkload(obj)
    if object_type == ObjectType.WORKLOAD:
        return WorkloadObject(obj)
    if object_type == ObjectType.LIST_WORKLOADS:
        return ListWorkloads(obj)
    if object_type == ObjectType.BASE_OBJECT:
        return BaseObject(obj)
    return None


def list_map_to_meta(resources: Iterable[dict[str, Any] | None]) -> list[Metadata]:
    """Wrap every recognised mapping, dropping the rest."""
    wrapped = (new_object(resource) for resource in resources)
    return [item for item in wrapped if item is not None]