"""Envelope for data collected by the host sensor."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from postureutils.workload import ObjectType, join_group_version, split_api_version

GROUP_HOST_SENSOR = "hostdata.kubescape.cloud"
VERSION = "v1beta0"


def is_type_host_sensor(obj: Any) -> bool:
    """True if the mapping's apiVersion belongs to the host sensor group."""
    if not isinstance(obj, Mapping):
        return False
    api_version = obj.get("apiVersion")
    if not isinstance(api_version, str):
        return False
    return api_version.split("/")[0] == GROUP_HOST_SENSOR


def _parse(obj: Mapping[str, Any]) -> dict[str, Any] | None:
    """Extract the envelope fields, or None when they have the wrong types."""
    api_version = obj.get("apiVersion") or ""
    kind = obj.get("kind") or ""
    metadata = obj.get("metadata") or {}
    if not isinstance(api_version, str) or not isinstance(kind, str):
        return None
    if not isinstance(metadata, Mapping):
        return None
    name = metadata.get("name") or ""
    if not isinstance(name, str):
        return None
    # copy the payload through JSON so the envelope owns it
    data = json.loads(json.dumps(obj.get("data")))
    return {"api_version": api_version, "kind": kind, "name": name, "data": data}


@dataclass
class HostSensorDataEnvelope:
    """A host sensor report: apiVersion, kind, node name and raw data."""

    api_version: str = ""
    kind: str = ""
    name: str = ""
    data: Any = None

    object_type = ObjectType.HOST_SENSOR

    @classmethod
    def from_object(cls, obj: Any) -> HostSensorDataEnvelope | None:
        """Build from a mapping; None if it is not a valid host sensor object."""
        if not is_type_host_sensor(obj):
            return None
        fields = _parse(obj)
        if fields is None:
            return None
        return cls(**fields)

    def set_object(self, obj: Any) -> None:
        """Replace the content from a mapping; invalid mappings are ignored."""
        if not is_type_host_sensor(obj):
            return
        fields = _parse(obj)
        if fields is None:
            return
        self.api_version = fields["api_version"]
        self.kind = fields["kind"]
        self.name = fields["name"]
        self.data = fields["data"]

    def to_object(self) -> dict[str, Any]:
        """Serialise to the envelope's mapping."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {"name": self.name},
            "data": json.loads(json.dumps(self.data)),
        }

    @property
    def object(self) -> dict[str, Any]:
        return self.to_object()

    @property
    def namespace(self) -> str:
        """Host sensor objects are never namespaced."""
        return ""

    def get_id(self) -> str:
        """Return "<group>/<version>/<kind>/<name>"."""
        group_version = join_group_version(*split_api_version(self.api_version))
        return f"{group_version}/{self.kind}/{self.name}"