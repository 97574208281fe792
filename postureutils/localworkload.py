"""Workloads read from local files, carrying their source path."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from postureutils.workload import BaseObject, ObjectType

PATH_KEY = "sourcePath"

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def _fnv1a32(text: str) -> int:
    digest = _FNV32_OFFSET
    for byte in text.encode("utf-8"):
        digest ^= byte
        digest = (digest * _FNV32_PRIME) & 0xFFFFFFFF
    return digest


def is_type_local_workload(obj: Any) -> bool:
    """True if the mapping carries a source path."""
    return isinstance(obj, Mapping) and PATH_KEY in obj


class LocalWorkload(BaseObject):
    """A base object that also records the file it was read from."""

    object_type = ObjectType.LOCAL_WORKLOAD

    @property
    def path(self) -> str:
        value = self.object.get(PATH_KEY)
        return value if isinstance(value, str) else ""

    @path.setter
    def path(self, value: str) -> None:
        self.object[PATH_KEY] = value

    def delete_path_entry(self) -> None:
        """Remove the source path from the object."""
        self.object.pop(PATH_KEY, None)

    def get_id(self) -> str:
        """Return "path=<fnv32a of path>/api=<base object id>"."""
        return f"path={_fnv1a32(self.path)}/api={super().get_id()}"