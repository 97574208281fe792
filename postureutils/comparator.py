"""Matching of exception designators against workloads, using anchored regexps."""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping
from typing import Any

from postureutils.workload import WorkloadObject, is_type_workload


class Comparator:
    """Compares designator attributes with workloads; compiled patterns are cached."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._patterns: dict[tuple[str, bool], re.Pattern[str] | None] = {}

    def _compile(self, pattern: str, ignore_case: bool) -> re.Pattern[str] | None:
        key = (pattern, ignore_case)
        with self._lock:
            if key in self._patterns:
                return self._patterns[key]
        try:
            compiled: re.Pattern[str] | None = re.compile(
                "^" + pattern + r"\Z", re.IGNORECASE if ignore_case else 0
            )
        except re.error:
            compiled = None
        with self._lock:
            self._patterns[key] = compiled
        return compiled

    def regex_compare(self, pattern: str, name: str) -> bool:
        """Case-sensitive match of the anchored pattern; False if it is invalid."""
        compiled = self._compile(pattern, False)
        return compiled is not None and compiled.search(name) is not None

    def regex_compare_i(self, pattern: str, name: str) -> bool:
        """Case-insensitive match of the anchored pattern; False if it is invalid."""
        compiled = self._compile(pattern, True)
        return compiled is not None and compiled.search(name) is not None

    def compare_namespace(self, workload: Any, namespace: str) -> bool:
        """Match the namespace, or the name when the workload is a Namespace."""
        if workload.kind == "Namespace":
            return self.regex_compare(namespace, workload.name)
        return self.regex_compare(namespace, workload.namespace)

    def compare_kind(self, workload: Any, kind: str) -> bool:
        return self.regex_compare(kind, workload.kind)

    def compare_name(self, workload: Any, name: str) -> bool:
        return self.regex_compare(name, workload.name)

    def compare_path(self, workload: Any, path: str) -> bool:
        """Match the source path of a workload; False when it has none."""
        obj = workload.object
        if not is_type_workload(obj):
            return False
        source_path = obj.get("sourcePath")
        if isinstance(source_path, str):
            return self.regex_compare(path, source_path)
        return False

    def _compare_set(self, values: Mapping[str, Any], attributes: Mapping[str, str]) -> bool:
        found = {k: v for k, v in values.items() if isinstance(v, str)}
        if not found:
            return False
        for key, pattern in attributes.items():
            for value in found.values():
                if key not in found:
                    return False
                if not self.regex_compare(pattern, value):
                    return False
        return True

    def compare_labels(self, workload: Any, attributes: Mapping[str, str]) -> bool:
        """Match the workload's labels; objects that are not workloads always match."""
        obj = workload.object
        if not is_type_workload(obj):
            return True
        return self._compare_set(WorkloadObject(obj).labels, attributes)

    def compare_annotations(self, workload: Any, attributes: Mapping[str, str]) -> bool:
        """Match the workload's annotations; objects that are not workloads always match."""
        obj = workload.object
        if not is_type_workload(obj):
            return True
        return self._compare_set(WorkloadObject(obj).annotations, attributes)

    def compare_cluster(self, designator_cluster: str, cluster_name: str) -> bool:
        """Match the cluster name; an empty designator never matches."""
        return bool(designator_cluster) and self.regex_compare(
            designator_cluster, cluster_name
        )