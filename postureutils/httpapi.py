"""Request and response payloads of the scanning HTTP service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NotificationPolicyKind(str, Enum):
    """Kind of a scan target."""

    FRAMEWORK = "Framework"
    CONTROL = "Control"
    RULE = "Rule"

    def __str__(self) -> str:
        return self.value


class ScanResponseType(str, Enum):
    """Type of a scan response."""

    ID = "id"  # deprecated: busy / notBusy are returned instead
    ERROR = "error"
    RESULTS_V1 = "v1results"
    BUSY = "busy"
    NOT_BUSY = "notBusy"
    READY = "ready"

    def __str__(self) -> str:
        return self.value


_BOOL_FIELDS = (
    ("submit", "submit"),
    ("host_scanner", "hostScanner"),
    ("keep_local", "keepLocal"),
    ("use_cached_artifacts", "useCachedArtifacts"),
)
_LIST_FIELDS = (
    ("excluded_namespaces", "excludedNamespaces"),
    ("include_namespaces", "includeNamespaces"),
    ("target_names", "targetNames"),
)


@dataclass
class PostScanRequest:
    """A request to trigger a scan; unset options are left out when serialised."""

    logger: str = ""  # not part of the wire format
    format: str = ""
    account: str = ""
    fail_threshold: float = 0.0
    excluded_namespaces: list[str] = field(default_factory=list)
    include_namespaces: list[str] = field(default_factory=list)
    target_names: list[str] = field(default_factory=list)
    target_type: NotificationPolicyKind | None = None
    submit: bool | None = None
    host_scanner: bool | None = None
    keep_local: bool | None = None
    use_cached_artifacts: bool | None = None
    use_artifacts_from: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON mapping of the request."""
        result: dict[str, Any] = {}
        if self.format:
            result["format"] = self.format
        if self.account:
            result["account"] = self.account
        if self.fail_threshold:
            result["failThreshold"] = self.fail_threshold
        for attr, key in _LIST_FIELDS:
            values = getattr(self, attr)
            if values:
                result[key] = list(values)
        if self.target_type is not None:
            result["targetType"] = self.target_type.value
        for attr, key in _BOOL_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        if self.use_artifacts_from:
            result["useArtifactsFrom"] = self.use_artifacts_from
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PostScanRequest:
        """Build a request from its JSON mapping; unknown target types raise ValueError."""
        target_type = data.get("targetType")
        kwargs: dict[str, Any] = {
            "format": data.get("format", ""),
            "account": data.get("account", ""),
            "fail_threshold": float(data.get("failThreshold", 0.0)),
            "target_type": NotificationPolicyKind(target_type) if target_type else None,
            "use_artifacts_from": data.get("useArtifactsFrom", ""),
        }
        for attr, key in _LIST_FIELDS:
            kwargs[attr] = list(data.get(key) or [])
        for attr, key in _BOOL_FIELDS:
            kwargs[attr] = data.get(key)
        return cls(**kwargs)


@dataclass
class Response:
    """A scan response: its scan id, type and optional payload."""

    id: str = ""
    type: ScanResponseType | None = None
    response: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise; the payload is left out when it is None."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value if self.type is not None else "",
        }
        if self.response is not None:
            result["response"] = self.response
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Response:
        """Build from a JSON mapping; unknown response types raise ValueError."""
        kind = data.get("type")
        return cls(
            id=data.get("id", ""),
            type=ScanResponseType(kind) if kind else None,
            response=data.get("response"),
        )