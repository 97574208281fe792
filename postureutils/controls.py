"""Policy definitions: rules, controls and frameworks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from postureutils.severity import Severity, control_severity_to_int

CONTROL_ATTRIBUTE_KEY_TYPE_TAG = "controlTypeTags"
CONTROL_ATTRIBUTE_KEY_ATTACK_TRACKS = "attackTracks"
ACTION_REQUIRED_ATTRIBUTE = "actionRequired"


class RuleLanguage(str, Enum):
    """Languages a rule may be written in."""

    REGO = "Rego"
    REGO_LOWER = "rego"

    def __str__(self) -> str:
        return self.value


@dataclass
class RuleMatchObjects:
    """The resources a rule applies to."""

    api_groups: list[str] = field(default_factory=list)
    api_versions: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleMatchObjects:
        return cls(
            api_groups=list(data.get("apiGroups") or []),
            api_versions=list(data.get("apiVersions") or []),
            resources=list(data.get("resources") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiGroups": list(self.api_groups),
            "apiVersions": list(self.api_versions),
            "resources": list(self.resources),
        }


@dataclass
class RuleDependency:
    """A package a rule uses."""

    package_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleDependency:
        return cls(package_name=data.get("packageName", ""))

    def to_dict(self) -> dict[str, Any]:
        return {"packageName": self.package_name}


@dataclass
class ControlConfigInputs:
    """An input a rule reads from the control configuration."""

    path: str = ""
    name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ControlConfigInputs:
        return cls(
            path=data.get("path", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "name": self.name, "description": self.description}


def _portal_base(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "name": data.get("name", ""),
        "guid": data.get("guid", ""),
        "attributes": dict(data.get("attributes") or {}),
    }


def _portal_base_dict(name: str, guid: str, attributes: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {"guid": guid, "name": name}
    if attributes:
        result["attributes"] = dict(attributes)
    return result


@dataclass
class PolicyRule:
    """A single rule, the executable block of a policy."""

    name: str = ""
    guid: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    creation_time: str = ""
    rule: str = ""
    resource_enumerator: str = ""
    rule_language: str = ""
    match: list[RuleMatchObjects] = field(default_factory=list)
    dynamic_match: list[RuleMatchObjects] = field(default_factory=list)
    rule_dependencies: list[RuleDependency] = field(default_factory=list)
    config_inputs: list[str] = field(default_factory=list)
    control_config_inputs: list[ControlConfigInputs] = field(default_factory=list)
    description: str = ""
    remediation: str = ""
    rule_query: str = ""
    relevant_cloud_providers: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PolicyRule:
        return cls(
            **_portal_base(data),
            creation_time=data.get("creationTime", ""),
            rule=data.get("rule", ""),
            resource_enumerator=data.get("resourceEnumerator", ""),
            rule_language=data.get("ruleLanguage", ""),
            match=[RuleMatchObjects.from_dict(m) for m in data.get("match") or []],
            dynamic_match=[
                RuleMatchObjects.from_dict(m) for m in data.get("dynamicMatch") or []
            ],
            rule_dependencies=[
                RuleDependency.from_dict(d) for d in data.get("ruleDependencies") or []
            ],
            config_inputs=list(data.get("configInputs") or []),
            control_config_inputs=[
                ControlConfigInputs.from_dict(c)
                for c in data.get("controlConfigInputs") or []
            ],
            description=data.get("description", ""),
            remediation=data.get("remediation", ""),
            rule_query=data.get("ruleQuery", ""),
            relevant_cloud_providers=list(data.get("relevantCloudProviders") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        result = _portal_base_dict(self.name, self.guid, self.attributes)
        result.update(
            {
                "creationTime": self.creation_time,
                "rule": self.rule,
                "resourceEnumerator": self.resource_enumerator,
                "ruleLanguage": str(self.rule_language),
                "match": [m.to_dict() for m in self.match],
                "ruleDependencies": [d.to_dict() for d in self.rule_dependencies],
                "configInputs": list(self.config_inputs),
                "controlConfigInputs": [c.to_dict() for c in self.control_config_inputs],
                "description": self.description,
                "remediation": self.remediation,
                "ruleQuery": self.rule_query,
                "relevantCloudProviders": list(self.relevant_cloud_providers),
            }
        )
        if self.dynamic_match:
            result["dynamicMatch"] = [m.to_dict() for m in self.dynamic_match]
        return result


@dataclass
class AttackTrackCategories:
    """The categories a control has within one attack track."""

    attack_track: str = ""
    categories: list[str] = field(default_factory=list)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _decode_attack_tracks(value: Any) -> list[AttackTrackCategories] | None:
    """Decode the attackTracks attribute; None when it is malformed."""
    if value is None:
        return []
    if not isinstance(value, list):
        return None
    decoded = []
    for item in value:
        if not isinstance(item, Mapping):
            return None
        entry = AttackTrackCategories()
        for key, val in item.items():
            lowered = str(key).lower()
            if lowered == "attacktrack":
                if not isinstance(val, str):
                    return None
                entry.attack_track = val
            elif lowered == "categories":
                if val is not None and not _is_string_list(val):
                    return None
                entry.categories = list(val or [])
        decoded.append(entry)
    return decoded


@dataclass
class Control:
    """A collection of rules combined for a single purpose."""

    name: str = ""
    guid: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    legacy_id: str = ""
    control_id: str = ""
    creation_time: str = ""
    description: str = ""
    remediation: str = ""
    rules: list[PolicyRule] = field(default_factory=list)
    framework_names: list[str] = field(default_factory=list)
    fixed_input: dict[str, list[str]] = field(default_factory=dict)
    rules_ids: list[str] | None = None
    base_score: float = 0.0
    armo_improvement_factor: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Control:
        """Build a control from its JSON mapping."""
        rules_ids = data.get("rulesIDs")
        return cls(
            **_portal_base(data),
            legacy_id=data.get("id", ""),
            control_id=data.get("controlID", ""),
            creation_time=data.get("creationTime", ""),
            description=data.get("description", ""),
            remediation=data.get("remediation", ""),
            rules=[PolicyRule.from_dict(r) for r in data.get("rules") or []],
            framework_names=list(data.get("frameworkNames") or []),
            fixed_input={k: list(v) for k, v in (data.get("fixedInput") or {}).items()},
            rules_ids=list(rules_ids) if rules_ids is not None else None,
            base_score=float(data.get("baseScore") or 0.0),
            armo_improvement_factor=float(data.get("ARMOImprovementFactor") or 0.0),
        )

    def to_dict(self) -> dict[str, Any]:
        result = _portal_base_dict(self.name, self.guid, self.attributes)
        if self.legacy_id:
            result["id"] = self.legacy_id
        result.update(
            {
                "controlID": self.control_id,
                "creationTime": self.creation_time,
                "description": self.description,
                "remediation": self.remediation,
                "rules": [r.to_dict() for r in self.rules],
            }
        )
        if self.framework_names:
            result["frameworkNames"] = list(self.framework_names)
        if self.fixed_input:
            result["fixedInput"] = {k: list(v) for k, v in self.fixed_input.items()}
        if self.rules_ids is not None:
            result["rulesIDs"] = list(self.rules_ids)
        if self.base_score:
            result["baseScore"] = self.base_score
        if self.armo_improvement_factor:
            result["ARMOImprovementFactor"] = self.armo_improvement_factor
        return result

    def get_attack_track_categories(self, attack_track_name: str) -> list[str]:
        """Return the control's categories in an attack track, or [] if none or malformed."""
        if CONTROL_ATTRIBUTE_KEY_ATTACK_TRACKS not in self.attributes:
            return []
        tracks = _decode_attack_tracks(self.attributes[CONTROL_ATTRIBUTE_KEY_ATTACK_TRACKS])
        for track in tracks or []:
            if track.attack_track == attack_track_name:
                return list(track.categories)
        return []

    def get_control_type_tags(self) -> list[str]:
        """Return the control type tags, or [] if missing or malformed."""
        value = self.attributes.get(CONTROL_ATTRIBUTE_KEY_TYPE_TAG)
        if _is_string_list(value):
            return list(value)
        return []

    def get_control_id(self) -> str:
        return self.control_id

    def get_score(self) -> float:
        return float(self.base_score)

    def get_severity(self) -> Severity:
        return control_severity_to_int(self.base_score)

    def get_action_required_attribute(self) -> str:
        """Return the actionRequired attribute when it is a string, else ""."""
        value = self.attributes.get(ACTION_REQUIRED_ATTRIBUTE) if self.attributes else None
        return value if isinstance(value, str) else ""


@dataclass
class FrameworkSubSection:
    """A named section of a framework, grouping control ids."""

    name: str = ""
    guid: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    id: str = ""
    sub_sections: dict[str, FrameworkSubSection] = field(default_factory=dict)
    control_ids: list[str] = field(default_factory=list)
    controls: list[Control] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FrameworkSubSection:
        return cls(
            **_portal_base(data),
            id=data.get("id", ""),
            sub_sections={
                k: cls.from_dict(v) for k, v in (data.get("subSections") or {}).items()
            },
            control_ids=list(data.get("controlsIDs") or []),
        )


@dataclass
class Framework:
    """A collection of controls that together describe a policy."""

    name: str = ""
    guid: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    creation_time: str = ""
    description: str = ""
    controls: list[Control] = field(default_factory=list)
    controls_ids: list[str] | None = None
    sub_sections: dict[str, FrameworkSubSection] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Framework:
        controls_ids = data.get("controlsIDs")
        return cls(
            **_portal_base(data),
            creation_time=data.get("creationTime", ""),
            description=data.get("description", ""),
            controls=[Control.from_dict(c) for c in data.get("controls") or []],
            controls_ids=list(controls_ids) if controls_ids is not None else None,
            sub_sections={
                k: FrameworkSubSection.from_dict(v)
                for k, v in (data.get("subSections") or {}).items()
            },
        )