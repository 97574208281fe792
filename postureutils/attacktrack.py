"""Attack tracks: trees of attack steps and the failed controls linked to them."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

CONTROL_TYPE_TAG_DEVOPS = "devops"
CONTROL_TYPE_TAG_SECURITY = "security"
CONTROL_TYPE_TAG_COMPLIANCE = "compliance"
CONTROL_TYPE_TAG_SECURITY_IMPACT = "security-impact"

_log = logging.getLogger(__name__)


@runtime_checkable
class AttackTrackControl(Protocol):
    """A control that can be related to attack track steps."""

    def get_attack_track_categories(self, attack_track: str) -> list[str]: ...

    def get_control_type_tags(self) -> list[str]: ...

    def get_control_id(self) -> str: ...

    def get_score(self) -> float: ...

    def get_severity(self) -> int: ...


class _ControlsLookup(Protocol):
    def get_associated_controls(
        self, attack_track: str, category: str
    ) -> list[AttackTrackControl]: ...


@dataclass
class AttackTrackStep:
    """A step of an attack track, with its sub steps and failed controls."""

    name: str = ""
    description: str = ""
    sub_steps: list[AttackTrackStep] = field(default_factory=list)
    controls: list[AttackTrackControl] = field(
        default_factory=list, compare=False, repr=False
    )

    def is_part_of_attack_track_path(self) -> bool:
        """A step can be on an attack path only when controls failed on it."""
        return bool(self.controls)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttackTrackStep:
        """Build a step tree from its JSON mapping."""
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            sub_steps=[cls.from_dict(sub) for sub in data.get("subSteps") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the step tree; controls are not serialised."""
        result: dict[str, Any] = {"name": self.name}
        if self.description:
            result["description"] = self.description
        if self.sub_steps:
            result["subSteps"] = [sub.to_dict() for sub in self.sub_steps]
        return result


@dataclass
class AttackTrackSpecification:
    """Version, description and root step of an attack track."""

    version: str = ""
    description: str = ""
    data: AttackTrackStep = field(default_factory=AttackTrackStep)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttackTrackSpecification:
        return cls(
            version=data.get("version", ""),
            description=data.get("description", ""),
            data=AttackTrackStep.from_dict(data.get("data") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.version:
            result["version"] = self.version
        if self.description:
            result["description"] = self.description
        result["data"] = self.data.to_dict()
        return result


@dataclass
class AttackTrack:
    """An attack track document."""

    api_version: str = ""
    kind: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    spec: AttackTrackSpecification = field(default_factory=AttackTrackSpecification)

    @property
    def name(self) -> str:
        value = self.metadata.get("name") if self.metadata else None
        return value if isinstance(value, str) else ""

    @property
    def description(self) -> str:
        return self.spec.description

    @property
    def version(self) -> str:
        return self.spec.version

    @property
    def data(self) -> AttackTrackStep:
        """The root step."""
        return self.spec.data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttackTrack:
        """Build an attack track from its JSON mapping."""
        return cls(
            api_version=data.get("apiVersion", ""),
            kind=data.get("kind", ""),
            metadata=dict(data.get("metadata") or {}),
            spec=AttackTrackSpecification.from_dict(data.get("spec") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": dict(self.metadata),
            "spec": self.spec.to_dict(),
        }

    def is_valid(self) -> bool:
        """Return True if the steps form a tree: no step name is reached twice."""
        visited: set[str] = set()

        def visit(step: AttackTrackStep) -> bool:
            if step.name in visited:
                return False
            visited.add(step.name)
            return all(visit(sub) for sub in step.sub_steps)

        return visit(self.data)

    def iter_steps(self) -> Iterator[AttackTrackStep]:
        """Yield all steps depth first, visiting the last sub step first."""
        stack = [self.data]
        while stack:
            step = stack.pop()
            stack.extend(step.sub_steps)
            yield step


@dataclass
class AttackTrackControlMock:
    """A simple control with fixed answers."""

    control_id: str = ""
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    base_score: float = 0.0
    severity: int = 0

    def get_attack_track_categories(self, attack_track: str) -> list[str]:
        return self.categories

    def get_control_type_tags(self) -> list[str]:
        return self.tags

    def get_control_id(self) -> str:
        return self.control_id

    def get_score(self) -> float:
        return self.base_score

    def get_severity(self) -> int:
        return self.severity


class AttackTrackControlsLookup(dict[str, dict[str, list[AttackTrackControl]]]):
    """Failed controls by attack track name, then by step category."""

    def get_associated_controls(
        self, attack_track: str, category: str
    ) -> list[AttackTrackControl]:
        """Return the controls of a category in an attack track, or []."""
        return self.get(attack_track, {}).get(category, [])

    def has_associated_controls(self, attack_track: str) -> bool:
        """Return True if any category of the attack track has controls."""
        return bool(self.get(attack_track))


def new_attack_track_controls_lookup(
    attack_tracks: Iterable[AttackTrack],
    failed_control_ids: Iterable[str],
    all_controls: Mapping[str, AttackTrackControl],
) -> AttackTrackControlsLookup:
    """Group the failed controls of every attack track by category."""
    failed_control_ids = list(failed_control_ids)
    lookup = AttackTrackControlsLookup()
    for attack_track in attack_tracks:
        track_name = attack_track.name
        categories: dict[str, list[AttackTrackControl]] = {}
        lookup[track_name] = categories
        for control_id in failed_control_ids:
            control = all_controls.get(control_id)
            if control is None:
                _log.error(
                    "Failed to find control in all controls map: controlId=%s",
                    control_id,
                )
                continue
            for category in control.get_attack_track_categories(track_name):
                categories.setdefault(category, []).append(control)
    return lookup


def attack_track_mock(data: AttackTrackStep) -> AttackTrack:
    """Build an attack track named "TestAttackTrack" around a root step."""
    return AttackTrack(
        metadata={"name": "TestAttackTrack"},
        spec=AttackTrackSpecification(version="1.0", data=data),
    )


class AttackTrackAllPathsHandler:
    """Finds all attack paths made of steps with failed controls.

    Building the handler loads the failed controls of every step from the
    lookup, storing them on the steps themselves.
    """

    def __init__(self, attack_track: AttackTrack, lookup: _ControlsLookup) -> None:
        self._attack_track = attack_track
        self._in_degree_zero: dict[str, bool] = {}
        self._out_degree_zero: dict[str, bool] = {}
        self._adjacency: dict[str, list[AttackTrackStep]] = {}
        self._visited: set[str] = set()

        track_name = attack_track.name
        for step in attack_track.iter_steps():
            self._in_degree_zero[step.name] = True
            self._out_degree_zero[step.name] = True
            step.controls = list(lookup.get_associated_controls(track_name, step.name))

    def _link(self, parent: AttackTrackStep, child: AttackTrackStep) -> None:
        if parent.is_part_of_attack_track_path() and child.is_part_of_attack_track_path():
            self._adjacency.setdefault(parent.name, []).append(child)
            self._in_degree_zero[child.name] = False
            self._out_degree_zero[parent.name] = False
        for sub in child.sub_steps:
            self._link(child, sub)

    def _collect(
        self,
        step: AttackTrackStep,
        path: list[AttackTrackStep],
        paths: list[list[AttackTrackStep]],
    ) -> None:
        path.append(step)
        self._visited.add(step.name)

        if self._out_degree_zero[step.name] and self._in_degree_zero[path[0].name]:
            paths.append(list(path))

        for nxt in self._adjacency.get(step.name, []):
            if nxt.is_part_of_attack_track_path() and nxt.name not in self._visited:
                self._collect(nxt, path, paths)

        path.pop()
        self._visited.discard(step.name)

    def calculate_all_paths(self) -> list[list[AttackTrackStep]]:
        """Return every path from a source step to a leaf step, in visit order."""
        self._adjacency = {}
        root = self._attack_track.data
        for sub in root.sub_steps:
            self._link(root, sub)

        paths: list[list[AttackTrackStep]] = []
        for step in self._attack_track.iter_steps():
            if not step.is_part_of_attack_track_path():
                continue
            if not self._in_degree_zero.get(step.name, False):
                continue
            self._collect(step, [], paths)
        return paths