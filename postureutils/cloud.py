"""Cloud provider names and parsing of provider specific cluster names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CloudProviderName(str, Enum):
    """Supported cloud providers."""

    GCP = "GCP"
    GKE = "GKE"
    EKS = "EKS"
    AKS = "AKS"

    def __str__(self) -> str:
        return self.value

    def compare(self, other: str) -> bool:
        """Return True if other names this provider, ignoring case."""
        return other.upper() == self.value


class InvalidClusterNameError(ValueError):
    """Raised when a cluster name does not follow the provider's convention."""


@dataclass(frozen=True)
class GKEMetadata:
    """A GKE cluster name such as "gke_project_zone_my-cluster"."""

    name: str

    @property
    def provider(self) -> CloudProviderName:
        return CloudProviderName.GKE

    def parse(self) -> tuple[str, str]:
        """Return (prefix, suffix), e.g. ("gke_project_zone", "my-cluster")."""
        parts = self.name.split("_")
        if len(parts) < 4:
            raise InvalidClusterNameError(
                f"cluster name '{self.name}' is not a valid GCP cluster name"
            )
        return "_".join(parts[:3]), "_".join(parts[3:])


@dataclass(frozen=True)
class EKSMetadata:
    """An EKS cluster ARN such as "arn:aws:eks:region:id:cluster/my-cluster"."""

    name: str

    @property
    def provider(self) -> CloudProviderName:
        return CloudProviderName.EKS

    def parse(self) -> tuple[str, str]:
        """Return (prefix, suffix), the suffix being the bare cluster name."""
        parts = self.name.split(":")
        if len(parts) < 6:
            raise InvalidClusterNameError(
                f"cluster name '{self.name}' is not a valid EKS cluster name"
            )
        return ":".join(parts[:5]), ":".join(parts[5:]).replace("cluster/", "", 1)


@dataclass(frozen=True)
class AKSMetadata:
    """An AKS cluster name; it carries no prefix."""

    name: str

    @property
    def provider(self) -> CloudProviderName:
        return CloudProviderName.AKS

    def parse(self) -> tuple[str, str]:
        """Return ("", name)."""
        return "", self.name