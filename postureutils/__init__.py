"""Data structures and helpers for Kubernetes security posture scan results, exceptions and attack tracks."""

__version__ = "0.1.0"