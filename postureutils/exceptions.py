"""Applying exception policies to rule, control and framework reports."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from postureutils.comparator import Comparator
from postureutils.designators import (
    AttributesDesignators,
    DesignatorCache,
    PortalDesignator,
    PostureExceptionPolicy,
    PosturePolicy,
)
from postureutils.objects import Metadata, new_object
from postureutils.reports import ControlReport, FrameworkReport
from postureutils.results import AlertObject, RuleReport, RuleResponse


def _alert_object_to_workloads(alert_object: AlertObject) -> list[Metadata]:
    workloads = [
        wrapped
        for wrapped in (new_object(obj) for obj in alert_object.k8s_api_objects)
        if wrapped is not None
    ]
    if alert_object.external_objects is not None:
        wrapped = new_object(alert_object.external_objects)
        if wrapped is not None:
            workloads.append(wrapped)
    return workloads


class Processor(Comparator):
    """Matches exception policies with reports and the resources they cover."""

    def __init__(self) -> None:
        super().__init__()
        self._designator_cache = DesignatorCache()

    def set_framework_exceptions(
        self,
        framework_report: FrameworkReport,
        exception_policies: Sequence[PostureExceptionPolicy],
        cluster_name: str,
    ) -> None:
        """Attach matching exceptions to every response of a framework report."""
        for control_report in framework_report.control_reports:
            self.set_control_exceptions(
                control_report, exception_policies, cluster_name, framework_report.name
            )

    def set_control_exceptions(
        self,
        control_report: ControlReport,
        exception_policies: Sequence[PostureExceptionPolicy],
        cluster_name: str,
        framework_name: str,
    ) -> None:
        """Attach matching exceptions to every response of a control report."""
        for rule_report in control_report.rule_reports:
            self.set_rule_exceptions(
                rule_report,
                exception_policies,
                cluster_name,
                framework_name,
                control_report.name,
                control_report.control_id,
            )

    def set_rule_exceptions(
        self,
        rule_report: RuleReport,
        exception_policies: Sequence[PostureExceptionPolicy],
        cluster_name: str,
        framework_name: str,
        control_name: str,
        control_id: str,
    ) -> None:
        """Attach matching exceptions to every response of a rule report."""
        rule_exceptions = self.list_rule_exceptions(
            exception_policies, framework_name, control_name, control_id, rule_report.name
        )
        self.set_rule_responses_exceptions(
            rule_report.rule_responses, rule_exceptions, cluster_name
        )

    def set_rule_responses_exceptions(
        self,
        results: Iterable[RuleResponse],
        rule_exceptions: Sequence[PostureExceptionPolicy],
        cluster_name: str,
    ) -> None:
        """Set the exception and status of responses whose resources are excepted."""
        if not rule_exceptions:
            return
        for result in results:
            workloads = _alert_object_to_workloads(result.alert_object)
            if not workloads:
                continue
            for workload in workloads:
                exceptions = self.get_resource_exceptions(
                    rule_exceptions, workload, cluster_name
                )
                if exceptions:
                    result.exception = exceptions[0]
            result.rule_status = result.get_status()

    def list_rule_exceptions(
        self,
        exception_policies: Iterable[PostureExceptionPolicy],
        framework_name: str,
        control_name: str,
        control_id: str,
        rule_name: str,
    ) -> list[PostureExceptionPolicy]:
        """Return the exception policies that apply to the given rule."""
        return [
            policy
            for policy in exception_policies
            if self._rule_has_exceptions(
                policy, framework_name, control_name, control_id, rule_name
            )
        ]

    def _field_matches(self, wanted: str, actual: str) -> bool:
        if not wanted or not actual:
            return True
        return wanted.casefold() == actual.casefold() or self.regex_compare_i(
            wanted, actual
        )

    def _policy_matches(
        self,
        policy: PosturePolicy,
        framework_name: str,
        control_name: str,
        control_id: str,
        rule_name: str,
    ) -> bool:
        return (
            self._field_matches(policy.framework_name, framework_name)
            and self._field_matches(policy.control_name, control_name)
            and self._field_matches(policy.control_id, control_id)
            and self._field_matches(policy.rule_name, rule_name)
        )

    def _rule_has_exceptions(
        self,
        exception_policy: PostureExceptionPolicy,
        framework_name: str,
        control_name: str,
        control_id: str,
        rule_name: str,
    ) -> bool:
        if not exception_policy.posture_policies:
            return True  # an empty policy applies to everything
        for policy in exception_policy.posture_policies:
            if policy.is_empty():
                return True
            if self._policy_matches(
                policy, framework_name, control_name, control_id, rule_name
            ):
                return True
        return False

    def get_resource_exceptions(
        self,
        rule_exceptions: Iterable[PostureExceptionPolicy],
        workload: Any,
        cluster_name: str,
    ) -> list[PostureExceptionPolicy]:
        """Return the exceptions covering one resource, once per matching designator."""
        return [
            rule_exception
            for rule_exception in rule_exceptions
            for designator in rule_exception.resources
            if self._has_exception(cluster_name, designator, workload)
        ]

    def _digest(self, designator: PortalDesignator) -> AttributesDesignators:
        attributes = self._designator_cache.get(designator)
        if attributes is None:
            attributes = designator.digest()
            self._designator_cache.set(designator, attributes)
        return attributes

    def _has_exception(
        self, cluster_name: str, designator: PortalDesignator, workload: Any
    ) -> bool:
        attributes = self._digest(designator)
        if attributes.is_empty():
            return False
        if attributes.cluster and not self.compare_cluster(attributes.cluster, cluster_name):
            return False
        if attributes.namespace and not self.compare_namespace(workload, attributes.namespace):
            return False
        if attributes.kind and not self.compare_kind(workload, attributes.kind):
            return False
        if attributes.name and not self.compare_name(workload, attributes.name):
            return False
        if attributes.path and not self.compare_path(workload, attributes.path):
            return False
        if (
            attributes.labels
            and not self.compare_labels(workload, attributes.labels)
            and not self.compare_annotations(workload, attributes.labels)
        ):
            return False
        return True