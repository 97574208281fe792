import copy

import pytest

from postureutils.designators import ExceptionAction, PostureExceptionPolicy
from postureutils.objects import new_object
from postureutils.results import (
    STATUS_FAILED,
    STATUS_PASSED,
    STATUS_WARNING,
    AlertObject,
    ResourcesIDs,
    RuleReport,
    RuleResponse,
    percentage,
    remove_response,
    string_in_slice,
)

DEPLOYMENT = {
    "apiVersion": "apps/v1",
    "kind": "Deployment",
    "metadata": {"name": "demoservice-server", "namespace": "default", "uid": "1"},
    "spec": {"replicas": 1},
}
POD = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {"name": "pod-a", "namespace": "default"},
}
SUBJECT = {"name": "MySubject", "kind": "Subject", "relatedObjects": None}


def alert_only():
    return PostureExceptionPolicy(actions=[ExceptionAction.ALERT_ONLY])


def disable():
    return PostureExceptionPolicy(actions=[ExceptionAction.DISABLE])


def response(objects, exception=None, external=None):
    return RuleResponse(
        alert_object=AlertObject(
            k8s_api_objects=copy.deepcopy(objects), external_objects=external
        ),
        exception=exception,
    )


def test_response_without_exception_fails():
    r = response([DEPLOYMENT], external=dict(SUBJECT))
    assert r.failed() is True
    assert r.warning() is False
    assert r.passed() is False
    assert r.get_status() == STATUS_FAILED
    assert r.failed_resources() == [DEPLOYMENT, SUBJECT]
    assert r.warning_resources() == []


def test_alert_only_exception_is_warning():
    r = response([DEPLOYMENT], exception=alert_only())
    assert r.warning() is True
    assert r.failed() is False
    assert r.get_status() == STATUS_WARNING
    assert r.warning_resources() == [DEPLOYMENT]
    assert r.failed_resources() == []


def test_disable_exception_is_neither_failed_nor_warning():
    r = response([DEPLOYMENT], exception=disable())
    assert r.failed() is False
    assert r.warning() is False
    assert r.get_status() == STATUS_FAILED
    assert r.failed_resources() == []
    assert r.warning_resources() == []


def test_rule_report_without_responses_passes():
    report = RuleReport(name="rule")
    assert report.passed() is True
    assert report.warning() is False
    assert report.failed() is False
    assert report.get_status() == STATUS_PASSED


def test_rule_report_status_from_responses():
    warned = RuleReport(rule_responses=[response([POD], exception=alert_only())])
    assert warned.warning() is True
    assert warned.failed() is False
    assert warned.get_status() == STATUS_WARNING

    mixed = RuleReport(
        rule_responses=[response([POD], exception=alert_only()), response([DEPLOYMENT])]
    )
    assert mixed.failed() is True
    assert mixed.warning() is False
    assert mixed.get_status() == STATUS_FAILED


def test_list_resources_ids_keeps_worst_status():
    deployment_id = new_object(copy.deepcopy(DEPLOYMENT)).get_id()
    pod_id = new_object(copy.deepcopy(POD)).get_id()
    assert deployment_id == "apps/v1/default/Deployment/demoservice-server"

    report = RuleReport(
        rule_responses=[
            response([DEPLOYMENT]),
            response([DEPLOYMENT, POD], exception=alert_only()),
        ],
        list_input_kinds=[deployment_id, pod_id, "other-id"],
    )
    ids = report.list_resources_ids()
    assert ids.failed_resources == [deployment_id]
    assert ids.warning_resources == [pod_id]
    assert ids.passed_resources == ["other-id"]
    assert ids.all_resources() == [deployment_id, pod_id, "other-id"]

    report.set_resources_counters()
    assert report.counters.total_resources == len(ids.all_resources())
    assert report.counters.failed_resources == 1
    assert report.counters.warning_resources == 1


def test_resources_ids_trims_and_merges():
    ids = ResourcesIDs(failed=["a", "a", "b"], warning=["b", "c"], passed=["a", "c", "d"])
    assert ids.failed_resources == ["a", "b"]
    assert ids.warning_resources == ["c"]
    assert ids.passed_resources == ["d"]

    ids.merge(ResourcesIDs(failed=["d"], warning=["e", "c"], passed=["f", "b"]))
    assert ids.failed_resources == ["a", "b", "d"]
    assert ids.warning_resources == ["c", "e"]
    assert ids.passed_resources == ["f"]
    all_ids = ids.all_resources()
    assert len(all_ids) == len(set(all_ids))


def test_remove_data_keeps_only_requested_fields():
    report = RuleReport(rule_responses=[response([DEPLOYMENT])])
    report.remove_data(["kind", "metadata"], ["name"])
    obj = report.rule_responses[0].alert_object.k8s_api_objects[0]
    assert obj == {"kind": "Deployment", "metadata": {"name": "demoservice-server"}}


def test_remove_data_drops_metadata_when_not_kept():
    r = response([DEPLOYMENT])
    r.remove_data(["kind"], ["name"])
    assert r.alert_object.k8s_api_objects == [{"kind": "Deployment"}]


def test_string_in_slice():
    assert string_in_slice(["a", "b"], "b") is True
    assert string_in_slice(["a", "b"], "c") is False
    assert string_in_slice([], "a") is False


def test_remove_response():
    first, second, third = response([POD]), response([DEPLOYMENT]), response([])
    assert remove_response([first, second, third], 1) == [first, third]
    with pytest.raises(IndexError):
        remove_response([first], 3)


def test_percentage_edges():
    assert percentage(0, 0) == 100
    assert percentage(0, 5) == 0
    assert percentage(10, 0) == 100
    assert percentage(10, 10) == 0


def test_rule_report_dict_round_trip():
    report = RuleReport(
        name="rule",
        remediation="fix it",
        rule_responses=[
            response([DEPLOYMENT], external=dict(SUBJECT)),
            response([POD], exception=alert_only()),
        ],
        list_input_kinds=["x", "y"],
    )
    report.set_resources_counters()
    data = report.to_dict()
    assert data["listInputIDs"] == ["x", "y"]
    restored = RuleReport.from_dict(data)
    assert restored == report
    assert restored.rule_responses[1].warning() is True