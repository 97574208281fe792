import pytest

from postureutils.comparator import Comparator
from postureutils.objects import new_object
from postureutils.workload import BaseObject

EMPTY_OBJ = '{"apiVersion": "v1", "kind":"Deployment", "metadata": {"name": "test"}}'
WITH_LABEL = (
    '{"apiVersion": "v1", "kind":"Deployment", "metadata": {"name": "test", '
    '"labels": {"myLabelOrAnnotation" : "static_test"}}}'
)
WITH_ANNOTATION = (
    '{"apiVersion": "v1", "kind":"Deployment", "metadata": {"name": "test", '
    '"annotations": {"myLabelOrAnnotation" : "static_test"}}}'
)


@pytest.fixture
def comparator():
    return Comparator()


def test_regex_compare_cluster(comparator):
    assert comparator.compare_cluster(".*minikube.*", "bez-minikube-25-10")
    assert comparator.compare_cluster("bez-minikube-25-10", "bez-minikube-25-10")
    assert not comparator.compare_cluster("minikube", "bez-minikube-25-10")
    assert not comparator.compare_cluster("bla", "bez-minikube-25-10")


def test_empty_cluster_designator_never_matches(comparator):
    assert comparator.compare_cluster("", "") is False


@pytest.mark.parametrize(
    "source, pattern, expected",
    [
        (EMPTY_OBJ, "static_test", False),
        (EMPTY_OBJ, "static_.*", False),
        (WITH_LABEL, "static_test", True),
        (WITH_LABEL, "static_.*", True),
        (WITH_ANNOTATION, "static_test", False),
    ],
)
def test_compare_labels(comparator, source, pattern, expected):
    workload = BaseObject.from_bytes(source)
    assert comparator.compare_labels(workload, {"myLabelOrAnnotation": pattern}) is expected


@pytest.mark.parametrize(
    "source, pattern, expected",
    [
        (EMPTY_OBJ, "static_test", False),
        (WITH_ANNOTATION, "static_test", True),
        (WITH_ANNOTATION, "static_.*", True),
        (WITH_LABEL, "static_test", False),
    ],
)
def test_compare_annotations(comparator, source, pattern, expected):
    workload = BaseObject.from_bytes(source)
    assert (
        comparator.compare_annotations(workload, {"myLabelOrAnnotation": pattern})
        is expected
    )


def test_labels_require_key_and_matching_value(comparator):
    workload = BaseObject.from_bytes(WITH_LABEL)
    assert comparator.compare_labels(workload, {"other": "static_test"}) is False
    assert comparator.compare_labels(workload, {"myLabelOrAnnotation": "dynamic"}) is False


def test_labels_ignored_for_non_workloads(comparator):
    subject = new_object({"name": "MySubject", "kind": "Subject", "relatedObjects": []})
    assert comparator.compare_labels(subject, {"a": "b"}) is True
    assert comparator.compare_annotations(subject, {"a": "b"}) is True


def test_compare_namespace_kind_name(comparator):
    workload = new_object(
        {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {"name": "nginx", "namespace": "default"},
        }
    )
    assert comparator.compare_namespace(workload, "def.*")
    assert not comparator.compare_namespace(workload, "kube-system")
    assert comparator.compare_kind(workload, "Deployment")
    assert not comparator.compare_kind(workload, "deployment")
    assert comparator.compare_name(workload, "ngi.*")
    assert not comparator.compare_name(workload, "ngi")


def test_namespace_object_compares_its_name(comparator):
    namespace = new_object(
        {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "prod"}}
    )
    assert comparator.compare_namespace(namespace, "prod")
    assert not comparator.compare_namespace(namespace, "")


def test_compare_path(comparator):
    local = new_object(
        {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {"name": "p"},
            "sourcePath": "/repo/pod.yaml",
        }
    )
    assert comparator.compare_path(local, "/repo/.*")
    assert not comparator.compare_path(local, "/other/.*")

    no_path = new_object({"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "p"}})
    assert comparator.compare_path(no_path, ".*") is False

    bare = new_object({"kind": "Pod", "sourcePath": "/repo/pod.yaml"})
    assert comparator.compare_path(bare, ".*") is False


def test_regex_compare_case_sensitivity(comparator):
    assert comparator.regex_compare_i("mit.*", "MITRE")
    assert not comparator.regex_compare("mit.*", "MITRE")
    assert comparator.regex_compare("MIT.*", "MITRE")


def test_regex_compare_is_anchored(comparator):
    assert not comparator.regex_compare("MIT.*", "2MITRE")
    assert not comparator.regex_compare("abc", "abc\n")


def test_invalid_pattern_never_matches(comparator):
    assert comparator.regex_compare("(", "(") is False
    assert comparator.regex_compare_i("[", "[") is False
    # a cached invalid pattern still does not match
    assert comparator.regex_compare("(", "(") is False