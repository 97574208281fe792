import json

import pytest

from postureutils.workload import (
    BaseObject,
    ListWorkloads,
    ObjectType,
    WorkloadObject,
    inspect_map,
    is_base_object,
    is_type_list_workloads,
    is_type_workload,
    join_group_version,
    split_api_version,
)

DEPLOYMENT = {
    "apiVersion": "apps/v1",
    "kind": "Deployment",
    "metadata": {
        "name": "demoservice-server",
        "namespace": "default",
        "labels": {"app": "demo"},
    },
}


def test_inspect_map_nested_and_missing():
    assert inspect_map(DEPLOYMENT, "metadata", "name") == "demoservice-server"
    assert inspect_map(DEPLOYMENT, "metadata", "missing") is None
    assert inspect_map(DEPLOYMENT, "kind", "deeper") is None
    assert inspect_map(DEPLOYMENT) == DEPLOYMENT


def test_type_checks():
    assert is_type_workload(DEPLOYMENT)
    assert not is_type_workload({"kind": "b"})
    assert not is_type_workload(None)
    assert is_base_object({"kind": "b"})
    assert not is_base_object({"name": "x"})
    assert is_type_list_workloads({"items": []})
    assert not is_type_list_workloads({"items": "x"})


def test_split_and_join_api_version():
    assert split_api_version("apps/v1") == ("apps", "v1")
    assert split_api_version("v1") == ("", "v1")
    assert join_group_version(*split_api_version("apps/v1")) == "apps/v1"


def test_base_object_id():
    obj = BaseObject(json.loads(json.dumps(DEPLOYMENT)))
    assert obj.get_id() == "apps/v1/default/Deployment/demoservice-server"
    assert obj.object_type == ObjectType.BASE_OBJECT


def test_from_bytes_round_trip():
    obj = BaseObject.from_bytes(json.dumps(DEPLOYMENT).encode())
    assert obj.object == DEPLOYMENT
    assert json.loads(str(obj)) == DEPLOYMENT


def test_from_bytes_errors():
    with pytest.raises(ValueError):
        BaseObject.from_bytes(b"{not json")
    with pytest.raises(ValueError):
        BaseObject.from_bytes(b"[1, 2]")


def test_setters_create_metadata():
    obj = BaseObject({"kind": "Pod"})
    obj.name = "web"
    obj.namespace = "prod"
    obj.api_version = "v1"
    assert obj.object["metadata"] == {"name": "web", "namespace": "prod"}
    assert obj.name == "web"
    assert obj.api_version == "v1"


def test_workload_labels_and_annotations():
    obj = WorkloadObject(json.loads(json.dumps(DEPLOYMENT)))
    assert obj.labels == {"app": "demo"}
    assert obj.annotations == {}
    obj.annotations = {"a": "b"}
    assert obj.object["metadata"]["annotations"] == {"a": "b"}


def test_list_workloads_id_is_sorted_item_ids():
    second = {"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "p"}}
    lst = ListWorkloads({"items": [DEPLOYMENT, second, "junk"]})
    assert len(lst.items) == 2
    ids = lst.get_id().split("/")
    assert lst.get_id() == "/".join(
        sorted([BaseObject(DEPLOYMENT).get_id(), BaseObject(second).get_id()])
    )
    assert "demoservice-server" in ids