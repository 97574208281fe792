import json

import pytest

from postureutils.hostsensor import HostSensorDataEnvelope
from postureutils.localworkload import LocalWorkload
from postureutils.objects import (
    RELATED_OBJECTS_KEY,
    RegoResponseVectorObject,
    get_object_type,
    is_type_rego_response_vector,
    list_map_to_meta,
    new_object,
)
from postureutils.workload import BaseObject, ListWorkloads, ObjectType, WorkloadObject

SUBJECT = {
    "namespace": "",
    "group": "",
    "name": "MySubject",
    "kind": "Subject",
    "relatedObjects": None,
    "failedCreteria": "RBAC",
}

ROLE = {
    "apiVersion": "rbac.authorization.k8s.io/v1",
    "kind": "Role",
    "metadata": {"name": "r", "namespace": "ns"},
}


def test_is_type_rego_response_vector():
    assert is_type_rego_response_vector(SUBJECT)
    assert not is_type_rego_response_vector({"kind": "Subject", "name": "x"})
    assert not is_type_rego_response_vector(None)


@pytest.mark.parametrize(
    "obj, expected",
    [
        (SUBJECT, ObjectType.REGO_RESPONSE),
        ({"apiVersion": "hostdata.kubescape.cloud/v1beta0", "kind": "K"}, ObjectType.HOST_SENSOR),
        ({"kind": "b", "sourcePath": "/f"}, ObjectType.LOCAL_WORKLOAD),
        (ROLE, ObjectType.WORKLOAD),
        ({"items": []}, ObjectType.LIST_WORKLOADS),
        ({"kind": "b"}, ObjectType.BASE_OBJECT),
        ({"foo": "bar"}, ObjectType.UNKNOWN),
    ],
)
def test_get_object_type(obj, expected):
    assert get_object_type(obj) == expected


def test_new_object_wraps_in_matching_class():
    assert isinstance(new_object(SUBJECT), RegoResponseVectorObject)
    assert isinstance(
        new_object({"apiVersion": "hostdata.kubescape.cloud/v1beta0", "kind": "K"}),
        HostSensorDataEnvelope,
    )
    assert isinstance(new_object({"kind": "b", "sourcePath": "/f"}), LocalWorkload)
    assert isinstance(new_object(ROLE), WorkloadObject)
    assert isinstance(new_object({"items": []}), ListWorkloads)
    assert type(new_object({"kind": "b"})) is BaseObject
    assert new_object(None) is None
    assert new_object({"foo": "bar"}) is None


def test_list_map_to_meta_drops_unknown():
    result = list_map_to_meta([ROLE, None, {"foo": "bar"}, SUBJECT])
    assert [item.object_type for item in result] == [
        ObjectType.WORKLOAD,
        ObjectType.REGO_RESPONSE,
    ]


def test_external_object_id():
    assert RegoResponseVectorObject(dict(SUBJECT)).get_id() == "//Subject/MySubject"


def test_id_includes_sorted_related_ids():
    obj = RegoResponseVectorObject(dict(SUBJECT))
    obj.set_related_objects([ROLE, {"foo": "bar"}])
    assert len(obj.related_objects()) == 1
    assert obj.get_id() == "//Subject/MySubject/rbac.authorization.k8s.io/v1/ns/Role/r"


def test_api_version_falls_back_to_api_group():
    obj = RegoResponseVectorObject({"apiGroup": "rbac.authorization.k8s.io"})
    assert obj.api_version == "rbac.authorization.k8s.io"
    obj.api_version = "v1"
    assert obj.api_version == "v1"


def test_setters_write_top_level_fields():
    obj = RegoResponseVectorObject({})
    obj.name = "n"
    obj.namespace = "ns"
    obj.kind = "Subject"
    assert obj.object == {"name": "n", "namespace": "ns", "kind": "Subject"}


def test_from_bytes_round_trip():
    obj = RegoResponseVectorObject.from_bytes(json.dumps(SUBJECT))
    assert obj.object == SUBJECT
    assert json.loads(str(obj)) == SUBJECT
    assert RegoResponseVectorObject.from_bytes(None).object == {}


def test_from_bytes_invalid_json():
    with pytest.raises(ValueError):
        RegoResponseVectorObject.from_bytes(b"{broken")


def test_related_objects_missing_key():
    obj = RegoResponseVectorObject({"kind": "Subject", "name": "x"})
    assert obj.related_objects() == []
    obj.set_related_objects([ROLE])
    assert obj.object[RELATED_OBJECTS_KEY] == [ROLE]