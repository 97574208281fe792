from postureutils.localworkload import PATH_KEY, LocalWorkload, is_type_local_workload
from postureutils.workload import ObjectType


def make_workload():
    return LocalWorkload({"kind": "b", PATH_KEY: "/path/file"})


def test_get_path():
    assert make_workload().path == "/path/file"


def test_set_path():
    m = make_workload()
    m.path = "/bla"
    assert m.path == "/bla"


def test_get_kind():
    assert make_workload().kind == "b"


def test_get_id():
    assert make_workload().get_id() == "path=1336429864/api=///b/"


def test_id_with_empty_path():
    m = make_workload()
    m.path = ""
    assert m.get_id() == "path=2166136261/api=///b/"


def test_delete_path_entry():
    m = make_workload()
    assert m.object[PATH_KEY] == "/path/file"
    m.delete_path_entry()
    assert m.object.get(PATH_KEY) is None
    assert m.path == ""


def test_is_type_local_workload():
    assert is_type_local_workload({PATH_KEY: ""})
    assert not is_type_local_workload({"kind": "b"})
    assert not is_type_local_workload(None)
    assert make_workload().object_type == ObjectType.LOCAL_WORKLOAD