import logging

import pytest

from postureutils.attacktrack import (
    AttackTrack,
    AttackTrackAllPathsHandler,
    AttackTrackControlMock,
    AttackTrackControlsLookup,
    AttackTrackStep,
    attack_track_mock,
    new_attack_track_controls_lookup,
)


def _step(name, *subs):
    return AttackTrackStep(name=name, sub_steps=list(subs))


def _controls():
    return {
        "1": AttackTrackControlMock(control_id="1", tags=["security"], categories=["A"]),
        "2": AttackTrackControlMock(control_id="2", tags=["security"], categories=["A", "Z"]),
        "3": AttackTrackControlMock(control_id="3", tags=["security"], categories=["Z"]),
        "4": AttackTrackControlMock(control_id="4", tags=["security"], categories=["B"]),
        "5": AttackTrackControlMock(control_id="5", tags=["security"], categories=["C"]),
        "6": AttackTrackControlMock(control_id="6", tags=["security-impact"], categories=["D"]),
        "7": AttackTrackControlMock(control_id="7", tags=["security"], categories=["E"]),
        "8": AttackTrackControlMock(control_id="8", tags=["security-impact"], categories=["F"]),
    }


def _graph_track():
    return attack_track_mock(
        _step(
            "A",
            _step("C", _step("B"), _step("D"), _step("E", _step("G"))),
            _step("F"),
        )
    )


@pytest.mark.parametrize(
    "root, expected",
    [
        (_step("A", _step("B", _step("A"))), False),
        (_step("A", _step("B"), _step("B")), False),
        (_step("A", _step("B"), _step("C")), True),
        (_step("A", _step("C", _step("B"), _step("D"), _step("E", _step("D")))), False),
    ],
)
def test_is_valid(root, expected):
    assert attack_track_mock(root).is_valid() is expected


def test_iterator_order():
    track = attack_track_mock(
        _step("A", _step("C", _step("B"), _step("D"), _step("E")), _step("F"))
    )
    assert [s.name for s in track.iter_steps()] == ["A", "F", "C", "E", "D", "B"]


def test_calculate_all_paths():
    c = _controls()
    lookup = AttackTrackControlsLookup(
        {
            "TestAttackTrack": {
                "A": [c["1"], c["2"]],
                "F": [c["3"], c["4"]],
                "D": [c["5"]],
                "E": [c["6"]],
                "G": [c["7"], c["8"]],
            }
        }
    )
    handler = AttackTrackAllPathsHandler(_graph_track(), lookup)
    paths = handler.calculate_all_paths()
    assert [[s.name for s in p] for p in paths] == [["A", "F"], ["E", "G"], ["D"]]


def test_handler_loads_controls_on_steps():
    c = _controls()
    track = _graph_track()
    lookup = AttackTrackControlsLookup({"TestAttackTrack": {"A": [c["1"], c["2"]]}})
    AttackTrackAllPathsHandler(track, lookup)
    steps = {s.name: s for s in track.iter_steps()}
    assert steps["A"].controls == [c["1"], c["2"]]
    assert steps["A"].is_part_of_attack_track_path()
    assert steps["C"].controls == []
    assert not steps["C"].is_part_of_attack_track_path()


def test_new_attack_track_controls_lookup():
    c = _controls()
    result = new_attack_track_controls_lookup(
        [_graph_track()], ["1", "2", "3", "4", "5", "6", "7", "8"], c
    )
    expected = {
        "TestAttackTrack": {
            "A": [c["1"], c["2"]],
            "Z": [c["2"], c["3"]],
            "B": [c["4"]],
            "C": [c["5"]],
            "D": [c["6"]],
            "E": [c["7"]],
            "F": [c["8"]],
        }
    }
    assert dict(result) == expected


def test_lookup_skips_unknown_control(caplog):
    c = _controls()
    with caplog.at_level(logging.ERROR):
        result = new_attack_track_controls_lookup([_graph_track()], ["1", "missing"], c)
    assert result["TestAttackTrack"] == {"A": [c["1"]]}
    assert "missing" in caplog.text


def test_lookup_queries():
    c = _controls()
    lookup = AttackTrackControlsLookup({"TestAttackTrack": {"A": [c["1"]]}, "empty": {}})
    assert lookup.get_associated_controls("TestAttackTrack", "A") == [c["1"]]
    assert lookup.get_associated_controls("TestAttackTrack", "B") == []
    assert lookup.get_associated_controls("other", "A") == []
    assert lookup.has_associated_controls("TestAttackTrack") is True
    assert lookup.has_associated_controls("empty") is False
    assert lookup.has_associated_controls("other") is False


def test_mock_control_answers():
    control = AttackTrackControlMock(
        control_id="7", categories=["E"], tags=["security"], base_score=4.0, severity=2
    )
    assert control.get_control_id() == "7"
    assert control.get_attack_track_categories("anything") == ["E"]
    assert control.get_control_type_tags() == ["security"]
    assert control.get_score() == 4.0
    assert control.get_severity() == 2


def test_attack_track_mock_fields():
    track = attack_track_mock(_step("A"))
    assert track.name == "TestAttackTrack"
    assert track.version == "1.0"
    assert track.data.name == "A"


def test_from_dict_round_trip():
    document = {
        "apiVersion": "regolibrary.kubescape/v1alpha1",
        "kind": "AttackTrack",
        "metadata": {"name": "container"},
        "spec": {
            "version": "1.0",
            "description": "d",
            "data": {
                "name": "Initial access",
                "subSteps": [{"name": "Execution", "description": "run"}],
            },
        },
    }
    track = AttackTrack.from_dict(document)
    assert track.name == "container"
    assert track.description == "d"
    assert [s.name for s in track.iter_steps()] == ["Initial access", "Execution"]
    assert track.to_dict() == document


def test_step_from_dict_without_sub_steps():
    step = AttackTrackStep.from_dict({"name": "X"})
    assert step == AttackTrackStep(name="X")
    assert step.to_dict() == {"name": "X"}