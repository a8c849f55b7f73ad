from __future__ import annotations

import json
import math

import pytest

from course_designer.geometry_core import Point
from course_designer.model.course_state import CourseState
from course_designer.model.elements import (
    AreaElement,
    AreaKind,
    ControlElement,
    FinishElement,
    LegElement,
    LegStyle,
    StartElement,
    find_element,
)
from course_designer.model.invariants import validate_elements
from course_designer.services import course_io
from course_designer.services.course_io import CourseLoadError


def _sample_payload() -> dict:
    return {
        "elements": [
            {
                "id": "s",
                "type": "START",
                "center": {"x": 0, "y": 0},
                "rotationAngle": 123.0,
                "size": 40,
            },
            {
                "id": "c1",
                "type": "CONTROL",
                "center": {"x": 100, "y": 0},
                "number": 1,
                "radius": 20,
                "description": {"B_code": "31", "C_whichFeature": "N"},
            },
            {
                "id": "f",
                "type": "FINISH",
                "center": {"x": 200, "y": 0},
                "outerRadius": 20,
                "innerRadius": 14,
            },
            {"id": "l1", "type": "LEG", "fromElementId": "s", "toElementId": "c1"},
            {
                "id": "l2",
                "type": "LEG",
                "fromElementId": "c1",
                "toElementId": "f",
                "style": "uncrossable",
            },
            {
                "id": "a",
                "type": "AREA",
                "points": [{"x": 0, "y": 0}, {"x": 5, "y": 0}, {"x": 0, "y": 5}],
                "kind": "CORRIDOR",
            },
        ],
        "backgroundFileName": "forest.png",
    }


def test_load_drops_legacy_sizes_and_recomputes_rotation() -> None:
    course = course_io.course_from_dict(_sample_payload())

    start = find_element(course.elements, "s")
    assert isinstance(start, StartElement)
    assert start.rotation_angle == pytest.approx(math.pi / 2)
    assert not hasattr(start, "size")

    control = find_element(course.elements, "c1")
    assert control.description.A_number == "1"
    assert control.description.B_code == "31"

    assert find_element(course.elements, "l2").style is LegStyle.UNCROSSABLE
    area = find_element(course.elements, "a")
    assert isinstance(area, AreaElement)
    assert area.kind is AreaKind.CORRIDOR
    assert course.background_file_name == "forest.png"
    assert course.selected_id is None
    validate_elements(course.elements)


def test_load_accepts_map_file_name_alias() -> None:
    payload = _sample_payload()
    payload.pop("backgroundFileName")
    payload["mapFileName"] = "old.jpg"

    assert course_io.course_from_dict(payload).background_file_name == "old.jpg"


def test_load_drops_dangling_legs_and_renumbers_controls(caplog) -> None:
    payload = {
        "elements": [
            {"id": "c4", "type": "CONTROL", "center": {"x": 0, "y": 0}, "number": 4},
            {"id": "c2", "type": "CONTROL", "center": {"x": 1, "y": 0}, "number": 2},
            {"id": "l", "type": "LEG", "fromElementId": "c2", "toElementId": "ghost"},
        ]
    }

    course = course_io.course_from_dict(payload)

    assert find_element(course.elements, "l") is None
    assert find_element(course.elements, "c2").number == 1
    assert find_element(course.elements, "c4").number == 2
    assert "Dropping leg l" in caplog.text
    validate_elements(course.elements)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"elements": "nope"},
        {"elements": [{"type": "CONTROL"}]},
        {"elements": [{"id": "x", "type": "TREE"}]},
        {"elements": [{"id": "x", "type": "CONTROL", "center": {"x": 1}, "number": 1}]},
        {
            "elements": [
                {"id": "x", "type": "FINISH", "center": {"x": 1, "y": 1}},
                {"id": "x", "type": "FINISH", "center": {"x": 2, "y": 2}},
            ]
        },
    ],
)
def test_invalid_payloads_raise_course_load_error(payload) -> None:
    with pytest.raises(CourseLoadError):
        course_io.course_from_dict(payload)


def test_load_course_reports_unreadable_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CourseLoadError):
        course_io.load_course(path)


def test_save_then_load_preserves_course(tmp_path) -> None:
    course = course_io.course_from_dict(_sample_payload())
    path = tmp_path / "course.json"

    course_io.save_course(course, path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    reloaded = course_io.load_course(path)

    assert reloaded.elements == course.elements
    assert raw["backgroundFileName"] == "forest.png"
    leg = next(e for e in raw["elements"] if e["type"] == "LEG")
    assert {"fromElementId", "toElementId", "style"} <= set(leg)
    assert not any("size" in e or "radius" in e for e in raw["elements"])


def test_element_to_dict_uses_wire_names() -> None:
    control = ControlElement(id="c", center=Point(1, 2), number=3)
    data = course_io.element_to_dict(control)
    assert data["type"] == "CONTROL"
    assert data["center"] == {"x": 1, "y": 2}
    assert set(data["description"]) >= {"A_number", "H_specialInstructions"}

    leg = course_io.element_to_dict(LegElement(id="l", from_id="a", to_id="b"))
    assert leg == {"id": "l", "type": "LEG", "fromElementId": "a", "toElementId": "b", "style": "solid"}


@pytest.mark.parametrize(
    ("background", "expected"),
    [
        ("forest.png", "course_forest.json"),
        ("Map.PDF", "course_Map.json"),
        ("archive.tar", "course_archive.tar.json"),
        (None, "course_design.json"),
    ],
)
def test_default_course_file_name(background, expected) -> None:
    course = CourseState(elements=(FinishElement(id="f", center=Point(0, 0)),), background_file_name=background)
    assert course_io.default_course_file_name(course) == expected


def test_load_rewrites_number_column_that_disagrees_with_number() -> None:
    payload = {
        "elements": [
            {
                "id": "c",
                "type": "CONTROL",
                "center": {"x": 0, "y": 0},
                "number": 1,
                "description": {"A_number": "5", "B_code": "31"},
            },
            {
                "id": "d",
                "type": "CONTROL",
                "center": {"x": 9, "y": 9},
                "number": 2,
                "description": {"A_number": "7"},
            },
        ]
    }

    course = course_io.course_from_dict(payload)

    assert find_element(course.elements, "c").description.A_number == "1"
    assert find_element(course.elements, "c").description.B_code == "31"
    assert find_element(course.elements, "d").description.A_number == "2"
    validate_elements(course.elements)
