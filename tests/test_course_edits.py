from __future__ import annotations

import math

import pytest

from course_designer.geometry_core import Point
from course_designer.model import course_edits
from course_designer.model.course_state import CourseState
from course_designer.model.elements import (
    AreaElement,
    AreaKind,
    ControlDescription,
    ControlElement,
    FinishElement,
    LegElement,
    LegStyle,
    StartElement,
    default_control_description,
    find_element,
)
from course_designer.model.invariants import validate_elements


def _control(element_id: str, number: int, x: float, y: float = 0.0) -> ControlElement:
    return ControlElement(
        id=element_id,
        center=Point(x, y),
        number=number,
        description=default_control_description(number),
    )


def _course(*elements) -> CourseState:
    return CourseState(elements=tuple(elements))


def test_add_control_numbers_sequentially_and_selects() -> None:
    state = CourseState()
    state = course_edits.add_control(state, Point(10, 10))
    state = course_edits.add_control(state, Point(20, 20))

    controls = [e for e in state.elements if isinstance(e, ControlElement)]
    assert [c.number for c in controls] == [1, 2]
    assert [c.description.A_number for c in controls] == ["1", "2"]
    assert state.selected_id == controls[-1].id


def test_delete_control_renumbers_remaining_controls() -> None:
    state = _course(_control("c1", 1, 0), _control("c2", 2, 10), _control("c3", 3, 20))

    result = course_edits.delete_element(state, "c2")

    remaining = {e.id: e for e in result.elements}
    assert set(remaining) == {"c1", "c3"}
    assert remaining["c1"].number == 1
    assert remaining["c3"].number == 2
    assert remaining["c3"].description.A_number == "2"
    validate_elements(result.elements)


def test_delete_point_symbol_removes_touching_legs() -> None:
    start = StartElement(id="s", center=Point(0, 0))
    state = _course(
        start,
        _control("c1", 1, 100),
        FinishElement(id="f", center=Point(0, 200)),
        LegElement(id="l1", from_id="s", to_id="c1"),
        LegElement(id="l2", from_id="c1", to_id="f"),
    )
    state = course_edits.add_leg(state, "s", "f")

    result = course_edits.delete_element(state, "c1")

    assert not any(isinstance(e, LegElement) and "c1" in (e.from_id, e.to_id) for e in result.elements)
    assert find_element(result.elements, "l1") is None
    assert find_element(result.elements, "l2") is None
    # Start now points at the finish, its only remaining neighbour.
    refreshed = find_element(result.elements, "s")
    assert refreshed.rotation_angle == pytest.approx(math.pi)
    validate_elements(result.elements)


def test_delete_leg_refreshes_start_rotation() -> None:
    state = _course(StartElement(id="s", center=Point(0, 0)), _control("c1", 1, 0, 100))
    state = course_edits.add_leg(state, "s", "c1")
    leg = next(e for e in state.elements if isinstance(e, LegElement))
    assert find_element(state.elements, "s").rotation_angle == pytest.approx(math.pi)

    result = course_edits.delete_element(state, leg.id)

    assert find_element(result.elements, "s").rotation_angle == 0.0


def test_delete_clears_selection_of_deleted_element() -> None:
    state = CourseState(elements=(_control("c1", 1, 0),), selected_id="c1")

    result = course_edits.delete_element(state, "c1")

    assert result.elements == ()
    assert result.selected_id is None


def test_delete_unknown_id_returns_same_state() -> None:
    state = _course(_control("c1", 1, 0))
    assert course_edits.delete_element(state, "missing") is state


def test_add_leg_rejects_self_leg_and_unknown_endpoints() -> None:
    state = _course(_control("c1", 1, 0), AreaElement(id="a", points=(Point(0, 0), Point(1, 0), Point(0, 1))))

    assert course_edits.add_leg(state, "c1", "c1") is state
    assert course_edits.add_leg(state, "c1", "missing") is state
    assert course_edits.add_leg(state, "c1", "a") is state


def test_add_leg_points_start_at_control() -> None:
    state = _course(StartElement(id="s", center=Point(0, 0)), _control("c1", 1, 100, 0))

    result = course_edits.add_leg(state, "s", "c1", LegStyle.DASHED)

    leg = next(e for e in result.elements if isinstance(e, LegElement))
    assert leg.style is LegStyle.DASHED
    assert find_element(result.elements, "s").rotation_angle == pytest.approx(math.pi / 2)
    validate_elements(result.elements)


def test_moving_start_or_its_target_reorients_start() -> None:
    state = _course(StartElement(id="s", center=Point(0, 0)), _control("c1", 1, 100, 0))
    state = course_edits.add_leg(state, "s", "c1")

    moved_control = course_edits.move_element(state, "c1", Point(0, 100))
    assert find_element(moved_control.elements, "s").rotation_angle == pytest.approx(math.pi)

    moved_start = course_edits.move_element(state, "s", Point(200, 0))
    assert find_element(moved_start.elements, "s").rotation_angle == pytest.approx(1.5 * math.pi)
    validate_elements(moved_start.elements)


def test_move_area_replaces_points() -> None:
    area = AreaElement(id="a", points=(Point(0, 0), Point(10, 0), Point(0, 10)), kind=AreaKind.CORRIDOR)
    state = _course(area)

    result = course_edits.translate_element(state, "a", area.points, 5, 5)

    assert find_element(result.elements, "a").points == (Point(5, 5), Point(15, 5), Point(5, 15))
    assert course_edits.move_element(state, "a", Point(1, 1)) is state


def test_update_description_keeps_number_column() -> None:
    state = _course(_control("c1", 1, 0))

    result = course_edits.update_description(
        state, "c1", ControlDescription(A_number="99", B_code="31", C_whichFeature="N")
    )

    description = find_element(result.elements, "c1").description
    assert description.A_number == "1"
    assert description.B_code == "31"
    assert description.C_whichFeature == "N"


def test_set_leg_style_and_select() -> None:
    state = _course(_control("c1", 1, 0), _control("c2", 2, 50))
    state = course_edits.add_leg(state, "c1", "c2")
    leg = next(e for e in state.elements if isinstance(e, LegElement))

    styled = course_edits.set_leg_style(state, leg.id, LegStyle.UNCROSSABLE)
    assert find_element(styled.elements, leg.id).style is LegStyle.UNCROSSABLE
    assert course_edits.set_leg_style(styled, leg.id, LegStyle.UNCROSSABLE) is styled

    assert course_edits.select(state, "c2").selected_id == "c2"
    assert course_edits.select(state, "missing").selected_id is None


def test_edits_never_mutate_input_state() -> None:
    state = _course(_control("c1", 1, 0), _control("c2", 2, 10))
    before = state.elements

    course_edits.delete_element(state, "c1")
    course_edits.move_element(state, "c2", Point(5, 5))

    assert state.elements is before
    assert find_element(state.elements, "c2").number == 2
