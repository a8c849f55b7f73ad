from __future__ import annotations

import math

import pytest

from course_designer.geometry.orientation import rotation_angle_for_start, rotation_target
from course_designer.geometry_core import Point
from course_designer.model.elements import (
    ControlElement,
    FinishElement,
    LegElement,
    StartElement,
    default_control_description,
)


def _control(element_id: str, number: int, center: Point) -> ControlElement:
    return ControlElement(
        id=element_id, center=center, number=number, description=default_control_description(number)
    )


START = StartElement(id="s", center=Point(0, 0))


def test_unconnected_start_has_zero_rotation() -> None:
    elements = (START, _control("c1", 1, Point(100, 0)))
    assert rotation_target(START, elements) is None
    assert rotation_angle_for_start(START, elements) == 0.0


def test_lowest_numbered_connected_control_wins_regardless_of_order() -> None:
    c2 = _control("c2", 2, Point(0, 100))
    c3 = _control("c3", 3, Point(100, 0))
    legs = (
        LegElement(id="l1", from_id="s", to_id="c3"),
        LegElement(id="l2", from_id="c2", to_id="s"),
    )

    forward = (START, c3, c2) + legs
    backward = tuple(reversed(forward))

    assert rotation_target(START, forward) == c2
    assert rotation_target(START, backward) == c2
    assert rotation_angle_for_start(START, forward) == pytest.approx(math.pi)


def test_control_beats_finish() -> None:
    finish = FinishElement(id="a_finish", center=Point(0, -100))
    control = _control("z", 5, Point(100, 0))
    elements = (
        START,
        finish,
        control,
        LegElement(id="l1", from_id="s", to_id="a_finish"),
        LegElement(id="l2", from_id="s", to_id="z"),
    )
    assert rotation_target(START, elements) == control


def test_finish_with_smallest_id_wins_without_controls() -> None:
    f_b = FinishElement(id="f_b", center=Point(100, 0))
    f_a = FinishElement(id="f_a", center=Point(0, -100))
    elements = (
        START,
        f_b,
        f_a,
        LegElement(id="l1", from_id="s", to_id="f_b"),
        LegElement(id="l2", from_id="f_a", to_id="s"),
    )

    assert rotation_target(START, elements) == f_a
    # Target straight up (negative y): the apex already points there.
    assert rotation_angle_for_start(START, elements) == pytest.approx(0.0)


def test_legs_between_other_elements_are_ignored() -> None:
    elements = (
        START,
        _control("c1", 1, Point(10, 10)),
        _control("c2", 2, Point(20, 20)),
        LegElement(id="l1", from_id="c1", to_id="c2"),
    )
    assert rotation_target(START, elements) is None
