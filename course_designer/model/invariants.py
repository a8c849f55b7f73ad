"""Invariant checks for course element collections."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from course_designer.geometry.orientation import rotation_angle_for_start
from course_designer.model.elements import (
    ControlElement,
    LegElement,
    StartElement,
    is_point_symbol,
)

if TYPE_CHECKING:
    from course_designer.model.elements import CourseElement


class InvariantError(ValueError):
    """Raised when a course violates a structural invariant."""


def assert_unique_ids(elements: Sequence["CourseElement"]) -> None:
    seen: set[str] = set()
    for element in elements:
        if element.id in seen:
            raise InvariantError(f"Duplicate element id detected: {element.id}.")
        seen.add(element.id)


def assert_legs_resolve(elements: Sequence["CourseElement"]) -> None:
    """Assert every leg endpoint names an existing start, control or finish."""

    symbols = {element.id for element in elements if is_point_symbol(element)}
    for element in elements:
        if not isinstance(element, LegElement):
            continue
        for endpoint in (element.from_id, element.to_id):
            if endpoint not in symbols:
                raise InvariantError(
                    f"Leg {element.id} references missing element {endpoint}."
                )
        if element.from_id == element.to_id:
            raise InvariantError(f"Leg {element.id} connects {element.from_id} to itself.")


def assert_dense_control_numbers(elements: Sequence["CourseElement"]) -> None:
    """Assert control numbers are exactly 1..N and A_number mirrors the number."""

    numbers = sorted(e.number for e in elements if isinstance(e, ControlElement))
    expected = list(range(1, len(numbers) + 1))
    if numbers != expected:
        raise InvariantError(f"Control numbers {numbers} are not the dense sequence {expected}.")
    for element in elements:
        if isinstance(element, ControlElement) and element.description.A_number != str(element.number):
            raise InvariantError(
                f"Control {element.id} description number {element.description.A_number!r} "
                f"does not match number {element.number}."
            )


def assert_start_rotations_current(elements: Sequence["CourseElement"]) -> None:
    for element in elements:
        if not isinstance(element, StartElement):
            continue
        expected = rotation_angle_for_start(element, elements)
        if not math.isclose(element.rotation_angle, expected, abs_tol=1e-9):
            raise InvariantError(
                f"Start {element.id} rotation {element.rotation_angle} is stale (expected {expected})."
            )


def validate_elements(elements: Sequence["CourseElement"]) -> None:
    """Run all course invariants."""

    assert_unique_ids(elements)
    assert_legs_resolve(elements)
    assert_dense_control_numbers(elements)
    assert_start_rotations_current(elements)
