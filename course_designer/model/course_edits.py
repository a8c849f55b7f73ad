"""
Course edits that keep cross-element references consistent.

Every function takes a ``CourseState`` and returns a new one; the input is
never modified. Rejected edits (unknown ids, a leg from a symbol to itself)
return the input state unchanged so callers can skip the history write.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional, Sequence, Tuple, Union

from course_designer.geometry.orientation import rotation_angle_for_start
from course_designer.geometry_core import Point
from course_designer.model.course_state import CourseState
from course_designer.model.elements import (
    AreaElement,
    ControlDescription,
    ControlElement,
    CourseElement,
    LegElement,
    LegStyle,
    StartElement,
    element_index,
    find_element,
    is_point_symbol,
    new_control,
    new_leg,
)

logger = logging.getLogger(__name__)

Elements = Tuple[CourseElement, ...]
Geometry = Union[Point, Sequence[Point]]


# ----------------------------------------------------------------------
# Derived state
# ----------------------------------------------------------------------
def refresh_start_rotations(
    elements: Sequence[CourseElement], start_ids: Optional[Iterable[str]] = None
) -> Elements:
    """Recompute ``rotation_angle`` for the given starts (all starts when ``None``)."""
    wanted = None if start_ids is None else set(start_ids)
    if wanted is not None and not wanted:
        return tuple(elements)
    return tuple(
        replace(element, rotation_angle=rotation_angle_for_start(element, elements))
        if isinstance(element, StartElement) and (wanted is None or element.id in wanted)
        else element
        for element in elements
    )


def renumber_controls(elements: Sequence[CourseElement]) -> Elements:
    """Renumber controls to 1..N keeping their relative order by former number."""
    controls = sorted(
        (element for element in elements if isinstance(element, ControlElement)),
        key=lambda control: control.number,
    )
    new_numbers = {control.id: idx + 1 for idx, control in enumerate(controls)}

    renumbered = []
    for element in elements:
        if isinstance(element, ControlElement):
            number = new_numbers[element.id]
            if number != element.number:
                element = replace(
                    element,
                    number=number,
                    description=replace(element.description, A_number=str(number)),
                )
        renumbered.append(element)
    return tuple(renumbered)


def _start_ids(elements: Sequence[CourseElement], ids: Iterable[str]) -> set[str]:
    by_id = element_index(elements)
    return {element_id for element_id in ids if isinstance(by_id.get(element_id), StartElement)}


# ----------------------------------------------------------------------
# Edits
# ----------------------------------------------------------------------
def add_element(state: CourseState, element: CourseElement) -> CourseState:
    """Append a freshly constructed element and select it."""
    return replace(state, elements=state.elements + (element,), selected_id=element.id)


def add_control(state: CourseState, center: Point) -> CourseState:
    number = sum(1 for element in state.elements if isinstance(element, ControlElement)) + 1
    return add_element(state, new_control(center, number))


def delete_element(state: CourseState, element_id: str) -> CourseState:
    deleted = find_element(state.elements, element_id)
    if deleted is None:
        return state

    previous = state.elements
    elements = [element for element in previous if element.id != element_id]
    dirty_candidates: set[str] = set()

    if isinstance(deleted, LegElement):
        dirty_candidates.update((deleted.from_id, deleted.to_id))
    elif is_point_symbol(deleted):
        removed_legs = set()
        for element in elements:
            if isinstance(element, LegElement) and element_id in (element.from_id, element.to_id):
                removed_legs.add(element.id)
                dirty_candidates.add(
                    element.to_id if element.from_id == element_id else element.from_id
                )
        elements = [element for element in elements if element.id not in removed_legs]
        logger.debug("Deleting %s removed %d dependent legs", element_id, len(removed_legs))

    # Look the endpoints up in the pre-deletion set; a deleted start cannot be dirty.
    dirty_starts = _start_ids(previous, dirty_candidates) - {element_id}

    result: Elements = tuple(elements)
    if isinstance(deleted, ControlElement):
        result = renumber_controls(result)
    result = refresh_start_rotations(result, dirty_starts)

    selected_id = None if state.selected_id == element_id else state.selected_id
    return replace(state, elements=result, selected_id=selected_id)


def add_leg(
    state: CourseState,
    from_id: str,
    to_id: str,
    style: LegStyle = LegStyle.SOLID,
) -> CourseState:
    if from_id == to_id:
        return state
    by_id = element_index(state.elements)
    if not (is_point_symbol(by_id.get(from_id)) and is_point_symbol(by_id.get(to_id))):
        logger.debug("Ignoring leg between unknown elements %s and %s", from_id, to_id)
        return state

    elements = state.elements + (new_leg(from_id, to_id, style),)
    elements = refresh_start_rotations(elements, _start_ids(elements, (from_id, to_id)))
    return replace(state, elements=elements)


def move_element(state: CourseState, element_id: str, geometry: Geometry) -> CourseState:
    """
    Move a point symbol to a new centre or replace an area's outline.

    Starts affected by the move (the moved start itself, or starts connected
    to a moved control or finish) are re-oriented in the same step, so a drag
    keeps the triangle pointing at its target.
    """
    target = find_element(state.elements, element_id)
    if target is None:
        return state

    if isinstance(target, AreaElement):
        if isinstance(geometry, Point):
            return state
        moved: CourseElement = replace(target, points=tuple(geometry))
    elif is_point_symbol(target) and isinstance(geometry, Point):
        moved = replace(target, center=geometry)
    else:
        return state

    elements = tuple(moved if element.id == element_id else element for element in state.elements)

    if isinstance(moved, StartElement):
        dirty = {element_id}
    elif is_point_symbol(moved):
        others = (
            leg.to_id if leg.from_id == element_id else leg.from_id
            for leg in elements
            if isinstance(leg, LegElement) and element_id in (leg.from_id, leg.to_id)
        )
        dirty = _start_ids(elements, others)
    else:
        dirty = set()
    return replace(state, elements=refresh_start_rotations(elements, dirty))


def translate_element(
    state: CourseState, element_id: str, origin: Geometry, dx: float, dy: float
) -> CourseState:
    """Move an element to ``origin`` shifted by (dx, dy); ``origin`` is its pre-drag geometry."""
    if isinstance(origin, Point):
        return move_element(state, element_id, origin.offset(dx, dy))
    return move_element(state, element_id, [p.offset(dx, dy) for p in origin])


def update_description(
    state: CourseState, control_id: str, description: ControlDescription
) -> CourseState:
    control = find_element(state.elements, control_id)
    if not isinstance(control, ControlElement):
        return state
    # The number column always mirrors the control number.
    description = replace(description, A_number=str(control.number))
    updated = replace(control, description=description)
    return replace(
        state,
        elements=tuple(updated if e.id == control_id else e for e in state.elements),
    )


def set_leg_style(state: CourseState, leg_id: str, style: LegStyle) -> CourseState:
    leg = find_element(state.elements, leg_id)
    if not isinstance(leg, LegElement) or leg.style == style:
        return state
    updated = replace(leg, style=style)
    return replace(
        state,
        elements=tuple(updated if e.id == leg_id else e for e in state.elements),
    )


def select(state: CourseState, element_id: Optional[str]) -> CourseState:
    if element_id is not None and find_element(state.elements, element_id) is None:
        element_id = None
    if element_id == state.selected_id:
        return state
    return replace(state, selected_id=element_id)
