# course_designer/geometry/orientation.py

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

from course_designer.model.elements import (
    ControlElement,
    CourseElement,
    FinishElement,
    StartElement,
    element_index,
    legs_touching,
)


def rotation_target(
    start: StartElement, elements: Sequence[CourseElement]
) -> Optional[Union[ControlElement, FinishElement]]:
    """
    Pick the element a start triangle should point at.

    The connected control with the lowest number wins; without connected
    controls the connected finish with the smallest id wins.
    """
    by_id = element_index(elements)
    controls: list[ControlElement] = []
    finishes: list[FinishElement] = []
    for leg in legs_touching(elements, start.id):
        other_id = leg.to_id if leg.from_id == start.id else leg.from_id
        other = by_id.get(other_id)
        if isinstance(other, ControlElement):
            controls.append(other)
        elif isinstance(other, FinishElement):
            finishes.append(other)

    if controls:
        return min(controls, key=lambda control: (control.number, control.id))
    if finishes:
        return min(finishes, key=lambda finish: finish.id)
    return None


def rotation_angle_for_start(start: StartElement, elements: Sequence[CourseElement]) -> float:
    target = rotation_target(start, elements)
    if target is None:
        return 0.0
    dx = target.center.x - start.center.x
    dy = target.center.y - start.center.y
    # +90 degrees so the apex (drawn at -y) faces the target.
    return math.atan2(dy, dx) + math.pi / 2
