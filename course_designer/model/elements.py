"""Course element types and accessors.

Elements are frozen dataclasses. Collections of elements are plain tuples and
are replaced wholesale on every edit, so snapshots held by the edit history
never change underneath it.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterable, Optional, Sequence, Tuple, Union

from course_designer.geometry_core import Point


class ElementType(str, Enum):
    START = "START"
    CONTROL = "CONTROL"
    FINISH = "FINISH"
    LEG = "LEG"
    AREA = "AREA"


class LegStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    UNCROSSABLE = "uncrossable"


class AreaKind(str, Enum):
    FORBIDDEN = "FORBIDDEN"
    CORRIDOR = "CORRIDOR"


@dataclass(frozen=True)
class ControlDescription:
    """The eight columns of an IOF control description row."""

    A_number: str = ""
    B_code: str = ""
    C_whichFeature: str = ""
    D_featureDetail: str = ""
    E_dimensions: str = ""
    F_location: str = ""
    G_betweenObjects: str = ""
    H_specialInstructions: str = ""


DESCRIPTION_FIELDS: Tuple[str, ...] = (
    "A_number",
    "B_code",
    "C_whichFeature",
    "D_featureDetail",
    "E_dimensions",
    "F_location",
    "G_betweenObjects",
    "H_specialInstructions",
)


def default_control_description(number: int) -> ControlDescription:
    return ControlDescription(A_number=str(number))


@dataclass(frozen=True)
class StartElement:
    id: str
    center: Point
    # Derived from the connected legs; see geometry.orientation.
    rotation_angle: float = 0.0
    type: ClassVar[ElementType] = ElementType.START


@dataclass(frozen=True)
class ControlElement:
    id: str
    center: Point
    number: int
    description: ControlDescription = field(default_factory=ControlDescription)
    type: ClassVar[ElementType] = ElementType.CONTROL


@dataclass(frozen=True)
class FinishElement:
    id: str
    center: Point
    type: ClassVar[ElementType] = ElementType.FINISH


@dataclass(frozen=True)
class LegElement:
    # from_id/to_id are looked up on demand; a leg never owns its endpoints.
    id: str
    from_id: str
    to_id: str
    style: LegStyle = LegStyle.SOLID
    type: ClassVar[ElementType] = ElementType.LEG


@dataclass(frozen=True)
class AreaElement:
    id: str
    points: Tuple[Point, ...]
    kind: AreaKind = AreaKind.FORBIDDEN
    type: ClassVar[ElementType] = ElementType.AREA


PointSymbol = Union[StartElement, ControlElement, FinishElement]
CourseElement = Union[StartElement, ControlElement, FinishElement, LegElement, AreaElement]

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"el_{int(time.time() * 1000)}_{suffix}"


# ----------------------------------------------------------------------
# Constructors
# ----------------------------------------------------------------------
def new_start(center: Point) -> StartElement:
    return StartElement(id=generate_id(), center=center, rotation_angle=0.0)


def new_control(center: Point, number: int) -> ControlElement:
    return ControlElement(
        id=generate_id(),
        center=center,
        number=number,
        description=default_control_description(number),
    )


def new_finish(center: Point) -> FinishElement:
    return FinishElement(id=generate_id(), center=center)


def new_leg(from_id: str, to_id: str, style: LegStyle = LegStyle.SOLID) -> LegElement:
    return LegElement(id=generate_id(), from_id=from_id, to_id=to_id, style=style)


def new_area(points: Iterable[Point], kind: AreaKind) -> AreaElement:
    return AreaElement(id=generate_id(), points=tuple(points), kind=kind)


# ----------------------------------------------------------------------
# Type guards
# ----------------------------------------------------------------------
def is_start(element: object) -> bool:
    return isinstance(element, StartElement)


def is_control(element: object) -> bool:
    return isinstance(element, ControlElement)


def is_finish(element: object) -> bool:
    return isinstance(element, FinishElement)


def is_leg(element: object) -> bool:
    return isinstance(element, LegElement)


def is_area(element: object) -> bool:
    return isinstance(element, AreaElement)


def is_point_symbol(element: object) -> bool:
    """True for elements that have a single ``center`` and can be leg endpoints."""
    return isinstance(element, (StartElement, ControlElement, FinishElement))


# ----------------------------------------------------------------------
# Lookup
# ----------------------------------------------------------------------
def find_element(
    elements: Sequence[CourseElement], element_id: Optional[str]
) -> Optional[CourseElement]:
    if element_id is None:
        return None
    for element in elements:
        if element.id == element_id:
            return element
    return None


def element_index(elements: Iterable[CourseElement]) -> Dict[str, CourseElement]:
    return {element.id: element for element in elements}


def controls_by_number(elements: Iterable[CourseElement]) -> list[ControlElement]:
    controls = [element for element in elements if isinstance(element, ControlElement)]
    controls.sort(key=lambda control: control.number)
    return controls


def legs_touching(elements: Iterable[CourseElement], element_id: str) -> list[LegElement]:
    return [
        element
        for element in elements
        if isinstance(element, LegElement)
        and (element.from_id == element_id or element.to_id == element_id)
    ]
