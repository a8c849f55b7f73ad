"""Course file (JSON) reading and writing."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import fields
from pathlib import Path
from typing import Any, Optional

from course_designer.geometry_core import Point
from course_designer.model.course_edits import refresh_start_rotations, renumber_controls
from course_designer.model.course_state import CourseState
from course_designer.model.elements import (
    DESCRIPTION_FIELDS,
    AreaElement,
    AreaKind,
    ControlDescription,
    ControlElement,
    CourseElement,
    ElementType,
    FinishElement,
    LegElement,
    LegStyle,
    StartElement,
    default_control_description,
    is_point_symbol,
)
from course_designer.model.invariants import InvariantError, assert_unique_ids

logger = logging.getLogger(__name__)

# Per-element sizes were stored in older files; sizes now come from the symbol scales.
LEGACY_SIZE_KEYS = ("size", "radius", "outerRadius", "innerRadius")

_BACKGROUND_EXTENSION_RE = re.compile(r"\.(pdf|png|jpe?g|heic|gif|webp)$", re.IGNORECASE)


class CourseLoadError(ValueError):
    """Raised when a course file cannot be parsed into a course."""


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------
def _point(raw: Any) -> Point:
    if not isinstance(raw, dict):
        raise CourseLoadError(f"Expected a point object, got {raw!r}")
    try:
        return Point(float(raw["x"]), float(raw["y"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise CourseLoadError(f"Invalid point {raw!r}") from exc


def _description(raw: Any, number: int) -> ControlDescription:
    if not isinstance(raw, dict):
        return default_control_description(number)
    values = {name: str(raw.get(name, "") or "") for name in DESCRIPTION_FIELDS}
    # The number column always mirrors the control number.
    values["A_number"] = str(number)
    return ControlDescription(**values)


def element_from_dict(raw: Any) -> CourseElement:
    if not isinstance(raw, dict):
        raise CourseLoadError(f"Expected an element object, got {raw!r}")
    data = {key: value for key, value in raw.items() if key not in LEGACY_SIZE_KEYS}

    element_id = data.get("id")
    if not isinstance(element_id, str) or not element_id:
        raise CourseLoadError(f"Element without id: {raw!r}")

    try:
        kind = ElementType(data.get("type"))
    except ValueError as exc:
        raise CourseLoadError(f"Unknown element type {data.get('type')!r}") from exc

    try:
        if kind is ElementType.START:
            angle = data.get("rotationAngle")
            return StartElement(
                id=element_id,
                center=_point(data.get("center")),
                rotation_angle=float(angle) if angle is not None else 0.0,
            )
        if kind is ElementType.CONTROL:
            number = int(data["number"])
            return ControlElement(
                id=element_id,
                center=_point(data.get("center")),
                number=number,
                description=_description(data.get("description"), number),
            )
        if kind is ElementType.FINISH:
            return FinishElement(id=element_id, center=_point(data.get("center")))
        if kind is ElementType.LEG:
            return LegElement(
                id=element_id,
                from_id=str(data["fromElementId"]),
                to_id=str(data["toElementId"]),
                style=LegStyle(data.get("style", LegStyle.SOLID.value)),
            )
        if kind is ElementType.AREA:
            points = data.get("points")
            if not isinstance(points, list):
                raise CourseLoadError(f"Area {element_id} has no point list")
            return AreaElement(
                id=element_id,
                points=tuple(_point(p) for p in points),
                kind=AreaKind(data.get("kind", AreaKind.FORBIDDEN.value)),
            )
    except (KeyError, TypeError, ValueError) as exc:
        if isinstance(exc, CourseLoadError):
            raise
        raise CourseLoadError(f"Invalid {kind.value.lower()} element {element_id}: {exc}") from exc
    raise CourseLoadError(f"Unsupported element type {kind!r}")


def _drop_dangling_legs(elements: tuple[CourseElement, ...]) -> tuple[CourseElement, ...]:
    symbols = {e.id for e in elements if is_point_symbol(e)}
    kept = []
    for element in elements:
        if isinstance(element, LegElement) and not (
            element.from_id in symbols and element.to_id in symbols and element.from_id != element.to_id
        ):
            logger.warning("Dropping leg %s with unresolved endpoints", element.id)
            continue
        kept.append(element)
    return tuple(kept)


def course_from_dict(payload: Any) -> CourseState:
    """
    Build a fresh course snapshot from decoded JSON.

    Start rotations are recomputed against the complete element set, so a
    stored angle never survives loading.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
        raise CourseLoadError("Invalid course file format: missing element list.")

    elements = tuple(element_from_dict(raw) for raw in payload["elements"])
    try:
        assert_unique_ids(elements)
    except InvariantError as exc:
        raise CourseLoadError(str(exc)) from exc
    elements = renumber_controls(_drop_dangling_legs(elements))

    background = payload.get("backgroundFileName", payload.get("mapFileName"))
    return CourseState(
        elements=refresh_start_rotations(elements),
        selected_id=None,
        background_file_name=str(background) if background else None,
    )


def load_course(path: Path) -> CourseState:
    logger.info("Loading course file %s", path)
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CourseLoadError(f"Failed to read course file {path}: {exc}") from exc
    course = course_from_dict(payload)
    logger.debug("Loaded %d elements from %s", len(course.elements), path)
    return course


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------
def _point_dict(point: Point) -> dict[str, float]:
    return {"x": point.x, "y": point.y}


def element_to_dict(element: CourseElement) -> dict[str, Any]:
    base: dict[str, Any] = {"id": element.id, "type": element.type.value}
    if isinstance(element, StartElement):
        base.update(center=_point_dict(element.center), rotationAngle=element.rotation_angle)
    elif isinstance(element, ControlElement):
        base.update(
            center=_point_dict(element.center),
            number=element.number,
            description={f.name: getattr(element.description, f.name) for f in fields(element.description)},
        )
    elif isinstance(element, FinishElement):
        base.update(center=_point_dict(element.center))
    elif isinstance(element, LegElement):
        base.update(
            fromElementId=element.from_id,
            toElementId=element.to_id,
            style=element.style.value,
        )
    elif isinstance(element, AreaElement):
        base.update(points=[_point_dict(p) for p in element.points], kind=element.kind.value)
    else:
        raise TypeError(f"Unsupported course element: {type(element).__name__}")
    return base


def course_to_dict(course: CourseState) -> dict[str, Any]:
    payload: dict[str, Any] = {"elements": [element_to_dict(e) for e in course.elements]}
    if course.background_file_name:
        payload["backgroundFileName"] = course.background_file_name
    return payload


def save_course(course: CourseState, path: Path) -> None:
    Path(path).write_text(json.dumps(course_to_dict(course), indent=2), encoding="utf-8")
    logger.info("Saved %d elements to %s", len(course.elements), path)


def export_stem(background_file_name: Optional[str], fallback: str) -> str:
    """File-name stem derived from the background name with its image extension removed."""
    if not background_file_name:
        return fallback
    return _BACKGROUND_EXTENSION_RE.sub("", background_file_name) or fallback


def default_course_file_name(course: CourseState) -> str:
    return f"course_{export_stem(course.background_file_name, 'design')}.json"
