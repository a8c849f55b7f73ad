"""
Turn course elements into map-space draw primitives.

Nothing here touches a painting surface: the preview painter (screen) and the
document exporter (zoom 1.0) both consume the primitive lists built here.
Line widths and font sizes are in drawing units after zoom compensation, i.e.
``max(minimum_px, map_units / zoom)``, so symbol sizes follow the symbol
scales while strokes stay visible when zoomed out.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from course_designer.geometry_core import Point, adjusted_point_along_vector, rotate_about
from course_designer.model.elements import (
    AreaElement,
    AreaKind,
    ControlElement,
    CourseElement,
    ElementType,
    FinishElement,
    LegElement,
    LegStyle,
    StartElement,
    element_index,
)
from course_designer.preview.symbol_scale import (
    MIN_DASH_PX,
    MIN_FONT_PX,
    MIN_LINE_WIDTH_PX,
    MIN_UNCROSSABLE_WIDTH_PX,
    SymbolScales,
    screen_width,
)

RGBA = Tuple[int, int, int, int]

IOF_PURPLE: RGBA = (90, 0, 123, 179)
FORBIDDEN_FILL: RGBA = (255, 0, 0, 64)
CORRIDOR_FILL: RGBA = (255, 255, 255, 179)
AREA_STROKE: RGBA = (51, 51, 51, 179)
SELECTED_COLOR: RGBA = (0, 123, 255, 179)
TEMP_LINE_COLOR: RGBA = (0, 123, 255, 179)
REFERENCE_LINE_COLOR: RGBA = (0, 255, 0, 230)
REFERENCE_POINT_COLOR: RGBA = (0, 255, 0, 179)

TEMP_POINT_RADIUS_PX = 3.0
AREA_OUTLINE_MAP_UNITS = 0.5
AREA_OUTLINE_MIN_PX = 0.3
SELECTED_LEG_EXTRA_WIDTH = 0.5


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Point, ...]
    color: RGBA
    width: float
    closed: bool = False
    dash: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class Arc:
    center: Point
    radius: float
    color: RGBA
    width: float
    filled: bool = False
    start_angle: float = 0.0
    span: float = 2 * math.pi


@dataclass(frozen=True)
class FilledPolygon:
    points: Tuple[Point, ...]
    fill: RGBA
    stroke: RGBA
    width: float


@dataclass(frozen=True)
class Text:
    # ``position`` is the bottom-centre of the text box.
    position: Point
    text: str
    color: RGBA
    font_size: float


DrawOp = Union[Polyline, Arc, FilledPolygon, Text]


def start_triangle(start: StartElement, size: float) -> Tuple[Point, Point, Point]:
    """Vertices of an equilateral triangle centred on the start, apex rotated by its angle."""
    height = math.sqrt(3) / 2 * size
    local = (
        Point(0.0, -(2 / 3) * height),
        Point(-size / 2, height / 3),
        Point(size / 2, height / 3),
    )
    return tuple(rotate_about(p, start.center, start.rotation_angle) for p in local)  # type: ignore[return-value]


def leg_endpoints(
    leg: LegElement, by_id: dict, scales: SymbolScales
) -> Optional[Tuple[Point, Point]]:
    """Leg line trimmed to stop a fixed gap outside each endpoint symbol."""
    source = by_id.get(leg.from_id)
    target = by_id.get(leg.to_id)
    if not isinstance(source, (StartElement, ControlElement, FinishElement)):
        return None
    if not isinstance(target, (StartElement, ControlElement, FinishElement)):
        return None

    gap = scales.leg_gap
    start = adjusted_point_along_vector(
        source.center, target.center, scales.visual_radius(source.type) + gap
    )
    end = adjusted_point_along_vector(
        target.center, source.center, scales.visual_radius(target.type) + gap
    )
    return start, end


def _start_ops(start: StartElement, color: RGBA, zoom: float, scales: SymbolScales) -> list[DrawOp]:
    width = screen_width(scales.symbol_line_width(ElementType.START), zoom)
    return [Polyline(start_triangle(start, scales.start_size), color, width, closed=True)]


def _control_ops(
    control: ControlElement, color: RGBA, zoom: float, scales: SymbolScales
) -> list[DrawOp]:
    width = screen_width(scales.symbol_line_width(ElementType.CONTROL), zoom)
    radius = scales.control_radius
    label_y = control.center.y - radius - scales.control_label_gap
    return [
        Arc(control.center, radius, color, width),
        Text(
            Point(control.center.x, label_y),
            str(control.number),
            IOF_PURPLE,
            max(MIN_FONT_PX, scales.control_font_size / zoom) if zoom > 0 else MIN_FONT_PX,
        ),
    ]


def _finish_ops(finish: FinishElement, color: RGBA, zoom: float, scales: SymbolScales) -> list[DrawOp]:
    width = screen_width(scales.symbol_line_width(ElementType.FINISH), zoom)
    return [
        Arc(finish.center, scales.finish_outer_radius, color, width),
        Arc(finish.center, scales.finish_inner_radius, color, width),
    ]


def _leg_ops(
    leg: LegElement,
    by_id: dict,
    color: RGBA,
    selected: bool,
    zoom: float,
    scales: SymbolScales,
) -> list[DrawOp]:
    endpoints = leg_endpoints(leg, by_id, scales)
    if endpoints is None:
        return []

    base = scales.leg_line_width + (SELECTED_LEG_EXTRA_WIDTH if selected else 0.0)
    width = screen_width(base, zoom)
    dash = None
    if leg.style is LegStyle.DASHED:
        segment = screen_width(scales.leg_dash_segment, zoom, MIN_DASH_PX)
        dash = (segment, segment)
    elif leg.style is LegStyle.UNCROSSABLE:
        width = screen_width(scales.uncrossable_line_width, zoom, MIN_UNCROSSABLE_WIDTH_PX)
    return [Polyline(endpoints, color, width, dash=dash)]


def _area_ops(area: AreaElement, selected: bool, zoom: float) -> list[DrawOp]:
    if len(area.points) < 2:
        return []
    fill = FORBIDDEN_FILL if area.kind is AreaKind.FORBIDDEN else CORRIDOR_FILL
    stroke = SELECTED_COLOR if selected else AREA_STROKE
    width = screen_width(AREA_OUTLINE_MAP_UNITS, zoom, AREA_OUTLINE_MIN_PX)
    return [FilledPolygon(tuple(area.points), fill, stroke, width)]


def build_element_ops(
    element: CourseElement,
    elements: Sequence[CourseElement],
    zoom: float,
    scales: SymbolScales,
    selected: bool = False,
    by_id: Optional[dict] = None,
) -> list[DrawOp]:
    color = SELECTED_COLOR if selected else IOF_PURPLE
    if isinstance(element, StartElement):
        return _start_ops(element, color, zoom, scales)
    if isinstance(element, ControlElement):
        return _control_ops(element, color, zoom, scales)
    if isinstance(element, FinishElement):
        return _finish_ops(element, color, zoom, scales)
    if isinstance(element, LegElement):
        lookup = by_id if by_id is not None else element_index(elements)
        return _leg_ops(element, lookup, color, selected, zoom, scales)
    if isinstance(element, AreaElement):
        return _area_ops(element, selected, zoom)
    raise TypeError(f"Unsupported course element: {type(element).__name__}")


def build_draw_ops(
    elements: Sequence[CourseElement],
    zoom: float,
    scales: SymbolScales,
    selected_id: Optional[str] = None,
) -> list[DrawOp]:
    """Primitives for the whole course in collection (paint) order."""
    by_id = element_index(elements)
    ops: list[DrawOp] = []
    for element in elements:
        ops.extend(
            build_element_ops(
                element,
                elements,
                zoom,
                scales,
                selected=element.id == selected_id,
                by_id=by_id,
            )
        )
    return ops


def build_area_preview_ops(
    points: Sequence[Point], cursor: Optional[Point], zoom: float
) -> list[DrawOp]:
    """Rubber-band outline for an area that is still being drawn."""
    if not points:
        return []
    radius = TEMP_POINT_RADIUS_PX / zoom if zoom > 0 else TEMP_POINT_RADIUS_PX
    ops: list[DrawOp] = [
        Arc(p, radius, TEMP_LINE_COLOR, MIN_LINE_WIDTH_PX, filled=True) for p in points
    ]
    path = tuple(points) + ((cursor,) if cursor is not None else ())
    if len(path) >= 2:
        ops.append(Polyline(path, TEMP_LINE_COLOR, 1.0))
    return ops


def build_reference_line_ops(
    points: Sequence[Point], cursor: Optional[Point], zoom: float
) -> list[DrawOp]:
    """Dashed measuring line used to calibrate the map scale."""
    if zoom <= 0:
        zoom = 1.0
    ops: list[DrawOp] = []
    width = max(1.0, 2 / zoom)
    dash = (5 / zoom, 3 / zoom)
    if len(points) == 1 and cursor is not None:
        ops.append(Polyline((points[0], cursor), REFERENCE_LINE_COLOR, width, dash=dash))
    elif len(points) >= 2:
        ops.append(Polyline((points[0], points[1]), REFERENCE_LINE_COLOR, width, dash=dash))
    radius = (TEMP_POINT_RADIUS_PX + 1) / zoom
    ops.extend(Arc(p, radius, REFERENCE_POINT_COLOR, width, filled=True) for p in points[:2])
    return ops
