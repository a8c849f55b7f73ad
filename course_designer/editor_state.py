# course_designer/editor_state.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Union

from course_designer.geometry_core import Point, distance
from course_designer.model import course_edits
from course_designer.model.course_state import CourseState
from course_designer.model.edit_manager import EditManager
from course_designer.model.elements import (
    AreaElement,
    AreaKind,
    ControlDescription,
    ControlElement,
    CourseElement,
    FinishElement,
    LegStyle,
    StartElement,
    find_element,
    is_point_symbol,
    new_area,
    new_finish,
    new_start,
)
from course_designer.model.history import FileHistory
from course_designer.preview import render, transform as view_transform
from course_designer.preview.hit_test import element_at_point, point_symbol_at
from course_designer.preview.symbol_scale import SymbolScales
from course_designer.preview.transform import ViewTransform
from course_designer.services import course_io
from course_designer.services.preview_background import BackgroundImage

logger = logging.getLogger(__name__)


class Tool(str, Enum):
    SELECT = "SELECT"
    PAN = "PAN"
    START = "START"
    CONTROL = "CONTROL"
    FINISH = "FINISH"
    LEG = "LEG"
    AREA_FORBIDDEN = "AREA_FORBIDDEN"
    AREA_CORRIDOR = "AREA_CORRIDOR"


AREA_TOOLS = {Tool.AREA_FORBIDDEN: AreaKind.FORBIDDEN, Tool.AREA_CORRIDOR: AreaKind.CORRIDOR}


@dataclass
class DragSession:
    element_id: str
    anchor: Point
    origin: Union[Point, tuple]
    before: CourseState
    moved: bool = False


@dataclass
class EditorState:
    """
    EditorState owns the edit history and the transient interaction state.
    All course edits flow through here.

    Typical flow:

      editor = EditorState()
      editor.set_tool(Tool.CONTROL)
      editor.pointer_down(Point(120, 80))     # commits a new control
      editor.set_tool(Tool.SELECT)
      editor.pointer_down(Point(121, 81))     # selects and starts a drag
      editor.pointer_move(Point(160, 90))     # amends the current snapshot
      editor.pointer_up()                     # commits one undo step
    """

    history: EditManager[CourseState] = field(
        default_factory=lambda: EditManager(CourseState())
    )
    scales: SymbolScales = field(default_factory=SymbolScales)
    view: ViewTransform = field(default_factory=ViewTransform)
    tool: Tool = Tool.SELECT

    leg_source_id: Optional[str] = None
    leg_style: LegStyle = LegStyle.SOLID
    drawing_points: List[Point] = field(default_factory=list)
    cursor: Optional[Point] = None
    measuring: bool = False
    reference_points: List[Point] = field(default_factory=list)
    settings: Optional[FileHistory] = field(default=None, repr=False)
    _drag: Optional[DragSession] = field(default=None, repr=False)
    _pan_anchor: Optional[Point] = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------
    @property
    def course(self) -> CourseState:
        return self.history.current

    @property
    def elements(self) -> Sequence[CourseElement]:
        return self.course.elements

    @property
    def selected(self) -> Optional[CourseElement]:
        return find_element(self.course.elements, self.course.selected_id)

    def _commit(self, state: CourseState) -> None:
        if state is self.course:
            return
        self.history.commit(state)

    def _amend(self, state: CourseState) -> None:
        if state is self.course:
            return
        self.history.amend(state)

    # ------------------------------------------------------------------
    # Tools and settings
    # ------------------------------------------------------------------
    def set_tool(self, tool: Tool) -> None:
        self.tool = tool
        self.leg_source_id = None
        self.drawing_points = []

    @classmethod
    def from_settings(cls, settings: FileHistory) -> "EditorState":
        """Editor whose symbol scales are read from and saved to ``settings``."""
        return cls(scales=settings.get_symbol_scales(), settings=settings)

    def set_scales(self, scales: SymbolScales) -> None:
        self.scales = scales
        if self.settings is not None:
            self.settings.set_symbol_scales(scales)

    # ------------------------------------------------------------------
    # Pointer input (map-space points)
    # ------------------------------------------------------------------
    def pointer_down(self, point: Point, screen_point: Optional[Point] = None) -> None:
        self.cursor = point
        if self.measuring:
            self._add_reference_point(point)
            return

        if self.tool is Tool.PAN:
            self._pan_anchor = screen_point or self.view.map_to_screen(point)
        elif self.tool is Tool.SELECT:
            self._begin_select(point)
        elif self.tool is Tool.START:
            self._commit(course_edits.add_element(self.course, new_start(point)))
        elif self.tool is Tool.CONTROL:
            self._commit(course_edits.add_control(self.course, point))
        elif self.tool is Tool.FINISH:
            self._commit(course_edits.add_element(self.course, new_finish(point)))
        elif self.tool is Tool.LEG:
            self._leg_click(point)
        elif self.tool in AREA_TOOLS:
            self.drawing_points.append(point)

    def pointer_move(self, point: Point, screen_point: Optional[Point] = None) -> None:
        self.cursor = point
        if self.tool is Tool.PAN and self._pan_anchor is not None:
            current = screen_point or self.view.map_to_screen(point)
            self.pan(current.x - self._pan_anchor.x, current.y - self._pan_anchor.y)
            self._pan_anchor = current
            return

        drag = self._drag
        if drag is None:
            return
        dx = point.x - drag.anchor.x
        dy = point.y - drag.anchor.y
        if dx == 0 and dy == 0 and not drag.moved:
            return
        drag.moved = True
        self._amend(course_edits.translate_element(self.course, drag.element_id, drag.origin, dx, dy))

    def pointer_up(self) -> None:
        self._pan_anchor = None
        drag = self._drag
        self._drag = None
        if drag is None or not drag.moved:
            return
        # Drag frames were amended over the pre-drag entry. Put it back and
        # record the finished move as a single undo step.
        logger.debug("Committing drag of %s", drag.element_id)
        final = self.course
        self.history.amend(drag.before)
        self.history.commit(final)

    def _begin_select(self, point: Point) -> None:
        hit = element_at_point(point, self.course.elements, self.view.scale, self.scales)
        selected_id = hit.id if hit is not None else None
        self._amend(course_edits.select(self.course, selected_id))
        if isinstance(hit, AreaElement):
            origin: Union[Point, tuple] = hit.points
        elif is_point_symbol(hit):
            origin = hit.center  # type: ignore[union-attr]
        else:
            # Legs follow their endpoints and cannot be dragged.
            self._drag = None
            return
        self._drag = DragSession(
            element_id=hit.id, anchor=point, origin=origin, before=self.course
        )

    def _leg_click(self, point: Point) -> None:
        hit = point_symbol_at(point, self.course.elements, self.view.scale, self.scales)
        if hit is None:
            self.leg_source_id = None
            return
        if self.leg_source_id is None:
            self.leg_source_id = hit.id
            return
        if hit.id == self.leg_source_id:
            return
        self._commit(course_edits.add_leg(self.course, self.leg_source_id, hit.id, self.leg_style))
        self.leg_source_id = None

    # ------------------------------------------------------------------
    # Keyboard actions
    # ------------------------------------------------------------------
    def finish_area(self) -> bool:
        kind = AREA_TOOLS.get(self.tool)
        if kind is None or len(self.drawing_points) < 3:
            return False
        self._commit(course_edits.add_element(self.course, new_area(self.drawing_points, kind)))
        self.drawing_points = []
        self.cursor = None
        return True

    def cancel(self) -> None:
        if self.measuring:
            self.measuring = False
            self.reference_points = []
            return
        self.drawing_points = []
        self.cursor = None
        self.leg_source_id = None
        self._amend(course_edits.select(self.course, None))

    def delete_selected(self) -> None:
        selected_id = self.course.selected_id
        if selected_id is None:
            return
        self._commit(course_edits.delete_element(self.course, selected_id))

    def undo(self) -> None:
        self._drag = None
        self.history.undo()

    def redo(self) -> None:
        self._drag = None
        self.history.redo()

    # ------------------------------------------------------------------
    # Property edits
    # ------------------------------------------------------------------
    def update_description(self, control_id: str, description: ControlDescription) -> None:
        self._commit(course_edits.update_description(self.course, control_id, description))

    def set_leg_style(self, leg_id: str, style: LegStyle) -> None:
        self._commit(course_edits.set_leg_style(self.course, leg_id, style))

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def pan(self, dx: float, dy: float) -> None:
        self.view = view_transform.pan(self.view, dx, dy)

    def zoom_at(self, factor: float, anchor: Point) -> None:
        self.view = view_transform.zoom(self.view, factor, anchor)

    def zoom_in(self, viewport_center: Point) -> None:
        self.zoom_at(view_transform.ZOOM_STEP, viewport_center)

    def zoom_out(self, viewport_center: Point) -> None:
        self.zoom_at(1 / view_transform.ZOOM_STEP, viewport_center)

    # ------------------------------------------------------------------
    # Course lifecycle
    # ------------------------------------------------------------------
    def load_course(self, course: CourseState) -> None:
        self._reset_interaction()
        self.history.reset(course)

    def open_course(self, path: Path) -> None:
        """Load a course file; a CourseLoadError leaves the current course untouched."""
        self.load_course(course_io.load_course(path))
        if self.settings is not None:
            self.settings.record_open(Path(path))

    def save_course(self, path: Path) -> None:
        course_io.save_course(self.course, path)
        if self.settings is not None:
            self.settings.record_save(Path(path))

    def new_course(self, background_file_name: Optional[str], keep_elements: bool = False) -> None:
        """Replace the history with a single snapshot for a new background."""
        elements = self.course.elements if keep_elements else ()
        self._reset_interaction()
        self.history.reset(
            CourseState(
                elements=elements,
                selected_id=None,
                background_file_name=background_file_name,
            )
        )

    def apply_background(self, background: BackgroundImage) -> None:
        """Elements carry over only when the background file name is unchanged."""
        keep = self.course.background_file_name == background.file_name
        logger.info("Applying background %s (keep elements: %s)", background.file_name, keep)
        self.new_course(background.file_name, keep_elements=keep)

    def _reset_interaction(self) -> None:
        self._drag = None
        self._pan_anchor = None
        self.leg_source_id = None
        self.drawing_points = []
        self.cursor = None

    # ------------------------------------------------------------------
    # Reference measurement (map scale calibration)
    # ------------------------------------------------------------------
    def begin_reference_measurement(self) -> None:
        self.measuring = True
        self.reference_points = []

    def _add_reference_point(self, point: Point) -> None:
        if len(self.reference_points) >= 2:
            self.reference_points = []
        self.reference_points.append(point)
        if len(self.reference_points) == 2:
            self.measuring = False

    def reference_length(self) -> Optional[float]:
        if len(self.reference_points) < 2:
            return None
        return distance(self.reference_points[0], self.reference_points[1])

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------
    def draw_ops(self) -> list[render.DrawOp]:
        zoom = self.view.scale
        ops = render.build_draw_ops(
            self.course.elements, zoom, self.scales, selected_id=self.course.selected_id
        )
        if self.tool in AREA_TOOLS:
            ops.extend(render.build_area_preview_ops(self.drawing_points, self.cursor, zoom))
        if self.measuring or self.reference_points:
            ops.extend(render.build_reference_line_ops(self.reference_points, self.cursor, zoom))
        return ops

    def leg_status_message(self) -> str:
        source = find_element(self.course.elements, self.leg_source_id)
        if source is None:
            return ""
        if isinstance(source, StartElement):
            label = "Start"
        elif isinstance(source, ControlElement):
            label = f"Control {source.number}"
        elif isinstance(source, FinishElement):
            label = "Finish"
        else:
            label = source.id[:6]
        return f"Drawing leg from {label}"
