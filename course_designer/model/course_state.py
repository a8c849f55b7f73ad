from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from course_designer.model.elements import CourseElement


@dataclass(frozen=True)
class CourseState:
    """Complete course-edit state used for unified undo/redo."""

    elements: Tuple[CourseElement, ...] = ()
    selected_id: Optional[str] = None
    background_file_name: Optional[str] = None


EMPTY_COURSE = CourseState()
