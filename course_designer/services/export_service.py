from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from course_designer.model.course_state import CourseState
from course_designer.model.elements import DESCRIPTION_FIELDS, CourseElement, controls_by_number
from course_designer.services.course_io import export_stem

logger = logging.getLogger(__name__)

DESCRIPTION_HEADERS = (
    "A_Num",
    "B_Code",
    "C_Feature",
    "D_Detail",
    "E_Dims",
    "F_Location",
    "G_Combo",
    "H_Special",
)


@dataclass(frozen=True)
class ExportResult:
    success: bool
    message: str
    path: Path | None = None


def descriptions_csv(elements: Sequence[CourseElement]) -> str:
    """Control descriptions as CSV text, one quoted row per control in number order."""
    buffer = io.StringIO()
    # Header labels are plain; every data field is quoted.
    buffer.write(",".join(DESCRIPTION_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for control in controls_by_number(elements):
        writer.writerow([getattr(control.description, name) or "" for name in DESCRIPTION_FIELDS])
    return buffer.getvalue()


def default_descriptions_file_name(course: CourseState) -> str:
    return f"control_descriptions_{export_stem(course.background_file_name, 'course')}.csv"


def export_descriptions(*, course: CourseState, csv_path: Path) -> ExportResult:
    if not controls_by_number(course.elements):
        return ExportResult(success=False, message="No controls to export.")

    try:
        csv_path.write_text(descriptions_csv(course.elements), encoding="utf-8")
    except OSError as exc:
        logger.exception("Failed to export control descriptions")
        return ExportResult(success=False, message=f"Control description export failed:\n{exc}")

    return ExportResult(
        success=True,
        message=f"Exported control descriptions to {csv_path}",
        path=csv_path,
    )
