"""Command line entry point for the course designer."""

import argparse
import logging
import os
import sys
from pathlib import Path

from course_designer.model.elements import ElementType
from course_designer.model.history import FileHistory
from course_designer.services.course_io import CourseLoadError, load_course
from course_designer.services.course_length import (
    MapScaleSettings,
    ScaleMode,
    course_length_meters,
    format_course_length,
)
from course_designer.services.export_service import (
    default_descriptions_file_name,
    export_descriptions,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Orienteering course designer")
    parser.add_argument(
        "--log-level",
        default=os.getenv("COURSE_DESIGNER_LOG_LEVEL", "INFO"),
        help=(
            "Logging level (e.g. DEBUG, INFO). Defaults to COURSE_DESIGNER_LOG_LEVEL "
            "environment variable or INFO."
        ),
    )
    parser.add_argument(
        "--log-file",
        default=os.getenv("COURSE_DESIGNER_LOG_PATH"),
        help="Optional log file path. Logs go to stdout only when omitted.",
    )
    parser.add_argument(
        "--settings-file",
        type=Path,
        default=os.getenv("COURSE_DESIGNER_SETTINGS_PATH"),
        help="INI file for recent courses and symbol scales (defaults to course_designer.ini beside the package).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Shortcut for --log-level DEBUG",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Summarise a course file")
    info.add_argument("course", type=Path)
    info.add_argument(
        "--ratio",
        type=float,
        default=None,
        help="Map scale denominator (15000 for 1:15000) used for the course length",
    )

    export = subparsers.add_parser(
        "export-descriptions", help="Write control descriptions as CSV"
    )
    export.add_argument("course", type=Path)
    export.add_argument("-o", "--output", type=Path, default=None)

    subparsers.add_parser("recent", help="List recently opened course files")
    return parser.parse_args(argv)


def configure_logging(log_level_name: str, log_path: str | None) -> str | None:
    resolved_level_name = log_level_name.upper()
    log_level = getattr(logging, resolved_level_name, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path:
        handlers.insert(0, logging.FileHandler(log_path, mode="a", encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )

    return log_path


def _open_course(args: argparse.Namespace, settings: FileHistory):
    course = load_course(args.course)
    settings.record_open(args.course)
    return course


def _run_info(args: argparse.Namespace, settings: FileHistory) -> int:
    course = _open_course(args, settings)
    counts = {kind: 0 for kind in ElementType}
    for element in course.elements:
        counts[element.type] += 1
    for kind, count in counts.items():
        print(f"{kind.value.lower():8s} {count}")
    if course.background_file_name:
        print(f"background {course.background_file_name}")

    scale = (
        MapScaleSettings(mode=ScaleMode.RATIO, ratio_value=args.ratio)
        if args.ratio
        else MapScaleSettings()
    )
    print(f"length   {format_course_length(course_length_meters(course.elements, scale))}")
    return 0


def _run_export(args: argparse.Namespace, settings: FileHistory) -> int:
    course = _open_course(args, settings)
    output = args.output or args.course.with_name(default_descriptions_file_name(course))
    result = export_descriptions(course=course, csv_path=output)
    print(result.message)
    return 0 if result.success else 1


def _run_recent(settings: FileHistory) -> int:
    for path in settings.get_recent_paths():
        print(path)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log_level_name = "DEBUG" if args.debug else args.log_level
    log_path = configure_logging(log_level_name, args.log_file)
    logger.debug("Course designer CLI (log level %s, log file %s)", log_level_name.upper(), log_path)

    try:
        settings = FileHistory(args.settings_file)
        if args.command == "recent":
            return _run_recent(settings)
        if args.command == "info":
            return _run_info(args, settings)
        return _run_export(args, settings)
    except CourseLoadError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
