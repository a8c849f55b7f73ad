import pytest

from course_designer.geometry_core import Point
from course_designer.model.elements import ControlElement, LegElement, StartElement
from course_designer.services.course_length import (
    POINTS_PER_METER_AT_1_TO_1,
    MapScaleSettings,
    ScaleMode,
    course_length_map_units,
    course_length_meters,
    format_course_length,
)

ELEMENTS = (
    StartElement(id="s", center=Point(0, 0)),
    ControlElement(id="c1", center=Point(300, 400), number=1),
    ControlElement(id="c2", center=Point(300, 0), number=2),
    LegElement(id="l1", from_id="s", to_id="c1"),
    LegElement(id="l2", from_id="c1", to_id="c2"),
)


def test_course_length_sums_centre_to_centre_legs() -> None:
    assert course_length_map_units(ELEMENTS) == pytest.approx(900)


def test_length_is_unknown_without_scale() -> None:
    assert course_length_meters(ELEMENTS, MapScaleSettings()) is None
    assert course_length_meters(ELEMENTS, MapScaleSettings(mode=ScaleMode.RATIO)) is None


def test_ratio_scale() -> None:
    settings = MapScaleSettings(mode=ScaleMode.RATIO, ratio_value=10000)
    expected = 900 / (POINTS_PER_METER_AT_1_TO_1 / 10000)
    assert course_length_meters(ELEMENTS, settings) == pytest.approx(expected)


def test_reference_length_scale() -> None:
    settings = MapScaleSettings(
        mode=ScaleMode.REFERENCE_LENGTH, map_units=90, real_world_meters=100
    )
    assert course_length_meters(ELEMENTS, settings) == pytest.approx(1000)


@pytest.mark.parametrize(
    ("meters", "expected"),
    [(None, "Scale not set"), (812.4, "812 m"), (2350.0, "2.35 km"), (1000.0, "1.00 km")],
)
def test_format_course_length(meters, expected) -> None:
    assert format_course_length(meters) == expected
