from __future__ import annotations

import math
from typing import Iterable, Optional

from PyQt5 import QtCore, QtGui

from course_designer.preview.render import Arc, DrawOp, FilledPolygon, Polyline, Text
from course_designer.preview.transform import ViewTransform
from course_designer.services.preview_background import BackgroundImage


def paint_course(
    painter,
    ops: Iterable[DrawOp],
    transform: ViewTransform,
    background: Optional[BackgroundImage] = None,
) -> None:
    """Paint map-space primitives with ``painter`` under the pan/zoom ``transform``."""
    painter.save()
    painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
    painter.translate(transform.offset.x, transform.offset.y)
    painter.scale(transform.scale, transform.scale)

    if background is not None:
        painter.drawImage(QtCore.QPointF(0.0, 0.0), background.handle)

    for op in ops:
        draw_op(painter, op)

    painter.restore()


def draw_op(painter, op: DrawOp) -> None:
    if isinstance(op, Polyline):
        _draw_polyline(painter, op)
    elif isinstance(op, Arc):
        _draw_arc(painter, op)
    elif isinstance(op, FilledPolygon):
        _draw_filled_polygon(painter, op)
    elif isinstance(op, Text):
        _draw_text(painter, op)
    else:
        raise TypeError(f"Unsupported draw op: {type(op).__name__}")


def _draw_polyline(painter, op: Polyline) -> None:
    pen = _make_pen(op.color, op.width)
    if op.dash is not None and op.width > 0:
        # Qt dash lengths are multiples of the pen width.
        pen.setDashPattern([op.dash[0] / op.width, op.dash[1] / op.width])
    painter.setPen(pen)
    painter.setBrush(QtCore.Qt.NoBrush)
    polygon = _polygon(op.points)
    if op.closed:
        painter.drawPolygon(polygon)
    else:
        painter.drawPolyline(polygon)


def _draw_arc(painter, op: Arc) -> None:
    color = _make_color(op.color)
    if op.filled:
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(QtGui.QBrush(color))
    else:
        painter.setPen(_make_pen(op.color, op.width))
        painter.setBrush(QtCore.Qt.NoBrush)
    rect = QtCore.QRectF(
        op.center.x - op.radius, op.center.y - op.radius, op.radius * 2, op.radius * 2
    )
    if math.isclose(op.span, 2 * math.pi):
        painter.drawEllipse(rect)
        return
    # Qt angles are 1/16 degree, counter-clockwise; map space has y pointing down.
    start = int(round(-math.degrees(op.start_angle) * 16))
    span = int(round(-math.degrees(op.span) * 16))
    painter.drawArc(rect, start, span)


def _draw_filled_polygon(painter, op: FilledPolygon) -> None:
    painter.setPen(_make_pen(op.stroke, op.width))
    painter.setBrush(QtGui.QBrush(_make_color(op.fill)))
    painter.drawPolygon(_polygon(op.points))


def _draw_text(painter, op: Text) -> None:
    font = QtGui.QFont("Arial")
    font.setPixelSize(max(1, int(round(op.font_size))))
    painter.setFont(font)
    painter.setPen(_make_color(op.color))
    metrics = QtGui.QFontMetricsF(font)
    width = metrics.horizontalAdvance(op.text)
    # Anchor at the bottom-centre of the text box.
    baseline = QtCore.QPointF(op.position.x - width / 2, op.position.y - metrics.descent())
    painter.drawText(baseline, op.text)


def _polygon(points) -> QtGui.QPolygonF:
    polygon = QtGui.QPolygonF()
    for point in points:
        polygon.append(QtCore.QPointF(point.x, point.y))
    return polygon


def _make_color(rgba) -> QtGui.QColor:
    r, g, b, a = rgba
    return QtGui.QColor(r, g, b, a)


def _make_pen(rgba, width: float) -> QtGui.QPen:
    pen = QtGui.QPen(_make_color(rgba))
    pen.setWidthF(width)
    return pen


def render_export_image(
    ops: Iterable[DrawOp], background: BackgroundImage
) -> QtGui.QImage:
    """Bake the course over the background at native resolution (zoom 1.0)."""
    image = QtGui.QImage(background.width, background.height, QtGui.QImage.Format_ARGB32)
    image.fill(QtCore.Qt.white)
    painter = QtGui.QPainter(image)
    try:
        paint_course(painter, ops, ViewTransform(), background)
    finally:
        painter.end()
    return image
