"""Detection overlay: face boxes, landmark markers and a nose arrow.

:func:`annotate` turns detected faces into marks; :func:`render` draws
them onto a copy of the source image.
"""

from typing import Dict, List, Sequence

import numpy as np

from faceattr.marks import (
    ArrowMark,
    BBoxMark,
    Mark,
    PointMark,
    BLUE,
    CYAN,
    GREEN,
    LIGHT_GRAY,
    MAGENTA,
    RED,
    YELLOW,
)
from faceattr.renderer import render_marks
from faceattr.types import ContourKey, ContourKind, DetectedFace

BOX_COLOR = RED
ARROW_COLOR = RED
DEFAULT_POINT_COLOR = BLUE

# Landmark marker color per contour kind (BGR)
CONTOUR_COLORS: Dict[ContourKind, tuple] = {
    ContourKind.FACE: BLUE,
    ContourKind.LEFT_EYEBROW_TOP: GREEN,
    ContourKind.LEFT_EYEBROW_BOTTOM: GREEN,
    ContourKind.RIGHT_EYEBROW_TOP: YELLOW,
    ContourKind.RIGHT_EYEBROW_BOTTOM: YELLOW,
    ContourKind.LEFT_EYE: CYAN,
    ContourKind.RIGHT_EYE: CYAN,
    ContourKind.UPPER_LIP_TOP: MAGENTA,
    ContourKind.UPPER_LIP_BOTTOM: MAGENTA,
    ContourKind.LOWER_LIP_TOP: MAGENTA,
    ContourKind.LOWER_LIP_BOTTOM: MAGENTA,
    ContourKind.NOSE_BRIDGE: RED,
    ContourKind.NOSE_BOTTOM: RED,
    ContourKind.LEFT_CHEEK: LIGHT_GRAY,
    ContourKind.RIGHT_CHEEK: LIGHT_GRAY,
}


def contour_color(kind: ContourKey) -> tuple:
    if isinstance(kind, ContourKind):
        return CONTOUR_COLORS[kind]
    return DEFAULT_POINT_COLOR


def annotate(faces: Sequence[DetectedFace]) -> List[Mark]:
    """Build overlay marks for faces, in detection order.

    Per face: one BBoxMark, one PointMark per contour point, and an
    ArrowMark along the nose-bottom contour (first -> last point) when
    that contour has points.
    """
    marks: List[Mark] = []
    for face in faces:
        left, top, right, bottom = face.bbox
        marks.append(BBoxMark(left=left, top=top, right=right, bottom=bottom, color=BOX_COLOR))

        for kind, points in face.contours.items():
            color = contour_color(kind)
            for x, y in points:
                marks.append(PointMark(x=x, y=y, color=color))

        nose_bottom = face.contour(ContourKind.NOSE_BOTTOM)
        if nose_bottom:
            marks.append(ArrowMark(start=nose_bottom[0], end=nose_bottom[-1], color=ARROW_COLOR))

    return marks


def render(image: np.ndarray, faces: Sequence[DetectedFace]) -> np.ndarray:
    """Return a copy of ``image`` with the detection overlay drawn on it."""
    return render_marks(image, annotate(faces))


__all__ = ["CONTOUR_COLORS", "annotate", "render", "contour_color"]
