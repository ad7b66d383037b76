"""Mark renderer: draws Mark objects onto images using cv2.

All rendering is done on a copy of the input image.

Example:
    >>> from faceattr.renderer import render_marks
    >>> from faceattr.marks import BBoxMark
    >>> output = render_marks(image, [BBoxMark(left=10, top=10, right=90, bottom=110)])
"""

from __future__ import annotations

import cv2
import numpy as np

from faceattr.marks import Mark, BBoxMark, PointMark, ArrowMark


def render_marks(image: np.ndarray, marks: list[Mark]) -> np.ndarray:
    """Render marks onto a copy of ``image``.

    Args:
        image: BGR, BGRA or grayscale image. Never modified.
        marks: Marks to draw, in order.

    Returns:
        New image with its own pixel buffer.
    """
    output = image.copy()

    for mark in marks:
        if isinstance(mark, BBoxMark):
            _render_bbox(output, mark)
        elif isinstance(mark, PointMark):
            _render_point(output, mark)
        elif isinstance(mark, ArrowMark):
            _render_arrow(output, mark)

    return output


def _pt(x: float, y: float) -> tuple[int, int]:
    return (int(round(x)), int(round(y)))


def _color(image: np.ndarray, color: tuple[int, int, int]):
    """Adapt a BGR color to the channel count of ``image``."""
    if image.ndim == 2 or image.shape[2] == 1:
        # Gray: keep the red component, matching what the models read
        return (color[2],)
    if image.shape[2] == 4:
        return (*color, 255)
    return color


def _render_bbox(image: np.ndarray, mark: BBoxMark) -> None:
    cv2.rectangle(
        image,
        _pt(mark.left, mark.top),
        _pt(mark.right, mark.bottom),
        _color(image, mark.color),
        mark.thickness,
    )


def _render_point(image: np.ndarray, mark: PointMark) -> None:
    cv2.circle(image, _pt(mark.x, mark.y), mark.radius, _color(image, mark.color), -1)


def _render_arrow(image: np.ndarray, mark: ArrowMark) -> None:
    color = _color(image, mark.color)
    end = _pt(*mark.end)
    cv2.line(image, _pt(*mark.start), end, color, mark.thickness)
    for tip in mark.head:
        cv2.line(image, end, _pt(*tip), color, mark.thickness)
