"""Declarative overlay mark types.

Marks describe *what* to draw, not *how*. :mod:`faceattr.renderer`
turns them into pixels. All coordinates are image pixels; colors are BGR.

All Mark types are frozen dataclasses, comparable with ``==`` for easy testing.

Example:
    >>> from faceattr.marks import BBoxMark, ArrowMark
    >>> marks = [
    ...     BBoxMark(left=10, top=10, right=90, bottom=110),
    ...     ArrowMark(start=(50, 60), end=(52, 80)),
    ... ]
"""

import math
from dataclasses import dataclass

RED = (0, 0, 255)
GREEN = (0, 255, 0)
BLUE = (255, 0, 0)
YELLOW = (0, 255, 255)
CYAN = (255, 255, 0)
MAGENTA = (255, 0, 255)
LIGHT_GRAY = (204, 204, 204)

STROKE_WIDTH = 8
POINT_RADIUS = 8
ARROW_HEAD_LENGTH = 20.0
ARROW_HEAD_ANGLE = math.pi / 6


@dataclass(frozen=True)
class BBoxMark:
    """Bounding box outline."""

    left: float
    top: float
    right: float
    bottom: float
    color: tuple[int, int, int] = RED
    thickness: int = STROKE_WIDTH


@dataclass(frozen=True)
class PointMark:
    """Filled circular marker."""

    x: float
    y: float
    color: tuple[int, int, int] = BLUE
    radius: int = POINT_RADIUS


@dataclass(frozen=True)
class ArrowMark:
    """Line from ``start`` to ``end`` with a two-segment head at ``end``."""

    start: tuple[float, float]
    end: tuple[float, float]
    color: tuple[int, int, int] = RED
    thickness: int = STROKE_WIDTH
    head_length: float = ARROW_HEAD_LENGTH
    head_angle: float = ARROW_HEAD_ANGLE

    @property
    def head(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """Far ends of the two head segments (both start at ``end``)."""
        return arrow_head(self.start, self.end, self.head_length, self.head_angle)


def arrow_head(
    start: tuple[float, float],
    end: tuple[float, float],
    length: float = ARROW_HEAD_LENGTH,
    angle: float = ARROW_HEAD_ANGLE,
) -> tuple[tuple[float, float], tuple[float, float]]:
    """Compute the arrowhead segment endpoints.

    Both segments leave ``end`` at +/- ``angle`` from the reversed line
    direction (end -> start).
    """
    back = math.atan2(start[1] - end[1], start[0] - end[0])
    first = (
        end[0] + length * math.cos(back + angle),
        end[1] + length * math.sin(back + angle),
    )
    second = (
        end[0] + length * math.cos(back - angle),
        end[1] + length * math.sin(back - angle),
    )
    return first, second


Mark = BBoxMark | PointMark | ArrowMark

__all__ = [
    "Mark",
    "BBoxMark",
    "PointMark",
    "ArrowMark",
    "arrow_head",
    "RED",
    "GREEN",
    "BLUE",
    "YELLOW",
    "CYAN",
    "MAGENTA",
    "LIGHT_GRAY",
]
