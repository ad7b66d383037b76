"""Tests for faceattr.renderer."""

import numpy as np

from faceattr.marks import GREEN, RED, ArrowMark, BBoxMark, PointMark
from faceattr.renderer import render_marks


class TestRenderMarks:
    def test_empty_marks(self):
        image = np.full((50, 50, 3), 9, dtype=np.uint8)
        output = render_marks(image, [])
        assert output is not image
        assert np.array_equal(output, image)

    def test_point_is_filled(self):
        image = np.zeros((50, 50, 3), dtype=np.uint8)
        output = render_marks(image, [PointMark(x=25, y=25, color=GREEN, radius=8)])
        assert tuple(output[25, 25]) == GREEN
        assert tuple(output[25, 30]) == GREEN
        assert tuple(output[25, 40]) == (0, 0, 0)

    def test_fractional_coordinates_rounded(self):
        image = np.zeros((50, 50, 3), dtype=np.uint8)
        output = render_marks(image, [PointMark(x=9.6, y=10.4, color=RED, radius=1)])
        assert tuple(output[10, 10]) == RED

    def test_bgra_image(self):
        image = np.zeros((60, 60, 4), dtype=np.uint8)
        output = render_marks(image, [BBoxMark(left=10, top=10, right=50, bottom=50)])
        assert tuple(output[30, 10]) == (0, 0, 255, 255)

    def test_gray_image_gets_red_component(self):
        image = np.zeros((60, 60), dtype=np.uint8)
        output = render_marks(image, [
            BBoxMark(left=10, top=10, right=50, bottom=50, color=RED),
            PointMark(x=30, y=30, color=GREEN),
        ])
        assert output[30, 10] == 255
        assert output[30, 30] == 0

    def test_arrow_draws_shaft_and_head(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        mark = ArrowMark(start=(50, 10), end=(50, 80), thickness=2)
        output = render_marks(image, [mark])
        assert tuple(output[40, 50]) == RED
        # head segments reach back up toward the start
        for tip in mark.head:
            assert tuple(output[int(round(tip[1])), int(round(tip[0]))]) == RED
