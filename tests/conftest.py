"""Shared fixtures for faceattr tests.

All models are mocked, so no ONNX files are needed.
"""

import numpy as np
import pytest

from faceattr.types import ContourKind, DetectedFace

from helpers import MockAgeGenderBackend, MockExpressionBackend


@pytest.fixture
def blank_image():
    """200x200 black BGR image."""
    return np.zeros((200, 200, 3), dtype=np.uint8)


@pytest.fixture
def random_image():
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, size=(240, 320, 3), dtype=np.uint8)


@pytest.fixture
def make_face():
    """Factory for DetectedFace with an optional nose-bottom contour."""

    def _make(bbox=(20, 20, 120, 150), nose=None, **contours):
        data = dict(contours)
        if nose is not None:
            data[ContourKind.NOSE_BOTTOM] = nose
        return DetectedFace(bbox=bbox, contours=data)

    return _make


@pytest.fixture
def agender_backend():
    return MockAgeGenderBackend()


@pytest.fixture
def expression_backend():
    return MockExpressionBackend()
