"""Shared mock backends for faceattr tests."""

import time
from typing import List, Optional

from faceattr.types import AgeGenderResult, DetectedFace, ExpressionResult


class MockAgeGenderBackend:
    """Mock age/gender backend recording every call."""

    def __init__(
        self,
        result: Optional[AgeGenderResult] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self._result = result or AgeGenderResult(gender_score=0.8, age_score=1.2)
        self._error = error
        self._delay = delay
        self.calls = 0
        self.tensors = []
        self.initialized = False

    def initialize(self, device="cpu"):
        self.initialized = True

    def estimate(self, tensor):
        self.calls += 1
        self.tensors.append(tensor)
        if self._delay:
            time.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result

    def cleanup(self):
        self.initialized = False


class MockExpressionBackend:
    """Mock expression backend recording every call."""

    def __init__(
        self,
        scores: tuple = (0.05, 0.0, 0.05, 0.7, 0.1, 0.05, 0.05),
        error: Optional[BaseException] = None,
    ):
        self._scores = scores
        self._error = error
        self.calls = 0
        self.tensors = []
        self.initialized = False

    def initialize(self, device="cpu"):
        self.initialized = True

    def predict(self, tensor):
        self.calls += 1
        self.tensors.append(tensor)
        if self._error is not None:
            raise self._error
        return ExpressionResult(scores=self._scores)

    def cleanup(self):
        self.initialized = False


class MockDetector:
    """Detector returning fixed faces or raising a fixed error."""

    def __init__(self, faces: Optional[List[DetectedFace]] = None, error=None):
        self._faces = faces or []
        self._error = error
        self.initialized = False

    def initialize(self, device="cpu"):
        self.initialized = True

    def detect(self, image):
        if self._error is not None:
            raise self._error
        return list(self._faces)

    def cleanup(self):
        self.initialized = False
