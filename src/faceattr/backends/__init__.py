from faceattr.backends.base import (
    AgeGenderBackend,
    ExpressionBackend,
    FaceDetectionBackend,
    classify,
)

__all__ = [
    "AgeGenderBackend",
    "ExpressionBackend",
    "FaceDetectionBackend",
    "classify",
]
