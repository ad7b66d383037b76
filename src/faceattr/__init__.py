"""faceattr - age, gender and expression estimation for photos.

Example:
    >>> import cv2
    >>> from faceattr import AttributePipeline, PipelineConfig
    >>> pipeline = AttributePipeline.from_config(PipelineConfig())
    >>> result = pipeline.analyze(cv2.imread("photo.jpg"))
    >>> result.texts
    ('Age: 18-30\\nGender: Female', 'Expression: Happy')
"""

from faceattr.types import (
    AGE_LABELS,
    EXPRESSION_LABELS,
    AgeGenderResult,
    AttributeLabels,
    AttributeTensor,
    ContourKind,
    DetectedFace,
    ExpressionResult,
)
from faceattr.errors import DetectionError, FaceAttrError, InferenceError, ModelLoadError
from faceattr.preprocess import preprocess
from faceattr.overlay import annotate, render
from faceattr.detection import Detected, DetectionFailed, DetectionResult, run_detection
from faceattr.config import DetectorConfig, PipelineConfig
from faceattr.pipeline import AttributePipeline, PipelineResult, PipelineState

__all__ = [
    # Types
    "AGE_LABELS",
    "EXPRESSION_LABELS",
    "AgeGenderResult",
    "AttributeLabels",
    "AttributeTensor",
    "ContourKind",
    "DetectedFace",
    "ExpressionResult",
    # Errors
    "FaceAttrError",
    "ModelLoadError",
    "InferenceError",
    "DetectionError",
    # Stages
    "preprocess",
    "annotate",
    "render",
    # Detection
    "Detected",
    "DetectionFailed",
    "DetectionResult",
    "run_detection",
    # Pipeline
    "DetectorConfig",
    "PipelineConfig",
    "AttributePipeline",
    "PipelineResult",
    "PipelineState",
]
