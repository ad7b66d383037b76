"""Outcome of the external face detector.

A detector either delivers faces or reports a failure. Both are plain
values so the pipeline can consume them synchronously, whatever delivered
them (a direct call, a thread pool future, a callback).
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import List, Optional, Union

import numpy as np

from faceattr.backends.base import FaceDetectionBackend
from faceattr.types import DetectedFace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Detected:
    """Detector succeeded. ``faces`` may be empty."""

    faces: List[DetectedFace] = field(default_factory=list)


@dataclass(frozen=True)
class DetectionFailed:
    """Detector reported an error."""

    cause: BaseException


DetectionResult = Union[Detected, DetectionFailed]


def run_detection(detector: FaceDetectionBackend, image: np.ndarray) -> DetectionResult:
    """Call ``detector`` and wrap the outcome."""
    try:
        faces = detector.detect(image)
    except Exception as e:
        logger.warning("Face detection failed: %s", e)
        return DetectionFailed(cause=e)
    return Detected(faces=list(faces))


def detection_from_future(future: Future, timeout: Optional[float] = None) -> DetectionResult:
    """Wait for a detector future and wrap its outcome.

    Args:
        future: Future resolving to a list of DetectedFace.
        timeout: Seconds to wait; a timeout counts as a detection failure.
    """
    try:
        faces = future.result(timeout=timeout)
    except Exception as e:
        logger.warning("Face detection failed: %s", e)
        return DetectionFailed(cause=e)
    return Detected(faces=list(faces))


__all__ = [
    "Detected",
    "DetectionFailed",
    "DetectionResult",
    "run_detection",
    "detection_from_future",
]
