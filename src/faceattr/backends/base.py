"""Backend protocol definitions for detection and attribute models."""

from typing import List, Protocol, runtime_checkable

import numpy as np

from faceattr.types import AgeGenderResult, AttributeTensor, DetectedFace, ExpressionResult


@runtime_checkable
class FaceDetectionBackend(Protocol):
    """Protocol for face detection backends.

    Implementations should be swappable without changing pipeline logic.
    Examples: InsightFace SCRFD, detections loaded from a file.
    """

    def initialize(self, device: str = "cpu") -> None:
        """Initialize the backend and load models."""
        ...

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in a BGR image (no rotation)."""
        ...

    def cleanup(self) -> None:
        """Release resources and unload models."""
        ...


@runtime_checkable
class AgeGenderBackend(Protocol):
    """Protocol for dual-head age/gender models.

    The model yields one gender score and one age-bucket score.
    """

    def initialize(self, device: str = "cpu") -> None:
        """Load the model. Raises ModelLoadError on failure."""
        ...

    def estimate(self, tensor: AttributeTensor) -> AgeGenderResult:
        """Run one forward pass. Raises InferenceError on failure."""
        ...

    def cleanup(self) -> None:
        """Release the model."""
        ...


@runtime_checkable
class ExpressionBackend(Protocol):
    """Protocol for 7-way expression classifiers."""

    def initialize(self, device: str = "cpu") -> None:
        """Load the model. Raises ModelLoadError on failure."""
        ...

    def predict(self, tensor: AttributeTensor) -> ExpressionResult:
        """Run one forward pass. Raises InferenceError on failure."""
        ...

    def cleanup(self) -> None:
        """Release the model."""
        ...


def classify(backend: ExpressionBackend, tensor: AttributeTensor) -> str:
    """Return the arg-max expression label for ``tensor``."""
    return backend.predict(tensor).label


__all__ = ["FaceDetectionBackend", "AgeGenderBackend", "ExpressionBackend", "classify"]
