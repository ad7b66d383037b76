"""Attribute inference pipeline.

One request runs through these states::

    IDLE -> NO_FACE                                  (detector found nothing)
    IDLE -> ANNOTATING -> INFERRING -> DONE          (labels produced)
    IDLE -> FAILED, INFERRING -> FAILED              (detector / model error)

The overlay is drawn before prediction and both models read the
annotated image, not the original. Drawn pixels leak into the red
channel the models see.

Example:
    >>> pipeline = AttributePipeline.from_config(PipelineConfig())
    >>> result = pipeline.analyze(cv2.imread("photo.jpg"))
    >>> print(*result.texts, sep="\\n")
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from faceattr.backends.base import AgeGenderBackend, ExpressionBackend, FaceDetectionBackend
from faceattr.config import PipelineConfig
from faceattr.detection import Detected, DetectionFailed, DetectionResult, run_detection
from faceattr.errors import InferenceError
from faceattr.overlay import render
from faceattr.preprocess import preprocess
from faceattr.steps import ProcessingStep, get_processing_steps, processing_step
from faceattr.types import (
    AgeGenderResult,
    AttributeLabels,
    AttributeTensor,
    DetectedFace,
    ExpressionResult,
)

logger = logging.getLogger(__name__)

NO_FACE_STATUS = "No face detected"
DETECTION_FAILED_STATUS = "Face detection failed"
INFERENCE_FAILED_STATUS = "Inference failed"


class PipelineState(str, Enum):
    IDLE = "idle"
    NO_FACE = "no_face"
    ANNOTATING = "annotating"
    INFERRING = "inferring"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Outcome of one request.

    Attributes:
        state: Terminal state (DONE, NO_FACE or FAILED).
        labels: Age, gender and expression labels (DONE only).
        annotated: Image with the detection overlay (set once annotation ran).
        faces: Faces reported by the detector.
        age_gender: Raw age/gender scores (DONE only).
        expression: Raw expression scores (DONE only).
        error: Detector or inference error (FAILED only).
        failed_step: "detection" or "inference" (FAILED only).
        timing: Per-step wall time in milliseconds.
    """

    state: PipelineState
    labels: Optional[AttributeLabels] = None
    annotated: Optional[np.ndarray] = None
    faces: List[DetectedFace] = field(default_factory=list)
    age_gender: Optional[AgeGenderResult] = None
    expression: Optional[ExpressionResult] = None
    error: Optional[BaseException] = None
    failed_step: Optional[str] = None
    timing: Dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.state is not PipelineState.FAILED

    @property
    def texts(self) -> Tuple[str, str]:
        """The two display fields: (age/gender text, expression text)."""
        if self.state is PipelineState.DONE and self.labels is not None:
            return self.labels.age_gender_text, self.labels.expression_text
        if self.state is PipelineState.NO_FACE:
            return NO_FACE_STATUS, ""
        if self.failed_step == "inference":
            return INFERENCE_FAILED_STATUS, ""
        return DETECTION_FAILED_STATUS, ""

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary (no image data)."""
        age_gender_text, expression_text = self.texts
        data: Dict[str, Any] = {
            "state": self.state.value,
            "age_gender_text": age_gender_text,
            "expression_text": expression_text,
            "faces": [
                {
                    "bbox": list(face.bbox),
                    "contours": {
                        str(getattr(kind, "value", kind)): [list(p) for p in points]
                        for kind, points in face.contours.items()
                    },
                }
                for face in self.faces
            ],
            "timing_ms": dict(self.timing),
            "error": str(self.error) if self.error is not None else None,
        }
        if self.labels is not None:
            data["labels"] = {
                "age": self.labels.age,
                "gender": self.labels.gender,
                "expression": self.labels.expression,
            }
        if self.age_gender is not None and self.expression is not None:
            data["scores"] = {
                "gender": self.age_gender.gender_score,
                "age": self.age_gender.age_score,
                "expression": self.expression.as_dict(),
            }
        return data


class AttributePipeline:
    """Runs overlay, preprocessing and both attribute models for one image.

    The two estimators are independent backends composed here; any objects
    satisfying :class:`AgeGenderBackend` / :class:`ExpressionBackend` work.

    Args:
        agender_backend: Age/gender estimator.
        expression_backend: Expression classifier.
        detector: Face detector used by :meth:`analyze`. Optional when
            detections are passed to :meth:`process` directly.
        parallel: Run both models concurrently on the shared tensor.
        timeout: Seconds allowed for both model calls (None = no limit).
    """

    def __init__(
        self,
        agender_backend: AgeGenderBackend,
        expression_backend: ExpressionBackend,
        detector: Optional[FaceDetectionBackend] = None,
        parallel: bool = True,
        timeout: Optional[float] = 10.0,
    ):
        self._agender = agender_backend
        self._expression = expression_backend
        self._detector = detector
        self._parallel = parallel
        self._timeout = timeout
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._state = PipelineState.IDLE
        self._step_timings: Optional[Dict[str, float]] = None
        self.last_result: Optional[PipelineResult] = None

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "AttributePipeline":
        """Build and initialize a pipeline with ONNX backends.

        Raises:
            ModelLoadError: A model could not be loaded.
        """
        from faceattr.backends.onnx_agender import OnnxAgeGenderBackend
        from faceattr.backends.onnx_expression import OnnxExpressionBackend

        pipeline = cls(
            OnnxAgeGenderBackend(config.agender_model, config.models_path),
            OnnxExpressionBackend(config.expression_model, config.models_path),
            detector=build_detector(config),
            parallel=config.parallel,
            timeout=config.timeout,
        )
        pipeline.initialize(config.device)
        return pipeline

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def processing_steps(self) -> List[ProcessingStep]:
        return get_processing_steps(self)

    def initialize(self, device: str = "cpu") -> None:
        """Load both models (and the detector, if any) once."""
        self._agender.initialize(device)
        self._expression.initialize(device)
        if self._detector is not None:
            self._detector.initialize(device)
        logger.info("AttributePipeline initialized (device=%s, parallel=%s)", device, self._parallel)

    def cleanup(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._agender.cleanup()
        self._expression.cleanup()
        if self._detector is not None:
            self._detector.cleanup()
        logger.info("AttributePipeline cleaned up")

    def analyze(self, image: np.ndarray) -> PipelineResult:
        """Detect faces with the configured detector, then :meth:`process`."""
        if self._detector is None:
            raise RuntimeError("No face detector configured; use process() with detections.")
        return self.process(image, run_detection(self._detector, image))

    def process(self, image: np.ndarray, detection: DetectionResult) -> PipelineResult:
        """Run one request on an image and its detection result."""
        with self._lock:
            self.last_result = None
            self._step_timings = {}
            try:
                result = self._run(image, detection)
                result.timing = dict(self._step_timings)
            except Exception:
                self._transition(PipelineState.FAILED)
                raise
            finally:
                self._step_timings = None
            self.last_result = result
            return result

    def _transition(self, state: PipelineState) -> None:
        logger.debug("%s -> %s", self._state.value, state.value)
        self._state = state

    def _run(self, image: np.ndarray, detection: DetectionResult) -> PipelineResult:
        self._transition(PipelineState.IDLE)

        if isinstance(detection, DetectionFailed):
            self._transition(PipelineState.FAILED)
            return PipelineResult(
                state=PipelineState.FAILED,
                error=detection.cause,
                failed_step="detection",
            )

        if not isinstance(detection, Detected):
            raise TypeError(f"Unsupported detection result {type(detection).__name__}")

        faces = list(detection.faces)
        if not faces:
            self._transition(PipelineState.NO_FACE)
            return PipelineResult(state=PipelineState.NO_FACE)

        self._transition(PipelineState.ANNOTATING)
        annotated = self._render(image, faces)

        self._transition(PipelineState.INFERRING)
        tensor = self._preprocess(annotated)
        try:
            age_gender, expression = self._infer(tensor)
        except InferenceError as e:
            logger.warning("Attribute inference failed: %s", e)
            self._transition(PipelineState.FAILED)
            return PipelineResult(
                state=PipelineState.FAILED,
                annotated=annotated,
                faces=faces,
                error=e,
                failed_step="inference",
            )

        labels = AttributeLabels(
            age=age_gender.age_label,
            gender=age_gender.gender_label,
            expression=expression.label,
        )
        self._transition(PipelineState.DONE)
        return PipelineResult(
            state=PipelineState.DONE,
            labels=labels,
            annotated=annotated,
            faces=faces,
            age_gender=age_gender,
            expression=expression,
        )

    @processing_step(
        name="render",
        description="Draw boxes, landmarks and nose arrow on a copy",
        backend="OpenCV",
        input_type="Image + List[DetectedFace]",
        output_type="Image",
    )
    def _render(self, image: np.ndarray, faces: List[DetectedFace]) -> np.ndarray:
        return render(image, faces)

    @processing_step(
        name="preprocess",
        description="Resize to 56x56, red channel / 255",
        backend="OpenCV",
        input_type="Image",
        output_type="AttributeTensor",
        depends_on=["render"],
    )
    def _preprocess(self, annotated: np.ndarray) -> AttributeTensor:
        return preprocess(annotated)

    @processing_step(
        name="age_gender",
        description="Dual-head age/gender model",
        backend="ONNX Runtime",
        input_type="AttributeTensor",
        output_type="AgeGenderResult",
        depends_on=["preprocess"],
    )
    def _estimate_age_gender(self, tensor: AttributeTensor) -> AgeGenderResult:
        return self._agender.estimate(tensor)

    @processing_step(
        name="expression",
        description="7-way expression classifier",
        backend="ONNX Runtime",
        input_type="AttributeTensor",
        output_type="ExpressionResult",
        depends_on=["preprocess"],
    )
    def _classify_expression(self, tensor: AttributeTensor) -> ExpressionResult:
        return self._expression.predict(tensor)

    def _infer(self, tensor: AttributeTensor) -> Tuple[AgeGenderResult, ExpressionResult]:
        """Run both models on the shared tensor; any failure becomes InferenceError."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=2 if self._parallel else 1,
                thread_name_prefix="faceattr",
            )

        age_future = self._executor.submit(self._estimate_age_gender, tensor)
        expr_future = self._executor.submit(self._classify_expression, tensor)
        _, pending = wait((age_future, expr_future), timeout=self._timeout)
        if pending:
            # A stuck call must not hold up the next request
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
            raise InferenceError(f"Inference timed out after {self._timeout}s")

        errors = [f.exception() for f in (age_future, expr_future) if f.exception() is not None]
        for extra in errors[1:]:
            logger.warning("Second model also failed: %s", extra)
        if errors:
            if isinstance(errors[0], InferenceError):
                raise errors[0]
            raise InferenceError(f"Inference failed: {errors[0]}") from errors[0]
        return age_future.result(), expr_future.result()


def build_detector(config: PipelineConfig) -> FaceDetectionBackend:
    """Create the detector backend named in ``config.detector``."""
    kwargs = dict(config.detector.kwargs)
    if config.detector.name == "static":
        from faceattr.backends.static import StaticDetector
        return StaticDetector(**kwargs)

    from faceattr.backends.insightface import InsightFaceSCRFD
    kwargs.setdefault("models_dir", config.models_path)
    return InsightFaceSCRFD(**kwargs)


__all__ = [
    "AttributePipeline",
    "PipelineResult",
    "PipelineState",
    "build_detector",
    "NO_FACE_STATUS",
    "DETECTION_FAILED_STATUS",
    "INFERENCE_FAILED_STATUS",
]
