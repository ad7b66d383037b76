"""InsightFace SCRFD backend for face detection.

SCRFD returns a box and five keypoints per face. The keypoints are
reported as single-point contours so the overlay can mark them:
eyes -> LEFT_EYE / RIGHT_EYE, nose tip -> NOSE_BOTTOM,
mouth corners -> UPPER_LIP_BOTTOM.
"""

import contextlib
import io
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from faceattr.errors import DetectionError
from faceattr.types import ContourKind, DetectedFace

logger = logging.getLogger(__name__)


def _point(kps: np.ndarray, i: int) -> tuple:
    return (float(kps[i][0]), float(kps[i][1]))


def keypoints_to_contours(kps: Optional[np.ndarray]) -> dict:
    """Map SCRFD 5-point landmarks onto contour kinds."""
    if kps is None or len(kps) < 5:
        return {}
    return {
        ContourKind.LEFT_EYE: (_point(kps, 0),),
        ContourKind.RIGHT_EYE: (_point(kps, 1),),
        ContourKind.NOSE_BOTTOM: (_point(kps, 2),),
        ContourKind.UPPER_LIP_BOTTOM: (_point(kps, 3), _point(kps, 4)),
    }


class InsightFaceSCRFD:
    """Face detection backend using InsightFace SCRFD.

    Args:
        model_name: Model pack name (default: "buffalo_l").
        det_size: Detection input size (width, height).
        det_thresh: Detection confidence threshold.
        models_dir: Root for InsightFace model packs. Defaults to
            ``get_models_dir() / "insightface"``.

    Example:
        >>> backend = InsightFaceSCRFD()
        >>> backend.initialize("cpu")
        >>> faces = backend.detect(image)
        >>> backend.cleanup()
    """

    def __init__(
        self,
        model_name: str = "buffalo_l",
        det_size: tuple[int, int] = (640, 640),
        det_thresh: float = 0.5,
        models_dir: Optional[Path] = None,
    ):
        self._model_name = model_name
        self._det_size = tuple(det_size)
        self._det_thresh = det_thresh
        self._models_dir = Path(models_dir) if models_dir is not None else None
        self._app = None
        self._initialized = False

    def initialize(self, device: str = "cpu") -> None:
        """Initialize InsightFace app with the SCRFD detector only."""
        if self._initialized:
            return

        try:
            from insightface.app import FaceAnalysis
        except ImportError:
            raise ImportError(
                "insightface is required for InsightFaceSCRFD backend. "
                "Install with: pip install faceattr[insightface]"
            )

        if device.startswith("cuda"):
            ctx_id = int(device.split(":")[-1]) if ":" in device else 0
            providers = ["CUDAExecutionProvider", "CPUExecutionProvider"]
        else:
            ctx_id = -1
            providers = ["CPUExecutionProvider"]

        from faceattr.paths import ensure_dir, get_models_dir

        # Model packs are downloaded here on first use
        pack_root = ensure_dir((self._models_dir or get_models_dir()) / "insightface")

        # FaceAnalysis prints model discovery to stdout
        with contextlib.redirect_stdout(io.StringIO()):
            self._app = FaceAnalysis(
                name=self._model_name,
                root=str(pack_root),
                allowed_modules=["detection"],
                providers=providers,
            )
            self._app.prepare(ctx_id=ctx_id, det_thresh=self._det_thresh, det_size=self._det_size)
        self._initialized = True
        logger.info("InsightFace SCRFD initialized (model=%s, device=%s)", self._model_name, device)

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        if not self._initialized or self._app is None:
            raise RuntimeError("Backend not initialized. Call initialize() first.")

        import cv2

        if image.ndim == 2:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        elif image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

        try:
            raw_faces = self._app.get(image)
        except Exception as e:
            raise DetectionError(f"InsightFace detection failed: {e}") from e

        faces = []
        for raw in raw_faces:
            x1, y1, x2, y2 = (float(v) for v in raw.bbox[:4])
            if x2 <= x1 or y2 <= y1:
                logger.debug("Skipping degenerate box %s", raw.bbox)
                continue
            faces.append(DetectedFace(
                bbox=(x1, y1, x2, y2),
                contours=keypoints_to_contours(getattr(raw, "kps", None)),
            ))
        return faces

    def cleanup(self) -> None:
        self._app = None
        self._initialized = False
        logger.info("InsightFace SCRFD cleaned up")


__all__ = ["InsightFaceSCRFD", "keypoints_to_contours"]
