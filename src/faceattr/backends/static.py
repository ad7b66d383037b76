"""Detector backend that replays detections produced elsewhere.

Detections are read from JSON or YAML::

    faces:
      - bbox: [120, 80, 260, 240]        # left, top, right, bottom
        contours:
          nose_bottom: [[190, 170], [192, 190]]
          left_eye: [[160, 130]]

A bare list of face entries is accepted too.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import numpy as np
import yaml

from faceattr.errors import DetectionError
from faceattr.types import DetectedFace

logger = logging.getLogger(__name__)


def face_from_dict(data: dict) -> DetectedFace:
    """Build a DetectedFace from a ``{"bbox": ..., "contours": ...}`` mapping."""
    bbox = tuple(float(v) for v in data["bbox"])
    if len(bbox) != 4:
        raise ValueError(f"bbox needs 4 values, got {len(bbox)}")
    contours = {
        kind: tuple((float(p[0]), float(p[1])) for p in points)
        for kind, points in (data.get("contours") or {}).items()
    }
    return DetectedFace(bbox=bbox, contours=contours)


def faces_from_data(data: Any) -> List[DetectedFace]:
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("faces") or []
    return [face_from_dict(entry) for entry in data]


def load_detections(path: Union[str, Path]) -> List[DetectedFace]:
    """Load detections from a .json, .yaml or .yml file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        return faces_from_data(data)
    except (OSError, ValueError, KeyError, TypeError, yaml.YAMLError) as e:
        raise DetectionError(f"Cannot read detections from {path}: {e}") from e


class StaticDetector:
    """Returns the same precomputed faces for every image.

    A detections file is read on the first ``detect()`` call, so an
    unreadable file surfaces as a detection failure of that request.

    Args:
        faces: Faces to report, or a path to a detections file.
    """

    def __init__(self, faces: Union[Sequence[DetectedFace], str, Path] = ()):
        self._source = faces
        self._faces: Optional[List[DetectedFace]] = None
        self._initialized = False

    def initialize(self, device: str = "cpu") -> None:
        if self._initialized:
            return
        if not isinstance(self._source, (str, Path)):
            self._faces = list(self._source)
        self._initialized = True

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        if not self._initialized:
            raise RuntimeError("Backend not initialized. Call initialize() first.")
        if self._faces is None:
            self._faces = load_detections(self._source)
            logger.info("Loaded %d detection(s) from %s", len(self._faces), self._source)
        return list(self._faces)

    def cleanup(self) -> None:
        self._faces = None
        self._initialized = False


__all__ = ["StaticDetector", "load_detections", "face_from_dict", "faces_from_data"]
