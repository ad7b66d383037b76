"""Dual-head age/gender ONNX backend.

Model contract:
  - input: 56x56 single-channel float32 in [0, 1] (e.g. [1,56,56,1])
  - output 0: gender score [1,1] (>= 0.5 means female)
  - output 1: age bucket score [1,1] (rounded to 0..3)

The output order is part of the model file contract and must not change.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from faceattr.backends.onnx_model import OnnxModel
from faceattr.errors import InferenceError
from faceattr.types import AgeGenderResult, AttributeTensor

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "agender_cnn_model.onnx"

GENDER_OUTPUT = 0
AGE_OUTPUT = 1


class OnnxAgeGenderBackend:
    """Age/gender estimation from one dual-output ONNX model.

    Model loaded from ``get_models_dir() / model_file`` unless ``models_dir``
    is given.
    """

    def __init__(self, model_file: str = DEFAULT_MODEL, models_dir: Optional[Path] = None):
        self._model = OnnxModel(model_file, models_dir)

    def initialize(self, device: str = "cpu") -> None:
        self._model.load(device)

    def estimate(self, tensor: AttributeTensor) -> AgeGenderResult:
        outputs = self._model.run(tensor)
        if len(outputs) <= AGE_OUTPUT:
            raise InferenceError(
                f"Age/gender model returned {len(outputs)} outputs, expected 2"
            )
        gender = np.asarray(outputs[GENDER_OUTPUT], dtype=np.float32).reshape(-1)
        age = np.asarray(outputs[AGE_OUTPUT], dtype=np.float32).reshape(-1)
        if gender.size == 0 or age.size == 0:
            raise InferenceError("Age/gender model returned an empty output")
        return AgeGenderResult(gender_score=float(gender[0]), age_score=float(age[0]))

    def cleanup(self) -> None:
        self._model.close()
        logger.info("Age/gender backend cleaned up")


__all__ = ["OnnxAgeGenderBackend", "DEFAULT_MODEL"]
