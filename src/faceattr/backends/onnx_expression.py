"""7-way expression classifier ONNX backend.

Model contract:
  - input: 56x56 single-channel float32 in [0, 1]
  - output 0: [1,7] scores in EXPRESSION_LABELS order
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from faceattr.backends.onnx_model import OnnxModel
from faceattr.errors import InferenceError
from faceattr.types import EXPRESSION_LABELS, AttributeTensor, ExpressionResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "expression_cnn_model.onnx"


class OnnxExpressionBackend:
    """Expression classification from a single-output ONNX model."""

    def __init__(self, model_file: str = DEFAULT_MODEL, models_dir: Optional[Path] = None):
        self._model = OnnxModel(model_file, models_dir)

    def initialize(self, device: str = "cpu") -> None:
        self._model.load(device)

    def predict(self, tensor: AttributeTensor) -> ExpressionResult:
        outputs = self._model.run(tensor)
        if not outputs:
            raise InferenceError("Expression model returned no outputs")
        scores = np.asarray(outputs[0], dtype=np.float32).reshape(-1)
        if scores.size != len(EXPRESSION_LABELS):
            raise InferenceError(
                f"Expression model returned {scores.size} scores, "
                f"expected {len(EXPRESSION_LABELS)}"
            )
        return ExpressionResult(scores=tuple(scores.tolist()))

    def classify(self, tensor: AttributeTensor) -> str:
        return self.predict(tensor).label

    def cleanup(self) -> None:
        self._model.close()
        logger.info("Expression backend cleaned up")


__all__ = ["OnnxExpressionBackend", "DEFAULT_MODEL"]
