"""Shared ONNX Runtime session handling for the attribute models.

A model is loaded once and reused. If loading fails, the error is logged
once and the same ModelLoadError is raised on every later attempt instead
of touching the file again.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from faceattr.errors import InferenceError, ModelLoadError
from faceattr.types import AttributeTensor

logger = logging.getLogger(__name__)


def execution_providers(device: str) -> List[str]:
    """Map a device string ("cpu", "cuda:0") to ONNX Runtime providers."""
    if "cpu" in device.lower():
        return ["CPUExecutionProvider"]
    return ["CUDAExecutionProvider", "CPUExecutionProvider"]


class OnnxModel:
    """One ONNX model file and its inference session.

    Args:
        filename: Model file name inside ``models_dir``.
        models_dir: Directory holding the model. Defaults to
            :func:`faceattr.paths.get_models_dir`.
    """

    def __init__(self, filename: str, models_dir: Optional[Path] = None):
        self._filename = filename
        self._models_dir = Path(models_dir) if models_dir is not None else None
        self._session = None
        self._input_name: Optional[str] = None
        self._input_shape: Optional[list] = None
        self._load_error: Optional[ModelLoadError] = None

    @property
    def loaded(self) -> bool:
        return self._session is not None

    @property
    def path(self) -> Path:
        models_dir = self._models_dir
        if models_dir is None:
            from faceattr.paths import get_models_dir
            models_dir = get_models_dir()
        return models_dir / self._filename

    def load(self, device: str = "cpu") -> None:
        if self._session is not None:
            return
        if self._load_error is not None:
            raise self._load_error

        model_path = self.path
        try:
            if not model_path.exists():
                raise FileNotFoundError(f"Model not found at {model_path}")

            import onnxruntime as ort

            session = ort.InferenceSession(
                str(model_path), providers=execution_providers(device),
            )
        except Exception as e:
            logger.error("Failed to load model %s: %s", model_path, e)
            self._load_error = ModelLoadError(f"Cannot load model {self._filename}: {e}")
            raise self._load_error from e

        model_input = session.get_inputs()[0]
        self._session = session
        self._input_name = model_input.name
        self._input_shape = list(model_input.shape)
        logger.info("Loaded %s (input %s %s)", model_path, self._input_name, self._input_shape)

    def run(self, tensor: AttributeTensor) -> List[np.ndarray]:
        """Run a forward pass and return all outputs in model order."""
        if self._session is None:
            raise RuntimeError(f"Model {self._filename} not loaded. Call initialize() first.")
        try:
            feed = {self._input_name: tensor.as_input(self._input_shape)}
            return self._session.run(None, feed)
        except Exception as e:
            raise InferenceError(f"{self._filename} forward pass failed: {e}") from e

    def close(self) -> None:
        self._session = None


__all__ = ["OnnxModel", "execution_providers"]
