"""Configuration classes for the attribute pipeline.

Example:
    >>> from faceattr.config import PipelineConfig, DetectorConfig
    >>>
    >>> config = PipelineConfig(
    ...     agender_model="agender_cnn_model.onnx",
    ...     expression_model="expression_cnn_model.onnx",
    ...     detector=DetectorConfig(name="insightface", kwargs={"det_thresh": 0.6}),
    ...     parallel=True,
    ... )
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from faceattr.backends.onnx_agender import DEFAULT_MODEL as DEFAULT_AGENDER_MODEL
from faceattr.backends.onnx_expression import DEFAULT_MODEL as DEFAULT_EXPRESSION_MODEL

DETECTORS = ("insightface", "static")


@dataclass
class DetectorConfig:
    """Configuration for the face detector.

    Attributes:
        name: Detector backend ("insightface" or "static").
        kwargs: Keyword arguments passed to the backend constructor
            (e.g. ``{"faces": "detections.yaml"}`` for "static").
    """

    name: str = "insightface"
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.name not in DETECTORS:
            raise ValueError(f"Unknown detector '{self.name}', expected one of {DETECTORS}")


@dataclass
class PipelineConfig:
    """Complete configuration for the attribute pipeline.

    Attributes:
        agender_model: Age/gender model file name.
        expression_model: Expression model file name.
        models_dir: Directory holding the models. None uses
            :func:`faceattr.paths.get_models_dir`.
        device: Inference device ("cpu", "cuda:0").
        parallel: Run both models concurrently.
        inference_timeout_sec: Upper bound for both model calls together
            (0 disables).
        detector: Face detector configuration.
    """

    agender_model: str = DEFAULT_AGENDER_MODEL
    expression_model: str = DEFAULT_EXPRESSION_MODEL
    models_dir: Optional[str] = None
    device: str = "cpu"
    parallel: bool = True
    inference_timeout_sec: float = 10.0
    detector: DetectorConfig = field(default_factory=DetectorConfig)

    def __post_init__(self) -> None:
        if self.inference_timeout_sec < 0:
            raise ValueError("inference_timeout_sec must be >= 0")

    @property
    def models_path(self) -> Optional[Path]:
        return Path(self.models_dir).expanduser() if self.models_dir else None

    @property
    def timeout(self) -> Optional[float]:
        return self.inference_timeout_sec or None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Unknown keys raise ``TypeError``.
        """
        data = dict(data or {})
        detector_data = data.pop("detector", None)
        if isinstance(detector_data, str):
            detector = DetectorConfig(name=detector_data)
        elif detector_data:
            detector = DetectorConfig(
                name=detector_data.get("name", "insightface"),
                kwargs=dict(detector_data.get("kwargs") or {}),
            )
        else:
            detector = DetectorConfig()
        return cls(detector=detector, **data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PipelineConfig":
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config {path} must be a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agender_model": self.agender_model,
            "expression_model": self.expression_model,
            "models_dir": self.models_dir,
            "device": self.device,
            "parallel": self.parallel,
            "inference_timeout_sec": self.inference_timeout_sec,
            "detector": {"name": self.detector.name, "kwargs": dict(self.detector.kwargs)},
        }


__all__ = ["DetectorConfig", "PipelineConfig"]
