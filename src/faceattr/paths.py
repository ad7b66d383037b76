"""Where faceattr keeps its model files.

Lookups are pure: they only compute paths. Callers that write into a
directory (model downloads) create it with :func:`ensure_dir`.

Environment overrides:
    FACEATTR_HOME        base directory (default ``~/.faceattr``)
    FACEATTR_MODELS_DIR  models directory (default ``{home}/models``)
"""

import os
from pathlib import Path
from typing import Optional

HOME_ENV = "FACEATTR_HOME"
MODELS_DIR_ENV = "FACEATTR_MODELS_DIR"


def _env_path(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    if not value:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else Path.cwd() / path


def get_home_dir() -> Path:
    return _env_path(HOME_ENV) or Path.home() / ".faceattr"


def get_models_dir() -> Path:
    """Directory searched for ONNX models and InsightFace packs."""
    return _env_path(MODELS_DIR_ENV) or get_home_dir() / "models"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


__all__ = ["get_home_dir", "get_models_dir", "ensure_dir"]
