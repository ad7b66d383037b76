"""Exception types for the attribute pipeline."""


class FaceAttrError(Exception):
    """Base class for faceattr errors."""


class ModelLoadError(FaceAttrError):
    """A model file could not be opened or loaded.

    Fatal for the lifetime of the backend that raised it.
    """


class InferenceError(FaceAttrError):
    """A loaded model failed during a forward pass."""


class DetectionError(FaceAttrError):
    """The external face detector reported a failure."""


__all__ = ["FaceAttrError", "ModelLoadError", "InferenceError", "DetectionError"]
