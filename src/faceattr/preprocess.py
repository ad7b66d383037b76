"""Image -> model input conversion.

Both models take the same input: the whole image resized to 56x56,
red channel only, scaled to [0, 1], row-major.
"""

import cv2
import numpy as np

from faceattr.types import INPUT_SIZE, AttributeTensor

# Index of the red channel in OpenCV BGR / BGRA arrays
RED_CHANNEL = 2


def red_channel(image: np.ndarray) -> np.ndarray:
    """Return the red plane of a BGR(A) or single-channel image."""
    if image.ndim == 2:
        return image
    if image.ndim != 3 or image.shape[2] not in (1, 3, 4):
        raise ValueError(f"Unsupported image shape {image.shape}")
    if image.shape[2] == 1:
        return image[:, :, 0]
    return image[:, :, RED_CHANNEL]


def resize_to_input(image: np.ndarray, size: int = INPUT_SIZE) -> np.ndarray:
    """Resize to ``size`` x ``size`` with a smooth filter.

    Area averaging when shrinking, bilinear when enlarging.
    """
    if image.ndim not in (2, 3) or image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Cannot resize image with shape {image.shape}")
    h, w = image.shape[:2]
    shrinking = h >= size and w >= size
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(image, (size, size), interpolation=interpolation)


def preprocess(image: np.ndarray) -> AttributeTensor:
    """Convert an image into the shared 3136-value attribute tensor.

    Args:
        image: uint8 BGR, BGRA or grayscale array (H, W[, C]).

    Returns:
        AttributeTensor with values in [0, 1], y outer / x inner.

    Raises:
        ValueError: Not a uint8 image, or an unsupported shape.
    """
    image = np.asarray(image)
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")
    plane = np.ascontiguousarray(red_channel(image))
    resized = resize_to_input(plane)
    values = resized.astype(np.float32) / 255.0
    return AttributeTensor(values.reshape(-1))


__all__ = ["preprocess", "red_channel", "resize_to_input"]
