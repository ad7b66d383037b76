"""Facial attribute domain types."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple, Union

import numpy as np

# Side length of the square model input (56x56 single channel)
INPUT_SIZE = 56
TENSOR_LENGTH = INPUT_SIZE * INPUT_SIZE

# Age bucket index -> label
AGE_LABELS = {
    0: "<18",
    1: "18-30",
    2: "30-50",
    3: "50+",
}
UNKNOWN_AGE = "Unknown"

# Expression model output order
EXPRESSION_LABELS = (
    "Angry",
    "Disgust",
    "Fear",
    "Happy",
    "Neutral",
    "Sad",
    "Surprise",
)

GENDER_THRESHOLD = 0.5


class ContourKind(str, Enum):
    """Named landmark groups returned by a face detector."""

    FACE = "face"
    LEFT_EYEBROW_TOP = "left_eyebrow_top"
    LEFT_EYEBROW_BOTTOM = "left_eyebrow_bottom"
    RIGHT_EYEBROW_TOP = "right_eyebrow_top"
    RIGHT_EYEBROW_BOTTOM = "right_eyebrow_bottom"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    UPPER_LIP_TOP = "upper_lip_top"
    UPPER_LIP_BOTTOM = "upper_lip_bottom"
    LOWER_LIP_TOP = "lower_lip_top"
    LOWER_LIP_BOTTOM = "lower_lip_bottom"
    NOSE_BRIDGE = "nose_bridge"
    NOSE_BOTTOM = "nose_bottom"
    LEFT_CHEEK = "left_cheek"
    RIGHT_CHEEK = "right_cheek"

    @classmethod
    def parse(cls, value: Union["ContourKind", str]) -> Union["ContourKind", str]:
        """Return the enum member for ``value``, or ``value`` itself if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return value


Point = Tuple[float, float]
ContourKey = Union[ContourKind, str]


@dataclass(frozen=True)
class DetectedFace:
    """A face region reported by the external detector.

    Attributes:
        bbox: Bounding box (left, top, right, bottom) in image pixels.
        contours: Ordered mapping of contour kind -> ordered (x, y) points.
            Kinds the detector reports but ``ContourKind`` does not know are
            kept as plain strings.
    """

    bbox: Tuple[float, float, float, float]
    contours: Mapping[ContourKey, Tuple[Point, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        left, top, right, bottom = self.bbox
        if right <= left or bottom <= top:
            raise ValueError(f"Invalid face bbox {self.bbox}: need right>left and bottom>top")
        contours = {
            ContourKind.parse(kind): tuple((float(x), float(y)) for x, y in points)
            for kind, points in self.contours.items()
        }
        object.__setattr__(self, "contours", contours)

    def contour(self, kind: ContourKind) -> Optional[Tuple[Point, ...]]:
        return self.contours.get(kind)


@dataclass(frozen=True)
class AttributeTensor:
    """Normalized 56x56 red-channel buffer shared by both models.

    Attributes:
        values: Read-only float32 array of 3136 values in [0, 1], row-major.
    """

    values: np.ndarray

    def __post_init__(self) -> None:
        values = np.ascontiguousarray(self.values, dtype=np.float32).reshape(-1)
        if values.size != TENSOR_LENGTH:
            raise ValueError(
                f"AttributeTensor needs {TENSOR_LENGTH} values, got {values.size}"
            )
        values.flags.writeable = False
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return TENSOR_LENGTH

    def as_input(self, shape=None) -> np.ndarray:
        """Reshape the buffer to a model input shape.

        Args:
            shape: Declared input shape of the model. Non-integer (dynamic)
                dimensions are treated as 1. Defaults to NHWC ``[1, 56, 56, 1]``.

        Returns:
            A float32 view over the shared buffer.
        """
        if shape is None:
            shape = (1, INPUT_SIZE, INPUT_SIZE, 1)
        dims = [d if isinstance(d, int) and d > 0 else 1 for d in shape]
        return self.values.reshape(dims)


def round_half_away_from_zero(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(frozen=True)
class AgeGenderResult:
    """Raw scores from the dual-head age/gender model."""

    gender_score: float
    age_score: float

    @property
    def gender_label(self) -> str:
        return "Female" if self.gender_score >= GENDER_THRESHOLD else "Male"

    @property
    def age_index(self) -> Optional[int]:
        if not math.isfinite(self.age_score):
            return None
        return round_half_away_from_zero(self.age_score)

    @property
    def age_label(self) -> str:
        return AGE_LABELS.get(self.age_index, UNKNOWN_AGE)


@dataclass(frozen=True)
class ExpressionResult:
    """Scores from the expression model, aligned with ``EXPRESSION_LABELS``."""

    scores: Tuple[float, ...]

    def __post_init__(self) -> None:
        scores = tuple(float(s) for s in self.scores)
        if len(scores) != len(EXPRESSION_LABELS):
            raise ValueError(
                f"Expected {len(EXPRESSION_LABELS)} expression scores, got {len(scores)}"
            )
        object.__setattr__(self, "scores", scores)

    @property
    def index(self) -> int:
        # np.argmax returns the first occurrence of the maximum
        return int(np.argmax(self.scores))

    @property
    def label(self) -> str:
        return EXPRESSION_LABELS[self.index]

    def as_dict(self):
        return dict(zip(EXPRESSION_LABELS, self.scores))


@dataclass(frozen=True)
class AttributeLabels:
    """Human-readable labels for one request."""

    age: str
    gender: str
    expression: str

    @property
    def age_gender_text(self) -> str:
        return f"Age: {self.age}\nGender: {self.gender}"

    @property
    def expression_text(self) -> str:
        return f"Expression: {self.expression}"


__all__ = [
    "INPUT_SIZE",
    "TENSOR_LENGTH",
    "AGE_LABELS",
    "UNKNOWN_AGE",
    "EXPRESSION_LABELS",
    "ContourKind",
    "DetectedFace",
    "AttributeTensor",
    "AgeGenderResult",
    "ExpressionResult",
    "AttributeLabels",
    "round_half_away_from_zero",
]
