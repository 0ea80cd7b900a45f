"""Training data value objects.

Immutable data structures for ML training inputs.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Sequence


def default_feature_names(n_features: int) -> tuple[str, ...]:
    """Build positional feature names ``feature_0`` .. ``feature_{n-1}``.

    Args:
        n_features: Number of features

    Returns:
        Tuple of feature names
    """
    return tuple(f"feature_{i}" for i in range(n_features))


def as_finite_float(value: Any, name: str) -> float:
    """Convert a single JSON value to a finite float.

    Args:
        value: Raw value from a request body
        name: Human-readable location used in error messages

    Returns:
        The value as a float

    Raises:
        ValueError: If the value is not a finite real number
    """
    # bool is a subclass of int; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class TrainingDataPoint:
    """A single labelled training example.

    Attributes:
        features: Input feature values
        label: Target value (a class index for classification)
    """

    features: tuple[float, ...]
    label: float

    def __post_init__(self) -> None:
        """Validate data point values."""
        if not self.features:
            raise ValueError("features cannot be empty")
        for value in self.features:
            if not math.isfinite(value):
                raise ValueError(f"features must be finite, got {value}")
        if not math.isfinite(self.label):
            raise ValueError(f"label must be finite, got {self.label}")

    @classmethod
    def from_raw(cls, features: Any, label: Any) -> "TrainingDataPoint":
        """Create a data point from one ``data_points`` entry of a JSON body.

        Raises:
            ValueError: If features is not a list of numbers or label is not a number
        """
        if isinstance(features, (str, bytes)) or not isinstance(features, Sequence):
            raise ValueError(
                f"features must be a list of numbers, got {type(features).__name__}"
            )
        return cls(
            features=tuple(
                as_finite_float(value, f"feature [{i}]")
                for i, value in enumerate(features)
            ),
            label=as_finite_float(label, "label"),
        )


@dataclass(frozen=True)
class TrainingData:
    """Collection of training data points for model training.

    Attributes:
        data_points: Sequence of training data points
        model_id: Optional model identifier for updates
    """

    data_points: tuple[TrainingDataPoint, ...]
    model_id: str | None = None

    def __post_init__(self) -> None:
        """Validate training data."""
        if not self.data_points:
            raise ValueError("Training data must contain at least one data point")
        width = len(self.data_points[0].features)
        for index, dp in enumerate(self.data_points):
            if len(dp.features) != width:
                raise ValueError(
                    f"All data points must have {width} features, "
                    f"data point {index} has {len(dp.features)}"
                )

    @classmethod
    def from_sequence(
        cls,
        data_points: Sequence[TrainingDataPoint],
        model_id: str | None = None,
    ) -> "TrainingData":
        """Create TrainingData from a sequence of data points."""
        return cls(data_points=tuple(data_points), model_id=model_id)

    @property
    def size(self) -> int:
        """Return the number of data points."""
        return len(self.data_points)

    @property
    def n_features(self) -> int:
        """Return the number of features per data point."""
        return len(self.data_points[0].features)
