"""Prediction request value object.

Immutable data structure for ML prediction inputs.
"""

from dataclasses import dataclass
from typing import Any, Sequence

from .training_data import as_finite_float


@dataclass(frozen=True)
class PredictionRequest:
    """Request for a model prediction.

    Attributes:
        instances: One row of feature values per instance to predict
        model_id: Optional model identifier (uses latest model if not specified)
    """

    instances: tuple[tuple[float, ...], ...]
    model_id: str | None = None

    def __post_init__(self) -> None:
        """Validate prediction request values."""
        if not self.instances:
            raise ValueError("features cannot be empty")
        width = len(self.instances[0])
        if width == 0:
            raise ValueError("features cannot be empty")
        for index, row in enumerate(self.instances):
            if len(row) != width:
                raise ValueError(
                    f"all feature rows must have {width} values, "
                    f"row {index} has {len(row)}"
                )

    @classmethod
    def from_features(
        cls,
        features: Sequence[Any],
        model_id: str | None = None,
    ) -> "PredictionRequest":
        """Create a request from the ``features`` field of a JSON body.

        A flat list of numbers is a single instance. A list of lists is
        a batch of instances.

        Args:
            features: Raw features from the request body
            model_id: Optional model identifier

        Returns:
            A validated PredictionRequest
        """
        if isinstance(features, (str, bytes)) or not isinstance(features, Sequence):
            raise ValueError(
                f"features must be a list of numbers, got {type(features).__name__}"
            )
        if not features:
            raise ValueError("features cannot be empty")

        if all(isinstance(item, (list, tuple)) for item in features):
            instances = tuple(
                tuple(
                    as_finite_float(value, f"feature [{i}][{j}]")
                    for j, value in enumerate(row)
                )
                for i, row in enumerate(features)
            )
        else:
            instances = (
                tuple(
                    as_finite_float(value, f"feature [{i}]")
                    for i, value in enumerate(features)
                ),
            )

        return cls(instances=instances, model_id=model_id)

    @property
    def n_instances(self) -> int:
        """Return the number of instances in the request."""
        return len(self.instances)

    @property
    def n_features(self) -> int:
        """Return the number of features per instance."""
        return len(self.instances[0])
