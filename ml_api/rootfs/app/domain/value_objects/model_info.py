"""Model info value object.

Immutable data structure for ML model metadata.
"""

from dataclasses import dataclass
from datetime import datetime

SUPPORTED_TASKS = ("regression", "classification")


@dataclass(frozen=True)
class ModelInfo:
    """Information about a trained ML model.

    Attributes:
        model_id: Unique identifier for the model
        created_at: When the model was created
        training_samples: Number of samples used for training
        feature_names: Names of features used by the model (the feature contract)
        metrics: Training metrics (e.g., RMSE, R², accuracy)
        version: Model version string
        task: Learning task, "regression" or "classification"
    """

    model_id: str
    created_at: datetime
    training_samples: int
    feature_names: tuple[str, ...]
    metrics: dict[str, float]
    version: str = "1.0.0"
    task: str = "regression"

    def __post_init__(self) -> None:
        """Validate model info values."""
        if not self.model_id:
            raise ValueError("model_id cannot be empty")
        if self.training_samples < 1:
            raise ValueError(
                f"training_samples must be at least 1, got {self.training_samples}"
            )
        if not self.feature_names:
            raise ValueError("feature_names cannot be empty")
        if self.task not in SUPPORTED_TASKS:
            raise ValueError(
                f"task must be one of {', '.join(SUPPORTED_TASKS)}, got {self.task!r}"
            )

    @property
    def n_features(self) -> int:
        """Return the number of input features the model expects."""
        return len(self.feature_names)
