"""Prediction result value object.

Immutable data structure for ML prediction outputs.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PredictionResult:
    """Result of a model prediction.

    Attributes:
        prediction: One predicted value per requested instance
        model_id: Identifier of the model used for prediction
        timestamp: When the prediction was made
    """

    prediction: tuple[Any, ...]
    model_id: str
    timestamp: datetime

    def __post_init__(self) -> None:
        """Validate prediction result values."""
        if not self.prediction:
            raise ValueError("prediction cannot be empty")
        if not self.model_id:
            raise ValueError("model_id cannot be empty")

    def to_list(self) -> list[Any]:
        """Return the predictions as a JSON-friendly list."""
        return list(self.prediction)
