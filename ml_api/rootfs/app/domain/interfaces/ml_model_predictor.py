"""Predictor port.

Serves stored models behind the prediction endpoint.
"""

from abc import ABC, abstractmethod

from domain.value_objects import PredictionRequest, PredictionResult


class IMLModelPredictor(ABC):
    """Runs a stored model's ``predict`` on request instances."""

    @abstractmethod
    async def predict(self, request: PredictionRequest) -> PredictionResult:
        """Predict every instance of the request.

        ``request.model_id`` selects the model; the newest stored model is
        used when it is None.

        Raises:
            ModelNotFoundError: If the requested model is not stored
            NoModelAvailableError: If no model is stored at all
            FeatureMismatchError: If the instance width differs from the model's
        """

    @abstractmethod
    async def has_trained_model(self) -> bool:
        """Return True once at least one model can serve predictions."""

    def invalidate(self, model_id: str | None = None) -> None:
        """Forget any cached copy of ``model_id`` (all models when None).

        Predictors without a cache have nothing to do.
        """
