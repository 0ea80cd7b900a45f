"""Prediction service.

Domain service for orchestrating ML model training and predictions.
"""

import logging

from domain.interfaces import (
    IMLModelPredictor,
    IMLModelTrainer,
    IModelStorage,
    ModelNotFoundError,
)
from domain.value_objects import (
    ModelInfo,
    PredictionRequest,
    PredictionResult,
    TrainingData,
)

_LOGGER = logging.getLogger(__name__)


class PredictionService:
    """Service wrapping a model's train and predict calls.

    This service orchestrates training and prediction operations
    through the provided interfaces.
    """

    def __init__(
        self,
        trainer: IMLModelTrainer,
        predictor: IMLModelPredictor,
        storage: IModelStorage,
    ) -> None:
        """Initialize the prediction service.

        Args:
            trainer: ML model trainer implementation
            predictor: ML model predictor implementation
            storage: Model storage implementation
        """
        self._trainer = trainer
        self._predictor = predictor
        self._storage = storage

    async def train_model(
        self, training_data: TrainingData, task: str = "regression"
    ) -> ModelInfo:
        """Train a new model.

        Args:
            training_data: Training data with features and labels
            task: "regression" or "classification"

        Returns:
            Information about the trained model
        """
        return await self._trainer.train(training_data, task)

    async def predict(self, request: PredictionRequest) -> PredictionResult:
        """Run the model on the requested instances."""
        return await self._predictor.predict(request)

    async def is_ready(self) -> bool:
        """Check if the service is ready to make predictions.

        Returns:
            True if a trained model is available
        """
        return await self._predictor.has_trained_model()

    async def get_model_info(self, model_id: str | None = None) -> ModelInfo | None:
        """Get information about a model.

        Args:
            model_id: Model ID or None for latest

        Returns:
            Model information or None if not found

        Raises:
            StorageError: If the model exists but its files cannot be read
        """
        if model_id is None:
            model_id = await self._storage.get_latest_model_id()
            if model_id is None:
                return None

        try:
            _, info = await self._storage.load_model(model_id)
            return info
        except ModelNotFoundError as e:
            _LOGGER.debug("Model %s unavailable: %s", model_id, e)
            return None
