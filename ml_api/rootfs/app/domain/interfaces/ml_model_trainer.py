"""Trainer port."""

from abc import ABC, abstractmethod

from domain.value_objects import ModelInfo, TrainingData


class IMLModelTrainer(ABC):
    """Fits a model on labelled rows and stores it."""

    @abstractmethod
    async def train(
        self, training_data: TrainingData, task: str = "regression"
    ) -> ModelInfo:
        """Fit and persist a new model.

        Args:
            training_data: Feature rows with their labels
            task: One of ``SUPPORTED_TASKS``

        Returns:
            Metadata of the stored model, including validation metrics

        Raises:
            ValueError: If the task is unknown or the data cannot be used for it
        """

    @abstractmethod
    async def retrain(self, model_id: str, training_data: TrainingData) -> ModelInfo:
        """Fit a new model for the same task and feature width as ``model_id``.

        Raises:
            ModelNotFoundError: If ``model_id`` is not stored
            ValueError: If the feature width differs from the stored model's
        """
