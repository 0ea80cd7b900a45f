"""Use cases of the ML API.

The Flask routes and the ``ml-api`` command line both go through
``MLApplicationService``; neither talks to adapters directly.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from domain.interfaces import IMLModelPredictor, IMLModelTrainer, IModelStorage
from domain.services import PredictionService, SyntheticDataGenerator
from domain.value_objects import (
    ModelInfo,
    PredictionRequest,
    PredictionResult,
    TrainingData,
)

_LOGGER = logging.getLogger(__name__)


def _summarize(info: ModelInfo) -> dict[str, Any]:
    return {
        "id": info.model_id,
        "created_at": info.created_at.isoformat(),
        "task": info.task,
        "n_features": info.n_features,
        "training_samples": info.training_samples,
        "metrics": info.metrics,
    }


class MLApplicationService:
    """Train, import, serve and manage models.

    Args:
        trainer: Fits and stores new models
        predictor: Serves stored models
        storage: Model store shared by trainer and predictor
        data_generator: Source for synthetic training data (seedless by default)
    """

    def __init__(
        self,
        trainer: IMLModelTrainer,
        predictor: IMLModelPredictor,
        storage: IModelStorage,
        data_generator: SyntheticDataGenerator | None = None,
    ) -> None:
        self._prediction_service = PredictionService(
            trainer=trainer, predictor=predictor, storage=storage
        )
        self._predictor = predictor
        self._storage = storage
        self._data_generator = data_generator or SyntheticDataGenerator()

    async def train_with_data(
        self, training_data: TrainingData, task: str = "regression"
    ) -> ModelInfo:
        """Fit a model on caller-supplied rows; it becomes the served model."""
        _LOGGER.info(
            "Training %s model on %d rows x %d features",
            task,
            training_data.size,
            training_data.n_features,
        )
        model_info = await self._prediction_service.train_model(training_data, task)
        _LOGGER.info("Trained %s, metrics: %s", model_info.model_id, model_info.metrics)
        return model_info

    async def train_with_synthetic_data(
        self,
        num_samples: int = 100,
        n_features: int = 3,
        task: str = "regression",
    ) -> ModelInfo:
        """Fit a model on generated data.

        Lets a fresh deployment answer ``/predict`` before a real model
        has been imported.
        """
        training_data = self._data_generator.generate(num_samples, n_features, task)
        return await self.train_with_data(training_data, task)

    async def import_model(
        self, path: str | Path, model_id: str | None = None
    ) -> ModelInfo:
        """Store a pre-trained pickle/joblib model so it serves predictions."""
        _LOGGER.info("Importing pre-trained model from %s", path)
        return await self._storage.import_model_file(path, model_id)

    async def predict(self, request: PredictionRequest) -> PredictionResult:
        _LOGGER.debug(
            "Predicting %d instance(s) of width %d with model %s",
            request.n_instances,
            request.n_features,
            request.model_id or "<latest>",
        )
        return await self._prediction_service.predict(request)

    async def is_ready(self) -> bool:
        return await self._prediction_service.is_ready()

    async def get_status(self) -> dict[str, Any]:
        """Readiness, number of stored models and a summary of the newest one."""
        ready = await self.is_ready()
        status: dict[str, Any] = {
            "ready": ready,
            "model_count": len(await self._storage.list_models()),
            "timestamp": datetime.now().isoformat(),
        }
        latest = await self._prediction_service.get_model_info() if ready else None
        if latest is not None:
            status["latest_model"] = _summarize(latest)
        return status

    async def get_model_info(self, model_id: str | None = None) -> ModelInfo | None:
        """Metadata of ``model_id`` (newest model when None), None if unknown."""
        return await self._prediction_service.get_model_info(model_id)

    async def list_models(self) -> list[ModelInfo]:
        return await self._storage.list_models()

    async def delete_model(self, model_id: str) -> None:
        """Delete a stored model and drop it from the predictor cache.

        Raises:
            ModelNotFoundError: If the model is not stored
        """
        await self._storage.delete_model(model_id)
        self._predictor.invalidate(model_id)
        _LOGGER.info("Model %s deleted", model_id)
