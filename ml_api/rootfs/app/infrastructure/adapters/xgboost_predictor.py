"""XGBoost predictor adapter.

Infrastructure adapter that implements IMLModelPredictor for models held
in storage. Models trained here are XGBoost estimators, but any imported
object exposing a scikit-learn style ``predict`` is served the same way.
"""

import logging
from datetime import datetime
from typing import Any

import numpy as np
from domain.interfaces import IMLModelPredictor, IModelStorage
from domain.value_objects import ModelInfo, PredictionRequest, PredictionResult

_LOGGER = logging.getLogger(__name__)


class FeatureMismatchError(ValueError):
    """Raised when a request does not match the model's feature contract."""

    pass


class NoModelAvailableError(LookupError):
    """Raised when a prediction is requested before any model exists."""

    pass


class XGBoostPredictor(IMLModelPredictor):
    """Predictor with feature contract enforcement.

    The most recently used model is cached so repeated requests do not
    unpickle it again.
    """

    def __init__(self, storage: IModelStorage) -> None:
        """Initialize the predictor.

        Args:
            storage: Model storage implementation
        """
        self._storage = storage
        # Cache holds: model_id, model, model_info
        self._cached_model: tuple[str, Any, ModelInfo] | None = None

    async def predict(self, request: PredictionRequest) -> PredictionResult:
        """Make a prediction for every instance in the request.

        Args:
            request: Prediction request with input features

        Returns:
            PredictionResult with one predicted value per instance
        """
        model_id = request.model_id
        if model_id is None:
            model_id = await self._storage.get_latest_model_id()
            if model_id is None:
                raise NoModelAvailableError("No trained model available")

        # Checked before the model is unpickled
        expected = len(await self._get_feature_contract(model_id))
        if request.n_features != expected:
            raise FeatureMismatchError(
                f"Model {model_id} expects {expected} features, "
                f"got {request.n_features}"
            )

        model, _ = await self._get_model(model_id)

        features = np.array(request.instances, dtype=float)
        prediction = tuple(np.asarray(model.predict(features)).tolist())

        _LOGGER.debug(
            "Model %s predicted %d instance(s)", model_id, request.n_instances
        )

        return PredictionResult(
            prediction=prediction,
            model_id=model_id,
            timestamp=datetime.now(),
        )

    async def has_trained_model(self) -> bool:
        """Check if a trained model is available.

        Returns:
            True if at least one trained model exists
        """
        latest_id = await self._storage.get_latest_model_id()
        return latest_id is not None

    def invalidate(self, model_id: str | None = None) -> None:
        """Drop the cached model (only if it matches ``model_id`` when given)."""
        if self._cached_model is None:
            return
        if model_id is None or self._cached_model[0] == model_id:
            self._cached_model = None

    async def _get_feature_contract(self, model_id: str) -> tuple[str, ...]:
        if self._cached_model is not None and self._cached_model[0] == model_id:
            return self._cached_model[2].feature_names
        return await self._storage.load_feature_contract(model_id)

    async def _get_model(self, model_id: str) -> tuple[Any, ModelInfo]:
        """Get model and metadata from cache or load from storage.

        Args:
            model_id: Model identifier

        Returns:
            Tuple of (model, model_info)
        """
        if self._cached_model is not None and self._cached_model[0] == model_id:
            return self._cached_model[1], self._cached_model[2]

        model, model_info = await self._storage.load_model(model_id)
        self._cached_model = (model_id, model, model_info)

        _LOGGER.debug(
            "Loaded model %s with %d features: %s",
            model_id,
            model_info.n_features,
            model_info.feature_names,
        )

        return model, model_info
