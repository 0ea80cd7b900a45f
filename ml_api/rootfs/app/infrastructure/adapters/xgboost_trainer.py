"""XGBoost trainer adapter.

Infrastructure adapter that implements IMLModelTrainer using XGBoost.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

import numpy as np
import xgboost as xgb
from domain.interfaces import IMLModelTrainer, IModelStorage
from domain.value_objects import (
    SUPPORTED_TASKS,
    ModelInfo,
    TrainingData,
    default_feature_names,
)
from sklearn.metrics import accuracy_score, mean_squared_error, r2_score
from sklearn.model_selection import train_test_split

_LOGGER = logging.getLogger(__name__)


class XGBoostTrainer(IMLModelTrainer):
    """XGBoost implementation of ML model trainer.

    Trains an ``XGBRegressor`` for regression tasks and an
    ``XGBClassifier`` for classification tasks, evaluates it on a
    held-out split and persists it through the storage adapter.
    """

    MIN_TRAINING_SAMPLES = 10
    VALIDATION_FRACTION = 0.2

    def __init__(
        self,
        storage: IModelStorage,
        hyperparams: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the XGBoost trainer.

        Args:
            storage: Model storage implementation
            hyperparams: XGBoost hyperparameters (optional)
        """
        self._storage = storage
        self._hyperparams = hyperparams or self._default_hyperparams()

    @staticmethod
    def _default_hyperparams() -> dict[str, Any]:
        """Get default XGBoost hyperparameters."""
        return {
            "max_depth": 6,
            "learning_rate": 0.1,
            "n_estimators": 100,
            "min_child_weight": 1,
            "subsample": 0.8,
            "colsample_bytree": 0.8,
            "random_state": 42,
        }

    async def train(
        self, training_data: TrainingData, task: str = "regression"
    ) -> ModelInfo:
        """Train a new XGBoost model.

        Args:
            training_data: Training data containing features and labels
            task: "regression" or "classification"

        Returns:
            ModelInfo with details about the trained model
        """
        if task not in SUPPORTED_TASKS:
            raise ValueError(f"Unknown task: {task}")
        if training_data.size < self.MIN_TRAINING_SAMPLES:
            raise ValueError(
                f"At least {self.MIN_TRAINING_SAMPLES} data points are required "
                f"for training, got {training_data.size}"
            )

        model_id = f"xgb_{uuid.uuid4().hex[:8]}"
        _LOGGER.info(
            "Training new XGBoost %s model: %s (%d samples, %d features)",
            task,
            model_id,
            training_data.size,
            training_data.n_features,
        )

        X, y = self._prepare_data(training_data)

        if task == "classification":
            model, metrics = self._fit_classifier(X, y)
        else:
            model, metrics = self._fit_regressor(X, y)

        _LOGGER.info("Model %s trained with metrics: %s", model_id, metrics)

        model_info = ModelInfo(
            model_id=model_id,
            created_at=datetime.now(),
            training_samples=training_data.size,
            feature_names=default_feature_names(training_data.n_features),
            metrics=metrics,
            task=task,
        )

        await self._storage.save_model(model_id, model, model_info)

        return model_info

    async def retrain(
        self,
        model_id: str,
        training_data: TrainingData,
    ) -> ModelInfo:
        """Retrain an existing model with new data.

        For XGBoost, a new model is trained for the same task; the
        existing one is left in storage.

        Args:
            model_id: Identifier of the model to retrain
            training_data: New training data

        Returns:
            ModelInfo with details about the retrained model
        """
        _LOGGER.info("Retraining model %s with %d new samples", model_id, training_data.size)

        _, existing = await self._storage.load_model(model_id)
        if existing.n_features != training_data.n_features:
            raise ValueError(
                f"Model {model_id} expects {existing.n_features} features, "
                f"training data has {training_data.n_features}"
            )

        return await self.train(training_data, existing.task)

    def _fit_regressor(
        self, X: np.ndarray, y: np.ndarray
    ) -> tuple[xgb.XGBRegressor, dict[str, float]]:
        X_train, X_val, y_train, y_val = train_test_split(
            X, y, test_size=self.VALIDATION_FRACTION, random_state=42
        )

        model = xgb.XGBRegressor(objective="reg:squarederror", **self._hyperparams)
        model.fit(X_train, y_train, eval_set=[(X_val, y_val)], verbose=False)

        y_pred = model.predict(X_val)
        metrics = {
            "rmse": float(np.sqrt(mean_squared_error(y_val, y_pred))),
            "r2": float(r2_score(y_val, y_pred)),
            "training_samples": len(X_train),
            "validation_samples": len(X_val),
        }
        return model, metrics

    def _fit_classifier(
        self, X: np.ndarray, y: np.ndarray
    ) -> tuple[xgb.XGBClassifier, dict[str, float]]:
        labels = self._check_class_labels(y)

        X_train, X_val, y_train, y_val = train_test_split(
            X,
            labels,
            test_size=self.VALIDATION_FRACTION,
            random_state=42,
            stratify=labels,
        )

        model = xgb.XGBClassifier(**self._hyperparams)
        model.fit(X_train, y_train, eval_set=[(X_val, y_val)], verbose=False)

        y_pred = model.predict(X_val)
        metrics = {
            "accuracy": float(accuracy_score(y_val, y_pred)),
            "n_classes": int(len(np.unique(labels))),
            "training_samples": len(X_train),
            "validation_samples": len(X_val),
        }
        return model, metrics

    @staticmethod
    def _check_class_labels(y: np.ndarray) -> np.ndarray:
        """Validate classification labels and return them as integers.

        Labels must be whole numbers forming the range ``0 .. k-1`` with
        k >= 2, and every class needs at least two examples so the
        validation split can be stratified.
        """
        if not np.all(np.equal(np.mod(y, 1), 0)):
            raise ValueError("Classification labels must be whole numbers")

        labels = y.astype(int)
        classes, counts = np.unique(labels, return_counts=True)
        if len(classes) < 2:
            raise ValueError("Classification requires at least two distinct labels")
        if not np.array_equal(classes, np.arange(len(classes))):
            raise ValueError(
                f"Classification labels must be consecutive integers starting at 0, "
                f"got {classes.tolist()}"
            )
        if counts.min() < 2:
            raise ValueError("Every class needs at least two data points")
        return labels

    def _prepare_data(self, training_data: TrainingData) -> tuple[np.ndarray, np.ndarray]:
        """Convert training data to (features, labels) numpy arrays."""
        features = [dp.features for dp in training_data.data_points]
        labels = [dp.label for dp in training_data.data_points]
        return np.array(features, dtype=float), np.array(labels, dtype=float)
