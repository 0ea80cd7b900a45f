"""Ports implemented by the infrastructure adapters.

Training, serving and storing models are reached only through these
abstractions, so the domain never imports XGBoost, pickle or Flask.
"""

from .ml_model_predictor import IMLModelPredictor
from .ml_model_trainer import IMLModelTrainer
from .model_storage import IModelStorage, ModelNotFoundError, StorageError

__all__ = [
    "IMLModelPredictor",
    "IMLModelTrainer",
    "IModelStorage",
    "ModelNotFoundError",
    "StorageError",
]
