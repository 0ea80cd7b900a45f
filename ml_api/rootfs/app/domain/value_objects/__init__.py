"""Immutable, self-validating inputs and outputs of the ML API.

Requests, results, training rows, model metadata and the deployment
settings used to render Kubernetes manifests.
"""

from .deployment_config import DEFAULT_CONTAINER_PORTS, DeploymentConfig
from .model_info import SUPPORTED_TASKS, ModelInfo
from .prediction_request import PredictionRequest
from .prediction_result import PredictionResult
from .training_data import TrainingData, TrainingDataPoint, default_feature_names

__all__ = [
    "DEFAULT_CONTAINER_PORTS",
    "DeploymentConfig",
    "ModelInfo",
    "PredictionRequest",
    "PredictionResult",
    "SUPPORTED_TASKS",
    "TrainingData",
    "TrainingDataPoint",
    "default_feature_names",
]
