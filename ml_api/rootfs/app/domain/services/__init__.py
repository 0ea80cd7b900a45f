"""Domain services: model orchestration and synthetic training data."""

from .prediction_service import PredictionService
from .synthetic_data_generator import SyntheticDataGenerator

__all__ = [
    "PredictionService",
    "SyntheticDataGenerator",
]
