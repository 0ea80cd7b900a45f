"""Infrastructure adapters for ML operations.

These adapters implement domain interfaces using external libraries
like XGBoost, joblib, PyYAML and the file system.
"""

from .file_model_storage import FileModelStorage, ModelNotFoundError, StorageError
from .kubernetes_manifest_renderer import KubernetesManifestRenderer
from .project_scaffolder import ProjectScaffolder
from .xgboost_predictor import (
    FeatureMismatchError,
    NoModelAvailableError,
    XGBoostPredictor,
)
from .xgboost_trainer import XGBoostTrainer

__all__ = [
    "FeatureMismatchError",
    "FileModelStorage",
    "KubernetesManifestRenderer",
    "ModelNotFoundError",
    "NoModelAvailableError",
    "ProjectScaffolder",
    "StorageError",
    "XGBoostPredictor",
    "XGBoostTrainer",
]
