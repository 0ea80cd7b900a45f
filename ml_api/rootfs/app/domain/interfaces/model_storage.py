"""Model store port.

A store keeps fitted model objects next to their ``ModelInfo`` and knows
which one is newest; that one is served when a request names no model.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from domain.value_objects import ModelInfo


class ModelNotFoundError(LookupError):
    """No model is stored under the requested id."""


class StorageError(Exception):
    """Stored files could not be written, read or removed."""


class IModelStorage(ABC):
    """Persistence for fitted models and their metadata."""

    @abstractmethod
    async def save_model(self, model_id: str, model: Any, info: ModelInfo) -> None:
        """Store ``model`` under ``model_id``, replacing any previous entry.

        Raises:
            StorageError: If the model cannot be written
        """

    @abstractmethod
    async def load_model(self, model_id: str) -> tuple[Any, ModelInfo]:
        """Return the stored model object and its metadata.

        Raises:
            ModelNotFoundError: If nothing is stored under ``model_id``
            StorageError: If the stored files cannot be read
        """

    @abstractmethod
    async def import_model_file(
        self, path: str | Path, model_id: str | None = None
    ) -> ModelInfo:
        """Store a model serialized elsewhere (pickle or joblib).

        The feature width is read from the fitted estimator, so only
        fitted models with a ``predict`` method are accepted.

        Raises:
            FileNotFoundError: If ``path`` does not exist
            StorageError: If the file is not a usable fitted model
        """

    @abstractmethod
    async def get_latest_model_id(self) -> str | None:
        """Return the id of the newest model, or None when the store is empty."""

    @abstractmethod
    async def list_models(self) -> list[ModelInfo]:
        """Return metadata for every stored model, newest first."""

    @abstractmethod
    async def load_feature_contract(self, model_id: str) -> tuple[str, ...]:
        """Return the feature names a model expects without loading the model.

        Raises:
            ModelNotFoundError: If nothing is stored under ``model_id``
            StorageError: If the stored contract cannot be read
        """

    @abstractmethod
    async def delete_model(self, model_id: str) -> None:
        """Remove a model and its metadata.

        Raises:
            ModelNotFoundError: If nothing is stored under ``model_id``
            StorageError: If the files cannot be removed
        """
