"""Model store on a local (or mounted) directory.

Layout of ``base_path``::

    models_index.json        {model_id: {"created_at": iso}}
    <id>.pkl                 pickled estimator
    <id>.json                ModelInfo as JSON
    <id>_features.json       feature contract checked before inference
"""

import json
import logging
import os
import pickle
import re
import tempfile
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import joblib
from domain.interfaces import IModelStorage, ModelNotFoundError, StorageError
from domain.value_objects import ModelInfo, default_feature_names

_LOGGER = logging.getLogger(__name__)

_MODEL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

__all__ = ["FileModelStorage", "ModelNotFoundError", "StorageError"]


def _is_valid_model_id(model_id: str) -> bool:
    """Ids become file names, so only plain names inside the store are allowed."""
    return (
        isinstance(model_id, str)
        and _MODEL_ID_PATTERN.match(model_id) is not None
        and ".." not in model_id
    )


def _info_to_dict(info: ModelInfo) -> dict[str, Any]:
    return {
        "model_id": info.model_id,
        "task": info.task,
        "created_at": info.created_at.isoformat(),
        "training_samples": info.training_samples,
        "feature_names": list(info.feature_names),
        "metrics": info.metrics,
        "version": info.version,
    }


def _info_from_dict(data: dict[str, Any]) -> ModelInfo:
    return ModelInfo(
        model_id=data["model_id"],
        created_at=datetime.fromisoformat(data["created_at"]),
        training_samples=data["training_samples"],
        feature_names=tuple(data["feature_names"]),
        metrics=data["metrics"],
        version=data.get("version", "1.0.0"),
        task=data.get("task", "regression"),
    )


def _write_json(path: Path, payload: Any) -> None:
    """Write ``payload`` to a sibling temp file, then swap it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_name, path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileModelStorage(IModelStorage):
    """IModelStorage backed by pickle and JSON files in one directory.

    Mount ``base_path`` on a volume to keep models across restarts. The
    index is shared by every request thread of the server, so updates to
    it are serialized by a lock.
    """

    INDEX_FILE_NAME = "models_index.json"

    def __init__(self, base_path: str | Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._index_lock = threading.Lock()

    @property
    def base_path(self) -> Path:
        """Directory holding the stored models."""
        return self._base_path

    @property
    def _index_path(self) -> Path:
        return self._base_path / self.INDEX_FILE_NAME

    def _paths(self, model_id: str) -> tuple[Path, Path, Path]:
        """Return the (model, metadata, feature contract) paths of a model.

        Raises:
            ModelNotFoundError: If ``model_id`` cannot name a file in the store
        """
        if not _is_valid_model_id(model_id):
            raise ModelNotFoundError(f"Model not found: {model_id}")
        return (
            self._base_path / f"{model_id}.pkl",
            self._base_path / f"{model_id}.json",
            self._base_path / f"{model_id}_features.json",
        )

    async def save_model(self, model_id: str, model: Any, info: ModelInfo) -> None:
        if not _is_valid_model_id(model_id):
            raise StorageError(
                f"Invalid model id {model_id!r}: use letters, digits, '_', '-' or '.'"
            )
        model_file, info_file, contract_file = self._paths(model_id)
        try:
            with open(model_file, "wb") as f:
                pickle.dump(model, f)
            _write_json(info_file, _info_to_dict(info))
            # Read on its own so the request width can be checked without unpickling
            _write_json(
                contract_file,
                {"model_id": model_id, "feature_names": list(info.feature_names)},
            )

            self._update_index(model_id, {"created_at": info.created_at.isoformat()})
        except (OSError, pickle.PickleError) as e:
            raise StorageError(f"Failed to save model {model_id}: {e}") from e

        _LOGGER.info(
            "Stored %s model %s (%d features)", info.task, model_id, info.n_features
        )

    async def load_model(self, model_id: str) -> tuple[Any, ModelInfo]:
        model_file, _, _ = self._paths(model_id)
        if not model_file.exists():
            raise ModelNotFoundError(f"Model not found: {model_id}")

        try:
            with open(model_file, "rb") as f:
                model = pickle.load(f)
        except (OSError, EOFError, pickle.UnpicklingError) as e:
            raise StorageError(f"Failed to load model {model_id}: {e}") from e
        info = self._read_info(model_id)

        _LOGGER.debug("Loaded model %s from %s", model_id, model_file)
        return model, info

    async def import_model_file(
        self, path: str | Path, model_id: str | None = None
    ) -> ModelInfo:
        """Store an estimator serialized with joblib or pickle.

        The feature contract comes from ``feature_names_in_`` when the
        estimator was fitted on a DataFrame, else from ``n_features_in_``.
        Estimators exposing ``classes_`` are recorded as classifiers.

        Args:
            path: Serialized model file
            model_id: Id to store it under; ``imported_<hex>`` when omitted

        Returns:
            Metadata of the stored model
        """
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"Model file not found: {source}")

        try:
            model = joblib.load(source)
        except Exception as e:
            raise StorageError(f"Failed to read model file {source}: {e}") from e

        if not callable(getattr(model, "predict", None)):
            raise StorageError(
                f"Object in {source} has no predict() method: {type(model).__name__}"
            )

        names = getattr(model, "feature_names_in_", None)
        if names is not None:
            feature_names = tuple(str(name) for name in names)
        else:
            width = int(getattr(model, "n_features_in_", 0) or 0)
            if width < 1:
                raise StorageError(
                    f"Cannot determine the number of input features of {source}; "
                    "the model must be fitted"
                )
            feature_names = default_feature_names(width)

        info = ModelInfo(
            model_id=model_id or f"imported_{uuid.uuid4().hex[:8]}",
            created_at=datetime.now(),
            training_samples=1,
            feature_names=feature_names,
            metrics={},
            task="classification" if hasattr(model, "classes_") else "regression",
        )
        await self.save_model(info.model_id, model, info)
        _LOGGER.info("Imported %s as %s", source, info.model_id)
        return info

    async def get_latest_model_id(self) -> str | None:
        index = self._load_index()
        if not index:
            return None
        return max(index, key=lambda mid: index[mid].get("created_at", ""))

    async def list_models(self) -> list[ModelInfo]:
        models = []
        for model_id in self._load_index():
            try:
                info = self._read_info(model_id)
            except (ModelNotFoundError, StorageError) as e:
                _LOGGER.warning("Skipping unreadable model %s: %s", model_id, e)
                continue
            models.append(info)
        models.sort(key=lambda info: info.created_at, reverse=True)
        return models

    async def load_feature_contract(self, model_id: str) -> tuple[str, ...]:
        """Return the feature names a model expects, without unpickling it.

        Raises:
            ModelNotFoundError: If neither the contract nor the metadata exists
            StorageError: If the file cannot be read
        """
        _, info_file, contract_file = self._paths(model_id)
        # Models stored without a contract file still carry it in their metadata
        source = contract_file if contract_file.exists() else info_file
        if not source.exists():
            raise ModelNotFoundError(f"Model not found: {model_id}")

        try:
            with open(source) as f:
                return tuple(json.load(f)["feature_names"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise StorageError(
                f"Failed to load feature contract for {model_id}: {e}"
            ) from e

    async def delete_model(self, model_id: str) -> None:
        model_file, info_file, contract_file = self._paths(model_id)
        if not model_file.exists():
            raise ModelNotFoundError(f"Model not found: {model_id}")

        try:
            for path in (model_file, info_file, contract_file):
                path.unlink(missing_ok=True)
            self._update_index(model_id, None)
        except OSError as e:
            raise StorageError(f"Failed to delete model {model_id}: {e}") from e

        _LOGGER.info("Deleted model %s", model_id)

    def _read_info(self, model_id: str) -> ModelInfo:
        _, info_file, _ = self._paths(model_id)
        try:
            with open(info_file) as f:
                return _info_from_dict(json.load(f))
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Failed to read metadata of model {model_id}: {e}"
            ) from e

    def _update_index(self, model_id: str, entry: dict[str, str] | None) -> None:
        """Set (or remove, when ``entry`` is None) one index entry under the lock."""
        with self._index_lock:
            index = self._load_index()
            if entry is None:
                index.pop(model_id, None)
            else:
                index[model_id] = entry
            _write_json(self._index_path, index)

    def _load_index(self) -> dict[str, dict[str, str]]:
        if not self._index_path.exists():
            return {}
        try:
            with open(self._index_path) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            _LOGGER.warning("Ignoring unreadable model index %s: %s", self._index_path, e)
            return {}
