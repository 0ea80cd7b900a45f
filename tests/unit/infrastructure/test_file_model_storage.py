"""Tests for the file-based model storage adapter."""

import asyncio
import json
import pickle
import threading
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import joblib
import numpy as np
import pytest
from sklearn.linear_model import LinearRegression, LogisticRegression

from domain.value_objects import ModelInfo
from infrastructure.adapters import FileModelStorage, ModelNotFoundError, StorageError


def _info(model_id: str, created_at: datetime, n_features: int = 2) -> ModelInfo:
    return ModelInfo(
        model_id=model_id,
        created_at=created_at,
        training_samples=20,
        feature_names=tuple(f"feature_{i}" for i in range(n_features)),
        metrics={"rmse": 0.5},
    )


class TestFileModelStorage:
    """Tests for FileModelStorage."""

    @pytest.fixture
    def storage(self, tmp_path: Path) -> FileModelStorage:
        """Create a storage rooted in a temporary directory."""
        return FileModelStorage(tmp_path / "models")

    @pytest.mark.asyncio
    async def test_save_and_load_round_trip(self, storage: FileModelStorage) -> None:
        """Test that a saved model and its metadata can be loaded back."""
        created = datetime(2024, 1, 15, 10, 30)
        await storage.save_model("m1", {"weights": [1, 2]}, _info("m1", created))

        model, info = await storage.load_model("m1")

        assert model == {"weights": [1, 2]}
        assert info.model_id == "m1"
        assert info.created_at == created
        assert info.feature_names == ("feature_0", "feature_1")
        assert info.task == "regression"

    @pytest.mark.asyncio
    async def test_save_writes_model_metadata_and_contract(
        self, storage: FileModelStorage
    ) -> None:
        """Test the files written for a model."""
        await storage.save_model("m1", object(), _info("m1", datetime.now()))

        assert (storage.base_path / "m1.pkl").exists()
        assert (storage.base_path / "m1.json").exists()
        assert (storage.base_path / "m1_features.json").exists()
        index = json.loads((storage.base_path / "models_index.json").read_text())
        assert list(index) == ["m1"]

    @pytest.mark.asyncio
    async def test_latest_and_list_are_ordered_by_creation(
        self, storage: FileModelStorage
    ) -> None:
        """Test that the newest model is reported as latest and listed first."""
        now = datetime.now()
        await storage.save_model("new", 1, _info("new", now))
        await storage.save_model("old", 2, _info("old", now - timedelta(hours=1)))

        assert await storage.get_latest_model_id() == "new"
        models = await storage.list_models()
        assert [m.model_id for m in models] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_empty_storage_has_no_latest_model(self, storage: FileModelStorage) -> None:
        """Test that an empty store has no latest model."""
        assert await storage.get_latest_model_id() is None
        assert await storage.list_models() == []

    @pytest.mark.asyncio
    async def test_load_missing_model_raises_error(self, storage: FileModelStorage) -> None:
        """Test that loading an unknown model raises ModelNotFoundError."""
        with pytest.raises(ModelNotFoundError):
            await storage.load_model("missing")

    @pytest.mark.asyncio
    async def test_delete_removes_files_and_index_entry(
        self, storage: FileModelStorage
    ) -> None:
        """Test that deleting a model removes it completely."""
        await storage.save_model("m1", 1, _info("m1", datetime.now()))

        await storage.delete_model("m1")

        assert not list(storage.base_path.glob("m1*"))
        assert await storage.get_latest_model_id() is None
        with pytest.raises(ModelNotFoundError):
            await storage.delete_model("m1")

    @pytest.mark.asyncio
    async def test_load_feature_contract(self, storage: FileModelStorage) -> None:
        """Test reading the feature contract without unpickling the model."""
        await storage.save_model("m1", 1, _info("m1", datetime.now(), n_features=4))

        contract = await storage.load_feature_contract("m1")

        assert contract == ("feature_0", "feature_1", "feature_2", "feature_3")
        with pytest.raises(ModelNotFoundError):
            await storage.load_feature_contract("missing")

    @pytest.mark.asyncio
    async def test_corrupt_index_is_treated_as_empty(self, storage: FileModelStorage) -> None:
        """Test that an unreadable index does not break listing."""
        (storage.base_path / "models_index.json").write_text("{not json")

        assert await storage.list_models() == []

    def test_concurrent_saves_keep_every_index_entry(
        self, storage: FileModelStorage
    ) -> None:
        """Test that models saved from parallel request threads are all indexed."""
        start = threading.Barrier(8)
        errors: list[Exception] = []

        def save(n: int) -> None:
            model_id = f"m{n}"
            start.wait()
            try:
                asyncio.run(
                    storage.save_model(model_id, n, _info(model_id, datetime.now()))
                )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=save, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        index = json.loads((storage.base_path / "models_index.json").read_text())
        assert sorted(index) == sorted(f"m{n}" for n in range(8))
        assert len(asyncio.run(storage.list_models())) == 8
        assert not list(storage.base_path.glob(".models_index.json.*"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "model_id", ["../outside/evil", "..", "a/b", "", "m1\\x", "/etc/passwd"]
    )
    async def test_ids_outside_the_store_are_not_found(
        self, storage: FileModelStorage, tmp_path: Path, model_id: str
    ) -> None:
        """Test that ids naming paths outside the store never reach pickle."""
        outside = tmp_path / "outside"
        outside.mkdir()
        with open(outside / "evil.pkl", "wb") as f:
            pickle.dump({"planted": True}, f)

        with pytest.raises(ModelNotFoundError):
            await storage.load_model(model_id)
        with pytest.raises(ModelNotFoundError):
            await storage.load_feature_contract(model_id)
        with pytest.raises(ModelNotFoundError):
            await storage.delete_model(model_id)
        assert (outside / "evil.pkl").exists()

    @pytest.mark.asyncio
    async def test_save_rejects_unsafe_model_id(self, storage: FileModelStorage) -> None:
        """Test that a model cannot be written under a path-like id."""
        with pytest.raises(StorageError, match="Invalid model id"):
            await storage.save_model(
                "../escape", 1, _info("../escape", datetime.now())
            )
        assert await storage.list_models() == []

    @pytest.mark.asyncio
    async def test_list_models_reads_metadata_only(
        self, storage: FileModelStorage
    ) -> None:
        """Test that listing does not unpickle stored models."""
        await storage.save_model("m1", 1, _info("m1", datetime.now()))
        (storage.base_path / "m1.pkl").write_bytes(b"corrupt")

        with patch("pickle.load", side_effect=AssertionError("unpickled")):
            models = await storage.list_models()

        assert [m.model_id for m in models] == ["m1"]

    @pytest.mark.asyncio
    async def test_list_models_skips_unreadable_metadata(
        self, storage: FileModelStorage
    ) -> None:
        """Test that a model with corrupt metadata is left out of the listing."""
        now = datetime.now()
        await storage.save_model("good", 1, _info("good", now))
        await storage.save_model("bad", 2, _info("bad", now))
        (storage.base_path / "bad.json").write_text("{not json")

        models = await storage.list_models()

        assert [m.model_id for m in models] == ["good"]
        with pytest.raises(StorageError):
            await storage.load_model("bad")


class TestImportModelFile:
    """Tests for importing externally trained models."""

    @pytest.fixture
    def storage(self, tmp_path: Path) -> FileModelStorage:
        """Create a storage rooted in a temporary directory."""
        return FileModelStorage(tmp_path / "models")

    @pytest.mark.asyncio
    async def test_import_fitted_regressor(
        self, storage: FileModelStorage, tmp_path: Path
    ) -> None:
        """Test importing a joblib-serialized scikit-learn regressor."""
        X = np.array([[0.0, 1.0], [1.0, 0.0], [2.0, 1.0], [3.0, 2.0]])
        model = LinearRegression().fit(X, X.sum(axis=1))
        path = tmp_path / "model.pkl"
        joblib.dump(model, path)

        info = await storage.import_model_file(path)

        assert info.model_id.startswith("imported_")
        assert info.task == "regression"
        assert info.n_features == 2
        assert await storage.get_latest_model_id() == info.model_id
        loaded, _ = await storage.load_model(info.model_id)
        assert loaded.predict([[1.0, 1.0]])[0] == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_import_classifier_with_explicit_id(
        self, storage: FileModelStorage, tmp_path: Path
    ) -> None:
        """Test that classifiers are detected from their classes_ attribute."""
        X = np.array([[0.0], [1.0], [2.0], [3.0]])
        model = LogisticRegression().fit(X, [0, 0, 1, 1])
        path = tmp_path / "classifier.joblib"
        joblib.dump(model, path)

        info = await storage.import_model_file(path, model_id="churn")

        assert info.model_id == "churn"
        assert info.task == "classification"
        assert info.feature_names == ("feature_0",)

    @pytest.mark.asyncio
    async def test_import_unfitted_model_raises_error(
        self, storage: FileModelStorage, tmp_path: Path
    ) -> None:
        """Test that a model without a known input width is rejected."""
        path = tmp_path / "unfitted.pkl"
        joblib.dump(LinearRegression(), path)

        with pytest.raises(StorageError, match="must be fitted"):
            await storage.import_model_file(path)

    @pytest.mark.asyncio
    async def test_import_object_without_predict_raises_error(
        self, storage: FileModelStorage, tmp_path: Path
    ) -> None:
        """Test that arbitrary pickled objects are rejected."""
        path = tmp_path / "data.pkl"
        joblib.dump({"not": "a model"}, path)

        with pytest.raises(StorageError, match="no predict"):
            await storage.import_model_file(path)

    @pytest.mark.asyncio
    async def test_import_missing_file_raises_error(
        self, storage: FileModelStorage, tmp_path: Path
    ) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            await storage.import_model_file(tmp_path / "nope.pkl")
