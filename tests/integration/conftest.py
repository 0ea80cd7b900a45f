"""Pytest fixtures for integration tests.

This module provides fixtures for testing the Flask API against a real
model store in a temporary directory.
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator
from unittest.mock import patch

import pytest

from application.services import MLApplicationService
from domain.services import SyntheticDataGenerator
from domain.value_objects import ModelInfo
from infrastructure.adapters import (
    FileModelStorage,
    XGBoostPredictor,
    XGBoostTrainer,
)


@pytest.fixture
def temp_model_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for model storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def ml_service(temp_model_dir: Path) -> MLApplicationService:
    """Create an MLApplicationService backed by the temporary store."""
    storage = FileModelStorage(temp_model_dir)
    trainer = XGBoostTrainer(storage)
    predictor = XGBoostPredictor(storage)

    return MLApplicationService(
        trainer=trainer,
        predictor=predictor,
        storage=storage,
        data_generator=SyntheticDataGenerator(seed=42),
    )


@pytest.fixture
def flask_app(ml_service: MLApplicationService, temp_model_dir: Path) -> Any:
    """Create a Flask test app with the temporary service.

    This fixture patches the global ml_service in the server module.
    """
    # Patch the model path environment variable before importing server
    with patch.dict("os.environ", {"MODEL_PERSISTENCE_PATH": str(temp_model_dir)}):
        import infrastructure.api.server as server_module

        with patch.object(server_module, "ml_service", ml_service):
            app = server_module.app
            app.config["TESTING"] = True
            yield app


@pytest.fixture
def client(flask_app: Any) -> Any:
    """Create a Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def trained_model(ml_service: MLApplicationService) -> ModelInfo:
    """Train a three-feature regression model before the test runs."""
    return asyncio.run(ml_service.train_with_synthetic_data(num_samples=100, n_features=3))


@pytest.fixture
def sample_training_data() -> Dict[str, Any]:
    """Sample training data payload for API requests."""
    return {
        "data_points": [
            {
                "features": [float(i), float(i % 7), 0.5 * i],
                "label": 2.0 * i - (i % 7),
            }
            for i in range(50)
        ]
    }


@pytest.fixture
def sample_prediction_request() -> Dict[str, Any]:
    """Sample prediction request payload."""
    return {"features": [1.2, 3.4, 5.6]}
