"""Flask HTTP API.

Exposes the stored model behind ``POST /predict`` together with training,
status and model management routes under ``/api/v1``.
"""

import asyncio
import logging
import sys
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable

from flask import Flask, Response, jsonify, request

# Add app directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from application.services import MLApplicationService
from domain.value_objects import (
    SUPPORTED_TASKS,
    ModelInfo,
    PredictionRequest,
    TrainingData,
    TrainingDataPoint,
)
from infrastructure.adapters import (
    FeatureMismatchError,
    FileModelStorage,
    ModelNotFoundError,
    NoModelAvailableError,
    XGBoostPredictor,
    XGBoostTrainer,
)
from infrastructure.settings import ServerSettings

settings = ServerSettings.from_env()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
_LOGGER = logging.getLogger(__name__)

# Create Flask app
app = Flask(__name__)

# Initialize services
storage = FileModelStorage(settings.model_path)
trainer = XGBoostTrainer(storage)
predictor = XGBoostPredictor(storage)

ml_service = MLApplicationService(trainer, predictor, storage)


def async_route(f: Callable) -> Callable:
    """Decorator to run async functions in Flask routes.

    Uses asyncio.run() for proper event loop lifecycle management.
    """
    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))
    return wrapper


def _model_to_dict(model_info: ModelInfo) -> dict[str, Any]:
    return {
        "model_id": model_info.model_id,
        "created_at": model_info.created_at.isoformat(),
        "task": model_info.task,
        "training_samples": model_info.training_samples,
        "n_features": model_info.n_features,
        "metrics": model_info.metrics,
        "version": model_info.version,
    }


def _get_json_object() -> dict[str, Any] | None:
    """Return the JSON request body if it is an object, else None."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


@app.route("/health", methods=["GET"])
def health_check() -> Response:
    """Health check endpoint used by liveness and readiness probes."""
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
    })


@app.route("/api/v1/status", methods=["GET"])
@async_route
async def get_status() -> Response:
    """Readiness and a summary of the model currently served."""
    try:
        return jsonify(await ml_service.get_status())
    except Exception as e:
        _LOGGER.exception("Status check failed")
        return jsonify({"error": str(e)}), 500


@app.route("/predict", methods=["POST"])
@app.route("/api/v1/predict", methods=["POST"])
@async_route
async def predict() -> Response:
    """Run the model on the given features.

    Request body:
    {
        "features": [float, ...] | [[float, ...], ...],
        "model_id": str (optional - defaults to the latest model)
    }

    Response body:
    {
        "prediction": [...],
        "model_id": str,
        "timestamp": str (ISO format)
    }
    """
    data = _get_json_object()
    if data is None:
        return jsonify({"error": "No data provided"}), 400
    if "features" not in data:
        return jsonify({"error": "Missing required field: features"}), 400

    try:
        prediction_request = PredictionRequest.from_features(
            data["features"], model_id=data.get("model_id")
        )
    except ValueError as e:
        _LOGGER.warning("Invalid prediction request: %s", e)
        return jsonify({"error": f"Invalid data: {e}"}), 400

    try:
        if not await ml_service.is_ready():
            return jsonify({
                "error": "No trained model available. Train or import a model first.",
            }), 503

        result = await ml_service.predict(prediction_request)

        return jsonify({
            "prediction": result.to_list(),
            "model_id": result.model_id,
            "timestamp": result.timestamp.isoformat(),
        }), 200

    except FeatureMismatchError as e:
        _LOGGER.warning("Feature mismatch: %s", e)
        return jsonify({"error": f"Invalid data: {e}"}), 400
    except ModelNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except NoModelAvailableError as e:
        return jsonify({"error": str(e)}), 503
    except Exception as e:
        _LOGGER.exception("Error making prediction")
        return jsonify({"error": str(e)}), 500


@app.route("/api/v1/train", methods=["POST"])
@async_route
async def train_model() -> Response:
    """Train a model with provided data.

    Request body:
    {
        "task": "regression" | "classification" (optional, default: regression),
        "data_points": [
            {"features": [float, ...], "label": float},
            ...
        ]
    }
    """
    try:
        data = _get_json_object()
        if not data:
            return jsonify({"error": "No data provided"}), 400

        data_points_raw = data.get("data_points", [])
        if not data_points_raw:
            return jsonify({"error": "No data points provided"}), 400

        task = data.get("task", "regression")
        if task not in SUPPORTED_TASKS:
            return jsonify({
                "error": f"task must be one of {', '.join(SUPPORTED_TASKS)}"
            }), 400

        data_points = [
            TrainingDataPoint.from_raw(dp["features"], dp["label"])
            for dp in data_points_raw
        ]

        training_data = TrainingData.from_sequence(data_points)
        model_info = await ml_service.train_with_data(training_data, task)

        return jsonify({"success": True, **_model_to_dict(model_info)})

    except KeyError as e:
        return jsonify({"error": f"Missing required field: {e}"}), 400
    except (ValueError, TypeError) as e:
        _LOGGER.warning("Invalid training data: %s", e)
        return jsonify({"error": f"Invalid data: {e}"}), 400
    except Exception as e:
        _LOGGER.exception("Error training model")
        return jsonify({"error": str(e)}), 500


@app.route("/api/v1/train/synthetic", methods=["POST"])
@async_route
async def train_with_synthetic_data() -> Response:
    """Train a model with generated synthetic data.

    Request body (optional):
    {
        "num_samples": int (default: 100),
        "n_features": int (default: 3),
        "task": "regression" | "classification" (default: regression)
    }
    """
    try:
        data = _get_json_object() or {}
        try:
            num_samples = int(data.get("num_samples", 100))
            n_features = int(data.get("n_features", 3))
        except (TypeError, ValueError) as e:
            return jsonify({"error": f"Invalid data: {e}"}), 400
        task = data.get("task", "regression")

        if num_samples < 10:
            return jsonify({"error": "num_samples must be at least 10"}), 400
        if num_samples > 10000:
            return jsonify({"error": "num_samples must be at most 10000"}), 400
        if not 1 <= n_features <= 100:
            return jsonify({"error": "n_features must be between 1 and 100"}), 400
        if task not in SUPPORTED_TASKS:
            return jsonify({
                "error": f"task must be one of {', '.join(SUPPORTED_TASKS)}"
            }), 400

        model_info = await ml_service.train_with_synthetic_data(
            num_samples, n_features, task
        )

        return jsonify({"success": True, **_model_to_dict(model_info)})

    except ValueError as e:
        _LOGGER.warning("Synthetic training rejected: %s", e)
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        _LOGGER.exception("Error training with synthetic data")
        return jsonify({"error": str(e)}), 500


@app.route("/api/v1/models", methods=["GET"])
@async_route
async def list_models() -> Response:
    """Stored models, newest first."""
    try:
        models = [_model_to_dict(info) for info in await ml_service.list_models()]
    except Exception as e:
        _LOGGER.exception("Listing models failed")
        return jsonify({"error": str(e)}), 500
    return jsonify({"models": models, "count": len(models)})


@app.route("/api/v1/models/<model_id>", methods=["GET"])
@async_route
async def get_model(model_id: str) -> Response:
    """Metadata and feature contract of one model."""
    try:
        model_info = await ml_service.get_model_info(model_id)
    except Exception as e:
        _LOGGER.exception("Reading model %s failed", model_id)
        return jsonify({"error": str(e)}), 500

    if model_info is None:
        return jsonify({"error": f"Model not found: {model_id}"}), 404
    payload = _model_to_dict(model_info)
    payload["feature_names"] = list(model_info.feature_names)
    return jsonify(payload)


@app.route("/api/v1/models/<model_id>", methods=["DELETE"])
@async_route
async def delete_model(model_id: str) -> Response:
    """Remove a model; the newest remaining one is served afterwards."""
    try:
        await ml_service.delete_model(model_id)
    except ModelNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        _LOGGER.exception("Deleting model %s failed", model_id)
        return jsonify({"error": str(e)}), 500
    return jsonify({"success": True, "deleted_model_id": model_id})


def import_startup_model(model_file: Path | None) -> None:
    """Import the pre-trained model configured through MODEL_FILE, if any."""
    if model_file is None:
        return
    model_info = asyncio.run(ml_service.import_model(model_file))
    _LOGGER.info(
        "Serving pre-trained model %s (%d features)",
        model_info.model_id,
        model_info.n_features,
    )


def _wait_for_debugger(port: int = 5678) -> None:
    try:
        import debugpy

        debugpy.listen(("0.0.0.0", port))
        _LOGGER.info("Waiting for a debugger on port %d", port)
        debugpy.wait_for_client()
    except Exception as e:
        _LOGGER.warning("Remote debugging unavailable: %s", e)


def main() -> None:
    """Import the startup model, then serve the API."""
    if settings.debug_mode:
        _wait_for_debugger()

    import_startup_model(settings.model_file)

    _LOGGER.info("Starting ML API server on %s:%d", settings.host, settings.port)
    _LOGGER.info("Model storage path: %s", settings.model_path)

    app.run(host=settings.host, port=settings.port, debug=False)


if __name__ == "__main__":
    main()
