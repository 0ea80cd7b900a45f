"""Command line interface for the ML API service.

Subcommands:

- ``serve``: run the HTTP API
- ``train``: train a model on synthetic data or a CSV file
- ``import-model``: register a pre-trained model file
- ``scaffold``: create a new ML API project skeleton
- ``render-manifests``: write Kubernetes manifests and a Dockerfile
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import numpy as np

from application.services import MLApplicationService
from domain.value_objects import (
    SUPPORTED_TASKS,
    DeploymentConfig,
    ModelInfo,
    TrainingData,
    TrainingDataPoint,
)
from infrastructure.adapters import (
    FileModelStorage,
    KubernetesManifestRenderer,
    ProjectScaffolder,
    StorageError,
    XGBoostPredictor,
    XGBoostTrainer,
)
from infrastructure.settings import ServerSettings

_LOGGER = logging.getLogger(__name__)


def _build_service(model_path: Path) -> MLApplicationService:
    storage = FileModelStorage(model_path)
    return MLApplicationService(
        XGBoostTrainer(storage), XGBoostPredictor(storage), storage
    )


def _model_summary(model_info: ModelInfo) -> dict:
    return {
        "model_id": model_info.model_id,
        "task": model_info.task,
        "created_at": model_info.created_at.isoformat(),
        "training_samples": model_info.training_samples,
        "feature_names": list(model_info.feature_names),
        "metrics": model_info.metrics,
    }


def load_csv_training_data(path: Path, header: bool = True) -> TrainingData:
    """Load a numeric CSV file whose last column is the label.

    Args:
        path: CSV file path
        header: Whether the first row is a header to skip

    Returns:
        TrainingData built from the rows
    """
    table = np.loadtxt(path, delimiter=",", skiprows=1 if header else 0, ndmin=2)
    if table.shape[1] < 2:
        raise ValueError(
            f"{path} must have at least one feature column and one label column"
        )
    return TrainingData.from_sequence([
        TrainingDataPoint(features=tuple(row[:-1].tolist()), label=float(row[-1]))
        for row in table
    ])


def cmd_serve(args: argparse.Namespace) -> int:
    # The server reads its configuration from the environment at import time
    os.environ["API_HOST"] = args.host
    os.environ["API_PORT"] = str(args.port)
    if args.model_path:
        os.environ["MODEL_PERSISTENCE_PATH"] = str(args.model_path)
    if args.model_file:
        os.environ["MODEL_FILE"] = str(args.model_file)

    from infrastructure.api import server

    server.main()
    return 0


def cmd_train(args: argparse.Namespace) -> int:
    service = _build_service(args.model_path)

    if args.csv:
        training_data = load_csv_training_data(args.csv, header=not args.no_header)
        model_info = asyncio.run(service.train_with_data(training_data, args.task))
    else:
        model_info = asyncio.run(
            service.train_with_synthetic_data(
                args.num_samples, args.n_features, args.task
            )
        )

    print(json.dumps(_model_summary(model_info), indent=2))
    return 0


def cmd_import_model(args: argparse.Namespace) -> int:
    service = _build_service(args.model_path)
    model_info = asyncio.run(service.import_model(args.path, args.model_id))
    print(json.dumps(_model_summary(model_info), indent=2))
    return 0


def cmd_scaffold(args: argparse.Namespace) -> int:
    scaffolder = ProjectScaffolder(args.output_dir)
    created = scaffolder.scaffold(
        args.name,
        framework=args.framework,
        image=args.image,
        overwrite=args.overwrite,
    )
    for path in created:
        print(path)
    return 0


def cmd_render_manifests(args: argparse.Namespace) -> int:
    config = DeploymentConfig(
        app_name=args.app_name,
        image=args.image,
        framework=args.framework,
        replicas=args.replicas,
        container_port=args.container_port,
        service_port=args.service_port,
        service_type=args.service_type,
        namespace=args.namespace,
        ingress_host=args.ingress_host,
        cpu_target_percent=args.cpu_percent,
        min_replicas=args.min,
        max_replicas=args.max,
    )
    env = dict(item.split("=", 1) for item in args.env)
    renderer = KubernetesManifestRenderer(config, env=env)

    for path in renderer.write(args.output_dir):
        print(path)

    if args.dockerfile:
        args.dockerfile.write_text(renderer.render_dockerfile())
        print(args.dockerfile)
    return 0


def _env_pair(value: str) -> str:
    if "=" not in value or value.startswith("="):
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    settings = ServerSettings.from_env()

    parser = argparse.ArgumentParser(
        prog="ml-api",
        description="Train, serve and deploy a model prediction API.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: LOG_LEVEL or INFO).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--model-path", type=Path, default=None)
    serve.add_argument(
        "--model-file",
        type=Path,
        default=None,
        help="Pre-trained model file to import before serving.",
    )
    serve.set_defaults(func=cmd_serve)

    train = subparsers.add_parser("train", help="Train and store a model.")
    train.add_argument("--model-path", type=Path, default=settings.model_path)
    train.add_argument("--task", choices=SUPPORTED_TASKS, default="regression")
    train.add_argument(
        "--csv",
        type=Path,
        default=None,
        help="Numeric CSV whose last column is the label (synthetic data if omitted).",
    )
    train.add_argument("--no-header", action="store_true", help="CSV has no header row.")
    train.add_argument("--num-samples", type=int, default=1000)
    train.add_argument("--n-features", type=int, default=3)
    train.set_defaults(func=cmd_train)

    import_model = subparsers.add_parser(
        "import-model", help="Register a pre-trained pickle/joblib model."
    )
    import_model.add_argument("path", type=Path)
    import_model.add_argument("--model-id", default=None)
    import_model.add_argument("--model-path", type=Path, default=settings.model_path)
    import_model.set_defaults(func=cmd_import_model)

    scaffold = subparsers.add_parser("scaffold", help="Create an ML API project skeleton.")
    scaffold.add_argument("name")
    scaffold.add_argument("--framework", choices=("flask", "django"), default="flask")
    scaffold.add_argument("--output-dir", type=Path, default=Path("."))
    scaffold.add_argument("--image", default=None)
    scaffold.add_argument("--overwrite", action="store_true")
    scaffold.set_defaults(func=cmd_scaffold)

    manifests = subparsers.add_parser(
        "render-manifests", help="Write Kubernetes manifests (and optionally a Dockerfile)."
    )
    manifests.add_argument("--output-dir", type=Path, default=Path("deploy/kubernetes"))
    manifests.add_argument("--app-name", default="ml-api")
    manifests.add_argument("--image", default="ml-api:latest")
    manifests.add_argument("--framework", choices=("flask", "django"), default="flask")
    manifests.add_argument("--replicas", type=int, default=3)
    manifests.add_argument("--container-port", type=int, default=None)
    manifests.add_argument("--service-port", type=int, default=80)
    manifests.add_argument(
        "--service-type",
        choices=("ClusterIP", "NodePort", "LoadBalancer"),
        default="LoadBalancer",
    )
    manifests.add_argument("--namespace", default=None)
    manifests.add_argument("--ingress-host", default=None)
    manifests.add_argument("--cpu-percent", type=int, default=50)
    manifests.add_argument("--min", type=int, default=3)
    manifests.add_argument("--max", type=int, default=10)
    manifests.add_argument(
        "--env",
        type=_env_pair,
        action="append",
        default=[],
        help="Container environment variable NAME=VALUE (repeatable).",
    )
    manifests.add_argument("--dockerfile", type=Path, default=None)
    manifests.set_defaults(func=cmd_render_manifests)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return args.func(args)
    except (ValueError, FileExistsError, FileNotFoundError, StorageError) as e:
        _LOGGER.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
