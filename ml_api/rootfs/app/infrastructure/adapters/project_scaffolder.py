"""ML project scaffolder.

Creates the directory skeleton for a new ML API project: data and model
folders, a package with a prediction endpoint, tests, a Dockerfile and
Kubernetes manifests ready for ``kubectl apply -f k8s/``.
"""

import logging
import re
from pathlib import Path
from string import Template

from domain.value_objects import DeploymentConfig

from .kubernetes_manifest_renderer import KubernetesManifestRenderer

_LOGGER = logging.getLogger(__name__)

DIRECTORIES = (
    "data/raw",
    "data/processed",
    "models",
    "notebooks",
    "tests",
)

REQUIREMENTS = {
    "flask": ("flask", "gunicorn", "joblib", "numpy", "scikit-learn"),
    "django": ("django", "gunicorn", "joblib", "numpy", "scikit-learn"),
}

FLASK_APP_TEMPLATE = Template('''\
"""Prediction API for $project_name."""

import os

import joblib
from flask import Flask, jsonify, request

app = Flask(__name__)
model = joblib.load(os.getenv("MODEL_FILE", "models/model.pkl"))


@app.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "healthy"})


@app.route("/predict", methods=["POST"])
def predict():
    data = request.get_json(silent=True) or {}
    if not data.get("features"):
        return jsonify({"error": "Missing 'features' in request body"}), 400
    try:
        prediction = model.predict([data["features"]])
        return jsonify({"prediction": prediction.tolist()}), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500
''')

DJANGO_VIEWS_TEMPLATE = Template('''\
"""Prediction views for $project_name."""

import json
import os

import joblib
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

model = joblib.load(os.getenv("MODEL_FILE", "models/model.pkl"))


def health(request):
    return JsonResponse({"status": "healthy"})


@csrf_exempt
@require_POST
def predict(request):
    try:
        data = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        data = {}
    if not data.get("features"):
        return JsonResponse({"error": "Missing 'features' in request body"}, status=400)
    try:
        prediction = model.predict([data["features"]])
        return JsonResponse({"prediction": prediction.tolist()}, status=200)
    except Exception as e:
        return JsonResponse({"error": str(e)}, status=500)
''')

DJANGO_URLS_TEMPLATE = Template('''\
"""URL declarations for $project_name."""

from django.urls import path

from . import views

urlpatterns = [
    path("predict", views.predict, name="predict"),
    path("health", views.health, name="health"),
]
''')

DJANGO_SETTINGS_TEMPLATE = Template('''\
"""Minimal Django settings for $project_name."""

import os

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me")
DEBUG = os.getenv("DJANGO_DEBUG", "false").lower() == "true"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS: list[str] = []
MIDDLEWARE: list[str] = []

ROOT_URLCONF = "$package.urls"
WSGI_APPLICATION = "$package.wsgi.application"
''')

DJANGO_WSGI_TEMPLATE = Template('''\
"""WSGI entry point for $project_name."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "$package.settings")

application = get_wsgi_application()
''')

TEST_TEMPLATE = Template('''\
"""Smoke tests for $project_name."""

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def test_project_layout():
    assert (ROOT / "models").is_dir()
    assert (ROOT / "src" / "$package").is_dir()
''')

README_TEMPLATE = Template('''\
# $project_name

## Layout

- `data/raw`, `data/processed`: datasets
- `models`: serialized models (`model.pkl` is served by default)
- `notebooks`: exploration
- `src/$package`: prediction API
- `k8s`: Kubernetes manifests

## Run locally

    pip install -r requirements.txt
    docker build -t $image .
    docker run -p $port:$port $image

## Deploy

    kubectl apply -f k8s/
    $autoscale

## Query

    curl -X POST http://localhost:$port/predict \\
         -H "Content-Type: application/json" \\
         -d '{"features": [1.2, 3.4, 5.6]}'
''')

DOCKERIGNORE = "\n".join(
    ["__pycache__/", "*.pyc", ".git/", ".venv/", "notebooks/", "data/raw/", ""]
)


def to_package_name(project_name: str) -> str:
    """Turn a project name into a valid Python package name."""
    name = re.sub(r"[^0-9a-zA-Z]+", "_", project_name).strip("_").lower()
    if not name:
        raise ValueError(f"Invalid project name: {project_name!r}")
    if name[0].isdigit():
        name = f"_{name}"
    return name


def to_app_name(project_name: str) -> str:
    """Turn a project name into a Kubernetes resource name."""
    name = re.sub(r"[^0-9a-z]+", "-", project_name.lower()).strip("-")
    if not name:
        raise ValueError(f"Invalid project name: {project_name!r}")
    return name[:63].rstrip("-")


class ProjectScaffolder:
    """Create new ML API projects under a base directory."""

    def __init__(self, base_path: str | Path) -> None:
        """Initialize the scaffolder.

        Args:
            base_path: Directory in which project folders are created
        """
        self._base_path = Path(base_path)

    def scaffold(
        self,
        project_name: str,
        framework: str = "flask",
        image: str | None = None,
        overwrite: bool = False,
    ) -> list[Path]:
        """Create a project skeleton.

        Args:
            project_name: Name of the project directory
            framework: "flask" or "django"
            image: Container image name (defaults to the app name)
            overwrite: Allow writing into an existing non-empty directory

        Returns:
            Paths of all created files and directories, relative to the project root

        Raises:
            FileExistsError: If the project directory exists, is not empty
                and ``overwrite`` is False
            ValueError: If the project name or framework is invalid
        """
        package = to_package_name(project_name)
        app_name = to_app_name(project_name)
        config = DeploymentConfig(
            app_name=app_name,
            image=image or f"{app_name}:latest",
            framework=framework,
        )
        renderer = KubernetesManifestRenderer(config)

        root = self._base_path / project_name
        if root.exists() and any(root.iterdir()) and not overwrite:
            raise FileExistsError(f"Project directory is not empty: {root}")

        _LOGGER.info("Scaffolding %s project %s in %s", framework, project_name, root)
        created: list[Path] = []

        for directory in DIRECTORIES:
            path = root / directory
            path.mkdir(parents=True, exist_ok=True)
            keep = path / ".gitkeep"
            keep.touch()
            created.append(keep.relative_to(root))

        substitutions = {
            "project_name": project_name,
            "package": package,
            "image": config.image,
            "port": config.effective_container_port,
            "autoscale": renderer.render_autoscale_command(),
        }

        src = Path("src") / package
        files: dict[Path, str] = {
            src / "__init__.py": f'"""{project_name}."""\n',
            Path("tests") / "test_smoke.py": TEST_TEMPLATE.substitute(substitutions),
            Path("requirements.txt"): "\n".join(REQUIREMENTS[framework]) + "\n",
            Path(".dockerignore"): DOCKERIGNORE,
            Path("README.md"): README_TEMPLATE.substitute(substitutions),
        }
        if framework == "flask":
            files[src / "app.py"] = FLASK_APP_TEMPLATE.substitute(substitutions)
            wsgi_target = f"{package}.app:app"
        else:
            files[src / "views.py"] = DJANGO_VIEWS_TEMPLATE.substitute(substitutions)
            files[src / "urls.py"] = DJANGO_URLS_TEMPLATE.substitute(substitutions)
            files[src / "settings.py"] = DJANGO_SETTINGS_TEMPLATE.substitute(substitutions)
            files[src / "wsgi.py"] = DJANGO_WSGI_TEMPLATE.substitute(substitutions)
            wsgi_target = f"{package}.wsgi:application"

        # cwd stays at the project root so models/ resolves
        command = [
            "gunicorn",
            "--bind",
            f"0.0.0.0:{config.effective_container_port}",
            "--pythonpath",
            "src",
            wsgi_target,
        ]
        files[Path("Dockerfile")] = renderer.render_dockerfile(command=command)

        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            created.append(relative)

        for path in renderer.write(root / "k8s"):
            created.append(path.relative_to(root))

        return created
