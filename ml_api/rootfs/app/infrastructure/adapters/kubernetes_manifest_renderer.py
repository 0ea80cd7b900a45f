"""Kubernetes manifest renderer.

Builds the container and cluster artifacts used to ship the ML API:
a Dockerfile plus Deployment, Service, Ingress and HorizontalPodAutoscaler
manifests. The autoscaler is the declarative form of
``kubectl autoscale deployment <app> --cpu-percent=50 --min=3 --max=10``.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from domain.value_objects import DeploymentConfig

_LOGGER = logging.getLogger(__name__)

DEFAULT_PYTHON_IMAGE = "python:3.11-slim"

MANIFEST_FILES = {
    "deployment": "deployment.yaml",
    "service": "service.yaml",
    "ingress": "ingress.yaml",
    "hpa": "hpa.yaml",
}


class KubernetesManifestRenderer:
    """Render deployment artifacts from a DeploymentConfig."""

    def __init__(
        self,
        config: DeploymentConfig,
        env: dict[str, str] | None = None,
        health_path: str = "/health",
    ) -> None:
        """Initialize the renderer.

        Args:
            config: Deployment configuration
            env: Environment variables injected into the container
            health_path: HTTP path used by liveness and readiness probes
        """
        self._config = config
        self._env = dict(env or {})
        self._health_path = health_path

    @property
    def config(self) -> DeploymentConfig:
        return self._config

    def _metadata(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "name": self._config.app_name,
            "labels": {"app": self._config.app_name},
        }
        if self._config.namespace:
            metadata["namespace"] = self._config.namespace
        return metadata

    def _resources(self) -> dict[str, dict[str, str]]:
        cfg = self._config
        resources: dict[str, dict[str, str]] = {}
        requests = {
            key: value
            for key, value in (("cpu", cfg.cpu_request), ("memory", cfg.memory_request))
            if value
        }
        limits = {
            key: value
            for key, value in (("cpu", cfg.cpu_limit), ("memory", cfg.memory_limit))
            if value
        }
        if requests:
            resources["requests"] = requests
        if limits:
            resources["limits"] = limits
        return resources

    def _probe(self, port: int, initial_delay: int) -> dict[str, Any]:
        # Fresh dicts per probe; shared objects would be dumped as YAML aliases
        return {
            "httpGet": {"path": self._health_path, "port": port},
            "initialDelaySeconds": initial_delay,
            "periodSeconds": 10,
        }

    def render_deployment(self) -> dict[str, Any]:
        """Render the apps/v1 Deployment manifest."""
        cfg = self._config
        port = cfg.effective_container_port
        container: dict[str, Any] = {
            "name": cfg.app_name,
            "image": cfg.image,
            "ports": [{"containerPort": port}],
        }
        if self._env:
            container["env"] = [
                {"name": name, "value": str(value)} for name, value in self._env.items()
            ]
        resources = self._resources()
        if resources:
            # The autoscaler computes CPU utilization relative to requests
            container["resources"] = resources
        container["livenessProbe"] = self._probe(port, initial_delay=10)
        container["readinessProbe"] = self._probe(port, initial_delay=5)

        return {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": self._metadata(),
            "spec": {
                "replicas": cfg.replicas,
                "selector": {"matchLabels": {"app": cfg.app_name}},
                "template": {
                    "metadata": {"labels": {"app": cfg.app_name}},
                    "spec": {"containers": [container]},
                },
            },
        }

    def render_service(self) -> dict[str, Any]:
        """Render the Service exposing the Deployment."""
        cfg = self._config
        return {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": self._metadata(),
            "spec": {
                "type": cfg.service_type,
                "selector": {"app": cfg.app_name},
                "ports": [
                    {
                        "protocol": "TCP",
                        "port": cfg.service_port,
                        "targetPort": cfg.effective_container_port,
                    }
                ],
            },
        }

    def render_ingress(self) -> dict[str, Any]:
        """Render the networking.k8s.io/v1 Ingress routing to the Service."""
        cfg = self._config
        rule: dict[str, Any] = {
            "http": {
                "paths": [
                    {
                        "path": "/",
                        "pathType": "Prefix",
                        "backend": {
                            "service": {
                                "name": cfg.app_name,
                                "port": {"number": cfg.service_port},
                            }
                        },
                    }
                ]
            }
        }
        if cfg.ingress_host:
            rule = {"host": cfg.ingress_host, **rule}

        return {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "Ingress",
            "metadata": self._metadata(),
            "spec": {"rules": [rule]},
        }

    def render_hpa(self) -> dict[str, Any]:
        """Render the autoscaling/v2 HorizontalPodAutoscaler."""
        cfg = self._config
        return {
            "apiVersion": "autoscaling/v2",
            "kind": "HorizontalPodAutoscaler",
            "metadata": self._metadata(),
            "spec": {
                "scaleTargetRef": {
                    "apiVersion": "apps/v1",
                    "kind": "Deployment",
                    "name": cfg.app_name,
                },
                "minReplicas": cfg.min_replicas,
                "maxReplicas": cfg.max_replicas,
                "metrics": [
                    {
                        "type": "Resource",
                        "resource": {
                            "name": "cpu",
                            "target": {
                                "type": "Utilization",
                                "averageUtilization": cfg.cpu_target_percent,
                            },
                        },
                    }
                ],
            },
        }

    def render_all(self) -> dict[str, dict[str, Any]]:
        """Render every manifest, keyed by kind short name."""
        return {
            "deployment": self.render_deployment(),
            "service": self.render_service(),
            "ingress": self.render_ingress(),
            "hpa": self.render_hpa(),
        }

    def render_autoscale_command(self) -> str:
        """Return the imperative kubectl equivalent of the autoscaler."""
        cfg = self._config
        return (
            f"kubectl autoscale deployment {cfg.app_name} "
            f"--cpu-percent={cfg.cpu_target_percent} "
            f"--min={cfg.min_replicas} --max={cfg.max_replicas}"
        )

    def render_dockerfile(
        self,
        command: list[str] | None = None,
        base_image: str = DEFAULT_PYTHON_IMAGE,
    ) -> str:
        """Render a Dockerfile for the configured framework.

        Args:
            command: Container command (defaults to gunicorn for the framework)
            base_image: Python base image

        Returns:
            Dockerfile contents
        """
        port = self._config.effective_container_port
        if command is None:
            wsgi_target = "app:app"
            if self._config.framework == "django":
                wsgi_target = "project.wsgi:application"
            command = ["gunicorn", "--bind", f"0.0.0.0:{port}", wsgi_target]

        cmd = ", ".join(f'"{part}"' for part in command)
        return (
            f"FROM {base_image}\n"
            "\n"
            "WORKDIR /app\n"
            "\n"
            "COPY requirements.txt .\n"
            "RUN pip install --no-cache-dir -r requirements.txt\n"
            "\n"
            "COPY . .\n"
            "\n"
            f"EXPOSE {port}\n"
            "\n"
            f"CMD [{cmd}]\n"
        )

    def write(self, output_dir: str | Path) -> list[Path]:
        """Write all manifests as YAML files.

        Args:
            output_dir: Directory to write into (created if missing)

        Returns:
            Paths of the written files
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for name, manifest in self.render_all().items():
            path = output_dir / MANIFEST_FILES[name]
            with open(path, "w") as f:
                yaml.safe_dump(manifest, f, sort_keys=False, default_flow_style=False)
            written.append(path)

        _LOGGER.info(
            "Wrote %d manifests for %s to %s", len(written), self._config.app_name, output_dir
        )
        return written
