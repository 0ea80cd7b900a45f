"""Deployment configuration value object.

Immutable description of how the ML API is packaged and run on Kubernetes.
The defaults reproduce the reference deployment: three replicas behind a
LoadBalancer service on port 80, autoscaled between 3 and 10 pods at 50%
CPU utilization.
"""

import re
from dataclasses import dataclass

DEFAULT_CONTAINER_PORTS = {
    "flask": 5000,
    "django": 8000,
}

SERVICE_TYPES = ("ClusterIP", "NodePort", "LoadBalancer")

_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def _check_port(name: str, port: int) -> None:
    if not 1 <= port <= 65535:
        raise ValueError(f"{name} must be between 1 and 65535, got {port}")


@dataclass(frozen=True)
class DeploymentConfig:
    """Configuration for a Kubernetes deployment of the ML API.

    Attributes:
        app_name: Name used for every resource and the ``app`` label
        image: Container image reference
        framework: Web framework serving the API ("flask" or "django")
        replicas: Number of pod replicas in the Deployment
        container_port: Port the container listens on (None = framework default)
        service_port: External port exposed by the Service
        service_type: Kubernetes Service type
        namespace: Namespace for namespaced resources (optional)
        ingress_host: Host name routed by the Ingress (None = any host)
        cpu_target_percent: Target average CPU utilization for autoscaling
        min_replicas: Autoscaler lower bound
        max_replicas: Autoscaler upper bound
        cpu_request: CPU request per container (optional)
        memory_request: Memory request per container (optional)
        cpu_limit: CPU limit per container (optional)
        memory_limit: Memory limit per container (optional)
    """

    app_name: str = "ml-api"
    image: str = "ml-api:latest"
    framework: str = "flask"
    replicas: int = 3
    container_port: int | None = None
    service_port: int = 80
    service_type: str = "LoadBalancer"
    namespace: str | None = None
    ingress_host: str | None = None
    cpu_target_percent: int = 50
    min_replicas: int = 3
    max_replicas: int = 10
    cpu_request: str | None = "250m"
    memory_request: str | None = "256Mi"
    cpu_limit: str | None = "500m"
    memory_limit: str | None = "512Mi"

    def __post_init__(self) -> None:
        """Validate deployment configuration."""
        if not _DNS_LABEL.match(self.app_name) or len(self.app_name) > 63:
            raise ValueError(
                f"app_name must be a lowercase DNS label, got {self.app_name!r}"
            )
        if not self.image:
            raise ValueError("image cannot be empty")
        if self.framework not in DEFAULT_CONTAINER_PORTS:
            raise ValueError(
                f"framework must be one of {', '.join(DEFAULT_CONTAINER_PORTS)}, "
                f"got {self.framework!r}"
            )
        if self.replicas < 1:
            raise ValueError(f"replicas must be at least 1, got {self.replicas}")
        if self.container_port is not None:
            _check_port("container_port", self.container_port)
        _check_port("service_port", self.service_port)
        if self.service_type not in SERVICE_TYPES:
            raise ValueError(
                f"service_type must be one of {', '.join(SERVICE_TYPES)}, "
                f"got {self.service_type!r}"
            )
        if not 1 <= self.cpu_target_percent <= 100:
            raise ValueError(
                f"cpu_target_percent must be between 1 and 100, "
                f"got {self.cpu_target_percent}"
            )
        if self.min_replicas < 1:
            raise ValueError(f"min_replicas must be at least 1, got {self.min_replicas}")
        if self.max_replicas < self.min_replicas:
            raise ValueError(
                f"max_replicas ({self.max_replicas}) must be at least "
                f"min_replicas ({self.min_replicas})"
            )

    @property
    def effective_container_port(self) -> int:
        """Return the container port, falling back to the framework default."""
        if self.container_port is not None:
            return self.container_port
        return DEFAULT_CONTAINER_PORTS[self.framework]
