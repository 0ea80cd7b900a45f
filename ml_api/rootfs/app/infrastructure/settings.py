"""Runtime settings read from the environment.

Every value can be overridden per container through the Deployment's
``env`` section.
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ServerSettings:
    """Settings for the ML API server.

    Attributes:
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        log_level: Root logging level name
        model_path: Directory holding persisted models
        model_file: Pre-trained model file imported at startup (optional)
        debug_mode: Wait for a remote debugger before serving
    """

    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    model_path: Path = Path("/data/models")
    model_file: Path | None = None
    debug_mode: bool = False

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """Build settings from environment variables."""
        model_file = os.getenv("MODEL_FILE")
        return cls(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "5000")),
            log_level=os.getenv("LOG_LEVEL", "info").upper(),
            model_path=Path(os.getenv("MODEL_PERSISTENCE_PATH", "/data/models")),
            model_file=Path(model_file) if model_file else None,
            debug_mode=os.getenv("DEBUG_MODE", "false").lower() == "true",
        )
