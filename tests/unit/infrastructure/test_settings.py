"""Tests for environment-driven server settings."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from infrastructure.settings import ServerSettings


class TestServerSettings:
    """Tests for ServerSettings.from_env."""

    def test_defaults_without_environment(self) -> None:
        """Test the values used when no variable is set."""
        with patch.dict(os.environ, {}, clear=True):
            settings = ServerSettings.from_env()

        assert settings == ServerSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 5000
        assert settings.log_level == "INFO"
        assert settings.model_path == Path("/data/models")
        assert settings.model_file is None
        assert settings.debug_mode is False

    def test_environment_overrides(self) -> None:
        """Test that every variable is read."""
        env = {
            "API_HOST": "127.0.0.1",
            "API_PORT": "8000",
            "LOG_LEVEL": "debug",
            "MODEL_PERSISTENCE_PATH": "/models",
            "MODEL_FILE": "/opt/model/model.joblib",
            "DEBUG_MODE": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = ServerSettings.from_env()

        assert settings.host == "127.0.0.1"
        assert settings.port == 8000
        assert settings.log_level == "DEBUG"
        assert settings.model_path == Path("/models")
        assert settings.model_file == Path("/opt/model/model.joblib")
        assert settings.debug_mode is True

    @pytest.mark.parametrize(
        "value, expected",
        [("TRUE", True), ("True", True), ("false", False), ("1", False), ("", False)],
    )
    def test_debug_mode_parsing(self, value: str, expected: bool) -> None:
        """Test that only "true" (any case) enables debug mode."""
        with patch.dict(os.environ, {"DEBUG_MODE": value}, clear=True):
            assert ServerSettings.from_env().debug_mode is expected

    def test_empty_model_file_means_no_startup_import(self) -> None:
        """Test that an empty MODEL_FILE is treated as unset."""
        with patch.dict(os.environ, {"MODEL_FILE": ""}, clear=True):
            assert ServerSettings.from_env().model_file is None

    def test_invalid_port_raises_error(self) -> None:
        """Test that a non-numeric port is rejected."""
        with patch.dict(os.environ, {"API_PORT": "http"}, clear=True):
            with pytest.raises(ValueError):
                ServerSettings.from_env()
