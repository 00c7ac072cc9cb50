"""Pytest fixtures for think-relay tests."""

import os
from unittest.mock import patch

import pytest

from think_relay.config import Settings


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "HOST": "127.0.0.1",
        "PORT": "8080",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def settings(mock_env_vars) -> Settings:
    """Create Settings instance with mocked environment."""
    return Settings()


@pytest.fixture
def inference_settings(mock_env_vars) -> Settings:
    """Settings with the inference API configured."""
    with patch.dict(os.environ, {
        **mock_env_vars,
        "INFERENCE_API_URL": "http://localhost:8000/v1",
        "INFERENCE_API_KEY": "test-key",
    }):
        return Settings()
