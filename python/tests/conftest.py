"""Pytest configuration and fixtures for corsgate tests.

All tests are in-process: the decision engine is pure and the middleware is
exercised either with raw ASGI messages or through TestClient.
"""

import sys
from collections.abc import Generator
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi.testclient import TestClient

from corsgate.app import create_app
from corsgate.config import clear_settings_cache
from tests.helpers import make_settings

CORS_ENV_VARS = (
    "CORSGATE_ENV",
    "LOG_JSON",
    "LOG_LEVEL",
    "CORS_ORIGINS",
    "CORS_METHODS",
    "CORS_REQUEST_HEADERS",
    "CORS_EXPOSED_HEADERS",
    "CORS_MAX_AGE",
    "CORS_CREDENTIALS",
    "CORS_VALIDATE_HEADERS",
    "CORS_TERMINATE_STATUS",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch) -> Generator[None, None, None]:
    """Keep the developer's environment out of settings under test."""
    for name in CORS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def client_factory():
    """Build a TestClient around create_app() for the given settings overrides."""

    def _factory(**overrides) -> TestClient:
        return TestClient(create_app(settings=make_settings(**overrides)))

    return _factory

