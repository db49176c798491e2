"""Test helpers for CORS policy tests.

Provides:
- Settings construction isolated from .env files
- Policy construction from keyword overrides
- A recording CorsHost for driving apply()
- Raw ASGI scope construction
"""

from datetime import timedelta

from corsgate.config import Settings
from corsgate.cors.engine import DecisionAction
from corsgate.cors.policy import CorsConfig, PolicyConfig, build_policy


def make_policy(**overrides) -> PolicyConfig:
    """Build a PolicyConfig from CorsConfig defaults + overrides."""
    if "max_age" in overrides and isinstance(overrides["max_age"], int):
        overrides["max_age"] = timedelta(seconds=overrides["max_age"])
    return build_policy(CorsConfig(**overrides)).unwrap()


def make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "CORSGATE_ENV": "test",
        "CORS_ORIGINS": "https://a.com",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class RecordingHost:
    """CorsHost that records every call made by apply()."""

    def __init__(self, method: str = "GET", headers: dict[str, str] | None = None):
        self.method = method
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.response_headers: dict[str, list[str]] = {}
        self.action: DecisionAction | None = None

    def request_method(self) -> str:
        return self.method

    def request_header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def add_response_header(self, name: str, value: str) -> None:
        self.response_headers.setdefault(name, []).append(value)

    def set_response_header(self, name: str, value: str) -> None:
        self.response_headers[name] = [value]

    def proceed(self) -> None:
        assert self.action is None, "proceed/terminate called twice"
        self.action = DecisionAction.CONTINUE

    def terminate(self) -> None:
        assert self.action is None, "proceed/terminate called twice"
        self.action = DecisionAction.TERMINATE


def http_scope(method: str = "GET", path: str = "/health", headers: dict[str, str] | None = None):
    """Build a minimal ASGI http scope."""
    return {
        "type": "http",
        "path": path,
        "method": method,
        "headers": [
            (k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()
        ],
    }
