"""Application settings loaded from environment variables.

Environment Configuration:
    CORSGATE_ENV: Deployment environment (local | test | staging | prod)
    LOG_JSON: Force JSON (true) or console (false) logs; defaults to console in local only
    LOG_LEVEL: Root log level name (default INFO)

CORS Configuration:
    CORS_ORIGINS: Comma-separated list of allowed origins, or "*" (required)
    CORS_METHODS: Comma-separated list of allowed methods
    CORS_REQUEST_HEADERS: Comma-separated list of accepted request headers
    CORS_EXPOSED_HEADERS: Value for Access-Control-Expose-Headers (empty to omit)
    CORS_MAX_AGE: Preflight cache lifetime, seconds or ISO-8601 (e.g. PT5M); 0 omits the header
    CORS_CREDENTIALS: Allow cookies and Authorization headers
    CORS_VALIDATE_HEADERS: Validate preflight method/headers against the allowed sets
    CORS_TERMINATE_STATUS: HTTP status for requests the middleware answers itself

Note: an empty CORS_ORIGINS is not rejected here. It surfaces as a
CorsConfigError when the policy is built at startup.
"""

import logging
from datetime import timedelta
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from corsgate.cors.policy import (
    DEFAULT_MAX_AGE,
    DEFAULT_METHODS,
    DEFAULT_REQUEST_HEADERS,
    CorsConfig,
)


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - CORS_TERMINATE_STATUS must be a final HTTP status (200..599)
    - LOG_LEVEL must be a known stdlib level name
    """

    corsgate_env: Environment = Field(default=Environment.LOCAL, alias="CORSGATE_ENV")
    log_json: bool | None = Field(default=None, alias="LOG_JSON")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CORS policy
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")
    cors_methods: str = Field(default=DEFAULT_METHODS, alias="CORS_METHODS")
    cors_request_headers: str = Field(
        default=DEFAULT_REQUEST_HEADERS, alias="CORS_REQUEST_HEADERS"
    )
    cors_exposed_headers: str = Field(default="", alias="CORS_EXPOSED_HEADERS")
    cors_max_age: timedelta = Field(default=DEFAULT_MAX_AGE, alias="CORS_MAX_AGE")
    cors_credentials: bool = Field(default=True, alias="CORS_CREDENTIALS")
    cors_validate_headers: bool = Field(default=False, alias="CORS_VALIDATE_HEADERS")

    # Host binding
    cors_terminate_status: int = Field(default=200, alias="CORS_TERMINATE_STATUS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("cors_max_age", mode="before")
    @classmethod
    def parse_max_age_seconds(cls, value):
        """Accept a bare number of seconds given as a string (e.g. "300")."""
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return value
        return value

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Reject values the host binding cannot use."""
        if not 200 <= self.cors_terminate_status <= 599:
            raise ValueError(
                f"CORS_TERMINATE_STATUS must be between 200 and 599, "
                f"got {self.cors_terminate_status}"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {self.log_level!r}")

        return self

    @property
    def use_json_logs(self) -> bool:
        """Whether to render JSON logs (console logs only by default in local)."""
        if self.log_json is not None:
            return self.log_json
        return self.corsgate_env != Environment.LOCAL

    @property
    def log_level_value(self) -> int:
        """Return LOG_LEVEL as a stdlib logging level."""
        return logging.getLevelName(self.log_level.upper())

    def cors_config(self) -> CorsConfig:
        """Return the raw CORS configuration record."""
        return CorsConfig(
            origins=self.cors_origins,
            methods=self.cors_methods,
            request_headers=self.cors_request_headers,
            exposed_headers=self.cors_exposed_headers,
            max_age=self.cors_max_age,
            credentials=self.cors_credentials,
            validate_headers=self.cors_validate_headers,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
