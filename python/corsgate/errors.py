"""Configuration error definitions.

Only configuration problems are errors. A request that the policy does not
admit is a normal outcome of the decision pipeline and is never raised.
"""

from enum import Enum


class CorsErrorCode(str, Enum):
    """Standardized error codes for CORS configuration.

    Format: E_CORS_NAME
    """

    E_CORS_NO_ORIGINS = "E_CORS_NO_ORIGINS"
    E_CORS_INVALID_MAX_AGE = "E_CORS_INVALID_MAX_AGE"


class CorsConfigError(Exception):
    """Invalid CORS configuration.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
    """

    def __init__(self, code: CorsErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)
