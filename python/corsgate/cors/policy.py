"""CORS policy construction.

The raw configuration (CorsConfig) is consumed exactly once by build_policy()
and turned into an immutable PolicyConfig. Nothing in PolicyConfig is
re-derived at request time, so one instance is shared read-only by every
concurrent request evaluation.

Normalization:
- Origin, method and request-header lists are split on commas and trimmed
- Request headers are lowercased for matching; the configured string is kept
  verbatim for the Access-Control-Allow-Headers response header
- max_age is rendered as whole seconds without a decimal point ("0" suppresses
  Access-Control-Max-Age)
- credentials is rendered as "true" / "false"

A wildcard origin rule ("*") admits every origin.
"""

from dataclasses import dataclass
from datetime import timedelta

from corsgate.errors import CorsConfigError, CorsErrorCode

WILDCARD_ORIGIN = "*"

DEFAULT_METHODS = "GET, PUT, POST, DELETE"
DEFAULT_REQUEST_HEADERS = "Origin, Authorization, Content-Type"
DEFAULT_MAX_AGE = timedelta(minutes=1)


@dataclass(frozen=True)
class CorsConfig:
    """Raw CORS configuration as supplied by the hosting application.

    Attributes:
        origins: Comma delimited list of allowed origins, or "*" for all
        methods: Comma delimited list of allowed HTTP methods
        request_headers: Comma delimited list of accepted request headers
        exposed_headers: Headers the client may read, sent verbatim ("" to omit)
        max_age: How long the client may cache a preflight result
        credentials: Whether cookies and Authorization headers are allowed
        validate_headers: Check preflight requests against the allowed sets
            instead of advertising the sets unconditionally
    """

    origins: str = WILDCARD_ORIGIN
    methods: str = DEFAULT_METHODS
    request_headers: str = DEFAULT_REQUEST_HEADERS
    exposed_headers: str = ""
    max_age: timedelta = DEFAULT_MAX_AGE
    credentials: bool = True
    validate_headers: bool = False


@dataclass(frozen=True)
class PolicyConfig:
    """Normalized, immutable CORS policy.

    Attributes:
        allow_all_origins: True iff the origin rule is "*"
        origins: Exact origins admitted (empty when allow_all_origins)
        methods: Allowed methods in configured order
        methods_value: Configured methods string, rendered into responses
        request_headers: Allowed request headers, lowercased, in configured order
        request_headers_value: Configured headers string in original case
        exposed_headers: Raw Access-Control-Expose-Headers value ("" to omit)
        max_age_seconds: Preflight cache lifetime as decimal seconds
        credentials_enabled: Whether credentials are allowed
        credentials_value: "true" or "false"
        validate_headers: Strict preflight validation mode
    """

    allow_all_origins: bool
    origins: frozenset[str]
    methods: tuple[str, ...]
    methods_value: str
    request_headers: tuple[str, ...]
    request_headers_value: str
    exposed_headers: str
    max_age_seconds: str
    credentials_enabled: bool
    credentials_value: str
    validate_headers: bool


@dataclass(frozen=True)
class PolicyResult:
    """Outcome of building a policy: exactly one of policy or error is set."""

    policy: PolicyConfig | None = None
    error: CorsConfigError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> PolicyConfig:
        """Return the policy, or raise the configuration error.

        Raises:
            CorsConfigError: If the configuration was rejected.
            ValueError: If the result holds neither a policy nor an error.
        """
        if self.error is not None:
            raise self.error
        if self.policy is None:
            raise ValueError("PolicyResult holds neither a policy nor an error")
        return self.policy


def split_list(value: str) -> tuple[str, ...]:
    """Split a comma delimited configuration string into trimmed tokens.

    Empty tokens are dropped, so both "a, b" and "a,b" yield ("a", "b").
    """
    return tuple(token.strip() for token in value.split(",") if token.strip())


def format_max_age(max_age: timedelta) -> str:
    """Render a duration as whole seconds, e.g. timedelta(minutes=1) -> "60"."""
    return f"{max_age.total_seconds():.0f}"


def build_policy(config: CorsConfig) -> PolicyResult:
    """Normalize a raw configuration into a PolicyConfig.

    Configuration problems are returned, not raised, so the hosting
    application decides how to surface them.

    Args:
        config: The raw CORS configuration.

    Returns:
        PolicyResult holding either the policy or a CorsConfigError.
    """
    origin_rule = config.origins.strip()
    if not split_list(origin_rule):
        return PolicyResult(
            error=CorsConfigError(
                CorsErrorCode.E_CORS_NO_ORIGINS,
                "At least one allowed origin is required. "
                "If CORS should not apply, remove the middleware instead.",
            )
        )

    if config.max_age < timedelta(0):
        return PolicyResult(
            error=CorsConfigError(
                CorsErrorCode.E_CORS_INVALID_MAX_AGE,
                f"max_age must not be negative, got {config.max_age.total_seconds():g}s",
            )
        )

    allow_all_origins = origin_rule == WILDCARD_ORIGIN

    policy = PolicyConfig(
        allow_all_origins=allow_all_origins,
        origins=frozenset() if allow_all_origins else frozenset(split_list(origin_rule)),
        methods=split_list(config.methods),
        methods_value=config.methods,
        request_headers=tuple(h.lower() for h in split_list(config.request_headers)),
        request_headers_value=config.request_headers,
        exposed_headers=config.exposed_headers,
        max_age_seconds=format_max_age(config.max_age),
        credentials_enabled=config.credentials,
        credentials_value="true" if config.credentials else "false",
        validate_headers=config.validate_headers,
    )
    return PolicyResult(policy=policy)
