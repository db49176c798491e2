"""Origin, method and header matching against a PolicyConfig.

- Origins: exact, case-sensitive comparison (no scheme/port normalization)
- Methods: exact, case-sensitive comparison, strict mode only
- Headers: case-insensitive comparison, strict mode only

In non-strict mode the method and header validators always pass: the server
advertises its allowed sets and the browser enforces them.
"""

from corsgate.cors.policy import PolicyConfig

# Characters trimmed from each requested header token
HEADER_TRIM_CHARS = " \t\r\n"


def match_origin(origin: str, policy: PolicyConfig) -> bool:
    """Check whether the origin is admitted by the policy."""
    return policy.allow_all_origins or origin in policy.origins


def validate_request_method(requested_method: str, policy: PolicyConfig) -> bool:
    """Check the preflight Access-Control-Request-Method value."""
    if not policy.validate_headers:
        return True

    return bool(requested_method) and requested_method in policy.methods


def parse_request_headers(requested_headers: str) -> list[str]:
    """Split a raw Access-Control-Request-Headers value into lowercase names.

    Empty tokens are kept, so an absent header yields [""].
    """
    return [token.strip(HEADER_TRIM_CHARS).lower() for token in requested_headers.split(",")]


def validate_request_headers(requested_headers: str, policy: PolicyConfig) -> bool:
    """Check that every requested header is in the allowed set.

    An absent or empty value is a single empty token and fails in strict mode.
    """
    if not policy.validate_headers:
        return True

    allowed = policy.request_headers
    return all(header in allowed for header in parse_request_headers(requested_headers))
