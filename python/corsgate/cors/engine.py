"""CORS decision pipeline.

evaluate() is a pure function of (PolicyConfig, RequestFacts). It never
raises for a disallowed request; every request ends in exactly one of two
actions:

- CONTINUE: forward to the next handler, with the decision headers set
- TERMINATE: stop the chain without invoking downstream handlers

Pipeline:
1. Vary: Origin is always emitted. No Origin header -> CONTINUE, no CORS headers
2. Origin not admitted -> TERMINATE
3. OPTIONS with a non-empty Access-Control-Request-Method is a preflight.
   A preflight always terminates; only a valid one carries the allow headers.
   Access-Control-Allow-Origin is never set on a preflight response.
4. Any other request gets Access-Control-Expose-Headers (if configured) and the
   credential / origin-echo headers, then CONTINUE.

With credentials enabled the request origin is echoed literally, never "*".
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from corsgate.cors.matchers import match_origin, validate_request_headers, validate_request_method
from corsgate.cors.policy import PolicyConfig

# Response headers
ALLOW_ORIGIN_HEADER = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS_HEADER = "Access-Control-Allow-Credentials"
ALLOW_HEADERS_HEADER = "Access-Control-Allow-Headers"
ALLOW_METHODS_HEADER = "Access-Control-Allow-Methods"
MAX_AGE_HEADER = "Access-Control-Max-Age"
EXPOSE_HEADERS_HEADER = "Access-Control-Expose-Headers"
VARY_HEADER = "Vary"

# Request headers
ORIGIN_HEADER = "Origin"
REQUEST_METHOD_HEADER = "Access-Control-Request-Method"
REQUEST_HEADERS_HEADER = "Access-Control-Request-Headers"

OPTIONS_METHOD = "OPTIONS"

VARY_ORIGIN = (VARY_HEADER, ORIGIN_HEADER)


class DecisionAction(str, Enum):
    """Terminal state of the pipeline."""

    CONTINUE = "continue"
    TERMINATE = "terminate"


class DecisionReason(str, Enum):
    """Why the pipeline reached its terminal state."""

    NO_ORIGIN = "no_origin"
    ORIGIN_REJECTED = "origin_rejected"
    PREFLIGHT_OK = "preflight_ok"
    PREFLIGHT_REJECTED = "preflight_rejected"
    ALLOWED = "allowed"


@dataclass(frozen=True)
class RequestFacts:
    """The parts of an inbound request the pipeline looks at.

    Attributes:
        origin: Origin header value ("" if absent)
        method: HTTP method
        requested_method: Access-Control-Request-Method value ("" if absent)
        requested_headers: Raw Access-Control-Request-Headers value ("" if absent)
    """

    origin: str
    method: str
    requested_method: str = ""
    requested_headers: str = ""

    @property
    def is_preflight(self) -> bool:
        # Bare OPTIONS without Access-Control-Request-Method is an ordinary request
        return self.method == OPTIONS_METHOD and self.requested_method != ""

    @classmethod
    def from_headers(cls, method: str, get_header: Callable[[str], str | None]) -> "RequestFacts":
        """Build facts from a method and a header lookup.

        Args:
            method: The HTTP method of the request.
            get_header: Case-insensitive header lookup returning None if absent.
        """
        return cls(
            origin=get_header(ORIGIN_HEADER) or "",
            method=method,
            requested_method=get_header(REQUEST_METHOD_HEADER) or "",
            requested_headers=get_header(REQUEST_HEADERS_HEADER) or "",
        )


@dataclass(frozen=True)
class Decision:
    """Outcome of one request evaluation.

    Attributes:
        action: CONTINUE or TERMINATE
        reason: Machine-readable reason, used for logging
        headers: Response headers in the order they are set; Vary is always first
        preflight: Whether the request was classified as a preflight
    """

    action: DecisionAction
    reason: DecisionReason
    headers: tuple[tuple[str, str], ...]
    preflight: bool = False

    @property
    def proceeds(self) -> bool:
        return self.action is DecisionAction.CONTINUE

    def header(self, name: str) -> str | None:
        """Return the value set for a header, or None."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


class CorsHost(Protocol):
    """What the hosting HTTP layer must offer for apply()."""

    def request_method(self) -> str: ...

    def request_header(self, name: str) -> str | None: ...

    def add_response_header(self, name: str, value: str) -> None: ...

    def set_response_header(self, name: str, value: str) -> None: ...

    def proceed(self) -> None: ...

    def terminate(self) -> None: ...


def _preflight_headers(policy: PolicyConfig, facts: RequestFacts) -> list[tuple[str, str]] | None:
    if not validate_request_method(facts.requested_method, policy):
        return None
    if not validate_request_headers(facts.requested_headers, policy):
        return None

    headers = [
        (ALLOW_METHODS_HEADER, policy.methods_value),
        (ALLOW_HEADERS_HEADER, policy.request_headers_value),
    ]
    if policy.max_age_seconds != "0":
        headers.append((MAX_AGE_HEADER, policy.max_age_seconds))
    return headers


def _actual_request_headers(policy: PolicyConfig, facts: RequestFacts) -> list[tuple[str, str]]:
    headers = []
    if policy.exposed_headers:
        headers.append((EXPOSE_HEADERS_HEADER, policy.exposed_headers))

    if policy.credentials_enabled:
        # "*" cannot be used for a resource that supports credentials
        headers.append((ALLOW_CREDENTIALS_HEADER, policy.credentials_value))
        headers.append((ALLOW_ORIGIN_HEADER, facts.origin))
    elif policy.allow_all_origins:
        headers.append((ALLOW_ORIGIN_HEADER, "*"))
    else:
        headers.append((ALLOW_ORIGIN_HEADER, facts.origin))
    return headers


def evaluate(policy: PolicyConfig, facts: RequestFacts) -> Decision:
    """Decide whether a request proceeds and which headers it gets.

    Args:
        policy: The shared, immutable policy.
        facts: Facts extracted from the inbound request.

    Returns:
        The Decision for this request.
    """
    if not facts.origin:
        return Decision(DecisionAction.CONTINUE, DecisionReason.NO_ORIGIN, (VARY_ORIGIN,))

    if not match_origin(facts.origin, policy):
        return Decision(DecisionAction.TERMINATE, DecisionReason.ORIGIN_REJECTED, (VARY_ORIGIN,))

    if facts.is_preflight:
        allow_headers = _preflight_headers(policy, facts)
        if allow_headers is None:
            return Decision(
                DecisionAction.TERMINATE,
                DecisionReason.PREFLIGHT_REJECTED,
                (VARY_ORIGIN,),
                preflight=True,
            )
        return Decision(
            DecisionAction.TERMINATE,
            DecisionReason.PREFLIGHT_OK,
            (VARY_ORIGIN, *allow_headers),
            preflight=True,
        )

    return Decision(
        DecisionAction.CONTINUE,
        DecisionReason.ALLOWED,
        (VARY_ORIGIN, *_actual_request_headers(policy, facts)),
    )


def apply(policy: PolicyConfig, host: CorsHost) -> Decision:
    """Run the pipeline against a host and carry out its decision.

    Vary is appended to any existing value; every other header replaces it.
    """
    facts = RequestFacts.from_headers(host.request_method(), host.request_header)
    decision = evaluate(policy, facts)

    for name, value in decision.headers:
        if name == VARY_HEADER:
            host.add_response_header(name, value)
        else:
            host.set_response_header(name, value)

    if decision.proceeds:
        host.proceed()
    else:
        host.terminate()
    return decision
