"""Pure ASGI middleware that enforces a CORS policy.

- Does NOT use BaseHTTPMiddleware (buffers StreamingResponse, defeats incremental delivery).
- Non-HTTP scopes (websocket, lifespan) pass through untouched.
- Continued requests get their CORS headers injected on http.response.start.
- Terminated requests (disallowed origin, any preflight) are answered here with
  an empty body and never reach the application.

The decision engine sets no status code. The status of a terminated request is
a property of this host binding (terminate_status, default 200).
"""

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from corsgate.cors.engine import Decision, DecisionAction, DecisionReason, apply
from corsgate.cors.policy import PolicyConfig
from corsgate.logging import get_logger, request_context

logger = get_logger(__name__)

REJECTION_REASONS = {DecisionReason.ORIGIN_REJECTED, DecisionReason.PREFLIGHT_REJECTED}


class ScopeHost:
    """CorsHost over an ASGI scope.

    Response headers are collected rather than written, and proceed/terminate
    only record the action. The middleware writes the collected headers on both
    paths: into its own response on terminate, into the application's
    http.response.start message on continue.
    """

    def __init__(self, scope: Scope):
        self.request_headers = Headers(scope=scope)
        self.method = scope["method"]
        self.response_headers = MutableHeaders()
        self.action: DecisionAction | None = None

    def request_method(self) -> str:
        return self.method

    def request_header(self, name: str) -> str | None:
        return self.request_headers.get(name)

    def add_response_header(self, name: str, value: str) -> None:
        self.response_headers.append(name, value)

    def set_response_header(self, name: str, value: str) -> None:
        self.response_headers[name] = value

    def proceed(self) -> None:
        self.action = DecisionAction.CONTINUE

    def terminate(self) -> None:
        self.action = DecisionAction.TERMINATE


class CORSPolicyMiddleware:
    """Pure ASGI middleware applying one immutable PolicyConfig to every request."""

    def __init__(self, app: ASGIApp, policy: PolicyConfig, terminate_status: int = 200):
        self.app = app
        self.policy = policy
        self.terminate_status = terminate_status

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        host = ScopeHost(scope)
        with request_context(
            path=scope.get("path"),
            method=host.method,
            origin=host.request_header("origin"),
        ):
            decision = apply(self.policy, host)
            self._log_decision(decision)

            if host.action is DecisionAction.TERMINATE:
                response = Response(
                    status_code=self.terminate_status, headers=host.response_headers
                )
                await response(scope, receive, send)
                return

            async def send_with_cors(message: Message) -> None:
                if message["type"] == "http.response.start":
                    message.setdefault("headers", [])
                    resp_headers = MutableHeaders(scope=message)
                    for name, value in host.response_headers.items():
                        if name == "vary":
                            resp_headers.add_vary_header(value)
                        else:
                            resp_headers[name] = value
                await send(message)

            await self.app(scope, receive, send_with_cors)

    def _log_decision(self, decision: Decision) -> None:
        if decision.reason in REJECTION_REASONS:
            logger.info(
                "cors_request_rejected",
                reason=decision.reason.value,
                preflight=decision.preflight,
            )
        else:
            logger.debug(
                "cors_request_decided",
                reason=decision.reason.value,
                preflight=decision.preflight,
                action=decision.action.value,
            )
