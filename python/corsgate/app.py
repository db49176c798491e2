"""FastAPI application creation and configuration.

This module creates the FastAPI application instance, builds the CORS policy
once from settings and installs CORSPolicyMiddleware in front of every route.

Startup fails fast on an invalid CORS configuration: the policy error is logged
as cors_policy_invalid and re-raised, so the server never accepts traffic
without a usable policy.
"""

from fastapi import FastAPI

from corsgate.api.routes import create_api_router
from corsgate.config import Settings, get_settings
from corsgate.cors.policy import PolicyConfig, build_policy
from corsgate.logging import configure_logging, get_logger
from corsgate.middleware.cors import CORSPolicyMiddleware

logger = get_logger(__name__)


def load_policy(settings: Settings) -> PolicyConfig:
    """Build the CORS policy from settings.

    Raises:
        CorsConfigError: If the CORS configuration is invalid.
    """
    result = build_policy(settings.cors_config())
    if not result.ok:
        logger.error(
            "cors_policy_invalid",
            code=result.error.code.value,
            message=result.error.message,
        )
    return result.unwrap()


def create_app(settings: Settings | None = None, policy: PolicyConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings (defaults to environment settings).
        policy: Optional prebuilt policy (for testing); built from settings if None.

    Returns:
        Configured FastAPI application instance.

    Raises:
        CorsConfigError: If no policy is given and the settings hold an invalid one.
    """
    settings = settings or get_settings()
    configure_logging(json_format=settings.use_json_logs, level=settings.log_level_value)

    if policy is None:
        policy = load_policy(settings)

    app = FastAPI(
        title="corsgate",
        description="CORS policy enforcement in front of an ASGI application",
        version="0.1.0",
    )
    app.include_router(create_api_router())

    app.add_middleware(
        CORSPolicyMiddleware,
        policy=policy,
        terminate_status=settings.cors_terminate_status,
    )
    logger.info(
        "cors_policy_enabled",
        env=settings.corsgate_env.value,
        allow_all_origins=policy.allow_all_origins,
        origins=sorted(policy.origins),
        credentials=policy.credentials_enabled,
        validate_headers=policy.validate_headers,
    )

    return app
