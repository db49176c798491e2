"""Route modules."""

from fastapi import APIRouter

from corsgate.api.routes.health import router as health_router


def create_api_router() -> APIRouter:
    """Create the top-level API router."""
    router = APIRouter()
    router.include_router(health_router)
    return router
