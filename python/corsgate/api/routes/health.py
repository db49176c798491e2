"""Health check endpoints."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Liveness check endpoint.

    Returns 200 if the process is running. Requests from disallowed
    origins never reach this handler.
    """
    return {"data": {"status": "ok"}}
