"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from .. import __version__

router = APIRouter()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": _timestamp(),
        "service": "kidcreatives",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once the lifespan has built the session and opened the Gemini client."""
    gemini = getattr(request.app.state, "gemini", None)
    return {
        "ready": getattr(request.app.state, "session", None) is not None
        and gemini is not None and gemini.is_initialized,
        "timestamp": _timestamp(),
    }
