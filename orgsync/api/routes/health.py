"""Health check endpoint. Does not require authentication."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health")
def health_check(request: Request):
    """Liveness probe with configuration flags."""
    state = request.app.state
    return {
        "status": "ok",
        "webhook_secret_configured": bool(getattr(state, "webhook_secret_configured", False)),
        "auth_configured": getattr(state, "token_verifier", None) is not None,
    }
