"""
FastAPI application entry point for orgsync.

Keeps users, organizations and memberships in sync with Clerk through
signed webhooks and serves bearer-authenticated read endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from orgsync.api.routes import health, organizations, users, webhooks_clerk
from orgsync.auth.clerk_verifier import ClerkJWTVerifier, ClerkVerificationError
from orgsync.auth.webhook_verifier import WebhookSignatureVerifier
from orgsync.config.settings import Settings, load_settings
from orgsync.database.session import configure_engine, dispose_engine
from orgsync.errors import OrgSyncError

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _build_token_verifier(settings: Settings) -> Optional[ClerkJWTVerifier]:
    try:
        return ClerkJWTVerifier(settings.clerk)
    except ClerkVerificationError as e:
        logger.warning(
            f"Clerk authentication not configured ({e.message}). "
            "Protected endpoints will return 503."
        )
        return None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings; loaded from the environment when omitted
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info("Starting orgsync API", extra={"environment": settings.environment})

        if settings.database_url:
            configure_engine(settings.database_url)
        else:
            logger.error(
                "DATABASE_URL is not set. Database-backed endpoints will return 503."
            )

        yield

        logger.info("Shutting down orgsync API")
        dispose_engine()

    app = FastAPI(title="orgsync", version="0.1.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.webhook_verifier = WebhookSignatureVerifier(settings.clerk.webhook_secret)
    app.state.webhook_secret_configured = bool(settings.clerk.webhook_secret)
    app.state.token_verifier = _build_token_verifier(settings)

    if not settings.clerk.webhook_secret:
        logger.error("CLERK_WEBHOOK_SECRET not configured; webhooks will return 500")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    @app.exception_handler(OrgSyncError)
    async def orgsync_error_handler(request: Request, exc: OrgSyncError):
        if exc.http_status >= 500:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "error": exc.message},
            )
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error",
            extra={"path": request.url.path},
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(health.router)
    app.include_router(webhooks_clerk.router)
    app.include_router(users.router)
    app.include_router(organizations.router)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = load_settings()
    uvicorn.run(create_app(_settings), host="0.0.0.0", port=_settings.port)
