"""
Process configuration loaded from environment variables.

Outside production a local .env file is loaded first (python-dotenv).
Values already present in the environment take precedence over .env.

Environment variables:
- DATABASE_URL: SQLAlchemy database URL (postgres:// is normalized)
- PORT: HTTP listen port (default 8080)
- CLERK_WEBHOOK_SECRET: Svix signing secret (whsec_...)
- CLERK_ISSUER_URL: Expected JWT issuer, also used to derive the JWKS URL
- CLERK_JWKS_URL: Explicit JWKS URL (overrides the issuer-derived one)
- CLERK_JWT_KEY: PEM public key for networkless JWT verification
- CLERK_AUTHORIZED_PARTIES: Comma-separated allowed azp values
- ALLOWED_ORIGINS: Comma-separated CORS origins
- ENV: development | test | production
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000"


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def normalize_database_url(database_url: Optional[str]) -> Optional[str]:
    """
    Normalize a database URL for SQLAlchemy.

    Handles Render/Heroku style postgres:// URLs by converting to postgresql://.
    """
    if database_url and database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    return database_url


@dataclass(frozen=True)
class ClerkConfig:
    """Key material and expectations for Clerk-issued tokens and webhooks."""
    webhook_secret: Optional[str] = None
    issuer: Optional[str] = None
    jwks_url: Optional[str] = None
    jwt_key: Optional[str] = None
    authorized_parties: List[str] = field(default_factory=list)

    @property
    def resolved_jwks_url(self) -> Optional[str]:
        """JWKS URL, derived from the issuer when not set explicitly."""
        if self.jwks_url:
            return self.jwks_url
        if self.issuer:
            return f"{self.issuer.rstrip('/')}/.well-known/jwks.json"
        return None

    @property
    def token_verification_configured(self) -> bool:
        return bool(self.jwt_key or self.resolved_jwks_url)


@dataclass(frozen=True)
class Settings:
    """Immutable process settings."""
    database_url: Optional[str] = None
    port: int = DEFAULT_PORT
    environment: str = "development"
    allowed_origins: List[str] = field(
        default_factory=lambda: [DEFAULT_ALLOWED_ORIGINS]
    )
    clerk: ClerkConfig = field(default_factory=ClerkConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Returns:
        Settings instance

    Raises:
        ValueError: If PORT is not an integer
    """
    environment = os.getenv("ENV", "development")
    if environment != "production":
        load_dotenv(find_dotenv(usecwd=True), override=False)

    port_raw = os.getenv("PORT") or str(DEFAULT_PORT)
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {port_raw!r}")

    clerk = ClerkConfig(
        webhook_secret=os.getenv("CLERK_WEBHOOK_SECRET") or None,
        issuer=os.getenv("CLERK_ISSUER_URL") or None,
        jwks_url=os.getenv("CLERK_JWKS_URL") or None,
        jwt_key=os.getenv("CLERK_JWT_KEY") or None,
        authorized_parties=_split_csv(os.getenv("CLERK_AUTHORIZED_PARTIES")),
    )

    settings = Settings(
        database_url=normalize_database_url(os.getenv("DATABASE_URL")),
        port=port,
        environment=environment,
        allowed_origins=_split_csv(
            os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
        ),
        clerk=clerk,
    )

    logger.info(
        "Settings loaded",
        extra={
            "environment": settings.environment,
            "database_configured": bool(settings.database_url),
            "webhook_secret_configured": bool(clerk.webhook_secret),
            "token_verification_configured": clerk.token_verification_configured,
        },
    )
    return settings
