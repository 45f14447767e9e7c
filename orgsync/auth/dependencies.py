"""
FastAPI dependencies for Clerk bearer-token authentication.

Usage:

    @router.get("/protected")
    def protected_route(token: VerifiedToken = Depends(require_auth)):
        return {"clerk_user_id": token.clerk_user_id}

The verifier is created once at startup and stored on app.state, so tests
can substitute a fake via app.dependency_overrides[get_token_verifier].
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from orgsync.auth.clerk_verifier import (
    ClerkJWTVerifier,
    ClerkVerificationError,
    VerifiedToken,
    parse_bearer_token,
)
from orgsync.errors import AuthenticationError

logger = logging.getLogger(__name__)


def get_token_verifier(request: Request) -> ClerkJWTVerifier:
    """
    Return the application's token verifier.

    Raises:
        HTTPException: 503 if token verification is not configured
    """
    verifier = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        logger.error("Token verification requested but not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication not configured",
        )
    return verifier


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """
    Extract the raw token from the Authorization header.

    Raises:
        AuthenticationError: Missing or malformed header
    """
    try:
        return parse_bearer_token(authorization)
    except ClerkVerificationError as e:
        raise AuthenticationError(e.message)


def require_auth(
    token: str = Depends(get_bearer_token),
    verifier: ClerkJWTVerifier = Depends(get_token_verifier),
) -> VerifiedToken:
    """
    Authenticate the request from its Authorization header.

    The header is parsed before the verifier is looked up, so a missing or
    malformed header is a 401 even when verification is not configured.

    Raises:
        AuthenticationError: Missing or malformed header, or invalid token
    """
    try:
        return verifier.verify_token(token)
    except ClerkVerificationError as e:
        raise AuthenticationError(e.message)
