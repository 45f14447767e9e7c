"""
Clerk JWT Verifier for authenticating Clerk-issued bearer tokens.

This module handles:
- Authorization header parsing ("Bearer <token>")
- Signing key resolution from a configured PEM key or Clerk's JWKS
- JWT signature, expiration and issuer validation
- Subject and active organization extraction

SECURITY:
- Clerk is the ONLY authentication authority
- Every failure collapses to a single invalid_token outcome; the reason is
  logged but never returned to the caller

Documentation: https://clerk.com/docs/backend-requests/handling/manual-jwt
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Optional

import jwt
from jwt import PyJWKClient

from orgsync.config.settings import ClerkConfig

logger = logging.getLogger(__name__)


class ClerkVerificationError(Exception):
    """Exception raised when Clerk JWT verification fails."""

    def __init__(self, message: str = "Invalid token", error_code: str = "invalid_token"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


@dataclass(frozen=True)
class VerifiedToken:
    """Identity extracted from a verified Clerk session token."""
    clerk_user_id: str
    active_org_id: Optional[str] = None
    session_id: Optional[str] = None


def parse_bearer_token(authorization: Optional[str]) -> str:
    """
    Extract the token from an Authorization header.

    The header must be exactly two space-separated parts with the
    "Bearer" scheme.

    Raises:
        ClerkVerificationError: With error_code missing_header or invalid_header
    """
    if not authorization:
        raise ClerkVerificationError(
            "Missing authorization header", error_code="missing_header"
        )

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise ClerkVerificationError(
            "Invalid authorization header format", error_code="invalid_header"
        )
    return parts[1]


def _active_org_id(claims: Dict[str, Any]) -> Optional[str]:
    """Active organization from v1 (org_id) or v2 (o.id) session claims."""
    org_id = claims.get("org_id")
    if isinstance(org_id, str) and org_id:
        return org_id
    org_claim = claims.get("o")
    if isinstance(org_claim, dict):
        org_id = org_claim.get("id")
        if isinstance(org_id, str) and org_id:
            return org_id
    return None


class ClerkJWTVerifier:
    """
    Verifies Clerk-issued JWTs.

    Key material comes from the ClerkConfig passed in, never from ambient
    process state:
    - jwt_key: PEM public key, verification without network access
    - otherwise the JWKS URL (explicit, or derived from the issuer)

    Usage:
        verifier = ClerkJWTVerifier(settings.clerk)
        token = verifier.verify_token(parse_bearer_token(header))
        token.clerk_user_id
    """

    # JWKS cache duration in seconds
    JWKS_CACHE_DURATION = 3600  # 1 hour

    # Clock skew tolerance in seconds (for exp/iat validation)
    CLOCK_SKEW_SECONDS = 60

    ALGORITHMS = ["RS256"]

    def __init__(self, config: ClerkConfig, jwks_client: Optional[PyJWKClient] = None):
        """
        Initialize the Clerk JWT verifier.

        Args:
            config: Clerk key material and expectations
            jwks_client: Pre-built JWKS client (tests inject fakes here)

        Raises:
            ClerkVerificationError: If no key material is configured
        """
        if not config.jwt_key and not config.resolved_jwks_url and jwks_client is None:
            raise ClerkVerificationError(
                "CLERK_JWT_KEY, CLERK_JWKS_URL or CLERK_ISSUER_URL is required",
                error_code="config_error",
            )

        self._config = config
        self._public_key = config.jwt_key.replace("\\n", "\n") if config.jwt_key else None
        self._jwks_client = jwks_client
        self._jwks_client_lock = Lock()

        logger.info(
            "Initialized ClerkJWTVerifier",
            extra={
                "issuer": config.issuer,
                "jwks_url": config.resolved_jwks_url,
                "static_key": bool(self._public_key),
            },
        )

    def _get_jwks_client(self) -> PyJWKClient:
        """Get or lazily create the caching JWKS client."""
        with self._jwks_client_lock:
            if self._jwks_client is None:
                self._jwks_client = PyJWKClient(
                    self._config.resolved_jwks_url,
                    cache_keys=True,
                    lifespan=self.JWKS_CACHE_DURATION,
                )
                logger.debug(
                    "Created JWKS client",
                    extra={"jwks_url": self._config.resolved_jwks_url},
                )
            return self._jwks_client

    def _signing_key(self, token: str):
        if self._public_key:
            return self._public_key
        return self._get_jwks_client().get_signing_key_from_jwt(token).key

    def verify_token(self, token: str) -> VerifiedToken:
        """
        Verify a Clerk JWT.

        Args:
            token: The raw JWT (without "Bearer ")

        Returns:
            VerifiedToken with subject and optional active organization

        Raises:
            ClerkVerificationError: If verification fails for any reason
        """
        if not token:
            raise ClerkVerificationError()

        try:
            claims = jwt.decode(
                token,
                self._signing_key(token),
                algorithms=self.ALGORITHMS,
                issuer=self._config.issuer,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_nbf": True,
                    "verify_iss": bool(self._config.issuer),
                    "require": ["sub", "exp", "iat"],
                },
                leeway=self.CLOCK_SKEW_SECONDS,
            )
        except Exception as e:
            # Expired, malformed, bad signature, unreachable JWKS ...
            logger.warning(
                "Token verification failed",
                extra={"error_type": type(e).__name__, "error": str(e)},
            )
            raise ClerkVerificationError()

        azp = claims.get("azp")
        parties = self._config.authorized_parties
        if parties and azp and azp not in parties:
            logger.warning("Token authorized party rejected", extra={"azp": azp})
            raise ClerkVerificationError()

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise ClerkVerificationError()

        logger.debug("Token verified", extra={"sub": subject, "sid": claims.get("sid")})

        return VerifiedToken(
            clerk_user_id=subject,
            active_org_id=_active_org_id(claims),
            session_id=claims.get("sid"),
        )
