from orgsync.auth.clerk_verifier import (
    ClerkJWTVerifier,
    ClerkVerificationError,
    VerifiedToken,
    parse_bearer_token,
)
from orgsync.auth.webhook_verifier import (
    RejectionReason,
    WebhookSignatureVerifier,
    WebhookVerificationError,
)

__all__ = [
    "ClerkJWTVerifier",
    "ClerkVerificationError",
    "VerifiedToken",
    "parse_bearer_token",
    "RejectionReason",
    "WebhookSignatureVerifier",
    "WebhookVerificationError",
]
