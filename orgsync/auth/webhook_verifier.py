"""
Svix signature verification for Clerk webhooks.

SECURITY: All webhooks MUST verify the Svix signature before processing.
Clerk uses Svix for webhook delivery and signature verification.

Headers:
- svix-id: Unique message identifier
- svix-timestamp: Unix timestamp of the message
- svix-signature: Space-separated "v1,<base64>" signatures

The signature is an HMAC-SHA256 over "{svix_id}.{svix_timestamp}.{body}"
with the shared signing secret (whsec_...). Timestamp tolerance is enforced
by the svix library.

Documentation: https://clerk.com/docs/webhooks
"""

import json
import logging
from enum import Enum
from typing import Mapping, Optional

from svix.webhooks import Webhook, WebhookVerificationError as SvixVerificationError

logger = logging.getLogger(__name__)

SVIX_ID_HEADER = "svix-id"
SVIX_TIMESTAMP_HEADER = "svix-timestamp"
SVIX_SIGNATURE_HEADER = "svix-signature"

REQUIRED_HEADERS = (SVIX_ID_HEADER, SVIX_TIMESTAMP_HEADER, SVIX_SIGNATURE_HEADER)


class RejectionReason(str, Enum):
    MISSING_HEADERS = "missing-headers"
    INVALID_SIGNATURE = "invalid-signature"
    VERIFIER_UNAVAILABLE = "verifier-unavailable"


class WebhookVerificationError(Exception):
    """Raised when a webhook cannot be authenticated."""

    def __init__(self, reason: RejectionReason, message: Optional[str] = None):
        self.reason = reason
        self.message = message or reason.value
        super().__init__(self.message)


class WebhookSignatureVerifier:
    """
    Verifies Svix-signed webhook deliveries with a shared secret.

    Usage:
        verifier = WebhookSignatureVerifier(settings.clerk.webhook_secret)
        verifier.verify(body, request.headers)
    """

    def __init__(self, secret: Optional[str]):
        self._secret = secret

    def _build_webhook(self) -> Webhook:
        if not self._secret:
            raise WebhookVerificationError(
                RejectionReason.VERIFIER_UNAVAILABLE,
                "Webhook secret is not configured",
            )
        try:
            return Webhook(self._secret)
        except Exception as e:
            logger.error(
                "Error creating webhook verifier",
                extra={"error_type": type(e).__name__},
            )
            raise WebhookVerificationError(
                RejectionReason.VERIFIER_UNAVAILABLE,
                "Webhook verifier error",
            )

    def verify(self, payload: bytes, headers: Mapping[str, str]) -> None:
        """
        Verify a webhook delivery.

        Header presence is checked before any cryptography.

        Args:
            payload: Raw request body bytes
            headers: Request headers (case-insensitive lookup by svix name)

        Raises:
            WebhookVerificationError: With reason missing-headers,
                invalid-signature or verifier-unavailable
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        svix_headers = {name: lowered.get(name) or "" for name in REQUIRED_HEADERS}

        if not all(svix_headers.values()):
            logger.warning(
                "Missing Svix headers",
                extra={name: bool(value) for name, value in svix_headers.items()},
            )
            raise WebhookVerificationError(
                RejectionReason.MISSING_HEADERS,
                "Missing webhook headers",
            )

        webhook = self._build_webhook()

        try:
            webhook.verify(payload, svix_headers)
        except SvixVerificationError as e:
            logger.warning(
                "Webhook signature verification failed",
                extra={"svix_id": svix_headers[SVIX_ID_HEADER], "error": str(e)},
            )
            raise WebhookVerificationError(
                RejectionReason.INVALID_SIGNATURE,
                "Invalid webhook signature",
            )
        except json.JSONDecodeError:
            # svix decodes the body only after the signature matched;
            # the caller reports the unparseable body itself.
            return
        except (ValueError, TypeError) as e:
            # Malformed signature header, e.g. an entry without "v1,"
            logger.warning(
                "Malformed webhook signature",
                extra={"svix_id": svix_headers[SVIX_ID_HEADER], "error": str(e)},
            )
            raise WebhookVerificationError(
                RejectionReason.INVALID_SIGNATURE,
                "Invalid webhook signature",
            )
