"""
Clerk webhook endpoint for identity synchronization.

SECURITY: All webhooks MUST verify the Svix signature before processing.
This endpoint does not use bearer auth (webhooks are server-to-server).

Status codes:
- 200: processed, skipped, ignored or failed during persistence. Clerk
  retries on any non-2xx, and retrying cannot fix a bad payload or a
  downstream error, so every verified event is acknowledged.
- 400: missing Svix headers, invalid JSON, missing event type
- 401: signature verification failed
- 500: verifier could not be initialized (secret misconfigured)

Supported Events:
- user.created, user.updated
- organization.created, organization.updated
- organizationMembership.created, organizationMembership.deleted
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from orgsync.api.schemas import WebhookResponse
from orgsync.auth.webhook_verifier import (
    RejectionReason,
    WebhookSignatureVerifier,
    WebhookVerificationError,
)
from orgsync.database.session import get_session_opener
from orgsync.errors import (
    AuthenticationError,
    OrgSyncError,
    ValidationError,
)
from orgsync.services.clerk_webhook_handler import STATUS_ERROR, ClerkWebhookHandler
from orgsync.services.webhook_events import InvalidEventError, parse_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


def get_webhook_verifier(request: Request) -> WebhookSignatureVerifier:
    """Return the verifier built at startup from CLERK_WEBHOOK_SECRET."""
    verifier = getattr(request.app.state, "webhook_verifier", None)
    if verifier is None:
        return WebhookSignatureVerifier(None)
    return verifier


def _rejection_to_error(error: WebhookVerificationError) -> OrgSyncError:
    if error.reason == RejectionReason.MISSING_HEADERS:
        return ValidationError("Missing webhook headers")
    if error.reason == RejectionReason.INVALID_SIGNATURE:
        return AuthenticationError("Invalid webhook signature")
    return OrgSyncError("Webhook verifier error")


@router.post("/clerk", response_model=WebhookResponse)
async def handle_clerk_webhook(
    request: Request,
    verifier: WebhookSignatureVerifier = Depends(get_webhook_verifier),
    open_session=Depends(get_session_opener),
):
    """
    Handle incoming Clerk webhooks.

    Verifies the Svix signature, parses the event into its typed form and
    reconciles it against the database. The session is only opened once the
    delivery has been authenticated and parsed.
    """
    body = await request.body()

    try:
        verifier.verify(body, request.headers)
    except WebhookVerificationError as e:
        raise _rejection_to_error(e)

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Invalid JSON in webhook payload: {e}")
        raise ValidationError("Invalid JSON")

    try:
        event = parse_event(payload)
    except InvalidEventError as e:
        logger.warning("Invalid webhook payload", extra={"error": str(e)})
        raise ValidationError(str(e))

    svix_id = request.headers.get("svix-id")
    logger.info(
        "Received Clerk webhook",
        extra={"event_type": event.event_type, "svix_id": svix_id},
    )

    with open_session() as session:
        try:
            handler = ClerkWebhookHandler(session)
            result = await run_in_threadpool(handler.handle, event)
        except Exception as e:
            # Unexpected error - log but still return 200 to prevent retries
            logger.error(
                f"Error processing webhook: {e}",
                extra={"event_type": event.event_type, "svix_id": svix_id},
                exc_info=True,
            )
            result = {"status": STATUS_ERROR, "reason": "Unexpected error"}

    logger.info(
        "Processed Clerk webhook",
        extra={"event_type": event.event_type, "status": result["status"]},
    )

    return WebhookResponse(
        received=True,
        status=result["status"],
        message=result.get("reason") or f"Event {event.event_type} processed",
    )
