"""
Clerk Webhook Handler for processing verified Clerk webhook events.

Handles the following event types:
- user.created, user.updated
- organization.created, organization.updated
- organizationMembership.created, organizationMembership.deleted

Every handler is an idempotent transition on the database: upserts keyed by
Clerk IDs, insert-if-absent for memberships and delete-if-present for
membership removal. Clerk delivers at least once, so replaying any event
converges to the same state.

Each event runs in one transaction. Persistence failures are rolled back
and logged, never raised: a failed event is acknowledged so Clerk does not
redeliver it.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from orgsync.models.organization_member import MemberRole, map_clerk_role
from orgsync.repositories import (
    OrganizationMemberRepository,
    OrganizationRepository,
    UserRepository,
)
from orgsync.services.webhook_events import (
    MembershipCreatedEvent,
    MembershipDeletedEvent,
    OrganizationEvent,
    UnknownEvent,
    UserEvent,
    WebhookEvent,
    parse_event,
)

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_SKIPPED = "skipped"
STATUS_IGNORED = "ignored"
STATUS_ERROR = "error"


class ClerkWebhookHandler:
    """
    Handler for Clerk webhook events.

    Routes typed events to handler methods and manages database transactions.
    """

    def __init__(self, session: Session):
        """
        Initialize handler with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session
        self.users = UserRepository(session)
        self.organizations = OrganizationRepository(session)
        self.members = OrganizationMemberRepository(session)

    def handle_payload(self, payload: Any) -> Dict[str, Any]:
        """
        Parse a decoded webhook body and handle it.

        Raises:
            InvalidEventError: If the payload has no usable event type
        """
        return self.handle(parse_event(payload))

    def handle(self, event: WebhookEvent) -> Dict[str, Any]:
        """
        Apply a typed event.

        Args:
            event: Parsed webhook event

        Returns:
            Dict with "status" (success, skipped, ignored, error) and details
        """
        if isinstance(event, UnknownEvent):
            logger.info(
                "Unhandled webhook event type",
                extra={"event_type": event.event_type},
            )
            return {"status": STATUS_IGNORED, "reason": f"Unsupported event type: {event.event_type}"}

        if not event.is_complete:
            logger.warning(
                "Missing required fields in webhook payload",
                extra={"event_type": event.event_type},
            )
            return {"status": STATUS_SKIPPED, "reason": "Missing required fields"}

        handlers = {
            UserEvent: self.handle_user_event,
            OrganizationEvent: self.handle_organization_event,
            MembershipCreatedEvent: self.handle_membership_created,
            MembershipDeletedEvent: self.handle_membership_deleted,
        }
        handler = handlers[type(event)]

        try:
            result = handler(event)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                f"Error handling {event.event_type}",
                extra={"error": str(e), "event_type": event.event_type},
                exc_info=True,
            )
            return {"status": STATUS_ERROR, "reason": "Persistence error"}
        except Exception:
            self.session.rollback()
            raise

        if result is None:
            return {"status": STATUS_SKIPPED, "reason": "Referenced user or organization not found"}
        return {"status": STATUS_SUCCESS, "result": result}

    # =========================================================================
    # User Event Handlers
    # =========================================================================

    def handle_user_event(self, event: UserEvent) -> Dict[str, Any]:
        """Upsert the User keyed by clerk_user_id."""
        user = self.users.upsert(
            clerk_user_id=event.clerk_user_id,
            email=event.email,
            first_name=event.first_name,
            last_name=event.last_name,
            avatar_url=event.avatar_url,
        )

        logger.info(
            f"Processed {event.event_type}",
            extra={"clerk_user_id": event.clerk_user_id, "user_id": user.id},
        )
        return {"user_id": user.id, "clerk_user_id": event.clerk_user_id}

    # =========================================================================
    # Organization Event Handlers
    # =========================================================================

    def handle_organization_event(self, event: OrganizationEvent) -> Dict[str, Any]:
        """
        Upsert the Organization and make sure its creator is an owner.

        The owner grant is insert-if-absent, so replays never duplicate it,
        and it shares the upsert's transaction.
        """
        org = self.organizations.upsert(
            clerk_org_id=event.clerk_org_id,
            name=event.name,
            slug=event.slug,
            logo_url=event.logo_url,
        )

        owner_created = False
        if event.created_by:
            creator = self.users.get_by_clerk_id(event.created_by)
            if creator is not None:
                owner_created = self.members.create_if_absent(
                    organization_id=org.id,
                    user_id=creator.id,
                    role=MemberRole.OWNER,
                )
            else:
                logger.info(
                    "Organization creator not provisioned; skipping owner grant",
                    extra={"clerk_org_id": event.clerk_org_id, "created_by": event.created_by},
                )

        logger.info(
            f"Processed {event.event_type}",
            extra={
                "clerk_org_id": event.clerk_org_id,
                "organization_id": org.id,
                "owner_created": owner_created,
            },
        )
        return {
            "organization_id": org.id,
            "clerk_org_id": event.clerk_org_id,
            "owner_created": owner_created,
        }

    # =========================================================================
    # Membership Event Handlers
    # =========================================================================

    def handle_membership_created(self, event: MembershipCreatedEvent) -> Optional[Dict[str, Any]]:
        """Create the membership for (org, user) unless it already exists."""
        resolved = self._resolve_pair(event.clerk_org_id, event.clerk_user_id)
        if resolved is None:
            return None
        org_id, user_id = resolved

        role = map_clerk_role(event.role)
        created = self.members.create_if_absent(
            organization_id=org_id,
            user_id=user_id,
            role=role,
            clerk_membership_id=event.clerk_membership_id,
        )

        result = {
            "clerk_org_id": event.clerk_org_id,
            "clerk_user_id": event.clerk_user_id,
            "role": role.value,
            "created": created,
        }
        logger.info(
            "Processed organizationMembership.created",
            extra={
                "clerk_org_id": event.clerk_org_id,
                "clerk_user_id": event.clerk_user_id,
                "role": role.value,
                "membership_created": created,
            },
        )
        return result

    def handle_membership_deleted(self, event: MembershipDeletedEvent) -> Optional[Dict[str, Any]]:
        """Delete whatever membership links (org, user)."""
        resolved = self._resolve_pair(event.clerk_org_id, event.clerk_user_id)
        if resolved is None:
            return None
        org_id, user_id = resolved

        removed = self.members.delete(organization_id=org_id, user_id=user_id)

        result = {
            "clerk_org_id": event.clerk_org_id,
            "clerk_user_id": event.clerk_user_id,
            "removed": removed,
        }
        logger.info(
            "Processed organizationMembership.deleted",
            extra={
                "clerk_org_id": event.clerk_org_id,
                "clerk_user_id": event.clerk_user_id,
                "membership_removed": removed,
            },
        )
        return result

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _resolve_pair(self, clerk_org_id: str, clerk_user_id: str):
        """
        Resolve Clerk org and user IDs to internal IDs.

        Returns:
            (organization_id, user_id) or None if either is unknown
        """
        org = self.organizations.get_by_clerk_id(clerk_org_id)
        if org is None:
            logger.warning("Organization not found", extra={"clerk_org_id": clerk_org_id})
            return None

        user = self.users.get_by_clerk_id(clerk_user_id)
        if user is None:
            logger.warning("User not found", extra={"clerk_user_id": clerk_user_id})
            return None

        return org.id, user.id
