"""
Organization access service.

Read-side authorization for the API:
- Resolve the authenticated Clerk user to a local User
- List the user's organizations with roles
- Authorize access to a single organization

authorize() checks, in order, each with a distinct failure:
1. subject resolves to a User           -> AuthenticationError (401)
2. membership exists for (org, user)    -> AuthorizationError (403)
3. organization row still exists        -> NotFoundError (404)

No method mutates state.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from orgsync.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    TransientPersistenceError,
)
from orgsync.models.organization import Organization
from orgsync.models.organization_member import MemberRole
from orgsync.models.user import User
from orgsync.repositories import (
    OrganizationMemberRepository,
    OrganizationRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizationAccess:
    """An organization together with the caller's role in it."""
    organization: Organization
    role: MemberRole


class OrganizationAccessService:
    """Resolves callers and their organization memberships."""

    def __init__(self, session: Session):
        self.session = session
        self.users = UserRepository(session)
        self.organizations = OrganizationRepository(session)
        self.members = OrganizationMemberRepository(session)

    def get_current_user(self, clerk_user_id: str) -> User:
        """
        Get the local User for a verified Clerk subject.

        Raises:
            NotFoundError: If the user has not been provisioned by webhook yet
            TransientPersistenceError: If the lookup fails
        """
        user = self._lookup_user(clerk_user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_user_organizations(self, clerk_user_id: str) -> List[OrganizationAccess]:
        """
        List the caller's organizations, most recently joined first.

        Raises:
            NotFoundError: If the user has not been provisioned
            TransientPersistenceError: If the lookup fails
        """
        user = self.get_current_user(clerk_user_id)
        try:
            rows = self.organizations.get_user_organizations(user.id)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch organizations", extra={"error": str(e)})
            raise TransientPersistenceError("Failed to fetch organizations")

        return [OrganizationAccess(organization=org, role=MemberRole(role)) for org, role in rows]

    def authorize(self, clerk_user_id: str, organization_id: str) -> OrganizationAccess:
        """
        Authorize read access to an organization.

        Args:
            clerk_user_id: Verified token subject
            organization_id: Internal organization ID

        Returns:
            OrganizationAccess with the organization and the caller's role

        Raises:
            AuthenticationError: Subject does not resolve to a User
            AuthorizationError: Caller is not a member
            NotFoundError: Membership exists but the organization is gone
            TransientPersistenceError: A lookup failed
        """
        user = self._lookup_user(clerk_user_id)
        if user is None:
            raise AuthenticationError("User not found")

        try:
            member = self.members.get_member(organization_id, user.id)
        except SQLAlchemyError as e:
            logger.error("Failed to verify membership", extra={"error": str(e)})
            raise TransientPersistenceError("Failed to verify membership")

        if member is None:
            logger.info(
                "Organization access denied",
                extra={"user_id": user.id, "organization_id": organization_id},
            )
            raise AuthorizationError("Access denied")

        try:
            org = self.organizations.get_by_id(organization_id)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch organization", extra={"error": str(e)})
            raise TransientPersistenceError("Failed to fetch organization")

        if org is None:
            raise NotFoundError("Organization not found")

        return OrganizationAccess(organization=org, role=MemberRole(member.role))

    def _lookup_user(self, clerk_user_id: str):
        try:
            return self.users.get_by_clerk_id(clerk_user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch user", extra={"error": str(e)})
            raise TransientPersistenceError("Failed to fetch user")
