"""Organization membership persistence."""

import logging
from typing import Optional

from orgsync.models.organization_member import MemberRole, OrganizationMember
from orgsync.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class OrganizationMemberRepository(BaseRepository[OrganizationMember]):
    """
    Membership rows keyed by (organization_id, user_id).

    At most one row exists per pair; creation never overwrites the role of
    an existing row.
    """

    model = OrganizationMember

    def create_if_absent(
        self,
        organization_id: str,
        user_id: str,
        role: MemberRole,
        clerk_membership_id: Optional[str] = None,
    ) -> bool:
        """
        Insert a membership unless one already exists for the pair.

        INSERT ... ON CONFLICT (organization_id, user_id) DO NOTHING.

        Returns:
            True if a row was inserted, False if one already existed
        """
        stmt = self._insert().values(
            organization_id=organization_id,
            user_id=user_id,
            role=MemberRole(role).value,
            clerk_membership_id=clerk_membership_id,
        )
        stmt = stmt.on_conflict_do_nothing(
            index_elements=["organization_id", "user_id"],
        )
        result = self.db_session.execute(stmt)
        return result.rowcount == 1

    def get_member(self, organization_id: str, user_id: str) -> Optional[OrganizationMember]:
        """
        Get the membership for an (organization, user) pair.

        Returns:
            OrganizationMember if found, None otherwise
        """
        return self.db_session.query(OrganizationMember).filter(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.user_id == user_id,
        ).populate_existing().first()

    def delete(self, organization_id: str, user_id: str) -> bool:
        """
        Delete the membership for an (organization, user) pair.

        Matches on the pair only, regardless of clerk_membership_id.

        Returns:
            True if a row was deleted, False if none existed
        """
        deleted = self.db_session.query(OrganizationMember).filter(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.user_id == user_id,
        ).delete(synchronize_session=False)
        return deleted > 0
