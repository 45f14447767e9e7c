"""Organization persistence."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func

from orgsync.models.organization import Organization
from orgsync.models.organization_member import OrganizationMember
from orgsync.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class OrganizationRepository(BaseRepository[Organization]):
    """Upsert and lookup of organizations keyed by clerk_org_id."""

    model = Organization

    def get_by_clerk_id(self, clerk_org_id: str) -> Optional[Organization]:
        """
        Get organization by Clerk organization ID.

        Returns:
            Organization if found, None otherwise
        """
        return self.db_session.query(Organization).filter(
            Organization.clerk_org_id == clerk_org_id
        ).populate_existing().first()

    def upsert(
        self,
        clerk_org_id: str,
        name: str,
        slug: str,
        logo_url: Optional[str] = None,
    ) -> Organization:
        """
        Insert an organization or update name, slug and logo of the existing one.

        description is only set on insert; Clerk webhooks do not carry it.

        Returns:
            The stored Organization
        """
        stmt = self._insert().values(
            clerk_org_id=clerk_org_id,
            name=name,
            slug=slug,
            description="",
            logo_url=logo_url,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["clerk_org_id"],
            set_={
                "name": stmt.excluded.name,
                "slug": stmt.excluded.slug,
                "logo_url": stmt.excluded.logo_url,
                "updated_at": func.now(),
            },
        )
        self.db_session.execute(stmt)

        org = self.get_by_clerk_id(clerk_org_id)
        logger.debug(
            "Upserted organization",
            extra={"clerk_org_id": clerk_org_id, "organization_id": org.id},
        )
        return org

    def get_user_organizations(self, user_id: str) -> List[Tuple[Organization, str]]:
        """
        List organizations a user belongs to, with the user's role.

        Args:
            user_id: Internal user ID

        Returns:
            (Organization, role) pairs, most recently joined first
        """
        rows = (
            self.db_session.query(Organization, OrganizationMember.role)
            .join(
                OrganizationMember,
                OrganizationMember.organization_id == Organization.id,
            )
            .filter(OrganizationMember.user_id == user_id)
            .order_by(OrganizationMember.joined_at.desc())
            .all()
        )
        return [(org, role) for org, role in rows]
