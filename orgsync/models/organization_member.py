"""
OrganizationMember model.

Junction table linking users to organizations with a role.

Sources of records:
1. organizationMembership.created webhook -> admin / member
2. organization.created webhook -> owner, for the organization's creator

SECURITY:
- CASCADE delete on user_id and organization_id
- Unique constraint allows at most one row per (organization, user)
- Role is never escalated to owner from a membership event
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from orgsync.db_base import Base
from orgsync.models.base import generate_uuid


class MemberRole(str, Enum):
    """Closed set of organization roles."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


# Clerk role strings -> local roles. Anything unlisted maps to MEMBER.
CLERK_ROLE_MAP = {
    "admin": MemberRole.ADMIN,
    "org:admin": MemberRole.ADMIN,
    "basic_member": MemberRole.MEMBER,
    "org:member": MemberRole.MEMBER,
}


def map_clerk_role(clerk_role: Optional[str]) -> MemberRole:
    """
    Map a Clerk membership role string to a local MemberRole.

    Unknown and missing roles fall back to MEMBER. OWNER is never
    returned; it is only granted to an organization's creator.
    """
    if not clerk_role:
        return MemberRole.MEMBER
    return CLERK_ROLE_MAP.get(clerk_role, MemberRole.MEMBER)


class OrganizationMember(Base):
    """Membership of one user in one organization."""

    __tablename__ = "organization_members"

    id = Column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment="Internal UUID primary key"
    )

    organization_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role = Column(
        String(20),
        nullable=False,
        default=MemberRole.MEMBER.value,
        comment="owner, admin or member"
    )

    # Correlation only; deletion is keyed by (organization_id, user_id)
    clerk_membership_id = Column(String(255), nullable=True)

    joined_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    organization = relationship("Organization", back_populates="members")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_member"),
        Index("ix_organization_members_user_joined", "user_id", "joined_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<OrganizationMember(organization_id={self.organization_id}, "
            f"user_id={self.user_id}, role={self.role})>"
        )
