"""
Organization model.

Organization mirrors a Clerk Organization. Rows are upserted from
organization.created / organization.updated webhooks keyed by clerk_org_id.

SECURITY: Access to an organization is granted only through
OrganizationMember rows; the organization itself carries no permissions.
"""

from sqlalchemy import Column, String, Index
from sqlalchemy.orm import relationship

from orgsync.db_base import Base
from orgsync.models.base import TimestampMixin, generate_uuid


class Organization(Base, TimestampMixin):
    """Local record of a Clerk Organization."""

    __tablename__ = "organizations"

    # Primary Key
    id = Column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment="Internal UUID primary key"
    )

    # Clerk Organization ID (external reference)
    clerk_org_id = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Clerk Organization ID"
    )

    name = Column(
        String(255),
        nullable=False,
        comment="Display name of the organization"
    )

    slug = Column(
        String(255),
        nullable=False,
        comment="URL-friendly identifier (e.g., 'acme-agency')"
    )

    # Not provided by Clerk webhooks; only set on insert
    description = Column(
        String(1000),
        nullable=False,
        default="",
        server_default="",
    )

    logo_url = Column(
        String(500),
        nullable=True,
        comment="Organization logo URL (from Clerk image_url)"
    )

    members = relationship(
        "OrganizationMember",
        back_populates="organization",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_organizations_slug", "slug"),
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, clerk_org_id={self.clerk_org_id}, name={self.name})>"
