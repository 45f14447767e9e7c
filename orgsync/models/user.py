"""
User model.

User represents a local user record synced from Clerk.

CRITICAL SECURITY:
- NO PASSWORDS are stored locally - Clerk is the source of truth for auth
- clerk_user_id is the unique identifier from Clerk
- User data is synced via Clerk webhooks (user.created, user.updated)
- Local id is for internal database references only
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from orgsync.db_base import Base
from orgsync.models.base import TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    """
    Local user record synced from Clerk.

    Key concepts:
    - clerk_user_id is the unique identifier from Clerk (source of truth)
    - id is the internal UUID for database relationships
    - Users join organizations via OrganizationMember (many-to-many with role)
    - Rows are only ever upserted from webhooks; never deleted here
    """

    __tablename__ = "users"

    # Internal Primary Key
    id = Column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment="Internal UUID primary key"
    )

    # Clerk User ID - SOURCE OF TRUTH
    clerk_user_id = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Clerk user ID - immutable once set"
    )

    email = Column(
        String(255),
        nullable=False,
        index=True,
        comment="Primary email address (from Clerk)"
    )

    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)

    avatar_url = Column(
        String(500),
        nullable=True,
        comment="Profile image URL (from Clerk)"
    )

    memberships = relationship(
        "OrganizationMember",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, clerk_user_id={self.clerk_user_id}, email={self.email})>"

    @property
    def full_name(self) -> str:
        """Return full name or email if no name is set."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        if parts:
            return " ".join(parts)
        return self.email or ""
