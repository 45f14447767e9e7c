"""
Database models.

Importing this package registers every table on orgsync.db_base.Base.
"""

from orgsync.models.user import User
from orgsync.models.organization import Organization
from orgsync.models.organization_member import (
    MemberRole,
    OrganizationMember,
    map_clerk_role,
)

__all__ = [
    "User",
    "Organization",
    "OrganizationMember",
    "MemberRole",
    "map_clerk_role",
]
