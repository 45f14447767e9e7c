"""
Persistence gateway.

One repository per entity, all sharing the request's SQLAlchemy session.
Callers own the transaction (commit / rollback).
"""

from orgsync.repositories.user_repository import UserRepository
from orgsync.repositories.organization_repository import OrganizationRepository
from orgsync.repositories.organization_member_repository import OrganizationMemberRepository

__all__ = [
    "UserRepository",
    "OrganizationRepository",
    "OrganizationMemberRepository",
]
