"""
Organization API routes.

- GET /api/v1/organizations: organizations the caller belongs to, with
  role, most recently joined first
- GET /api/v1/organizations/{organization_id}: one organization the caller
  is a member of

SECURITY:
- Requires a verified Clerk bearer token
- Access is decided solely by OrganizationMember rows
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from orgsync.api.schemas import (
    ErrorResponse,
    OrganizationAccessEnvelope,
    OrganizationAccessResponse,
    OrganizationListEnvelope,
    OrganizationResponse,
    OrganizationWithRoleResponse,
)
from orgsync.auth.clerk_verifier import VerifiedToken
from orgsync.auth.dependencies import require_auth
from orgsync.database.session import get_db_session
from orgsync.errors import ValidationError
from orgsync.services.organization_access import OrganizationAccessService

router = APIRouter(prefix="/api/v1/organizations", tags=["organizations"])


def _parse_organization_id(organization_id: str) -> str:
    """
    Validate a path organization ID.

    Raises:
        ValidationError: If the ID is not a UUID
    """
    try:
        return str(uuid.UUID(organization_id))
    except ValueError:
        raise ValidationError("Invalid organization ID")


@router.get(
    "",
    response_model=OrganizationListEnvelope,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def list_user_organizations(
    token: VerifiedToken = Depends(require_auth),
    session: Session = Depends(get_db_session),
):
    """Return all organizations the caller is a member of."""
    service = OrganizationAccessService(session)
    memberships = service.list_user_organizations(token.clerk_user_id)

    data = [
        OrganizationWithRoleResponse(
            **OrganizationResponse.model_validate(access.organization).model_dump(),
            role=access.role,
        )
        for access in memberships
    ]
    return OrganizationListEnvelope(data=data)


@router.get(
    "/{organization_id}",
    response_model=OrganizationAccessEnvelope,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
def get_organization(
    organization_id: str,
    token: VerifiedToken = Depends(require_auth),
    session: Session = Depends(get_db_session),
):
    """Return an organization and the caller's role in it."""
    org_id = _parse_organization_id(organization_id)

    access = OrganizationAccessService(session).authorize(token.clerk_user_id, org_id)

    return OrganizationAccessEnvelope(
        data=OrganizationAccessResponse(
            organization=OrganizationResponse.model_validate(access.organization),
            role=access.role,
        )
    )
