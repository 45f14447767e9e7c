"""
User API routes.

- GET /api/v1/users/me: the caller's local user record, 404 until the
  user.created webhook has provisioned it.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from orgsync.api.schemas import ErrorResponse, UserEnvelope, UserResponse
from orgsync.auth.clerk_verifier import VerifiedToken
from orgsync.auth.dependencies import require_auth
from orgsync.database.session import get_db_session
from orgsync.services.organization_access import OrganizationAccessService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get(
    "/me",
    response_model=UserEnvelope,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_current_user(
    token: VerifiedToken = Depends(require_auth),
    session: Session = Depends(get_db_session),
):
    """Return the authenticated user's profile."""
    user = OrganizationAccessService(session).get_current_user(token.clerk_user_id)
    return UserEnvelope(data=UserResponse.model_validate(user))
