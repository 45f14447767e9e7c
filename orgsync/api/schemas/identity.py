"""
Response models for the identity API.

All successful responses wrap their payload in {"data": ...}.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orgsync.models.organization_member import MemberRole


class UserResponse(BaseModel):
    """The caller's local user record."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Internal user ID")
    clerk_user_id: str = Field(..., description="Clerk user ID")
    email: str
    first_name: str = ""
    last_name: str = ""
    avatar_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("first_name", "last_name", "avatar_url", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""


class OrganizationResponse(BaseModel):
    """Organization record."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Internal organization ID")
    clerk_org_id: str = Field(..., description="Clerk organization ID")
    name: str
    slug: str
    description: str = ""
    logo_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("description", "logo_url", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""


class OrganizationWithRoleResponse(OrganizationResponse):
    """Organization plus the caller's role, as listed for the caller."""
    role: MemberRole


class OrganizationAccessResponse(BaseModel):
    """A single organization with the caller's role."""
    organization: OrganizationResponse
    role: MemberRole


class UserEnvelope(BaseModel):
    data: UserResponse


class OrganizationListEnvelope(BaseModel):
    data: List[OrganizationWithRoleResponse]


class OrganizationAccessEnvelope(BaseModel):
    data: OrganizationAccessResponse


class WebhookResponse(BaseModel):
    """Standard webhook response."""
    received: bool = True
    status: str = "processed"
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
