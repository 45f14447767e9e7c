from orgsync.api.schemas.identity import (
    ErrorResponse,
    OrganizationAccessEnvelope,
    OrganizationAccessResponse,
    OrganizationListEnvelope,
    OrganizationResponse,
    OrganizationWithRoleResponse,
    UserEnvelope,
    UserResponse,
    WebhookResponse,
)

__all__ = [
    "ErrorResponse",
    "OrganizationAccessEnvelope",
    "OrganizationAccessResponse",
    "OrganizationListEnvelope",
    "OrganizationResponse",
    "OrganizationWithRoleResponse",
    "UserEnvelope",
    "UserResponse",
    "WebhookResponse",
]
