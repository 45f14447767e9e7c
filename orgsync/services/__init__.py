from orgsync.services.clerk_webhook_handler import ClerkWebhookHandler
from orgsync.services.organization_access import OrganizationAccess, OrganizationAccessService

__all__ = ["ClerkWebhookHandler", "OrganizationAccess", "OrganizationAccessService"]
