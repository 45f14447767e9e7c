"""
Typed parsing of Clerk webhook payloads.

Clerk delivers loosely-typed JSON. Each supported event type is parsed once,
at the boundary, into a frozen dataclass whose fields are Optional[str]:
a missing key or a value of the wrong type becomes None instead of failing
the whole event. Business logic then checks `is_complete` and never reads
the raw payload.

Supported events:
- user.created, user.updated -> UserEvent
- organization.created, organization.updated -> OrganizationEvent
- organizationMembership.created -> MembershipCreatedEvent
- organizationMembership.deleted -> MembershipDeletedEvent
- anything else -> UnknownEvent
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


class InvalidEventError(ValueError):
    """Raised when a payload has no usable top-level shape or event type."""
    pass


# =============================================================================
# Event variants
# =============================================================================

@dataclass(frozen=True)
class UserEvent:
    event_type: str
    clerk_user_id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.clerk_user_id and self.email)


@dataclass(frozen=True)
class OrganizationEvent:
    event_type: str
    clerk_org_id: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    logo_url: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.clerk_org_id and self.name and self.slug)


@dataclass(frozen=True)
class MembershipCreatedEvent:
    event_type: str
    clerk_membership_id: Optional[str] = None
    clerk_org_id: Optional[str] = None
    clerk_user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.clerk_org_id and self.clerk_user_id)


@dataclass(frozen=True)
class MembershipDeletedEvent:
    event_type: str
    clerk_org_id: Optional[str] = None
    clerk_user_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.clerk_org_id and self.clerk_user_id)


@dataclass(frozen=True)
class UnknownEvent:
    event_type: str

    @property
    def is_complete(self) -> bool:
        return False


WebhookEvent = Union[
    UserEvent,
    OrganizationEvent,
    MembershipCreatedEvent,
    MembershipDeletedEvent,
    UnknownEvent,
]


# =============================================================================
# Field access helpers
# =============================================================================

def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _get_str(data: Optional[Mapping[str, Any]], key: str) -> Optional[str]:
    """Return data[key] if it is a non-empty string, else None."""
    if data is None:
        return None
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _get_nested_str(
    data: Optional[Mapping[str, Any]], outer: str, key: str
) -> Optional[str]:
    if data is None:
        return None
    return _get_str(_as_mapping(data.get(outer)), key)


def _first_email(data: Optional[Mapping[str, Any]]) -> Optional[str]:
    """First entry of email_addresses, which Clerk lists primary-first."""
    if data is None:
        return None
    addresses = data.get("email_addresses")
    if not isinstance(addresses, list) or not addresses:
        return None
    return _get_str(_as_mapping(addresses[0]), "email_address")


# =============================================================================
# Per-kind parsers
# =============================================================================

def parse_user_event(event_type: str, data: Any) -> UserEvent:
    data = _as_mapping(data)
    return UserEvent(
        event_type=event_type,
        clerk_user_id=_get_str(data, "id"),
        email=_first_email(data),
        first_name=_get_str(data, "first_name"),
        last_name=_get_str(data, "last_name"),
        avatar_url=_get_str(data, "image_url"),
    )


def parse_organization_event(event_type: str, data: Any) -> OrganizationEvent:
    data = _as_mapping(data)
    return OrganizationEvent(
        event_type=event_type,
        clerk_org_id=_get_str(data, "id"),
        name=_get_str(data, "name"),
        slug=_get_str(data, "slug"),
        logo_url=_get_str(data, "image_url"),
        created_by=_get_str(data, "created_by"),
    )


def parse_membership_created_event(event_type: str, data: Any) -> MembershipCreatedEvent:
    data = _as_mapping(data)
    return MembershipCreatedEvent(
        event_type=event_type,
        clerk_membership_id=_get_str(data, "id"),
        clerk_org_id=_get_nested_str(data, "organization", "id"),
        clerk_user_id=_get_nested_str(data, "public_user_data", "user_id"),
        role=_get_str(data, "role"),
    )


def parse_membership_deleted_event(event_type: str, data: Any) -> MembershipDeletedEvent:
    data = _as_mapping(data)
    return MembershipDeletedEvent(
        event_type=event_type,
        clerk_org_id=_get_nested_str(data, "organization", "id"),
        clerk_user_id=_get_nested_str(data, "public_user_data", "user_id"),
    )


_PARSERS = {
    "user.created": parse_user_event,
    "user.updated": parse_user_event,
    "organization.created": parse_organization_event,
    "organization.updated": parse_organization_event,
    "organizationMembership.created": parse_membership_created_event,
    "organizationMembership.deleted": parse_membership_deleted_event,
}

SUPPORTED_EVENT_TYPES = frozenset(_PARSERS)


def parse_event(payload: Any) -> WebhookEvent:
    """
    Parse a decoded webhook body into a typed event.

    Args:
        payload: Decoded JSON body

    Returns:
        One of the WebhookEvent variants; UnknownEvent for unsupported types

    Raises:
        InvalidEventError: If payload is not an object or has no string type
    """
    if not isinstance(payload, Mapping):
        raise InvalidEventError("Webhook payload must be a JSON object")

    event_type = _get_str(payload, "type")
    if event_type is None:
        raise InvalidEventError("Missing event type")

    parser = _PARSERS.get(event_type)
    if parser is None:
        return UnknownEvent(event_type=event_type)
    return parser(event_type, payload.get("data"))
