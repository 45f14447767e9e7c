"""Tests for typed parsing of Clerk webhook payloads."""

import pytest

from orgsync.services.webhook_events import (
    InvalidEventError,
    MembershipCreatedEvent,
    MembershipDeletedEvent,
    OrganizationEvent,
    SUPPORTED_EVENT_TYPES,
    UnknownEvent,
    UserEvent,
    parse_event,
)


class TestParseEvent:
    """Top-level payload shape."""

    def test_non_object_payload_rejected(self):
        with pytest.raises(InvalidEventError):
            parse_event(["user.created"])

    def test_missing_type_rejected(self):
        with pytest.raises(InvalidEventError, match="Missing event type"):
            parse_event({"data": {"id": "user_1"}})

    def test_non_string_type_rejected(self):
        with pytest.raises(InvalidEventError):
            parse_event({"type": 42, "data": {}})

    def test_unknown_type_is_not_an_error(self):
        event = parse_event({"type": "session.created", "data": {"id": "sess_1"}})

        assert isinstance(event, UnknownEvent)
        assert event.event_type == "session.created"
        assert event.is_complete is False

    def test_supported_types(self):
        assert SUPPORTED_EVENT_TYPES == {
            "user.created",
            "user.updated",
            "organization.created",
            "organization.updated",
            "organizationMembership.created",
            "organizationMembership.deleted",
        }


class TestUserEvent:

    def test_full_user(self):
        event = parse_event({
            "type": "user.created",
            "data": {
                "id": "user_1",
                "email_addresses": [
                    {"email_address": "primary@example.com"},
                    {"email_address": "other@example.com"},
                ],
                "first_name": "Ada",
                "last_name": "Lovelace",
                "image_url": "https://img.example.com/ada.png",
            },
        })

        assert isinstance(event, UserEvent)
        assert event.clerk_user_id == "user_1"
        assert event.email == "primary@example.com"
        assert event.first_name == "Ada"
        assert event.last_name == "Lovelace"
        assert event.avatar_url == "https://img.example.com/ada.png"
        assert event.is_complete

    def test_missing_id_is_incomplete(self):
        event = parse_event({
            "type": "user.created",
            "data": {"email_addresses": [{"email_address": "a@example.com"}]},
        })

        assert event.clerk_user_id is None
        assert not event.is_complete

    def test_empty_email_list_is_incomplete(self):
        event = parse_event({"type": "user.updated", "data": {"id": "user_1", "email_addresses": []}})

        assert event.email is None
        assert not event.is_complete

    def test_wrong_field_types_become_none(self):
        event = parse_event({
            "type": "user.created",
            "data": {
                "id": "user_1",
                "email_addresses": [{"email_address": "a@example.com"}],
                "first_name": 123,
                "last_name": None,
                "image_url": ["x"],
            },
        })

        assert event.is_complete
        assert event.first_name is None
        assert event.last_name is None
        assert event.avatar_url is None

    def test_data_not_an_object(self):
        event = parse_event({"type": "user.created", "data": "user_1"})

        assert isinstance(event, UserEvent)
        assert not event.is_complete


class TestOrganizationEvent:

    def test_full_organization(self):
        event = parse_event({
            "type": "organization.created",
            "data": {
                "id": "org_1",
                "name": "Acme",
                "slug": "acme",
                "image_url": "https://img.example.com/acme.png",
                "created_by": "user_1",
            },
        })

        assert isinstance(event, OrganizationEvent)
        assert event.clerk_org_id == "org_1"
        assert event.logo_url == "https://img.example.com/acme.png"
        assert event.created_by == "user_1"
        assert event.is_complete

    def test_missing_slug_is_incomplete(self):
        event = parse_event({"type": "organization.updated", "data": {"id": "org_1", "name": "Acme"}})

        assert not event.is_complete


class TestMembershipEvents:

    def test_membership_created(self):
        event = parse_event({
            "type": "organizationMembership.created",
            "data": {
                "id": "orgmem_1",
                "organization": {"id": "org_1"},
                "public_user_data": {"user_id": "user_1"},
                "role": "org:admin",
            },
        })

        assert isinstance(event, MembershipCreatedEvent)
        assert event.clerk_membership_id == "orgmem_1"
        assert event.clerk_org_id == "org_1"
        assert event.clerk_user_id == "user_1"
        assert event.role == "org:admin"
        assert event.is_complete

    def test_membership_created_without_role_is_complete(self):
        event = parse_event({
            "type": "organizationMembership.created",
            "data": {
                "organization": {"id": "org_1"},
                "public_user_data": {"user_id": "user_1"},
            },
        })

        assert event.role is None
        assert event.is_complete

    def test_membership_deleted_missing_user(self):
        event = parse_event({
            "type": "organizationMembership.deleted",
            "data": {"organization": {"id": "org_1"}, "public_user_data": "user_1"},
        })

        assert isinstance(event, MembershipDeletedEvent)
        assert event.clerk_user_id is None
        assert not event.is_complete
