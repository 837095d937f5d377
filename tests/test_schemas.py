"""
Tests for payload schemas and query filters.
"""

import re

from pywechaty.schemas import (
    ContactGender,
    ContactPayload,
    ContactQueryFilter,
    FriendshipPayload,
    FriendshipType,
    MessagePayload,
    MessageQueryFilter,
    MessageType,
    RoomMemberPayload,
    RoomMemberQueryFilter,
    RoomPayload,
    RoomQueryFilter,
)
from pywechaty.schemas.base import to_enum


class TestPayloads:
    """Tests for payload conversion from service data."""

    def test_contact_from_dict(self):
        """Test camelCase data and unknown enum values."""
        # Test
        payload = ContactPayload.from_dict({"id": "c1", "name": "Carol", "gender": 2, "type": 99})

        # Verify
        assert payload.name == "Carol"
        assert payload.gender == ContactGender.FEMALE
        assert int(payload.type) == 0
        assert payload.alias == ""

    def test_message_absent_ids_are_empty(self):
        """Test missing ids of a message become empty strings."""
        # Test
        payload = MessagePayload.from_dict({"id": "m1", "type": 7, "text": "hi", "fromId": "alice"})

        # Verify
        assert payload.type == MessageType.TEXT
        assert payload.from_id == "alice"
        assert payload.room_id == ""
        assert payload.to_id == ""
        assert payload.mention_id_list == []

    def test_friendship_timestamp_defaults_to_now(self):
        """Test a friendship without timestamp gets the current time."""
        # Test
        payload = FriendshipPayload.from_dict({"id": "f1", "contactId": "c1", "type": 2})

        # Verify
        assert payload.type == FriendshipType.RECEIVE
        assert payload.timestamp > 0

    def test_to_enum_default(self):
        """Test unknown values map to the zero member or the given default."""
        assert to_enum(MessageType, "x") == MessageType.UNKNOWN
        assert to_enum(MessageType, None, MessageType.TEXT) == MessageType.TEXT


class TestQueryFilters:
    """Tests for the matches() method of query filters."""

    def test_contact_filter(self):
        """Test every set field of a contact filter must match."""
        # Setup
        payload = ContactPayload(id="alice", name="Alice", alias="Ali")

        # Verify
        assert ContactQueryFilter().matches(payload)
        assert ContactQueryFilter(name="Alice", alias="Ali").matches(payload)
        assert not ContactQueryFilter(name="Alice", alias="Bob").matches(payload)
        assert ContactQueryFilter(name_regex="^Al").matches(payload)
        assert ContactQueryFilter(alias_regex=re.compile("li$")).matches(payload)
        assert not ContactQueryFilter(name_regex="^Bo").matches(payload)

    def test_message_filter(self):
        """Test message filter on type, sender and text pattern."""
        # Setup
        payload = MessagePayload(id="m1", type=MessageType.TEXT, text="ding dong", from_id="alice")

        # Verify
        assert MessageQueryFilter(type=MessageType.TEXT, from_id="alice").matches(payload)
        assert MessageQueryFilter(text_regex="dong$").matches(payload)
        assert not MessageQueryFilter(type=MessageType.IMAGE).matches(payload)
        assert not MessageQueryFilter(room_id="room1").matches(payload)

    def test_room_filters(self):
        """Test room and room member filters."""
        # Setup
        room = RoomPayload(id="r1", topic="Weekend hiking")
        member = RoomMemberPayload(id="alice", name="Alice", room_alias="Queen")

        # Verify
        assert RoomQueryFilter(topic_regex="hiking").matches(room)
        assert not RoomQueryFilter(topic="Work").matches(room)
        assert RoomMemberQueryFilter(room_alias="Queen").matches(member)
        assert not RoomMemberQueryFilter(name="Bob").matches(member)
