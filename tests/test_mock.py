"""
Tests for the in-memory mock puppet.
"""

from unittest.mock import MagicMock

import pytest

from pywechaty.events import PuppetEventName
from pywechaty.exceptions import PuppetError
from pywechaty.puppet import PuppetMock
from pywechaty.schemas import ContactPayload, FriendshipPayload, FriendshipType, ScanStatus


class TestPuppetMock:
    """Tests for the PuppetMock class."""

    def test_emit_without_puppet(self):
        """Test events are dropped when no puppet is attached."""
        # Setup
        impl = PuppetMock()

        # Test & verify: nothing raises
        impl.mock_scan("qr")

    def test_mock_events_reach_subscribers(self, puppet, mock_impl):
        """Test simulated events are delivered through the puppet."""
        # Setup
        scans = MagicMock()
        logins = MagicMock()
        puppet.subscribe("test", "scan", scans)
        puppet.subscribe("test", "login", logins)

        # Test
        mock_impl.mock_scan("qr-text", ScanStatus.WAITING)
        mock_impl.mock_login(ContactPayload(id="bot", name="Bot"))

        # Verify
        scan_event = scans.call_args[0][0]
        assert scan_event.name == PuppetEventName.SCAN
        assert scan_event.payload.qrcode == "qr-text"
        assert logins.call_args[0][0].payload.contact_id == "bot"
        assert puppet.self_id == "bot"

    def test_mock_room_join_updates_members(self, mock_impl):
        """Test a simulated join adds the invitees to the room."""
        # Setup
        mock_impl.add_contact(ContactPayload(id="carol", name="Carol"))

        # Test
        mock_impl.mock_room_join("room1@chatroom", ["carol"], "alice")

        # Verify
        assert "carol" in mock_impl.rooms["room1@chatroom"].member_id_list
        assert mock_impl.room_members["room1@chatroom"]["carol"].name == "Carol"

    @pytest.mark.asyncio
    async def test_send_to_room_and_contact(self, mock_impl):
        """Test sent messages record the room or the receiver."""
        # Setup
        mock_impl.self_id = "bot"

        # Test
        to_room = await mock_impl.message_send_text("room1@chatroom", "hi all", ["alice"])
        to_contact = await mock_impl.message_send_text("alice", "hi")

        # Verify
        assert mock_impl.messages[to_room].room_id == "room1@chatroom"
        assert mock_impl.messages[to_room].mention_id_list == ["alice"]
        assert mock_impl.messages[to_contact].to_id == "alice"
        assert mock_impl.messages[to_contact].from_id == "bot"

    @pytest.mark.asyncio
    async def test_missing_payload(self, mock_impl):
        """Test unknown ids raise PuppetError."""
        with pytest.raises(PuppetError, match="Contact ghost not found"):
            await mock_impl.contact_raw_payload("ghost")

    @pytest.mark.asyncio
    async def test_friendship_accept(self, mock_impl):
        """Test accepting a request confirms it and marks the friend."""
        # Setup
        mock_impl.add_contact(ContactPayload(id="dave", name="Dave"))
        mock_impl.add_friendship(FriendshipPayload(id="f1", contact_id="dave", type=FriendshipType.RECEIVE))

        # Test
        await mock_impl.friendship_accept("f1")

        # Verify
        assert mock_impl.friendships["f1"].type == FriendshipType.CONFIRM
        assert mock_impl.contacts["dave"].friend is True

    @pytest.mark.asyncio
    async def test_room_create_includes_self(self, mock_impl):
        """Test a created room holds the bot and the given contacts."""
        # Setup
        mock_impl.self_id = "bot"

        # Test
        room_id = await mock_impl.room_create(["alice", "bob"], "Trio")

        # Verify
        assert room_id.endswith("@chatroom")
        assert mock_impl.rooms[room_id].member_id_list == ["bot", "alice", "bob"]
        assert await mock_impl.room_topic(room_id) == "Trio"

    @pytest.mark.asyncio
    async def test_ding_emits_dong(self, puppet, mock_impl):
        """Test ding answers with a dong event carrying the data."""
        # Setup
        dongs = MagicMock()
        puppet.subscribe("test", "dong", dongs)

        # Test
        await puppet.ding("hello")

        # Verify
        assert dongs.call_args[0][0].payload.data == "hello"
        assert await puppet.version() == "0.1.0-mock"
