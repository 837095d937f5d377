"""
Tests for the WechatyContext loaders and finders.
"""

import pytest

from pywechaty.exceptions import InvalidOperationError, NotLoggedInError
from pywechaty.schemas import (
    ContactQueryFilter,
    FriendshipSearchQueryFilter,
    MessageQueryFilter,
    RoomQueryFilter,
)
from pywechaty.user import Contact, Room


class TestLoaders:
    """Tests for loading entities."""

    @pytest.mark.asyncio
    async def test_contact_load_without_login(self, ctx):
        """Test contacts can be loaded before login."""
        # Test
        contact = await ctx.contact_load("alice")

        # Verify
        assert contact.is_ready()
        assert contact.name() == "Alice"
        assert "alice" in ctx.contacts

    @pytest.mark.asyncio
    async def test_contact_load_uses_store(self, ctx, mock_impl):
        """Test a stored payload is reused without asking the puppet."""
        # Setup
        await ctx.contact_load("alice")
        del mock_impl.contacts["alice"]
        ctx.puppet.cache_contact_payload.clear()

        # Test
        contact = await ctx.contact_load("alice")

        # Verify
        assert contact.name() == "Alice"

    @pytest.mark.asyncio
    async def test_contact_load_batch_drops_failures(self, ctx):
        """Test contacts that cannot be loaded are left out."""
        # Test
        contacts = await ctx.contact_load_batch(["alice", "ghost", "bob"])

        # Verify
        assert [contact.id for contact in contacts] == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_message_load(self, ctx):
        """Test a message and its sender are loaded."""
        # Test
        message = await ctx.message_load("m1")

        # Verify
        assert message.text() == "ding"
        assert "alice" in ctx.contacts

    @pytest.mark.asyncio
    async def test_room_load_requires_login(self, ctx):
        """Test rooms cannot be loaded while logged out."""
        with pytest.raises(NotLoggedInError):
            await ctx.room_load("room1@chatroom")

    @pytest.mark.asyncio
    async def test_room_load(self, logged_in_ctx):
        """Test a room and its members are loaded."""
        # Test
        room = await logged_in_ctx.room_load("room1@chatroom")

        # Verify
        assert room.topic() == "Friends"
        assert {"bot", "alice", "bob"} <= set(logged_in_ctx.contacts)


class TestFinders:
    """Tests for finding entities."""

    @pytest.mark.asyncio
    async def test_finders_require_login(self, ctx):
        """Test finders raise while logged out."""
        with pytest.raises(NotLoggedInError):
            await ctx.contact_find_all()
        with pytest.raises(NotLoggedInError):
            await ctx.room_find(RoomQueryFilter())
        with pytest.raises(NotLoggedInError):
            await ctx.logout()

    @pytest.mark.asyncio
    async def test_contact_find(self, logged_in_ctx):
        """Test finding one contact by query and by string."""
        # Test
        bob = await logged_in_ctx.contact_find(ContactQueryFilter(name="Bob"))
        alice = await logged_in_ctx.contact_find_by_string("Ali")
        nobody = await logged_in_ctx.contact_find(ContactQueryFilter(name="Nobody"))

        # Verify
        assert bob.id == "bob"
        assert alice.id == "alice"
        assert nobody is None

    @pytest.mark.asyncio
    async def test_contact_find_all(self, logged_in_ctx):
        """Test finding every contact."""
        # Test
        contacts = await logged_in_ctx.contact_find_all()

        # Verify
        assert [contact.id for contact in contacts] == ["bot", "alice", "bob"]

    @pytest.mark.asyncio
    async def test_message_find(self, logged_in_ctx):
        """Test message search covers loaded messages."""
        # Setup
        await logged_in_ctx.message_load("m1")
        await logged_in_ctx.message_load("m2")

        # Test
        message = await logged_in_ctx.message_find(MessageQueryFilter(room_id="room1@chatroom"))

        # Verify
        assert message.id == "m2"

    @pytest.mark.asyncio
    async def test_room_find(self, logged_in_ctx):
        """Test finding a room by topic."""
        # Test
        room = await logged_in_ctx.room_find(RoomQueryFilter(topic="Friends"))
        rooms = await logged_in_ctx.room_find_all(RoomQueryFilter(topic="Work"))

        # Verify
        assert room.id == "room1@chatroom"
        assert rooms == []


class TestOperations:
    """Tests for room creation, friendships and logout."""

    @pytest.mark.asyncio
    async def test_room_create_needs_two_contacts(self, logged_in_ctx):
        """Test a room needs at least two other contacts."""
        # Setup
        alice = await logged_in_ctx.contact_load("alice")

        # Test & verify
        with pytest.raises(InvalidOperationError, match="Need at least 2 contacts to create a room"):
            await logged_in_ctx.room_create([alice])

    @pytest.mark.asyncio
    async def test_room_create(self, logged_in_ctx):
        """Test creating a room returns the loaded room."""
        # Setup
        contacts = await logged_in_ctx.contact_load_batch(["alice", "bob"])

        # Test
        room = await logged_in_ctx.room_create(contacts, "Trio")

        # Verify
        assert isinstance(room, Room)
        assert room.topic() == "Trio"
        assert room.id in logged_in_ctx.rooms

    @pytest.mark.asyncio
    async def test_friendship_search(self, logged_in_ctx):
        """Test searching a stranger by phone."""
        # Test
        contact = await logged_in_ctx.friendship_search(FriendshipSearchQueryFilter(phone="10086"))
        missing = await logged_in_ctx.friendship_search(FriendshipSearchQueryFilter(weixin="nobody"))

        # Verify
        assert isinstance(contact, Contact)
        assert contact.name() == "Alice"
        assert missing is None

    @pytest.mark.asyncio
    async def test_friendship_search_without_criteria(self, logged_in_ctx):
        """Test a search needs a phone or a weixin id."""
        with pytest.raises(InvalidOperationError, match="Must specify either phone or weixin"):
            await logged_in_ctx.friendship_search(FriendshipSearchQueryFilter())

    @pytest.mark.asyncio
    async def test_friendship_add(self, logged_in_ctx, mock_impl):
        """Test a friend request is sent with its greeting."""
        # Setup
        bob = Contact("bob", logged_in_ctx)

        # Test
        await logged_in_ctx.friendship_add(bob, "hi Bob")

        # Verify
        assert mock_impl.friend_requests == [("bob", "hi Bob")]

    @pytest.mark.asyncio
    async def test_logout(self, logged_in_ctx, mock_impl):
        """Test logout goes through the puppet."""
        # Test
        await logged_in_ctx.logout()

        # Verify
        assert mock_impl.self_id is None
