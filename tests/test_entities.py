"""
Tests for the SDK entities: contacts, messages, rooms, friendships and invitations.
"""

import time
from unittest.mock import AsyncMock

import pytest

from pywechaty.exceptions import (
    InvalidOperationError,
    MaybeError,
    NoPayloadError,
    NotLoggedInError,
    PuppetError,
)
from pywechaty.filebox import FileBox
from pywechaty.schemas import (
    ContactPayload,
    FriendshipPayload,
    FriendshipType,
    MessagePayload,
    MessageType,
    RoomInvitationPayload,
    RoomMemberQueryFilter,
    UrlLinkPayload,
)
from pywechaty.user import Contact, ContactSelf, Friendship, Message, Room, RoomInvitation


class TestContact:
    """Tests for the Contact entity."""

    def test_not_ready(self, ctx):
        """Test getters return None before the payload is loaded."""
        # Setup
        contact = Contact("alice", ctx)

        # Verify
        assert not contact.is_ready()
        assert contact.name() is None
        assert contact.alias() is None
        assert str(contact) == "loading..."

    @pytest.mark.asyncio
    async def test_identity(self, ctx):
        """Test identity prefers alias, then name, then id."""
        # Setup
        alice = await ctx.contact_load("alice")
        bob = await ctx.contact_load("bob")

        # Verify
        assert alice.identity() == "Ali"
        assert bob.identity() == "Bob"
        assert Contact("x", ctx, ContactPayload(id="x")).identity() == "x"

    @pytest.mark.asyncio
    async def test_equality(self, ctx):
        """Test entities compare by type and id."""
        assert Contact("alice", ctx) == await ctx.contact_load("alice")
        assert Contact("alice", ctx) != Room("alice", ctx)
        assert len({Contact("alice", ctx), Contact("alice", ctx)}) == 1

    @pytest.mark.asyncio
    async def test_set_alias(self, ctx, mock_impl):
        """Test the alias is set and the payload refreshed."""
        # Setup
        bob = await ctx.contact_load("bob")

        # Test
        await bob.set_alias("Bobby")

        # Verify
        assert mock_impl.contacts["bob"].alias == "Bobby"
        assert bob.alias() == "Bobby"
        assert ctx.contacts["bob"].alias == "Bobby"

    @pytest.mark.asyncio
    async def test_set_alias_failure(self, ctx, mock_impl):
        """Test a rejected alias change is raised."""
        # Setup
        ghost = Contact("ghost", ctx)

        # Test & verify
        with pytest.raises(PuppetError):
            await ghost.set_alias("Boo")

    @pytest.mark.asyncio
    async def test_send_text(self, logged_in_ctx, mock_impl):
        """Test sending text returns the loaded message."""
        # Setup
        alice = await logged_in_ctx.contact_load("alice")

        # Test
        message = await alice.send_text("hello")

        # Verify
        assert message.text() == "hello"
        assert message.to().id == "alice"
        assert message.is_self()

    @pytest.mark.asyncio
    async def test_send_without_message_id(self, logged_in_ctx, mock_impl):
        """Test a send without reported id returns None."""
        # Setup
        mock_impl.message_send_url = AsyncMock(return_value=None)
        alice = await logged_in_ctx.contact_load("alice")

        # Test
        result = await alice.send_url(UrlLinkPayload(title="Docs", url="https://wechaty.js.org"))

        # Verify
        assert result is None


class TestContactSelf:
    """Tests for the ContactSelf entity."""

    @pytest.mark.asyncio
    async def test_requires_self(self, logged_in_ctx):
        """Test profile operations are refused for other contacts."""
        # Setup
        other = ContactSelf("alice", logged_in_ctx)

        # Test & verify
        with pytest.raises(NotLoggedInError):
            await other.set_name("Mallory")

    @pytest.mark.asyncio
    async def test_set_name(self, logged_in_ctx, mock_impl):
        """Test changing the own name resyncs the payload."""
        # Setup
        me = ContactSelf("bot", logged_in_ctx)

        # Test
        await me.set_name("Ding Bot")
        qrcode = await me.qrcode()

        # Verify
        assert me.name() == "Ding Bot"
        assert qrcode == "https://u.wechat.com/bot"

    @pytest.mark.asyncio
    async def test_set_signature_and_avatar(self, logged_in_ctx, mock_impl):
        """Test updating the own signature and avatar."""
        # Setup
        me = ContactSelf("bot", logged_in_ctx)
        avatar = FileBox.from_buffer(b"\x89PNG", "avatar.png")

        # Test
        await me.set_signature("Ding, dong!")
        await me.set_avatar(avatar)

        # Verify
        assert mock_impl.contacts["bot"].signature == "Ding, dong!"
        assert logged_in_ctx.contacts["bot"].signature == "Ding, dong!"
        assert mock_impl.avatars["bot"] is avatar

    @pytest.mark.asyncio
    async def test_profile_needs_login(self, ctx):
        """Test profile operations are refused while logged out."""
        # Setup
        me = ContactSelf("bot", ctx)

        # Test & verify
        with pytest.raises(NotLoggedInError):
            await me.qrcode()
        with pytest.raises(NotLoggedInError):
            await me.set_signature("hello")
        with pytest.raises(NotLoggedInError):
            await me.set_avatar(FileBox.from_buffer(b"x", "x.png"))


class TestMessage:
    """Tests for the Message entity."""

    @pytest.mark.asyncio
    async def test_private_message(self, ctx):
        """Test properties of a private message."""
        # Test
        message = await ctx.message_load("m1")

        # Verify
        assert message.talker().id == "alice"
        assert message.from_contact().id == "alice"
        assert message.to().id == "bot"
        assert message.room() is None
        assert not message.is_in_room()
        assert message.conversation_id() == "alice"
        assert message.message_type() == MessageType.TEXT
        assert not message.is_self()

    @pytest.mark.asyncio
    async def test_room_message(self, logged_in_ctx):
        """Test properties of a room message mentioning the bot."""
        # Test
        message = await logged_in_ctx.message_load("m2")

        # Verify
        assert message.is_in_room()
        assert message.to() is None
        assert message.conversation_id() == "room1@chatroom"
        assert message.mentioned_self()
        assert [contact.id for contact in await message.mention_list()] == ["bot"]

    def test_not_ready(self, ctx):
        """Test an unloaded message has no properties."""
        # Setup
        message = Message("m1", ctx)

        # Verify
        assert message.talker() is None
        assert message.conversation_id() is None
        assert not message.is_self()
        assert not message.mentioned_self()
        assert str(message) == ""

    @pytest.mark.asyncio
    async def test_reply_not_ready(self, ctx):
        """Test replying to an unloaded message raises NoPayloadError."""
        with pytest.raises(NoPayloadError):
            await Message("m1", ctx).reply_text("dong")

    @pytest.mark.asyncio
    async def test_reply_without_target(self, logged_in_ctx):
        """Test replying to a message with no room and no sender is refused."""
        # Setup
        message = Message("orphan", logged_in_ctx, MessagePayload(id="orphan", type=MessageType.TEXT, text="?"))

        # Test & verify
        with pytest.raises(InvalidOperationError):
            await message.reply_text("who?")
        with pytest.raises(InvalidOperationError):
            await message.reply_contact("alice")

    @pytest.mark.asyncio
    async def test_reply_private(self, logged_in_ctx, mock_impl):
        """Test a private reply goes to the sender."""
        # Setup
        message = await logged_in_ctx.message_load("m1")

        # Test
        reply = await message.reply_text("dong")

        # Verify
        assert reply.text() == "dong"
        assert mock_impl.messages[reply.id].to_id == "alice"

    @pytest.mark.asyncio
    async def test_reply_in_room_mentions_sender(self, logged_in_ctx, mock_impl):
        """Test a room reply goes to the room and mentions the sender."""
        # Setup
        message = await logged_in_ctx.message_load("m2")

        # Test
        reply = await message.reply_text("hi Bob")

        # Verify
        sent = mock_impl.messages[reply.id]
        assert sent.room_id == "room1@chatroom"
        assert sent.mention_id_list == ["bob"]

    @pytest.mark.asyncio
    async def test_reply_file(self, logged_in_ctx, mock_impl):
        """Test replying with a file."""
        # Setup
        message = await logged_in_ctx.message_load("m1")

        # Test
        reply = await message.reply_file(FileBox.from_buffer(b"x", "x.txt"))

        # Verify
        assert reply.message_type() == MessageType.ATTACHMENT

    @pytest.mark.asyncio
    async def test_forward(self, logged_in_ctx, mock_impl):
        """Test forwarding returns the new message."""
        # Setup
        message = await logged_in_ctx.message_load("m1")

        # Test
        forwarded = await message.forward("bob")

        # Verify
        assert forwarded.text() == "ding"
        assert forwarded.to().id == "bob"

    def test_age_never_negative(self, ctx):
        """Test a message from the future has age zero."""
        # Setup
        future = int(time.time()) + 3600
        message = Message("m3", ctx, MessagePayload(id="m3", timestamp=future))
        old = Message("m4", ctx, MessagePayload(id="m4", timestamp=int(time.time()) - 60))

        # Verify
        assert message.age() == 0
        assert old.age() >= 60

    @pytest.mark.asyncio
    async def test_str(self, ctx):
        """Test the text preview is limited to 70 characters."""
        # Setup
        payload = MessagePayload(id="long", type=MessageType.TEXT, text="x" * 100, from_id="alice")
        ctx.messages["long"] = payload
        await ctx.contact_load("alice")

        # Test
        text = str(Message("long", ctx))

        # Verify
        assert text == f"From: Ali Type: TEXT Text: {'x' * 70} "


class TestRoom:
    """Tests for the Room entity."""

    @pytest.mark.asyncio
    async def test_members(self, logged_in_ctx):
        """Test finding room members."""
        # Setup
        room = await logged_in_ctx.room_load("room1@chatroom")

        # Test
        queen = await room.member_find(RoomMemberQueryFilter(room_alias="Queen"))
        bob = await room.member_find_by_string("Bob")
        everyone = await room.member_find_all()

        # Verify
        assert [contact.id for contact in queen] == ["alice"]
        assert [contact.id for contact in bob] == ["bob"]
        assert len(everyone) == 3
        assert await room.has(bob[0])

    @pytest.mark.asyncio
    async def test_delete_and_topic(self, logged_in_ctx, mock_impl):
        """Test removing a member and renaming the room."""
        # Setup
        room = await logged_in_ctx.room_load("room1@chatroom")
        bob = Contact("bob", logged_in_ctx)

        # Test
        await room.delete(bob)
        await room.set_topic("Best friends")

        # Verify
        assert not await room.has(bob)
        assert room.topic() == "Best friends"
        assert str(room) == "Best friends"

    @pytest.mark.asyncio
    async def test_announce(self, logged_in_ctx):
        """Test setting and reading the announcement."""
        # Setup
        room = await logged_in_ctx.room_load("room1@chatroom")

        # Test
        await room.set_announce("Hike on Saturday")

        # Verify
        assert await room.announce() == "Hike on Saturday"

    @pytest.mark.asyncio
    async def test_send_text_with_mentions(self, logged_in_ctx, mock_impl):
        """Test mentions are passed as contact ids."""
        # Setup
        room = await logged_in_ctx.room_load("room1@chatroom")
        alice = Contact("alice", logged_in_ctx)

        # Test
        message = await room.send_text("@Alice hi", [alice])

        # Verify
        assert mock_impl.messages[message.id].mention_id_list == ["alice"]


class TestFriendship:
    """Tests for the Friendship entity."""

    @pytest.fixture
    def friend_request(self, mock_impl):
        mock_impl.add_contact(ContactPayload(id="dave", name="Dave"))
        return mock_impl.add_friendship(FriendshipPayload(
            id="f1", contact_id="dave", hello="hi, I am Dave", type=FriendshipType.RECEIVE))

    @pytest.mark.asyncio
    async def test_ready_loads_contact(self, logged_in_ctx, friend_request):
        """Test loading a friendship also loads its contact."""
        # Setup
        friendship = Friendship("f1", logged_in_ctx)

        # Test
        await friendship.ready()

        # Verify
        assert friendship.hello() == "hi, I am Dave"
        assert friendship.contact().name() == "Dave"
        assert str(friendship) == "From: Dave"

    @pytest.mark.asyncio
    async def test_accept(self, logged_in_ctx, mock_impl, friend_request):
        """Test accepting a received request."""
        # Setup
        friendship = await logged_in_ctx.friendship_load("f1")

        # Test
        await friendship.accept()

        # Verify
        assert mock_impl.friendships["f1"].type == FriendshipType.CONFIRM
        assert logged_in_ctx.contacts["dave"].friend is True

    @pytest.mark.asyncio
    async def test_accept_not_received(self, logged_in_ctx, mock_impl):
        """Test only received requests can be accepted."""
        # Setup
        payload = FriendshipPayload(id="f2", contact_id="alice", type=FriendshipType.CONFIRM)
        friendship = Friendship("f2", logged_in_ctx, payload)

        # Test & verify
        with pytest.raises(InvalidOperationError):
            await friendship.accept()
        with pytest.raises(NoPayloadError):
            await Friendship("f3", logged_in_ctx).accept()

    @pytest.mark.asyncio
    async def test_accept_contact_unavailable(self, logged_in_ctx, mock_impl):
        """Test MaybeError when the new friend cannot be loaded."""
        # Setup
        mock_impl.add_friendship(FriendshipPayload(id="f4", contact_id="ghost", type=FriendshipType.RECEIVE))
        friendship = await logged_in_ctx.friendship_load("f4")

        # Test & verify
        with pytest.raises(MaybeError):
            await friendship.accept()


class TestRoomInvitation:
    """Tests for the RoomInvitation entity."""

    @pytest.mark.asyncio
    async def test_ready_and_accept(self, ctx, mock_impl):
        """Test loading and accepting an invitation."""
        # Setup
        mock_impl.add_room_invitation(RoomInvitationPayload(
            id="inv1", inviter_id="alice", topic="Hiking", member_count=12, receiver_id="bot"))
        invitation = RoomInvitation("inv1", ctx)

        # Test
        await invitation.ready()
        await invitation.accept()

        # Verify
        assert invitation.inviter().name() == "Alice"
        assert invitation.topic() == "Hiking"
        assert invitation.member_count() == 12
        assert "inv1" in mock_impl.accepted_room_invitations
