"""
Shared fixtures: a mock puppet populated with a few contacts, a room and messages.
"""

import pytest

from pywechaty import Puppet, PuppetMock, WechatyContext
from pywechaty.schemas import (
    ContactPayload,
    MessagePayload,
    MessageType,
    RoomMemberPayload,
    RoomPayload,
)

SELF_ID = "bot"


@pytest.fixture
def mock_impl():
    """PuppetMock holding the bot, two friends and one room."""
    impl = PuppetMock()
    impl.add_contact(ContactPayload(id=SELF_ID, name="Bot", friend=True))
    impl.add_contact(ContactPayload(id="alice", name="Alice", alias="Ali", friend=True, weixin="alice_wx",
                                    phone=["10086"]))
    impl.add_contact(ContactPayload(id="bob", name="Bob", friend=True))
    impl.add_room(
        RoomPayload(id="room1@chatroom", topic="Friends", owner_id=SELF_ID,
                    member_id_list=[SELF_ID, "alice", "bob"]),
        [
            RoomMemberPayload(id=SELF_ID, name="Bot"),
            RoomMemberPayload(id="alice", name="Alice", room_alias="Queen"),
            RoomMemberPayload(id="bob", name="Bob"),
        ],
    )
    impl.add_message(MessagePayload(id="m1", type=MessageType.TEXT, text="ding", timestamp=100,
                                    from_id="alice", to_id=SELF_ID))
    impl.add_message(MessagePayload(id="m2", type=MessageType.TEXT, text="hello all", timestamp=200,
                                    from_id="bob", room_id="room1@chatroom", mention_id_list=[SELF_ID]))
    return impl


@pytest.fixture
def puppet(mock_impl):
    return Puppet(mock_impl)


@pytest.fixture
def ctx(puppet):
    return WechatyContext(puppet)


@pytest.fixture
def logged_in_ctx(ctx, mock_impl):
    """Context of a logged-in bot, without going through the login event."""
    mock_impl.self_id = SELF_ID
    ctx.id = SELF_ID
    return ctx
