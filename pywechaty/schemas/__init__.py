"""
Payload schemas exchanged with puppets.
"""

from .contact import ContactGender, ContactType, ContactPayload, ContactQueryFilter
from .event import (
    EventDirtyPayload,
    EventDongPayload,
    EventErrorPayload,
    EventFriendshipPayload,
    EventHeartbeatPayload,
    EventLoginPayload,
    EventLogoutPayload,
    EventMessagePayload,
    EventReadyPayload,
    EventResetPayload,
    EventRoomInvitePayload,
    EventRoomJoinPayload,
    EventRoomLeavePayload,
    EventRoomTopicPayload,
    EventScanPayload,
)
from .friendship import (
    FriendshipPayload,
    FriendshipSceneType,
    FriendshipSearchQueryFilter,
    FriendshipType,
)
from .link import MiniProgramPayload, UrlLinkPayload
from .message import (
    MessagePayload,
    MessageQueryFilter,
    MessageType,
    WechatAppMessageType,
    WechatMessageType,
)
from .room import RoomMemberPayload, RoomMemberQueryFilter, RoomPayload, RoomQueryFilter
from .room_invitation import RoomInvitationPayload
from .types import ImageType, PayloadType, ScanStatus

__all__ = [
    # Enums
    "ContactGender",
    "ContactType",
    "FriendshipSceneType",
    "FriendshipType",
    "ImageType",
    "MessageType",
    "PayloadType",
    "ScanStatus",
    "WechatAppMessageType",
    "WechatMessageType",

    # Payloads
    "ContactPayload",
    "FriendshipPayload",
    "MessagePayload",
    "MiniProgramPayload",
    "RoomInvitationPayload",
    "RoomMemberPayload",
    "RoomPayload",
    "UrlLinkPayload",

    # Query filters
    "ContactQueryFilter",
    "FriendshipSearchQueryFilter",
    "MessageQueryFilter",
    "RoomMemberQueryFilter",
    "RoomQueryFilter",

    # Event payloads
    "EventDirtyPayload",
    "EventDongPayload",
    "EventErrorPayload",
    "EventFriendshipPayload",
    "EventHeartbeatPayload",
    "EventLoginPayload",
    "EventLogoutPayload",
    "EventMessagePayload",
    "EventReadyPayload",
    "EventResetPayload",
    "EventRoomInvitePayload",
    "EventRoomJoinPayload",
    "EventRoomLeavePayload",
    "EventRoomTopicPayload",
    "EventScanPayload",
]
