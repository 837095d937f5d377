"""
Friendship payload, enums and search filter.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

from ..utils.helpers import now_timestamp
from .base import to_enum


class FriendshipType(IntEnum):
    UNKNOWN = 0
    CONFIRM = 1
    RECEIVE = 2
    VERIFY = 3


class FriendshipSceneType(IntEnum):
    """How the friend request was initiated."""
    UNKNOWN = 0
    QQ = 1
    EMAIL = 2
    WEIXIN = 3
    QQTBD = 12
    ROOM = 14
    PHONE = 15
    CARD = 17
    LOCATION = 18
    BOTTLE = 25
    SHAKING = 29
    QRCODE = 30


@dataclass
class FriendshipPayload:
    id: str
    contact_id: str = ""
    hello: str = ""
    timestamp: int = 0
    scene: FriendshipSceneType = FriendshipSceneType.UNKNOWN
    stranger: str = ""
    ticket: str = ""
    type: FriendshipType = FriendshipType.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "contactId": self.contact_id,
            "hello": self.hello,
            "timestamp": self.timestamp,
            "scene": int(self.scene),
            "stranger": self.stranger,
            "ticket": self.ticket,
            "type": int(self.type),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FriendshipPayload':
        """
        Create a friendship payload from its wire form.

        The puppet service does not report when a request arrived, so a
        missing timestamp is set to the current time.
        """
        return cls(
            id=data.get("id", ""),
            contact_id=data.get("contactId") or "",
            hello=data.get("hello") or "",
            timestamp=int(data.get("timestamp") or now_timestamp()),
            scene=to_enum(FriendshipSceneType, data.get("scene")),
            stranger=data.get("stranger") or "",
            ticket=data.get("ticket") or "",
            type=to_enum(FriendshipType, data.get("type")),
        )


@dataclass
class FriendshipSearchQueryFilter:
    """Search a stranger by phone number or weixin id."""

    phone: Optional[str] = None
    weixin: Optional[str] = None
