"""
Message payload, message type enums and query filter.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from .base import RegexLike, match_pattern, to_enum


class MessageType(IntEnum):
    UNKNOWN = 0
    ATTACHMENT = 1
    AUDIO = 2
    CONTACT = 3
    CHAT_HISTORY = 4
    EMOTICON = 5
    IMAGE = 6
    TEXT = 7
    LOCATION = 8
    MINI_PROGRAM = 9
    GROUP_NOTE = 10
    TRANSFER = 11
    RED_ENVELOPE = 12
    RECALLED = 13
    URL = 14
    VIDEO = 15


class WechatAppMessageType(IntEnum):
    """App message codes used inside WeChat type 49 messages."""
    TEXT = 1
    IMG = 2
    AUDIO = 3
    VIDEO = 4
    URL = 5
    ATTACH = 6
    OPEN = 7
    EMOJI = 8
    VOICE_REMIND = 9
    SCAN_GOOD = 10
    GOOD = 13
    EMOTION = 15
    CARD_TICKET = 16
    REALTIME_SHARE_LOCATION = 17
    CHAT_HISTORY = 19
    MINI_PROGRAM = 33
    TRANSFERS = 2000
    RED_ENVELOPES = 2001
    READER_TYPE = 100001


class WechatMessageType(IntEnum):
    """Raw WeChat message codes."""
    TEXT = 1
    IMAGE = 3
    VOICE = 34
    VERIFY_MSG = 37
    POSSIBLE_FRIEND_MSG = 40
    SHARE_CARD = 42
    VIDEO = 43
    EMOTICON = 47
    LOCATION = 48
    APP = 49
    VOIP_MSG = 50
    STATUS_NOTIFY = 51
    VOIP_NOTIFY = 52
    VOIP_INVITE = 53
    MICRO_VIDEO = 62
    TRANSFER = 2000
    RED_ENVELOPE = 2001
    MINI_PROGRAM = 2002
    GROUP_INVITE = 2003
    FILE = 2004
    SYS_NOTICE = 9999
    SYS = 10000
    RECALLED = 10002


@dataclass
class MessagePayload:
    """
    Raw message data as delivered by a puppet.

    Absent ids are empty strings: a message outside a room has an empty
    ``room_id``, a room message may have an empty ``to_id``.
    """

    id: str
    type: MessageType = MessageType.UNKNOWN
    text: str = ""
    timestamp: int = 0
    from_id: str = ""
    to_id: str = ""
    room_id: str = ""
    filename: str = ""
    mention_id_list: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": int(self.type),
            "text": self.text,
            "timestamp": self.timestamp,
            "fromId": self.from_id,
            "toId": self.to_id,
            "roomId": self.room_id,
            "filename": self.filename,
            "mentionIdList": list(self.mention_id_list),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MessagePayload':
        return cls(
            id=data.get("id", ""),
            type=to_enum(MessageType, data.get("type")),
            text=data.get("text") or "",
            timestamp=int(data.get("timestamp") or 0),
            from_id=data.get("fromId") or "",
            to_id=data.get("toId") or "",
            room_id=data.get("roomId") or "",
            filename=data.get("filename") or "",
            mention_id_list=list(data.get("mentionIdList") or []),
        )


@dataclass
class MessageQueryFilter:
    id: Optional[str] = None
    from_id: Optional[str] = None
    to_id: Optional[str] = None
    room_id: Optional[str] = None
    text: Optional[str] = None
    text_regex: Optional[RegexLike] = None
    type: Optional[MessageType] = None

    def matches(self, payload: MessagePayload) -> bool:
        if self.id is not None and payload.id != self.id:
            return False
        if self.type is not None and payload.type != self.type:
            return False
        if self.from_id is not None and payload.from_id != self.from_id:
            return False
        if self.to_id is not None and payload.to_id != self.to_id:
            return False
        if self.room_id is not None and payload.room_id != self.room_id:
            return False
        if self.text is not None and payload.text != self.text:
            return False
        if self.text_regex is not None and not match_pattern(self.text_regex, payload.text):
            return False
        return True
