"""
Room and room member payloads and query filters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import RegexLike, match_pattern


@dataclass
class RoomPayload:
    id: str
    topic: str = ""
    avatar: str = ""
    owner_id: str = ""
    member_id_list: List[str] = field(default_factory=list)
    admin_id_list: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "avatar": self.avatar,
            "ownerId": self.owner_id,
            "memberIdList": list(self.member_id_list),
            "adminIdList": list(self.admin_id_list),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RoomPayload':
        return cls(
            id=data.get("id", ""),
            topic=data.get("topic") or "",
            avatar=data.get("avatar") or "",
            owner_id=data.get("ownerId") or "",
            member_id_list=list(data.get("memberIdList") or []),
            admin_id_list=list(data.get("adminIdList") or []),
        )


@dataclass
class RoomMemberPayload:
    id: str
    name: str = ""
    room_alias: str = ""
    inviter_id: str = ""
    avatar: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "roomAlias": self.room_alias,
            "inviterId": self.inviter_id,
            "avatar": self.avatar,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RoomMemberPayload':
        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            room_alias=data.get("roomAlias") or "",
            inviter_id=data.get("inviterId") or "",
            avatar=data.get("avatar") or "",
        )


@dataclass
class RoomQueryFilter:
    id: Optional[str] = None
    topic: Optional[str] = None
    topic_regex: Optional[RegexLike] = None

    def matches(self, payload: RoomPayload) -> bool:
        if self.id is not None and payload.id != self.id:
            return False
        if self.topic is not None and payload.topic != self.topic:
            return False
        if self.topic_regex is not None and not match_pattern(self.topic_regex, payload.topic):
            return False
        return True


@dataclass
class RoomMemberQueryFilter:
    name: Optional[str] = None
    room_alias: Optional[str] = None
    name_regex: Optional[RegexLike] = None
    room_alias_regex: Optional[RegexLike] = None

    def matches(self, payload: RoomMemberPayload) -> bool:
        if self.name is not None and payload.name != self.name:
            return False
        if self.room_alias is not None and payload.room_alias != self.room_alias:
            return False
        if self.name_regex is not None and not match_pattern(self.name_regex, payload.name):
            return False
        if self.room_alias_regex is not None and not match_pattern(self.room_alias_regex, payload.room_alias):
            return False
        return True
