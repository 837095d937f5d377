"""
Room invitation payload.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class RoomInvitationPayload:
    id: str
    inviter_id: str = ""
    topic: str = ""
    avatar: str = ""
    invitation: str = ""
    member_count: int = 0
    member_id_list: List[str] = field(default_factory=list)
    timestamp: int = 0
    receiver_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "inviterId": self.inviter_id,
            "topic": self.topic,
            "avatar": self.avatar,
            "invitation": self.invitation,
            "memberCount": self.member_count,
            "memberIdList": list(self.member_id_list),
            "timestamp": self.timestamp,
            "receiverId": self.receiver_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RoomInvitationPayload':
        return cls(
            id=data.get("id", ""),
            inviter_id=data.get("inviterId") or "",
            topic=data.get("topic") or "",
            avatar=data.get("avatar") or "",
            invitation=data.get("invitation") or "",
            member_count=int(data.get("memberCount") or 0),
            member_id_list=list(data.get("memberIdList") or []),
            timestamp=int(data.get("timestamp") or 0),
            receiver_id=data.get("receiverId") or "",
        )
