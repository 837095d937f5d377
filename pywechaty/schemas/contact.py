"""
Contact payload and query filter.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from .base import RegexLike, match_pattern, to_enum


class ContactGender(IntEnum):
    UNKNOWN = 0
    MALE = 1
    FEMALE = 2


class ContactType(IntEnum):
    UNKNOWN = 0
    INDIVIDUAL = 1
    OFFICIAL = 2
    CORPORATION = 3


@dataclass
class ContactPayload:
    """Raw contact data as delivered by a puppet."""

    id: str
    gender: ContactGender = ContactGender.UNKNOWN
    type: ContactType = ContactType.UNKNOWN
    name: str = ""
    avatar: str = ""
    address: str = ""
    alias: str = ""
    city: str = ""
    friend: bool = False
    province: str = ""
    signature: str = ""
    star: bool = False
    weixin: str = ""
    corporation: str = ""
    title: str = ""
    description: str = ""
    coworker: bool = False
    phone: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "gender": int(self.gender),
            "type": int(self.type),
            "name": self.name,
            "avatar": self.avatar,
            "address": self.address,
            "alias": self.alias,
            "city": self.city,
            "friend": self.friend,
            "province": self.province,
            "signature": self.signature,
            "star": self.star,
            "weixin": self.weixin,
            "corporation": self.corporation,
            "title": self.title,
            "description": self.description,
            "coworker": self.coworker,
            "phone": list(self.phone),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContactPayload':
        return cls(
            id=data.get("id", ""),
            gender=to_enum(ContactGender, data.get("gender")),
            type=to_enum(ContactType, data.get("type")),
            name=data.get("name") or "",
            avatar=data.get("avatar") or "",
            address=data.get("address") or "",
            alias=data.get("alias") or "",
            city=data.get("city") or "",
            friend=bool(data.get("friend", False)),
            province=data.get("province") or "",
            signature=data.get("signature") or "",
            star=bool(data.get("star", False)),
            weixin=data.get("weixin") or "",
            corporation=data.get("corporation") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
            coworker=bool(data.get("coworker", False)),
            phone=list(data.get("phone") or []),
        )


@dataclass
class ContactQueryFilter:
    """
    Criteria for searching contacts. Unset fields are ignored; every set
    field must match.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    alias: Optional[str] = None
    weixin: Optional[str] = None
    name_regex: Optional[RegexLike] = None
    alias_regex: Optional[RegexLike] = None

    def matches(self, payload: ContactPayload) -> bool:
        if self.id is not None and payload.id != self.id:
            return False
        if self.name is not None and payload.name != self.name:
            return False
        if self.alias is not None and payload.alias != self.alias:
            return False
        if self.weixin is not None and payload.weixin != self.weixin:
            return False
        if self.name_regex is not None and not match_pattern(self.name_regex, payload.name):
            return False
        if self.alias_regex is not None and not match_pattern(self.alias_regex, payload.alias):
            return False
        return True
