"""
Payloads of rich link messages: URL cards and mini programs.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class UrlLinkPayload:
    title: str
    url: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"title": self.title, "url": self.url}
        if self.description is not None:
            data["description"] = self.description
        if self.thumbnail_url is not None:
            data["thumbnailUrl"] = self.thumbnail_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UrlLinkPayload':
        return cls(
            title=data.get("title") or "",
            url=data.get("url") or "",
            description=data.get("description"),
            thumbnail_url=data.get("thumbnailUrl"),
        )


_MINI_PROGRAM_KEYS = {
    "appid": "appid",
    "description": "description",
    "page_path": "pagePath",
    "icon_url": "iconUrl",
    "share_id": "shareId",
    "thumb_url": "thumbUrl",
    "title": "title",
    "username": "username",
    "thumb_key": "thumbKey",
}


@dataclass
class MiniProgramPayload:
    appid: Optional[str] = None
    description: Optional[str] = None
    page_path: Optional[str] = None
    icon_url: Optional[str] = None
    share_id: Optional[str] = None
    thumb_url: Optional[str] = None
    title: Optional[str] = None
    username: Optional[str] = None
    thumb_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            wire: getattr(self, attr)
            for attr, wire in _MINI_PROGRAM_KEYS.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MiniProgramPayload':
        return cls(**{attr: data.get(wire) for attr, wire in _MINI_PROGRAM_KEYS.items()})
