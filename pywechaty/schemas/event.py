"""
Payloads of the events a puppet emits.

Each event carries ids only; the SDK turns them into entities before user
handlers see them.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .types import PayloadType, ScanStatus


@dataclass(frozen=True)
class EventDongPayload:
    data: str


@dataclass(frozen=True)
class EventErrorPayload:
    data: str


@dataclass(frozen=True)
class EventHeartbeatPayload:
    data: str


@dataclass(frozen=True)
class EventReadyPayload:
    data: str


@dataclass(frozen=True)
class EventResetPayload:
    data: str


@dataclass(frozen=True)
class EventFriendshipPayload:
    friendship_id: str


@dataclass(frozen=True)
class EventLoginPayload:
    contact_id: str


@dataclass(frozen=True)
class EventLogoutPayload:
    contact_id: str
    data: str = ""


@dataclass(frozen=True)
class EventMessagePayload:
    message_id: str


@dataclass(frozen=True)
class EventRoomInvitePayload:
    room_invitation_id: str


@dataclass(frozen=True)
class EventRoomJoinPayload:
    room_id: str
    inviter_id: str
    invitee_id_list: List[str] = field(default_factory=list)
    timestamp: int = 0


@dataclass(frozen=True)
class EventRoomLeavePayload:
    room_id: str
    remover_id: str
    removee_id_list: List[str] = field(default_factory=list)
    timestamp: int = 0


@dataclass(frozen=True)
class EventRoomTopicPayload:
    room_id: str
    changer_id: str
    old_topic: str
    new_topic: str
    timestamp: int = 0


@dataclass(frozen=True)
class EventScanPayload:
    status: ScanStatus
    qrcode: Optional[str] = None
    data: Optional[str] = None


@dataclass(frozen=True)
class EventDirtyPayload:
    payload_type: PayloadType
    payload_id: str
