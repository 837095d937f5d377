"""
Payloads passed to user event handlers.

Puppet events carry ids; these carry the loaded entities instead.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .user import Contact, ContactSelf, Friendship, Message, Room, RoomInvitation


@dataclass
class LoginPayload:
    contact: ContactSelf


@dataclass
class LogoutPayload:
    contact: ContactSelf
    data: str = ""


@dataclass
class MessagePayload:
    message: Message


@dataclass
class FriendshipPayload:
    friendship: Friendship


@dataclass
class RoomInvitePayload:
    room_invitation: RoomInvitation


@dataclass
class RoomJoinPayload:
    room: Room
    invitee_list: List[Contact] = field(default_factory=list)
    inviter: Optional[Contact] = None
    timestamp: int = 0


@dataclass
class RoomLeavePayload:
    room: Room
    removee_list: List[Contact] = field(default_factory=list)
    remover: Optional[Contact] = None
    timestamp: int = 0


@dataclass
class RoomTopicPayload:
    room: Room
    old_topic: str
    new_topic: str
    changer: Optional[Contact] = None
    timestamp: int = 0
