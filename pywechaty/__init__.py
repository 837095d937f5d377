"""
pywechaty

A Wechaty bot SDK for Python. A bot connects to a puppet (a Wechaty puppet
service reached with a token, or the in-memory mock puppet) and turns the
puppet's events into contacts, messages, rooms and friendships handed to
user callbacks.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__license__ = "MIT"

from .config import PuppetOptions
from .constants import FileBoxType

from .exceptions import (
    WechatyBaseError,
    PuppetError,
    InvalidTokenError,
    PuppetNetworkError,
    PuppetTimeoutError,
    UnsupportedError,
    UnknownPayloadTypeError,
    UnknownMessageTypeError,
    WechatyError,
    InvalidOperationError,
    MaybeError,
    NotLoggedInError,
    NoPayloadError,
    FileBoxError
)

from .events import PuppetEvent, PuppetEventName, EventEmitter
from .filebox import FileBox
from .puppet import Puppet, PuppetImpl, PuppetMock, PuppetService

from .context import WechatyContext
from .listener import EventListener
from .payload import (
    LoginPayload,
    LogoutPayload,
    MessagePayload,
    FriendshipPayload,
    RoomInvitePayload,
    RoomJoinPayload,
    RoomLeavePayload,
    RoomTopicPayload
)
from .user import Contact, ContactSelf, Friendship, Message, Room, RoomInvitation
from .wechaty import Wechaty

__all__ = [
    # Main classes
    "Wechaty",
    "WechatyContext",
    "EventListener",
    "PuppetOptions",

    # Puppets
    "Puppet",
    "PuppetImpl",
    "PuppetMock",
    "PuppetService",
    "PuppetEvent",
    "PuppetEventName",
    "EventEmitter",

    # Entities
    "Contact",
    "ContactSelf",
    "Friendship",
    "Message",
    "Room",
    "RoomInvitation",
    "FileBox",
    "FileBoxType",

    # Event payloads
    "LoginPayload",
    "LogoutPayload",
    "MessagePayload",
    "FriendshipPayload",
    "RoomInvitePayload",
    "RoomJoinPayload",
    "RoomLeavePayload",
    "RoomTopicPayload",

    # Exceptions
    "WechatyBaseError",
    "PuppetError",
    "InvalidTokenError",
    "PuppetNetworkError",
    "PuppetTimeoutError",
    "UnsupportedError",
    "UnknownPayloadTypeError",
    "UnknownMessageTypeError",
    "WechatyError",
    "InvalidOperationError",
    "MaybeError",
    "NotLoggedInError",
    "NoPayloadError",
    "FileBoxError"
]
