"""
SDK entities.
"""

from .contact import Contact
from .contact_self import ContactSelf
from .entity import Entity
from .friendship import Friendship
from .message import Message
from .room import Room
from .room_invitation import RoomInvitation
from .talkable import Talkable

__all__ = [
    "Contact",
    "ContactSelf",
    "Entity",
    "Friendship",
    "Message",
    "Room",
    "RoomInvitation",
    "Talkable",
]
