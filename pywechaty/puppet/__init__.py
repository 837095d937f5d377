"""
Puppets: the layer between the bot SDK and a messaging transport.
"""

from .base import PuppetImpl
from .mock import PuppetMock
from .puppet import Puppet, room_member_cache_key
from .service import PuppetService

__all__ = [
    "Puppet",
    "PuppetImpl",
    "PuppetMock",
    "PuppetService",
    "room_member_cache_key",
]
