"""
Enums shared by the puppet and the SDK.
"""

from enum import IntEnum


class ImageType(IntEnum):
    UNKNOWN = 0
    THUMBNAIL = 1
    HD = 2
    ARTWORK = 3


class PayloadType(IntEnum):
    """Kind of cached payload named by a dirty event."""
    UNKNOWN = 0
    MESSAGE = 1
    CONTACT = 2
    ROOM = 3
    ROOM_MEMBER = 4
    FRIENDSHIP = 5


class ScanStatus(IntEnum):
    UNKNOWN = 0
    CANCEL = 1
    WAITING = 2
    SCANNED = 3
    CONFIRMED = 4
    TIMEOUT = 5
