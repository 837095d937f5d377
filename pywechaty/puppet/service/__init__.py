"""
Client of a remote puppet service.
"""

from .connection import ServiceConnection
from .endpoint import discover, normalize_endpoint, resolve_endpoint
from .event_decoder import EventType, decode_event
from .puppet_service import PuppetService

__all__ = [
    "PuppetService",
    "ServiceConnection",
    "EventType",
    "decode_event",
    "discover",
    "normalize_endpoint",
    "resolve_endpoint",
]
