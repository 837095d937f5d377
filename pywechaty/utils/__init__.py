"""
Utility functions for the pywechaty library.
"""

from .logger import get_logger, setup_logging, parse_level, TRACE
from .helpers import (
    ReconnectionManager,
    call_handler,
    gather_limited,
    generate_random_id,
    generate_request_id,
    json_stringify,
    now_timestamp,
    parse_json,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "parse_level",
    "TRACE",
    "ReconnectionManager",
    "call_handler",
    "gather_limited",
    "generate_random_id",
    "generate_request_id",
    "json_stringify",
    "now_timestamp",
    "parse_json",
]
