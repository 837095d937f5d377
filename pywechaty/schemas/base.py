"""
Shared helpers for payload schemas and query filters.
"""

import re
from enum import IntEnum
from typing import Any, Optional, Pattern, Type, TypeVar, Union

E = TypeVar("E", bound=IntEnum)

RegexLike = Union[str, Pattern]


def to_enum(enum_cls: Type[E], value: Any, default: Optional[E] = None) -> E:
    """
    Convert a wire value to an enum member, falling back to ``default``
    (or the member with value 0) when the value is unknown.
    """
    try:
        return enum_cls(int(value))
    except (TypeError, ValueError):
        return default if default is not None else enum_cls(0)


def match_pattern(pattern: RegexLike, value: str) -> bool:
    """Search ``value`` with a pattern given as a string or compiled regex."""
    if isinstance(pattern, str):
        return re.search(pattern, value or "") is not None
    return pattern.search(value or "") is not None
