"""
Base class of SDK entities.
"""

from typing import TYPE_CHECKING, Any, Optional

from ..utils import get_logger

if TYPE_CHECKING:
    from ..context import WechatyContext
    from ..puppet import Puppet


class Entity:
    """
    An object of the chat world (contact, message, room...) identified by id.

    The payload is None until the entity has been loaded from the puppet.
    """

    def __init__(self, id: str, ctx: 'WechatyContext', payload: Optional[Any] = None):
        self.id = id
        self.ctx = ctx
        self.payload = payload
        self.logger = get_logger(type(self).__name__)

    @property
    def puppet(self) -> 'Puppet':
        return self.ctx.puppet

    def is_ready(self) -> bool:
        return self.payload is not None

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.id == self.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"
