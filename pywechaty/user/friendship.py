"""
Friendship (friend request) entity.
"""

from typing import TYPE_CHECKING, Optional

from ..exceptions import InvalidOperationError, MaybeError, NoPayloadError, PuppetError, WechatyBaseError
from ..schemas import FriendshipPayload, FriendshipType
from .contact import Contact
from .entity import Entity

if TYPE_CHECKING:
    from ..context import WechatyContext


class Friendship(Entity):
    """A friend request received, confirmed or sent by the bot."""

    def __init__(self, id: str, ctx: 'WechatyContext', payload: Optional[FriendshipPayload] = None):
        if payload is None:
            payload = ctx.friendships.get(id)
        super().__init__(id, ctx, payload)

    async def ready(self) -> None:
        """
        Load the friendship payload and the contact it comes from.

        Raises:
            PuppetError: If the payload cannot be fetched
        """
        if self.is_ready():
            return
        try:
            payload = await self.puppet.friendship_payload(self.id)
        except PuppetError as e:
            self.logger.error(f"Error occurred while syncing friendship {self.id}: {e}")
            raise
        self.ctx.friendships[self.id] = payload
        self.payload = payload
        try:
            await self.ctx.contact_load(payload.contact_id)
        except WechatyBaseError as e:
            self.logger.debug(f"Failed to preload contact {payload.contact_id}: {e}")

    def contact(self) -> Optional[Contact]:
        if self.payload is None:
            return None
        return Contact(self.payload.contact_id, self.ctx)

    def friendship_type(self) -> Optional[FriendshipType]:
        return self.payload.type if self.payload else None

    def hello(self) -> Optional[str]:
        return self.payload.hello if self.payload else None

    async def accept(self) -> None:
        """
        Accept a received friend request.

        Raises:
            NoPayloadError: If the friendship is not loaded
            InvalidOperationError: If the request was not received by the bot
            MaybeError: If the new friend cannot be loaded after accepting
        """
        if self.payload is None:
            raise NoPayloadError()
        if self.payload.type != FriendshipType.RECEIVE:
            raise InvalidOperationError("Can only accept a friendship of the Receive type")

        await self.puppet.friendship_accept(self.id)
        contact = Contact(self.payload.contact_id, self.ctx)
        try:
            await contact.sync()
        except PuppetError as e:
            self.logger.error(f"Failed to sync contact {contact.id} after accepting, reason: {e}")
            raise MaybeError(f"Failed to accept the friendship, contact: {contact.id}")
        self.logger.info(f"Accepted friendship from {contact}")

    def __str__(self) -> str:
        contact = self.contact()
        if contact is None:
            return "loading"
        return f"From: {contact}"
