"""
Contact entity.
"""

from typing import TYPE_CHECKING, Optional

from ..exceptions import PuppetError
from ..schemas import ContactGender, ContactPayload, PayloadType
from .entity import Entity
from .talkable import Talkable

if TYPE_CHECKING:
    from ..context import WechatyContext
    from .message import Message


class Contact(Talkable, Entity):
    """A WeChat contact: a friend, a room member or an official account."""

    def __init__(self, id: str, ctx: 'WechatyContext', payload: Optional[ContactPayload] = None):
        if payload is None:
            payload = ctx.contacts.get(id)
        super().__init__(id, ctx, payload)

    async def ready(self, force_sync: bool = False) -> None:
        """
        Load the payload from the puppet unless it is already loaded.

        Args:
            force_sync: Drop the cached payload and fetch it again

        Raises:
            PuppetError: If the payload cannot be fetched
        """
        if not force_sync and self.is_ready():
            return
        try:
            if force_sync:
                await self.puppet.dirty_payload(PayloadType.CONTACT, self.id)
            payload = await self.puppet.contact_payload(self.id)
        except PuppetError as e:
            self.logger.error(f"Error occurred while syncing contact {self.id}: {e}")
            raise
        self.ctx.contacts[self.id] = payload
        self.payload = payload

    async def sync(self) -> None:
        await self.ready(force_sync=True)

    def is_self(self) -> bool:
        return self.ctx.id is not None and self.ctx.id == self.id

    def name(self) -> Optional[str]:
        return self.payload.name if self.payload else None

    def gender(self) -> Optional[ContactGender]:
        return self.payload.gender if self.payload else None

    def province(self) -> Optional[str]:
        return self.payload.province if self.payload else None

    def city(self) -> Optional[str]:
        return self.payload.city if self.payload else None

    def friend(self) -> Optional[bool]:
        return self.payload.friend if self.payload else None

    def star(self) -> Optional[bool]:
        return self.payload.star if self.payload else None

    def alias(self) -> Optional[str]:
        return self.payload.alias if self.payload else None

    async def set_alias(self, new_alias: str) -> None:
        """
        Set the alias (remark name) of the contact.

        The payload is refetched afterwards; a mismatch is logged, not raised.

        Raises:
            PuppetError: If the puppet rejects the change
        """
        try:
            await self.puppet.contact_alias_set(self.id, new_alias)
        except PuppetError as e:
            self.logger.error(f"Failed to set alias for {self.identity()}, reason: {e}")
            raise

        try:
            await self.puppet.dirty_payload(PayloadType.CONTACT, self.id)
            payload = await self.puppet.contact_payload(self.id)
        except PuppetError as e:
            self.logger.error(f"Failed to verify payload for {self.identity()}, reason: {e}")
            return
        self.ctx.contacts[self.id] = payload
        self.payload = payload
        if payload.alias != new_alias:
            self.logger.error(f"Alias of {self.identity()} is not correctly set")

    async def send_text(self, text: str) -> Optional['Message']:
        return await self._send_text(text)

    def identity(self) -> str:
        if self.payload is None:
            return "loading..."
        if self.payload.alias:
            return self.payload.alias
        if self.payload.name:
            return self.payload.name
        if self.id:
            return self.id
        return "loading..."

    def __str__(self) -> str:
        return self.identity()
