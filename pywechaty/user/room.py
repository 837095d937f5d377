"""
Room (group chat) entity.
"""

from typing import TYPE_CHECKING, List, Optional

from ..exceptions import PuppetError
from ..schemas import PayloadType, RoomMemberQueryFilter, RoomPayload
from .entity import Entity
from .talkable import Talkable

if TYPE_CHECKING:
    from ..context import WechatyContext
    from .contact import Contact
    from .message import Message


class Room(Talkable, Entity):
    """A WeChat group chat."""

    def __init__(self, id: str, ctx: 'WechatyContext', payload: Optional[RoomPayload] = None):
        if payload is None:
            payload = ctx.rooms.get(id)
        super().__init__(id, ctx, payload)

    async def ready(self, force_sync: bool = False) -> None:
        """
        Load the room payload and its members.

        Args:
            force_sync: Drop the cached room and member payloads first

        Raises:
            PuppetError: If the payload cannot be fetched
        """
        if not force_sync and self.is_ready():
            return
        try:
            if force_sync:
                await self.puppet.dirty_payload(PayloadType.ROOM, self.id)
                await self.puppet.dirty_payload(PayloadType.ROOM_MEMBER, self.id)
            payload = await self.puppet.room_payload(self.id)
        except PuppetError as e:
            self.logger.error(f"Error occurred while syncing room {self.id}: {e}")
            raise
        self.ctx.rooms[self.id] = payload
        self.payload = payload
        await self.ctx.contact_load_batch(payload.member_id_list)

    async def sync(self) -> None:
        await self.ready(force_sync=True)

    def topic(self) -> Optional[str]:
        return self.payload.topic if self.payload else None

    def owner_id(self) -> Optional[str]:
        return self.payload.owner_id if self.payload else None

    # Members

    async def member_find(self, query: RoomMemberQueryFilter) -> List['Contact']:
        member_id_list = await self.puppet.room_member_search(self.id, query)
        return await self.ctx.contact_load_batch(member_id_list)

    async def member_find_by_string(self, query_str: str) -> List['Contact']:
        """Members whose name or room alias equals ``query_str``."""
        member_id_list = await self.puppet.room_member_search_by_string(self.id, query_str)
        return await self.ctx.contact_load_batch(member_id_list)

    async def member_find_all(self) -> List['Contact']:
        member_id_list = await self.puppet.room_member_list(self.id)
        return await self.ctx.contact_load_batch(member_id_list)

    async def has(self, contact: 'Contact') -> bool:
        return contact.id in await self.puppet.room_member_list(self.id)

    async def add(self, contact: 'Contact') -> None:
        await self.puppet.room_add(self.id, contact.id)
        await self._resync()

    async def delete(self, contact: 'Contact') -> None:
        await self.puppet.room_del(self.id, contact.id)
        await self._resync()

    async def quit(self) -> None:
        await self.puppet.room_quit(self.id)

    # Room settings

    async def set_topic(self, topic: str) -> None:
        await self.puppet.room_topic_set(self.id, topic)
        await self._resync()

    async def announce(self) -> str:
        return await self.puppet.room_announce(self.id)

    async def set_announce(self, text: str) -> None:
        await self.puppet.room_announce_set(self.id, text)

    async def qrcode(self) -> str:
        return await self.puppet.room_qr_code(self.id)

    async def _resync(self) -> None:
        try:
            await self.sync()
        except PuppetError as e:
            self.logger.error(f"Failed to sync room {self.id} after update, reason: {e}")

    async def send_text(self, text: str, mention_list: Optional[List['Contact']] = None) -> Optional['Message']:
        """Send text to the room, mentioning the given members."""
        mention_id_list = [contact.id for contact in mention_list or []]
        return await self._send_text(text, mention_id_list)

    def identity(self) -> str:
        if self.payload is None:
            return "loading..."
        if self.payload.topic:
            return self.payload.topic
        if self.id:
            return self.id
        return "loading..."

    def __str__(self) -> str:
        return self.identity()
