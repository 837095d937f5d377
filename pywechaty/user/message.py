"""
Message entity.
"""

import time
from typing import TYPE_CHECKING, List, Optional

from ..constants import MESSAGE_TEXT_PREVIEW
from ..exceptions import InvalidOperationError, NoPayloadError, PuppetError, WechatyBaseError
from ..filebox import FileBox
from ..schemas import ImageType, MessagePayload, MessageType, MiniProgramPayload, UrlLinkPayload
from .contact import Contact
from .entity import Entity
from .room import Room

if TYPE_CHECKING:
    from ..context import WechatyContext


class Message(Entity):
    """A message received or sent by the bot."""

    def __init__(self, id: str, ctx: 'WechatyContext', payload: Optional[MessagePayload] = None):
        if payload is None:
            payload = ctx.messages.get(id)
        super().__init__(id, ctx, payload)

    async def ready(self) -> None:
        """
        Load the message payload, then the sender, receiver and room.

        Failures to load the related entities are ignored.

        Raises:
            PuppetError: If the message payload cannot be fetched
        """
        if self.is_ready():
            return
        try:
            payload = await self.puppet.message_payload(self.id)
        except PuppetError as e:
            self.logger.error(f"Error occurred while syncing message {self.id}: {e}")
            raise
        self.ctx.messages[self.id] = payload
        self.payload = payload

        for contact_id in (payload.from_id, payload.to_id):
            if contact_id:
                try:
                    await self.ctx.contact_load(contact_id)
                except WechatyBaseError as e:
                    self.logger.debug(f"Failed to preload contact {contact_id}: {e}")
        if payload.room_id:
            try:
                await self.ctx.room_load(payload.room_id)
            except WechatyBaseError as e:
                self.logger.debug(f"Failed to preload room {payload.room_id}: {e}")

    # Properties

    def is_self(self) -> bool:
        """Whether the message was sent by the logged-in user."""
        talker = self.talker()
        return talker is not None and talker.is_self()

    def is_in_room(self) -> bool:
        return self.room() is not None

    def mentioned_self(self) -> bool:
        if not self.is_ready() or not self.ctx.is_logged_in():
            return False
        return self.ctx.id in self.payload.mention_id_list

    def conversation_id(self) -> Optional[str]:
        """Room id for room messages, else the sender id."""
        if not self.is_ready():
            return None
        return self.payload.room_id or self.payload.from_id or None

    def talker(self) -> Optional[Contact]:
        if self.payload and self.payload.from_id:
            return Contact(self.payload.from_id, self.ctx)
        return None

    from_contact = talker

    def to(self) -> Optional[Contact]:
        if self.payload and self.payload.to_id:
            return Contact(self.payload.to_id, self.ctx)
        return None

    def room(self) -> Optional[Room]:
        if self.payload and self.payload.room_id:
            return Room(self.payload.room_id, self.ctx)
        return None

    def timestamp(self) -> Optional[int]:
        return self.payload.timestamp if self.payload else None

    def age(self) -> int:
        """Seconds since the message was sent, never negative."""
        if self.payload is None:
            return 0
        return max(int(time.time()), self.payload.timestamp) - self.payload.timestamp

    def message_type(self) -> Optional[MessageType]:
        return self.payload.type if self.payload else None

    def text(self) -> Optional[str]:
        return self.payload.text if self.payload else None

    async def mention_list(self) -> Optional[List[Contact]]:
        if self.payload is None:
            return None
        return await self.ctx.contact_load_batch(self.payload.mention_id_list)

    # Attachments

    async def to_file_box(self) -> FileBox:
        return await self.puppet.message_file(self.id)

    async def to_image(self, image_type: ImageType = ImageType.HD) -> FileBox:
        return await self.puppet.message_image(self.id, image_type)

    async def to_url_link(self) -> UrlLinkPayload:
        return await self.puppet.message_url(self.id)

    async def to_mini_program(self) -> MiniProgramPayload:
        return await self.puppet.message_mini_program(self.id)

    async def to_contact(self) -> Contact:
        contact_id = await self.puppet.message_contact(self.id)
        return await self.ctx.contact_load(contact_id)

    # Actions

    async def forward(self, conversation_id: str) -> Optional['Message']:
        """
        Forward this message to a contact or room.

        Returns:
            Optional[Message]: The forwarded message, if it can be loaded
        """
        try:
            message_id = await self.puppet.message_forward(conversation_id, self.id)
        except PuppetError as e:
            self.logger.error(f"Failed to forward message {self.id}, reason: {e}")
            raise
        if message_id is None:
            return None
        self.logger.info(f"Message {self.id} was forwarded to {conversation_id}")
        try:
            return await self.ctx.message_load(message_id)
        except WechatyBaseError as e:
            self.logger.error(f"Failed to load forwarded message {message_id}, reason: {e}")
            return None

    def _reply_target(self):
        if not self.is_ready():
            raise NoPayloadError()
        target = self.room() or self.talker()
        if target is None:
            raise InvalidOperationError(f"Message {self.id} has neither a room nor a sender to reply to")
        return target

    async def reply_text(self, text: str) -> Optional['Message']:
        """
        Reply with text; in a room the reply mentions the sender.

        Raises:
            NoPayloadError: If the message is not loaded
        """
        target = self._reply_target()
        if isinstance(target, Room):
            talker = self.talker()
            return await target.send_text(text, [talker] if talker else None)
        return await target.send_text(text)

    async def reply_contact(self, contact_id: str) -> Optional['Message']:
        return await self._reply_target().send_contact(contact_id)

    async def reply_file(self, file: FileBox) -> Optional['Message']:
        return await self._reply_target().send_file(file)

    async def reply_mini_program(self, mini_program: MiniProgramPayload) -> Optional['Message']:
        return await self._reply_target().send_mini_program(mini_program)

    async def reply_url(self, url: UrlLinkPayload) -> Optional['Message']:
        return await self._reply_target().send_url(url)

    def __str__(self) -> str:
        parts = []
        talker = self.talker()
        if talker is not None:
            parts.append(f"From: {talker} ")
        receiver = self.to()
        if receiver is not None:
            parts.append(f"To: {receiver} ")
        room = self.room()
        if room is not None:
            parts.append(f"Room: {room} ")
        if self.payload is not None:
            parts.append(f"Type: {self.payload.type.name} ")
            if self.payload.type == MessageType.TEXT:
                parts.append(f"Text: {self.payload.text[:MESSAGE_TEXT_PREVIEW]} ")
        return "".join(parts)
