"""
Sending messages to a conversation (a contact or a room).
"""

from typing import TYPE_CHECKING, List, Optional

from ..exceptions import WechatyBaseError
from ..filebox import FileBox
from ..schemas import MiniProgramPayload, UrlLinkPayload

if TYPE_CHECKING:
    from .message import Message


class Talkable:
    """
    Mixin for entities that can receive messages.

    Every send returns the sent ``Message``, or None when the puppet does not
    report the new message id or the message cannot be loaded.
    """

    async def _load_sent(self, message_id: Optional[str]) -> Optional['Message']:
        if message_id is None:
            self.logger.error(f"Message has been sent to {self} but cannot get message id")
            return None
        try:
            return await self.ctx.message_load(message_id)
        except WechatyBaseError as e:
            self.logger.error(f"Message has been sent to {self} but cannot get message payload, reason: {e}")
            return None

    async def _send_text(self, text: str, mention_id_list: Optional[List[str]] = None) -> Optional['Message']:
        self.logger.debug(f"send_text(id = {self.id}, text = {text})")
        message_id = await self.puppet.message_send_text(self.id, text, mention_id_list or [])
        return await self._load_sent(message_id)

    async def send_contact(self, contact_id: str) -> Optional['Message']:
        message_id = await self.puppet.message_send_contact(self.id, contact_id)
        return await self._load_sent(message_id)

    async def send_file(self, file: FileBox) -> Optional['Message']:
        message_id = await self.puppet.message_send_file(self.id, file)
        return await self._load_sent(message_id)

    async def send_mini_program(self, mini_program: MiniProgramPayload) -> Optional['Message']:
        message_id = await self.puppet.message_send_mini_program(self.id, mini_program)
        return await self._load_sent(message_id)

    async def send_url(self, url: UrlLinkPayload) -> Optional['Message']:
        message_id = await self.puppet.message_send_url(self.id, url)
        return await self._load_sent(message_id)
