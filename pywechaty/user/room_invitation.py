"""
Room invitation entity.
"""

from typing import TYPE_CHECKING, Optional

from ..exceptions import PuppetError, WechatyBaseError
from ..schemas import RoomInvitationPayload
from .contact import Contact
from .entity import Entity

if TYPE_CHECKING:
    from ..context import WechatyContext


class RoomInvitation(Entity):
    """An invitation to join a room."""

    def __init__(self, id: str, ctx: 'WechatyContext', payload: Optional[RoomInvitationPayload] = None):
        if payload is None:
            payload = ctx.room_invitations.get(id)
        super().__init__(id, ctx, payload)

    async def ready(self) -> None:
        """Load the invitation, its inviter and its receiver."""
        if self.is_ready():
            return
        try:
            payload = await self.puppet.room_invitation_payload(self.id)
        except PuppetError as e:
            self.logger.error(f"Error occurred while syncing room invitation {self.id}: {e}")
            raise
        self.ctx.room_invitations[self.id] = payload
        self.payload = payload
        for contact_id in (payload.inviter_id, payload.receiver_id):
            if contact_id:
                try:
                    await self.ctx.contact_load(contact_id)
                except WechatyBaseError as e:
                    self.logger.debug(f"Failed to preload contact {contact_id}: {e}")

    async def accept(self) -> None:
        await self.puppet.room_invitation_accept(self.id)
        self.logger.info(f"Accepted room invitation {self}")

    def inviter(self) -> Optional[Contact]:
        if self.payload is None or not self.payload.inviter_id:
            return None
        return Contact(self.payload.inviter_id, self.ctx)

    def receiver(self) -> Optional[Contact]:
        if self.payload is None or not self.payload.receiver_id:
            return None
        return Contact(self.payload.receiver_id, self.ctx)

    def topic(self) -> Optional[str]:
        return self.payload.topic if self.payload else None

    def member_count(self) -> Optional[int]:
        return self.payload.member_count if self.payload else None

    def timestamp(self) -> Optional[int]:
        return self.payload.timestamp if self.payload else None

    def __str__(self) -> str:
        if self.payload is None:
            return "loading"
        return f"Room: {self.payload.topic} Inviter: {self.inviter()}"
