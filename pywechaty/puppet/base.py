"""
Interface every puppet implementation provides.

A puppet implementation talks to a concrete messaging transport. It exposes
the raw operations below and reports inbound events through the ``Puppet``
that wraps it (see ``PuppetImpl.emit``).
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from ..events import PuppetEvent, PuppetEventName
from ..filebox import FileBox
from ..schemas import (
    ContactPayload,
    FriendshipPayload,
    ImageType,
    MessagePayload,
    MiniProgramPayload,
    RoomInvitationPayload,
    RoomMemberPayload,
    RoomPayload,
    UrlLinkPayload,
)
from ..utils import get_logger

if TYPE_CHECKING:
    from .puppet import Puppet


class PuppetImpl(ABC):
    """Raw puppet operations; all of them are coroutines."""

    def __init__(self):
        self.logger = get_logger(type(self).__name__)
        self._puppet: Optional['Puppet'] = None

    def attach(self, puppet: 'Puppet') -> None:
        """Bind the wrapping puppet that receives this implementation's events."""
        self._puppet = puppet

    def emit(self, name: PuppetEventName, payload: Any) -> None:
        if self._puppet is None:
            self.logger.warning(f"Dropping {name.value} event, no puppet attached")
            return
        self._puppet.emit(PuppetEvent(name, payload))

    # Contact self

    @abstractmethod
    async def contact_self_name_set(self, name: str) -> None: ...

    @abstractmethod
    async def contact_self_qr_code(self) -> str: ...

    @abstractmethod
    async def contact_self_signature_set(self, signature: str) -> None: ...

    # Tag

    @abstractmethod
    async def tag_contact_add(self, tag_id: str, contact_id: str) -> None: ...

    @abstractmethod
    async def tag_contact_remove(self, tag_id: str, contact_id: str) -> None: ...

    @abstractmethod
    async def tag_contact_delete(self, tag_id: str) -> None: ...

    @abstractmethod
    async def tag_contact_list(self, contact_id: Optional[str] = None) -> List[str]: ...

    @abstractmethod
    async def tag_list(self) -> List[str]: ...

    # Contact

    @abstractmethod
    async def contact_alias(self, contact_id: str) -> str: ...

    @abstractmethod
    async def contact_alias_set(self, contact_id: str, alias: str) -> None: ...

    @abstractmethod
    async def contact_avatar(self, contact_id: str) -> FileBox: ...

    @abstractmethod
    async def contact_avatar_set(self, contact_id: str, file: FileBox) -> None: ...

    @abstractmethod
    async def contact_phone_set(self, contact_id: str, phone_list: List[str]) -> None: ...

    @abstractmethod
    async def contact_corporation_remark_set(self, contact_id: str, corporation_remark: Optional[str]) -> None: ...

    @abstractmethod
    async def contact_description_set(self, contact_id: str, description: Optional[str]) -> None: ...

    @abstractmethod
    async def contact_list(self) -> List[str]: ...

    @abstractmethod
    async def contact_raw_payload(self, contact_id: str) -> ContactPayload: ...

    # Message

    @abstractmethod
    async def message_contact(self, message_id: str) -> str: ...

    @abstractmethod
    async def message_file(self, message_id: str) -> FileBox: ...

    @abstractmethod
    async def message_image(self, message_id: str, image_type: ImageType) -> FileBox: ...

    @abstractmethod
    async def message_mini_program(self, message_id: str) -> MiniProgramPayload: ...

    @abstractmethod
    async def message_url(self, message_id: str) -> UrlLinkPayload: ...

    @abstractmethod
    async def message_send_contact(self, conversation_id: str, contact_id: str) -> Optional[str]: ...

    @abstractmethod
    async def message_send_file(self, conversation_id: str, file: FileBox) -> Optional[str]: ...

    @abstractmethod
    async def message_send_mini_program(self, conversation_id: str,
                                        mini_program_payload: MiniProgramPayload) -> Optional[str]: ...

    @abstractmethod
    async def message_send_text(self, conversation_id: str, text: str,
                                mention_id_list: Optional[List[str]] = None) -> Optional[str]: ...

    @abstractmethod
    async def message_send_url(self, conversation_id: str, url_link_payload: UrlLinkPayload) -> Optional[str]: ...

    @abstractmethod
    async def message_raw_payload(self, message_id: str) -> MessagePayload: ...

    # Friendship

    @abstractmethod
    async def friendship_accept(self, friendship_id: str) -> None: ...

    @abstractmethod
    async def friendship_add(self, contact_id: str, hello: Optional[str] = None) -> None: ...

    @abstractmethod
    async def friendship_search_phone(self, phone: str) -> Optional[str]: ...

    @abstractmethod
    async def friendship_search_weixin(self, weixin: str) -> Optional[str]: ...

    @abstractmethod
    async def friendship_raw_payload(self, friendship_id: str) -> FriendshipPayload: ...

    # Room invitation

    @abstractmethod
    async def room_invitation_accept(self, room_invitation_id: str) -> None: ...

    @abstractmethod
    async def room_invitation_raw_payload(self, room_invitation_id: str) -> RoomInvitationPayload: ...

    # Room

    @abstractmethod
    async def room_add(self, room_id: str, contact_id: str) -> None: ...

    @abstractmethod
    async def room_avatar(self, room_id: str) -> FileBox: ...

    @abstractmethod
    async def room_create(self, contact_id_list: List[str], topic: Optional[str] = None) -> str: ...

    @abstractmethod
    async def room_del(self, room_id: str, contact_id: str) -> None: ...

    @abstractmethod
    async def room_qr_code(self, room_id: str) -> str: ...

    @abstractmethod
    async def room_quit(self, room_id: str) -> None: ...

    @abstractmethod
    async def room_topic(self, room_id: str) -> str: ...

    @abstractmethod
    async def room_topic_set(self, room_id: str, topic: str) -> None: ...

    @abstractmethod
    async def room_list(self) -> List[str]: ...

    @abstractmethod
    async def room_raw_payload(self, room_id: str) -> RoomPayload: ...

    @abstractmethod
    async def room_announce(self, room_id: str) -> str: ...

    @abstractmethod
    async def room_announce_set(self, room_id: str, text: str) -> None: ...

    @abstractmethod
    async def room_member_list(self, room_id: str) -> List[str]: ...

    @abstractmethod
    async def room_member_raw_payload(self, room_id: str, contact_id: str) -> RoomMemberPayload: ...

    # Lifecycle

    @abstractmethod
    async def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...

    @abstractmethod
    async def ding(self, data: str) -> None: ...

    @abstractmethod
    async def version(self) -> str: ...

    @abstractmethod
    async def logout(self) -> None: ...
