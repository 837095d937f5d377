"""
In-memory puppet implementation.

``PuppetMock`` keeps every payload in dictionaries and implements all puppet
operations against them. The ``mock_*`` helpers simulate inbound events, which
makes it suitable for tests and for running bots offline.
"""

from typing import Dict, List, Optional, Set

from ..events import PuppetEventName
from ..exceptions import PuppetError
from ..filebox import FileBox
from ..schemas import (
    ContactPayload,
    EventDongPayload,
    EventFriendshipPayload,
    EventLoginPayload,
    EventLogoutPayload,
    EventMessagePayload,
    EventReadyPayload,
    EventRoomInvitePayload,
    EventRoomJoinPayload,
    EventRoomLeavePayload,
    EventRoomTopicPayload,
    EventScanPayload,
    FriendshipPayload,
    FriendshipType,
    ImageType,
    MessagePayload,
    MessageType,
    MiniProgramPayload,
    RoomInvitationPayload,
    RoomMemberPayload,
    RoomPayload,
    ScanStatus,
    UrlLinkPayload,
)
from ..utils import generate_random_id, now_timestamp
from .base import PuppetImpl

MOCK_VERSION = "0.1.0-mock"


class PuppetMock(PuppetImpl):
    """Puppet implementation backed by in-memory dictionaries."""

    def __init__(self):
        super().__init__()
        self.self_id: Optional[str] = None
        self.started = False

        self.contacts: Dict[str, ContactPayload] = {}
        self.messages: Dict[str, MessagePayload] = {}
        self.rooms: Dict[str, RoomPayload] = {}
        self.room_members: Dict[str, Dict[str, RoomMemberPayload]] = {}
        self.room_announcements: Dict[str, str] = {}
        self.friendships: Dict[str, FriendshipPayload] = {}
        self.room_invitations: Dict[str, RoomInvitationPayload] = {}
        self.accepted_room_invitations: Set[str] = set()
        self.friend_requests: List[tuple] = []
        self.tags: Dict[str, Set[str]] = {}
        self.avatars: Dict[str, FileBox] = {}

        # Attachments of messages, keyed by message id
        self.message_files: Dict[str, FileBox] = {}
        self.message_contacts: Dict[str, str] = {}
        self.message_mini_programs: Dict[str, MiniProgramPayload] = {}
        self.message_urls: Dict[str, UrlLinkPayload] = {}

    # Fixtures

    def add_contact(self, payload: ContactPayload) -> ContactPayload:
        self.contacts[payload.id] = payload
        return payload

    def add_room(self, payload: RoomPayload, members: Optional[List[RoomMemberPayload]] = None) -> RoomPayload:
        self.rooms[payload.id] = payload
        room_members = self.room_members.setdefault(payload.id, {})
        for member in members or []:
            room_members[member.id] = member
            if member.id not in payload.member_id_list:
                payload.member_id_list.append(member.id)
        for member_id in payload.member_id_list:
            if member_id not in room_members:
                room_members[member_id] = self._member_from_contact(member_id)
        return payload

    def add_message(self, payload: MessagePayload) -> MessagePayload:
        self.messages[payload.id] = payload
        return payload

    def add_friendship(self, payload: FriendshipPayload) -> FriendshipPayload:
        self.friendships[payload.id] = payload
        return payload

    def add_room_invitation(self, payload: RoomInvitationPayload) -> RoomInvitationPayload:
        self.room_invitations[payload.id] = payload
        return payload

    def _member_from_contact(self, contact_id: str) -> RoomMemberPayload:
        contact = self.contacts.get(contact_id)
        return RoomMemberPayload(
            id=contact_id,
            name=contact.name if contact else "",
            avatar=contact.avatar if contact else "",
        )

    def _get(self, store: Dict, key: str, kind: str):
        try:
            return store[key]
        except KeyError:
            raise PuppetError(f"{kind} {key} not found")

    # Simulated events

    def mock_scan(self, qrcode: str, status: ScanStatus = ScanStatus.WAITING) -> None:
        self.emit(PuppetEventName.SCAN, EventScanPayload(status=status, qrcode=qrcode))

    def mock_login(self, contact: ContactPayload) -> None:
        self.add_contact(contact)
        self.self_id = contact.id
        self.emit(PuppetEventName.LOGIN, EventLoginPayload(contact_id=contact.id))

    def mock_logout(self, data: str = "") -> None:
        contact_id = self.self_id or ""
        self.self_id = None
        self.emit(PuppetEventName.LOGOUT, EventLogoutPayload(contact_id=contact_id, data=data))

    def mock_ready(self, data: str = "ready") -> None:
        self.emit(PuppetEventName.READY, EventReadyPayload(data=data))

    def mock_message(self, payload: MessagePayload) -> None:
        self.add_message(payload)
        self.emit(PuppetEventName.MESSAGE, EventMessagePayload(message_id=payload.id))

    def mock_friendship(self, payload: FriendshipPayload) -> None:
        self.add_friendship(payload)
        self.emit(PuppetEventName.FRIENDSHIP, EventFriendshipPayload(friendship_id=payload.id))

    def mock_room_invite(self, payload: RoomInvitationPayload) -> None:
        self.add_room_invitation(payload)
        self.emit(PuppetEventName.ROOM_INVITE, EventRoomInvitePayload(room_invitation_id=payload.id))

    def mock_room_join(self, room_id: str, invitee_id_list: List[str], inviter_id: str) -> None:
        room = self._get(self.rooms, room_id, "Room")
        for contact_id in invitee_id_list:
            if contact_id not in room.member_id_list:
                room.member_id_list.append(contact_id)
            self.room_members.setdefault(room_id, {})[contact_id] = self._member_from_contact(contact_id)
        self.emit(PuppetEventName.ROOM_JOIN, EventRoomJoinPayload(
            room_id=room_id, inviter_id=inviter_id,
            invitee_id_list=list(invitee_id_list), timestamp=now_timestamp()))

    def mock_room_leave(self, room_id: str, removee_id_list: List[str], remover_id: str) -> None:
        room = self._get(self.rooms, room_id, "Room")
        for contact_id in removee_id_list:
            if contact_id in room.member_id_list:
                room.member_id_list.remove(contact_id)
            self.room_members.get(room_id, {}).pop(contact_id, None)
        self.emit(PuppetEventName.ROOM_LEAVE, EventRoomLeavePayload(
            room_id=room_id, remover_id=remover_id,
            removee_id_list=list(removee_id_list), timestamp=now_timestamp()))

    def mock_room_topic(self, room_id: str, new_topic: str, changer_id: str) -> None:
        room = self._get(self.rooms, room_id, "Room")
        old_topic = room.topic
        room.topic = new_topic
        self.emit(PuppetEventName.ROOM_TOPIC, EventRoomTopicPayload(
            room_id=room_id, changer_id=changer_id, old_topic=old_topic,
            new_topic=new_topic, timestamp=now_timestamp()))

    # Contact self

    async def contact_self_name_set(self, name: str) -> None:
        self._get(self.contacts, self.self_id, "Contact").name = name

    async def contact_self_qr_code(self) -> str:
        return f"https://u.wechat.com/{self.self_id}"

    async def contact_self_signature_set(self, signature: str) -> None:
        self._get(self.contacts, self.self_id, "Contact").signature = signature

    # Tag

    async def tag_contact_add(self, tag_id: str, contact_id: str) -> None:
        self.tags.setdefault(tag_id, set()).add(contact_id)

    async def tag_contact_remove(self, tag_id: str, contact_id: str) -> None:
        self.tags.get(tag_id, set()).discard(contact_id)

    async def tag_contact_delete(self, tag_id: str) -> None:
        self.tags.pop(tag_id, None)

    async def tag_contact_list(self, contact_id: Optional[str] = None) -> List[str]:
        if contact_id is None:
            return list(self.tags)
        return [tag_id for tag_id, members in self.tags.items() if contact_id in members]

    async def tag_list(self) -> List[str]:
        return await self.tag_contact_list(None)

    # Contact

    async def contact_alias(self, contact_id: str) -> str:
        return self._get(self.contacts, contact_id, "Contact").alias

    async def contact_alias_set(self, contact_id: str, alias: str) -> None:
        self._get(self.contacts, contact_id, "Contact").alias = alias

    async def contact_avatar(self, contact_id: str) -> FileBox:
        return self._get(self.avatars, contact_id, "Avatar of contact")

    async def contact_avatar_set(self, contact_id: str, file: FileBox) -> None:
        self.avatars[contact_id] = file

    async def contact_phone_set(self, contact_id: str, phone_list: List[str]) -> None:
        self._get(self.contacts, contact_id, "Contact").phone = list(phone_list)

    async def contact_corporation_remark_set(self, contact_id: str, corporation_remark: Optional[str]) -> None:
        self._get(self.contacts, contact_id, "Contact").corporation = corporation_remark or ""

    async def contact_description_set(self, contact_id: str, description: Optional[str]) -> None:
        self._get(self.contacts, contact_id, "Contact").description = description or ""

    async def contact_list(self) -> List[str]:
        return list(self.contacts)

    async def contact_raw_payload(self, contact_id: str) -> ContactPayload:
        return self._get(self.contacts, contact_id, "Contact")

    # Message

    async def message_contact(self, message_id: str) -> str:
        return self._get(self.message_contacts, message_id, "Contact card of message")

    async def message_file(self, message_id: str) -> FileBox:
        return self._get(self.message_files, message_id, "File of message")

    async def message_image(self, message_id: str, image_type: ImageType) -> FileBox:
        return self._get(self.message_files, message_id, "Image of message")

    async def message_mini_program(self, message_id: str) -> MiniProgramPayload:
        return self._get(self.message_mini_programs, message_id, "Mini program of message")

    async def message_url(self, message_id: str) -> UrlLinkPayload:
        return self._get(self.message_urls, message_id, "Url link of message")

    def _store_sent(self, conversation_id: str, message_type: MessageType, text: str = "",
                    mention_id_list: Optional[List[str]] = None, filename: str = "") -> str:
        message_id = generate_random_id()
        in_room = conversation_id in self.rooms
        self.messages[message_id] = MessagePayload(
            id=message_id,
            type=message_type,
            text=text,
            timestamp=now_timestamp(),
            from_id=self.self_id or "",
            to_id="" if in_room else conversation_id,
            room_id=conversation_id if in_room else "",
            filename=filename,
            mention_id_list=list(mention_id_list or []),
        )
        self.logger.debug(f"Stored sent message {message_id} to {conversation_id}")
        return message_id

    async def message_send_contact(self, conversation_id: str, contact_id: str) -> Optional[str]:
        message_id = self._store_sent(conversation_id, MessageType.CONTACT)
        self.message_contacts[message_id] = contact_id
        return message_id

    async def message_send_file(self, conversation_id: str, file: FileBox) -> Optional[str]:
        message_id = self._store_sent(conversation_id, MessageType.ATTACHMENT, filename=file.name)
        self.message_files[message_id] = file
        return message_id

    async def message_send_mini_program(self, conversation_id: str,
                                        mini_program_payload: MiniProgramPayload) -> Optional[str]:
        message_id = self._store_sent(conversation_id, MessageType.MINI_PROGRAM)
        self.message_mini_programs[message_id] = mini_program_payload
        return message_id

    async def message_send_text(self, conversation_id: str, text: str,
                                mention_id_list: Optional[List[str]] = None) -> Optional[str]:
        return self._store_sent(conversation_id, MessageType.TEXT, text=text, mention_id_list=mention_id_list)

    async def message_send_url(self, conversation_id: str, url_link_payload: UrlLinkPayload) -> Optional[str]:
        message_id = self._store_sent(conversation_id, MessageType.URL)
        self.message_urls[message_id] = url_link_payload
        return message_id

    async def message_raw_payload(self, message_id: str) -> MessagePayload:
        return self._get(self.messages, message_id, "Message")

    # Friendship

    async def friendship_accept(self, friendship_id: str) -> None:
        friendship = self._get(self.friendships, friendship_id, "Friendship")
        friendship.type = FriendshipType.CONFIRM
        contact = self.contacts.get(friendship.contact_id)
        if contact is not None:
            contact.friend = True

    async def friendship_add(self, contact_id: str, hello: Optional[str] = None) -> None:
        self.friend_requests.append((contact_id, hello))

    async def friendship_search_phone(self, phone: str) -> Optional[str]:
        for contact in self.contacts.values():
            if phone in contact.phone:
                return contact.id
        return None

    async def friendship_search_weixin(self, weixin: str) -> Optional[str]:
        for contact in self.contacts.values():
            if contact.weixin == weixin:
                return contact.id
        return None

    async def friendship_raw_payload(self, friendship_id: str) -> FriendshipPayload:
        return self._get(self.friendships, friendship_id, "Friendship")

    # Room invitation

    async def room_invitation_accept(self, room_invitation_id: str) -> None:
        self._get(self.room_invitations, room_invitation_id, "Room invitation")
        self.accepted_room_invitations.add(room_invitation_id)

    async def room_invitation_raw_payload(self, room_invitation_id: str) -> RoomInvitationPayload:
        return self._get(self.room_invitations, room_invitation_id, "Room invitation")

    # Room

    async def room_add(self, room_id: str, contact_id: str) -> None:
        room = self._get(self.rooms, room_id, "Room")
        if contact_id not in room.member_id_list:
            room.member_id_list.append(contact_id)
        self.room_members.setdefault(room_id, {})[contact_id] = self._member_from_contact(contact_id)

    async def room_avatar(self, room_id: str) -> FileBox:
        return self._get(self.avatars, room_id, "Avatar of room")

    async def room_create(self, contact_id_list: List[str], topic: Optional[str] = None) -> str:
        room_id = f"{generate_random_id()}@chatroom"
        member_id_list = list(contact_id_list)
        if self.self_id and self.self_id not in member_id_list:
            member_id_list.insert(0, self.self_id)
        self.add_room(RoomPayload(
            id=room_id,
            topic=topic or "",
            owner_id=self.self_id or "",
            member_id_list=member_id_list,
        ))
        return room_id

    async def room_del(self, room_id: str, contact_id: str) -> None:
        room = self._get(self.rooms, room_id, "Room")
        if contact_id in room.member_id_list:
            room.member_id_list.remove(contact_id)
        self.room_members.get(room_id, {}).pop(contact_id, None)

    async def room_qr_code(self, room_id: str) -> str:
        self._get(self.rooms, room_id, "Room")
        return f"https://weixin.qq.com/g/{room_id}"

    async def room_quit(self, room_id: str) -> None:
        await self.room_del(room_id, self.self_id or "")

    async def room_topic(self, room_id: str) -> str:
        return self._get(self.rooms, room_id, "Room").topic

    async def room_topic_set(self, room_id: str, topic: str) -> None:
        self._get(self.rooms, room_id, "Room").topic = topic

    async def room_list(self) -> List[str]:
        return list(self.rooms)

    async def room_raw_payload(self, room_id: str) -> RoomPayload:
        return self._get(self.rooms, room_id, "Room")

    async def room_announce(self, room_id: str) -> str:
        self._get(self.rooms, room_id, "Room")
        return self.room_announcements.get(room_id, "")

    async def room_announce_set(self, room_id: str, text: str) -> None:
        self._get(self.rooms, room_id, "Room")
        self.room_announcements[room_id] = text

    async def room_member_list(self, room_id: str) -> List[str]:
        return list(self._get(self.rooms, room_id, "Room").member_id_list)

    async def room_member_raw_payload(self, room_id: str, contact_id: str) -> RoomMemberPayload:
        return self._get(self.room_members.get(room_id, {}), contact_id, f"Member of room {room_id}")

    # Lifecycle

    async def start(self) -> None:
        self.started = True
        self.logger.info("Mock puppet started")

    async def stop(self) -> None:
        self.started = False
        self.logger.info("Mock puppet stopped")

    async def ding(self, data: str) -> None:
        self.emit(PuppetEventName.DONG, EventDongPayload(data=data))

    async def version(self) -> str:
        return MOCK_VERSION

    async def logout(self) -> None:
        self.mock_logout("logout")
