"""
Puppet wrapper around a puppet implementation.

The ``Puppet`` adds payload caching, searching, message forwarding and
event subscriptions on top of the raw operations of a ``PuppetImpl``.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from cachetools import LRUCache

from ..constants import (
    BATCH_CONCURRENCY,
    CACHE_CONTACT_SIZE,
    CACHE_FRIENDSHIP_SIZE,
    CACHE_MESSAGE_SIZE,
    CACHE_ROOM_INVITATION_SIZE,
    CACHE_ROOM_MEMBER_SIZE,
    CACHE_ROOM_SIZE,
    ROOM_MEMBER_KEY_SEPARATOR,
)
from ..events import EventEmitter, PuppetEvent, PuppetEventName
from ..exceptions import PuppetError, UnknownMessageTypeError, UnknownPayloadTypeError, UnsupportedError
from ..filebox import FileBox
from ..schemas import (
    ContactPayload,
    ContactQueryFilter,
    EventDirtyPayload,
    FriendshipPayload,
    FriendshipSearchQueryFilter,
    ImageType,
    MessagePayload,
    MessageQueryFilter,
    MessageType,
    MiniProgramPayload,
    PayloadType,
    RoomInvitationPayload,
    RoomMemberPayload,
    RoomMemberQueryFilter,
    RoomPayload,
    RoomQueryFilter,
    UrlLinkPayload,
)
from ..utils import gather_limited, get_logger
from .base import PuppetImpl

# Message types the puppet cannot resend
_UNFORWARDABLE = {
    MessageType.CHAT_HISTORY: "chat history",
    MessageType.LOCATION: "location",
    MessageType.EMOTICON: "emoticon",
    MessageType.GROUP_NOTE: "group note",
    MessageType.TRANSFER: "transfer",
    MessageType.RED_ENVELOPE: "red envelope",
    MessageType.RECALLED: "recalled",
}


def room_member_cache_key(room_id: str, contact_id: str) -> str:
    return f"{contact_id}{ROOM_MEMBER_KEY_SEPARATOR}{room_id}"


class Puppet:
    """
    Caching and event hub around a puppet implementation.

    Subscribers register one callback per (subscriber name, event). Every
    callback receives the ``PuppetEvent`` that was emitted.
    """

    def __init__(self, puppet_impl: PuppetImpl):
        self.logger = get_logger("Puppet")
        self.puppet_impl = puppet_impl
        self.event_emitter = EventEmitter()
        self._subscribers: Dict[str, Dict[str, Callable]] = {}
        self._self_id: Optional[str] = None
        self._dirty_tasks: Set[asyncio.Task] = set()

        self.cache_contact_payload = LRUCache(maxsize=CACHE_CONTACT_SIZE)
        self.cache_friendship_payload = LRUCache(maxsize=CACHE_FRIENDSHIP_SIZE)
        self.cache_message_payload = LRUCache(maxsize=CACHE_MESSAGE_SIZE)
        self.cache_room_payload = LRUCache(maxsize=CACHE_ROOM_SIZE)
        self.cache_room_member_payload = LRUCache(maxsize=CACHE_ROOM_MEMBER_SIZE)
        self.cache_room_invitation_payload = LRUCache(maxsize=CACHE_ROOM_INVITATION_SIZE)

        puppet_impl.attach(self)

    # Login state

    @property
    def self_id(self) -> Optional[str]:
        """Id of the logged-in contact, None when logged out."""
        return self._self_id

    def log_on_off(self) -> bool:
        return self._self_id is not None

    is_logged_in = log_on_off

    # Events

    def subscribe(self, name: str, event_name: Any, callback: Callable) -> bool:
        """
        Subscribe ``callback`` to an event under the subscriber ``name``.

        A second subscription with the same name replaces the first.

        Returns:
            bool: False if the event name is unknown
        """
        event = PuppetEventName.parse(event_name)
        if event is None:
            self.logger.error(f"{name} tried to subscribe to unknown event {event_name}")
            return False

        subscribers = self._subscribers.setdefault(event.value, {})
        previous = subscribers.get(name)
        if previous is not None:
            self.event_emitter.off(event, previous)
        subscribers[name] = callback
        self.event_emitter.on(event, callback)
        self.logger.debug(f"{name} subscribed to event {event.value}")
        return True

    def unsubscribe(self, name: str, event_name: Any) -> bool:
        event = PuppetEventName.parse(event_name)
        if event is None:
            self.logger.error(f"{name} tried to unsubscribe from unknown event {event_name}")
            return False

        callback = self._subscribers.get(event.value, {}).pop(name, None)
        if callback is None:
            return False
        self.event_emitter.off(event, callback)
        self.logger.debug(f"{name} unsubscribed from event {event.value}")
        return True

    def subscribers(self, event_name: Any) -> List[str]:
        event = PuppetEventName.parse(event_name)
        if event is None:
            return []
        return list(self._subscribers.get(event.value, {}))

    def emit(self, event: PuppetEvent) -> None:
        """Deliver an event from the implementation to every subscriber."""
        self.logger.debug(f"Puppet event {event.name.value}: {event.payload}")
        if event.name == PuppetEventName.LOGIN:
            self._self_id = event.payload.contact_id
        elif event.name == PuppetEventName.LOGOUT:
            self._self_id = None
        elif event.name == PuppetEventName.DIRTY:
            task = asyncio.ensure_future(self._on_dirty(event.payload))
            self._dirty_tasks.add(task)
            task.add_done_callback(self._dirty_tasks.discard)
        self.event_emitter.emit(event.name, event)

    async def _on_dirty(self, payload: EventDirtyPayload) -> None:
        try:
            await self.dirty_payload(payload.payload_type, payload.payload_id)
        except PuppetError as e:
            self.logger.error(f"Failed to dirty {payload.payload_type.name} {payload.payload_id}: {e}")

    # Cached payloads

    async def _cached(self, cache: LRUCache, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        payload = cache.get(key)
        if payload is not None:
            self.logger.debug(f"Cache hit for {key}")
            return payload
        payload = await loader()
        cache[key] = payload
        return payload

    async def contact_payload(self, contact_id: str) -> ContactPayload:
        return await self._cached(
            self.cache_contact_payload, contact_id,
            lambda: self.puppet_impl.contact_raw_payload(contact_id))

    async def contact_payload_batch(self, contact_id_list: List[str]) -> List[ContactPayload]:
        return await gather_limited(self.contact_payload, contact_id_list, BATCH_CONCURRENCY)

    async def message_payload(self, message_id: str) -> MessagePayload:
        return await self._cached(
            self.cache_message_payload, message_id,
            lambda: self.puppet_impl.message_raw_payload(message_id))

    async def message_payload_batch(self, message_id_list: List[str]) -> List[MessagePayload]:
        return await gather_limited(self.message_payload, message_id_list, BATCH_CONCURRENCY)

    async def friendship_payload(self, friendship_id: str) -> FriendshipPayload:
        return await self._cached(
            self.cache_friendship_payload, friendship_id,
            lambda: self.puppet_impl.friendship_raw_payload(friendship_id))

    async def friendship_payload_batch(self, friendship_id_list: List[str]) -> List[FriendshipPayload]:
        return await gather_limited(self.friendship_payload, friendship_id_list, BATCH_CONCURRENCY)

    def friendship_payload_set(self, friendship_id: str, payload: FriendshipPayload) -> None:
        self.cache_friendship_payload[friendship_id] = payload

    async def room_invitation_payload(self, room_invitation_id: str) -> RoomInvitationPayload:
        return await self._cached(
            self.cache_room_invitation_payload, room_invitation_id,
            lambda: self.puppet_impl.room_invitation_raw_payload(room_invitation_id))

    async def room_invitation_payload_batch(self, room_invitation_id_list: List[str]) -> List[RoomInvitationPayload]:
        return await gather_limited(self.room_invitation_payload, room_invitation_id_list, BATCH_CONCURRENCY)

    def room_invitation_payload_set(self, room_invitation_id: str, payload: RoomInvitationPayload) -> None:
        self.cache_room_invitation_payload[room_invitation_id] = payload

    async def room_payload(self, room_id: str) -> RoomPayload:
        return await self._cached(
            self.cache_room_payload, room_id,
            lambda: self.puppet_impl.room_raw_payload(room_id))

    async def room_payload_batch(self, room_id_list: List[str]) -> List[RoomPayload]:
        return await gather_limited(self.room_payload, room_id_list, BATCH_CONCURRENCY)

    async def room_member_payload(self, room_id: str, member_id: str) -> RoomMemberPayload:
        return await self._cached(
            self.cache_room_member_payload, room_member_cache_key(room_id, member_id),
            lambda: self.puppet_impl.room_member_raw_payload(room_id, member_id))

    async def room_member_payload_batch(self, room_id: str, member_id_list: List[str]) -> List[RoomMemberPayload]:
        return await gather_limited(
            lambda member_id: self.room_member_payload(room_id, member_id),
            member_id_list, BATCH_CONCURRENCY)

    # Search

    async def contact_search(self, query: ContactQueryFilter,
                             contact_id_list: Optional[List[str]] = None) -> List[str]:
        """
        Search contacts matching a query.

        Args:
            query: Criteria to match
            contact_id_list: Ids to search in; every contact when None

        Returns:
            List[str]: Ids of matching contacts
        """
        if contact_id_list is None:
            contact_id_list = await self.puppet_impl.contact_list()
        self.logger.debug(f"Searching {len(contact_id_list)} contacts for {query}")
        payloads = await self.contact_payload_batch(contact_id_list)
        return [payload.id for payload in payloads if query.matches(payload)]

    async def contact_search_by_string(self, query_str: str,
                                       search_id_list: Optional[List[str]] = None) -> List[str]:
        """Ids of contacts whose id or alias equals ``query_str``."""
        if search_id_list is None:
            search_id_list = await self.puppet_impl.contact_list()
        by_id = await self.contact_search(ContactQueryFilter(id=query_str), search_id_list)
        by_alias = await self.contact_search(ContactQueryFilter(alias=query_str), search_id_list)
        return list(dict.fromkeys(by_id + by_alias))

    def message_list(self) -> List[str]:
        """Ids of every cached message."""
        return list(self.cache_message_payload.keys())

    async def message_search(self, query: MessageQueryFilter) -> List[str]:
        message_id_list = self.message_list()
        self.logger.debug(f"Searching {len(message_id_list)} cached messages for {query}")
        found = []
        for message_id in message_id_list:
            try:
                payload = await self.message_payload(message_id)
            except PuppetError as e:
                self.logger.error(f"Failed to get message payload for {message_id}: {e}")
                continue
            if query.matches(payload):
                found.append(message_id)
        return found

    async def friendship_search(self, query: FriendshipSearchQueryFilter) -> Optional[str]:
        """Contact id found by phone, else by weixin; None without criteria."""
        if query.phone:
            return await self.puppet_impl.friendship_search_phone(query.phone)
        if query.weixin:
            return await self.puppet_impl.friendship_search_weixin(query.weixin)
        return None

    async def room_search(self, query: RoomQueryFilter) -> List[str]:
        try:
            room_id_list = await self.puppet_impl.room_list()
        except PuppetError as e:
            self.logger.error(f"Failed to get room list: {e}")
            room_id_list = []
        payloads = await self.room_payload_batch(room_id_list)
        return [payload.id for payload in payloads if query.matches(payload)]

    async def room_member_search(self, room_id: str, query: RoomMemberQueryFilter) -> List[str]:
        member_id_list = await self.puppet_impl.room_member_list(room_id)
        payloads = await self.room_member_payload_batch(room_id, member_id_list)
        return [payload.id for payload in payloads if query.matches(payload)]

    async def room_member_search_by_string(self, room_id: str, query_str: str) -> List[str]:
        """Ids of room members whose name or room alias equals ``query_str``."""
        by_name = await self.room_member_search(room_id, RoomMemberQueryFilter(name=query_str))
        by_alias = await self.room_member_search(room_id, RoomMemberQueryFilter(room_alias=query_str))
        return list(dict.fromkeys(by_name + by_alias))

    # Forward

    async def message_forward(self, conversation_id: str, message_id: str) -> Optional[str]:
        """
        Resend a message to another conversation.

        Returns:
            Optional[str]: Id of the new message, if the puppet reports one

        Raises:
            UnsupportedError: If messages of this type cannot be resent
            UnknownMessageTypeError: If the message type is unknown
        """
        payload = await self.message_payload(message_id)
        message_type = payload.type

        if message_type in (MessageType.ATTACHMENT, MessageType.AUDIO, MessageType.IMAGE, MessageType.VIDEO):
            file = await self.puppet_impl.message_file(message_id)
            return await self.puppet_impl.message_send_file(conversation_id, file)
        if message_type == MessageType.TEXT:
            return await self.puppet_impl.message_send_text(conversation_id, payload.text, [])
        if message_type == MessageType.MINI_PROGRAM:
            mini_program = await self.puppet_impl.message_mini_program(message_id)
            return await self.puppet_impl.message_send_mini_program(conversation_id, mini_program)
        if message_type == MessageType.URL:
            url_link = await self.puppet_impl.message_url(message_id)
            return await self.puppet_impl.message_send_url(conversation_id, url_link)
        if message_type == MessageType.CONTACT:
            contact_id = await self.puppet_impl.message_contact(message_id)
            return await self.puppet_impl.message_send_contact(conversation_id, contact_id)
        if message_type in _UNFORWARDABLE:
            raise UnsupportedError(f"sending {_UNFORWARDABLE[message_type]} messages")
        raise UnknownMessageTypeError()

    # Dirty

    async def dirty_payload(self, payload_type: PayloadType, payload_id: str) -> None:
        """
        Evict a payload from its cache so the next access refetches it.

        For ROOM_MEMBER, ``payload_id`` is a room id and every member of that
        room is evicted.

        Raises:
            UnknownPayloadTypeError: For PayloadType.UNKNOWN
        """
        self.logger.debug(f"dirty_payload({payload_type.name}, {payload_id})")
        if payload_type == PayloadType.MESSAGE:
            self.cache_message_payload.pop(payload_id, None)
        elif payload_type == PayloadType.CONTACT:
            self.cache_contact_payload.pop(payload_id, None)
        elif payload_type == PayloadType.ROOM:
            self.cache_room_payload.pop(payload_id, None)
        elif payload_type == PayloadType.ROOM_MEMBER:
            for contact_id in await self.puppet_impl.room_member_list(payload_id):
                self.cache_room_member_payload.pop(room_member_cache_key(payload_id, contact_id), None)
        elif payload_type == PayloadType.FRIENDSHIP:
            self.cache_friendship_payload.pop(payload_id, None)
        else:
            raise UnknownPayloadTypeError()

    # Raw operations

    async def contact_self_name_set(self, name: str) -> None:
        """Change the display name of the logged-in user."""
        await self.puppet_impl.contact_self_name_set(name)

    async def contact_self_qr_code(self) -> str:
        """QR code text others scan to add the logged-in user."""
        return await self.puppet_impl.contact_self_qr_code()

    async def contact_self_signature_set(self, signature: str) -> None:
        """Change the signature of the logged-in user."""
        await self.puppet_impl.contact_self_signature_set(signature)

    async def tag_contact_add(self, tag_id: str, contact_id: str) -> None:
        """Put a contact under a tag."""
        await self.puppet_impl.tag_contact_add(tag_id, contact_id)

    async def tag_contact_remove(self, tag_id: str, contact_id: str) -> None:
        """Take a contact out of a tag."""
        await self.puppet_impl.tag_contact_remove(tag_id, contact_id)

    async def tag_contact_delete(self, tag_id: str) -> None:
        """Delete a tag from every contact."""
        await self.puppet_impl.tag_contact_delete(tag_id)

    async def tag_contact_list(self, contact_id: Optional[str] = None) -> List[str]:
        """Tags of a contact, or every tag when ``contact_id`` is None."""
        return await self.puppet_impl.tag_contact_list(contact_id)

    async def tag_list(self) -> List[str]:
        """Every tag known to the puppet."""
        return await self.puppet_impl.tag_list()

    async def contact_alias(self, contact_id: str) -> str:
        """Alias (remark name) of a contact."""
        return await self.puppet_impl.contact_alias(contact_id)

    async def contact_alias_set(self, contact_id: str, alias: str) -> None:
        """Set the alias of a contact, bypassing the cache."""
        await self.puppet_impl.contact_alias_set(contact_id, alias)

    async def contact_avatar(self, contact_id: str) -> FileBox:
        """Avatar of a contact."""
        return await self.puppet_impl.contact_avatar(contact_id)

    async def contact_avatar_set(self, contact_id: str, file: FileBox) -> None:
        """Replace the avatar of a contact."""
        await self.puppet_impl.contact_avatar_set(contact_id, file)

    async def contact_phone_set(self, contact_id: str, phone_list: List[str]) -> None:
        """Replace the phone numbers recorded for a contact."""
        await self.puppet_impl.contact_phone_set(contact_id, phone_list)

    async def contact_corporation_remark_set(self, contact_id: str, corporation_remark: Optional[str]) -> None:
        """Set or clear the corporation remark of a contact."""
        await self.puppet_impl.contact_corporation_remark_set(contact_id, corporation_remark)

    async def contact_description_set(self, contact_id: str, description: Optional[str]) -> None:
        """Set or clear the description of a contact."""
        await self.puppet_impl.contact_description_set(contact_id, description)

    async def contact_list(self) -> List[str]:
        """Ids of every contact."""
        return await self.puppet_impl.contact_list()

    async def contact_raw_payload(self, contact_id: str) -> ContactPayload:
        """Contact payload straight from the implementation, without caching."""
        return await self.puppet_impl.contact_raw_payload(contact_id)

    async def message_contact(self, message_id: str) -> str:
        """Id of the contact card carried by a message."""
        return await self.puppet_impl.message_contact(message_id)

    async def message_file(self, message_id: str) -> FileBox:
        """File attached to a message."""
        return await self.puppet_impl.message_file(message_id)

    async def message_image(self, message_id: str, image_type: ImageType = ImageType.HD) -> FileBox:
        """Image of a message in the requested size."""
        return await self.puppet_impl.message_image(message_id, image_type)

    async def message_mini_program(self, message_id: str) -> MiniProgramPayload:
        """Mini program carried by a message."""
        return await self.puppet_impl.message_mini_program(message_id)

    async def message_url(self, message_id: str) -> UrlLinkPayload:
        """Link carried by a message."""
        return await self.puppet_impl.message_url(message_id)

    async def message_send_contact(self, conversation_id: str, contact_id: str) -> Optional[str]:
        """Send a contact card; returns the new message id, if known."""
        return await self.puppet_impl.message_send_contact(conversation_id, contact_id)

    async def message_send_file(self, conversation_id: str, file: FileBox) -> Optional[str]:
        """Send a file; returns the new message id, if known."""
        return await self.puppet_impl.message_send_file(conversation_id, file)

    async def message_send_mini_program(self, conversation_id: str,
                                        mini_program_payload: MiniProgramPayload) -> Optional[str]:
        """Send a mini program; returns the new message id, if known."""
        return await self.puppet_impl.message_send_mini_program(conversation_id, mini_program_payload)

    async def message_send_text(self, conversation_id: str, text: str,
                                mention_id_list: Optional[List[str]] = None) -> Optional[str]:
        """Send text, mentioning ``mention_id_list`` in rooms."""
        return await self.puppet_impl.message_send_text(conversation_id, text, mention_id_list or [])

    async def message_send_url(self, conversation_id: str, url_link_payload: UrlLinkPayload) -> Optional[str]:
        """Send a link; returns the new message id, if known."""
        return await self.puppet_impl.message_send_url(conversation_id, url_link_payload)

    async def message_raw_payload(self, message_id: str) -> MessagePayload:
        """Message payload straight from the implementation, without caching."""
        return await self.puppet_impl.message_raw_payload(message_id)

    async def friendship_accept(self, friendship_id: str) -> None:
        """Accept a received friend request."""
        await self.puppet_impl.friendship_accept(friendship_id)

    async def friendship_add(self, contact_id: str, hello: Optional[str] = None) -> None:
        """Send a friend request with an optional greeting."""
        await self.puppet_impl.friendship_add(contact_id, hello)

    async def friendship_search_phone(self, phone: str) -> Optional[str]:
        """Contact id registered with a phone number, if any."""
        return await self.puppet_impl.friendship_search_phone(phone)

    async def friendship_search_weixin(self, weixin: str) -> Optional[str]:
        """Contact id of a weixin account, if any."""
        return await self.puppet_impl.friendship_search_weixin(weixin)

    async def friendship_raw_payload(self, friendship_id: str) -> FriendshipPayload:
        """Friendship payload straight from the implementation, without caching."""
        return await self.puppet_impl.friendship_raw_payload(friendship_id)

    async def room_invitation_accept(self, room_invitation_id: str) -> None:
        """Accept an invitation to join a room."""
        await self.puppet_impl.room_invitation_accept(room_invitation_id)

    async def room_invitation_raw_payload(self, room_invitation_id: str) -> RoomInvitationPayload:
        """Room invitation payload straight from the implementation."""
        return await self.puppet_impl.room_invitation_raw_payload(room_invitation_id)

    async def room_add(self, room_id: str, contact_id: str) -> None:
        """Add a contact to a room."""
        await self.puppet_impl.room_add(room_id, contact_id)

    async def room_avatar(self, room_id: str) -> FileBox:
        """Avatar of a room."""
        return await self.puppet_impl.room_avatar(room_id)

    async def room_create(self, contact_id_list: List[str], topic: Optional[str] = None) -> str:
        """Create a room with the given contacts; returns its id."""
        return await self.puppet_impl.room_create(contact_id_list, topic)

    async def room_del(self, room_id: str, contact_id: str) -> None:
        """Remove a contact from a room."""
        await self.puppet_impl.room_del(room_id, contact_id)

    async def room_qr_code(self, room_id: str) -> str:
        """QR code text to join a room."""
        return await self.puppet_impl.room_qr_code(room_id)

    async def room_quit(self, room_id: str) -> None:
        """Make the bot leave a room."""
        await self.puppet_impl.room_quit(room_id)

    async def room_topic(self, room_id: str) -> str:
        """Current topic of a room."""
        return await self.puppet_impl.room_topic(room_id)

    async def room_topic_set(self, room_id: str, topic: str) -> None:
        """Rename a room."""
        await self.puppet_impl.room_topic_set(room_id, topic)

    async def room_list(self) -> List[str]:
        """Ids of every room the bot is in."""
        return await self.puppet_impl.room_list()

    async def room_raw_payload(self, room_id: str) -> RoomPayload:
        """Room payload straight from the implementation, without caching."""
        return await self.puppet_impl.room_raw_payload(room_id)

    async def room_announce(self, room_id: str) -> str:
        """Announcement of a room."""
        return await self.puppet_impl.room_announce(room_id)

    async def room_announce_set(self, room_id: str, text: str) -> None:
        """Publish a room announcement."""
        await self.puppet_impl.room_announce_set(room_id, text)

    async def room_member_list(self, room_id: str) -> List[str]:
        """Ids of the members of a room."""
        return await self.puppet_impl.room_member_list(room_id)

    async def room_member_raw_payload(self, room_id: str, contact_id: str) -> RoomMemberPayload:
        """Member payload straight from the implementation, without caching."""
        return await self.puppet_impl.room_member_raw_payload(room_id, contact_id)

    async def start(self) -> None:
        """Start the implementation."""
        await self.puppet_impl.start()

    async def stop(self) -> None:
        """Stop the implementation."""
        await self.puppet_impl.stop()

    async def ding(self, data: str) -> None:
        """Ask for a dong event carrying ``data``."""
        await self.puppet_impl.ding(data)

    async def version(self) -> str:
        """Version string of the implementation."""
        return await self.puppet_impl.version()

    async def logout(self) -> None:
        """Log the current user out."""
        await self.puppet_impl.logout()
