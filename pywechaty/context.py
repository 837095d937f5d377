"""
State shared by every entity of one bot.

The context keeps the payloads the SDK has already loaded, tracks the
logged-in user and offers the loaders and finders entities use to reach
each other.
"""

from typing import Any, Dict, List, Optional

from .constants import BATCH_CONCURRENCY
from .exceptions import InvalidOperationError, NotLoggedInError, PuppetError
from .puppet import Puppet
from .schemas import (
    ContactPayload,
    ContactQueryFilter,
    FriendshipPayload,
    FriendshipSearchQueryFilter,
    MessagePayload,
    MessageQueryFilter,
    RoomInvitationPayload,
    RoomPayload,
    RoomQueryFilter,
)
from .user import Contact, Friendship, Message, Room
from .utils import gather_limited, get_logger


class WechatyContext:
    """
    Loaders, finders and local payload stores.

    ``contact_load`` and ``message_load`` work without login; the other
    lookups raise ``NotLoggedInError`` while no user is logged in.
    """

    def __init__(self, puppet: Puppet):
        self.logger = get_logger("WechatyContext")
        self.puppet = puppet
        self.id: Optional[str] = None

        self.contacts: Dict[str, ContactPayload] = {}
        self.friendships: Dict[str, FriendshipPayload] = {}
        self.messages: Dict[str, MessagePayload] = {}
        self.rooms: Dict[str, RoomPayload] = {}
        self.room_invitations: Dict[str, RoomInvitationPayload] = {}

    def is_logged_in(self) -> bool:
        return self.id is not None

    def _check_login(self, operation: str) -> None:
        if not self.is_logged_in():
            self.logger.error(f"Cannot {operation} while logged out")
            raise NotLoggedInError()

    async def _load_batch(self, loader, id_list: List[str]) -> List[Any]:
        return await gather_limited(loader, id_list, BATCH_CONCURRENCY)

    # Contacts

    async def contact_load(self, contact_id: str) -> Contact:
        contact = Contact(contact_id, self)
        await contact.ready()
        return contact

    async def contact_load_batch(self, contact_id_list: List[str]) -> List[Contact]:
        """Load contacts concurrently; contacts that fail to load are dropped."""
        return await self._load_batch(self.contact_load, contact_id_list)

    async def contact_find(self, query: ContactQueryFilter) -> Optional[Contact]:
        contacts = await self.contact_find_all(query)
        return contacts[0] if contacts else None

    async def contact_find_by_string(self, query_str: str) -> Optional[Contact]:
        contacts = await self.contact_find_all_by_string(query_str)
        return contacts[0] if contacts else None

    async def contact_find_all(self, query: Optional[ContactQueryFilter] = None) -> List[Contact]:
        """
        Find every contact matching ``query``.

        Args:
            query: Search criteria; every contact when None

        Raises:
            NotLoggedInError: If no user is logged in
        """
        self._check_login("find contacts")
        if query is None:
            query = ContactQueryFilter()
        contact_id_list = await self.puppet.contact_search(query)
        return await self.contact_load_batch(contact_id_list)

    async def contact_find_all_by_string(self, query_str: str) -> List[Contact]:
        self._check_login("find contacts")
        contact_id_list = await self.puppet.contact_search_by_string(query_str)
        return await self.contact_load_batch(contact_id_list)

    # Messages

    async def message_load(self, message_id: str) -> Message:
        message = Message(message_id, self)
        await message.ready()
        return message

    async def message_load_batch(self, message_id_list: List[str]) -> List[Message]:
        return await self._load_batch(self.message_load, message_id_list)

    async def message_find(self, query: MessageQueryFilter) -> Optional[Message]:
        messages = await self.message_find_all(query)
        return messages[0] if messages else None

    async def message_find_all(self, query: MessageQueryFilter) -> List[Message]:
        self._check_login("find messages")
        message_id_list = await self.puppet.message_search(query)
        return await self.message_load_batch(message_id_list)

    # Rooms

    async def room_load(self, room_id: str) -> Room:
        self._check_login("load a room")
        room = Room(room_id, self)
        await room.ready()
        return room

    async def room_load_batch(self, room_id_list: List[str]) -> List[Room]:
        return await self._load_batch(self.room_load, room_id_list)

    async def room_create(self, contact_list: List[Contact], topic: Optional[str] = None) -> Room:
        """
        Create a room with the given contacts.

        Raises:
            NotLoggedInError: If no user is logged in
            InvalidOperationError: With fewer than two contacts
        """
        self._check_login("create a room")
        if len(contact_list) < 2:
            raise InvalidOperationError("Need at least 2 contacts to create a room")

        room_id = await self.puppet.room_create([contact.id for contact in contact_list], topic)
        self.logger.info(f"Created room {room_id}")
        room = Room(room_id, self)
        try:
            await room.sync()
        except PuppetError as e:
            self.logger.error(f"Failed to sync new room {room_id}, reason: {e}")
        return room

    async def room_find(self, query: RoomQueryFilter) -> Optional[Room]:
        rooms = await self.room_find_all(query)
        return rooms[0] if rooms else None

    async def room_find_all(self, query: Optional[RoomQueryFilter] = None) -> List[Room]:
        self._check_login("find rooms")
        if query is None:
            query = RoomQueryFilter()
        room_id_list = await self.puppet.room_search(query)
        return await self.room_load_batch(room_id_list)

    # Friendships

    async def friendship_load(self, friendship_id: str) -> Friendship:
        self._check_login("load a friendship")
        friendship = Friendship(friendship_id, self)
        await friendship.ready()
        return friendship

    async def friendship_add(self, contact: Contact, hello: Optional[str] = None) -> None:
        self._check_login("add a friend")
        await self.puppet.friendship_add(contact.id, hello)

    async def friendship_search(self, query: FriendshipSearchQueryFilter) -> Optional[Contact]:
        """
        Search a stranger by phone number or weixin id.

        Returns:
            Optional[Contact]: The contact found, None otherwise

        Raises:
            NotLoggedInError: If no user is logged in
            InvalidOperationError: If neither phone nor weixin is given
        """
        self._check_login("search friendships")
        if not query.phone and not query.weixin:
            raise InvalidOperationError("Must specify either phone or weixin")

        contact_id = await self.puppet.friendship_search(query)
        if contact_id is None:
            return None
        contact = Contact(contact_id, self)
        try:
            await contact.sync()
        except PuppetError as e:
            self.logger.error(f"Failed to sync contact {contact_id}, reason: {e}")
        return contact

    async def logout(self) -> None:
        self._check_login("log out")
        await self.puppet.logout()
