"""
Event listener: turns puppet events into SDK payloads and runs user handlers.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from .context import WechatyContext
from .events import PuppetEvent, PuppetEventName
from .exceptions import WechatyBaseError
from .payload import (
    FriendshipPayload,
    LoginPayload,
    LogoutPayload,
    MessagePayload,
    RoomInvitePayload,
    RoomJoinPayload,
    RoomLeavePayload,
    RoomTopicPayload,
)
from .puppet import Puppet
from .schemas import PayloadType
from .user import Contact, ContactSelf, Friendship, Message, Room, RoomInvitation
from .utils import call_handler, get_logger


class _HandlerEntry:
    """A user handler and the number of runs it has left (None: unlimited)."""

    __slots__ = ("handler", "remaining")

    def __init__(self, handler: Callable, limit: Optional[int]):
        self.handler = handler
        self.remaining = limit

    def active(self) -> bool:
        return self.remaining is None or self.remaining > 0


class EventListener:
    """
    Registry of user event handlers.

    Handlers are called as ``handler(payload, ctx)`` and may be coroutine
    functions or plain functions. Events are handled one at a time in the
    order the puppet emitted them.
    """

    def __init__(self, puppet: Puppet, name: str = "EventListener"):
        self.name = name
        self.logger = get_logger(name)
        self.puppet = puppet
        self.ctx = WechatyContext(puppet)
        self._handlers: Dict[PuppetEventName, List[_HandlerEntry]] = {}
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

        # Login state is tracked with or without user handlers
        for event_name in (PuppetEventName.LOGIN, PuppetEventName.LOGOUT):
            self._subscribe(event_name)

    # Registration

    def _subscribe(self, event_name: PuppetEventName) -> None:
        if self.name not in self.puppet.subscribers(event_name):
            self.puppet.subscribe(self.name, event_name, self._enqueue)

    def _on_event(self, event_name: PuppetEventName, handler: Callable, limit: Optional[int]) -> int:
        handlers = self._handlers.setdefault(event_name, [])
        handlers.append(_HandlerEntry(handler, limit))
        self._subscribe(event_name)
        return len(handlers) - 1

    def on_dong(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with the data of every dong answering a ding."""
        self.on_dong_with_handle(handler, limit)
        return self

    def on_dong_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_dong``, returning the handler index."""
        return self._on_event(PuppetEventName.DONG, handler, limit)

    def on_error(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with the error data the puppet reports."""
        self.on_error_with_handle(handler, limit)
        return self

    def on_error_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_error``, returning the handler index."""
        return self._on_event(PuppetEventName.ERROR, handler, limit)

    def on_friendship(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with every friend request received, confirmed or verified."""
        self.on_friendship_with_handle(handler, limit)
        return self

    def on_friendship_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_friendship``, returning the handler index."""
        return self._on_event(PuppetEventName.FRIENDSHIP, handler, limit)

    def on_heartbeat(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with every heartbeat of the puppet."""
        self.on_heartbeat_with_handle(handler, limit)
        return self

    def on_heartbeat_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_heartbeat``, returning the handler index."""
        return self._on_event(PuppetEventName.HEARTBEAT, handler, limit)

    def on_login(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with the logged-in ``ContactSelf`` after each login."""
        self.on_login_with_handle(handler, limit)
        return self

    def on_login_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_login``, returning the handler index."""
        return self._on_event(PuppetEventName.LOGIN, handler, limit)

    def on_logout(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with the departing contact after each logout."""
        self.on_logout_with_handle(handler, limit)
        return self

    def on_logout_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_logout``, returning the handler index."""
        return self._on_event(PuppetEventName.LOGOUT, handler, limit)

    def on_message(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """
        Register a handler for messages received or sent by the bot.

        Args:
            handler: Called as ``handler(MessagePayload, ctx)``
            limit: Maximum number of runs; unlimited when None

        Returns:
            EventListener: This listener, for chaining
        """
        self.on_message_with_handle(handler, limit)
        return self

    def on_message_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """
        Register a message handler and return its index.

        Returns:
            int: Position of the handler among the message handlers
        """
        return self._on_event(PuppetEventName.MESSAGE, handler, limit)

    def on_ready(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` once the puppet has synced and is ready."""
        self.on_ready_with_handle(handler, limit)
        return self

    def on_ready_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_ready``, returning the handler index."""
        return self._on_event(PuppetEventName.READY, handler, limit)

    def on_reset(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` when the puppet asks to be reset."""
        self.on_reset_with_handle(handler, limit)
        return self

    def on_reset_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_reset``, returning the handler index."""
        return self._on_event(PuppetEventName.RESET, handler, limit)

    def on_room_invite(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with every invitation to join a room."""
        self.on_room_invite_with_handle(handler, limit)
        return self

    def on_room_invite_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_room_invite``, returning the handler index."""
        return self._on_event(PuppetEventName.ROOM_INVITE, handler, limit)

    def on_room_join(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` when contacts join a room the bot is in."""
        self.on_room_join_with_handle(handler, limit)
        return self

    def on_room_join_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_room_join``, returning the handler index."""
        return self._on_event(PuppetEventName.ROOM_JOIN, handler, limit)

    def on_room_leave(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` when contacts leave or are removed from a room."""
        self.on_room_leave_with_handle(handler, limit)
        return self

    def on_room_leave_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_room_leave``, returning the handler index."""
        return self._on_event(PuppetEventName.ROOM_LEAVE, handler, limit)

    def on_room_topic(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` when the topic of a room changes."""
        self.on_room_topic_with_handle(handler, limit)
        return self

    def on_room_topic_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_room_topic``, returning the handler index."""
        return self._on_event(PuppetEventName.ROOM_TOPIC, handler, limit)

    def on_scan(self, handler: Callable, limit: Optional[int] = None) -> 'EventListener':
        """Call ``handler`` with the QR code status during login."""
        self.on_scan_with_handle(handler, limit)
        return self

    def on_scan_with_handle(self, handler: Callable, limit: Optional[int] = None) -> int:
        """Same as ``on_scan``, returning the handler index."""
        return self._on_event(PuppetEventName.SCAN, handler, limit)

    # Dispatch

    def _enqueue(self, event: PuppetEvent) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.ensure_future(self._process_events())
        self._queue.put_nowait(event)

    async def _process_events(self) -> None:
        self.logger.info(f"{self.name} started")
        try:
            while True:
                event = await self._queue.get()
                try:
                    await self._dispatch(event)
                except Exception as e:
                    self.logger.error(f"Error handling {event.name.value} event: {e}")
                finally:
                    self._queue.task_done()
        except asyncio.CancelledError:
            self.logger.info(f"{self.name} stopped")
            raise

    async def wait_idle(self) -> None:
        """Wait until every queued event has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Stop the event worker; queued events are discarded."""
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    async def _dispatch(self, event: PuppetEvent) -> None:
        self.logger.info(f"{self.name} receives puppet event: {event.name.value}")
        if event.name == PuppetEventName.LOGIN:
            self.ctx.id = event.payload.contact_id
        elif event.name == PuppetEventName.LOGOUT:
            self.ctx.id = None

        payload = await self._build_payload(event)
        await self._trigger_handlers(event.name, payload)

        if event.name == PuppetEventName.ROOM_LEAVE:
            await self._after_room_leave(event.payload)

    async def _trigger_handlers(self, event_name: PuppetEventName, payload: Any) -> None:
        for entry in list(self._handlers.get(event_name, [])):
            if not entry.active():
                continue
            try:
                await call_handler(entry.handler, payload, self.ctx)
            except Exception as e:
                self.logger.error(f"Handler for {event_name.value} raised: {e}")
            if entry.remaining is not None:
                entry.remaining -= 1

    async def _after_room_leave(self, payload) -> None:
        if self.ctx.id is None or self.ctx.id not in payload.removee_id_list:
            return
        self.logger.info(f"Removed from room {payload.room_id}")
        await self.puppet.dirty_payload(PayloadType.ROOM, payload.room_id)
        await self.puppet.dirty_payload(PayloadType.ROOM_MEMBER, payload.room_id)

    async def _best_effort(self, coro, what: str) -> None:
        try:
            await coro
        except WechatyBaseError as e:
            self.logger.error(f"Failed to load {what}: {e}")

    async def _build_payload(self, event: PuppetEvent) -> Any:
        name, raw = event.name, event.payload
        ctx = self.ctx

        if name == PuppetEventName.LOGIN:
            contact = ContactSelf(raw.contact_id, ctx)
            await self._best_effort(contact.sync(), f"contact {raw.contact_id}")
            return LoginPayload(contact)

        if name == PuppetEventName.LOGOUT:
            contact = ContactSelf(raw.contact_id, ctx)
            await self._best_effort(contact.ready(), f"contact {raw.contact_id}")
            return LogoutPayload(contact, raw.data)

        if name == PuppetEventName.MESSAGE:
            message = Message(raw.message_id, ctx)
            await self._best_effort(message.ready(), f"message {raw.message_id}")
            return MessagePayload(message)

        if name == PuppetEventName.FRIENDSHIP:
            friendship = Friendship(raw.friendship_id, ctx)
            await self._best_effort(friendship.ready(), f"friendship {raw.friendship_id}")
            return FriendshipPayload(friendship)

        if name == PuppetEventName.ROOM_INVITE:
            invitation = RoomInvitation(raw.room_invitation_id, ctx)
            await self._best_effort(invitation.ready(), f"room invitation {raw.room_invitation_id}")
            return RoomInvitePayload(invitation)

        if name == PuppetEventName.ROOM_JOIN:
            room = Room(raw.room_id, ctx)
            inviter = Contact(raw.inviter_id, ctx)
            await self._best_effort(room.sync(), f"room {raw.room_id}")
            await self._best_effort(inviter.sync(), f"contact {raw.inviter_id}")
            invitee_list = await ctx.contact_load_batch(raw.invitee_id_list)
            return RoomJoinPayload(room, invitee_list, inviter, raw.timestamp)

        if name == PuppetEventName.ROOM_LEAVE:
            room = Room(raw.room_id, ctx)
            remover = Contact(raw.remover_id, ctx)
            await self._best_effort(room.sync(), f"room {raw.room_id}")
            await self._best_effort(remover.sync(), f"contact {raw.remover_id}")
            removee_list = await ctx.contact_load_batch(raw.removee_id_list)
            return RoomLeavePayload(room, removee_list, remover, raw.timestamp)

        if name == PuppetEventName.ROOM_TOPIC:
            room = Room(raw.room_id, ctx)
            changer = Contact(raw.changer_id, ctx)
            await self._best_effort(room.sync(), f"room {raw.room_id}")
            await self._best_effort(changer.sync(), f"contact {raw.changer_id}")
            return RoomTopicPayload(room, raw.old_topic, raw.new_topic, changer, raw.timestamp)

        # dong, error, heartbeat, ready, reset and scan carry no entities
        return raw
