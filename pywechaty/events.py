"""
Event system for the pywechaty library.

This module provides the names of the events a puppet emits and the event
emitter used to deliver them between library components.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .utils import get_logger


class PuppetEventName(Enum):
    """Events emitted by a puppet."""

    DONG = "dong"
    ERROR = "error"
    FRIENDSHIP = "friendship"
    HEARTBEAT = "heartbeat"
    LOGIN = "login"
    LOGOUT = "logout"
    MESSAGE = "message"
    READY = "ready"
    RESET = "reset"
    ROOM_INVITE = "room-invite"
    ROOM_JOIN = "room-join"
    ROOM_LEAVE = "room-leave"
    ROOM_TOPIC = "room-topic"
    SCAN = "scan"
    DIRTY = "dirty"

    @classmethod
    def parse(cls, name: Any) -> Optional['PuppetEventName']:
        """Look up an event by name, returning None for unknown names."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


class ConnectionEventType(Enum):
    """Events emitted by the puppet service connection."""

    CONNECTION_STATE = "conn_state"     # connection state changed
    DISCONNECTED = "disconnected"       # connection lost
    RECONNECTED = "reconnected"         # connection restored after a loss


@dataclass(frozen=True)
class PuppetEvent:
    """An event name paired with its payload."""

    name: PuppetEventName
    payload: Any


class EventEmitter:
    """
    Event manager.

    Registers callbacks for event types and delivers emitted events to them.
    Coroutine callbacks are scheduled as tasks, plain callbacks run inline.
    """

    def __init__(self):
        self.logger = get_logger("EventEmitter")
        self._listeners: Dict[str, List[Callable]] = {}
        self._once_listeners: Dict[str, List[Callable]] = {}

    def on(self, event_type: Enum, callback: Callable) -> None:
        """
        Register a callback for an event type.

        Args:
            event_type: Event type to listen to
            callback: Function called with the event data
        """
        event_name = event_type.value
        self._listeners.setdefault(event_name, []).append(callback)
        self.logger.debug(f"Registered callback for event {event_name}")

    def once(self, event_type: Enum, callback: Callable) -> None:
        """
        Register a callback that is called only for the next event of a type.

        Args:
            event_type: Event type to listen to
            callback: Function called with the event data
        """
        event_name = event_type.value
        self._once_listeners.setdefault(event_name, []).append(callback)
        self.logger.debug(f"Registered 'once' callback for event {event_name}")

    def off(self, event_type: Enum, callback: Optional[Callable] = None) -> None:
        """
        Remove a callback for an event type.

        Args:
            event_type: Event type
            callback: Callback to remove. If None, every callback of the event is removed.
        """
        event_name = event_type.value

        for registry in (self._listeners, self._once_listeners):
            if event_name not in registry:
                continue
            if callback is None:
                registry[event_name] = []
            else:
                registry[event_name] = [cb for cb in registry[event_name] if cb != callback]
        self.logger.debug(f"Removed callbacks for event {event_name}")

    def emit(self, event_type: Enum, data: Any = None) -> None:
        """
        Emit an event to every registered callback.

        Args:
            event_type: Event type
            data: Data passed to the callbacks
        """
        event_name = event_type.value
        self.logger.debug(f"Emitting event {event_name}")

        callbacks = list(self._listeners.get(event_name, []))
        once_callbacks = self._once_listeners.get(event_name, [])
        if once_callbacks:
            callbacks.extend(once_callbacks)
            self._once_listeners[event_name] = []

        for callback in callbacks:
            try:
                if asyncio.iscoroutinefunction(callback):
                    asyncio.create_task(callback(data))
                else:
                    callback(data)
            except Exception as e:
                self.logger.error(f"Error in callback for event {event_name}: {e}")

    def listeners(self, event_type: Enum) -> List[Callable]:
        """
        Get the callbacks registered for an event type.

        Returns:
            List[Callable]: Registered callbacks
        """
        event_name = event_type.value
        return self._listeners.get(event_name, []) + self._once_listeners.get(event_name, [])

    def remove_all_listeners(self, event_type: Optional[Enum] = None) -> None:
        """
        Remove registered callbacks.

        Args:
            event_type: Event type to clear; all events when None
        """
        if event_type is None:
            self._listeners = {}
            self._once_listeners = {}
            self.logger.debug("Removed all callbacks for all events")
        else:
            event_name = event_type.value
            self._listeners[event_name] = []
            self._once_listeners[event_name] = []
            self.logger.debug(f"Removed all callbacks for event {event_name}")
