"""
WebSocket connection to a puppet service.

Requests are JSON objects ``{"jsonrpc": "2.0", "id", "method", "params"}``
answered by ``{"id", "result"}`` or ``{"id", "error": {"code", "message"}}``.
Events arrive as notifications ``{"method": "event", "params": {"type",
"payload"}}``. The connection keeps itself alive with pings and reconnects
with exponential backoff after an unexpected close.
"""

import asyncio
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import websockets

from ...constants import (
    CONNECT_TIMEOUT_MS,
    DEFAULT_TIMEOUT,
    KEEPALIVE_INTERVAL_MS,
    MAX_RECONNECT_ATTEMPTS,
    MAX_RECONNECT_DELAY_MS,
    RECONNECT_DECAY_FACTOR,
    RECONNECT_DELAY_MS,
    RECONNECT_RANDOM_FACTOR,
    ConnectionState,
)
from ...events import ConnectionEventType, EventEmitter
from ...exceptions import PuppetNetworkError, PuppetTimeoutError
from ...utils import ReconnectionManager, generate_request_id, get_logger, json_stringify, parse_json

EVENT_METHOD = "event"


class ServiceConnection:
    """
    JSON request/response channel with a puppet service.

    ``on_event`` is called with the ``params`` of every event notification.
    """

    def __init__(self, endpoint: str, token: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 event_emitter: Optional[EventEmitter] = None):
        """
        Args:
            endpoint: ws:// or wss:// address of the puppet service
            token: Puppet service token, sent as a query parameter
            timeout: Default seconds to wait for a response
            event_emitter: Emitter notified of connection state changes
        """
        self.logger = get_logger("ServiceConnection")
        self.endpoint = endpoint
        self.token = token
        self.timeout = timeout
        self.event_emitter = event_emitter or EventEmitter()
        self.on_event: Optional[Callable[[Dict[str, Any]], None]] = None
        self.ws = None
        self.reconnect_manager = ReconnectionManager(
            initial_delay_ms=RECONNECT_DELAY_MS,
            max_delay_ms=MAX_RECONNECT_DELAY_MS,
            max_attempts=MAX_RECONNECT_ATTEMPTS,
            decay_factor=RECONNECT_DECAY_FACTOR,
            random_factor=RECONNECT_RANDOM_FACTOR
        )

        self._state = ConnectionState.DISCONNECTED
        self._closing = False
        self._pending: Dict[str, asyncio.Future] = {}
        self._listener_task: Optional[asyncio.Task] = None
        self._keepalive_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self.last_seen = time.time()

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def url(self) -> str:
        if not self.token:
            return self.endpoint
        separator = "&" if "?" in self.endpoint else "?"
        return f"{self.endpoint}{separator}{urlencode({'token': self.token})}"

    def _update_state(self, new_state: str) -> None:
        if new_state != self._state:
            old_state = self._state
            self._state = new_state
            self.logger.info(f"Connection state changed: {old_state} -> {new_state}")
            self.event_emitter.emit(ConnectionEventType.CONNECTION_STATE, {
                "old": old_state,
                "new": new_state
            })

    async def connect(self) -> None:
        """
        Open the WebSocket and start the listener and keepalive tasks.

        Raises:
            PuppetNetworkError: If the connection cannot be established
        """
        if self.is_connected:
            self.logger.warning(f"Already connected to {self.endpoint}")
            return

        self._update_state(ConnectionState.CONNECTING)
        self.logger.info(f"Connecting to puppet service at {self.endpoint}")
        try:
            self.ws = await websockets.connect(
                self.url,
                ping_interval=None,  # keepalive is handled by _keepalive_loop
                ping_timeout=None,
                max_size=None,
                close_timeout=5,
                open_timeout=CONNECT_TIMEOUT_MS / 1000,
            )
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            self._update_state(ConnectionState.DISCONNECTED)
            raise PuppetNetworkError(f"Failed to establish RPC connection, reason: {e}") from e

        self.last_seen = time.time()
        self._update_state(ConnectionState.CONNECTED)
        self.reconnect_manager.reset()
        self._start_listener()
        self._start_keepalive()

    async def disconnect(self) -> None:
        """Close the connection without reconnecting."""
        self._closing = True
        self._update_state(ConnectionState.DISCONNECTING)

        for task in (self._reconnect_task, self._keepalive_task, self._listener_task):
            if task and not task.done() and task is not asyncio.current_task():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reconnect_task = self._keepalive_task = self._listener_task = None

        if self.ws:
            try:
                await self.ws.close()
            except websockets.exceptions.WebSocketException as e:
                self.logger.error(f"Error while closing WebSocket: {e}")
            finally:
                self.ws = None

        self._fail_pending(PuppetNetworkError("Connection closed"))
        self._update_state(ConnectionState.DISCONNECTED)
        self._closing = False
        self.logger.info("Disconnected from puppet service")

    async def request(self, method: str, params: Optional[Dict[str, Any]] = None,
                      timeout: Optional[float] = None) -> Any:
        """
        Send a request and wait for its result.

        Returns:
            Any: The ``result`` of the response

        Raises:
            PuppetNetworkError: If not connected, the connection drops or the service answers with an error
            PuppetTimeoutError: If no response arrives in time
        """
        if not self.is_connected or not self.ws:
            raise PuppetNetworkError("No active connection to the puppet service")

        request_id = generate_request_id()
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        message = json_stringify({
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params or {},
        })
        timeout = timeout or self.timeout

        try:
            self.logger.debug(f"Sending request: {message[:200]}")
            await self.ws.send(message)
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            raise PuppetTimeoutError(f"{method} timed out after {timeout}s")
        except websockets.exceptions.ConnectionClosed as e:
            raise PuppetNetworkError(f"Connection closed while sending {method}: {e}")
        finally:
            self._pending.pop(request_id, None)

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()

    def _start_listener(self) -> None:
        if self._listener_task:
            self._listener_task.cancel()
        self._listener_task = asyncio.create_task(self._listen_for_messages())

    async def _listen_for_messages(self) -> None:
        self.logger.info("Started WebSocket listener")
        try:
            async for message in self.ws:
                self.last_seen = time.time()
                self._process_message(message)
        except asyncio.CancelledError:
            self.logger.info("WebSocket listener stopped")
            raise
        except websockets.exceptions.ConnectionClosed as e:
            self.logger.error(f"WebSocket connection closed: {e}")
        if not self._closing:
            self._handle_connection_closed()

    def _process_message(self, message: Any) -> None:
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        data = parse_json(message)
        if not data:
            self.logger.warning(f"Ignoring malformed message: {message[:100]}")
            return

        if data.get("method") == EVENT_METHOD:
            if self.on_event is None:
                self.logger.debug("Event received before a handler was set")
                return
            try:
                self.on_event(data.get("params") or {})
            except Exception as e:
                self.logger.error(f"Error while handling event: {e}")
            return

        request_id = data.get("id")
        future = self._pending.get(str(request_id)) if request_id is not None else None
        if future is None or future.done():
            self.logger.warning(f"Response for unknown request {request_id}")
            return

        error = data.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            text = error.get("message") if isinstance(error, dict) else str(error)
            future.set_exception(PuppetNetworkError(f"RPC error {code}: {text}"))
        else:
            future.set_result(data.get("result"))

    def _handle_connection_closed(self) -> None:
        self._update_state(ConnectionState.DISCONNECTED)
        self._fail_pending(PuppetNetworkError("Connection lost"))
        if self._keepalive_task:
            self._keepalive_task.cancel()
            self._keepalive_task = None
        self.event_emitter.emit(ConnectionEventType.DISCONNECTED, {"reason": "connection_closed"})
        self._reconnect_task = asyncio.create_task(self.reconnect())

    async def reconnect(self) -> bool:
        """
        Reconnect with exponential backoff until it succeeds or the attempts run out.

        Returns:
            bool: True if the connection was restored
        """
        self._update_state(ConnectionState.RECONNECTING)
        while not self._closing:
            delay_sec = self.reconnect_manager.get_next_delay_seconds()
            if delay_sec < 0:
                self.logger.error(f"Giving up after {MAX_RECONNECT_ATTEMPTS} reconnection attempts")
                self._update_state(ConnectionState.DISCONNECTED)
                return False

            self.logger.info(f"Reconnecting in {delay_sec:.2f}s (attempt {self.reconnect_manager.attempt_count})")
            await asyncio.sleep(delay_sec)
            try:
                await self.connect()
            except PuppetNetworkError as e:
                self.logger.error(f"Reconnection failed: {e}")
                self._update_state(ConnectionState.RECONNECTING)
                continue

            self.event_emitter.emit(ConnectionEventType.RECONNECTED, {"endpoint": self.endpoint})
            return True
        return False

    def _start_keepalive(self) -> None:
        if self._keepalive_task:
            self._keepalive_task.cancel()
        self._keepalive_task = asyncio.create_task(self._keepalive_loop())
        self.logger.debug(f"Started keepalive (interval: {KEEPALIVE_INTERVAL_MS / 1000}s)")

    async def _keepalive_loop(self) -> None:
        interval = KEEPALIVE_INTERVAL_MS / 1000
        while self.is_connected and self.ws:
            await asyncio.sleep(interval)
            if not self.is_connected or not self.ws:
                break
            try:
                pong_waiter = await self.ws.ping()
                await asyncio.wait_for(pong_waiter, timeout=interval)
                self.last_seen = time.time()
            except asyncio.TimeoutError:
                self.logger.warning("Keepalive ping timed out, closing connection")
                await self.ws.close()
                break
            except websockets.exceptions.ConnectionClosed:
                break
