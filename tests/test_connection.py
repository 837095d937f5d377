"""
Tests for the WebSocket connection to a puppet service.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pywechaty.constants import ConnectionState
from pywechaty.events import ConnectionEventType
from pywechaty.exceptions import PuppetNetworkError, PuppetTimeoutError
from pywechaty.puppet.service.connection import ServiceConnection
from pywechaty.utils import ReconnectionManager


class TestServiceConnection:
    """Tests for the ServiceConnection class."""

    @pytest.fixture
    def connection(self):
        """Create a ServiceConnection instance for testing."""
        return ServiceConnection("ws://127.0.0.1:8788", token="secret", timeout=1)

    @pytest.fixture
    def mock_websocket(self):
        """Create a mock WebSocket for testing."""
        mock_ws = MagicMock()
        mock_ws.send = AsyncMock()
        mock_ws.close = AsyncMock()
        return mock_ws

    @pytest.fixture
    def connected(self, connection, mock_websocket):
        """Connection marked as connected, without background tasks."""
        connection.ws = mock_websocket
        connection._state = ConnectionState.CONNECTED
        return connection

    def test_url_carries_token(self, connection):
        """Test the token is sent as a query parameter."""
        assert connection.url == "ws://127.0.0.1:8788?token=secret"
        assert ServiceConnection("ws://host:1").url == "ws://host:1"

    @pytest.mark.asyncio
    @patch('pywechaty.puppet.service.connection.websockets.connect', new_callable=AsyncMock)
    async def test_connect(self, mock_connect, connection, mock_websocket):
        """Test connecting opens the socket and starts the background tasks."""
        # Setup
        mock_connect.return_value = mock_websocket
        connection._start_listener = MagicMock()
        connection._start_keepalive = MagicMock()
        states = []
        connection.event_emitter.on(ConnectionEventType.CONNECTION_STATE, states.append)

        # Test
        await connection.connect()

        # Verify
        assert connection.is_connected
        assert mock_connect.call_args[0][0] == "ws://127.0.0.1:8788?token=secret"
        assert [state["new"] for state in states] == [ConnectionState.CONNECTING, ConnectionState.CONNECTED]
        assert connection._start_listener.called
        assert connection._start_keepalive.called

    @pytest.mark.asyncio
    @patch('pywechaty.puppet.service.connection.websockets.connect', new_callable=AsyncMock)
    async def test_connect_failure(self, mock_connect, connection):
        """Test a failed connection raises a network error."""
        # Setup
        mock_connect.side_effect = OSError("connection refused")

        # Test & verify
        with pytest.raises(PuppetNetworkError, match="Failed to establish RPC connection"):
            await connection.connect()
        assert connection.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_request_not_connected(self, connection):
        """Test requests need an open connection."""
        with pytest.raises(PuppetNetworkError):
            await connection.request("contact_list")

    @pytest.mark.asyncio
    async def test_request_result(self, connected, mock_websocket):
        """Test a request resolves with the result of its response."""
        # Setup
        def answer(message):
            request = json.loads(message)
            assert request["method"] == "contact_list"
            connected._process_message(json.dumps({"id": request["id"], "result": {"ids": ["alice"]}}))

        mock_websocket.send.side_effect = answer

        # Test
        result = await connected.request("contact_list")

        # Verify
        assert result == {"ids": ["alice"]}
        assert connected._pending == {}

    @pytest.mark.asyncio
    async def test_request_error(self, connected, mock_websocket):
        """Test an error response raises a network error."""
        # Setup
        def answer(message):
            request = json.loads(message)
            connected._process_message(json.dumps({
                "id": request["id"],
                "error": {"code": 5, "message": "not found"},
            }))

        mock_websocket.send.side_effect = answer

        # Test & verify
        with pytest.raises(PuppetNetworkError, match="RPC error 5: not found"):
            await connected.request("contact_payload", {"id": "ghost"})

    @pytest.mark.asyncio
    async def test_request_timeout(self, connected):
        """Test an unanswered request times out."""
        with pytest.raises(PuppetTimeoutError):
            await connected.request("contact_list", timeout=0.01)

    def test_event_notification(self, connection):
        """Test event notifications go to the event handler."""
        # Setup
        connection.on_event = MagicMock()

        # Test
        connection._process_message(json.dumps({"method": "event", "params": {"type": 2, "payload": "{}"}}))
        connection._process_message("garbage")

        # Verify
        connection.on_event.assert_called_once_with({"type": 2, "payload": "{}"})

    @pytest.mark.asyncio
    async def test_connection_closed_fails_pending(self, connected):
        """Test a lost connection fails pending requests and reconnects."""
        # Setup
        future = asyncio.get_running_loop().create_future()
        connected._pending["1"] = future
        disconnected = MagicMock()
        connected.event_emitter.on(ConnectionEventType.DISCONNECTED, disconnected)
        connected.reconnect = AsyncMock(return_value=True)

        # Test
        connected._handle_connection_closed()
        await asyncio.sleep(0)

        # Verify
        with pytest.raises(PuppetNetworkError):
            future.result()
        assert disconnected.called
        assert connected.reconnect.called

    @pytest.mark.asyncio
    async def test_reconnect(self, connection):
        """Test reconnecting retries until connect succeeds."""
        # Setup
        connection.reconnect_manager = ReconnectionManager(1, 1, 3, random_factor=0.0)
        connection.connect = AsyncMock(side_effect=[PuppetNetworkError("refused"), None])
        reconnected = MagicMock()
        connection.event_emitter.on(ConnectionEventType.RECONNECTED, reconnected)

        # Test
        result = await connection.reconnect()

        # Verify
        assert result is True
        assert connection.connect.await_count == 2
        assert reconnected.called

    @pytest.mark.asyncio
    async def test_reconnect_gives_up(self, connection):
        """Test reconnecting stops after the last attempt."""
        # Setup
        connection.reconnect_manager = ReconnectionManager(1, 1, 2, random_factor=0.0)
        connection.connect = AsyncMock(side_effect=PuppetNetworkError("refused"))

        # Test
        result = await connection.reconnect()

        # Verify
        assert result is False
        assert connection.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_disconnect(self, connected, mock_websocket):
        """Test disconnecting closes the socket."""
        # Test
        await connected.disconnect()

        # Verify
        assert mock_websocket.close.called
        assert connected.ws is None
        assert connected.state == ConnectionState.DISCONNECTED
